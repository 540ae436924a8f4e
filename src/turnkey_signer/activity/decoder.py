"""Extraction of operation-specific payloads from completed activities."""

import logging
from typing import Union

from pydantic import BaseModel, ValidationError

from turnkey_signer.activity.models import (
    Activity,
    ResultKind,
    SignRawPayloadResult,
    SignTransactionResult,
)
from turnkey_signer.errors import ActivityFailedError, ApiError, DecodeError

logger = logging.getLogger(__name__)

_RESULT_MODELS: dict[ResultKind, type[BaseModel]] = {
    ResultKind.SIGN_TRANSACTION: SignTransactionResult,
    ResultKind.SIGN_RAW_PAYLOAD: SignRawPayloadResult,
}

DecodedResult = Union[SignTransactionResult, SignRawPayloadResult]


def decode_result(activity: Activity, kind: ResultKind) -> DecodedResult:
    """Decode the payload for ``kind`` from a completed activity.

    Only the key belonging to ``kind`` is consulted.

    Raises:
        ActivityFailedError: If the activity carries no result at all
        ApiError: With code MISSING_RESULT if the expected key is absent
        DecodeError: If the payload does not have the expected shape
    """
    if activity.result is None:
        raise ActivityFailedError("No result in completed activity")

    payloads = activity.result.payloads
    if kind.value not in payloads:
        raise ApiError(ApiError.MISSING_RESULT, f"Missing {kind.value} in response")

    model = _RESULT_MODELS[kind]
    try:
        return model.model_validate(payloads[kind.value])
    except ValidationError as e:
        logger.debug(f"Invalid {kind.value} payload in activity {activity.id}: {e}")
        raise DecodeError(f"Invalid {kind.value} in activity {activity.id}: {e}") from e
