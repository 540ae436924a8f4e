"""Signing activity protocol.

- ActivityClient: submits stamped requests and waits for their results
- ActivityPoller: bounded-time completion polling
- decode_result: payload extraction per operation kind
- ApiKeyStamper: P-256 request stamping
"""

from turnkey_signer.activity.client import ActivityClient
from turnkey_signer.activity.decoder import decode_result
from turnkey_signer.activity.models import (
    Activity,
    ActivityResult,
    ActivityStatus,
    ByPrivateKey,
    ByWallet,
    HashFunction,
    PayloadEncoding,
    RawSignatureFields,
    ResultKind,
    SignerReference,
    SigningRequest,
    SignRawPayloadRequest,
    SignRawPayloadResult,
    SignTransactionRequest,
    SignTransactionResult,
)
from turnkey_signer.activity.poller import ActivityPoller, PollConfig
from turnkey_signer.activity.requests import (
    build_sign_raw_payload_request,
    build_sign_transaction_request,
)
from turnkey_signer.activity.stamper import ApiKeyStamper, Stamper

__all__ = [
    "Activity",
    "ActivityClient",
    "ActivityPoller",
    "ActivityResult",
    "ActivityStatus",
    "ApiKeyStamper",
    "ByPrivateKey",
    "ByWallet",
    "HashFunction",
    "PayloadEncoding",
    "PollConfig",
    "RawSignatureFields",
    "ResultKind",
    "SignerReference",
    "SigningRequest",
    "SignRawPayloadRequest",
    "SignRawPayloadResult",
    "SignTransactionRequest",
    "SignTransactionResult",
    "Stamper",
    "build_sign_raw_payload_request",
    "build_sign_transaction_request",
    "decode_result",
]
