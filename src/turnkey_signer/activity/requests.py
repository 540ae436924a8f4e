"""Builders for signing activity requests.

Pure functions: they stamp the current time and the caller's organization
onto a typed request and never touch the network.
"""

import time
from typing import Optional, Union

from turnkey_signer.activity.models import (
    ACTIVITY_TYPE_SIGN_RAW_PAYLOAD,
    ACTIVITY_TYPE_SIGN_TRANSACTION,
    ByPrivateKey,
    ByWallet,
    HashFunction,
    PayloadEncoding,
    SignerReference,
    SignRawPayloadParameters,
    SignRawPayloadRequest,
    SignTransactionParameters,
    SignTransactionRequest,
)
from turnkey_signer.errors import ConfigurationError, MissingParameterError


def current_timestamp_ms() -> str:
    """Current Unix time in milliseconds, as the decimal string the API expects."""
    return str(time.time_ns() // 1_000_000)


def resolve_signer(
    private_key_id: Optional[str] = None,
    wallet_id: Optional[str] = None,
) -> SignerReference:
    """Turn the optional identifier pair into a signer reference.

    Raises:
        MissingParameterError: If neither or both identifiers are given
    """
    if not private_key_id and not wallet_id:
        raise MissingParameterError("Either private_key_id or wallet_id must be provided")
    if private_key_id and wallet_id:
        raise MissingParameterError("Only one of private_key_id or wallet_id may be provided")
    if private_key_id:
        return ByPrivateKey(private_key_id)
    return ByWallet(wallet_id)


def build_sign_transaction_request(
    organization_id: str,
    unsigned_transaction: str,
    *,
    private_key_id: Optional[str] = None,
    wallet_id: Optional[str] = None,
    signer: Optional[SignerReference] = None,
    timestamp_ms: Optional[str] = None,
) -> SignTransactionRequest:
    """Build a transaction signing request.

    The signing key is given either as ``signer`` or as exactly one of
    ``private_key_id`` / ``wallet_id``.

    Args:
        organization_id: Organization the activity belongs to
        unsigned_transaction: Unsigned transaction as hex
        private_key_id: Private key to sign with
        wallet_id: Wallet to sign with
        signer: Pre-resolved signer reference
        timestamp_ms: Override for the request timestamp

    Returns:
        SignTransactionRequest ready for submission

    Raises:
        MissingParameterError: If no signing key (or two of them) is given
    """
    if signer is None:
        signer = resolve_signer(private_key_id, wallet_id)
    elif private_key_id or wallet_id:
        raise MissingParameterError("Pass either signer or private_key_id/wallet_id, not both")

    if isinstance(signer, ByPrivateKey):
        parameters = SignTransactionParameters(
            private_key_id=signer.private_key_id,
            unsigned_transaction=unsigned_transaction,
        )
    else:
        parameters = SignTransactionParameters(
            wallet_id=signer.wallet_id,
            unsigned_transaction=unsigned_transaction,
        )

    return SignTransactionRequest(
        activity_type=ACTIVITY_TYPE_SIGN_TRANSACTION,
        organization_id=organization_id,
        timestamp_ms=timestamp_ms or current_timestamp_ms(),
        parameters=parameters,
    )


def build_sign_raw_payload_request(
    organization_id: str,
    sign_with: str,
    payload: str,
    *,
    encoding: Union[PayloadEncoding, str] = PayloadEncoding.HEXADECIMAL,
    hash_function: Union[HashFunction, str] = HashFunction.NO_OP,
    timestamp_ms: Optional[str] = None,
) -> SignRawPayloadRequest:
    """Build a raw payload (message or hash) signing request."""
    if not sign_with:
        raise MissingParameterError("sign_with must be provided")

    try:
        encoding = PayloadEncoding(encoding)
        hash_function = HashFunction(hash_function)
    except ValueError as e:
        raise ConfigurationError(str(e)) from e

    return SignRawPayloadRequest(
        activity_type=ACTIVITY_TYPE_SIGN_RAW_PAYLOAD,
        organization_id=organization_id,
        timestamp_ms=timestamp_ms or current_timestamp_ms(),
        parameters=SignRawPayloadParameters(
            sign_with=sign_with,
            payload=payload,
            encoding=encoding,
            hash_function=hash_function,
        ),
    )
