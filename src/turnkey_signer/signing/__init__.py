"""Remote transaction and message signing.

Provides:
- TurnkeySigner: signs through the remote activity API
- CanonicalSignature: the signature representation returned to callers
- normalize_signature: decoding of service r/s/v fields
"""

from turnkey_signer.signing.base import (
    CanonicalSignature,
    Signer,
    hash_message,
)
from turnkey_signer.signing.factory import create_signer, get_signer, reset_signer
from turnkey_signer.signing.normalizer import normalize_signature, recovery_parity
from turnkey_signer.signing.turnkey import TurnkeySigner

__all__ = [
    "CanonicalSignature",
    "Signer",
    "TurnkeySigner",
    "create_signer",
    "get_signer",
    "hash_message",
    "normalize_signature",
    "recovery_parity",
    "reset_signer",
]
