"""Normalization of service-returned signature fields.

The service reports v under one of several historical conventions:
- 27 / 28: legacy Ethereum
- 0 / 1: bare recovery id
- chain_id * 2 + 35 (+1): EIP-155, only decodable when the chain is known

Fixed values win over chain-scaled ones, so 27/28/0/1 are never read as
EIP-155 values even for chains where they would collide.
"""

import logging
import string
from typing import Optional

from turnkey_signer.activity.models import RawSignatureFields
from turnkey_signer.errors import DecodeError, SignatureError
from turnkey_signer.signing.base import SECP256K1_N, CanonicalSignature

logger = logging.getLogger(__name__)

_FIXED_PARITY = {
    27: False,
    28: True,
    0: False,
    1: True,
}


def parse_hex_int(value: str, name: str) -> int:
    """Parse big-endian hex text (optionally 0x-prefixed) into an int.

    Only hex digits are accepted after the prefix. Whitespace anywhere in the
    value is malformed.
    """
    text = value
    if text[:2] in ("0x", "0X"):
        text = text[2:]
    if not text or not all(c in string.hexdigits for c in text):
        raise DecodeError(f"Invalid {name}: {value!r}")
    try:
        return int.from_bytes(bytes.fromhex(text), "big")
    except ValueError as e:
        raise DecodeError(f"Invalid {name}: {value!r}") from e


def parse_recovery_value(value: str) -> int:
    """Parse the decimal v string."""
    if not (value.isascii() and value.isdigit()):
        raise DecodeError(f"Invalid v: {value!r}")
    return int(value)


def recovery_parity(v: int, chain_id: Optional[int] = None) -> bool:
    """Resolve the recovery parity for a v value.

    Raises:
        SignatureError: If v matches no convention
    """
    if v in _FIXED_PARITY:
        return _FIXED_PARITY[v]

    if chain_id is None:
        raise SignatureError(f"Invalid v value: {v}")

    expected_base = chain_id * 2 + 35
    if v == expected_base:
        return False
    if v == expected_base + 1:
        return True
    raise SignatureError(f"Invalid v value for chain {chain_id}: {v}")


def normalize_signature(
    fields: RawSignatureFields,
    chain_id: Optional[int] = None,
    *,
    validate_range: bool = True,
) -> CanonicalSignature:
    """Convert raw r/s/v strings into a CanonicalSignature.

    Args:
        fields: r, s (hex) and v (decimal) as returned by the service
        chain_id: Chain the signature is for, enables EIP-155 v values
        validate_range: Reject r or s outside [1, n) of secp256k1

    Raises:
        DecodeError: If r, s or v are malformed
        SignatureError: If v is unrecognized or r/s are out of range
    """
    r = parse_hex_int(fields.r, "r")
    s = parse_hex_int(fields.s, "s")
    v = parse_recovery_value(fields.v)

    parity = recovery_parity(v, chain_id)

    if validate_range:
        for name, value in (("r", r), ("s", s)):
            if not 0 < value < SECP256K1_N:
                raise SignatureError(f"Signature {name} out of range for secp256k1")

    return CanonicalSignature(r=r, s=s, recovery_parity=parity)
