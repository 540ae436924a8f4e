"""Request stamping.

A stamp authenticates one request body: the body is signed with a locally
held API key and the result travels in a header. The stamp must be computed
over the exact bytes that are sent.
"""

import base64
import json
import logging
from typing import Optional, Protocol

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from turnkey_signer.errors import ConfigurationError

logger = logging.getLogger(__name__)

API_KEY_SIGNATURE_SCHEME = "SIGNATURE_SCHEME_TK_API_P256"


class Stamper(Protocol):
    """Anything that can produce a stamp for a request body."""

    def stamp(self, body: bytes) -> str:
        ...


class ApiKeyStamper:
    """Stamps requests with a P-256 API key.

    The stamp is the unpadded base64url encoding of::

        {"publicKey": <compressed public key hex>,
         "scheme": "SIGNATURE_SCHEME_TK_API_P256",
         "signature": <DER ECDSA/SHA-256 signature hex>}
    """

    def __init__(self, private_key_hex: str, public_key_hex: Optional[str] = None):
        """Load the API key.

        Args:
            private_key_hex: P-256 private scalar as hex
            public_key_hex: Optional compressed public key; must match the private key

        Raises:
            ConfigurationError: If the key is malformed or the public key does not match
        """
        try:
            secret = int(private_key_hex.strip().removeprefix("0x"), 16)
            self._private_key = ec.derive_private_key(secret, ec.SECP256R1())
        except ValueError as e:
            raise ConfigurationError(f"Invalid API private key: {e}") from e

        self.public_key_hex = (
            self._private_key.public_key()
            .public_bytes(Encoding.X962, PublicFormat.CompressedPoint)
            .hex()
        )

        if public_key_hex and public_key_hex.strip().lower() != self.public_key_hex:
            raise ConfigurationError("API public key does not match API private key")

    def stamp(self, body: bytes) -> str:
        signature = self._private_key.sign(body, ec.ECDSA(hashes.SHA256()))
        stamp = {
            "publicKey": self.public_key_hex,
            "scheme": API_KEY_SIGNATURE_SCHEME,
            "signature": signature.hex(),
        }
        encoded = base64.urlsafe_b64encode(json.dumps(stamp).encode()).rstrip(b"=")
        return encoded.decode("ascii")

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(public_key={self.public_key_hex})"
