"""Remote signer backed by the signing activity API.

Keys never leave the service. Digests are submitted as raw payloads with
hexadecimal encoding and a no-op hash function, so the service signs exactly
the 32 bytes it is given.
"""

import copy
import logging
from typing import Optional

from turnkey_signer.activity.client import ActivityClient
from turnkey_signer.activity.models import HashFunction, PayloadEncoding
from turnkey_signer.signing.base import CanonicalSignature, Signer
from turnkey_signer.signing.normalizer import normalize_signature

logger = logging.getLogger(__name__)


class TurnkeySigner(Signer):
    """Signs hashes, messages and transactions through an ActivityClient.

    The chain ID, when set, lets EIP-155 style v values returned by the
    service be decoded.
    """

    def __init__(
        self,
        client: ActivityClient,
        address: str,
        chain_id: Optional[int] = None,
        *,
        validate_range: bool = True,
    ):
        """Initialize signer.

        Args:
            client: Activity client for the organization holding the key
            address: Address (or key identifier) the service signs with
            chain_id: Optional chain ID
            validate_range: Reject r/s outside the secp256k1 group order
        """
        super().__init__(address, chain_id)
        self.client = client
        self.validate_range = validate_range

    def with_chain_id(self, chain_id: Optional[int]) -> "TurnkeySigner":
        """Return a copy of this signer bound to ``chain_id``."""
        signer = copy.copy(self)
        signer.chain_id = chain_id
        return signer

    async def sign_hash(self, message_hash: bytes) -> CanonicalSignature:
        if len(message_hash) != 32:
            raise ValueError(f"Expected a 32-byte hash, got {len(message_hash)} bytes")

        result = await self.client.sign_raw_payload(
            self.address,
            message_hash.hex(),
            encoding=PayloadEncoding.HEXADECIMAL,
            hash_function=HashFunction.NO_OP,
        )
        signature = normalize_signature(
            result,
            self.chain_id,
            validate_range=self.validate_range,
        )
        logger.debug(f"Signed hash 0x{message_hash.hex()} with {self.address}")
        return signature

    async def sign_transaction(
        self,
        unsigned_transaction: str,
        *,
        private_key_id: Optional[str] = None,
        wallet_id: Optional[str] = None,
    ) -> str:
        """Sign an unsigned transaction (hex) and return the signed transaction hex."""
        result = await self.client.sign_transaction(
            unsigned_transaction,
            private_key_id=private_key_id,
            wallet_id=wallet_id,
        )
        return result.signed_transaction
