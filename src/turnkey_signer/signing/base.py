"""Base interfaces for remote signing.

Signing flow:
1. Hash the message (EIP-191) or take a 32-byte digest
2. Submit the digest to the remote service with the signing address
3. Normalize the returned r/s/v into a CanonicalSignature
4. Callers attach the signature or recover the signer from it
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Union

from eth_keys import keys
from eth_utils import keccak

logger = logging.getLogger(__name__)

# Order of the secp256k1 group
SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141


@dataclass(frozen=True)
class CanonicalSignature:
    """Recoverable ECDSA signature.

    Attributes:
        r: R component as an unsigned integer
        s: S component as an unsigned integer
        recovery_parity: Which of the two candidate public keys signed (y parity)
    """
    r: int
    s: int
    recovery_parity: bool

    @property
    def recovery_id(self) -> int:
        return int(self.recovery_parity)

    @property
    def v(self) -> int:
        """Legacy (pre EIP-155) recovery value, 27 or 28."""
        return 27 + self.recovery_id

    def eip155_v(self, chain_id: int) -> int:
        """Chain-scaled recovery value: chain_id * 2 + 35 + parity."""
        return chain_id * 2 + 35 + self.recovery_id

    def to_bytes(self) -> bytes:
        """65-byte r || s || v encoding with v in {27, 28}."""
        return self.r.to_bytes(32, "big") + self.s.to_bytes(32, "big") + bytes([self.v])

    def to_hex(self) -> str:
        return "0x" + self.to_bytes().hex()

    def recover_address(self, message_hash: bytes) -> str:
        """Recover the checksum address that produced this signature."""
        signature = keys.Signature(vrs=(self.recovery_id, self.r, self.s))
        public_key = signature.recover_public_key_from_msg_hash(message_hash)
        return public_key.to_checksum_address()


def hash_message(message: Union[bytes, str]) -> bytes:
    """EIP-191 personal message hash."""
    if isinstance(message, str):
        message = message.encode("utf-8")
    prefix = b"\x19Ethereum Signed Message:\n" + str(len(message)).encode()
    return keccak(prefix + message)


class Signer(ABC):
    """Abstract base class for signers.

    Implementations should NEVER hold raw private keys.
    All signing operations return signatures only.
    """

    def __init__(self, address: str, chain_id: Optional[int] = None):
        self.address = address
        self.chain_id = chain_id

    @abstractmethod
    async def sign_hash(self, message_hash: bytes) -> CanonicalSignature:
        """Sign a 32-byte digest.

        Args:
            message_hash: Digest to sign

        Returns:
            CanonicalSignature over the digest
        """
        pass

    async def sign_message(self, message: Union[bytes, str]) -> CanonicalSignature:
        """Sign a personal message (EIP-191)."""
        return await self.sign_hash(hash_message(message))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(address={self.address}, chain_id={self.chain_id})"
