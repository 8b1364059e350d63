"""Result models for idseal operations."""

from dataclasses import dataclass
from enum import Enum

from .codec import bytes_to_hex
from .hashing import address_to_text, to_checksum_address


class VerificationResult(Enum):
    """Outcome of verifying a message signature against an address."""
    VALID = "valid"
    INVALID = "invalid"
    UNRECOVERABLE = "unrecoverable"

    @property
    def is_valid(self) -> bool:
        return self is VerificationResult.VALID


@dataclass(frozen=True)
class SignedMessage:
    """A message with its recoverable signature and the signer's identity."""
    message: str
    signature: bytes  # 65 bytes: r || s || (27 + recovery id)
    public_key: bytes
    address: bytes  # 20 bytes
    recovery_id: int

    @property
    def signature_hex(self) -> str:
        """Signature as ``0x``-prefixed lowercase hex."""
        return "0x" + bytes_to_hex(self.signature)

    @property
    def address_text(self) -> str:
        """Signer address as lowercase ``0x`` hex."""
        return address_to_text(self.address)

    @property
    def checksum_address(self) -> str:
        """Signer address in checksummed display form."""
        return to_checksum_address(self.address)
