"""Type definitions for idseal."""

from typing import Optional


# Envelope constants
ENVELOPE_MAGIC = b"IBE\x01"
ENVELOPE_HEADER_SIZE = 7  # magic + u8 fingerprint length + u16 key length
MAX_FINGERPRINT_SIZE = 0xFF
MAX_DERIVED_PUBLIC_KEY_SIZE = 0xFFFF

# BLS12-381 encodings
G1_POINT_SIZE = 48
G2_POINT_SIZE = 96
DERIVED_PUBLIC_KEY_SIZE = G1_POINT_SIZE
TRANSPORT_PUBLIC_KEY_SIZE = G2_POINT_SIZE
ENCRYPTED_KEY_SIZE = G1_POINT_SIZE + 2 * G2_POINT_SIZE
IBE_SEED_SIZE = 32

# Domain separation tags
IBE_IDENTITY_DST = b"IDSEAL-IBE-V01-BLS12381G2_XMD:SHA-256_SSWU_RO_"
IBE_SCALAR_INFO = b"idseal-ibe-v1-hash-to-scalar"
IBE_MASK_INFO = b"idseal-ibe-v1-seed-mask"
IBE_MESSAGE_KEY_INFO = b"idseal-ibe-v1-message-key"

# Signature constants
COMPACT_SIGNATURE_SIZE = 64
RECOVERABLE_SIGNATURE_SIZE = 65
RECOVERY_ID_OFFSET = 27
CHAIN_ID_OFFSET = 35
UNCOMPRESSED_PUBLIC_KEY_SIZE = 65
COMPRESSED_PUBLIC_KEY_SIZE = 33
ADDRESS_SIZE = 20
PERSONAL_MESSAGE_PREFIX = b"\x19Ethereum Signed Message:\n"


# Exception types
class IdsealError(Exception):
    """Base exception for idseal errors."""
    pass


class InvalidEncodingError(IdsealError):
    """Text is not a valid hex encoding."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Invalid hex encoding: {reason}")


class FieldTooLargeError(IdsealError):
    """An envelope field does not fit its length prefix."""

    def __init__(self, field: str, size: int, limit: int) -> None:
        self.field = field
        self.size = size
        self.limit = limit
        super().__init__(f"{field} too large: {size} bytes (max {limit})")


class InvalidEnvelopeError(IdsealError):
    """Marker present but the envelope is truncated or inconsistent."""
    pass


class LegacyFormatError(IdsealError):
    """Payload predates the envelope format and must be re-encrypted."""

    def __init__(self) -> None:
        super().__init__(
            "Ciphertext uses the legacy unpackaged format; ask the sender to re-encrypt"
        )


class KeyFormatError(IdsealError):
    """Malformed key or ciphertext encoding."""
    pass


class InvalidPublicKeyEncodingError(IdsealError):
    """Public key is neither a compressed nor an uncompressed secp256k1 point."""
    pass


class EpochMismatchError(IdsealError):
    """Ciphertext was produced against a different derived public key."""

    def __init__(self) -> None:
        super().__init__(
            "Derived public key changed since encryption; ask the sender to re-encrypt"
        )


class RecipientMismatchError(IdsealError):
    """The authenticated caller is not the envelope's recipient."""

    def __init__(
        self,
        expected: bytes,
        actual: bytes,
        expected_text: Optional[str] = None,
        actual_text: Optional[str] = None,
    ) -> None:
        self.expected = expected
        self.actual = actual
        self.expected_text = expected_text or expected.hex()
        self.actual_text = actual_text or actual.hex()
        super().__init__(
            f"Ciphertext is addressed to {self.expected_text}, "
            f"but the current identity is {self.actual_text}"
        )


class DecryptionDeniedError(IdsealError):
    """Decryption failed."""

    def __init__(self) -> None:
        super().__init__("Decryption denied")


class EncryptionError(IdsealError):
    """Encryption failed."""
    pass


class RecoveryIdNotFoundError(IdsealError):
    """No recovery id reproduces the signer's public key."""

    def __init__(self) -> None:
        super().__init__("No recovery id matches the signer public key")


class InvalidAddressFormatError(IdsealError):
    """Address is not 0x followed by 40 hex digits."""

    def __init__(self, address: str) -> None:
        self.address = address
        super().__init__(f"Invalid address format: {address!r}")


class InvalidSignatureError(IdsealError):
    """Invalid signature length or recovery byte."""
    pass


class InvalidIdentityError(IdsealError):
    """Identity text could not be parsed."""
    pass


class KeyNotFoundError(IdsealError):
    """No signing key under the requested name."""

    def __init__(self, key_name: str) -> None:
        self.key_name = key_name
        super().__init__(f"Key not found: {key_name}")


class KeyDerivationServiceError(IdsealError):
    """The key-derivation service rejected a call."""

    def __init__(self, method: str, message: str) -> None:
        self.method = method
        super().__init__(f"{method} failed: {message}")
