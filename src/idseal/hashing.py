"""Personal message hashing and address derivation."""

from Crypto.Hash import keccak
from coincurve import PublicKey

from .codec import bytes_to_hex
from .types import (
    ADDRESS_SIZE,
    COMPRESSED_PUBLIC_KEY_SIZE,
    PERSONAL_MESSAGE_PREFIX,
    UNCOMPRESSED_PUBLIC_KEY_SIZE,
    InvalidAddressFormatError,
    InvalidPublicKeyEncodingError,
)


_HEX_DIGITS = frozenset("0123456789abcdef")


def keccak256(data: bytes) -> bytes:
    """Keccak-256 digest (the pre-standard SHA-3 padding)."""
    return keccak.new(digest_bits=256, data=bytes(data)).digest()


def personal_message_hash(message: str) -> bytes:
    """
    Hash a text message the way chain wallets sign personal messages.

    The digest covers ``"\\x19Ethereum Signed Message:\\n" + len + message``
    where ``len`` is the decimal byte length of the UTF-8 message.

    Args:
        message: Message text

    Returns:
        32-byte digest
    """
    data = message.encode("utf-8")
    return keccak256(PERSONAL_MESSAGE_PREFIX + str(len(data)).encode("ascii") + data)


def uncompressed_public_key(public_key: bytes) -> bytes:
    """
    Convert a secp256k1 public key to its 65-byte uncompressed form.

    Raises:
        InvalidPublicKeyEncodingError: For any length/tag other than 33 bytes
            with 0x02/0x03 or 65 bytes with 0x04, or a point not on the curve
    """
    size = len(public_key)
    tag = public_key[0] if size else None

    if size == UNCOMPRESSED_PUBLIC_KEY_SIZE and tag == 0x04:
        pass
    elif size == COMPRESSED_PUBLIC_KEY_SIZE and tag in (0x02, 0x03):
        pass
    else:
        raise InvalidPublicKeyEncodingError(
            f"Expected a 33-byte compressed or 65-byte uncompressed key, got {size} bytes"
        )

    try:
        return PublicKey(bytes(public_key)).format(compressed=False)
    except ValueError as e:
        raise InvalidPublicKeyEncodingError(f"Invalid secp256k1 point: {e}")


def derive_address(public_key: bytes) -> bytes:
    """
    Derive the 20-byte address of a secp256k1 public key.

    Compressed and uncompressed encodings of the same point give the same
    address.

    Args:
        public_key: 33-byte compressed or 65-byte uncompressed key

    Returns:
        Last 20 bytes of Keccak-256 over the 64-byte point coordinates
    """
    point = uncompressed_public_key(public_key)
    return keccak256(point[1:])[-ADDRESS_SIZE:]


def address_to_text(address: bytes) -> str:
    """Canonical lowercase ``0x`` form of an address."""
    return "0x" + bytes_to_hex(address)


def normalize_address(address: str) -> str:
    """
    Normalize an address to lowercase ``0x`` + 40 hex digits.

    Raises:
        InvalidAddressFormatError: If the text does not have that shape
    """
    clean = address.strip().lower()
    if clean.startswith("0x"):
        clean = clean[2:]

    if len(clean) != ADDRESS_SIZE * 2 or not set(clean) <= _HEX_DIGITS:
        raise InvalidAddressFormatError(address)

    return "0x" + clean


def to_checksum_address(address: bytes) -> str:
    """Mixed-case checksummed display form of an address (EIP-55)."""
    lower = bytes_to_hex(address)
    digest = keccak256(lower.encode("ascii")).hex()
    return "0x" + "".join(
        c.upper() if int(h, 16) >= 8 else c for c, h in zip(lower, digest)
    )
