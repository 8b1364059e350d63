"""Envelope encoding and decoding for idseal ciphertexts."""

from dataclasses import dataclass
from typing import Optional

from .types import (
    ENVELOPE_MAGIC,
    ENVELOPE_HEADER_SIZE,
    MAX_FINGERPRINT_SIZE,
    MAX_DERIVED_PUBLIC_KEY_SIZE,
    FieldTooLargeError,
    InvalidEnvelopeError,
)


@dataclass(frozen=True)
class DecodedEnvelope:
    """Result of decoding an envelope.

    Legacy payloads (raw ciphertext written before the envelope format
    existed) decode with ``packaged=False`` and only ``ciphertext`` set.
    """
    packaged: bool
    ciphertext: bytes
    recipient_fingerprint: Optional[bytes] = None
    derived_public_key: Optional[bytes] = None


def encode_envelope(
    recipient_fingerprint: bytes,
    derived_public_key: bytes,
    ciphertext: bytes,
) -> bytes:
    """
    Encode an envelope to bytes.

    Format (7-byte header + variable fields):
        [0-3]    magic (b"IBE\\x01")
        [4]      fingerprint length (u8)
        [5-6]    derived public key length (u16, big-endian)
        [7..]    recipient fingerprint
        [..]     derived public key
        [..]     ciphertext (remaining bytes)

    Args:
        recipient_fingerprint: Recipient identity bytes (at most 255)
        derived_public_key: Serialized derived public key (at most 65535)
        ciphertext: Serialized ciphertext

    Returns:
        Encoded bytes

    Raises:
        FieldTooLargeError: If a field does not fit its length prefix
    """
    if len(recipient_fingerprint) > MAX_FINGERPRINT_SIZE:
        raise FieldTooLargeError(
            "Recipient fingerprint", len(recipient_fingerprint), MAX_FINGERPRINT_SIZE
        )

    if len(derived_public_key) > MAX_DERIVED_PUBLIC_KEY_SIZE:
        raise FieldTooLargeError(
            "Derived public key", len(derived_public_key), MAX_DERIVED_PUBLIC_KEY_SIZE
        )

    return (
        ENVELOPE_MAGIC
        + bytes([len(recipient_fingerprint)])
        + len(derived_public_key).to_bytes(2, byteorder="big")
        + bytes(recipient_fingerprint)
        + bytes(derived_public_key)
        + bytes(ciphertext)
    )


def decode_envelope(data: bytes) -> DecodedEnvelope:
    """
    Decode bytes into an envelope.

    Args:
        data: Encoded envelope bytes

    Returns:
        DecodedEnvelope; ``packaged`` is False when the magic is absent

    Raises:
        InvalidEnvelopeError: If the magic is present but the header or the
            declared field lengths do not fit the data
    """
    data = bytes(data)

    if not is_packaged(data):
        return DecodedEnvelope(packaged=False, ciphertext=data)

    if len(data) < ENVELOPE_HEADER_SIZE:
        raise InvalidEnvelopeError(
            f"Data too short: {len(data)} bytes (minimum {ENVELOPE_HEADER_SIZE})"
        )

    offset = len(ENVELOPE_MAGIC)
    fingerprint_size = data[offset]
    offset += 1

    key_size = int.from_bytes(data[offset : offset + 2], byteorder="big")
    offset += 2

    required = ENVELOPE_HEADER_SIZE + fingerprint_size + key_size
    if len(data) < required:
        raise InvalidEnvelopeError(
            f"Declared lengths need {required} bytes, got {len(data)}"
        )

    recipient_fingerprint = data[offset : offset + fingerprint_size]
    offset += fingerprint_size

    derived_public_key = data[offset : offset + key_size]
    offset += key_size

    return DecodedEnvelope(
        packaged=True,
        ciphertext=data[offset:],
        recipient_fingerprint=recipient_fingerprint,
        derived_public_key=derived_public_key,
    )


def is_packaged(data: bytes) -> bool:
    """Check whether data starts with the envelope magic."""
    return bytes(data[: len(ENVELOPE_MAGIC)]) == ENVELOPE_MAGIC
