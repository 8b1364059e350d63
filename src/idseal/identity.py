"""
Identity contracts and the principal text encoding.

Recipient fingerprints are the raw bytes of a principal. The textual form is
``base32(crc32(bytes) || bytes)`` in lowercase without padding, split into
groups of five characters separated by dashes.
"""

import base64
import binascii
import hashlib
import zlib
from abc import ABC, abstractmethod

from .types import InvalidIdentityError


MAX_PRINCIPAL_SIZE = 29
SELF_AUTHENTICATING_SUFFIX = 0x02
ANONYMOUS_SUFFIX = 0x04

ANONYMOUS_PRINCIPAL = bytes([ANONYMOUS_SUFFIX])


def principal_to_text(data: bytes) -> str:
    """
    Encode principal bytes in their textual form.

    Args:
        data: Principal bytes (at most 29)

    Returns:
        Text such as ``"2vxsx-fae"``
    """
    if len(data) > MAX_PRINCIPAL_SIZE:
        raise InvalidIdentityError(
            f"Principal must be at most {MAX_PRINCIPAL_SIZE} bytes, got {len(data)}"
        )

    checksum = zlib.crc32(data).to_bytes(4, byteorder="big")
    encoded = base64.b32encode(checksum + bytes(data)).decode("ascii").lower().rstrip("=")
    return "-".join(encoded[i : i + 5] for i in range(0, len(encoded), 5))


def principal_from_text(text: str) -> bytes:
    """
    Decode a principal from its textual form.

    Args:
        text: Principal text

    Returns:
        Principal bytes

    Raises:
        InvalidIdentityError: If the text is malformed, not canonically
            grouped or fails the checksum
    """
    canonical = text.strip().lower()
    ungrouped = canonical.replace("-", "")
    padding = "=" * ((8 - len(ungrouped) % 8) % 8)

    try:
        decoded = base64.b32decode(ungrouped + padding, casefold=True)
    except (binascii.Error, ValueError):
        raise InvalidIdentityError(f"Invalid principal text: {text!r}")

    if len(decoded) < 4:
        raise InvalidIdentityError(f"Invalid principal text: {text!r}")

    checksum, data = decoded[:4], decoded[4:]
    if len(data) > MAX_PRINCIPAL_SIZE:
        raise InvalidIdentityError(f"Principal too long: {text!r}")

    if zlib.crc32(data).to_bytes(4, byteorder="big") != checksum:
        raise InvalidIdentityError(f"Principal checksum mismatch: {text!r}")

    if principal_to_text(data) != canonical:
        raise InvalidIdentityError(f"Principal text is not canonical: {text!r}")

    return data


def self_authenticating_principal(der_public_key: bytes) -> bytes:
    """Principal bytes for a DER-encoded public key: SHA-224 digest plus suffix 0x02."""
    return hashlib.sha224(der_public_key).digest() + bytes([SELF_AUTHENTICATING_SUFFIX])


def describe_fingerprint(fingerprint: bytes) -> str:
    """Human-readable form of a fingerprint: principal text, or hex if too long."""
    if len(fingerprint) > MAX_PRINCIPAL_SIZE:
        return fingerprint.hex()
    return principal_to_text(fingerprint)


class IdentityProvider(ABC):
    """
    The locally authenticated identity (the session the user sees).

    This may be stale relative to what the key-derivation service observes;
    decisions that grant access use ``CallerIdentitySource`` instead.
    """

    @abstractmethod
    async def current_identity_fingerprint(self) -> bytes:
        """Fingerprint of the identity currently logged in."""
        ...

    def fingerprint_of(self, identity: str) -> bytes:
        """Fingerprint for an identity given as text."""
        return principal_from_text(identity)

    def describe(self, fingerprint: bytes) -> str:
        """Printable form of a fingerprint for error messages."""
        return describe_fingerprint(fingerprint)


class CallerIdentitySource(ABC):
    """The caller identity as independently observed by the remote service."""

    @abstractmethod
    async def service_observed_caller_fingerprint(self) -> bytes:
        """Fingerprint of the caller as seen by the service."""
        ...


class StaticIdentityProvider(IdentityProvider):
    """IdentityProvider that always reports the same identity (for tests and scripts)."""

    def __init__(self, fingerprint: bytes) -> None:
        self._fingerprint = bytes(fingerprint)

    @classmethod
    def from_text(cls, identity: str) -> "StaticIdentityProvider":
        return cls(principal_from_text(identity))

    @classmethod
    def anonymous(cls) -> "StaticIdentityProvider":
        return cls(ANONYMOUS_PRINCIPAL)

    async def current_identity_fingerprint(self) -> bytes:
        return self._fingerprint

    def __repr__(self) -> str:
        return f"StaticIdentityProvider({describe_fingerprint(self._fingerprint)})"
