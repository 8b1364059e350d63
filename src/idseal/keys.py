"""Key types and BLS12-381 point encodings for idseal."""

import os

from cryptography.hazmat.primitives.kdf.hkdf import HKDF
from cryptography.hazmat.primitives.hashes import SHA256
from py_ecc.bls.g2_primitives import (
    G1_to_pubkey,
    G2_to_signature,
    pubkey_to_G1,
    signature_to_G2,
)
from py_ecc.optimized_bls12_381 import G2, curve_order, is_inf, multiply

from .types import (
    DERIVED_PUBLIC_KEY_SIZE,
    G1_POINT_SIZE,
    G2_POINT_SIZE,
    KeyFormatError,
)


def random_scalar() -> int:
    """Generate a uniformly random non-zero scalar."""
    while True:
        scalar = int.from_bytes(os.urandom(64), "big") % curve_order
        if scalar:
            return scalar


def hash_to_scalar(data: bytes, info: bytes) -> int:
    """Map bytes to a scalar using HKDF-SHA256 with 64 bytes of output."""
    hkdf = HKDF(algorithm=SHA256(), length=64, salt=None, info=info)
    return int.from_bytes(hkdf.derive(data), "big") % curve_order


def g1_to_bytes(point) -> bytes:
    """Compress a G1 point (48 bytes)."""
    return bytes(G1_to_pubkey(point))


def g2_to_bytes(point) -> bytes:
    """Compress a G2 point (96 bytes)."""
    return bytes(G2_to_signature(point))


def g1_from_bytes(data: bytes):
    """
    Decompress a G1 point and check it is a usable group element.

    Raises:
        KeyFormatError: On bad length, bad encoding, the identity or a
            point outside the prime-order subgroup
    """
    if len(data) != G1_POINT_SIZE:
        raise KeyFormatError(f"G1 point must be {G1_POINT_SIZE} bytes, got {len(data)}")
    try:
        point = pubkey_to_G1(bytes(data))
    except ValueError as e:
        raise KeyFormatError(f"Invalid G1 point: {e}")
    _check_subgroup(point)
    return point


def g2_from_bytes(data: bytes):
    """
    Decompress a G2 point and check it is a usable group element.

    Raises:
        KeyFormatError: On bad length, bad encoding, the identity or a
            point outside the prime-order subgroup
    """
    if len(data) != G2_POINT_SIZE:
        raise KeyFormatError(f"G2 point must be {G2_POINT_SIZE} bytes, got {len(data)}")
    try:
        point = signature_to_G2(bytes(data))
    except ValueError as e:
        raise KeyFormatError(f"Invalid G2 point: {e}")
    _check_subgroup(point)
    return point


def _check_subgroup(point) -> None:
    if is_inf(point):
        raise KeyFormatError("Point at infinity is not a valid key")
    if not is_inf(multiply(point, curve_order)):
        raise KeyFormatError("Point is not in the prime-order subgroup")


class DerivedPublicKey:
    """
    Public key returned by the key-derivation service for a key name and context.

    The serialized form is kept verbatim so that two fetches can be compared
    byte-for-byte.
    """

    def __init__(self, data: bytes, point) -> None:
        self._data = bytes(data)
        self.point = point

    @classmethod
    def deserialize(cls, data: bytes) -> "DerivedPublicKey":
        """
        Parse a serialized derived public key.

        Raises:
            KeyFormatError: If the bytes are not a valid key
        """
        if len(data) != DERIVED_PUBLIC_KEY_SIZE:
            raise KeyFormatError(
                f"Derived public key must be {DERIVED_PUBLIC_KEY_SIZE} bytes, got {len(data)}"
            )
        return cls(data, g1_from_bytes(data))

    def serialize(self) -> bytes:
        return self._data

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DerivedPublicKey):
            return NotImplemented
        return self._data == other._data

    def __hash__(self) -> int:
        return hash(self._data)

    def __repr__(self) -> str:
        return f"DerivedPublicKey({self._data.hex()[:16]}...)"


class TransportSecretKey:
    """
    One-time key pair protecting key material in transit from the service.

    A new instance is created for every decryption attempt.
    """

    def __init__(self, scalar: int) -> None:
        if not 0 < scalar < curve_order:
            raise KeyFormatError("Transport secret key out of range")
        self._scalar = scalar

    @classmethod
    def random(cls) -> "TransportSecretKey":
        """Generate a fresh transport key."""
        return cls(random_scalar())

    @property
    def scalar(self) -> int:
        return self._scalar

    def public_key_bytes(self) -> bytes:
        """The transport public key (96-byte G2 point)."""
        return g2_to_bytes(multiply(G2, self._scalar))

    def __repr__(self) -> str:
        return "TransportSecretKey(<hidden>)"
