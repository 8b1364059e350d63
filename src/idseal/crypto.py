"""
Identity-based encryption over BLS12-381.

The derived public key lives in G1, identities hash to G2 and the per-identity
decryption key (the "vet key") is ``secret * H(identity)`` in G2. Ciphertexts
use a Fujisaki-Okamoto style construction: the random seed is masked with a
pairing value and the message itself is sealed with ChaCha20-Poly1305 under a
key derived from the seed.

Every type here exposes exactly one byte encoding through ``serialize`` and
``deserialize``.
"""

import hashlib
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import ChaCha20Poly1305
from cryptography.hazmat.primitives.hashes import SHA256
from cryptography.hazmat.primitives.kdf.hkdf import HKDF
from py_ecc.bls.hash_to_curve import hash_to_G2
from py_ecc.optimized_bls12_381 import (
    FQ12,
    G1,
    G2,
    add,
    final_exponentiate,
    multiply,
    neg,
    pairing,
)

from .keys import (
    DerivedPublicKey,
    TransportSecretKey,
    g1_from_bytes,
    g1_to_bytes,
    g2_from_bytes,
    g2_to_bytes,
    hash_to_scalar,
)
from .types import (
    ENCRYPTED_KEY_SIZE,
    G1_POINT_SIZE,
    G2_POINT_SIZE,
    IBE_IDENTITY_DST,
    IBE_MASK_INFO,
    IBE_MESSAGE_KEY_INFO,
    IBE_SCALAR_INFO,
    IBE_SEED_SIZE,
    DecryptionDeniedError,
    EncryptionError,
    KeyFormatError,
)


TAG_SIZE = 16
MIN_CIPHERTEXT_SIZE = G1_POINT_SIZE + IBE_SEED_SIZE + TAG_SIZE

# Each message key is used once, so a fixed nonce is safe
_MESSAGE_NONCE = bytes(12)


def _kdf(secret: bytes, info: bytes, length: int = 32) -> bytes:
    hkdf = HKDF(algorithm=SHA256(), length=length, salt=None, info=info)
    return hkdf.derive(secret)


def _xor(a: bytes, b: bytes) -> bytes:
    return bytes(x ^ y for x, y in zip(a, b))


def _gt_to_bytes(element) -> bytes:
    return b"".join(int(c).to_bytes(G1_POINT_SIZE, "big") for c in element.coeffs)


def _pairings_cancel(*pairs) -> bool:
    """Check that the product of e(Q, P) over all (Q, P) pairs is one."""
    acc = FQ12.one()
    for q, p in pairs:
        acc = acc * pairing(q, p, final_exponentiate=False)
    return final_exponentiate(acc) == FQ12.one()


class IbeIdentity:
    """Recipient identity that ciphertexts are bound to."""

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)

    @classmethod
    def from_bytes(cls, data: bytes) -> "IbeIdentity":
        return cls(data)

    def to_bytes(self) -> bytes:
        return self._data

    def to_point(self, derived_public_key: DerivedPublicKey):
        """Hash the identity, augmented with the derived public key, to G2."""
        return hash_to_G2(
            derived_public_key.serialize() + self._data,
            IBE_IDENTITY_DST,
            hashlib.sha256,
        )


class IbeSeed:
    """Per-message randomness for encryption."""

    def __init__(self, data: bytes) -> None:
        if len(data) != IBE_SEED_SIZE:
            raise EncryptionError(f"Seed must be {IBE_SEED_SIZE} bytes, got {len(data)}")
        self._data = bytes(data)

    @classmethod
    def random(cls) -> "IbeSeed":
        return cls(os.urandom(IBE_SEED_SIZE))

    def to_bytes(self) -> bytes:
        return self._data


class VetKey:
    """Decryption key for one identity under one derived public key."""

    def __init__(self, point) -> None:
        self.point = point

    @classmethod
    def deserialize(cls, data: bytes) -> "VetKey":
        return cls(g2_from_bytes(data))

    def serialize(self) -> bytes:
        return g2_to_bytes(self.point)

    def __repr__(self) -> str:
        return "VetKey(<hidden>)"


class IbeCiphertext:
    """
    Identity-based ciphertext.

    Format:
        [0-47]   c1: t * G1 (compressed)
        [48-79]  c2: seed XOR mask
        [80+]    c3: ChaCha20-Poly1305 ciphertext + 16-byte tag
    """

    def __init__(self, c1: bytes, c2: bytes, c3: bytes) -> None:
        self.c1 = bytes(c1)
        self.c2 = bytes(c2)
        self.c3 = bytes(c3)

    @classmethod
    def encrypt(
        cls,
        derived_public_key: DerivedPublicKey,
        identity: IbeIdentity,
        plaintext: bytes,
        seed: IbeSeed,
    ) -> "IbeCiphertext":
        """
        Encrypt a message for an identity.

        Args:
            derived_public_key: Public key of the key-derivation service
            identity: Recipient identity
            plaintext: Message bytes
            seed: Fresh randomness; never reuse a seed

        Returns:
            IbeCiphertext
        """
        seed_bytes = seed.to_bytes()
        t = hash_to_scalar(seed_bytes + plaintext, IBE_SCALAR_INFO)

        c1 = g1_to_bytes(multiply(G1, t))

        shared = pairing(
            identity.to_point(derived_public_key),
            multiply(derived_public_key.point, t),
        )
        c2 = _xor(seed_bytes, _kdf(_gt_to_bytes(shared), IBE_MASK_INFO))

        cipher = ChaCha20Poly1305(_kdf(seed_bytes, IBE_MESSAGE_KEY_INFO))
        c3 = cipher.encrypt(_MESSAGE_NONCE, plaintext, c1 + c2)

        return cls(c1, c2, c3)

    def decrypt(self, vet_key: VetKey) -> bytes:
        """
        Decrypt with the recipient's vet key.

        Raises:
            DecryptionDeniedError: If the key does not match or the
                ciphertext was modified
        """
        try:
            c1_point = g1_from_bytes(self.c1)
        except KeyFormatError:
            raise DecryptionDeniedError() from None

        shared = pairing(vet_key.point, c1_point)
        seed_bytes = _xor(self.c2, _kdf(_gt_to_bytes(shared), IBE_MASK_INFO))

        cipher = ChaCha20Poly1305(_kdf(seed_bytes, IBE_MESSAGE_KEY_INFO))
        try:
            plaintext = cipher.decrypt(_MESSAGE_NONCE, self.c3, self.c1 + self.c2)
        except InvalidTag:
            raise DecryptionDeniedError() from None

        t = hash_to_scalar(seed_bytes + plaintext, IBE_SCALAR_INFO)
        if g1_to_bytes(multiply(G1, t)) != self.c1:
            raise DecryptionDeniedError()

        return plaintext

    def serialize(self) -> bytes:
        return self.c1 + self.c2 + self.c3

    @classmethod
    def deserialize(cls, data: bytes) -> "IbeCiphertext":
        """
        Split serialized bytes into ciphertext components.

        Raises:
            KeyFormatError: If the data is too short
        """
        if len(data) < MIN_CIPHERTEXT_SIZE:
            raise KeyFormatError(
                f"Ciphertext too short: {len(data)} bytes (minimum {MIN_CIPHERTEXT_SIZE})"
            )
        offset = G1_POINT_SIZE
        return cls(
            c1=data[:offset],
            c2=data[offset : offset + IBE_SEED_SIZE],
            c3=data[offset + IBE_SEED_SIZE :],
        )


class EncryptedVetKey:
    """
    Vet key as delivered by the service, encrypted to a transport key.

    Format:
        [0-47]     ek1: r * G1
        [48-143]   ek2: r * G2
        [144-239]  ek3: k + r * transport_public_key
    """

    def __init__(self, data: bytes) -> None:
        if len(data) != ENCRYPTED_KEY_SIZE:
            raise KeyFormatError(
                f"Encrypted key must be {ENCRYPTED_KEY_SIZE} bytes, got {len(data)}"
            )
        self._data = bytes(data)

    @classmethod
    def seal(cls, vet_key_point, transport_public_key, r: int) -> "EncryptedVetKey":
        """Encrypt a vet key point to a transport public key point with randomness r."""
        return cls(
            g1_to_bytes(multiply(G1, r))
            + g2_to_bytes(multiply(G2, r))
            + g2_to_bytes(add(vet_key_point, multiply(transport_public_key, r)))
        )

    def serialize(self) -> bytes:
        return self._data

    def decrypt_and_verify(
        self,
        transport_secret_key: TransportSecretKey,
        derived_public_key: DerivedPublicKey,
        identity: bytes,
    ) -> VetKey:
        """
        Recover the vet key and check it belongs to identity.

        Args:
            transport_secret_key: The key whose public half was sent to the service
            derived_public_key: Derived public key for the same key name and context
            identity: Identity bytes the key must be valid for

        Returns:
            VetKey

        Raises:
            DecryptionDeniedError: If the material is malformed or does not
                verify
        """
        g2_end = G1_POINT_SIZE + G2_POINT_SIZE
        try:
            ek1 = g1_from_bytes(self._data[:G1_POINT_SIZE])
            ek2 = g2_from_bytes(self._data[G1_POINT_SIZE:g2_end])
            ek3 = g2_from_bytes(self._data[g2_end:])
        except KeyFormatError:
            raise DecryptionDeniedError() from None

        if not _pairings_cancel((ek2, G1), (G2, neg(ek1))):
            raise DecryptionDeniedError()

        k = add(ek3, neg(multiply(ek2, transport_secret_key.scalar)))

        h = IbeIdentity.from_bytes(identity).to_point(derived_public_key)
        if not _pairings_cancel((k, G1), (h, neg(derived_public_key.point))):
            raise DecryptionDeniedError()

        return VetKey(k)
