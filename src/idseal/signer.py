"""Raw signer interface and a local secp256k1 implementation."""

from abc import ABC, abstractmethod
from typing import Dict, Optional, Union

from coincurve import PrivateKey

from .types import COMPACT_SIGNATURE_SIZE, KeyNotFoundError


class RawSigner(ABC):
    """
    Interface to a signer that holds secp256k1 keys by name.

    The signer returns plain 64-byte compact signatures (r || s) over a
    32-byte hash, without a recovery id.
    """

    @abstractmethod
    async def get_public_key(self, key_name: str) -> bytes:
        """SEC1 public key (compressed or uncompressed) for a key name."""
        ...

    @abstractmethod
    async def sign_hash(self, message_hash: bytes, key_name: str) -> bytes:
        """64-byte compact signature of a 32-byte hash."""
        ...


class LocalSigner(RawSigner):
    """
    RawSigner holding private keys in process memory.

    WARNING: Intended for testing and scripts. Keys are not protected and are
    lost when the process exits.
    """

    def __init__(self, keys: Optional[Dict[str, PrivateKey]] = None) -> None:
        self._keys: Dict[str, PrivateKey] = dict(keys or {})

    @classmethod
    def from_secret(cls, key_name: str, secret: Union[bytes, str]) -> "LocalSigner":
        """
        Create a signer with one key.

        Args:
            key_name: Name the key is served under
            secret: 32-byte private key, raw or hex
        """
        if isinstance(secret, str):
            private_key = PrivateKey.from_hex(secret.strip().lower().replace("0x", "", 1))
        else:
            private_key = PrivateKey(secret)
        return cls({key_name: private_key})

    def generate(self, key_name: str) -> bytes:
        """Create a random key under a name; returns its compressed public key."""
        private_key = PrivateKey()
        self._keys[key_name] = private_key
        return private_key.public_key.format(compressed=True)

    def _key(self, key_name: str) -> PrivateKey:
        private_key = self._keys.get(key_name)
        if private_key is None:
            raise KeyNotFoundError(key_name)
        return private_key

    async def get_public_key(self, key_name: str) -> bytes:
        return self._key(key_name).public_key.format(compressed=True)

    async def sign_hash(self, message_hash: bytes, key_name: str) -> bytes:
        if len(message_hash) != 32:
            raise ValueError(f"Hash must be 32 bytes, got {len(message_hash)}")
        recoverable = self._key(key_name).sign_recoverable(message_hash, hasher=None)
        return recoverable[:COMPACT_SIGNATURE_SIZE]
