"""
Key-derivation service interfaces.

The service holds a threshold master key. It publishes a derived public key
per (key name, context) and hands out per-identity decryption key material,
encrypted to a transport key, for whichever caller it has authenticated.
"""

import asyncio
import logging
import os
from abc import ABC, abstractmethod
from typing import Any, Optional

from py_ecc.optimized_bls12_381 import G1, multiply

from .codec import hex_to_bytes
from .crypto import EncryptedVetKey, IbeIdentity
from .identity import CallerIdentitySource
from .keys import (
    DerivedPublicKey,
    g1_to_bytes,
    g2_from_bytes,
    hash_to_scalar,
    random_scalar,
)
from .types import KeyDerivationServiceError, KeyFormatError, InvalidEncodingError


logger = logging.getLogger(__name__)

DERIVATION_INFO = b"idseal-derivation-v1"


class KeyDerivationService(ABC):
    """Interface to the key-derivation service, scoped to the authenticated caller."""

    @abstractmethod
    async def get_derived_public_key(self, key_name: str, context: str) -> bytes:
        """
        Fetch the derived public key for a key name and context.

        Returns:
            Serialized derived public key
        """
        ...

    @abstractmethod
    async def get_decryption_key_material(
        self,
        transport_public_key: bytes,
        key_name: str,
        context: str,
    ) -> bytes:
        """
        Fetch the caller's decryption key, encrypted to a transport public key.

        Returns:
            Serialized encrypted key material
        """
        ...


class InMemoryKeyDerivationService(KeyDerivationService, CallerIdentitySource):
    """
    In-process KeyDerivationService (for testing and local development).

    WARNING: The master secret lives in memory in a single process. This
    stands in for the threshold service and offers none of its guarantees.

    Instances are immutable: ``for_caller`` gives the same service seen by a
    different authenticated caller, ``rotated`` gives a new epoch.
    """

    def __init__(self, caller: bytes, master_seed: Optional[bytes] = None) -> None:
        self._caller = bytes(caller)
        self._master_seed = master_seed if master_seed is not None else os.urandom(32)

    @property
    def caller(self) -> bytes:
        return self._caller

    def for_caller(self, caller: bytes) -> "InMemoryKeyDerivationService":
        """The same service (same epoch) authenticated as another caller."""
        return InMemoryKeyDerivationService(caller, self._master_seed)

    def rotated(self) -> "InMemoryKeyDerivationService":
        """A new service epoch; previously derived keys no longer apply."""
        return InMemoryKeyDerivationService(self._caller)

    def _derived_secret(self, key_name: str, context: str) -> int:
        name = key_name.encode("utf-8")
        ctx = context.encode("utf-8")
        material = (
            self._master_seed
            + len(name).to_bytes(4, "big")
            + name
            + len(ctx).to_bytes(4, "big")
            + ctx
        )
        return hash_to_scalar(material, DERIVATION_INFO)

    def _public_key(self, key_name: str, context: str) -> bytes:
        return g1_to_bytes(multiply(G1, self._derived_secret(key_name, context)))

    def _key_material(self, transport_public_key: bytes, key_name: str, context: str) -> bytes:
        try:
            transport_point = g2_from_bytes(transport_public_key)
        except KeyFormatError as e:
            raise KeyDerivationServiceError("get_decryption_key_material", str(e))

        secret = self._derived_secret(key_name, context)
        derived_public_key = DerivedPublicKey.deserialize(
            g1_to_bytes(multiply(G1, secret))
        )
        identity_point = IbeIdentity.from_bytes(self._caller).to_point(derived_public_key)

        sealed = EncryptedVetKey.seal(
            multiply(identity_point, secret),
            transport_point,
            random_scalar(),
        )
        return sealed.serialize()

    async def get_derived_public_key(self, key_name: str, context: str) -> bytes:
        return await asyncio.to_thread(self._public_key, key_name, context)

    async def get_decryption_key_material(
        self,
        transport_public_key: bytes,
        key_name: str,
        context: str,
    ) -> bytes:
        return await asyncio.to_thread(
            self._key_material, bytes(transport_public_key), key_name, context
        )

    async def service_observed_caller_fingerprint(self) -> bytes:
        return self._caller


class CanisterKeyDerivationService(KeyDerivationService, CallerIdentitySource):
    """
    KeyDerivationService backed by a canister actor.

    The actor is any object whose async methods return a result variant,
    ``{"ok": <hex text>}`` or ``{"err": <message>}``; transport and agent
    setup belong to whoever builds the actor.
    """

    PUBLIC_KEY_METHOD = "vetkdPublicKeyExample"
    DERIVE_KEY_METHOD = "vetkdDeriveKeyExample"
    CALLER_INPUT_METHOD = "callerInputExample"

    def __init__(self, actor: Any) -> None:
        self.actor = actor

    async def _call(self, method: str, *args: Any) -> bytes:
        logger.debug("Calling %s", method)
        result = await getattr(self.actor, method)(*args)
        value = _parse_result(method, result)
        try:
            return hex_to_bytes(value)
        except InvalidEncodingError as e:
            raise KeyDerivationServiceError(method, f"invalid hex data ({e.reason})")

    async def get_derived_public_key(self, key_name: str, context: str) -> bytes:
        return await self._call(self.PUBLIC_KEY_METHOD, key_name, context)

    async def get_decryption_key_material(
        self,
        transport_public_key: bytes,
        key_name: str,
        context: str,
    ) -> bytes:
        return await self._call(
            self.DERIVE_KEY_METHOD, list(transport_public_key), key_name, context
        )

    async def service_observed_caller_fingerprint(self) -> bytes:
        return await self._call(self.CALLER_INPUT_METHOD)


def _parse_result(method: str, result: Any) -> str:
    """Unwrap an ``{"ok": ...}`` / ``{"err": ...}`` result variant."""
    if isinstance(result, dict):
        if "ok" in result:
            if not isinstance(result["ok"], str):
                raise KeyDerivationServiceError(method, "ok value is not text")
            return result["ok"]
        if "err" in result:
            logger.warning("%s returned an error", method)
            raise KeyDerivationServiceError(method, str(result["err"]))
    raise KeyDerivationServiceError(method, "unknown result")
