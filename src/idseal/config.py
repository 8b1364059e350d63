"""Configuration for idseal clients."""

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional


DEFAULT_KEY_NAME = "test_key_1"
DEFAULT_CONTEXT = "motoko-show"

LOCAL_KEY_NAME = "dfx_test_key"
TEST_KEY_NAME = "test_key_1"
PRODUCTION_KEY_NAME = "key_1"

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


@dataclass(frozen=True)
class IdsealConfig:
    """Key names and policies shared by the encryption and signature clients."""

    key_name: str = DEFAULT_KEY_NAME
    """Key name for derived public keys and decryption key material."""

    context: str = DEFAULT_CONTEXT
    """Derivation context; ciphertexts only decrypt under the same context."""

    signing_key_name: Optional[str] = None
    """Key name for message signing (defaults to ``key_name``)."""

    allow_compact_signatures: bool = True
    """Accept 64-byte signatures during verification by trying every recovery id."""

    @property
    def effective_signing_key_name(self) -> str:
        return self.signing_key_name or self.key_name

    @classmethod
    def local(cls) -> "IdsealConfig":
        """Creates configuration for a local replica."""
        return cls(key_name=LOCAL_KEY_NAME)

    @classmethod
    def test(cls) -> "IdsealConfig":
        """Creates configuration for the mainnet test key."""
        return cls(key_name=TEST_KEY_NAME)

    @classmethod
    def production(cls) -> "IdsealConfig":
        """Creates configuration for the mainnet production key."""
        return cls(key_name=PRODUCTION_KEY_NAME)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "IdsealConfig":
        """
        Creates configuration from environment variables.

        ``DFX_NETWORK`` picks the preset (``ic`` for production, ``local``
        for a local replica, anything else the test key); ``IDSEAL_KEY_NAME``,
        ``IDSEAL_CONTEXT``, ``IDSEAL_SIGNING_KEY_NAME`` and
        ``IDSEAL_ALLOW_COMPACT_SIGNATURES`` override individual fields.

        Raises:
            ValueError: If a boolean variable holds an unrecognized value
        """
        env = os.environ if environ is None else environ

        network = env.get("DFX_NETWORK", "").strip().lower()
        if network == "ic":
            config = cls.production()
        elif network == "local":
            config = cls.local()
        else:
            config = cls.test()

        overrides = {}
        if env.get("IDSEAL_KEY_NAME"):
            overrides["key_name"] = env["IDSEAL_KEY_NAME"]
        if env.get("IDSEAL_CONTEXT"):
            overrides["context"] = env["IDSEAL_CONTEXT"]
        if env.get("IDSEAL_SIGNING_KEY_NAME"):
            overrides["signing_key_name"] = env["IDSEAL_SIGNING_KEY_NAME"]
        if env.get("IDSEAL_ALLOW_COMPACT_SIGNATURES"):
            overrides["allow_compact_signatures"] = _parse_bool(
                "IDSEAL_ALLOW_COMPACT_SIGNATURES", env["IDSEAL_ALLOW_COMPACT_SIGNATURES"]
            )

        return replace(config, **overrides)

    def with_context(self, context: str) -> "IdsealConfig":
        """Returns a copy with a different derivation context."""
        return replace(self, context=context)


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {value!r}")
