"""Tests for principal encoding and identity providers."""

import pytest

from idseal.identity import (
    ANONYMOUS_PRINCIPAL,
    StaticIdentityProvider,
    describe_fingerprint,
    principal_from_text,
    principal_to_text,
    self_authenticating_principal,
)
from idseal.types import InvalidIdentityError
from .test_vectors import (
    ALICE_PRINCIPAL,
    ANONYMOUS_TEXT,
    MANAGEMENT_CANISTER_TEXT,
)


class TestPrincipalText:
    """Tests for the principal text codec."""

    def test_known_principals(self) -> None:
        """The anonymous and management principals match their texts."""
        assert principal_to_text(ANONYMOUS_PRINCIPAL) == ANONYMOUS_TEXT
        assert principal_to_text(b"") == MANAGEMENT_CANISTER_TEXT

        assert principal_from_text(ANONYMOUS_TEXT) == ANONYMOUS_PRINCIPAL
        assert principal_from_text(MANAGEMENT_CANISTER_TEXT) == b""

    def test_round_trip(self) -> None:
        """Principal bytes survive the text form."""
        text = principal_to_text(ALICE_PRINCIPAL)

        assert principal_from_text(text) == ALICE_PRINCIPAL

    def test_grouping(self) -> None:
        """Text is lowercase in dash-separated groups of five."""
        text = principal_to_text(ALICE_PRINCIPAL)
        groups = text.split("-")

        assert all(len(group) == 5 for group in groups[:-1])
        assert 0 < len(groups[-1]) <= 5
        assert text == text.lower()

    def test_case_and_whitespace_tolerated(self) -> None:
        """Uppercase and surrounding whitespace parse."""
        text = principal_to_text(ALICE_PRINCIPAL)

        assert principal_from_text("  " + text.upper() + "\n") == ALICE_PRINCIPAL

    def test_bad_checksum(self) -> None:
        """A changed character fails the checksum."""
        text = principal_to_text(ALICE_PRINCIPAL)
        tampered = ("b" if text[0] == "a" else "a") + text[1:]

        with pytest.raises(InvalidIdentityError):
            principal_from_text(tampered)

    def test_missing_dashes_rejected(self) -> None:
        """Text without dashes is not canonical."""
        text = principal_to_text(ALICE_PRINCIPAL)

        with pytest.raises(InvalidIdentityError):
            principal_from_text(text.replace("-", ""))

    @pytest.mark.parametrize("text", ["", "not a principal!", "abc", "2vxsx-fa"])
    def test_garbage(self, text) -> None:
        """Malformed text is rejected."""
        with pytest.raises(InvalidIdentityError):
            principal_from_text(text)

    def test_too_long(self) -> None:
        """Principals over 29 bytes cannot be encoded."""
        with pytest.raises(InvalidIdentityError):
            principal_to_text(bytes(30))


class TestSelfAuthenticating:
    """Tests for self-authenticating principals."""

    def test_shape(self) -> None:
        """Self-authenticating principals are 29 bytes ending in 0x02."""
        principal = self_authenticating_principal(b"\x30\x2a" + bytes(42))

        assert len(principal) == 29
        assert principal[-1] == 0x02

    def test_deterministic(self) -> None:
        """The same key always gives the same principal."""
        key = bytes([9] * 44)

        assert self_authenticating_principal(key) == self_authenticating_principal(key)
        assert self_authenticating_principal(key) != self_authenticating_principal(bytes(44))


class TestStaticIdentityProvider:
    """Tests for the static identity provider."""

    @pytest.mark.asyncio
    async def test_reports_identity(self) -> None:
        """The provider reports its fixed identity."""
        provider = StaticIdentityProvider(ALICE_PRINCIPAL)

        assert await provider.current_identity_fingerprint() == ALICE_PRINCIPAL

    @pytest.mark.asyncio
    async def test_from_text(self) -> None:
        """Providers can be built from principal text."""
        provider = StaticIdentityProvider.from_text(ANONYMOUS_TEXT)

        assert await provider.current_identity_fingerprint() == ANONYMOUS_PRINCIPAL

    def test_fingerprint_of_and_describe(self) -> None:
        """Text and fingerprints convert both ways."""
        provider = StaticIdentityProvider.anonymous()
        text = principal_to_text(ALICE_PRINCIPAL)

        assert provider.fingerprint_of(text) == ALICE_PRINCIPAL
        assert provider.describe(ALICE_PRINCIPAL) == text

    def test_describe_long_fingerprint_as_hex(self) -> None:
        """Fingerprints too long for a principal show as hex."""
        assert describe_fingerprint(bytes(40)) == "00" * 40
