"""Tests for the hex codec."""

import os

import pytest

from idseal.codec import bytes_to_hex, hex_to_bytes
from idseal.types import InvalidEncodingError


class TestHexToBytes:
    """Tests for hex decoding."""

    def test_plain_hex(self) -> None:
        """Plain lowercase hex decodes byte for byte."""
        assert hex_to_bytes("00ff10") == b"\x00\xff\x10"

    def test_prefix_and_whitespace_ignored(self) -> None:
        """Surrounding whitespace and a 0x prefix in either case are ignored."""
        assert hex_to_bytes("  0xDEADbeef\n") == b"\xde\xad\xbe\xef"
        assert hex_to_bytes("0XAB") == b"\xab"

    @pytest.mark.parametrize("text", ["", "   ", "0x", " 0x "])
    def test_empty(self, text) -> None:
        """Nothing left after stripping is reported as empty."""
        with pytest.raises(InvalidEncodingError) as exc:
            hex_to_bytes(text)
        assert exc.value.reason == "empty"

    def test_odd_length(self) -> None:
        """An odd number of digits is rejected."""
        with pytest.raises(InvalidEncodingError) as exc:
            hex_to_bytes("abc")
        assert exc.value.reason == "odd_length"

    @pytest.mark.parametrize("text", ["zz", "0x12g4", "ab  cd", "12\n345"])
    def test_non_hex(self, text) -> None:
        """Characters outside 0-9a-f are rejected."""
        with pytest.raises(InvalidEncodingError) as exc:
            hex_to_bytes(text)
        assert exc.value.reason == "non_hex"


class TestBytesToHex:
    """Tests for hex encoding."""

    def test_lowercase_without_separators(self) -> None:
        """Output is lowercase with two digits per byte."""
        assert bytes_to_hex(b"\xab\x01\xff") == "ab01ff"

    def test_empty(self) -> None:
        """Empty input gives an empty string."""
        assert bytes_to_hex(b"") == ""

    def test_round_trip(self) -> None:
        """Decoding the encoded form gives back the original bytes."""
        for size in (1, 2, 31, 256):
            data = os.urandom(size)
            assert hex_to_bytes(bytes_to_hex(data)) == data
