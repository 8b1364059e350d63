"""Tests for envelope encoding and decoding."""

import pytest

from idseal.envelope import decode_envelope, encode_envelope, is_packaged
from idseal.types import (
    ENVELOPE_MAGIC,
    FieldTooLargeError,
    InvalidEnvelopeError,
)


class TestEncode:
    """Tests for envelope encoding."""

    def test_layout(self) -> None:
        """Header fields and payloads sit at their fixed offsets."""
        encoded = encode_envelope(b"\x01\x02", b"\xaa" * 3, b"cipher")

        assert encoded[:4] == ENVELOPE_MAGIC
        assert encoded[4] == 2
        assert encoded[5:7] == b"\x00\x03"
        assert encoded[7:9] == b"\x01\x02"
        assert encoded[9:12] == b"\xaa" * 3
        assert encoded[12:] == b"cipher"

    def test_fingerprint_too_large(self) -> None:
        """A fingerprint over 255 bytes does not fit its length byte."""
        with pytest.raises(FieldTooLargeError):
            encode_envelope(bytes(256), b"key", b"c")

    def test_key_too_large(self) -> None:
        """A key over 65535 bytes does not fit its length field."""
        with pytest.raises(FieldTooLargeError):
            encode_envelope(b"fp", bytes(65536), b"c")

    def test_maximum_sizes_accepted(self) -> None:
        """Fields at exactly the maximum sizes encode and decode."""
        encoded = encode_envelope(bytes(255), bytes(65535), b"")
        decoded = decode_envelope(encoded)

        assert decoded.packaged
        assert len(decoded.recipient_fingerprint) == 255
        assert len(decoded.derived_public_key) == 65535
        assert decoded.ciphertext == b""


class TestDecode:
    """Tests for envelope decoding."""

    def test_round_trip(self) -> None:
        """Decoding returns the three encoded fields."""
        decoded = decode_envelope(encode_envelope(b"fingerprint", b"derived-key", b"ciphertext"))

        assert decoded.packaged
        assert decoded.recipient_fingerprint == b"fingerprint"
        assert decoded.derived_public_key == b"derived-key"
        assert decoded.ciphertext == b"ciphertext"

    def test_empty_fields(self) -> None:
        """Empty fields are preserved as empty, not missing."""
        decoded = decode_envelope(encode_envelope(b"", b"", b""))

        assert decoded.packaged
        assert decoded.recipient_fingerprint == b""
        assert decoded.derived_public_key == b""
        assert decoded.ciphertext == b""

    @pytest.mark.parametrize(
        "data",
        [b"", b"IB", b"IBE\x02rest", b"\x00" * 100, b'{"version": 1}'],
    )
    def test_legacy_passthrough(self, data) -> None:
        """Data without the marker is returned unpackaged, never an error."""
        decoded = decode_envelope(data)

        assert not decoded.packaged
        assert decoded.ciphertext == data
        assert decoded.recipient_fingerprint is None
        assert decoded.derived_public_key is None

    def test_truncated_header(self) -> None:
        """Marker followed by a partial header is rejected."""
        with pytest.raises(InvalidEnvelopeError):
            decode_envelope(ENVELOPE_MAGIC + b"\x01")

    def test_declared_lengths_exceed_data(self) -> None:
        """Declared lengths longer than the data are rejected."""
        encoded = encode_envelope(b"fingerprint", b"derived-key", b"")

        with pytest.raises(InvalidEnvelopeError):
            decode_envelope(encoded[:-1])

    def test_declared_key_length_exceeds_data(self) -> None:
        """An oversized key length alone is enough to reject."""
        data = ENVELOPE_MAGIC + b"\x00" + b"\xff\xff" + b"short"

        with pytest.raises(InvalidEnvelopeError):
            decode_envelope(data)


class TestIsPackaged:
    """Tests for marker detection."""

    def test_detects_marker(self) -> None:
        """Only data starting with the marker counts as packaged."""
        assert is_packaged(encode_envelope(b"a", b"b", b"c"))
        assert not is_packaged(b"raw ciphertext")
        assert not is_packaged(b"")
