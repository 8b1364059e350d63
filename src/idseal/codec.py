"""Hex encoding helpers shared by every idseal component."""

import re

from .types import InvalidEncodingError


_HEX_RE = re.compile(r"[0-9a-fA-F]+")


def hex_to_bytes(text: str) -> bytes:
    """
    Decode hex text into bytes.

    Surrounding whitespace and an optional ``0x`` prefix are ignored.

    Args:
        text: Hex string, either case

    Returns:
        Decoded bytes

    Raises:
        InvalidEncodingError: If the text is empty, has odd length or
            contains a non-hex character
    """
    clean = text.strip()
    if clean[:2].lower() == "0x":
        clean = clean[2:]

    if not clean:
        raise InvalidEncodingError("empty")
    if len(clean) % 2 != 0:
        raise InvalidEncodingError("odd_length")
    if not _HEX_RE.fullmatch(clean):
        raise InvalidEncodingError("non_hex")

    return bytes.fromhex(clean)


def bytes_to_hex(data: bytes) -> str:
    """Encode bytes as lowercase hex without separators."""
    return bytes(data).hex()
