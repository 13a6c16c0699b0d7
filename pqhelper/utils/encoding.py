"""
Text Encoding Utilities
=======================

Strict Base64 (RFC 4648, standard alphabet, padded) used for every
byte-bearing field in envelopes and exported key records.
"""

from __future__ import annotations

import binascii
import re
from base64 import b64decode as _b64decode, b64encode as _b64encode
from typing import Final

_BASE64_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z0-9+/]+={0,2}$")


def b64encode(data: bytes | bytearray) -> str:
    """Encode bytes as a standard padded Base64 string."""
    return _b64encode(bytes(data)).decode("ascii")


def b64decode(text: str) -> bytes:
    """
    Decode a Base64 string, rejecting anything outside the standard alphabet.

    Raises:
        ValueError: If text is not a non-empty, well-formed Base64 string
    """
    if not isinstance(text, str):
        raise ValueError("Base64 input must be a string")
    if not _BASE64_PATTERN.fullmatch(text):
        raise ValueError("Input is not valid Base64")
    try:
        return _b64decode(text, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Input is not valid Base64: {e}") from e


def is_base64(text: object) -> bool:
    """Check whether text is a non-empty, well-formed Base64 string."""
    if not isinstance(text, str):
        return False
    try:
        b64decode(text)
    except ValueError:
        return False
    return True
