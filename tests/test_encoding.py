"""Tests for strict Base64 helpers."""

import pytest

from pqhelper.utils.encoding import b64decode, b64encode, is_base64


def test_encode_standard_padded() -> None:
    assert b64encode(b"hello") == "aGVsbG8="
    assert b64encode(bytearray(b"\xfb\xff")) == "+/8="


def test_decode_roundtrip() -> None:
    data = bytes(range(256))
    assert b64decode(b64encode(data)) == data


@pytest.mark.parametrize(
    "text",
    [
        "",
        "aGVsbG8",  # missing padding
        "aGVs bG8=",
        "aGVsbG8=\n",
        "aGVs-G8=",  # URL-safe alphabet
        "====",
        "not base64!",
    ],
)
def test_decode_rejects_malformed(text: str) -> None:
    with pytest.raises(ValueError):
        b64decode(text)
    assert not is_base64(text)


@pytest.mark.parametrize("value", [None, b"aGVsbG8=", 42])
def test_decode_rejects_non_text(value) -> None:
    with pytest.raises(ValueError):
        b64decode(value)
    assert not is_base64(value)


def test_is_base64_accepts_valid() -> None:
    assert is_base64("aGVsbG8=")
