"""Tests for HKDF-SHA256 and random helpers."""

import pytest

from pqhelper.core.crypto.kdf import (
    HKDF_MAX_LENGTH,
    HKDF_SALT_SIZE,
    derive_key,
    generate_salt,
    random_bytes,
)


def test_rfc5869_case_1() -> None:
    okm = derive_key(
        key_material=bytes.fromhex("0b" * 22),
        salt=bytes.fromhex("000102030405060708090a0b0c"),
        info=bytes.fromhex("f0f1f2f3f4f5f6f7f8f9"),
        length=42,
    )
    assert okm.hex() == (
        "3cb25f25faacd57a90434f64d0362f2a"
        "2d2d0a90cf1a5a4c5db02d56ecc4c5bf"
        "34007208d5b887185865"
    )


def test_deterministic() -> None:
    secret = bytearray(b"\x07" * 32)
    salt = b"\x01" * HKDF_SALT_SIZE
    assert derive_key(secret, salt, b"ctx", 32) == derive_key(secret, salt, b"ctx", 32)


def test_salt_and_info_separate_keys() -> None:
    secret = b"\x07" * 32
    base = derive_key(secret, b"\x01" * 32, b"ChaCha20-Poly1305", 32)
    assert derive_key(secret, b"\x02" * 32, b"ChaCha20-Poly1305", 32) != base
    assert derive_key(secret, b"\x01" * 32, b"AES-256-GCM", 32) != base


def test_empty_key_material_rejected() -> None:
    with pytest.raises(ValueError):
        derive_key(b"", b"\x01" * 32, b"ctx", 32)


@pytest.mark.parametrize("length", [0, -1, HKDF_MAX_LENGTH + 1])
def test_length_out_of_range_rejected(length: int) -> None:
    with pytest.raises(ValueError):
        derive_key(b"\x07" * 32, b"\x01" * 32, b"ctx", length)


def test_generate_salt() -> None:
    first, second = generate_salt(), generate_salt()
    assert len(first) == HKDF_SALT_SIZE
    assert first != second


def test_random_bytes() -> None:
    assert len(random_bytes(12)) == 12
    assert random_bytes(0) == b""
    with pytest.raises(ValueError):
        random_bytes(-1)
