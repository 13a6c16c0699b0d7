"""Tests for the ChaCha20-Poly1305 adapter."""

import pytest
from cryptography.exceptions import InvalidTag

from pqhelper.core.crypto import chacha20
from pqhelper.core.crypto.chacha20 import (
    CHACHA_KEY_SIZE,
    CHACHA_NONCE_SIZE,
    CHACHA_TAG_SIZE,
    ChaCha20Cipher,
)

KEY = bytes(range(CHACHA_KEY_SIZE))


@pytest.fixture
def aead() -> ChaCha20Cipher:
    return ChaCha20Cipher()


def test_seal_open_roundtrip(aead: ChaCha20Cipher) -> None:
    nonce = aead.generate_nonce()
    sealed = aead.seal(KEY, nonce, b"attack at dawn")

    assert len(sealed) == len(b"attack at dawn") + CHACHA_TAG_SIZE
    assert aead.open(KEY, nonce, sealed) == b"attack at dawn"


def test_empty_plaintext_is_tag_only(aead: ChaCha20Cipher) -> None:
    nonce = aead.generate_nonce()
    sealed = aead.seal(bytearray(KEY), nonce, b"")
    assert len(sealed) == CHACHA_TAG_SIZE
    assert aead.open(bytearray(KEY), nonce, sealed) == b""


def test_nonces_are_fresh(aead: ChaCha20Cipher) -> None:
    nonces = {aead.generate_nonce() for _ in range(32)}
    assert len(nonces) == 32
    assert all(len(n) == CHACHA_NONCE_SIZE for n in nonces)


def test_tampered_ciphertext_fails(aead: ChaCha20Cipher) -> None:
    nonce = aead.generate_nonce()
    sealed = bytearray(aead.seal(KEY, nonce, b"message"))
    sealed[0] ^= 0x80
    with pytest.raises(InvalidTag):
        aead.open(KEY, nonce, bytes(sealed))


def test_wrong_key_fails(aead: ChaCha20Cipher) -> None:
    nonce = aead.generate_nonce()
    sealed = aead.seal(KEY, nonce, b"message")
    with pytest.raises(InvalidTag):
        aead.open(bytes(CHACHA_KEY_SIZE), nonce, sealed)


def test_aad_mismatch_fails(aead: ChaCha20Cipher) -> None:
    nonce = aead.generate_nonce()
    sealed = aead.seal(KEY, nonce, b"message", aad=b"context-a")
    with pytest.raises(InvalidTag):
        aead.open(KEY, nonce, sealed, aad=b"context-b")


@pytest.mark.parametrize(
    "key, nonce",
    [
        (KEY[:16], bytes(CHACHA_NONCE_SIZE)),
        (KEY, bytes(8)),
    ],
)
def test_bad_sizes_rejected(aead: ChaCha20Cipher, key: bytes, nonce: bytes) -> None:
    with pytest.raises(ValueError):
        aead.seal(key, nonce, b"x")
    with pytest.raises(ValueError):
        aead.open(key, nonce, bytes(CHACHA_TAG_SIZE))


def test_short_ciphertext_rejected(aead: ChaCha20Cipher) -> None:
    with pytest.raises(ValueError):
        aead.open(KEY, bytes(CHACHA_NONCE_SIZE), bytes(CHACHA_TAG_SIZE - 1))


def test_bytearray_key_used_in_place(aead: ChaCha20Cipher, monkeypatch: pytest.MonkeyPatch) -> None:
    received = []
    real_aead = chacha20.ChaCha20Poly1305

    def recording(key):
        received.append(key)
        return real_aead(key)

    monkeypatch.setattr(chacha20, "ChaCha20Poly1305", recording)
    key = bytearray(KEY)
    nonce = aead.generate_nonce()

    sealed = aead.seal(key, nonce, b"attack at dawn")
    assert aead.open(key, nonce, sealed) == b"attack at dawn"
    assert len(received) == 2
    assert all(k is key for k in received)
