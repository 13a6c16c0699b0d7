"""
AEAD Adapter
============

ChaCha20-Poly1305 (RFC 8439) as the envelope's message cipher.

The message key always comes from HKDF over a fresh KEM shared secret,
so every (key, nonce) pair is used once. The 16-byte Poly1305 tag is
appended to the ciphertext, which is what goes into the envelope's "c"
field.
"""

from __future__ import annotations

import secrets
from typing import Final, Optional

from cryptography.hazmat.primitives.ciphers.aead import ChaCha20Poly1305

CHACHA_KEY_SIZE: Final[int] = 32
CHACHA_NONCE_SIZE: Final[int] = 12
CHACHA_TAG_SIZE: Final[int] = 16


def _check_key_and_nonce(key: bytes | bytearray, nonce: bytes) -> None:
    if len(key) != CHACHA_KEY_SIZE:
        raise ValueError(f"ChaCha20 key is {len(key)} bytes, expected {CHACHA_KEY_SIZE}")
    if len(nonce) != CHACHA_NONCE_SIZE:
        raise ValueError(f"ChaCha20 nonce is {len(nonce)} bytes, expected {CHACHA_NONCE_SIZE}")


class ChaCha20Cipher:
    """
    Seal and open messages under a caller-supplied key and nonce.

    Usage:
        aead = ChaCha20Cipher()
        nonce = aead.generate_nonce()

        sealed = aead.seal(message_key, nonce, b"hello")
        assert aead.open(message_key, nonce, sealed) == b"hello"
    """

    __slots__ = ()

    key_size: Final[int] = CHACHA_KEY_SIZE
    nonce_size: Final[int] = CHACHA_NONCE_SIZE
    tag_size: Final[int] = CHACHA_TAG_SIZE

    @staticmethod
    def generate_nonce() -> bytes:
        """Fresh random 12-byte nonce from the OS CSPRNG."""
        return secrets.token_bytes(CHACHA_NONCE_SIZE)

    def seal(
        self,
        key: bytes | bytearray,
        nonce: bytes,
        plaintext: bytes,
        aad: Optional[bytes] = None,
    ) -> bytes:
        """
        Encrypt and authenticate plaintext.

        Returns:
            ciphertext || tag (len(plaintext) + 16 bytes)

        Raises:
            ValueError: If key or nonce has the wrong size
        """
        _check_key_and_nonce(key, nonce)
        return ChaCha20Poly1305(key).encrypt(nonce, plaintext, aad)

    def open(
        self,
        key: bytes | bytearray,
        nonce: bytes,
        sealed: bytes,
        aad: Optional[bytes] = None,
    ) -> bytes:
        """
        Verify the tag, then decrypt.

        Nothing is returned unless the tag verifies.

        Raises:
            ValueError: If key or nonce has the wrong size, or sealed is
                shorter than the tag
            cryptography.exceptions.InvalidTag: If authentication fails
        """
        _check_key_and_nonce(key, nonce)
        if len(sealed) < CHACHA_TAG_SIZE:
            raise ValueError(f"sealed data is shorter than the {CHACHA_TAG_SIZE}-byte tag")

        return ChaCha20Poly1305(key).decrypt(nonce, sealed, aad)
