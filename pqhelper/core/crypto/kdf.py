"""
Key Derivation Functions
========================

Turns a KEM shared secret into the AEAD key, and supplies the salts.

Implements:
    - HKDF-SHA256 (RFC 5869) for key derivation
    - CSPRNG helpers for salts and other random values
"""

from __future__ import annotations

import secrets
from typing import Final

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

# HKDF parameters
HKDF_SALT_SIZE: Final[int] = 32
HKDF_MAX_LENGTH: Final[int] = 255 * 32  # RFC 5869 limit for SHA-256


def random_bytes(length: int) -> bytes:
    """
    Generate cryptographically secure random bytes.

    Uses the OS CSPRNG via the secrets module, which is safe to call
    from concurrent threads.
    """
    if length < 0:
        raise ValueError("Length cannot be negative")
    return secrets.token_bytes(length)


def generate_salt() -> bytes:
    """Generate a fresh 32-byte HKDF salt."""
    return random_bytes(HKDF_SALT_SIZE)


def derive_key(
    key_material: bytes | bytearray,
    salt: bytes,
    info: bytes,
    length: int,
) -> bytes:
    """
    Derive a key using HKDF-SHA256.

    Deterministic: identical (key_material, salt, info, length) always
    yield the same key.

    Args:
        key_material: Input key material (e.g. a KEM shared secret)
        salt: Random salt
        info: Context/application info binding the key to its use
        length: Output length in bytes

    Returns:
        Derived key bytes

    Raises:
        ValueError: If inputs are empty or length is out of range
    """
    if not key_material:
        raise ValueError("Key material cannot be empty")
    if not 0 < length <= HKDF_MAX_LENGTH:
        raise ValueError(f"Length must be between 1 and {HKDF_MAX_LENGTH}")

    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=length,
        salt=salt,
        info=info,
    )
    return hkdf.derive(key_material)
