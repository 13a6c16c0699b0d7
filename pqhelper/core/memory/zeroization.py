"""
Zeroization
===========

Overwrites mutable buffers that held shared secrets, derived message keys
or decoded private keys.

Only mutable buffers can be wiped. Immutable bytes returned by kyber-py or
cryptography stay in memory until collected; wiping the copies we own is
the most Python allows.
"""

from __future__ import annotations

import ctypes
from contextlib import contextmanager
from typing import Final, Iterator

# memset passes applied to bytearrays
WIPE_PATTERNS: Final[tuple[int, ...]] = (0x00, 0xFF, 0x00)


def _memset_passes(buffer: bytearray) -> bool:
    try:
        view = (ctypes.c_char * len(buffer)).from_buffer(buffer)
    except (TypeError, ValueError, BufferError):
        return False

    address = ctypes.addressof(view)
    for pattern in WIPE_PATTERNS:
        ctypes.memset(address, pattern, len(buffer))
    del view
    return True


def secure_zero(data: bytearray | memoryview) -> None:
    """
    Overwrite a mutable buffer with zeros in place.

    bytearrays get several memset passes ending in zero; memoryviews
    (and bytearrays ctypes cannot map) are zeroed by slice assignment.
    """
    size = len(data)
    if not size:
        return

    if isinstance(data, bytearray) and _memset_passes(data):
        return

    data[:] = bytes(size)


def is_zeroed(data: bytes | bytearray | memoryview) -> bool:
    """True when data holds no non-zero byte (an empty buffer counts)."""
    return not any(data)


@contextmanager
def ZeroizeContext(*buffers: bytearray) -> Iterator[None]:
    """
    Zero the given buffers when the block exits, normally or not.

    Usage:
        decoded = bytearray(b64decode(private_key_text))
        with ZeroizeContext(decoded):
            shared_secret = kem.decapsulate(ciphertext, decoded)
    """
    try:
        yield
    finally:
        for buffer in buffers:
            secure_zero(buffer)
