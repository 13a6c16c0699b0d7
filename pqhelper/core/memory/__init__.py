"""
Key material lifetime helpers: wipeable buffers and a per-operation guard.

Wiping is best effort. Immutable bytes produced by third-party primitives
cannot be cleared from Python.
"""

from pqhelper.core.memory.secure_memory import (
    SecureBuffer,
    MemoryGuard,
)
from pqhelper.core.memory.zeroization import (
    secure_zero,
    is_zeroed,
    ZeroizeContext,
)

__all__ = [
    "SecureBuffer",
    "MemoryGuard",
    "secure_zero",
    "is_zeroed",
    "ZeroizeContext",
]
