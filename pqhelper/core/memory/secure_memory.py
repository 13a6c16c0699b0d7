"""
Key Material Buffers
====================

SecureBuffer owns one bytearray of key material (a KEM shared secret, an
HKDF output, a decoded private key) and zeroes it when released.
MemoryGuard collects the buffers of a single encrypt or decrypt call and
releases all of them when the call ends, whether it returned or raised.

Pages are mlock'ed where the platform allows it so the secret is not
written to swap. Failure to lock is not an error; it is reported through
SecureBuffer.is_locked.
"""

from __future__ import annotations

import ctypes
import platform
from typing import Final, List, Optional

from pqhelper.core.memory.zeroization import secure_zero

_SYSTEM: Final[str] = platform.system()
_LIBC_NAMES: Final[dict[str, str]] = {"Linux": "libc.so.6", "Darwin": "libc.dylib"}


def _buffer_address(buffer: bytearray) -> int:
    return ctypes.addressof((ctypes.c_char * len(buffer)).from_buffer(buffer))


def _set_page_lock(buffer: bytearray, locked: bool) -> bool:
    """mlock/munlock (VirtualLock/VirtualUnlock on Windows) the buffer's pages."""
    address = ctypes.c_void_p(_buffer_address(buffer))
    size = ctypes.c_size_t(len(buffer))
    try:
        if _SYSTEM == "Windows":
            kernel32 = ctypes.windll.kernel32
            call = kernel32.VirtualLock if locked else kernel32.VirtualUnlock
            return bool(call(address, size))
        libc_name = _LIBC_NAMES.get(_SYSTEM)
        if libc_name is None:
            return False
        libc = ctypes.CDLL(libc_name, use_errno=True)
        call = libc.mlock if locked else libc.munlock
        return call(address, size) == 0
    except (OSError, AttributeError):
        return False


class SecureBuffer:
    """
    A bytearray of key material that is zeroed on wipe() or context exit.

    .data hands out the live bytearray, not a copy, so primitives can read
    it directly. After wipe() the buffer is unusable.

    Usage:
        with SecureBuffer.from_bytes(shared_secret) as secret:
            message_key = derive_message_key(secret.data, salt)
    """

    __slots__ = ("_buffer", "_wiped", "_locked", "__weakref__")

    def __init__(self, size: int = 0, lock_memory: bool = True) -> None:
        if size < 0:
            raise ValueError(f"SecureBuffer size must be >= 0, got {size}")

        self._buffer = bytearray(size)
        self._wiped = False
        self._locked = bool(lock_memory and size) and _set_page_lock(self._buffer, True)

    @classmethod
    def from_bytes(
        cls,
        data: bytes | bytearray | memoryview,
        lock_memory: bool = True,
    ) -> "SecureBuffer":
        """Copy data into a new buffer. The source is left untouched."""
        buffer = cls(size=len(data), lock_memory=lock_memory)
        buffer._buffer[:] = data
        return buffer

    @property
    def data(self) -> bytearray:
        if self._wiped:
            raise ValueError("SecureBuffer was already wiped")
        return self._buffer

    @property
    def is_wiped(self) -> bool:
        return self._wiped

    @property
    def is_locked(self) -> bool:
        return self._locked

    def wipe(self) -> None:
        """Zero the contents, then drop the page lock. Safe to call twice."""
        if self._wiped:
            return

        secure_zero(self._buffer)
        if self._locked:
            _set_page_lock(self._buffer, False)
            self._locked = False
        self._wiped = True

    def __enter__(self) -> "SecureBuffer":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.wipe()

    def __len__(self) -> int:
        return len(self._buffer)

    def __repr__(self) -> str:
        if self._wiped:
            return "SecureBuffer(WIPED)"
        return f"SecureBuffer(size={len(self._buffer)}, locked={self._locked})"


class MemoryGuard:
    """
    Per-operation owner of every SecureBuffer created during that operation.

    Usage:
        with MemoryGuard() as guard:
            secret = guard.adopt(shared_secret)
            message_key = guard.adopt(derive_message_key(secret.data, salt))
    """

    __slots__ = ("_tracked",)

    def __init__(self) -> None:
        self._tracked: List[SecureBuffer] = []

    def track(self, buffer: SecureBuffer) -> SecureBuffer:
        """Register buffer for wiping on exit and return it."""
        self._tracked.append(buffer)
        return buffer

    def adopt(self, data: bytes | bytearray | memoryview) -> SecureBuffer:
        """
        Take a copy of data into a tracked SecureBuffer.

        A bytearray source is zeroed after the copy; immutable bytes can
        only be left to the garbage collector.
        """
        buffer = self.track(SecureBuffer.from_bytes(data))
        if isinstance(data, bytearray):
            secure_zero(data)
        return buffer

    @property
    def tracked(self) -> tuple[SecureBuffer, ...]:
        return tuple(self._tracked)

    def wipe_all(self) -> None:
        """Wipe every tracked buffer; the first failure is re-raised at the end."""
        first_error: Optional[BaseException] = None
        for buffer in self._tracked:
            try:
                buffer.wipe()
            except Exception as exc:
                first_error = first_error or exc
        self._tracked.clear()
        if first_error is not None:
            raise first_error

    def __enter__(self) -> "MemoryGuard":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.wipe_all()
