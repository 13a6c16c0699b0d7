"""Shared fixtures for the pqhelper test suite."""

from __future__ import annotations

from typing import List, Tuple

import pytest

from pqhelper.core.config import SecureConfig
from pqhelper.core.crypto.hybrid_engine import HybridCipher
from pqhelper.core.crypto.key_manager import KeyManager, KeyPair
from pqhelper.core.crypto.kyber_pqc import KyberBackend
from pqhelper.core.crypto.suites import AlgorithmSuite
from pqhelper.core.memory.secure_memory import MemoryGuard, SecureBuffer

HELLO = "Hello, quantum-resistant world!"


class FailingBackend(KyberBackend):
    """KEM backend whose every operation raises."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error or RuntimeError("backend failure")

    def keygen(self) -> Tuple[bytes, bytes]:
        raise self.error

    def encapsulate(self, public_key: bytes) -> Tuple[bytes, bytes]:
        raise self.error

    def decapsulate(self, ciphertext: bytes, secret_key: bytes) -> bytes:
        raise self.error


class ShortKeyBackend(KyberBackend):
    """KEM backend that returns truncated keys."""

    def keygen(self) -> Tuple[bytes, bytes]:
        return b"\x01" * 16, b"\x02" * 16

    def encapsulate(self, public_key: bytes) -> Tuple[bytes, bytes]:
        raise NotImplementedError

    def decapsulate(self, ciphertext: bytes, secret_key: bytes) -> bytes:
        raise NotImplementedError


@pytest.fixture(autouse=True)
def reset_config():
    SecureConfig.reset_instance()
    yield
    SecureConfig.reset_instance()


@pytest.fixture(scope="session")
def key_manager() -> KeyManager:
    return KeyManager()


# Pure-Python ML-KEM is slow; generate each suite's key pair once.
@pytest.fixture(scope="session")
def high_key_pair(key_manager: KeyManager) -> KeyPair:
    return key_manager.generate(AlgorithmSuite.ML_KEM_1024)


@pytest.fixture(scope="session")
def balanced_key_pair(key_manager: KeyManager) -> KeyPair:
    return key_manager.generate(AlgorithmSuite.ML_KEM_768)


@pytest.fixture(scope="session", params=list(AlgorithmSuite), ids=lambda s: s.value)
def suite_key_pair(
    request: pytest.FixtureRequest,
    high_key_pair: KeyPair,
    balanced_key_pair: KeyPair,
) -> KeyPair:
    """Key pair for each supported suite."""
    if request.param is AlgorithmSuite.ML_KEM_1024:
        return high_key_pair
    return balanced_key_pair


@pytest.fixture
def cipher() -> HybridCipher:
    return HybridCipher()


@pytest.fixture
def tracked_buffers(monkeypatch: pytest.MonkeyPatch) -> List[SecureBuffer]:
    """Collect every SecureBuffer registered with any MemoryGuard."""
    buffers: List[SecureBuffer] = []
    original_track = MemoryGuard.track

    def track(self: MemoryGuard, buffer: SecureBuffer) -> SecureBuffer:
        buffers.append(buffer)
        return original_track(self, buffer)

    monkeypatch.setattr(MemoryGuard, "track", track)
    return buffers
