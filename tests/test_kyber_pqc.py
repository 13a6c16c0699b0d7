"""Tests for the ML-KEM adapter."""

import pytest

from conftest import FailingBackend
from pqhelper.core.crypto.kyber_pqc import EncapsulationResult, KyberKEM, PureKyberBackend
from pqhelper.core.crypto.suites import AlgorithmSuite
from pqhelper.core.exceptions import UnsupportedSuite


@pytest.fixture(scope="module", params=list(AlgorithmSuite), ids=lambda s: s.value)
def kem_and_keys(request):
    kem = KyberKEM(request.param)
    public_key, secret_key = kem.generate_keypair()
    return kem, public_key, secret_key


def test_keypair_sizes(kem_and_keys) -> None:
    kem, public_key, secret_key = kem_and_keys
    assert len(public_key) == kem.suite.public_key_size
    assert len(secret_key) == kem.suite.private_key_size


def test_encapsulate_decapsulate_agree(kem_and_keys) -> None:
    kem, public_key, secret_key = kem_and_keys
    result = kem.encapsulate(public_key)

    assert len(result.shared_secret) == 32
    assert len(result.ciphertext) == kem.suite.ciphertext_size
    assert kem.decapsulate(result.ciphertext, secret_key) == result.shared_secret


def test_encapsulation_is_randomized(kem_and_keys) -> None:
    kem, public_key, _ = kem_and_keys
    first = kem.encapsulate(public_key)
    second = kem.encapsulate(public_key)
    assert first.ciphertext != second.ciphertext
    assert first.shared_secret != second.shared_secret


def test_tampered_ciphertext_yields_different_secret(kem_and_keys) -> None:
    kem, public_key, secret_key = kem_and_keys
    result = kem.encapsulate(public_key)
    tampered = bytearray(result.ciphertext)
    tampered[0] ^= 0x01

    assert kem.decapsulate(bytes(tampered), secret_key) != result.shared_secret


def test_wrong_public_key_size_rejected(kem_and_keys) -> None:
    kem, public_key, _ = kem_and_keys
    with pytest.raises(ValueError):
        kem.encapsulate(public_key[:-1])


def test_invalid_public_key_encoding_rejected() -> None:
    kem = KyberKEM(AlgorithmSuite.ML_KEM_1024)
    with pytest.raises(ValueError):
        kem.encapsulate(b"\xff" * AlgorithmSuite.ML_KEM_1024.public_key_size)


def test_wrong_ciphertext_size_rejected(kem_and_keys) -> None:
    kem, _, secret_key = kem_and_keys
    with pytest.raises(ValueError):
        kem.decapsulate(b"\x00" * 10, secret_key)


def test_wrong_secret_key_size_rejected(kem_and_keys) -> None:
    kem, public_key, secret_key = kem_and_keys
    result = kem.encapsulate(public_key)
    with pytest.raises(ValueError):
        kem.decapsulate(result.ciphertext, secret_key[:-1])


def test_backend_wrong_sizes_rejected() -> None:
    from conftest import ShortKeyBackend

    kem = KyberKEM(AlgorithmSuite.ML_KEM_768, backend=ShortKeyBackend())
    with pytest.raises(ValueError):
        kem.generate_keypair()


def test_injected_backend_is_used() -> None:
    backend = FailingBackend(OSError("no entropy"))
    kem = KyberKEM(AlgorithmSuite.ML_KEM_1024, backend=backend)
    with pytest.raises(OSError):
        kem.generate_keypair()


def test_unknown_suite_rejected() -> None:
    with pytest.raises(UnsupportedSuite):
        KyberKEM("ML-KEM-512")


def test_encapsulation_result_repr_hides_secret() -> None:
    result = EncapsulationResult(shared_secret=b"\x99" * 32, ciphertext=b"\x01" * 8)
    assert repr(result) == "EncapsulationResult(ct_len=8)"


class RecordingBackend(PureKyberBackend):
    """kyber-py backend that remembers the secret key object it was handed."""

    def __init__(self, suite: AlgorithmSuite) -> None:
        super().__init__(suite)
        self.received = []

    def decapsulate(self, ciphertext: bytes, secret_key) -> bytes:
        self.received.append(secret_key)
        return super().decapsulate(ciphertext, secret_key)


def test_mutable_secret_key_passed_without_copy(kem_and_keys) -> None:
    kem, public_key, secret_key = kem_and_keys
    backend = RecordingBackend(kem.suite)
    recording_kem = KyberKEM(kem.suite, backend=backend)
    result = recording_kem.encapsulate(public_key)
    buffer = bytearray(secret_key)

    assert recording_kem.decapsulate(result.ciphertext, buffer) == result.shared_secret
    assert backend.received == [buffer]
    assert backend.received[0] is buffer
