"""
ML-KEM Adapter
==============

Wraps an ML-KEM (FIPS 203) implementation behind a size-checked
interface bound to one AlgorithmSuite.

    ML-KEM-1024   NIST category 5   pk 1568 / sk 3168 / ct 1568
    ML-KEM-768    NIST category 3   pk 1184 / sk 2400 / ct 1088

The shared secret is always 32 bytes and goes through HKDF before use.

Note on wrong keys: ML-KEM decapsulation uses implicit rejection. A
secret key that does not match the ciphertext yields an unrelated
pseudorandom secret, not an error. The AEAD tag is what catches it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Final, Optional, Tuple

from kyber_py.ml_kem import ML_KEM_768, ML_KEM_1024

from pqhelper.core.crypto.suites import AlgorithmSuite, SuiteLike
from pqhelper.core.exceptions import UnsupportedSuite

_PARAMETER_SETS: Final[dict[AlgorithmSuite, Any]] = {
    AlgorithmSuite.ML_KEM_1024: ML_KEM_1024,
    AlgorithmSuite.ML_KEM_768: ML_KEM_768,
}


@dataclass(frozen=True, slots=True)
class EncapsulationResult:
    """Sender side output: the secret to derive from and the ciphertext to ship."""

    shared_secret: bytes
    ciphertext: bytes

    def __repr__(self) -> str:
        return f"EncapsulationResult(ct_len={len(self.ciphertext)})"


class KyberBackend(ABC):
    """
    Raw ML-KEM operations for a single parameter set.

    Implementations need not check sizes; KyberKEM does that around them.
    Tests substitute failing or misbehaving backends through this seam.
    """

    @abstractmethod
    def keygen(self) -> Tuple[bytes, bytes]:
        """-> (encapsulation key, decapsulation key)"""

    @abstractmethod
    def encapsulate(self, public_key: bytes) -> Tuple[bytes, bytes]:
        """-> (shared secret, ciphertext)"""

    @abstractmethod
    def decapsulate(self, ciphertext: bytes, secret_key: bytes | bytearray) -> bytes:
        """-> shared secret"""


class PureKyberBackend(KyberBackend):
    """
    kyber-py parameter sets.

    Stateless apart from os.urandom, so one instance is safe to share
    between threads.
    """

    __slots__ = ("_kem",)

    def __init__(self, suite: AlgorithmSuite) -> None:
        try:
            self._kem = _PARAMETER_SETS[suite]
        except KeyError:
            raise UnsupportedSuite(f"kyber-py has no parameter set for {suite!r}") from None

    def keygen(self) -> Tuple[bytes, bytes]:
        ek, dk = self._kem.keygen()
        return bytes(ek), bytes(dk)

    def encapsulate(self, public_key: bytes) -> Tuple[bytes, bytes]:
        # kyber-py raises ValueError when the key fails the modulus check
        shared_secret, ciphertext = self._kem.encaps(public_key)
        return bytes(shared_secret), bytes(ciphertext)

    def decapsulate(self, ciphertext: bytes, secret_key: bytes | bytearray) -> bytes:
        return bytes(self._kem.decaps(secret_key, ciphertext))


def _expect_size(label: str, value: bytes, expected: int) -> None:
    if len(value) != expected:
        raise ValueError(f"{label} must be {expected} bytes, got {len(value)}")


class KyberKEM:
    """
    ML-KEM bound to one suite, with every input and output size checked.

        kem = KyberKEM(AlgorithmSuite.ML_KEM_1024)
        public_key, secret_key = kem.generate_keypair()

        sent = kem.encapsulate(public_key)           # sender
        secret = kem.decapsulate(sent.ciphertext, secret_key)   # recipient
        assert secret == sent.shared_secret
    """

    __slots__ = ("_suite", "_backend")

    def __init__(
        self,
        suite: SuiteLike = AlgorithmSuite.ML_KEM_1024,
        backend: Optional[KyberBackend] = None,
    ) -> None:
        self._suite = AlgorithmSuite.from_identifier(suite)
        self._backend = backend if backend is not None else PureKyberBackend(self._suite)

    @property
    def suite(self) -> AlgorithmSuite:
        return self._suite

    def generate_keypair(self) -> Tuple[bytes, bytes]:
        """
        Returns:
            (public_key, secret_key)

        Raises:
            ValueError: If the backend hands back keys of the wrong size
        """
        public_key, secret_key = self._backend.keygen()
        _expect_size("generated public key", public_key, self._suite.public_key_size)
        _expect_size("generated secret key", secret_key, self._suite.private_key_size)
        return public_key, secret_key

    def encapsulate(self, public_key: bytes) -> EncapsulationResult:
        """
        Raises:
            ValueError: If public_key has the wrong size or is rejected
                by the backend as not a valid encapsulation key
        """
        _expect_size("public key", public_key, self._suite.public_key_size)
        shared_secret, ciphertext = self._backend.encapsulate(bytes(public_key))
        return EncapsulationResult(shared_secret=shared_secret, ciphertext=ciphertext)

    def decapsulate(self, ciphertext: bytes, secret_key: bytes | bytearray) -> bytes:
        """
        Raises:
            ValueError: If a size is wrong, or the secret key fails the
                backend's embedded hash check
        """
        _expect_size("KEM ciphertext", ciphertext, self._suite.ciphertext_size)
        _expect_size("secret key", secret_key, self._suite.private_key_size)
        return self._backend.decapsulate(bytes(ciphertext), secret_key)
