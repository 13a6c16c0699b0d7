"""
ML-KEM Algorithm Suites
=======================

Closed enumeration of the KEM strength tiers supported by the envelope
protocol, with the fixed sizes each tier imposes.

Parameter Sets (FIPS 203):
    - ML-KEM-1024: NIST Security Level 5 ("high", default)
    - ML-KEM-768: NIST Security Level 3 ("balanced")
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final, Union

from pqhelper.core.exceptions import UnsupportedSuite

# ML-KEM parameters for the supported security levels
ML_KEM_768_PK_SIZE: Final[int] = 1184
ML_KEM_768_SK_SIZE: Final[int] = 2400
ML_KEM_768_CT_SIZE: Final[int] = 1088

ML_KEM_1024_PK_SIZE: Final[int] = 1568
ML_KEM_1024_SK_SIZE: Final[int] = 3168
ML_KEM_1024_CT_SIZE: Final[int] = 1568

SHARED_SECRET_SIZE: Final[int] = 32  # 256 bits, both levels


@dataclass(frozen=True, slots=True)
class SuiteParameters:
    """Fixed sizes for one suite, in bytes."""

    tier: str
    public_key_size: int
    private_key_size: int
    ciphertext_size: int
    shared_secret_size: int = SHARED_SECRET_SIZE


class AlgorithmSuite(Enum):
    """
    KEM strength tier active for one key pair or one envelope.

    The value is the wire identifier used in envelopes and key records.
    """

    ML_KEM_1024 = "ML-KEM-1024"
    ML_KEM_768 = "ML-KEM-768"

    @classmethod
    def from_identifier(cls, value: Union["AlgorithmSuite", str]) -> "AlgorithmSuite":
        """
        Resolve a suite member or wire identifier.

        Raises:
            UnsupportedSuite: If value names no known suite
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for suite in cls:
                if suite.value == value:
                    return suite
        raise UnsupportedSuite(
            f"unsupported algorithm {value!r}; supported: {', '.join(ALGORITHMS)}"
        )

    @property
    def parameters(self) -> SuiteParameters:
        return _PARAMETERS[self]

    @property
    def tier(self) -> str:
        return _PARAMETERS[self].tier

    @property
    def public_key_size(self) -> int:
        return _PARAMETERS[self].public_key_size

    @property
    def private_key_size(self) -> int:
        return _PARAMETERS[self].private_key_size

    @property
    def ciphertext_size(self) -> int:
        return _PARAMETERS[self].ciphertext_size

    def __str__(self) -> str:
        return self.value


_PARAMETERS: Final[dict[AlgorithmSuite, SuiteParameters]] = {
    AlgorithmSuite.ML_KEM_1024: SuiteParameters(
        tier="high",
        public_key_size=ML_KEM_1024_PK_SIZE,
        private_key_size=ML_KEM_1024_SK_SIZE,
        ciphertext_size=ML_KEM_1024_CT_SIZE,
    ),
    AlgorithmSuite.ML_KEM_768: SuiteParameters(
        tier="balanced",
        public_key_size=ML_KEM_768_PK_SIZE,
        private_key_size=ML_KEM_768_SK_SIZE,
        ciphertext_size=ML_KEM_768_CT_SIZE,
    ),
}

DEFAULT_SUITE: Final[AlgorithmSuite] = AlgorithmSuite.ML_KEM_1024
ALGORITHMS: Final[tuple[str, ...]] = tuple(suite.value for suite in AlgorithmSuite)

SuiteLike = Union[AlgorithmSuite, str]
