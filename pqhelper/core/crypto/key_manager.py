"""
Key Lifecycle Management
========================

Generates, exports, imports and validates ML-KEM key pairs.

Exported Record Format (JSON):
    {
        "publicKey": "<base64>",
        "privateKey": "<base64>",
        "algorithm": "ML-KEM-1024",     # optional, legacy records omit it
        "timestamp": 1700000000000,     # ms since epoch
        "version": "1.0.0"
    }

Legacy Compatibility:
    A record without an algorithm always imports as ML-KEM-1024. This is
    a fixed rule, not a guess from the key length.

WARNING:
    - Exported records contain the private key in clear Base64
    - Storage policy for records is the caller's concern
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Final, Mapping, Optional, Union

from pqhelper.core.crypto.kyber_pqc import KyberBackend, KyberKEM
from pqhelper.core.crypto.suites import (
    DEFAULT_SUITE,
    AlgorithmSuite,
    SuiteLike,
)
from pqhelper.core.exceptions import (
    KeyGenerationError,
    MalformedKeyRecord,
    UnsupportedSuite,
)
from pqhelper.core.memory.zeroization import is_zeroed, secure_zero
from pqhelper.utils.encoding import b64decode, b64encode
from pqhelper.utils.validators import require_string_field

_LOGGER: Final = logging.getLogger(__name__)

KEY_RECORD_VERSION: Final[str] = "1.0.0"
LEGACY_DEFAULT_SUITE: Final[AlgorithmSuite] = AlgorithmSuite.ML_KEM_1024


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


@dataclass(frozen=True, slots=True)
class KeySizes:
    """Key and ciphertext sizes for one suite, in bytes."""

    public_key_size: int
    private_key_size: int
    ciphertext_size: int


@dataclass(frozen=True)
class KeyPair:
    """
    ML-KEM key pair bound to exactly one suite.

    Attributes:
        public_key: Used for encapsulation (can be shared)
        private_key: Used for decapsulation; mutable so wipe() can zero it
        suite: The suite both keys belong to

    The pair is never mutated apart from wipe(). The caller owns its
    lifetime and should wipe() it once the private key is no longer needed.
    """

    public_key: bytes
    private_key: bytearray
    suite: AlgorithmSuite

    # holds a mutable secret; not usable as a dict key or set member
    __hash__ = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        object.__setattr__(self, "public_key", bytes(self.public_key))
        if not isinstance(self.private_key, bytearray):
            object.__setattr__(self, "private_key", bytearray(self.private_key))
        object.__setattr__(self, "suite", AlgorithmSuite.from_identifier(self.suite))

    @property
    def is_well_formed(self) -> bool:
        """True when both key lengths match the suite's fixed sizes."""
        return (
            len(self.public_key) == self.suite.public_key_size
            and len(self.private_key) == self.suite.private_key_size
        )

    @property
    def public_key_b64(self) -> str:
        return b64encode(self.public_key)

    @property
    def private_key_b64(self) -> str:
        return b64encode(self.private_key)

    @property
    def is_wiped(self) -> bool:
        return is_zeroed(self.private_key)

    def wipe(self) -> None:
        """Zero the private key in place."""
        secure_zero(self.private_key)

    def __repr__(self) -> str:
        """Safe representation without exposing key material."""
        return f"KeyPair(suite={self.suite.value}, pk_len={len(self.public_key)})"


@dataclass(frozen=True, slots=True)
class ExportedKeyRecord:
    """
    Storage-agnostic projection of a KeyPair with provenance metadata.

    Attributes:
        public_key: Base64 public key
        private_key: Base64 private key
        suite: Suite of the key pair
        created_at: Export time, ms since epoch
        format_version: Record format tag
    """

    public_key: str
    private_key: str
    suite: AlgorithmSuite
    created_at: int
    format_version: str = KEY_RECORD_VERSION

    def to_dict(self) -> dict[str, Any]:
        """Persisted shape of the record."""
        return {
            "publicKey": self.public_key,
            "privateKey": self.private_key,
            "algorithm": self.suite.value,
            "timestamp": self.created_at,
            "version": self.format_version,
        }

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def __repr__(self) -> str:
        """Safe representation."""
        return (
            f"ExportedKeyRecord(suite={self.suite.value}, "
            f"created_at={self.created_at}, version={self.format_version})"
        )


KeyRecordLike = Union[ExportedKeyRecord, Mapping[str, Any], str, bytes]


class KeyManager:
    """
    Key Lifecycle Manager.

    Stateless with respect to call history: every generate() call asks
    the KEM for fresh key material, nothing is cached or pooled.

    Usage:
        manager = KeyManager()

        key_pair = manager.generate(AlgorithmSuite.ML_KEM_768)
        record = manager.export(key_pair)
        restored = manager.import_record(record.to_dict())
        assert restored == key_pair
    """

    __slots__ = ("_backends",)

    def __init__(
        self,
        backends: Optional[Mapping[AlgorithmSuite, KyberBackend]] = None,
    ) -> None:
        """
        Args:
            backends: Optional per-suite KEM backend overrides
        """
        self._backends = dict(backends or {})

    def kem(self, suite: SuiteLike) -> KyberKEM:
        """KEM adapter for a suite, honoring backend overrides."""
        resolved = AlgorithmSuite.from_identifier(suite)
        return KyberKEM(resolved, backend=self._backends.get(resolved))

    def generate(self, suite: SuiteLike = DEFAULT_SUITE) -> KeyPair:
        """
        Generate a new key pair.

        Raises:
            UnsupportedSuite: If suite is not recognized
            KeyGenerationError: If the KEM fails or returns wrong-size keys
        """
        kem = self.kem(suite)

        try:
            public_key, private_key = kem.generate_keypair()
        except Exception as e:
            raise KeyGenerationError(
                f"failed to generate {kem.suite.value} key pair: {e.__class__.__name__}"
            ) from e

        _LOGGER.info("Generated %s key pair", kem.suite.value)
        return KeyPair(public_key=public_key, private_key=private_key, suite=kem.suite)

    def export(self, key_pair: KeyPair) -> ExportedKeyRecord:
        """Export a key pair with the current timestamp and format version."""
        return ExportedKeyRecord(
            public_key=key_pair.public_key_b64,
            private_key=key_pair.private_key_b64,
            suite=key_pair.suite,
            created_at=_now_ms(),
        )

    def import_record(self, record: KeyRecordLike) -> KeyPair:
        """
        Import a key pair from an exported record.

        Key lengths are not checked here; use validate_public_key() or
        KeyPair.is_well_formed.

        Raises:
            MalformedKeyRecord: If a key is missing, empty, not a string or
                not Base64, or the algorithm field is not a string
            UnsupportedSuite: If the declared algorithm is not recognized
        """
        data = _record_mapping(record)

        public_text = require_string_field(data, "publicKey", MalformedKeyRecord)
        private_text = require_string_field(data, "privateKey", MalformedKeyRecord)

        algorithm = data.get("algorithm")
        if algorithm is None or algorithm == "":
            suite = LEGACY_DEFAULT_SUITE
            _LOGGER.debug("Key record has no algorithm, using %s", suite.value)
        elif not isinstance(algorithm, str):
            raise MalformedKeyRecord("algorithm must be a string")
        else:
            suite = AlgorithmSuite.from_identifier(algorithm)

        try:
            public_key = b64decode(public_text)
        except ValueError as e:
            raise MalformedKeyRecord("publicKey is not valid Base64") from e

        try:
            private_key = bytearray(b64decode(private_text))
        except ValueError as e:
            raise MalformedKeyRecord("privateKey is not valid Base64") from e

        return KeyPair(public_key=public_key, private_key=private_key, suite=suite)

    def validate_public_key(self, public_key: Any, suite: SuiteLike = DEFAULT_SUITE) -> bool:
        """
        Best-effort check of a Base64 public key. Never raises.

        Returns False for non-string or empty input, invalid Base64, a
        decoded length that does not match the suite, an all-zero key, or
        an unrecognized suite. This is a sanity filter, not a proof of
        cryptographic validity.
        """
        try:
            resolved = AlgorithmSuite.from_identifier(suite)
        except UnsupportedSuite:
            return False

        if not isinstance(public_key, str) or not public_key:
            return False

        try:
            key_bytes = b64decode(public_key)
        except ValueError:
            return False

        return is_plausible_public_key(key_bytes, resolved)

    def get_key_sizes(self, suite: SuiteLike = DEFAULT_SUITE) -> KeySizes:
        """
        Raises:
            UnsupportedSuite: If suite is not recognized
        """
        resolved = AlgorithmSuite.from_identifier(suite)
        return KeySizes(
            public_key_size=resolved.public_key_size,
            private_key_size=resolved.private_key_size,
            ciphertext_size=resolved.ciphertext_size,
        )


def is_plausible_public_key(key_bytes: bytes, suite: AlgorithmSuite) -> bool:
    """Length matches the suite and the key is not all zeros."""
    return len(key_bytes) == suite.public_key_size and not is_zeroed(key_bytes)


def _record_mapping(record: KeyRecordLike) -> Mapping[str, Any]:
    if isinstance(record, ExportedKeyRecord):
        return record.to_dict()

    if isinstance(record, (str, bytes)):
        try:
            record = json.loads(record)
        except (ValueError, RecursionError) as e:
            raise MalformedKeyRecord("key record is not valid JSON") from e

    if not isinstance(record, Mapping):
        raise MalformedKeyRecord("key record must be an object")

    return record


_default_manager = KeyManager()


def generate_key_pair(suite: SuiteLike = DEFAULT_SUITE) -> KeyPair:
    """Generate a key pair with the default manager."""
    return _default_manager.generate(suite)


def export_key_pair(key_pair: KeyPair) -> ExportedKeyRecord:
    """Export a key pair with the default manager."""
    return _default_manager.export(key_pair)


def import_key_pair(record: KeyRecordLike) -> KeyPair:
    """Import a key pair with the default manager."""
    return _default_manager.import_record(record)


def validate_public_key(public_key: Any, suite: SuiteLike = DEFAULT_SUITE) -> bool:
    """Validate a Base64 public key with the default manager."""
    return _default_manager.validate_public_key(public_key, suite)


def get_key_sizes(suite: SuiteLike = DEFAULT_SUITE) -> KeySizes:
    """Key sizes for a suite."""
    return _default_manager.get_key_sizes(suite)
