"""
Package-level API.

Thin wrappers over the default KeyManager and HybridCipher that fall back
to the configured default suite when the caller names none.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from pqhelper.core.config import get_config
from pqhelper.core.crypto import hybrid_engine, key_manager
from pqhelper.core.crypto.envelope import Envelope
from pqhelper.core.crypto.key_manager import ExportedKeyRecord, KeyPair, KeyRecordLike, KeySizes
from pqhelper.core.crypto.suites import AlgorithmSuite, SuiteLike


def _suite_or_default(suite: Optional[SuiteLike]) -> AlgorithmSuite:
    if suite is None:
        return get_config().crypto.default_suite
    return AlgorithmSuite.from_identifier(suite)


def generate_key_pair(suite: Optional[SuiteLike] = None) -> KeyPair:
    """Generate a key pair for suite, or for the configured default suite."""
    return key_manager.generate_key_pair(_suite_or_default(suite))


def export_key_pair(key_pair: KeyPair) -> ExportedKeyRecord:
    return key_manager.export_key_pair(key_pair)


def import_key_pair(record: KeyRecordLike) -> KeyPair:
    return key_manager.import_key_pair(record)


def validate_public_key(public_key: Any, suite: Optional[SuiteLike] = None) -> bool:
    if suite is None:
        suite = get_config().crypto.default_suite
    return key_manager.validate_public_key(public_key, suite)


def get_key_sizes(suite: Optional[SuiteLike] = None) -> KeySizes:
    return key_manager.get_key_sizes(_suite_or_default(suite))


def encrypt(
    message: str,
    public_key: hybrid_engine.PublicKeyLike,
    suite: Optional[SuiteLike] = None,
) -> str:
    """Encrypt message for public_key and return the envelope text."""
    return hybrid_engine.encrypt(message, public_key, _suite_or_default(suite))


def decrypt(
    envelope: Union[str, bytes, Envelope],
    private_key: hybrid_engine.PrivateKeyLike,
    suite: Optional[SuiteLike] = None,
) -> str:
    """Decrypt an envelope; the envelope's own suite is used unless suite is given."""
    return hybrid_engine.decrypt(envelope, private_key, suite)
