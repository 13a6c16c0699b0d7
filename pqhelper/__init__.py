"""
pqhelper - Post-Quantum Hybrid Encryption
=========================================

Encrypts text messages for a recipient's ML-KEM public key, producing a
self-describing, versioned envelope. ML-KEM establishes the key,
HKDF-SHA256 derives the message key and ChaCha20-Poly1305 seals the
message.

    from pqhelper import generate_key_pair, encrypt, decrypt

    key_pair = generate_key_pair()
    envelope = encrypt("Hello", key_pair.public_key_b64)
    assert decrypt(envelope, key_pair.private_key_b64) == "Hello"

Security Notice:
- No secrets are logged
- Fail-closed design pattern
- Library logging is silent until configure_logging() is called
"""

import logging

from pqhelper.core.config import SecureConfig
from pqhelper.core.crypto.suites import ALGORITHMS, DEFAULT_SUITE, AlgorithmSuite
from pqhelper.core.crypto.key_manager import ExportedKeyRecord, KeyManager, KeyPair, KeySizes
from pqhelper.core.crypto.envelope import (
    Envelope,
    is_valid_encrypted_message,
    parse_envelope,
    serialize_envelope,
)
from pqhelper.core.crypto.hybrid_engine import HybridCipher
from pqhelper.core.exceptions import (
    AuthenticationFailure,
    DecapsulationError,
    EmptyOrMissingMessage,
    EncapsulationError,
    InvalidPublicKey,
    KeyDerivationError,
    KeyGenerationError,
    MalformedEnvelope,
    MalformedKeyRecord,
    PQHelperError,
    SealingError,
    UnsupportedSuite,
)
from pqhelper.core.logging import configure_logging, get_secure_logger
from pqhelper.api import (
    decrypt,
    encrypt,
    export_key_pair,
    generate_key_pair,
    get_key_sizes,
    import_key_pair,
    validate_public_key,
)

__version__ = "1.0.0"
VERSION = __version__
DEFAULT_ALGORITHM = DEFAULT_SUITE.value

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    "VERSION",
    "ALGORITHMS",
    "DEFAULT_ALGORITHM",
    "AlgorithmSuite",
    "KeyPair",
    "ExportedKeyRecord",
    "KeySizes",
    "KeyManager",
    "Envelope",
    "HybridCipher",
    "SecureConfig",
    "configure_logging",
    "get_secure_logger",
    "generate_key_pair",
    "export_key_pair",
    "import_key_pair",
    "validate_public_key",
    "get_key_sizes",
    "encrypt",
    "decrypt",
    "parse_envelope",
    "serialize_envelope",
    "is_valid_encrypted_message",
    "PQHelperError",
    "UnsupportedSuite",
    "MalformedKeyRecord",
    "InvalidPublicKey",
    "EmptyOrMissingMessage",
    "MalformedEnvelope",
    "KeyGenerationError",
    "EncapsulationError",
    "DecapsulationError",
    "KeyDerivationError",
    "SealingError",
    "AuthenticationFailure",
]
