"""
pqhelper Cryptographic Core
===========================

Hybrid post-quantum encryption envelopes.

Architecture:
    1. ML-KEM (FIPS 203): post-quantum key encapsulation
    2. HKDF-SHA256: per-message key derivation
    3. ChaCha20-Poly1305: authenticated message encryption

Security Properties:
    - All encryption is authenticated (AEAD)
    - Fresh salt, nonce and KEM encapsulation per message
    - Secrets held in wiped buffers for the duration of one call
    - Secure RNG for all random values

WARNING: This module handles sensitive cryptographic material.
         Incorrect usage can compromise security.
"""

from pqhelper.core.crypto.suites import ALGORITHMS, DEFAULT_SUITE, AlgorithmSuite
from pqhelper.core.crypto.chacha20 import ChaCha20Cipher
from pqhelper.core.crypto.kyber_pqc import KyberBackend, KyberKEM, PureKyberBackend
from pqhelper.core.crypto.key_manager import (
    ExportedKeyRecord,
    KeyManager,
    KeyPair,
    KeySizes,
)
from pqhelper.core.crypto.envelope import (
    ENVELOPE_VERSION,
    Envelope,
    is_valid_encrypted_message,
    parse_envelope,
    serialize_envelope,
)
from pqhelper.core.crypto.hybrid_engine import HybridCipher

__all__ = [
    "ALGORITHMS",
    "DEFAULT_SUITE",
    "AlgorithmSuite",
    "ChaCha20Cipher",
    "KyberBackend",
    "KyberKEM",
    "PureKyberBackend",
    "ExportedKeyRecord",
    "KeyManager",
    "KeyPair",
    "KeySizes",
    "ENVELOPE_VERSION",
    "Envelope",
    "is_valid_encrypted_message",
    "parse_envelope",
    "serialize_envelope",
    "HybridCipher",
]
