"""
Error Taxonomy
==============

Every failure surfaced by pqhelper is a PQHelperError labelled with the
protocol stage it came from, so callers can tell a bad key apart from
tampered data apart from bad caller input.

Security Notes:
    - Messages never contain key material or plaintext
    - Primitive exceptions are chained via __cause__, not copied into text
"""

from __future__ import annotations

from typing import Optional


class PQHelperError(Exception):
    """Base class for all pqhelper errors."""

    stage: str = "core"

    def __init__(self, detail: str = "", *, stage: Optional[str] = None) -> None:
        if stage is not None:
            self.stage = stage
        self.detail = detail or "operation failed"
        super().__init__(f"{self.stage}: {self.detail}")


class UnsupportedSuite(PQHelperError, ValueError):
    """Raised when an algorithm identifier is not a recognized suite."""

    stage = "suite selection"


class MalformedKeyRecord(PQHelperError, ValueError):
    """Raised when an exported key record cannot be imported."""

    stage = "key import"


class InvalidPublicKey(PQHelperError, ValueError):
    """Raised when a recipient public key fails validation before encapsulation."""

    stage = "key validation"


class EmptyOrMissingMessage(PQHelperError, ValueError):
    """Raised when the message to encrypt is absent or not text."""

    stage = "input validation"


class MalformedEnvelope(PQHelperError, ValueError):
    """Raised when envelope text is not a well-formed envelope."""

    stage = "envelope parsing"


class KeyGenerationError(PQHelperError):
    """Raised when the KEM fails to produce a valid key pair."""

    stage = "key generation"


class EncapsulationError(PQHelperError):
    """Raised when the KEM rejects the recipient public key."""

    stage = "encapsulation"


class DecapsulationError(PQHelperError):
    """Raised when the private key or KEM ciphertext does not fit the suite."""

    stage = "decapsulation"


class KeyDerivationError(PQHelperError):
    """Raised when HKDF fails to derive the symmetric key."""

    stage = "key derivation"


class SealingError(PQHelperError):
    """Raised when the AEAD cipher fails to seal the message."""

    stage = "sealing"


class AuthenticationFailure(PQHelperError):
    """
    Raised when the AEAD tag does not verify.

    Covers tampering, a wrong key and corrupted ciphertext alike. No
    plaintext is ever released once this is raised.
    """

    stage = "authentication"


__all__ = [
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
