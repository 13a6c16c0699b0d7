"""
Envelope Codec
==============

Serializes and parses the versioned ciphertext envelope.

Wire Format (compact JSON, fixed field order):
    {
        "v":   3,                      # envelope format version
        "alg": "ML-KEM-1024",          # suite identifier
        "kem": "<base64>",             # KEM ciphertext
        "s":   "<base64>",             # HKDF salt (32 bytes)
        "n":   "<base64>",             # AEAD nonce (12 bytes)
        "c":   "<base64>",             # AEAD ciphertext with tag
        "t":   1700000000000           # creation time, ms since epoch
    }

Decoding is schema-checked: missing fields, extra fields and wrongly
typed fields are rejected, never coerced.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Final, Mapping, Optional, Union

from pqhelper.core.crypto.chacha20 import CHACHA_NONCE_SIZE
from pqhelper.core.crypto.kdf import HKDF_SALT_SIZE
from pqhelper.core.crypto.suites import AlgorithmSuite, SuiteLike
from pqhelper.core.exceptions import MalformedEnvelope, PQHelperError
from pqhelper.utils.encoding import b64decode, b64encode
from pqhelper.utils.validators import require_string_field

# Bumped whenever the envelope shape changes incompatibly
ENVELOPE_VERSION: Final[int] = 3

FIELD_ORDER: Final[tuple[str, ...]] = ("v", "alg", "kem", "s", "n", "c", "t")

_BYTE_FIELDS: Final[dict[str, str]] = {
    "kem": "KEM ciphertext",
    "s": "salt",
    "n": "nonce",
    "c": "ciphertext",
}


@dataclass(frozen=True, slots=True)
class Envelope:
    """
    Immutable on-wire ciphertext container.

    Contains everything needed for decryption except the private key,
    so it can be safely serialized, stored and transmitted.
    """

    format_version: int
    suite: AlgorithmSuite
    kem_ciphertext: bytes
    salt: bytes
    nonce: bytes
    aead_ciphertext: bytes
    timestamp: int

    def to_dict(self) -> dict[str, Any]:
        """Wire fields in their fixed order."""
        return {
            "v": self.format_version,
            "alg": self.suite.value,
            "kem": b64encode(self.kem_ciphertext),
            "s": b64encode(self.salt),
            "n": b64encode(self.nonce),
            "c": b64encode(self.aead_ciphertext),
            "t": self.timestamp,
        }

    def to_json(self) -> str:
        return serialize_envelope(self)

    @classmethod
    def from_json(cls, text: Union[str, bytes]) -> "Envelope":
        return parse_envelope(text)

    def __repr__(self) -> str:
        """Safe representation."""
        return (
            f"Envelope(v{self.format_version}, {self.suite.value}, "
            f"ct_len={len(self.aead_ciphertext)}, t={self.timestamp})"
        )


def serialize_envelope(envelope: Envelope) -> str:
    """
    Render an envelope as compact JSON.

    Deterministic: the same envelope always yields the same text.
    """
    return json.dumps(envelope.to_dict(), separators=(",", ":"))


def parse_envelope(text: Union[str, bytes]) -> Envelope:
    """
    Parse envelope text.

    Raises:
        MalformedEnvelope: If the text is not a well-formed v3 envelope
        UnsupportedSuite: If the declared algorithm is not recognized
    """
    if not isinstance(text, (str, bytes)):
        raise MalformedEnvelope(
            f"envelope must be text, got {type(text).__name__}"
        )

    try:
        data = json.loads(text)
    except RecursionError as e:
        raise MalformedEnvelope("envelope JSON is nested too deeply") from e
    except ValueError as e:
        # JSONDecodeError, UnicodeDecodeError and the int digit limit
        raise MalformedEnvelope("envelope is not valid JSON") from e

    if not isinstance(data, dict):
        raise MalformedEnvelope("envelope must be a JSON object")

    missing = [name for name in FIELD_ORDER if name not in data]
    if missing:
        raise MalformedEnvelope(f"missing field(s): {', '.join(missing)}")

    extra = sorted(set(data) - set(FIELD_ORDER))
    if extra:
        raise MalformedEnvelope(f"unexpected field(s): {', '.join(extra)}")

    version = _require_int(data, "v")
    if version != ENVELOPE_VERSION:
        raise MalformedEnvelope(
            f"unsupported envelope version {version}, expected {ENVELOPE_VERSION}"
        )

    timestamp = _require_int(data, "t")
    if timestamp < 0:
        raise MalformedEnvelope("t cannot be negative")

    alg = require_string_field(data, "alg", MalformedEnvelope)
    suite = AlgorithmSuite.from_identifier(alg)

    decoded = {name: _require_bytes(data, name) for name in _BYTE_FIELDS}

    if len(decoded["s"]) != HKDF_SALT_SIZE:
        raise MalformedEnvelope(f"salt must be {HKDF_SALT_SIZE} bytes")
    if len(decoded["n"]) != CHACHA_NONCE_SIZE:
        raise MalformedEnvelope(f"nonce must be {CHACHA_NONCE_SIZE} bytes")

    return Envelope(
        format_version=version,
        suite=suite,
        kem_ciphertext=decoded["kem"],
        salt=decoded["s"],
        nonce=decoded["n"],
        aead_ciphertext=decoded["c"],
        timestamp=timestamp,
    )


def resolve_suite(
    envelope: Envelope,
    override: Optional[SuiteLike] = None,
) -> AlgorithmSuite:
    """
    Effective suite for decrypting an envelope.

    An explicit override wins over the embedded suite.

    Raises:
        UnsupportedSuite: If the override is not recognized
    """
    if override is None:
        return envelope.suite
    return AlgorithmSuite.from_identifier(override)


def is_valid_encrypted_message(text: Any) -> bool:
    """Check whether text parses as an envelope. Never raises."""
    try:
        parse_envelope(text)
    except PQHelperError:
        return False
    return True


def _require_int(data: Mapping[str, Any], name: str) -> int:
    value = data[name]
    # bool is an int subclass; true/false are not versions or timestamps
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedEnvelope(f"{name} must be an integer")
    return value


def _require_bytes(data: Mapping[str, Any], name: str) -> bytes:
    text = require_string_field(data, name, MalformedEnvelope)
    try:
        return b64decode(text)
    except ValueError as e:
        raise MalformedEnvelope(f"{_BYTE_FIELDS[name]} is not valid Base64") from e
