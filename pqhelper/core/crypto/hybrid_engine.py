"""
Hybrid Post-Quantum Encryption Engine
======================================

Combines a post-quantum KEM with an AEAD cipher:
    1. ML-KEM (key encapsulation, no prior shared secret needed)
    2. HKDF-SHA256 (turns the KEM shared secret into a cipher key)
    3. ChaCha20-Poly1305 (authenticated message encryption)

Encryption Flow:
    recipient public key
        ↓ ML-KEM encapsulate
    shared_secret + kem_ciphertext
        ↓ HKDF-SHA256 (fresh 32-byte salt, info="ChaCha20-Poly1305")
    message_key
        ↓ ChaCha20-Poly1305 seal (fresh 12-byte nonce)
    envelope (v, alg, kem, s, n, c, t)

Decryption Flow:
    envelope
        ↓ parse, resolve suite (caller override wins)
        ↓ ML-KEM decapsulate with private key
    shared_secret
        ↓ HKDF-SHA256 (embedded salt)
    message_key
        ↓ ChaCha20-Poly1305 open (verify tag)
    plaintext

WARNING:
    - A wrong private key is only detected at the tag check
    - Any failure = complete rejection (fail-closed)
"""

from __future__ import annotations

import logging
import time
from typing import Final, Mapping, Optional, Union

from cryptography.exceptions import InvalidTag

from pqhelper.core.crypto.chacha20 import CHACHA_KEY_SIZE, CHACHA_TAG_SIZE, ChaCha20Cipher
from pqhelper.core.crypto.envelope import (
    ENVELOPE_VERSION,
    Envelope,
    parse_envelope,
    resolve_suite,
    serialize_envelope,
)
from pqhelper.core.crypto.kdf import derive_key, generate_salt
from pqhelper.core.crypto.key_manager import KeyManager, KeyPair, is_plausible_public_key
from pqhelper.core.crypto.kyber_pqc import KyberBackend
from pqhelper.core.crypto.suites import DEFAULT_SUITE, AlgorithmSuite, SuiteLike
from pqhelper.core.exceptions import (
    AuthenticationFailure,
    DecapsulationError,
    EncapsulationError,
    InvalidPublicKey,
    KeyDerivationError,
    MalformedEnvelope,
    SealingError,
)
from pqhelper.core.memory.secure_memory import MemoryGuard, SecureBuffer
from pqhelper.core.memory.zeroization import ZeroizeContext
from pqhelper.utils.encoding import b64decode
from pqhelper.utils.validators import validate_message

_LOGGER: Final = logging.getLogger(__name__)

# HKDF context string binding the derived key to the AEAD
HKDF_INFO: Final[bytes] = b"ChaCha20-Poly1305"

PublicKeyLike = Union[str, bytes, bytearray]
PrivateKeyLike = Union[str, bytes, bytearray, KeyPair]


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class HybridCipher:
    """
    Hybrid Post-Quantum Encryption Engine.

    Stateless per call: every encryption uses a fresh KEM encapsulation,
    salt and nonce, and every secret is wiped before the call returns.
    One instance may serve concurrent calls from several threads.

    Usage:
        cipher = HybridCipher()
        key_pair = cipher.key_manager.generate()

        text = cipher.encrypt("hello", key_pair.public_key_b64)
        assert cipher.decrypt(text, key_pair.private_key_b64) == "hello"
    """

    __slots__ = ("_keys", "_aead")

    def __init__(
        self,
        key_manager: Optional[KeyManager] = None,
        backends: Optional[Mapping[AlgorithmSuite, KyberBackend]] = None,
    ) -> None:
        """
        Args:
            key_manager: Key manager used for KEM access and key validation
            backends: Per-suite KEM backend overrides, used when no
                key_manager is given
        """
        self._keys = key_manager if key_manager is not None else KeyManager(backends)
        self._aead = ChaCha20Cipher()

    @property
    def key_manager(self) -> KeyManager:
        return self._keys

    def encrypt(
        self,
        message: str,
        public_key: PublicKeyLike,
        suite: SuiteLike = DEFAULT_SUITE,
    ) -> str:
        """
        Encrypt a message and return the serialized envelope.

        See encrypt_envelope() for arguments and errors.
        """
        return serialize_envelope(self.encrypt_envelope(message, public_key, suite))

    def encrypt_envelope(
        self,
        message: str,
        public_key: PublicKeyLike,
        suite: SuiteLike = DEFAULT_SUITE,
    ) -> Envelope:
        """
        Encrypt a message for the holder of a public key.

        Args:
            message: Text to encrypt ("" is allowed)
            public_key: Recipient public key, Base64 text or raw bytes
            suite: Suite the public key belongs to

        Returns:
            Envelope for the message

        Raises:
            EmptyOrMissingMessage: If message is None or not a str
            UnsupportedSuite: If suite is not recognized
            InvalidPublicKey: If the key fails validation for the suite
            EncapsulationError: If the KEM rejects the key
            KeyDerivationError: If HKDF fails
            SealingError: If the AEAD fails
        """
        plaintext = validate_message(message)
        kem = self._keys.kem(suite)
        key_bytes = self._public_key_bytes(public_key, kem.suite)

        with MemoryGuard() as guard:
            try:
                encapsulated = kem.encapsulate(key_bytes)
            except Exception as e:
                raise EncapsulationError(
                    f"{kem.suite.value} encapsulation failed: {e.__class__.__name__}"
                ) from e
            shared_secret = guard.adopt(encapsulated.shared_secret)

            salt, message_key = self._derive_fresh(shared_secret, guard)

            try:
                nonce = self._aead.generate_nonce()
                ciphertext = self._aead.seal(message_key.data, nonce, plaintext)
            except Exception as e:
                raise SealingError(
                    f"ChaCha20-Poly1305 seal failed: {e.__class__.__name__}"
                ) from e

        _LOGGER.debug(
            "Encrypted %d-byte message with %s", len(plaintext), kem.suite.value
        )

        return Envelope(
            format_version=ENVELOPE_VERSION,
            suite=kem.suite,
            kem_ciphertext=encapsulated.ciphertext,
            salt=salt,
            nonce=nonce,
            aead_ciphertext=ciphertext,
            timestamp=_now_ms(),
        )

    def decrypt(
        self,
        envelope: Union[str, bytes, Envelope],
        private_key: PrivateKeyLike,
        suite: Optional[SuiteLike] = None,
    ) -> str:
        """
        Decrypt an envelope with the recipient's private key.

        Args:
            envelope: Envelope text or a parsed Envelope
            private_key: Base64 text, raw bytes or a KeyPair
            suite: Optional override of the envelope's embedded suite

        Returns:
            The original message

        Raises:
            MalformedEnvelope: If the envelope does not parse, or the
                authenticated payload is not UTF-8 text
            UnsupportedSuite: If the embedded or override suite is unknown
            DecapsulationError: If the private key or KEM ciphertext does
                not fit the suite, or the KEM fails
            KeyDerivationError: If HKDF fails
            AuthenticationFailure: If the tag does not verify
        """
        parsed = envelope if isinstance(envelope, Envelope) else parse_envelope(envelope)
        effective = resolve_suite(parsed, suite)
        kem = self._keys.kem(effective)

        with MemoryGuard() as guard:
            secret_key = self._private_key_buffer(private_key, effective, guard)

            if len(parsed.kem_ciphertext) != effective.ciphertext_size:
                raise DecapsulationError(
                    f"KEM ciphertext is {len(parsed.kem_ciphertext)} bytes, "
                    f"{effective.value} expects {effective.ciphertext_size}"
                )

            try:
                recovered = kem.decapsulate(parsed.kem_ciphertext, secret_key.data)
            except Exception as e:
                raise DecapsulationError(
                    f"{effective.value} decapsulation failed: {e.__class__.__name__}"
                ) from e
            shared_secret = guard.adopt(recovered)

            message_key = guard.adopt(self._derive(shared_secret, parsed.salt))

            if len(parsed.aead_ciphertext) < CHACHA_TAG_SIZE:
                raise AuthenticationFailure("ciphertext shorter than authentication tag")

            try:
                plaintext = self._aead.open(
                    message_key.data, parsed.nonce, parsed.aead_ciphertext
                )
            except (InvalidTag, ValueError) as e:
                _LOGGER.warning("Authentication failed for %s envelope", effective.value)
                raise AuthenticationFailure(
                    "envelope failed authentication (tampered or wrong key)"
                ) from e

        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedEnvelope("authenticated payload is not UTF-8 text") from e

    def _public_key_bytes(self, public_key: PublicKeyLike, suite: AlgorithmSuite) -> bytes:
        if isinstance(public_key, str):
            if not self._keys.validate_public_key(public_key, suite):
                raise InvalidPublicKey(f"not a valid {suite.value} public key")
            return b64decode(public_key)

        if isinstance(public_key, (bytes, bytearray)):
            key_bytes = bytes(public_key)
            if not is_plausible_public_key(key_bytes, suite):
                raise InvalidPublicKey(f"not a valid {suite.value} public key")
            return key_bytes

        raise InvalidPublicKey(
            f"public key must be Base64 text or bytes, got {type(public_key).__name__}"
        )

    @staticmethod
    def _private_key_buffer(
        private_key: PrivateKeyLike,
        suite: AlgorithmSuite,
        guard: MemoryGuard,
    ) -> SecureBuffer:
        """Copy the private key into a tracked buffer and check its length."""
        if isinstance(private_key, KeyPair):
            buffer = guard.track(SecureBuffer.from_bytes(private_key.private_key))
        elif isinstance(private_key, (bytes, bytearray)):
            buffer = guard.track(SecureBuffer.from_bytes(private_key))
        elif isinstance(private_key, str):
            try:
                decoded = bytearray(b64decode(private_key))
            except ValueError as e:
                raise DecapsulationError("private key is not valid Base64") from e
            with ZeroizeContext(decoded):
                buffer = guard.track(SecureBuffer.from_bytes(decoded))
        else:
            raise DecapsulationError(
                f"private key must be Base64 text, bytes or a KeyPair, "
                f"got {type(private_key).__name__}"
            )

        if len(buffer) != suite.private_key_size:
            raise DecapsulationError(
                f"private key is {len(buffer)} bytes, "
                f"{suite.value} expects {suite.private_key_size}"
            )
        return buffer

    def _derive_fresh(
        self,
        shared_secret: SecureBuffer,
        guard: MemoryGuard,
    ) -> tuple[bytes, SecureBuffer]:
        try:
            salt = generate_salt()
        except Exception as e:
            raise KeyDerivationError(f"salt generation failed: {e.__class__.__name__}") from e
        return salt, guard.adopt(self._derive(shared_secret, salt))

    @staticmethod
    def _derive(shared_secret: SecureBuffer, salt: bytes) -> bytes:
        try:
            return derive_key(shared_secret.data, salt, HKDF_INFO, CHACHA_KEY_SIZE)
        except Exception as e:
            raise KeyDerivationError(
                f"HKDF-SHA256 failed: {e.__class__.__name__}"
            ) from e


_default_cipher = HybridCipher()


def encrypt(
    message: str,
    public_key: PublicKeyLike,
    suite: SuiteLike = DEFAULT_SUITE,
) -> str:
    """Encrypt a message with the default cipher."""
    return _default_cipher.encrypt(message, public_key, suite)


def decrypt(
    envelope: Union[str, bytes, Envelope],
    private_key: PrivateKeyLike,
    suite: Optional[SuiteLike] = None,
) -> str:
    """Decrypt an envelope with the default cipher."""
    return _default_cipher.decrypt(envelope, private_key, suite)
