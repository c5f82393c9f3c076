"""Client-side AES-256-GCM encryption for shared secrets.

All encryption and decryption happens on the sender's or receiver's device.
The server only ever receives the base64 ciphertext and iv; the key travels
in the URL fragment.
"""
import base64
import binascii
import os
from dataclasses import dataclass, field
from typing import FrozenSet

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ephemeral_clip.errors import (
    ClipError,
    CryptoUnsupportedError,
    DecryptionError,
    KeyUsageError,
    NotFoundError,
    ValidationError,
)

KEY_BYTES = 32   # AES-256
IV_BYTES = 12    # 96-bit GCM nonce
MAX_PLAINTEXT_CHARS = 10_000

USAGE_ENCRYPT = "encrypt"
USAGE_DECRYPT = "decrypt"


@dataclass(frozen=True)
class SecretKey:
    """Symmetric key plus the operations it may be used for."""
    raw: bytes = field(repr=False)
    extractable: bool = True
    usages: FrozenSet[str] = frozenset({USAGE_ENCRYPT, USAGE_DECRYPT})


@dataclass(frozen=True)
class EncryptedSecret:
    ciphertext: str  # base64, includes the 16-byte tag
    iv: str          # base64, 12 bytes


def _b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _b64decode(text: str) -> bytes:
    return base64.b64decode(text.encode("ascii"), validate=True)


class SecretCipher:
    def __init__(self, max_plaintext_chars: int = MAX_PLAINTEXT_CHARS):
        if not self.is_supported():
            raise CryptoUnsupportedError("AES-GCM encryption is not supported in this environment")
        self.max_plaintext_chars = max_plaintext_chars

    @staticmethod
    def is_supported() -> bool:
        """Probe secure randomness, AES-GCM and UTF-8 before any real work."""
        try:
            probe_key = os.urandom(KEY_BYTES)
            probe_iv = os.urandom(IV_BYTES)
            aesgcm = AESGCM(probe_key)
            sealed = aesgcm.encrypt(probe_iv, "probe".encode("utf-8"), None)
            return aesgcm.decrypt(probe_iv, sealed, None).decode("utf-8") == "probe"
        except Exception:
            return False

    def generate_key(self) -> SecretKey:
        return SecretKey(raw=AESGCM.generate_key(bit_length=256))

    def export_key(self, key: SecretKey) -> str:
        if not key.extractable:
            raise KeyUsageError("Key is not exportable")
        return _b64encode(key.raw)

    def import_key(self, key_b64: str) -> SecretKey:
        """Import a key from its base64 form as a decrypt-only, non-exportable key."""
        try:
            raw = _b64decode(key_b64)
        except (binascii.Error, ValueError) as e:
            raise ValidationError("Malformed encryption key") from e
        if len(raw) != KEY_BYTES:
            raise ValidationError("Malformed encryption key")
        return SecretKey(raw=raw, extractable=False, usages=frozenset({USAGE_DECRYPT}))

    def encrypt(self, plaintext: str, key: SecretKey) -> EncryptedSecret:
        if len(plaintext) > self.max_plaintext_chars:
            raise ValidationError(f"Secret must be less than {self.max_plaintext_chars:,} characters.")
        if USAGE_ENCRYPT not in key.usages:
            raise KeyUsageError("Key may not be used for encryption")

        try:
            data = plaintext.encode("utf-8")
        except UnicodeEncodeError as e:
            raise ValidationError("Secret is not valid UTF-8 text") from e

        # Fresh nonce on every call, never per session
        iv = os.urandom(IV_BYTES)
        ct_and_tag = AESGCM(key.raw).encrypt(iv, data, None)
        return EncryptedSecret(ciphertext=_b64encode(ct_and_tag), iv=_b64encode(iv))

    def decrypt(self, ciphertext: str, iv: str, key: SecretKey) -> str:
        if USAGE_DECRYPT not in key.usages:
            raise KeyUsageError("Key may not be used for decryption")
        try:
            iv_bytes = _b64decode(iv)
            ct_and_tag = _b64decode(ciphertext)
        except (binascii.Error, ValueError) as e:
            raise DecryptionError("Failed to decrypt: Invalid key or corrupted data") from e
        if len(iv_bytes) != IV_BYTES:
            raise DecryptionError("Failed to decrypt: Invalid key or corrupted data")

        try:
            plaintext = AESGCM(key.raw).decrypt(iv_bytes, ct_and_tag, None)
            return plaintext.decode("utf-8")
        except (InvalidTag, UnicodeDecodeError) as e:
            raise DecryptionError("Failed to decrypt: Invalid key or corrupted data") from e


def describe_error(error: Exception) -> str:
    """User-friendly message for errors raised while sharing or viewing a secret."""
    if isinstance(error, DecryptionError):
        return "Unable to decrypt the secret. The link may be corrupted or the secret may have been tampered with."
    if isinstance(error, CryptoUnsupportedError):
        return "This environment does not support the required encryption features."
    if isinstance(error, NotFoundError):
        return "This secret has expired, been deleted, or the link is invalid."
    if isinstance(error, ClipError) and not isinstance(error, KeyUsageError):
        return error.message
    return "An encryption error occurred. Please try again."
