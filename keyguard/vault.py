"""
Credential vault: encrypts API keys before they are persisted.

Blob layout, base64 encoded as a single string:

    salt (16 bytes) | iv (12 bytes) | ciphertext | tag (16 bytes)

The key is derived from the device fingerprint and the per-blob salt, so
a blob only decrypts on the device that produced it.
"""

import base64
import binascii
import logging
from typing import Callable, Optional, Union

from cryptography.exceptions import InvalidTag

from .crypto import CryptoManager
from .exceptions import EncryptionError, DecryptionError
from .fingerprint import DeviceFingerprint

logger = logging.getLogger(__name__)

FingerprintSource = Union[DeviceFingerprint, str, Callable[[], str]]


class CredentialVault:
    """Encrypts and decrypts small secret strings bound to a device."""

    def __init__(self, fingerprint: Optional[FingerprintSource] = None):
        """
        Initialize the vault.

        Args:
            fingerprint: A DeviceFingerprint, a fixed fingerprint string, or a
                callable returning one. Defaults to the current environment.
        """
        self.crypto = CryptoManager()
        self._fingerprint = fingerprint

    @property
    def header_size(self) -> int:
        return self.crypto.SALT_SIZE + self.crypto.NONCE_SIZE

    def get_fingerprint(self) -> str:
        """Return the fingerprint string the key is derived from."""
        source = self._fingerprint
        if source is None:
            return DeviceFingerprint.from_environment().compute()
        if isinstance(source, DeviceFingerprint):
            return source.compute()
        if callable(source):
            return source()
        return source

    def derive_key(self, fingerprint: str, salt: bytes) -> bytes:
        """Derive the AES-256 key for a fingerprint and salt."""
        return self.crypto.derive_key(fingerprint, salt)

    def encrypt(self, plaintext: str) -> str:
        """
        Encrypt a secret string.

        Every call uses a fresh salt and IV, so encrypting the same value
        twice gives different blobs.

        Raises:
            EncryptionError: If the plaintext cannot be encoded or the
                cipher fails.
        """
        try:
            data = plaintext.encode('utf-8')
            salt = self.crypto.generate_salt()
            nonce = self.crypto.generate_nonce()
            key = self.derive_key(self.get_fingerprint(), salt)
            ciphertext = self.crypto.encrypt(data, key, nonce)
        except Exception as e:
            logger.error(f"Encryption failed: {e}", exc_info=True)
            raise EncryptionError("Failed to encrypt data") from e

        return base64.b64encode(salt + nonce + ciphertext).decode('ascii')

    def decrypt(self, blob: str) -> str:
        """
        Decrypt a blob produced by encrypt().

        Raises:
            DecryptionError: If the blob is malformed, was tampered with, was
                written under another fingerprint, or does not hold UTF-8 text.
        """
        try:
            combined = base64.b64decode(blob, validate=True)
        except (binascii.Error, ValueError, TypeError) as e:
            logger.error(f"Decryption failed: invalid base64: {e}")
            raise DecryptionError("Failed to decrypt data: blob is not valid base64") from e

        if len(combined) < self.header_size + self.crypto.TAG_SIZE:
            logger.error(f"Decryption failed: blob too short ({len(combined)} bytes)")
            raise DecryptionError("Failed to decrypt data: blob is too short")

        salt = combined[:self.crypto.SALT_SIZE]
        nonce = combined[self.crypto.SALT_SIZE:self.header_size]
        ciphertext = combined[self.header_size:]

        try:
            key = self.derive_key(self.get_fingerprint(), salt)
            plaintext = self.crypto.decrypt(ciphertext, key, nonce)
        except InvalidTag as e:
            logger.error("Decryption failed: authentication tag mismatch")
            raise DecryptionError("Failed to decrypt data: authentication failed") from e
        except Exception as e:
            logger.error(f"Decryption failed: {e}", exc_info=True)
            raise DecryptionError("Failed to decrypt data") from e

        try:
            return plaintext.decode('utf-8')
        except UnicodeDecodeError as e:
            logger.error("Decryption failed: plaintext is not UTF-8")
            raise DecryptionError("Failed to decrypt data: invalid plaintext encoding") from e
