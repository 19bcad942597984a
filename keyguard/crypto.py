"""
Cryptographic primitives for keyguard.

Key derivation is PBKDF2-HMAC-SHA256 and encryption is AES-256-GCM. The
parameters come from config and are shared by the encrypt and decrypt paths.
"""

import os
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from cryptography.hazmat.backends import default_backend

from . import config


class CryptoManager:
    """Handles the low-level cryptographic operations."""

    SALT_SIZE = config.SALT_SIZE
    KEY_SIZE = config.KEY_SIZE
    NONCE_SIZE = config.NONCE_SIZE
    TAG_SIZE = config.TAG_SIZE
    PBKDF2_ITERATIONS = config.PBKDF2_ITERATIONS

    def __init__(self):
        """Initialize the crypto manager."""
        self.backend = default_backend()

    def generate_salt(self) -> bytes:
        """Generate a cryptographically secure random salt."""
        return os.urandom(self.SALT_SIZE)

    def generate_nonce(self) -> bytes:
        """Generate a fresh random GCM nonce."""
        return os.urandom(self.NONCE_SIZE)

    def derive_key(self, password: str, salt: bytes) -> bytes:
        """
        Derive an encryption key from a password-like string using PBKDF2.

        Args:
            password: Key material, here the device fingerprint
            salt: Random salt for key derivation

        Returns:
            32-byte encryption key
        """
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=self.KEY_SIZE,
            salt=salt,
            iterations=self.PBKDF2_ITERATIONS,
            backend=self.backend
        )
        return kdf.derive(password.encode('utf-8'))

    def encrypt(self, plaintext: bytes, key: bytes, nonce: bytes) -> bytes:
        """
        Encrypt data using AES-256-GCM.

        Args:
            plaintext: Data to encrypt
            key: 32-byte encryption key
            nonce: 12-byte nonce, never reused with the same key

        Returns:
            Ciphertext with the 16-byte authentication tag appended
        """
        cipher = Cipher(
            algorithms.AES(key),
            modes.GCM(nonce),
            backend=self.backend
        )
        encryptor = cipher.encryptor()
        ciphertext = encryptor.update(plaintext) + encryptor.finalize()
        return ciphertext + encryptor.tag

    def decrypt(self, data: bytes, key: bytes, nonce: bytes) -> bytes:
        """
        Decrypt data using AES-256-GCM.

        Args:
            data: Ciphertext followed by the authentication tag
            key: 32-byte encryption key
            nonce: Nonce used for encryption

        Returns:
            Decrypted plaintext

        Raises:
            InvalidTag: If authentication fails
            ValueError: If data is shorter than the tag
        """
        if len(data) < self.TAG_SIZE:
            raise ValueError("Ciphertext is shorter than the authentication tag")
        ciphertext, tag = data[:-self.TAG_SIZE], data[-self.TAG_SIZE:]
        cipher = Cipher(
            algorithms.AES(key),
            modes.GCM(nonce, tag),
            backend=self.backend
        )
        decryptor = cipher.decryptor()
        return decryptor.update(ciphertext) + decryptor.finalize()

