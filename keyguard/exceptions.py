"""Exception types raised by keyguard."""


class KeyguardError(Exception):
    """Base class for all keyguard errors."""


class EncryptionError(KeyguardError):
    """Encryption failed: the primitive was unavailable or the input could not be encoded."""


class DecryptionError(KeyguardError):
    """
    Decryption failed.

    Raised for malformed blobs, authentication tag mismatches (tampering, a
    different device fingerprint) and undecodable plaintext. Callers should
    treat the secret as lost and ask the user to enter it again.
    """
