"""
keyguard - API key protection and session guard
Copyright (c) 2025

THREAT MODEL:
Secrets are encrypted with a key derived from a device fingerprint. This keeps
API keys out of plain sight in local storage and browser-style key-value files.
It does not protect against anyone who can run code on the device: the
fingerprint is recomputable and is not a secret.
"""

from keyguard.exceptions import KeyguardError, EncryptionError, DecryptionError
from keyguard.fingerprint import DeviceFingerprint
from keyguard.vault import CredentialVault
from keyguard.session import SessionMonitor
from keyguard.lockout import RateLimiter, AuthFailureMonitor
from keyguard.guard import ActivityGuard

__all__ = [
    "KeyguardError",
    "EncryptionError",
    "DecryptionError",
    "DeviceFingerprint",
    "CredentialVault",
    "SessionMonitor",
    "RateLimiter",
    "AuthFailureMonitor",
    "ActivityGuard",
]
