"""
Local key-value storage for encrypted API keys.

KeyStore is a small JSON file of string entries, written atomically with
owner-only permissions. ApiKeyStore sits on top of it and keeps one
encrypted entry per provider plus a plaintext "created" timestamp that is
only used for rotation reminders.
"""

import datetime
import json
import logging
import os
import shutil
import threading
from typing import Callable, Dict, List, NamedTuple, Optional

from . import config
from .exceptions import DecryptionError
from .utils import get_config_dir, set_owner_only_permissions
from .vault import CredentialVault

logger = logging.getLogger(__name__)


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class KeyStore:
    """A persistent string-to-string map backed by a JSON file."""

    def __init__(self, filepath: Optional[str] = None):
        """
        Initialize the store.

        Args:
            filepath: Path of the JSON file. Defaults to ~/.keyguard/storage.json
        """
        if filepath is None:
            filepath = os.path.join(get_config_dir(), config.STORE_FILE)
        self.filepath = filepath
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        """Return the value stored under key, or None."""
        with self._lock:
            value = self._load().get(key)
        if value is not None and not isinstance(value, str):
            logger.warning(f"Ignoring non-string value stored under {key}")
            return None
        return value

    def set(self, key: str, value: str) -> None:
        """Store value under key."""
        with self._lock:
            data = self._load()
            data[key] = value
            self._save(data)

    def remove(self, key: str) -> bool:
        """Remove key. Returns True if it was present."""
        with self._lock:
            data = self._load()
            if key not in data:
                return False
            del data[key]
            self._save(data)
            return True

    def keys(self) -> List[str]:
        with self._lock:
            return sorted(self._load())

    def _load(self) -> Dict[str, str]:
        """Read the file; a missing or unreadable file reads as empty."""
        if not os.path.exists(self.filepath):
            return {}
        try:
            with open(self.filepath, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read key store {self.filepath}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Key store {self.filepath} is not a JSON object, ignoring its contents")
            return {}
        return data

    def _save(self, data: Dict[str, str]) -> None:
        """Write the file atomically and restrict it to the owner."""
        directory = os.path.dirname(self.filepath)
        if directory:
            os.makedirs(directory, exist_ok=True)
        tmp_path = self.filepath + '.tmp'
        try:
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
            shutil.move(tmp_path, self.filepath)

            if not set_owner_only_permissions(self.filepath):
                logger.warning(f"Failed to set secure file permissions for key store: {self.filepath}")
        except Exception as e:
            logger.error(f"Error saving key store {self.filepath}: {e}", exc_info=True)
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise


class KeyAge(NamedTuple):
    """Rotation advice for a stored API key."""
    should_rotate: bool
    days_old: int


class ApiKeyStore:
    """Stores provider API keys encrypted with a CredentialVault."""

    def __init__(
        self,
        store: Optional[KeyStore] = None,
        vault: Optional[CredentialVault] = None,
        now: Callable[[], datetime.datetime] = _utcnow,
    ):
        self.store = store if store is not None else KeyStore()
        self.vault = vault if vault is not None else CredentialVault()
        self._now = now

    @staticmethod
    def entry_name(provider: str) -> str:
        """Return the storage entry name for a provider's key."""
        provider = provider.lower()
        if provider not in config.API_KEY_PROVIDERS:
            raise ValueError(f"Unknown API key provider: {provider}")
        return f"{provider}{config.API_KEY_SUFFIX}"

    def save_api_key(self, provider: str, api_key: str) -> None:
        """Encrypt and store a provider's API key, recording when it was stored."""
        name = self.entry_name(provider)
        self.store.set(name, self.vault.encrypt(api_key))
        self.mark_api_key_created(name)
        logger.info(f"API key stored for {provider}")

    def load_api_key(self, provider: str) -> Optional[str]:
        """
        Return a provider's decrypted API key.

        A missing entry or one that fails to decrypt (corrupted, or written on
        another device) is reported as None: the key must be entered again.
        """
        name = self.entry_name(provider)
        blob = self.store.get(name)
        if not blob:
            return None
        try:
            return self.vault.decrypt(blob)
        except DecryptionError:
            logger.warning(f"Stored API key for {provider} could not be decrypted; treating it as not configured")
            return None

    def load_api_keys(self) -> Dict[str, str]:
        """Return every configured provider key that decrypts."""
        keys = {}
        for provider in config.API_KEY_PROVIDERS:
            api_key = self.load_api_key(provider)
            if api_key:
                keys[provider] = api_key
        return keys

    def delete_api_key(self, provider: str) -> bool:
        name = self.entry_name(provider)
        self.store.remove(name + config.API_KEY_CREATED_SUFFIX)
        removed = self.store.remove(name)
        if removed:
            logger.info(f"API key deleted for {provider}")
        return removed

    def clear_api_keys(self) -> None:
        for provider in config.API_KEY_PROVIDERS:
            self.delete_api_key(provider)

    def mark_api_key_created(self, key_name: str) -> None:
        """Record the current time as the creation time of key_name."""
        self.store.set(key_name + config.API_KEY_CREATED_SUFFIX, self._now().isoformat())

    def check_api_key_age(self, key_name: str) -> KeyAge:
        """
        Report how old a stored key is and whether it should be rotated.

        Missing or malformed timestamps report (False, 0).
        """
        stored = self.store.get(key_name + config.API_KEY_CREATED_SUFFIX)
        if not stored:
            return KeyAge(False, 0)
        try:
            created = datetime.datetime.fromisoformat(stored)
        except ValueError:
            logger.warning(f"Malformed creation timestamp for {key_name}: {stored!r}")
            return KeyAge(False, 0)
        if created.tzinfo is None:
            created = created.replace(tzinfo=datetime.timezone.utc)

        days_old = max(0, (self._now() - created).days)
        return KeyAge(days_old > config.API_KEY_ROTATION_DAYS, days_old)
