"""
Device fingerprint used as key-derivation input.

The fingerprint is built from stable environment attributes. It binds stored
secrets to the device they were written on; it is not a secret and anyone
with code execution on the device can recompute it.
"""

import base64
import hashlib
import locale
import logging
import platform
from dataclasses import dataclass
from typing import Optional, Tuple

from PyQt5.QtCore import QCoreApplication

from . import config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeviceFingerprint:
    """Environment attributes that make up a device fingerprint."""
    user_agent: str
    language: str
    screen_width: int = 0
    screen_height: int = 0

    def compute(self) -> str:
        """Return the fingerprint string used as PBKDF2 input."""
        raw = f"{self.user_agent}-{self.language}-{self.screen_width}x{self.screen_height}"
        digest = hashlib.sha256(raw.encode('utf-8')).digest()
        encoded = base64.b64encode(digest).decode('ascii')
        return encoded[:config.FINGERPRINT_LENGTH]

    def __str__(self) -> str:
        return self.compute()

    @classmethod
    def from_environment(cls) -> 'DeviceFingerprint':
        """
        Build a fingerprint for the current machine.

        Only attributes that survive upgrades are used: OS family, CPU
        architecture, locale and screen size.
        """
        user_agent = f"{config.APP_NAME} ({platform.system()}; {platform.machine()})"
        width, height = _screen_resolution() or (0, 0)
        return cls(
            user_agent=user_agent,
            language=_language(),
            screen_width=width,
            screen_height=height,
        )


def _language() -> str:
    """Return the locale language tag, e.g. 'en-US'."""
    lang = locale.getlocale()[0]
    if not lang:
        return "en-US"
    return lang.replace('_', '-')


def _screen_resolution() -> Optional[Tuple[int, int]]:
    """Return the primary screen size if a Qt GUI application is running."""
    app = QCoreApplication.instance()
    if app is None or not app.inherits("QGuiApplication"):
        return None
    screen = app.primaryScreen()
    if screen is None:
        logger.debug("No primary screen available for fingerprint")
        return None
    size = screen.size()
    return size.width(), size.height()
