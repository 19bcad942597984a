import pytest
from PyQt5.QtCore import QCoreApplication

from keyguard.fingerprint import DeviceFingerprint
from keyguard.vault import CredentialVault


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(scope="session")
def qapp():
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    yield app


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fingerprint():
    return DeviceFingerprint(
        user_agent="Mozilla/5.0 (X11; Linux x86_64) Firefox/128.0",
        language="en-US",
        screen_width=1920,
        screen_height=1080,
    )


@pytest.fixture
def vault(fingerprint):
    return CredentialVault(fingerprint)
