import pytest
from PyQt5.QtCore import QEvent, QObject

from keyguard.audit import SecurityEventLog
from keyguard.guard import ActivityEventFilter, ActivityGuard
from keyguard.lockout import AuthFailureMonitor
from keyguard.session import SessionMonitor
from keyguard.storage import KeyStore


@pytest.fixture
def events(tmp_path):
    return SecurityEventLog(KeyStore(str(tmp_path / "storage.json")))


@pytest.fixture
def guard(qapp, clock, events):
    g = ActivityGuard(
        session=SessionMonitor(timeout=60, warning=30, poll_interval=5, clock=clock),
        failures=AuthFailureMonitor(max_attempts=3, window=900, clock=clock),
        events=events,
    )
    yield g
    g.stop_monitoring()
    g.uninstall()


def test_handle_auth_failure_locks_after_max_attempts(guard, events):
    assert not guard.handle_auth_failure("a@b.com")
    assert not guard.handle_auth_failure("a@b.com")
    assert guard.handle_auth_failure("a@b.com")
    assert guard.is_account_locked("a@b.com")
    assert guard.get_remaining_lockout_time("a@b.com") == 900

    logged = events.get_security_events()
    assert [e["event"] for e in logged] == ["account_locked"]
    assert logged[0]["details"]["identifier"] == "a@b.com"


def test_successful_login_clears_failures(guard):
    for _ in range(3):
        guard.handle_auth_failure("a@b.com")
    guard.clear_auth_failures("a@b.com")
    assert not guard.is_account_locked("a@b.com")


def test_timeout_is_logged_and_forwarded(guard, clock, events):
    fired = []
    guard.start_monitoring(lambda: fired.append("warning"), lambda: fired.append("timeout"))
    clock.advance(30)
    guard.session.check()
    clock.advance(30)
    guard.session.check()

    assert fired == ["warning", "timeout"]
    assert events.get_security_events()[-1]["event"] == "session_timeout"


def test_update_activity_resets_session(guard, clock):
    fired = []
    guard.start_monitoring(lambda: fired.append("warning"), lambda: fired.append("timeout"))
    clock.advance(25)
    guard.update_activity()
    clock.advance(25)
    guard.session.check()
    assert fired == []


def test_event_filter_records_input(guard, clock):
    guard.start_monitoring(lambda: None, lambda: None)
    clock.advance(20)
    target = QObject()
    event_filter = ActivityEventFilter(guard)

    assert event_filter.eventFilter(target, QEvent(QEvent.Timer)) is False
    assert guard.session.seconds_since_activity() == 20

    assert event_filter.eventFilter(target, QEvent(QEvent.KeyPress)) is False
    assert guard.session.seconds_since_activity() == 0


def test_install_and_uninstall(guard):
    target = QObject()
    guard.install(target)
    assert guard._watched is target
    guard.uninstall()
    assert guard._watched is None
    guard.uninstall()
