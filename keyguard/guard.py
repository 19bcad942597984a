"""
ActivityGuard: session inactivity and authentication lockout for a host app.

The guard is an ordinary object owned by the host application. It holds one
SessionMonitor and one AuthFailureMonitor, so several independent guards can
exist side by side (for example in tests).
"""

import logging
from typing import Callable, Optional

from PyQt5.QtCore import QEvent, QObject

from .audit import SecurityEventLog
from .lockout import AuthFailureMonitor
from .session import SessionMonitor

logger = logging.getLogger(__name__)


class ActivityEventFilter(QObject):
    """Qt event filter that reports user input to an ActivityGuard."""

    ACTIVITY_EVENTS = (
        QEvent.MouseButtonPress,
        QEvent.MouseMove,
        QEvent.KeyPress,
        QEvent.Wheel,
        QEvent.TouchBegin,
    )

    def __init__(self, guard: 'ActivityGuard', parent: Optional[QObject] = None):
        super().__init__(parent)
        self.guard = guard

    def eventFilter(self, obj, event):
        """Record activity on user input; never consumes the event."""
        if event.type() in self.ACTIVITY_EVENTS:
            self.guard.update_activity()
        return super().eventFilter(obj, event)


class ActivityGuard:
    """Session timeout and login lockout, wired to the host's callbacks."""

    def __init__(
        self,
        session: Optional[SessionMonitor] = None,
        failures: Optional[AuthFailureMonitor] = None,
        events: Optional[SecurityEventLog] = None,
    ):
        self.session = session if session is not None else SessionMonitor()
        self.failures = failures if failures is not None else AuthFailureMonitor()
        self.events = events if events is not None else SecurityEventLog()
        self._event_filter: Optional[ActivityEventFilter] = None
        self._watched: Optional[QObject] = None

    # Session

    def start_monitoring(self, on_warning: Callable[[], None], on_timeout: Callable[[], None]) -> None:
        def handle_timeout():
            self.events.log_security_event('session_timeout', {'reason': 'inactivity'}, 'warning')
            on_timeout()

        self.session.start_monitoring(on_warning, handle_timeout)

    def stop_monitoring(self) -> None:
        self.session.stop_monitoring()

    def update_activity(self) -> None:
        self.session.update_activity()

    def install(self, target: QObject) -> None:
        """Watch target (usually the QApplication) for user input."""
        self.uninstall()
        self._event_filter = ActivityEventFilter(self)
        self._watched = target
        target.installEventFilter(self._event_filter)

    def uninstall(self) -> None:
        if self._watched is not None and self._event_filter is not None:
            self._watched.removeEventFilter(self._event_filter)
        self._event_filter = None
        self._watched = None

    # Authentication

    def handle_auth_failure(self, identifier: str) -> bool:
        """
        Record a failed login for identifier.

        Returns:
            True if identifier is now locked out
        """
        self.failures.record_failure(identifier)
        if not self.failures.is_locked_out(identifier):
            return False

        remaining = self.failures.get_remaining_lockout_time(identifier)
        self.events.log_security_event(
            'account_locked',
            {'identifier': identifier, 'remaining_seconds': int(remaining)},
            'warning',
        )
        return True

    def is_account_locked(self, identifier: str) -> bool:
        return self.failures.is_locked_out(identifier)

    def get_remaining_lockout_time(self, identifier: str) -> float:
        return self.failures.get_remaining_lockout_time(identifier)

    def clear_auth_failures(self, identifier: str) -> None:
        self.failures.clear_failures(identifier)
