"""
Inactivity monitor for an interactive session.

The monitor polls on a QTimer and compares the time since the last recorded
activity with a warning threshold and a timeout threshold. It only signals
through the callbacks it was started with; ending the session is up to the
caller.
"""

import logging
import time
from typing import Callable, Optional

from PyQt5.QtCore import QObject, QTimer

from . import config

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


class SessionMonitor(QObject):
    """Fires a warning and then a timeout callback after a period of inactivity."""

    IDLE = "IDLE"
    MONITORING = "MONITORING"

    def __init__(
        self,
        timeout: float = config.SESSION_TIMEOUT_SECONDS,
        warning: float = config.SESSION_WARNING_SECONDS,
        poll_interval: float = config.SESSION_POLL_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        parent: Optional[QObject] = None,
    ):
        """
        Args:
            timeout: Seconds of inactivity before on_timeout fires
            warning: Seconds of inactivity before on_warning fires
            poll_interval: Seconds between inactivity checks
            clock: Monotonic time source in seconds
            parent: Optional Qt parent
        """
        super().__init__(parent)
        if not 0 < warning < timeout:
            raise ValueError("warning must be positive and shorter than timeout")
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive")

        self.timeout = timeout
        self.warning = warning
        self.poll_interval = poll_interval
        self._clock = clock

        self.state = self.IDLE
        self.last_activity = self._clock()
        self._on_warning: Optional[Callback] = None
        self._on_timeout: Optional[Callback] = None
        self._warning_sent = False
        self._timeout_sent = False

        self._timer = QTimer(self)
        self._timer.timeout.connect(self.check)

    def is_monitoring(self) -> bool:
        return self.state == self.MONITORING

    def start_monitoring(self, on_warning: Callback, on_timeout: Callback) -> None:
        """Start watching for inactivity. Restarts if already monitoring."""
        self._timer.stop()
        self._on_warning = on_warning
        self._on_timeout = on_timeout
        self.state = self.MONITORING
        self.update_activity()
        self._timer.start(int(self.poll_interval * 1000))
        logger.debug(f"Session monitoring started (warning {self.warning}s, timeout {self.timeout}s)")

    def stop_monitoring(self) -> None:
        """Stop watching. Safe to call when already idle."""
        if self.state == self.IDLE:
            return
        self._timer.stop()
        self.state = self.IDLE
        self._on_warning = None
        self._on_timeout = None
        logger.debug("Session monitoring stopped")

    def update_activity(self) -> None:
        """Record user activity now and start a new inactivity episode."""
        self.last_activity = self._clock()
        self._warning_sent = False
        self._timeout_sent = False

    def seconds_since_activity(self) -> float:
        return max(0.0, self._clock() - self.last_activity)

    def seconds_until_timeout(self) -> float:
        return max(0.0, self.timeout - self.seconds_since_activity())

    def check(self) -> None:
        """Run one inactivity check. Called by the poll timer."""
        if self.state != self.MONITORING:
            return

        elapsed = self.seconds_since_activity()
        if elapsed >= self.timeout:
            if not self._timeout_sent:
                self._timeout_sent = True
                self._warning_sent = True
                logger.info(f"Session inactive for {int(elapsed)}s, timing out")
                self._fire(self._on_timeout)
        elif elapsed >= self.warning and not self._warning_sent:
            self._warning_sent = True
            logger.info(f"Session inactive for {int(elapsed)}s, warning")
            self._fire(self._on_warning)

    def _fire(self, callback: Optional[Callback]) -> None:
        # An exception escaping a Qt slot aborts the process.
        if callback is None:
            return
        try:
            callback()
        except Exception as e:
            logger.error(f"Session callback failed: {e}", exc_info=True)
