"""
Sliding-window attempt tracking and authentication lockout.
"""

import logging
import threading
import time
from typing import Callable, Dict, List

from . import config

logger = logging.getLogger(__name__)


class RateLimiter:
    """Counts attempts per identifier over a trailing time window."""

    def __init__(
        self,
        max_attempts: int = config.MAX_LOGIN_ATTEMPTS,
        window: float = config.LOCKOUT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if window <= 0:
            raise ValueError("window must be positive")
        self.max_attempts = max_attempts
        self.window = window
        self._clock = clock
        self._attempts: Dict[str, List[float]] = {}
        self._lock = threading.Lock()

    def _prune(self, identifier: str, now: float) -> List[float]:
        """Drop attempts that left the window. Caller holds the lock."""
        attempts = [t for t in self._attempts.get(identifier, []) if now - t < self.window]
        if attempts:
            self._attempts[identifier] = attempts
        else:
            self._attempts.pop(identifier, None)
        return attempts

    def _sweep(self, now: float) -> None:
        """Forget identifiers whose newest attempt left the window. Caller holds the lock."""
        stale = [key for key, attempts in self._attempts.items() if now - attempts[-1] >= self.window]
        for key in stale:
            del self._attempts[key]

    def record_attempt(self, identifier: str) -> None:
        with self._lock:
            now = self._clock()
            self._sweep(now)
            self._prune(identifier, now)
            self._attempts.setdefault(identifier, []).append(now)

    def tracked_identifiers(self) -> int:
        """Number of identifiers currently holding attempts."""
        with self._lock:
            return len(self._attempts)

    def attempt_count(self, identifier: str) -> int:
        """Number of attempts inside the window."""
        with self._lock:
            return len(self._prune(identifier, self._clock()))

    def is_rate_limited(self, identifier: str) -> bool:
        return self.attempt_count(identifier) >= self.max_attempts

    def get_remaining_attempts(self, identifier: str) -> int:
        return max(0, self.max_attempts - self.attempt_count(identifier))

    def get_time_until_reset(self, identifier: str) -> float:
        """Seconds until the oldest counted attempt leaves the window."""
        with self._lock:
            now = self._clock()
            attempts = self._prune(identifier, now)
            if not attempts:
                return 0.0
            return max(0.0, attempts[0] + self.window - now)

    def reset(self, identifier: str) -> None:
        with self._lock:
            self._attempts.pop(identifier, None)


class AuthFailureMonitor(RateLimiter):
    """
    Tracks failed authentication attempts per identifier (usually an email).

    An identifier is locked out while max_attempts or more failures fall
    inside the trailing window. Lockout is reported as a boolean; it is an
    expected condition, not an error.
    """

    def record_failure(self, identifier: str) -> None:
        self.record_attempt(identifier)
        logger.debug(f"Authentication failure recorded for {identifier}")

    def is_locked_out(self, identifier: str) -> bool:
        return self.is_rate_limited(identifier)

    def get_remaining_lockout_time(self, identifier: str) -> float:
        """Seconds until the lockout lifts, 0 if not locked out."""
        with self._lock:
            now = self._clock()
            attempts = self._prune(identifier, now)
            if len(attempts) < self.max_attempts:
                return 0.0
            return max(0.0, attempts[0] + self.window - now)

    def clear_failures(self, identifier: str) -> None:
        """Forget all failures for identifier, e.g. after a successful login."""
        self.reset(identifier)
