"""
Security event log.

Events go to the standard logger and to a bounded JSON trail in the key
store, so recent activity can be reviewed after the process exits.
"""

import datetime
import json
import logging
from typing import Any, Dict, List, Optional

from . import config
from .storage import KeyStore

logger = logging.getLogger(__name__)

_LEVELS = {
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class SecurityEventLog:
    """Records security events such as lockouts and session timeouts."""

    def __init__(self, store: Optional[KeyStore] = None, user_agent: str = ""):
        self.store = store
        self.user_agent = user_agent

    def log_security_event(self, event: str, details: Optional[Dict[str, Any]] = None,
                           severity: str = "info") -> Dict[str, Any]:
        """Log an event and append it to the stored trail."""
        if severity not in config.SECURITY_SEVERITIES:
            raise ValueError(f"Unknown severity: {severity}")

        entry = {
            'timestamp': datetime.datetime.now(datetime.timezone.utc).isoformat(),
            'event': event,
            'details': details or {},
            'severity': severity,
            'user_agent': self.user_agent,
        }
        logger.log(_LEVELS[severity], f"[SECURITY {severity.upper()}] {event} {entry['details']}")

        if self.store is not None:
            try:
                events = self.get_security_events()
                events.append(entry)
                events = events[-config.SECURITY_EVENTS_MAX:]
                self.store.set(config.SECURITY_EVENTS_KEY, json.dumps(events, default=str))
            except OSError as e:
                logger.error(f"Failed to store security event: {e}")
        return entry

    def get_security_events(self) -> List[Dict[str, Any]]:
        """Return stored events, oldest first. A malformed trail reads as empty."""
        if self.store is None:
            return []
        raw = self.store.get(config.SECURITY_EVENTS_KEY)
        if not raw:
            return []
        try:
            events = json.loads(raw)
        except ValueError:
            logger.warning("Stored security events are not valid JSON, ignoring them")
            return []
        if not isinstance(events, list):
            return []
        return events

    def clear_security_events(self) -> None:
        if self.store is not None:
            self.store.remove(config.SECURITY_EVENTS_KEY)
