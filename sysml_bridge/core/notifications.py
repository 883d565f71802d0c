"""User-visible notification log.

Entries are kept for the host to display and forwarded to ``logging`` at the
matching level.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


_LOG_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


@dataclass
class Notification:
    message: str
    severity: Severity
    timestamp: datetime = field(default_factory=datetime.now)


class NotificationLog:
    """Append-only sink for user-visible messages."""

    def __init__(self):
        self._entries: List[Notification] = []

    def append(self, message: str, severity: Severity = Severity.INFO, *args) -> Notification:
        """Record ``message % args`` with a severity."""
        text = message % args if args else message
        entry = Notification(message=text, severity=severity)
        self._entries.append(entry)
        logger.log(_LOG_LEVELS[severity], text)
        return entry

    @property
    def entries(self) -> List[Notification]:
        return list(self._entries)

    def warnings(self) -> List[Notification]:
        return [e for e in self._entries if e.severity == Severity.WARNING]

    def clear(self) -> None:
        self._entries.clear()
