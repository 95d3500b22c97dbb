"""Player-facing game log.

The game log is the leveled message sink the simulation writes to. Entries
are kept newest-first and bounded; listeners are notified synchronously
for every new entry. Each entry is also forwarded to structlog so that
developer logs and the in-game journal never diverge.
"""

from __future__ import annotations

import itertools
import time
from collections.abc import Callable
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from spellbinder.core.logging import get_logger


logger = get_logger(__name__)


class LogLevel(StrEnum):
    """Severity of a game log entry."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


_STRUCTLOG_METHOD = {
    LogLevel.INFO: "info",
    LogLevel.SUCCESS: "info",
    LogLevel.WARNING: "warning",
    LogLevel.ERROR: "error",
}


class LogEntry(BaseModel):
    """A single game log entry."""

    model_config = ConfigDict(frozen=True)

    id: int
    timestamp: float
    level: LogLevel
    message: str
    details: dict[str, Any] = Field(default_factory=dict)


LogListener = Callable[[LogEntry], None]


class GameLog:
    """Bounded, subscribable log of game events.

    Attributes:
        max_entries: Maximum number of retained entries.
    """

    def __init__(
        self,
        *,
        max_entries: int = 200,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the log.

        Args:
            max_entries: Maximum number of retained entries.
            clock: Source of entry timestamps.
        """
        self.max_entries = max_entries
        self._clock = clock
        self._entries: list[LogEntry] = []
        self._listeners: list[LogListener] = []
        self._ids = itertools.count(1)

    @property
    def entries(self) -> list[LogEntry]:
        """Get a copy of all entries, newest first."""
        return list(self._entries)

    def log(
        self,
        level: LogLevel | str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> LogEntry:
        """Append an entry and notify listeners.

        Args:
            level: Entry severity.
            message: Human-readable message.
            details: Optional structured payload.

        Returns:
            The created entry.
        """
        entry = LogEntry(
            id=next(self._ids),
            timestamp=self._clock(),
            level=LogLevel(level),
            message=message,
            details=details or {},
        )
        self._entries.insert(0, entry)
        del self._entries[self.max_entries :]

        getattr(logger, _STRUCTLOG_METHOD[entry.level])(message, **entry.details)

        for listener in list(self._listeners):
            listener(entry)
        return entry

    def info(self, message: str, **details: Any) -> LogEntry:
        return self.log(LogLevel.INFO, message, details)

    def success(self, message: str, **details: Any) -> LogEntry:
        return self.log(LogLevel.SUCCESS, message, details)

    def warning(self, message: str, **details: Any) -> LogEntry:
        return self.log(LogLevel.WARNING, message, details)

    def error(self, message: str, **details: Any) -> LogEntry:
        return self.log(LogLevel.ERROR, message, details)

    def get_entries(
        self,
        level: LogLevel | str | None = None,
        limit: int | None = None,
    ) -> list[LogEntry]:
        """Get entries, optionally filtered by level.

        Args:
            level: Only return entries of this level.
            limit: Maximum number of entries to return.

        Returns:
            Matching entries, newest first.
        """
        entries = self._entries
        if level is not None:
            entries = [e for e in entries if e.level == LogLevel(level)]
        if limit is not None:
            entries = entries[:limit]
        return list(entries)

    def clear(self) -> None:
        self._entries.clear()

    def subscribe(self, listener: LogListener) -> Callable[[], None]:
        """Register a listener for new entries.

        Args:
            listener: Callback receiving each new entry.

        Returns:
            A callable that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe


__all__ = [
    "LogLevel",
    "LogEntry",
    "GameLog",
]
