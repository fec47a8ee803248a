"""Shell logging and audit trail.

The logger records structured entries for everything the shell does —
lines discarded, jobs started, children reaped, errors encountered.

It keeps the whole trail in memory (the shell's ``dmesg``) so tests
and callers can inspect what happened, and optionally *echoes* the
entries that matter to the user onto the error stream:

- **LogLevel** — severity levels ordered for filtering (DEBUG < CRITICAL).
- **LogEntry** — a single structured record (level, message, source).
- **Logger** — an append-only log with filtering, clearing and echo.

Design choices:
    - **IntEnum for levels** so they compare naturally with ``<``.
    - **Frozen dataclass for entries** — log records should be immutable.
    - **Echo through a sink callable** — the logger does not know about
      file descriptors; the console decides where echoed text goes.
    - **Appends are atomic list operations**, so the reader, the
      executor and the signal handlers can all log without a lock.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum
from typing import TypeAlias


class LogLevel(IntEnum):
    """Severity levels for log entries.

    Using IntEnum means levels compare with ``<`` / ``>`` naturally,
    which makes minimum-level filtering and echo thresholds trivial.
    """

    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3
    CRITICAL = 4


@dataclass(frozen=True)
class LogEntry:
    """A single structured log record.

    Attributes:
        level: The severity of this event.
        message: A human-readable description of what happened.
        source: The part of the shell that generated the event
            (e.g. "reader", "executor", "launcher").

    """

    level: LogLevel
    message: str
    source: str

    def __str__(self) -> str:
        """Format as ``[LEVEL] source: message``."""
        return f"[{self.level.name}] {self.source}: {self.message}"


LogSink: TypeAlias = Callable[[LogEntry], None]


class Logger:
    """Append-only log buffer with filtering and optional echo.

    The logger collects ``LogEntry`` records and provides simple
    querying by level and/or source.  When a *sink* is attached, every
    entry at or above ``echo_level`` is also handed to it.
    """

    def __init__(
        self,
        *,
        sink: LogSink | None = None,
        echo_level: LogLevel = LogLevel.WARNING,
    ) -> None:
        """Create an empty logger.

        Args:
            sink: Called with each entry at or above *echo_level*.
            echo_level: Minimum level handed to the sink.

        """
        self._entries: list[LogEntry] = []
        self._sink = sink
        self._echo_level = echo_level

    @property
    def entries(self) -> list[LogEntry]:
        """Return all log entries in chronological order."""
        return list(self._entries)

    @property
    def echo_level(self) -> LogLevel:
        """Return the minimum level echoed to the sink."""
        return self._echo_level

    def log(self, level: LogLevel, message: str, *, source: str) -> None:
        """Append a new entry to the log, echoing it if severe enough.

        Args:
            level: Severity of the event.
            message: Human-readable event description.
            source: Part of the shell that generated the event.

        """
        entry = LogEntry(level=level, message=message, source=source)
        self._entries.append(entry)
        if self._sink is not None and level >= self._echo_level:
            self._sink(entry)

    def filter(
        self,
        *,
        min_level: LogLevel | None = None,
        source: str | None = None,
    ) -> list[LogEntry]:
        """Return entries matching the given criteria.

        Args:
            min_level: If set, only return entries at or above this level.
            source: If set, only return entries from this source.

        Returns:
            A filtered list of log entries.

        """
        result = self._entries
        if min_level is not None:
            result = [e for e in result if e.level >= min_level]
        if source is not None:
            result = [e for e in result if e.source == source]
        return result if result is not self._entries else list(result)

    def clear(self) -> None:
        """Remove all log entries."""
        self._entries.clear()
