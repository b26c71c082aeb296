"""
taskquest.services.log_buffer — Recent Log Records for Diagnostics
===================================================================

The gamification pipeline absorbs store and predicate failures instead of
raising them.  To keep those failures visible, the API process captures
recent log records into a bounded in-memory buffer which the diagnostics
endpoint serves.

One buffer per process; nothing is persisted.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

DEFAULT_CAPACITY = 1000
VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_buffer: LogBuffer | None = None
_lock = threading.Lock()


@dataclass(frozen=True, slots=True)
class LogEntry:
    """One captured log record."""

    timestamp: str
    level: str
    logger: str
    message: str
    exc_text: str | None = None

    def to_dict(self) -> dict[str, str | None]:
        return asdict(self)


class LogBuffer:
    """Thread-safe bounded buffer of :class:`LogEntry` objects."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        self._entries: deque[LogEntry] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def append(self, entry: LogEntry) -> None:
        with self._lock:
            self._entries.append(entry)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def get_entries(
        self,
        tail: int = 200,
        level: str | None = None,
        logger_prefix: str | None = None,
    ) -> list[dict[str, str | None]]:
        """Most recent *tail* entries at or above *level*, oldest first."""
        min_level = getattr(logging, level.upper(), 0) if level else 0

        with self._lock:
            snapshot = list(self._entries)

        results = [
            entry.to_dict()
            for entry in snapshot
            if getattr(logging, entry.level, 0) >= min_level
            and (not logger_prefix or entry.logger.startswith(logger_prefix))
        ]
        return results[-tail:] if tail else results

    @property
    def size(self) -> int:
        with self._lock:
            return len(self._entries)


class BufferHandler(logging.Handler):
    """Logging handler that appends records to a :class:`LogBuffer`."""

    def __init__(self, buffer: LogBuffer, level: int = logging.INFO) -> None:
        super().__init__(level)
        self._buffer = buffer

    def emit(self, record: logging.LogRecord) -> None:
        try:
            exc_text = None
            if record.exc_info:
                exc_text = logging.Formatter().formatException(record.exc_info)
            self._buffer.append(LogEntry(
                timestamp=datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
                level=record.levelname,
                logger=record.name,
                message=record.getMessage(),
                exc_text=exc_text,
            ))
        except Exception:
            self.handleError(record)


# ---------------------------------------------------------------------------
# Process-wide access
# ---------------------------------------------------------------------------
def get_buffer() -> LogBuffer:
    """Return (or create) the process-global log buffer."""
    global _buffer
    if _buffer is None:
        with _lock:
            if _buffer is None:
                _buffer = LogBuffer()
    return _buffer


def install_handler(logger_name: str = "taskquest", level: int = logging.INFO) -> BufferHandler:
    """Attach a :class:`BufferHandler` to *logger_name* (once).

    Re-installing returns the existing handler with its level updated.
    """
    target = logging.getLogger(logger_name)
    for handler in target.handlers:
        if isinstance(handler, BufferHandler):
            handler.setLevel(level)
            return handler

    handler = BufferHandler(get_buffer(), level=level)
    target.addHandler(handler)
    if target.level == logging.NOTSET or target.level > level:
        target.setLevel(level)
    return handler


def get_logs(
    tail: int = 200,
    level: str | None = None,
    logger_prefix: str | None = None,
) -> list[dict[str, str | None]]:
    """Convenience wrapper — fetch entries from the global buffer."""
    return get_buffer().get_entries(tail=tail, level=level, logger_prefix=logger_prefix)
