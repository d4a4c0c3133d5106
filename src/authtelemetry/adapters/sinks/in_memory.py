"""In-memory sink adapters."""

import threading
from collections import deque
from collections.abc import Iterator

from authtelemetry.core.logs import level_rank
from authtelemetry.core.models import LogEntry


class InMemorySink:
    """List-backed implementation of SinkPort.

    Keeps every record. Suitable for testing and for dashboards in
    low-volume processes where persistence is not required.
    """

    def __init__(self) -> None:
        self._entries: list[LogEntry] = []
        self._lock = threading.Lock()

    def emit(self, entry: LogEntry) -> None:
        """Store a record."""
        with self._lock:
            self._entries.append(entry)

    @property
    def entries(self) -> list[LogEntry]:
        """Copy of all records in emission order."""
        with self._lock:
            return list(self._entries)

    def read(self, since: float = 0, level: str | None = None) -> Iterator[LogEntry]:
        """Read records newer than ``since``, optionally filtered by level.

        Returns records with timestamp > since, ordered by timestamp ascending.
        """
        with self._lock:
            filtered = [e for e in self._entries if e.timestamp > since]
        if level is not None:
            filtered = [e for e in filtered if e.level.upper() == level.upper()]
        yield from sorted(filtered, key=lambda e: e.timestamp)

    def with_prefix(self, prefix: str) -> list[LogEntry]:
        """Records whose message starts with a channel tag such as "[ERROR_ALERT]"."""
        return [e for e in self.entries if e.message.startswith(prefix)]

    def at_least(self, level: str) -> list[LogEntry]:
        """Records at or above a severity level."""
        rank = level_rank(level)
        return [e for e in self.entries if level_rank(e.level) >= rank]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


class RingBufferSink(InMemorySink):
    """Bounded implementation of SinkPort.

    Stores records in a fixed-size circular buffer. When the buffer is
    full, the oldest record is evicted to make room for the new one.

    Args:
        max_size: Maximum number of records to keep.
    """

    def __init__(self, max_size: int) -> None:
        super().__init__()
        self._entries: deque[LogEntry] = deque(maxlen=max_size)  # type: ignore[assignment]
