"""Sliding-window latency statistics per operation name.

Each operation name owns a fixed-capacity deque of durations in
milliseconds. Percentiles are recomputed from a sorted copy of the window
on every call.
"""

import math
import threading
from collections import deque
from collections.abc import Iterable, Mapping
from typing import Any

from authtelemetry.config import DEFAULT_WINDOW_SIZE
from authtelemetry.core.logs import warn
from authtelemetry.core.models import OperationStats
from authtelemetry.core.ports import SinkPort
from authtelemetry.exceptions import ConfigurationError

# A sample slower than this multiple of the window's p95 is an outlier.
OUTLIER_FACTOR = 2.0


def percentile(values: Iterable[float], p: float) -> float:
    """Nearest-rank percentile of a collection of samples.

    Sorts a copy ascending and indexes at ``ceil(p / 100 * n) - 1``,
    clamped to the first element.

    Args:
        values: Samples in any order.
        p: Percentile in the range 0-100.

    Returns:
        The selected sample, or 0.0 for an empty collection.
    """
    ordered = sorted(values)
    if not ordered:
        return 0.0
    index = math.ceil(p / 100 * len(ordered)) - 1
    return ordered[max(0, index)]


class PerformanceRecorder:
    """Records operation durations and flags outliers.

    Args:
        sink: Destination for performance alert records.
        window_size: Samples kept per operation (default: 100).
    """

    def __init__(self, sink: SinkPort, window_size: int = DEFAULT_WINDOW_SIZE) -> None:
        if window_size < 1:
            raise ConfigurationError(f"window_size must be >= 1, got {window_size}")
        self._sink = sink
        self.window_size = window_size
        self._windows: dict[str, deque[float]] = {}
        self._lock = threading.Lock()

    def record(
        self,
        operation: str,
        duration_ms: float,
        metadata: Mapping[str, Any] | None = None,
    ) -> None:
        """Add a duration to the operation's window.

        Once the window is full the oldest sample is evicted. If the new
        sample exceeds twice the window's p95 (new sample included), a
        ``[PERF_ALERT]`` record is emitted.

        Args:
            operation: Operation name, e.g. "auth.login".
            duration_ms: Measured duration in milliseconds.
            metadata: Extra context attached to any alert.
        """
        with self._lock:
            window = self._windows.get(operation)
            if window is None:
                window = deque(maxlen=self.window_size)
                self._windows[operation] = window
            window.append(duration_ms)
            snapshot = list(window)

        p95 = percentile(snapshot, 95)
        if duration_ms > p95 * OUTLIER_FACTOR:
            self._sink.emit(
                warn(
                    f"[PERF_ALERT] {operation} slow execution",
                    operation=operation,
                    duration_ms=round(duration_ms, 2),
                    p95_ms=round(p95, 2),
                    metadata=dict(metadata or {}),
                )
            )

    def samples(self, operation: str) -> list[float]:
        """Return a copy of an operation's window, oldest sample first."""
        with self._lock:
            window = self._windows.get(operation)
            return list(window) if window is not None else []

    def operations(self) -> list[str]:
        """Return the names of all operations recorded so far."""
        with self._lock:
            return list(self._windows)

    def export_snapshot(self) -> dict[str, OperationStats]:
        """Summarise every non-empty window.

        Windows are copied under the lock and summarised outside it, so a
        snapshot never blocks recording for longer than the copy.
        """
        with self._lock:
            copies = {name: list(window) for name, window in self._windows.items()}

        snapshot: dict[str, OperationStats] = {}
        for operation, samples in copies.items():
            if not samples:
                continue
            ordered = sorted(samples)
            snapshot[operation] = OperationStats(
                count=len(ordered),
                avg=sum(ordered) / len(ordered),
                p50=percentile(ordered, 50),
                p95=percentile(ordered, 95),
                p99=percentile(ordered, 99),
                max=ordered[-1],
            )
        return snapshot
