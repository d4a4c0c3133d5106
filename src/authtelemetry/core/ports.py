"""Port interfaces for telemetry sinks and health probes.

These protocols define the contracts that adapters must implement.
The core components depend only on these interfaces, not concrete
implementations.
"""

from collections.abc import Awaitable
from typing import Protocol, runtime_checkable

from authtelemetry.core.models import LogEntry, ProbeResult


@runtime_checkable
class SinkPort(Protocol):
    """Port for emitting structured records.

    A sink accepts one record at a time and is line-oriented: each entry
    is expected to end up as one line (or one message) downstream.
    Examples: StreamSink, InMemorySink, LoggingSink.
    """

    def emit(self, entry: LogEntry) -> None:
        """Emit a single record.

        Errors raised here are the sink's own; callers decide whether
        to propagate them.
        """
        ...


@runtime_checkable
class ProbePort(Protocol):
    """Port for a health probe.

    A probe is any callable with no arguments returning a ProbeResult,
    either directly or as an awaitable.
    """

    def __call__(self) -> ProbeResult | Awaitable[ProbeResult]: ...
