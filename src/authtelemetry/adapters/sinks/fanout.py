"""Sink that forwards each record to several sinks."""

from collections.abc import Iterable

from authtelemetry.core.models import LogEntry
from authtelemetry.core.ports import SinkPort


class FanoutSink:
    """Emits every record to each sink in order.

    A failing sink stops the fan-out and its error propagates, like any
    other sink error.
    """

    def __init__(self, sinks: Iterable[SinkPort]) -> None:
        self.sinks = list(sinks)

    def emit(self, entry: LogEntry) -> None:
        for sink in self.sinks:
            sink.emit(entry)
