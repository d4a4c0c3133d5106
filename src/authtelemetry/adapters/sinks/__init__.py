"""Sink adapters implementing SinkPort."""

from authtelemetry.adapters.sinks.fanout import FanoutSink
from authtelemetry.adapters.sinks.in_memory import InMemorySink, RingBufferSink
from authtelemetry.adapters.sinks.logging_sink import LoggingSink
from authtelemetry.adapters.sinks.stream import StreamSink

__all__ = [
    "FanoutSink",
    "InMemorySink",
    "LoggingSink",
    "RingBufferSink",
    "StreamSink",
]
