"""Exceptions raised by the telemetry pipeline itself.

Errors raised by instrumented operations are never wrapped in these;
they propagate to the caller unchanged.
"""


class TelemetryError(Exception):
    """Base class for errors raised by authtelemetry."""


class ConfigurationError(TelemetryError, ValueError):
    """A component was constructed with an impossible setting."""
