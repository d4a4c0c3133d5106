"""Sink forwarding records to a standard library logger."""

import logging

from authtelemetry.core.models import LogEntry

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# LogRecord attributes that extra= may not overwrite
_RESERVED = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class LoggingSink:
    """Implementation of SinkPort backed by ``logging``.

    Record attributes become ``extra`` fields on the LogRecord; names that
    clash with built-in LogRecord attributes are prefixed with ``attr_``.

    Args:
        logger: Target logger (default: the "authtelemetry" logger).
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger("authtelemetry")

    def emit(self, entry: LogEntry) -> None:
        level = _LEVELS.get(entry.level.upper(), logging.INFO)
        extra = {
            (f"attr_{key}" if key in _RESERVED else key): value
            for key, value in entry.attributes.items()
        }
        self.logger.log(level, entry.message, extra=extra)
