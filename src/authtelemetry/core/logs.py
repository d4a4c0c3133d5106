"""Helpers for building LogEntry records and emitting them to a sink."""

import logging
import time
from typing import Any

from authtelemetry.core.models import LogEntry
from authtelemetry.core.ports import SinkPort

logger = logging.getLogger(__name__)

# Levels in increasing severity; sinks use this to route and filter.
LEVELS = ("DEBUG", "INFO", "WARN", "ERROR", "CRITICAL")


def level_rank(level: str) -> int:
    """Return the severity rank of a level name, unknown levels rank as INFO."""
    normalized = "WARN" if level.upper() == "WARNING" else level.upper()
    try:
        return LEVELS.index(normalized)
    except ValueError:
        return LEVELS.index("INFO")


def log(level: str, message: str, **attributes: Any) -> LogEntry:
    """Create a log entry with automatic timestamp.

    Args:
        level: Log level (e.g., "INFO", "ERROR", "DEBUG")
        message: The log message
        **attributes: Additional structured fields

    Returns:
        LogEntry with current timestamp
    """
    return LogEntry(
        timestamp=time.time(),
        level=level,
        message=message,
        attributes=dict(attributes),
    )


def info(message: str, **attributes: Any) -> LogEntry:
    """Create an INFO log entry with automatic timestamp."""
    return log("INFO", message, **attributes)


def warn(message: str, **attributes: Any) -> LogEntry:
    """Create a WARN log entry with automatic timestamp."""
    return log("WARN", message, **attributes)


def error(message: str, **attributes: Any) -> LogEntry:
    """Create an ERROR log entry with automatic timestamp."""
    return log("ERROR", message, **attributes)


def critical(message: str, **attributes: Any) -> LogEntry:
    """Create a CRITICAL log entry with automatic timestamp."""
    return log("CRITICAL", message, **attributes)


def emit_best_effort(sink: SinkPort, entry: LogEntry) -> bool:
    """Emit an entry, logging and dropping any sink failure.

    Used on paths where a broken sink must not change the outcome of the
    instrumented operation.

    Returns:
        True if the sink accepted the entry.
    """
    try:
        sink.emit(entry)
    except Exception:
        logger.warning("Dropped telemetry record %r", entry.message, exc_info=True)
        return False
    return True
