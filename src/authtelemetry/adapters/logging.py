"""Bridge from the standard library ``logging`` module to a SinkPort.

Application log records travel through the same sink as telemetry
records and pick up the correlation id bound to the current call.
"""

import logging

from authtelemetry.core.correlation import current_correlation_id
from authtelemetry.core.errors import safe_message
from authtelemetry.core.models import LogEntry
from authtelemetry.core.ports import SinkPort

# Attributes every LogRecord carries; anything else came from ``extra``
_BUILTIN_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

_DEFAULT_INCLUDE_ATTRS = ("module", "funcName", "lineno")

_SCALARS = (str, int, float, bool)

_FORMATTER = logging.Formatter()


class TelemetryHandler(logging.Handler):
    """Logging handler that turns LogRecords into sink records.

    Each record carries the logger name, the selected LogRecord fields,
    scalar ``extra`` values, the bound correlation id (unless ``extra``
    supplies one) and, for ``logger.exception`` calls, the exception type,
    message and formatted traceback.

    Args:
        sink: Destination for converted records.
        include_attrs: LogRecord fields to copy (default: module, funcName,
            lineno).

    Example:
        ```python
        logging.getLogger("auth").addHandler(TelemetryHandler(telemetry.sink))
        ```
    """

    def __init__(
        self,
        sink: SinkPort,
        include_attrs: list[str] | tuple[str, ...] | None = None,
    ) -> None:
        super().__init__()
        self._sink = sink
        self._include_attrs = tuple(include_attrs or _DEFAULT_INCLUDE_ATTRS)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self._sink.emit(self.to_entry(record))
        except Exception:
            self.handleError(record)

    def to_entry(self, record: logging.LogRecord) -> LogEntry:
        """Convert a LogRecord without emitting it."""
        attributes: dict[str, object] = {"logger": record.name}
        for name in self._include_attrs:
            value = getattr(record, name, None)
            if value is not None:
                attributes[name] = value

        attributes.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _BUILTIN_ATTRS and isinstance(value, _SCALARS)
        )

        if "correlation_id" not in attributes:
            correlation_id = current_correlation_id()
            if correlation_id is not None:
                attributes["correlation_id"] = correlation_id

        if record.exc_info and record.exc_info[1] is not None:
            exc = record.exc_info[1]
            attributes["exc_type"] = type(exc).__name__
            attributes["exc_message"] = safe_message(exc)
            attributes["exc_traceback"] = _FORMATTER.formatException(record.exc_info)

        level = "WARN" if record.levelno == logging.WARNING else record.levelname
        return LogEntry(
            timestamp=record.created,
            level=level,
            message=record.getMessage(),
            attributes=attributes,
        )
