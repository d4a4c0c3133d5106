"""Error fingerprinting and recurrence counting.

Errors are grouped by a signature built from the exception type, its
message and the traceback frames nearest the raise site. The count
table is bounded: when it is full, the signature seen least recently
is evicted.
"""

import hashlib
import threading
import traceback
from collections import OrderedDict
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from authtelemetry.config import (
    DEFAULT_ERROR_ALERT_THRESHOLD,
    DEFAULT_MAX_ERROR_SIGNATURES,
)
from authtelemetry.core.logs import critical, error as error_record
from authtelemetry.core.ports import SinkPort
from authtelemetry.exceptions import ConfigurationError

SIGNATURE_FRAMES = 3


def safe_message(exc: BaseException) -> str:
    """Render an exception's message, tolerating a failing ``__str__``."""
    try:
        return str(exc)
    except Exception:
        return f"<unprintable {type(exc).__name__}>"


def _format_traceback(exc: BaseException) -> str | None:
    if exc.__traceback__ is None:
        return None
    try:
        return "".join(traceback.format_exception(exc))
    except Exception:
        return None


def error_signature(exc: BaseException, frames: int = SIGNATURE_FRAMES) -> str:
    """Fingerprint an exception.

    The fingerprint covers the type name, the message and the innermost
    ``frames`` traceback frames as ``file:line:function``, raise site
    first. An exception that was never raised has no traceback and is
    fingerprinted by type and message alone.

    Args:
        exc: The exception to fingerprint.
        frames: Number of frames to include, counted from the raise site.

    Returns:
        ``"error-<16 hex chars>"`` (64-bit BLAKE2b).
    """
    stack_lines: list[str] = []
    if exc.__traceback__ is not None:
        innermost = traceback.extract_tb(exc.__traceback__)[-frames:]
        for frame in reversed(innermost):
            stack_lines.append(f"{frame.filename}:{frame.lineno}:{frame.name}")

    material = f"{type(exc).__name__}:{safe_message(exc)}:{'|'.join(stack_lines)}"
    digest = hashlib.blake2b(material.encode("utf-8", errors="replace"), digest_size=8)
    return f"error-{digest.hexdigest()}"


class ErrorAggregator:
    """Counts error recurrences and raises frequency alerts.

    Args:
        sink: Destination for error and alert records.
        alert_threshold: Count from which each occurrence emits an
            ``[ERROR_ALERT]`` record (default: 10).
        max_signatures: Maximum number of signatures kept (default: 10000).
    """

    def __init__(
        self,
        sink: SinkPort,
        alert_threshold: int = DEFAULT_ERROR_ALERT_THRESHOLD,
        max_signatures: int = DEFAULT_MAX_ERROR_SIGNATURES,
    ) -> None:
        if alert_threshold < 1:
            raise ConfigurationError(f"alert_threshold must be >= 1, got {alert_threshold}")
        if max_signatures < 1:
            raise ConfigurationError(f"max_signatures must be >= 1, got {max_signatures}")
        self._sink = sink
        self.alert_threshold = alert_threshold
        self.max_signatures = max_signatures
        self._counts: OrderedDict[str, int] = OrderedDict()
        self._lock = threading.Lock()

    def _increment(self, signature: str) -> int:
        with self._lock:
            count = self._counts.pop(signature, 0) + 1
            self._counts[signature] = count
            while len(self._counts) > self.max_signatures:
                self._counts.popitem(last=False)
            return count

    def track_error(
        self,
        exc: BaseException,
        operation: str,
        *,
        correlation_id: str,
        user_id: str | None = None,
        metadata: Mapping[str, Any] | None = None,
    ) -> int:
        """Count an error occurrence and emit its record.

        Args:
            exc: The error that occurred.
            operation: Operation name the error belongs to.
            correlation_id: Correlation id of the failed call.
            user_id: Acting user, if known.
            metadata: Extra context (e.g., duration).

        Returns:
            The signature's count after this occurrence.
        """
        signature = error_signature(exc)
        count = self._increment(signature)

        self._sink.emit(
            error_record(
                f"[ERROR_TRACKING] {type(exc).__name__} in {operation}",
                signature=signature,
                error_type=type(exc).__name__,
                error_message=safe_message(exc),
                stack=_format_traceback(exc),
                operation=operation,
                user_id=user_id or "anonymous",
                correlation_id=correlation_id,
                count=count,
                timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
                metadata=dict(metadata or {}),
            )
        )

        if count >= self.alert_threshold:
            self._sink.emit(
                critical(
                    "[ERROR_ALERT] High error frequency detected",
                    signature=signature,
                    count=count,
                    operation=operation,
                )
            )
        return count

    def export_error_stats(self) -> dict[str, int]:
        """Return a copy of the signature -> count table."""
        with self._lock:
            return dict(self._counts)
