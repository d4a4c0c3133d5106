"""Correlation id generation and propagation.

A correlation id tags every record produced by one logical operation so
the records can be stitched back together downstream. Ids are generated
from the wall clock plus a random suffix from the `secrets` module, so
generation needs no shared state and is safe from any thread or task.

The id bound to the current call chain lives in a ContextVar, which
gives each thread and each asyncio task its own view.
"""

import secrets
import time
from collections.abc import Generator, Iterable, Mapping, MutableMapping
from contextlib import contextmanager
from contextvars import ContextVar

from authtelemetry.config import DEFAULT_CORRELATION_HEADER

# 8 random bytes -> 16 hex chars; combined with the millisecond timestamp
# the collision probability per millisecond is about n^2 / 2^65.
_SUFFIX_BYTES = 8

_current_correlation_id: ContextVar[str | None] = ContextVar(
    "authtelemetry_correlation_id", default=None
)

RawHeaders = Iterable[tuple[bytes, bytes]]


def current_correlation_id() -> str | None:
    """Return the correlation id bound to the current context, if any."""
    return _current_correlation_id.get()


@contextmanager
def bind_correlation_id(correlation_id: str) -> Generator[str]:
    """Bind a correlation id to the current context for the block's duration.

    Args:
        correlation_id: Id to bind.

    Yields:
        The bound id.
    """
    token = _current_correlation_id.set(correlation_id)
    try:
        yield correlation_id
    finally:
        _current_correlation_id.reset(token)


class CorrelationManager:
    """Generates correlation ids and moves them across service boundaries.

    Args:
        header_name: Carrier header name (default: "x-correlation-id").
    """

    def __init__(self, header_name: str = DEFAULT_CORRELATION_HEADER) -> None:
        self.header_name = header_name.lower()

    @staticmethod
    def generate() -> str:
        """Return a new id of the form ``trace-<epoch-ms>-<hex suffix>``."""
        return f"trace-{time.time_ns() // 1_000_000}-{secrets.token_hex(_SUFFIX_BYTES)}"

    def extract_or_generate(self, header_value: str | None) -> str:
        """Return the inbound id unchanged, or a fresh one when absent or empty."""
        if header_value:
            return header_value
        return self.generate()

    def extract_from_headers(self, headers: Mapping[str, str] | RawHeaders) -> str:
        """Find the carrier header (case-insensitive) and extract or generate.

        Args:
            headers: A str mapping, or ASGI-style raw ``(name, value)`` byte pairs.

        Returns:
            The propagated or newly generated correlation id.
        """
        if isinstance(headers, Mapping):
            for name, value in headers.items():
                if name.lower() == self.header_name:
                    return self.extract_or_generate(value)
            return self.generate()

        header_bytes = self.header_name.encode()
        for name, value in headers:
            if name.lower() == header_bytes:
                return self.extract_or_generate(value.decode("utf-8", errors="replace"))
        return self.generate()

    def inject(self, headers: MutableMapping[str, str], correlation_id: str) -> None:
        """Set the carrier header on outbound response headers."""
        headers[self.header_name] = correlation_id

    def inject_raw(self, headers: list[tuple[bytes, bytes]], correlation_id: str) -> None:
        """Set the carrier header on an ASGI raw header list, replacing any prior value."""
        header_bytes = self.header_name.encode()
        headers[:] = [(name, value) for name, value in headers if name.lower() != header_bytes]
        headers.append((header_bytes, correlation_id.encode()))
