"""Monitoring wrapper composing correlation, timing and error tracking.

``Monitor.wrap`` returns a function with the same call contract as the one
it wraps. Every invocation gets its own correlation id and timer, so the
same operation can be in flight any number of times concurrently.

Recording is best-effort: a failing sink is logged on the module logger
and never changes what the wrapped call returns or raises.
"""

import functools
import inspect
import logging
import time
from collections.abc import Awaitable, Callable, Generator
from contextlib import contextmanager
from typing import Any, ParamSpec, TypeVar, cast

from authtelemetry.core.correlation import (
    CorrelationManager,
    bind_correlation_id,
    current_correlation_id,
)
from authtelemetry.core.errors import ErrorAggregator, safe_message
from authtelemetry.core.logs import emit_best_effort, error, info
from authtelemetry.core.performance import PerformanceRecorder
from authtelemetry.core.ports import SinkPort

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")


class _Invocation:
    """Instrumentation state for one call of a monitored operation."""

    def __init__(self, monitor: "Monitor", operation: str, arg_count: int) -> None:
        self.monitor = monitor
        self.operation = operation
        self.arg_count = arg_count
        self.parent_id = current_correlation_id()
        self.correlation_id = monitor.correlation.generate()
        self.start = 0.0

    def _context(self) -> dict[str, Any]:
        context: dict[str, Any] = {
            "operation": self.operation,
            "correlation_id": self.correlation_id,
        }
        if self.parent_id is not None:
            context["parent_correlation_id"] = self.parent_id
        return context

    def started(self) -> None:
        emit_best_effort(
            self.monitor.sink,
            info(f"[MONITORING] {self.operation} started", **self._context()),
        )
        self.start = time.perf_counter()

    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self.start) * 1000

    def completed(self) -> None:
        duration_ms = self.elapsed_ms()
        self.monitor._quietly(
            self.monitor.recorder.record,
            self.operation,
            duration_ms,
            {"correlation_id": self.correlation_id},
        )
        emit_best_effort(
            self.monitor.sink,
            info(
                f"[MONITORING] {self.operation} completed",
                duration_ms=round(duration_ms, 2),
                success=True,
                **self._context(),
            ),
        )

    def failed(self, exc: BaseException) -> None:
        duration_ms = self.elapsed_ms()
        self.monitor._quietly(
            self.monitor.recorder.record,
            self.operation,
            duration_ms,
            {"correlation_id": self.correlation_id},
        )
        self.monitor._quietly(
            self.monitor.errors.track_error,
            exc,
            self.operation,
            correlation_id=self.correlation_id,
            metadata={"duration_ms": duration_ms, "args": self.arg_count},
        )
        emit_best_effort(
            self.monitor.sink,
            error(
                f"[MONITORING] {self.operation} failed",
                duration_ms=round(duration_ms, 2),
                success=False,
                error_type=type(exc).__name__,
                error=safe_message(exc),
                **self._context(),
            ),
        )


def _is_async_callable(fn: Callable[..., Any]) -> bool:
    if inspect.iscoroutinefunction(fn):
        return True
    call = getattr(type(fn), "__call__", None)
    return call is not None and inspect.iscoroutinefunction(call)


async def _settle(call: _Invocation, awaitable: Awaitable[Any]) -> Any:
    """Await a sync call's awaitable result and record how it settled."""
    with bind_correlation_id(call.correlation_id):
        try:
            result = await awaitable
        except BaseException as exc:
            call.failed(exc)
            raise
        call.completed()
        return result


class Monitor:
    """Wraps operations with correlation, timing and error tracking.

    Args:
        recorder: Receives the duration of every invocation.
        errors: Receives every error raised by a wrapped operation.
        sink: Destination for started/completed/failed records.
        correlation: Id generator (default: a new CorrelationManager).
    """

    def __init__(
        self,
        recorder: PerformanceRecorder,
        errors: ErrorAggregator,
        sink: SinkPort,
        correlation: CorrelationManager | None = None,
    ) -> None:
        self.recorder = recorder
        self.errors = errors
        self.sink = sink
        self.correlation = correlation or CorrelationManager()

    def _quietly(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        try:
            func(*args, **kwargs)
        except Exception:
            logger.warning("Telemetry recording failed in %s", func.__qualname__, exc_info=True)

    def wrap(self, operation: str, fn: Callable[P, R]) -> Callable[P, R]:
        """Instrument a callable.

        Coroutine functions, and objects whose ``__call__`` is a coroutine
        function, get an async wrapper that awaits them. Other callables
        get a sync wrapper; if such a callable returns an awaitable, the
        wrapper returns an awaitable in its place and the call is recorded
        once that settles. Results are returned and exceptions re-raised
        exactly as ``fn`` produced them, including cancellation.

        Args:
            operation: Operation name shared by all calls, e.g. "auth.login".
            fn: The callable to instrument.

        Returns:
            The instrumented callable.
        """
        if _is_async_callable(fn):
            async_fn = cast(Callable[..., Awaitable[Any]], fn)

            @functools.wraps(fn)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                call = _Invocation(self, operation, len(args))
                with bind_correlation_id(call.correlation_id):
                    call.started()
                    try:
                        result = await async_fn(*args, **kwargs)
                    except BaseException as exc:
                        call.failed(exc)
                        raise
                    call.completed()
                    return result

            return cast(Callable[P, R], async_wrapper)

        @functools.wraps(fn)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            call = _Invocation(self, operation, len(args))
            with bind_correlation_id(call.correlation_id):
                call.started()
                try:
                    result = fn(*args, **kwargs)
                except BaseException as exc:
                    call.failed(exc)
                    raise
                if not inspect.isawaitable(result):
                    call.completed()
                    return result
            return cast(R, _settle(call, result))

        return wrapper

    def monitored(self, operation: str) -> Callable[[Callable[P, R]], Callable[P, R]]:
        """Decorator form of ``wrap``.

        Example:
            ```python
            @monitor.monitored("auth.login")
            async def login(email: str, password: str) -> Session: ...
            ```
        """

        def decorator(fn: Callable[P, R]) -> Callable[P, R]:
            return self.wrap(operation, fn)

        return decorator

    @contextmanager
    def span(self, operation: str) -> Generator[str]:
        """Instrument a block of code instead of a single call.

        Yields:
            The correlation id generated for the block.
        """
        call = _Invocation(self, operation, 0)
        with bind_correlation_id(call.correlation_id):
            call.started()
            try:
                yield call.correlation_id
            except BaseException as exc:
                call.failed(exc)
                raise
            call.completed()
