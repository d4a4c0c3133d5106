"""Telemetry facade owning one instance of every pipeline component.

Construct one ``Telemetry`` at process start and pass it to wherever
operations are wrapped or audited. All mutable state (sample windows,
error counts) belongs to that instance; nothing lives in module globals.
"""

from collections.abc import Callable
from contextlib import AbstractContextManager
from typing import ParamSpec, TypeVar

from authtelemetry.adapters.probes import jwt_probe, memory_probe, unconfigured_probe
from authtelemetry.adapters.sinks.stream import StreamSink
from authtelemetry.config import TelemetryConfig
from authtelemetry.core.audit import AuditEntry, AuthContext, AuthEvent, SecurityAuditLogger
from authtelemetry.core.correlation import CorrelationManager
from authtelemetry.core.errors import ErrorAggregator
from authtelemetry.core.health import HealthChecker
from authtelemetry.core.models import HealthReport, OperationStats
from authtelemetry.core.monitor import Monitor
from authtelemetry.core.performance import PerformanceRecorder
from authtelemetry.core.ports import ProbePort, SinkPort

P = ParamSpec("P")
R = TypeVar("R")


class Telemetry:
    """Entry point to the instrumentation pipeline.

    Args:
        config: Settings (default: ``TelemetryConfig.from_env()``).
        sink: Destination for every record (default: StreamSink).
        database_probe: Connectivity probe for the primary datastore,
            e.g. ``sqlite_probe("app.db")``. Without one the database
            check reports healthy with ``checked: False``.
    """

    def __init__(
        self,
        config: TelemetryConfig | None = None,
        sink: SinkPort | None = None,
        database_probe: ProbePort | None = None,
    ) -> None:
        self.config = config or TelemetryConfig.from_env()
        self.sink: SinkPort = sink or StreamSink()

        self.correlation = CorrelationManager(self.config.correlation_header)
        self.performance = PerformanceRecorder(self.sink, self.config.window_size)
        self.audit = SecurityAuditLogger(
            self.sink,
            salt=self.config.pii_salt,
            alerts_enabled=self.config.security_alerts,
        )
        self.errors = ErrorAggregator(
            self.sink,
            alert_threshold=self.config.error_alert_threshold,
            max_signatures=self.config.max_error_signatures,
        )
        self.monitor = Monitor(self.performance, self.errors, self.sink, self.correlation)
        self.health = HealthChecker(
            {
                "database": database_probe or unconfigured_probe(),
                "jwt": jwt_probe(),
                "memory": memory_probe(self.config.memory_threshold_mb),
            }
        )

    def wrap(self, operation: str, fn: Callable[P, R]) -> Callable[P, R]:
        return self.monitor.wrap(operation, fn)

    def monitored(self, operation: str) -> Callable[[Callable[P, R]], Callable[P, R]]:
        return self.monitor.monitored(operation)

    def span(self, operation: str) -> AbstractContextManager[str]:
        return self.monitor.span(operation)

    def log_auth_attempt(self, event: AuthEvent, context: AuthContext) -> AuditEntry:
        return self.audit.log_auth_attempt(event, context)

    def track_error(
        self,
        exc: BaseException,
        operation: str,
        *,
        correlation_id: str,
        user_id: str | None = None,
        metadata: dict[str, object] | None = None,
    ) -> int:
        return self.errors.track_error(
            exc,
            operation,
            correlation_id=correlation_id,
            user_id=user_id,
            metadata=metadata,
        )

    def export_metrics(self) -> dict[str, OperationStats]:
        return self.performance.export_snapshot()

    def export_error_stats(self) -> dict[str, int]:
        return self.errors.export_error_stats()

    async def perform_health_check(self) -> HealthReport:
        return await self.health.perform_health_check()
