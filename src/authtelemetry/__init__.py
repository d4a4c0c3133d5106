"""In-process telemetry and audit pipeline for authentication operations."""

from authtelemetry.adapters.logging import TelemetryHandler
from authtelemetry.adapters.sinks import (
    FanoutSink,
    InMemorySink,
    LoggingSink,
    RingBufferSink,
    StreamSink,
)
from authtelemetry.config import TelemetryConfig
from authtelemetry.core.audit import (
    AuditEntry,
    AuthContext,
    AuthEvent,
    SecurityAuditLogger,
    hash_pii,
)
from authtelemetry.core.correlation import (
    CorrelationManager,
    bind_correlation_id,
    current_correlation_id,
)
from authtelemetry.core.errors import ErrorAggregator, error_signature
from authtelemetry.core.health import HealthChecker, reduce_status
from authtelemetry.core.models import (
    HealthReport,
    HealthStatus,
    LogEntry,
    OperationStats,
    ProbeResult,
)
from authtelemetry.core.monitor import Monitor
from authtelemetry.core.performance import PerformanceRecorder, percentile
from authtelemetry.core.ports import ProbePort, SinkPort
from authtelemetry.exceptions import ConfigurationError, TelemetryError
from authtelemetry.telemetry import Telemetry

__all__ = [
    "AuditEntry",
    "AuthContext",
    "AuthEvent",
    "ConfigurationError",
    "CorrelationManager",
    "ErrorAggregator",
    "FanoutSink",
    "HealthChecker",
    "HealthReport",
    "HealthStatus",
    "InMemorySink",
    "LogEntry",
    "LoggingSink",
    "Monitor",
    "OperationStats",
    "PerformanceRecorder",
    "ProbePort",
    "ProbeResult",
    "RingBufferSink",
    "SecurityAuditLogger",
    "SinkPort",
    "StreamSink",
    "Telemetry",
    "TelemetryConfig",
    "TelemetryError",
    "TelemetryHandler",
    "bind_correlation_id",
    "current_correlation_id",
    "error_signature",
    "hash_pii",
    "percentile",
    "reduce_status",
]
