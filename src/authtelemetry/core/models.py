"""Core domain models for telemetry records."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class LogEntry:
    """A structured record emitted by the telemetry pipeline.

    Attributes:
        timestamp: Unix timestamp in seconds.
        level: Log level (e.g., INFO, WARN, ERROR).
        message: The log message, prefixed with its channel tag.
        attributes: Additional structured fields (JSON-serialisable).
    """

    timestamp: float
    level: str
    message: str
    attributes: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class OperationStats:
    """Point-in-time summary of one operation's sample window.

    All durations are in milliseconds.
    """

    count: int
    avg: float
    p50: float
    p95: float
    p99: float
    max: float

    def to_dict(self) -> dict[str, float | int]:
        return {
            "count": self.count,
            "avg": self.avg,
            "p50": self.p50,
            "p95": self.p95,
            "p99": self.p99,
            "max": self.max,
        }


class HealthStatus(str, Enum):
    """Health status levels, in increasing order of severity."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of a single health probe.

    Attributes:
        status: Health status reported by the probe.
        latency_ms: Time the probe took, if measured.
        error: Error message when the probe failed.
        details: Extra probe-specific fields (e.g., memory usage).
    """

    status: HealthStatus
    latency_ms: float | None = None
    error: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"status": self.status.value}
        if self.latency_ms is not None:
            data["latency_ms"] = self.latency_ms
        if self.error is not None:
            data["error"] = self.error
        if self.details:
            data.update(self.details)
        return data


@dataclass(frozen=True)
class HealthReport:
    """Aggregate health verdict over every registered probe."""

    status: HealthStatus
    checks: dict[str, ProbeResult]
    timestamp: str
    uptime_seconds: float

    @property
    def healthy(self) -> bool:
        return self.status == HealthStatus.HEALTHY

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "timestamp": self.timestamp,
            "uptime_seconds": self.uptime_seconds,
            "checks": {name: result.to_dict() for name, result in self.checks.items()},
        }
