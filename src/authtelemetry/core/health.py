"""Aggregate health checking over a set of named probes.

## Usage

    checker = HealthChecker({"database": sqlite_probe("app.db")})
    checker.register("memory", memory_probe(512))

    report = await checker.perform_health_check()
    if report.healthy:
        print("All systems operational")
"""

import dataclasses
import inspect
import logging
import time
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone

from authtelemetry.core.models import HealthReport, HealthStatus, ProbeResult
from authtelemetry.core.ports import ProbePort

logger = logging.getLogger(__name__)

_SEVERITY = {
    HealthStatus.HEALTHY: 0,
    HealthStatus.DEGRADED: 1,
    HealthStatus.UNHEALTHY: 2,
}


def reduce_status(statuses: Iterable[HealthStatus]) -> HealthStatus:
    """Overall status: the most severe of the given statuses.

    An empty collection is healthy.
    """
    return max(statuses, key=_SEVERITY.__getitem__, default=HealthStatus.HEALTHY)


class HealthChecker:
    """Runs health probes and reduces them to one verdict.

    Args:
        probes: Initial probes by name, run in insertion order.
    """

    def __init__(self, probes: Mapping[str, ProbePort] | None = None) -> None:
        self._probes: dict[str, ProbePort] = dict(probes or {})
        self._start_time = time.time()

    def register(self, name: str, probe: ProbePort) -> None:
        """Add a probe, replacing any probe already registered under ``name``."""
        self._probes[name] = probe

    @property
    def probe_names(self) -> list[str]:
        return list(self._probes)

    async def _run_probe(self, name: str, probe: ProbePort) -> ProbeResult:
        start = time.perf_counter()
        try:
            outcome = probe()
            if inspect.isawaitable(outcome):
                outcome = await outcome
            if not isinstance(outcome, ProbeResult):
                raise TypeError(
                    f"probe returned {type(outcome).__name__}, expected ProbeResult"
                )
        except Exception as e:
            logger.warning("Health probe %s failed: %s", name, e)
            return ProbeResult(status=HealthStatus.UNHEALTHY, error=str(e) or type(e).__name__)

        if outcome.latency_ms is None:
            outcome = dataclasses.replace(
                outcome, latency_ms=(time.perf_counter() - start) * 1000
            )
        return outcome

    async def perform_health_check(self) -> HealthReport:
        """Run every probe and return the full report.

        A probe that raises is reported as unhealthy; it never prevents
        the remaining probes from running.
        """
        checks: dict[str, ProbeResult] = {}
        for name, probe in list(self._probes.items()):
            checks[name] = await self._run_probe(name, probe)

        return HealthReport(
            status=reduce_status(result.status for result in checks.values()),
            checks=checks,
            timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            uptime_seconds=time.time() - self._start_time,
        )
