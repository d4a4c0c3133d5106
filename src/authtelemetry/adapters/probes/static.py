"""Probe for dependencies the host has not wired a real check for."""

from collections.abc import Callable

from authtelemetry.core.models import HealthStatus, ProbeResult


def unconfigured_probe() -> Callable[[], ProbeResult]:
    """Report healthy, flagged as not actually checked."""

    def probe() -> ProbeResult:
        return ProbeResult(status=HealthStatus.HEALTHY, details={"checked": False})

    return probe
