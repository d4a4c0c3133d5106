"""Process memory probe backed by psutil."""

from collections.abc import Callable

import psutil

from authtelemetry.config import DEFAULT_MEMORY_THRESHOLD_MB
from authtelemetry.core.models import HealthStatus, ProbeResult

_BYTES_PER_MB = 1024 * 1024


def memory_probe(
    threshold_mb: float = DEFAULT_MEMORY_THRESHOLD_MB,
    process: psutil.Process | None = None,
) -> Callable[[], ProbeResult]:
    """Create a probe reporting resident memory of this process.

    Args:
        threshold_mb: Resident set size above which the probe is degraded.
        process: Process to inspect (default: the current process).

    Returns:
        Probe callable; degraded above the threshold, healthy otherwise.
    """
    proc = process or psutil.Process()

    def probe() -> ProbeResult:
        used_mb = proc.memory_info().rss / _BYTES_PER_MB
        status = HealthStatus.DEGRADED if used_mb > threshold_mb else HealthStatus.HEALTHY
        return ProbeResult(
            status=status,
            details={"usage_mb": round(used_mb, 2), "threshold_mb": threshold_mb},
        )

    return probe
