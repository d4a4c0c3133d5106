"""SQLite connectivity probe backed by aiosqlite."""

from collections.abc import Awaitable, Callable

import aiosqlite

from authtelemetry.core.models import HealthStatus, ProbeResult


def sqlite_probe(db_path: str, timeout: float = 5.0) -> Callable[[], Awaitable[ProbeResult]]:
    """Create a probe that opens the database and runs ``SELECT 1``.

    Args:
        db_path: Path to the SQLite database file (or ":memory:").
        timeout: Seconds to wait on a locked database.

    Returns:
        Async probe callable. Connection errors propagate to the health
        checker, which reports them as unhealthy.
    """

    async def probe() -> ProbeResult:
        async with aiosqlite.connect(db_path, timeout=timeout) as db:
            async with db.execute("SELECT 1") as cursor:
                row = await cursor.fetchone()
        if row is None or row[0] != 1:
            return ProbeResult(
                status=HealthStatus.UNHEALTHY, error="Unexpected response to SELECT 1"
            )
        return ProbeResult(status=HealthStatus.HEALTHY)

    return probe
