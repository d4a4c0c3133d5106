"""FastAPI adapter for telemetry endpoints."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from authtelemetry.adapters.frameworks.asgi import health_status_code
from authtelemetry.telemetry import Telemetry


def create_telemetry_router(telemetry: Telemetry) -> APIRouter:
    """Create a FastAPI router with /metrics, /errors and /health endpoints.

    Args:
        telemetry: The pipeline whose snapshots are served.

    Returns:
        APIRouter with the three endpoints configured.
    """
    router = APIRouter()

    @router.get("/metrics")
    async def get_metrics() -> dict[str, dict[str, float | int]]:
        """Return the latency snapshot of every tracked operation."""
        snapshot = telemetry.export_metrics()
        return {name: stats.to_dict() for name, stats in snapshot.items()}

    @router.get("/errors")
    async def get_errors() -> dict[str, int]:
        """Return the error signature counts."""
        return telemetry.export_error_stats()

    @router.get("/health")
    async def get_health() -> JSONResponse:
        """Return the health report; 503 when unhealthy."""
        report = await telemetry.perform_health_check()
        return JSONResponse(
            content=report.to_dict(),
            status_code=health_status_code(report.status),
        )

    return router
