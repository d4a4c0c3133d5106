"""Shared test fixtures for all test modules."""

from pathlib import Path

import pytest

from authtelemetry.adapters.sinks.in_memory import InMemorySink
from authtelemetry.config import TelemetryConfig
from authtelemetry.core.models import HealthStatus, ProbeResult
from authtelemetry.telemetry import Telemetry

try:
    import httpx
except ImportError:
    httpx = None


@pytest.fixture
def sink() -> InMemorySink:
    """Provide an empty in-memory sink."""
    return InMemorySink()


@pytest.fixture
def config() -> TelemetryConfig:
    """Default config with a fixed salt, independent of the environment."""
    return TelemetryConfig(pii_salt="test-salt")


@pytest.fixture
def telemetry(config: TelemetryConfig, sink: InMemorySink) -> Telemetry:
    """Telemetry pipeline writing to the in-memory sink."""
    return Telemetry(config=config, sink=sink)


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    """Provide a temporary database path for connectivity probe tests."""
    return str(tmp_path / "app.db")


@pytest.fixture
def static_probe():
    """Factory fixture for probes that always report a given status."""

    def _probe(status: HealthStatus):
        def probe() -> ProbeResult:
            return ProbeResult(status=status)

        return probe

    return _probe


class FailingSink:
    """Sink whose emit always raises."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error or OSError("sink unavailable")
        self.attempts = 0

    def emit(self, entry) -> None:
        self.attempts += 1
        raise self.error


@pytest.fixture
def failing_sink() -> FailingSink:
    """Sink that raises on every emit."""
    return FailingSink()


# === ASGI Test Fixtures ===


@pytest.fixture
def asgi_scope():
    """Factory fixture for creating ASGI scope dicts."""
    from authtelemetry.adapters.frameworks.asgi import Scope

    def _scope(method: str = "GET", path: str = "/test") -> Scope:
        return {
            "type": "http",
            "method": method,
            "path": path,
            "query_string": b"",
            "headers": [],
        }

    return _scope


@pytest.fixture
def asgi_send_capture():
    """Fixture that returns a send callable and a responses list for capture."""

    responses: list[dict[str, object]] = []

    async def send(message: dict[str, object]) -> None:
        """Capture ASGI messages."""
        responses.append(message)

    return send, responses


@pytest.fixture
def asgi_test_client():
    """Factory fixture that creates an httpx.AsyncClient for ASGI testing.

    Usage:
        async def test_something(asgi_test_client):
            app = create_asgi_app(telemetry)
            async with asgi_test_client(app) as client:
                response = await client.get("/endpoint")
    """
    if httpx is None:
        pytest.skip("httpx not installed")

    def _get_client(app):
        """Return an AsyncClient context manager for the given app."""
        return httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url="http://test"
        )

    return _get_client
