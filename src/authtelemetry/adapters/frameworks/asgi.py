"""ASGI generic adapter for correlation propagation and telemetry endpoints.

This adapter provides framework-agnostic ASGI components that can be used
with any ASGI server (uvicorn, hypercorn, daphne) without requiring FastAPI
as a dependency.
"""

import json
from collections.abc import Callable, Coroutine
from typing import Any

from authtelemetry.core.correlation import CorrelationManager, bind_correlation_id
from authtelemetry.core.models import HealthStatus
from authtelemetry.telemetry import Telemetry

# ASGI type aliases
Scope = dict[str, Any]
Receive = Callable[[], Coroutine[Any, Any, dict[str, Any]]]
Send = Callable[[dict[str, Any]], Coroutine[Any, Any, None]]
ASGIApp = Callable[[Scope, Receive, Send], Coroutine[Any, Any, None]]


async def _send_response(send: Send, status: int, content_type: str, body: str) -> None:
    """Send an HTTP response with headers and body.

    Args:
        send: ASGI send callable for writing response.
        status: HTTP status code.
        content_type: Content-Type header value.
        body: Response body as string (will be encoded to bytes).
    """
    headers = [(b"content-type", content_type.encode())]
    await send({"type": "http.response.start", "status": status, "headers": headers})
    await send({"type": "http.response.body", "body": body.encode()})


def health_status_code(status: HealthStatus) -> int:
    """HTTP status for a health verdict: 503 when unhealthy, 200 otherwise."""
    return 503 if status is HealthStatus.UNHEALTHY else 200


class CorrelationMiddleware:
    """ASGI middleware that propagates correlation ids.

    Reads the correlation header from the request (or generates an id),
    binds it to the request's context so records emitted while handling
    the request can reference it, and injects it into the response.
    """

    def __init__(
        self,
        app: ASGIApp,
        correlation: CorrelationManager | None = None,
    ) -> None:
        """Initialize the middleware with a wrapped app.

        Args:
            app: The ASGI application to wrap.
            correlation: Manager defining the carrier header
                (default: "x-correlation-id").
        """
        self.app = app
        self.correlation = correlation or CorrelationManager()

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI callable interface that processes requests through the wrapped app."""
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        correlation_id = self.correlation.extract_from_headers(scope.get("headers", []))

        async def wrapped_send(message: dict[str, Any]) -> None:
            if message["type"] == "http.response.start":
                headers = list(message.get("headers", []))
                self.correlation.inject_raw(headers, correlation_id)
                message = {**message, "headers": headers}
            await send(message)

        with bind_correlation_id(correlation_id):
            await self.app(scope, receive, wrapped_send)


def create_asgi_app(telemetry: Telemetry) -> ASGIApp:
    """Create an ASGI app with /metrics, /errors and /health endpoints.

    Args:
        telemetry: The pipeline whose snapshots are served.

    Returns:
        ASGI application callable.
    """

    async def app(scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            return

        path = scope["path"]

        if path == "/metrics":
            snapshot = telemetry.export_metrics()
            body = json.dumps({name: stats.to_dict() for name, stats in snapshot.items()})
            await _send_response(send, 200, "application/json", body)
        elif path == "/errors":
            body = json.dumps(telemetry.export_error_stats())
            await _send_response(send, 200, "application/json", body)
        elif path == "/health":
            report = await telemetry.perform_health_check()
            await _send_response(
                send,
                health_status_code(report.status),
                "application/json",
                json.dumps(report.to_dict()),
            )
        else:
            await _send_response(send, 404, "text/plain", "Not Found")

    return app
