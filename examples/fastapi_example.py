"""Example FastAPI authentication service with telemetry endpoints.

Run with:
    uvicorn examples.fastapi_example:app --reload

Endpoints:
    POST /login          - Simulated login (password "secret" succeeds)
    POST /refresh        - Simulated token refresh
    /telemetry/metrics   - Latency snapshot per operation
    /telemetry/errors    - Error signature counts
    /telemetry/health    - Health report (503 when unhealthy)

Every response carries an x-correlation-id header. Send one to have it
propagated; otherwise a fresh id is generated.
"""

import asyncio
import logging

from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel

from authtelemetry import (
    AuthContext,
    AuthEvent,
    Telemetry,
    TelemetryHandler,
    current_correlation_id,
)
from authtelemetry.adapters.frameworks.asgi import CorrelationMiddleware
from authtelemetry.adapters.frameworks.fastapi import create_telemetry_router
from authtelemetry.adapters.probes import sqlite_probe

telemetry = Telemetry(database_probe=sqlite_probe("auth.db"))

# Route application logging through the same sink
logging.getLogger("auth").addHandler(TelemetryHandler(telemetry.sink))
logger = logging.getLogger("auth")

app = FastAPI(title="Auth Telemetry Example")
app.add_middleware(CorrelationMiddleware, correlation=telemetry.correlation)
app.include_router(create_telemetry_router(telemetry), prefix="/telemetry")


class Credentials(BaseModel):
    email: str
    password: str


class InvalidCredentials(Exception):
    pass


@telemetry.monitored("auth.login")
async def authenticate(credentials: Credentials) -> str:
    await asyncio.sleep(0.02)
    if credentials.password != "secret":
        raise InvalidCredentials("Invalid email or password")
    return "user-1"


@telemetry.monitored("auth.refresh")
async def refresh_token(user_id: str) -> str:
    await asyncio.sleep(0.005)
    return f"token-for-{user_id}"


def _context(request: Request, **fields: str | None) -> AuthContext:
    return AuthContext(
        correlation_id=current_correlation_id() or "",
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
        **fields,
    )


@app.post("/login")
async def login(credentials: Credentials, request: Request) -> dict[str, str]:
    try:
        user_id = await authenticate(credentials)
    except InvalidCredentials as exc:
        telemetry.log_auth_attempt(
            AuthEvent.LOGIN_FAILURE,
            _context(request, email=credentials.email, error_code="INVALID_CREDENTIALS"),
        )
        raise HTTPException(status_code=401, detail=str(exc)) from exc

    telemetry.log_auth_attempt(
        AuthEvent.LOGIN_SUCCESS, _context(request, email=credentials.email, user_id=user_id)
    )
    logger.info("login accepted", extra={"user_id": user_id})
    return {"user_id": user_id}


@app.post("/refresh")
async def refresh(request: Request, user_id: str = "user-1") -> dict[str, str]:
    token = await refresh_token(user_id)
    telemetry.log_auth_attempt(AuthEvent.TOKEN_REFRESH, _context(request, user_id=user_id))
    return {"token": token}
