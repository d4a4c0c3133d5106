"""Self-test probe for the token signing subsystem.

Signs a short-lived token with a throwaway key and verifies it again,
which exercises the same PyJWT code paths that session tokens use.
"""

import secrets
import time
from collections.abc import Callable

import jwt

from authtelemetry.core.models import HealthStatus, ProbeResult

_ALGORITHM = "HS256"


def jwt_probe(algorithm: str = _ALGORITHM) -> Callable[[], ProbeResult]:
    """Create a probe that round-trips a token through encode and decode."""

    def probe() -> ProbeResult:
        key = secrets.token_hex(32)
        nonce = secrets.token_hex(8)
        now = int(time.time())
        token = jwt.encode(
            {"sub": "healthcheck", "nonce": nonce, "iat": now, "exp": now + 60},
            key,
            algorithm=algorithm,
        )
        claims = jwt.decode(token, key, algorithms=[algorithm])
        if claims.get("nonce") != nonce:
            return ProbeResult(status=HealthStatus.UNHEALTHY, error="Token claims mismatch")
        return ProbeResult(status=HealthStatus.HEALTHY, details={"algorithm": algorithm})

    return probe
