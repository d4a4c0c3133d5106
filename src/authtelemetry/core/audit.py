"""Security audit trail for authentication events.

Email addresses, IP addresses and user agents never leave this module in
the clear. Each present value is replaced by a salted SHA-256 digest, so
the same raw value always maps to the same token within one salt and
events can still be correlated by it.
"""

import hashlib
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from authtelemetry.config import DEFAULT_PII_SALT
from authtelemetry.core.logs import critical, info, warn
from authtelemetry.core.ports import SinkPort


class AuthEvent(str, Enum):
    """Authentication events recorded in the audit trail."""

    LOGIN_SUCCESS = "LOGIN_SUCCESS"
    LOGIN_FAILURE = "LOGIN_FAILURE"
    REGISTRATION = "REGISTRATION"
    TOKEN_REFRESH = "TOKEN_REFRESH"


class Severity(str, Enum):
    INFO = "INFO"
    WARNING = "WARNING"


@dataclass(frozen=True)
class AuthContext:
    """Caller-supplied context for an audited event.

    Only ``correlation_id`` is required. PII fields are hashed before the
    entry is built.
    """

    correlation_id: str
    user_id: str | None = None
    email: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    error_code: str | None = None


@dataclass(frozen=True)
class AuditEntry:
    """Immutable audit record as it is emitted."""

    event: AuthEvent
    timestamp: str
    correlation_id: str
    user_id: str
    severity: Severity
    email_hash: str | None = None
    ip_address_hash: str | None = None
    user_agent_hash: str | None = None
    error_code: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialisable form; absent optional fields are left out."""
        data = asdict(self)
        data["event"] = self.event.value
        data["severity"] = self.severity.value
        return {key: value for key, value in data.items() if value is not None}


def hash_pii(value: str, salt: str = DEFAULT_PII_SALT) -> str:
    """Redact a PII value into a comparable, non-reversible token.

    Args:
        value: Raw value (email, IP address, user agent).
        salt: Process-wide salt.

    Returns:
        ``"sha256:<hex digest of value + salt>"``.
    """
    digest = hashlib.sha256((value + salt).encode("utf-8")).hexdigest()
    return f"sha256:{digest}"


def severity_for(event: AuthEvent) -> Severity:
    return Severity.WARNING if "FAILURE" in event.value else Severity.INFO


class SecurityAuditLogger:
    """Emits redacted audit records and escalates suspicious events.

    Args:
        sink: Destination for audit and alert records.
        salt: Salt for PII hashing.
        alerts_enabled: Emit ``[SECURITY_ALERT]`` records for failures and
            security error codes.
    """

    def __init__(
        self,
        sink: SinkPort,
        salt: str = DEFAULT_PII_SALT,
        alerts_enabled: bool = True,
    ) -> None:
        self._sink = sink
        self._salt = salt
        self.alerts_enabled = alerts_enabled

    def _redact(self, value: str | None) -> str | None:
        return hash_pii(value, self._salt) if value else None

    def build_entry(self, event: AuthEvent, context: AuthContext) -> AuditEntry:
        """Build the redacted entry for an event without emitting it."""
        event = AuthEvent(event)
        return AuditEntry(
            event=event,
            timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            correlation_id=context.correlation_id,
            user_id=context.user_id or "anonymous",
            severity=severity_for(event),
            email_hash=self._redact(context.email),
            ip_address_hash=self._redact(context.ip_address),
            user_agent_hash=self._redact(context.user_agent),
            error_code=context.error_code,
        )

    def log_auth_attempt(self, event: AuthEvent, context: AuthContext) -> AuditEntry:
        """Record an authentication event.

        The entry is emitted synchronously. Sink errors are not caught
        here; they propagate to the caller.

        Args:
            event: Kind of authentication event.
            context: Identity and request details of the attempt.

        Returns:
            The emitted AuditEntry.
        """
        entry = self.build_entry(event, context)
        payload = entry.to_dict()

        make_record = warn if entry.severity is Severity.WARNING else info
        self._sink.emit(make_record(f"[SECURITY_AUDIT] {entry.event.value}", **payload))

        if self._should_alert(entry):
            self._sink.emit(
                critical(
                    "[SECURITY_ALERT] Critical security event detected",
                    **payload,
                )
            )
        return entry

    def _should_alert(self, entry: AuditEntry) -> bool:
        if not self.alerts_enabled:
            return False
        if entry.event is AuthEvent.LOGIN_FAILURE:
            return True
        return entry.error_code is not None and "SECURITY" in entry.error_code
