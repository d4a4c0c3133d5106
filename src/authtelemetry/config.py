"""Environment-driven configuration for the telemetry pipeline.

Every setting is optional and read from ``AUTHTELEMETRY_*`` environment
variables. A value that fails validation falls back to its default and
is reported on the module logger; configuration never stops the process
from starting.
"""

import logging
from typing import Any

from pydantic import (
    AliasChoices,
    Field,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

ENV_PREFIX = "AUTHTELEMETRY_"

DEFAULT_PII_SALT = "default-salt"
DEFAULT_ERROR_ALERT_THRESHOLD = 10
DEFAULT_WINDOW_SIZE = 100
DEFAULT_MEMORY_THRESHOLD_MB = 512.0
DEFAULT_MAX_ERROR_SIGNATURES = 10_000
DEFAULT_CORRELATION_HEADER = "x-correlation-id"


class TelemetryConfig(BaseSettings):
    """Settings shared by the telemetry components.

    Attributes:
        pii_salt: Salt appended to PII before hashing. Read from
            ``AUTHTELEMETRY_PII_SALT``, falling back to ``PII_SALT``.
        error_alert_threshold: Occurrence count at which an error signature
            starts producing high-frequency alerts.
        window_size: Capacity of each operation's sample window.
        memory_threshold_mb: Resident memory above which the memory probe
            reports degraded.
        max_error_signatures: Upper bound on tracked error signatures.
        correlation_header: Header carrying the correlation id (lowercased).
        security_alerts: Whether security alerts are emitted at all.
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    pii_salt: str = Field(
        default=DEFAULT_PII_SALT,
        min_length=1,
        validation_alias=AliasChoices(f"{ENV_PREFIX}PII_SALT", "PII_SALT"),
    )
    error_alert_threshold: int = Field(default=DEFAULT_ERROR_ALERT_THRESHOLD, gt=0)
    window_size: int = Field(default=DEFAULT_WINDOW_SIZE, gt=0)
    memory_threshold_mb: float = Field(
        default=DEFAULT_MEMORY_THRESHOLD_MB, gt=0, allow_inf_nan=False
    )
    max_error_signatures: int = Field(default=DEFAULT_MAX_ERROR_SIGNATURES, gt=0)
    correlation_header: str = Field(default=DEFAULT_CORRELATION_HEADER, min_length=1)
    security_alerts: bool = True

    @field_validator(
        "pii_salt",
        "error_alert_threshold",
        "window_size",
        "memory_threshold_mb",
        "max_error_signatures",
        "correlation_header",
        "security_alerts",
        mode="wrap",
    )
    @classmethod
    def _default_on_invalid(
        cls, value: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo
    ) -> Any:
        try:
            return handler(value)
        except ValidationError:
            default = cls.model_fields[info.field_name].default
            logger.warning(
                "Ignoring %s%s=%r, using %r",
                ENV_PREFIX,
                info.field_name.upper(),
                value,
                default,
            )
            return default

    @field_validator("correlation_header")
    @classmethod
    def _lowercase_header(cls, value: str) -> str:
        return value.lower()

    @classmethod
    def from_env(cls) -> "TelemetryConfig":
        """Build a config from the process environment.

        Returns:
            TelemetryConfig with every unset or invalid value defaulted.
        """
        return cls()
