"""Health probes for the default health checker."""

from authtelemetry.adapters.probes.memory import memory_probe
from authtelemetry.adapters.probes.sqlite import sqlite_probe
from authtelemetry.adapters.probes.static import unconfigured_probe
from authtelemetry.adapters.probes.token_selftest import jwt_probe

__all__ = [
    "jwt_probe",
    "memory_probe",
    "sqlite_probe",
    "unconfigured_probe",
]
