"""
Liveness and readiness endpoints for services.
"""

from healthchecker.config import HealthSettings
from healthchecker.health import (
    Checker,
    DuplicateProbeError,
    HealthCheckerError,
    HealthServerError,
    LivenessReport,
    Probe,
    ProbeError,
    ReadinessReport,
    ServerAlreadyRunningError,
    ServerStartError,
    ShutdownTimeoutError,
    run_health_server,
)

__version__ = "0.1.0"

__all__ = [
    "Checker",
    "HealthSettings",
    "DuplicateProbeError",
    "HealthCheckerError",
    "HealthServerError",
    "LivenessReport",
    "Probe",
    "ProbeError",
    "ReadinessReport",
    "ServerAlreadyRunningError",
    "ServerStartError",
    "ShutdownTimeoutError",
    "run_health_server",
]
