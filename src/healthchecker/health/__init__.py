"""
Health check system for services.

Provides Kubernetes-compatible health checks with:
- Liveness probe support
- Readiness probe support backed by registered dependency probes
"""

from healthchecker.health.checker import (
    Checker,
    parse_address,
    run_health_server,
)
from healthchecker.health.checks import (
    LivenessReport,
    Probe,
    ReadinessReport,
    run_probes,
)
from healthchecker.health.exceptions import (
    DuplicateProbeError,
    HealthCheckerError,
    HealthServerError,
    ProbeError,
    ServerAlreadyRunningError,
    ServerStartError,
    ShutdownTimeoutError,
)
from healthchecker.health.health_server import (
    HealthHTTPServer,
    HealthRequestHandler,
)

__all__ = [
    "Checker",
    "parse_address",
    "run_health_server",
    "LivenessReport",
    "Probe",
    "ReadinessReport",
    "run_probes",
    "DuplicateProbeError",
    "HealthCheckerError",
    "HealthServerError",
    "ProbeError",
    "ServerAlreadyRunningError",
    "ServerStartError",
    "ShutdownTimeoutError",
    "HealthHTTPServer",
    "HealthRequestHandler",
]
