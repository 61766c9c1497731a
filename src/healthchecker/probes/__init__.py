"""
Readiness probes for common dependency clients.
"""

from healthchecker.probes.adapters import (
    grpc_probe,
    http_probe,
    mongo_probe,
    nats_probe,
    redis_probe,
    sql_probe,
    vault_probe,
)

__all__ = [
    "grpc_probe",
    "http_probe",
    "mongo_probe",
    "nats_probe",
    "redis_probe",
    "sql_probe",
    "vault_probe",
]
