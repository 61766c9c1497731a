"""
Readiness probes for common dependency clients.

Each factory wraps a client's own status check in the probe contract:
the returned callable returns None when the dependency is ready and
raises ProbeError otherwise. Clients are duck-typed so this module does
not import their libraries.

Example:
    checker.add_readiness_probe("db", sql_probe(engine))
    checker.add_readiness_probe("cache", redis_probe(redis_client))
"""

from typing import Any, Optional

import requests

from healthchecker.health.checks import Probe
from healthchecker.health.exceptions import ProbeError


def http_probe(
    endpoint: str,
    timeout: float = 5.0,
    session: Optional[requests.Session] = None,
) -> Probe:
    """
    Ping an HTTP endpoint. Any 2xx status is ready.

    When checking another service that uses this library, point at its
    liveness route to avoid cascading readiness requests.

    Args:
        endpoint: URL to GET
        timeout: Request timeout in seconds
        session: Optional requests session to reuse connections

    Returns:
        Probe for the endpoint
    """
    http = session or requests

    def probe() -> None:
        try:
            response = http.get(endpoint, timeout=timeout)
        except requests.RequestException as e:
            raise ProbeError(f"endpoint could not be reached: {e}") from e

        if not 200 <= response.status_code <= 299:
            raise ProbeError(
                f"service is not ready: {response.status_code} - {response.reason}"
            )

    return probe


def sql_probe(engine: Any) -> Probe:
    """
    Check a SQLAlchemy engine by running SELECT 1.

    Args:
        engine: Engine exposing connect() returning a context-managed connection

    Returns:
        Probe for the database
    """

    def probe() -> None:
        try:
            with engine.connect() as connection:
                connection.exec_driver_sql("SELECT 1")
        except Exception as e:
            raise ProbeError(f"database is not reachable: {e}") from e

    return probe


def redis_probe(client: Any) -> Probe:
    """
    Check a redis client with PING.

    Args:
        client: Client exposing ping()

    Returns:
        Probe for the redis server
    """

    def probe() -> None:
        try:
            pong = client.ping()
        except Exception as e:
            raise ProbeError(f"redis connection is not usable: {e}") from e

        if not pong:
            raise ProbeError("redis connection is not usable: ping failed")

    return probe


def mongo_probe(client: Any) -> Probe:
    """
    Check a MongoDB client with the ping command.

    Args:
        client: pymongo-style client exposing admin.command()

    Returns:
        Probe for the MongoDB deployment
    """

    def probe() -> None:
        try:
            client.admin.command("ping")
        except Exception as e:
            raise ProbeError(f"mongodb is not reachable: {e}") from e

    return probe


def nats_probe(client: Any) -> Probe:
    """
    Check that a NATS client is connected.

    Args:
        client: nats-py style client exposing is_connected

    Returns:
        Probe for the NATS connection
    """

    def probe() -> None:
        if not client.is_connected:
            state = "closed" if getattr(client, "is_closed", False) else "disconnected"
            raise ProbeError(f"nats connection is in unready state: {state}")

    return probe


def vault_probe(client: Any) -> Probe:
    """
    Check Vault health: initialized, unsealed and active.

    Args:
        client: hvac-style client exposing sys.read_health_status()

    Returns:
        Probe for the Vault server
    """

    def probe() -> None:
        try:
            health = client.sys.read_health_status(method="GET")
        except Exception as e:
            raise ProbeError(f"could not get vault health: {e}") from e

        # hvac returns the raw response for non-2xx health codes
        if hasattr(health, "json"):
            health = health.json()

        if not health.get("initialized"):
            raise ProbeError("vault is not initialized")

        if health.get("sealed"):
            raise ProbeError("vault is sealed")

        if health.get("standby"):
            raise ProbeError("vault is on standby")

    return probe


def grpc_probe(channel: Any, timeout: float = 1.0) -> Probe:
    """
    Check that a gRPC channel becomes ready.

    Requires the grpcio package (installed with the "grpc" extra).

    Args:
        channel: grpc.Channel to check
        timeout: Seconds to wait for the channel to become ready

    Returns:
        Probe for the channel
    """
    import grpc

    def probe() -> None:
        ready = grpc.channel_ready_future(channel)
        try:
            ready.result(timeout=timeout)
        except grpc.FutureTimeoutError as e:
            raise ProbeError(
                f"grpc connection is in unready state after {timeout}s"
            ) from e
        finally:
            # Unsubscribes from channel connectivity updates
            ready.cancel()

    return probe
