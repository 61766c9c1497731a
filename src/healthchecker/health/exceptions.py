"""
Health checker exceptions.

Defines exceptions raised by probe registration and server lifecycle.
"""

from typing import Any


class HealthCheckerError(Exception):
    """Base exception for health checker errors."""


class DuplicateProbeError(HealthCheckerError):
    """
    Exception raised when a probe name is registered twice.

    Indicates a configuration mistake. It is raised at startup and is not
    meant to be handled at runtime.
    """

    def __init__(self, name: str):
        """
        Initialize duplicate probe error.

        Args:
            name: Name of the probe that was already registered
        """
        self.name = name
        super().__init__(
            f"A readiness probe named '{name}' is already registered"
        )


class HealthServerError(HealthCheckerError):
    """Base exception for health server lifecycle errors."""

    def __init__(self, message: str, address: Any = None):
        """
        Initialize health server error.

        Args:
            message: Error message
            address: Address the server was bound (or binding) to
        """
        self.message = message
        self.address = address
        super().__init__(self.message)


class ServerAlreadyRunningError(HealthServerError):
    """Exception raised when serving on a checker that is already serving."""

    def __init__(self, address: Any):
        super().__init__(f"Server is already running at {address}", address)


class ServerStartError(HealthServerError):
    """Exception raised when the server cannot bind its address."""

    def __init__(self, address: Any, reason: str):
        """
        Initialize server start error.

        Args:
            address: Address that could not be bound
            reason: Underlying error message
        """
        self.reason = reason
        super().__init__(f"Could not listen on {address}: {reason}", address)


class ShutdownTimeoutError(HealthServerError):
    """Exception raised when shutdown does not complete within its timeout."""

    def __init__(self, address: Any, timeout: float):
        """
        Initialize shutdown timeout error.

        Args:
            address: Address of the server being shut down
            timeout: Shutdown timeout in seconds
        """
        self.timeout = timeout
        super().__init__(
            f"Server at {address} did not shut down within {timeout} seconds",
            address,
        )


class ProbeError(HealthCheckerError):
    """
    Exception raised by a probe when its dependency is not ready.

    The message becomes the readiness reason for that probe.
    """
