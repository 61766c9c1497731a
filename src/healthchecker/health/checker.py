"""
Checker: readiness probe registry and health server lifecycle.

A Checker provides a liveness and a readiness endpoint for an
application. Use add_readiness_probe() to register a check for each
dependency, then serve() or serve_background() to expose the endpoints.

Registering probes while the server is running is not supported.
"""

import logging
import os
import signal
import threading
import time
from typing import Callable, Dict, Optional, Tuple, Union

from healthchecker.config import HealthSettings, get_settings
from healthchecker.health.checks import (
    LivenessReport,
    Probe,
    ReadinessReport,
    run_probes,
)
from healthchecker.health.exceptions import (
    DuplicateProbeError,
    HealthServerError,
    ServerAlreadyRunningError,
    ServerStartError,
    ShutdownTimeoutError,
)
from healthchecker.health.health_server import HealthHTTPServer

logger = logging.getLogger(__name__)

Address = Union[str, Tuple[str, int]]

# Seconds between shutdown checks of the serve loop
SERVE_POLL_INTERVAL = 0.025


def parse_address(address: Address) -> Tuple[str, int]:
    """
    Parse a listen address.

    Accepts "host:port", ":port" (all interfaces), "[ipv6]:port" or a
    (host, port) tuple.

    Args:
        address: Address to parse

    Returns:
        (host, port) tuple

    Raises:
        ValueError: If the address has no valid port
    """
    if isinstance(address, tuple):
        host, port = address
        return (host, int(port))

    host, sep, port = address.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"Invalid listen address {address!r}")

    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]

    return (host, int(port))


def _fatal(message: str) -> None:
    logger.critical(message)
    os._exit(1)


class Checker:
    """
    Liveness and readiness checker.

    Example:
        checker = Checker()
        checker.add_readiness_probe("db", sql_probe(engine))
        stop = checker.serve_background(":8080")
        try:
            run_application()
        finally:
            stop()
    """

    def __init__(self, settings: Optional[HealthSettings] = None):
        """
        Initialize checker.

        Args:
            settings: Health settings (loaded from environment if None)
        """
        self.settings = settings or get_settings()
        self._probes: Dict[str, Probe] = {}
        self._probes_lock = threading.Lock()
        self._httpd: Optional[HealthHTTPServer] = None
        self._server_lock = threading.Lock()

    # ================================================================
    # Probe registry
    # ================================================================

    def add_readiness_probe(self, name: str, probe: Probe) -> None:
        """
        Add a probe which runs each time readiness is checked.

        Args:
            name: Unique service name, used as prefix of failure reasons
            probe: Zero-argument callable raising when not ready

        Raises:
            DuplicateProbeError: If a probe with this name already exists
        """
        if not name:
            raise ValueError("Probe name must not be empty")
        if not callable(probe):
            raise TypeError(f"Probe '{name}' is not callable: {probe!r}")

        with self._probes_lock:
            if name in self._probes:
                raise DuplicateProbeError(name)
            self._probes[name] = probe

        logger.debug(f"Registered readiness probe '{name}'")

    @property
    def probes(self) -> Dict[str, Probe]:
        """Snapshot of registered probes."""
        with self._probes_lock:
            return dict(self._probes)

    # ================================================================
    # Checks
    # ================================================================

    def check_liveness(self) -> LivenessReport:
        """Liveness only confirms the process can handle a request."""
        return LivenessReport()

    def check_readiness(self) -> ReadinessReport:
        """
        Run all readiness probes concurrently.

        Returns:
            ReadinessReport with one reason per failing probe
        """
        return run_probes(self.probes)

    # ================================================================
    # Server lifecycle
    # ================================================================

    @property
    def is_running(self) -> bool:
        """Check if a server is bound."""
        with self._server_lock:
            return self._httpd is not None

    @property
    def server_address(self) -> Optional[Tuple[str, int]]:
        """Bound (host, port), or None when not serving."""
        with self._server_lock:
            if self._httpd is None:
                return None
            host, port = self._httpd.server_address[:2]
            return (host, port)

    def serve(self, address: Optional[Address] = None) -> None:
        """
        Serve health endpoints, blocking until shutdown.

        Args:
            address: Address to listen on (settings address if None)

        Raises:
            ServerAlreadyRunningError: If this checker is already serving
            ServerStartError: If the address cannot be bound
            HealthServerError: If the serve loop fails
        """
        httpd = self._bind(address)
        self._serve_forever(httpd)

    def serve_background(
        self, address: Optional[Address] = None
    ) -> Callable[[], None]:
        """
        Serve health endpoints on a background thread.

        Startup and serve failures terminate the process, as does a
        shutdown that exceeds its timeout.

        Args:
            address: Address to listen on (settings address if None)

        Returns:
            Zero-argument function that shuts the server down
        """
        try:
            httpd = self._bind(address)
        except HealthServerError as e:
            _fatal(f"Failed to start health server: {e}")
            raise

        def _serve() -> None:
            try:
                self._serve_forever(httpd)
            except HealthServerError as e:
                _fatal(f"Health server failed: {e}")

        thread = threading.Thread(target=_serve, name="health-server", daemon=True)
        thread.start()

        def _shutdown() -> None:
            try:
                self.shutdown()
            except ShutdownTimeoutError as e:
                _fatal(f"Failed to shutdown health server: {e}")
            thread.join(self.settings.shutdown_timeout)

        return _shutdown

    def shutdown(self) -> None:
        """
        Gracefully stop the server.

        Stops accepting connections and waits for in-flight requests,
        bounded by settings.shutdown_timeout. Does nothing if not serving.

        Raises:
            ShutdownTimeoutError: If the server did not stop in time
        """
        with self._server_lock:
            httpd = self._httpd

        if httpd is None:
            logger.debug("Health server is not running, nothing to shut down")
            return

        address = httpd.server_address[:2]
        timeout = self.settings.shutdown_timeout
        deadline = time.monotonic() + timeout
        logger.info(f"Shutting down health server at {address}")

        # BaseServer.shutdown() blocks until the serve loop exits
        stopper = threading.Thread(
            target=httpd.shutdown, name="health-server-shutdown", daemon=True
        )
        stopper.start()
        stopper.join(timeout)

        drained = not stopper.is_alive() and httpd.wait_for_idle(
            max(0.0, deadline - time.monotonic())
        )
        self._release(httpd)

        if not drained:
            logger.error(f"Health server at {address} did not stop in {timeout}s")
            raise ShutdownTimeoutError(address, timeout)

        logger.info("Health server stopped")

    def _bind(self, address: Optional[Address]) -> HealthHTTPServer:
        if address is None:
            address = self.settings.address

        with self._server_lock:
            if self._httpd is not None:
                raise ServerAlreadyRunningError(self._httpd.server_address[:2])

            try:
                httpd = HealthHTTPServer(
                    parse_address(address),
                    self,
                    alive_path=self.settings.alive_path,
                    ready_path=self.settings.ready_path,
                )
            except (OSError, ValueError) as e:
                logger.error(f"Failed to bind health server to {address}: {e}")
                raise ServerStartError(address, str(e)) from e

            self._httpd = httpd

        host, port = httpd.server_address[:2]
        logger.info(f"Health server started on http://{host}:{port}")
        return httpd

    def _serve_forever(self, httpd: HealthHTTPServer) -> None:
        try:
            httpd.serve_forever(poll_interval=SERVE_POLL_INTERVAL)
        except Exception as e:
            if not self._release(httpd):
                # Socket was closed by a timed-out shutdown
                return
            address = httpd.server_address[:2]
            raise HealthServerError(f"Health server failed: {e}", address) from e

    def _release(self, httpd: HealthHTTPServer) -> bool:
        """Close httpd and return to idle. Returns False if already released."""
        with self._server_lock:
            if self._httpd is not httpd:
                return False
            self._httpd = None
        httpd.server_close()
        return True


def run_health_server(
    checker: Optional[Checker] = None,
    settings: Optional[HealthSettings] = None,
) -> None:
    """
    Run standalone health check server.

    Blocks until SIGTERM/SIGINT received.

    Args:
        checker: Checker to serve (creates new if None)
        settings: Settings for a new checker (ignored if checker given)

    Example:
        >>> from healthchecker import Checker, run_health_server
        >>> checker = Checker()
        >>> checker.add_readiness_probe("cache", redis_probe(client))
        >>> run_health_server(checker)
    """
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s | %(levelname)-8s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    checker = checker or Checker(settings=settings)

    def _stop() -> None:
        try:
            checker.shutdown()
        except ShutdownTimeoutError as e:
            logger.error(str(e))

    def _signal_handler(signum: int, frame) -> None:
        logger.info(f"Received signal {signum}, shutting down...")
        # shutdown() waits for the serve loop running on this thread
        threading.Thread(target=_stop, daemon=True).start()

    try:
        signal.signal(signal.SIGTERM, _signal_handler)
        signal.signal(signal.SIGINT, _signal_handler)
    except ValueError:
        # Signal handlers only work in main thread
        pass

    checker.serve()
