"""
Health check HTTP server.

Provides HTTP endpoints for health checks:
- GET /alive - Liveness probe
- GET /ready - Readiness probe

Route paths are configurable. Each connection is handled on its own thread.
"""

import json
import logging
import socket
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import TYPE_CHECKING, Any, Callable, Dict, Tuple
from urllib.parse import urlsplit

if TYPE_CHECKING:
    from healthchecker.health.checker import Checker

logger = logging.getLogger(__name__)


class HealthRequestHandler(BaseHTTPRequestHandler):
    """HTTP request handler for health endpoints."""

    protocol_version = "HTTP/1.1"
    server: "HealthHTTPServer"

    def do_GET(self):
        """Handle GET requests."""
        self._dispatch(send_body=True)

    def do_HEAD(self):
        """Handle HEAD requests."""
        self._dispatch(send_body=False)

    def _dispatch(self, send_body: bool) -> None:
        path = urlsplit(self.path).path
        routes: Dict[str, Callable[[], Tuple[int, Dict[str, Any]]]] = {
            self.server.alive_path: self._handle_liveness,
            self.server.ready_path: self._handle_readiness,
        }
        handler = routes.get(path, self._handle_404)

        try:
            status_code, data = handler()
        except Exception as e:
            logger.exception(f"Error handling {self.command} {self.path}")
            status_code, data = 500, {
                "error": "Internal Server Error",
                "message": str(e),
            }

        self._send_json_response(status_code, data, send_body)

    def _handle_liveness(self) -> Tuple[int, Dict[str, Any]]:
        report = self.server.checker.check_liveness()
        return 200, report.to_dict()

    def _handle_readiness(self) -> Tuple[int, Dict[str, Any]]:
        report = self.server.checker.check_readiness()
        status_code = 200 if report.ready else 503
        return status_code, report.to_dict()

    def _handle_404(self) -> Tuple[int, Dict[str, Any]]:
        return 404, {
            "error": "Not Found",
            "message": f"Path {self.path} not found",
            "available_endpoints": [
                self.server.alive_path,
                self.server.ready_path,
            ],
        }

    def _send_json_response(
        self, status_code: int, data: dict, send_body: bool = True
    ) -> None:
        """Send compact JSON response and close the connection."""
        body = json.dumps(data, separators=(",", ":")).encode("utf-8")

        self.send_response(status_code)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.send_header("Connection", "close")
        self.end_headers()
        self.close_connection = True

        if send_body:
            self.wfile.write(body)

    def log_message(self, format, *args):
        """Override to use Python logging instead of stderr."""
        logger.debug(f"{self.address_string()} - {format % args}")


class HealthHTTPServer(ThreadingHTTPServer):
    """
    Threaded HTTP server bound to a single Checker.

    Counts in-flight requests so shutdown can wait for them to drain.
    """

    daemon_threads = True
    block_on_close = False
    # An address already being served must fail to bind
    allow_reuse_port = False

    def __init__(
        self,
        server_address: Tuple[str, int],
        checker: "Checker",
        alive_path: str = "/alive",
        ready_path: str = "/ready",
    ):
        """
        Initialize and bind the server.

        Args:
            server_address: (host, port) to bind to
            checker: Checker answering liveness and readiness
            alive_path: Liveness route
            ready_path: Readiness route

        Raises:
            OSError: If the address cannot be bound
        """
        self.checker = checker
        self.alive_path = alive_path
        self.ready_path = ready_path
        self._in_flight = 0
        self._idle = threading.Condition()
        if ":" in server_address[0]:
            self.address_family = socket.AF_INET6
        super().__init__(server_address, HealthRequestHandler)

    def process_request(self, request, client_address):
        with self._idle:
            self._in_flight += 1
        try:
            super().process_request(request, client_address)
        except Exception:
            self._request_done()
            raise

    def process_request_thread(self, request, client_address):
        try:
            super().process_request_thread(request, client_address)
        finally:
            self._request_done()

    def _request_done(self) -> None:
        with self._idle:
            self._in_flight -= 1
            self._idle.notify_all()

    @property
    def in_flight(self) -> int:
        """Number of requests currently being handled."""
        with self._idle:
            return self._in_flight

    def wait_for_idle(self, timeout: float) -> bool:
        """
        Wait until no request is in flight.

        Args:
            timeout: Maximum seconds to wait

        Returns:
            True if drained, False if the timeout expired first
        """
        with self._idle:
            return self._idle.wait_for(lambda: self._in_flight == 0, timeout)
