"""
Test fixtures and configuration.
"""

import time
from typing import Callable, Generator

import pytest

from healthchecker import Checker, HealthSettings
from healthchecker.config import reset_settings

TEST_HOST = "127.0.0.1"


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch) -> Generator[None, None, None]:
    """Isolate tests from HEALTH_* variables and cached settings."""
    for name in (
        "HEALTH_HOST",
        "HEALTH_PORT",
        "HEALTH_ALIVE_PATH",
        "HEALTH_READY_PATH",
        "HEALTH_SHUTDOWN_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def settings() -> HealthSettings:
    """Settings binding an ephemeral local port."""
    # Generous timeout: a failed background shutdown exits the process
    return HealthSettings(host=TEST_HOST, port=0, shutdown_timeout=2.0)


@pytest.fixture
def checker(settings: HealthSettings) -> Generator[Checker, None, None]:
    """Checker that is always shut down after the test."""
    checker = Checker(settings=settings)
    yield checker
    checker.shutdown()


@pytest.fixture
def serving_checker(checker: Checker) -> Generator[Checker, None, None]:
    """Checker serving in the background."""
    stop = checker.serve_background()
    yield checker
    stop()


@pytest.fixture
def base_url(serving_checker: Checker) -> str:
    """Base URL of the serving checker."""
    host, port = serving_checker.server_address
    return f"http://{host}:{port}"


@pytest.fixture
def wait_until() -> Callable[..., bool]:
    """Poll a predicate until it holds or the timeout expires."""

    def _wait(predicate: Callable[[], bool], timeout: float = 2.0) -> bool:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if predicate():
                return True
            time.sleep(0.01)
        return predicate()

    return _wait
