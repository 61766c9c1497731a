"""
Unit tests for readiness reports and the concurrent probe evaluator.

Usage:
    pytest tests/unit/test_checks.py
"""

import asyncio
import threading
import time

from healthchecker.health import (
    LivenessReport,
    ProbeError,
    ReadinessReport,
    run_probes,
)


def ok() -> None:
    pass


def failing(message: str):
    def probe() -> None:
        raise ProbeError(message)

    return probe


def sleeping(seconds: float):
    def probe() -> None:
        time.sleep(seconds)

    return probe


class TestReports:
    """Tests for report serialization."""

    def test_liveness_report_is_alive(self):
        """Test liveness report serializes to alive=true."""
        assert LivenessReport().to_dict() == {"alive": True}

    def test_ready_report_omits_reasons(self):
        """Test an empty report is ready and has no reasons key."""
        report = ReadinessReport()

        assert report.ready is True
        assert report.to_dict() == {"ready": True}

    def test_unready_report_lists_reasons(self):
        """Test a report with reasons is not ready."""
        report = ReadinessReport(reasons=["db: connection refused"])

        assert report.ready is False
        assert report.to_dict() == {
            "ready": False,
            "reasons": ["db: connection refused"],
        }


class TestRunProbes:
    """Tests for run_probes()."""

    # ================================================================
    # Aggregation
    # ================================================================

    def test_no_probes_is_ready(self):
        """Test evaluation with no probes is ready."""
        report = run_probes({})

        assert report.ready is True
        assert report.reasons == []

    def test_all_probes_succeed(self):
        """Test all succeeding probes give a ready report."""
        report = run_probes({"a": ok, "b": ok, "c": ok})

        assert report.ready is True
        assert report.reasons == []

    def test_reasons_match_failing_probes(self):
        """Test one reason per failing probe, none for succeeding probes."""
        report = run_probes(
            {
                "db": failing("connection refused"),
                "cache": ok,
                "queue": failing("not connected"),
            }
        )

        assert report.ready is False
        assert set(report.reasons) == {
            "db: connection refused",
            "queue: not connected",
        }
        assert len(report.reasons) == 2

    def test_unexpected_exception_becomes_reason(self):
        """Test a crashing probe is isolated and reported."""

        def broken() -> None:
            raise RuntimeError("boom")

        report = run_probes({"broken": broken, "fine": ok})

        assert report.reasons == ["broken: boom"]

    def test_each_probe_called_exactly_once(self):
        """Test every probe runs once per evaluation."""
        calls = {"a": 0, "b": 0}
        lock = threading.Lock()

        def counting(name: str):
            def probe() -> None:
                with lock:
                    calls[name] += 1

            return probe

        run_probes({"a": counting("a"), "b": counting("b")})

        assert calls == {"a": 1, "b": 1}

    # ================================================================
    # Concurrency
    # ================================================================

    def test_latency_bounded_by_slowest_probe(self):
        """Test fast-failing and slow-succeeding probes run concurrently."""
        start = time.monotonic()
        report = run_probes({"fast": failing("down"), "slow": sleeping(0.3)})
        elapsed = time.monotonic() - start

        assert report.reasons == ["fast: down"]
        assert 0.3 <= elapsed < 0.5

    def test_latency_is_not_sum_of_probes(self):
        """Test N slow probes take about one probe's latency."""
        probes = {f"slow-{i}": sleeping(0.2) for i in range(5)}

        start = time.monotonic()
        report = run_probes(probes)
        elapsed = time.monotonic() - start

        assert report.ready is True
        assert elapsed < 0.6

    def test_waits_for_all_probes_after_failure(self):
        """Test a failure does not end evaluation early."""
        finished = threading.Event()

        def slow_ok() -> None:
            time.sleep(0.1)
            finished.set()

        run_probes({"fails": failing("down"), "slow": slow_ok})

        assert finished.is_set()

    # ================================================================
    # Failure isolation
    # ================================================================

    def test_base_exception_is_a_failure(self):
        """Test a BaseException such as CancelledError marks the service unready."""

        def cancelled() -> None:
            raise asyncio.CancelledError()

        def exiting() -> None:
            raise SystemExit(3)

        report = run_probes({"nats": cancelled, "worker": exiting, "db": ok})

        assert report.ready is False
        assert set(report.reasons) == {"nats: CancelledError", "worker: 3"}

    def test_unprintable_exception_is_a_failure(self):
        """Test an exception whose message cannot be rendered is still reported."""

        class Unprintable(Exception):
            def __str__(self):
                raise RuntimeError("cannot render")

        def broken() -> None:
            raise Unprintable()

        report = run_probes({"broken": broken})

        assert report.ready is False
        assert report.reasons == ["broken: Unprintable"]

    def test_empty_message_uses_exception_type(self):
        def silent() -> None:
            raise ProbeError()

        assert run_probes({"db": silent}).reasons == ["db: ProbeError"]
