"""
Readiness probe definitions and evaluation.

Defines the probe contract, report types and the concurrent evaluator
that runs every registered probe.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping

logger = logging.getLogger(__name__)

Probe = Callable[[], None]
"""A readiness probe returns normally when ready and raises when not."""


@dataclass
class LivenessReport:
    """Liveness report. Produced only while the process can answer requests."""

    alive: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {"alive": self.alive}


@dataclass
class ReadinessReport:
    """
    Aggregated readiness report.

    Reasons are formatted as "<name>: <message>", one per failing probe.
    Their order is not stable across evaluations.
    """

    reasons: List[str] = field(default_factory=list)

    @property
    def ready(self) -> bool:
        """Check if every probe succeeded."""
        return not self.reasons

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary for JSON response.

        Returns:
            Dictionary representation, without "reasons" when ready
        """
        result: Dict[str, Any] = {"ready": self.ready}

        if self.reasons:
            result["reasons"] = list(self.reasons)

        return result


def _describe(error: BaseException) -> str:
    """Message of a probe failure, never raising."""
    try:
        message = str(error)
    except Exception:
        return type(error).__name__

    return message or type(error).__name__


def run_probes(probes: Mapping[str, Probe]) -> ReadinessReport:
    """
    Run all probes in parallel and collect their failures.

    Starts one thread per probe and waits for all of them. There is no
    per-probe timeout, so a probe that never returns blocks the call.

    Args:
        probes: Mapping of service name to probe

    Returns:
        ReadinessReport with one reason per failing probe
    """
    reasons: List[str] = []
    lock = threading.Lock()

    def _run(name: str, probe: Probe) -> None:
        # Anything but a normal return is a failure, BaseException included:
        # it cannot propagate out of this thread.
        try:
            probe()
        except BaseException as e:
            reason = f"{name}: {_describe(e)}"
            with lock:
                reasons.append(reason)
            logger.warning(f"Readiness probe failed: {reason}")

    threads = [
        threading.Thread(
            target=_run,
            args=(name, probe),
            name=f"probe-{name}",
            daemon=True,
        )
        for name, probe in probes.items()
    ]

    for thread in threads:
        thread.start()

    for thread in threads:
        thread.join()

    return ReadinessReport(reasons=reasons)
