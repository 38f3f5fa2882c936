"""Sample aggregation and summary statistics for load tests."""

import logging
import math
import threading
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd

from .models import BenchmarkStatistics, Observation, SummaryStatistics

logger = logging.getLogger(__name__)

MEDIAN_RANK = 0.5
P95_RANK = 0.95
P99_RANK = 0.99


def nearest_rank(sorted_values: Sequence[float], fraction: float) -> float:
    """Return ``sorted_values[floor(len * fraction)]`` without interpolation.

    The index arithmetic is kept exactly as ``floor(n * fraction)`` so results
    line up with existing dashboards; the median uses the same rule with
    ``fraction=0.5``.
    """
    n = len(sorted_values)
    if n == 0:
        raise ValueError("nearest_rank requires at least one value")
    index = min(int(math.floor(n * fraction)), n - 1)
    return float(sorted_values[index])


def _distribution(values: Iterable[float]) -> Dict[str, Optional[float]]:
    """Compute min/max/mean/median/p95/p99 over ``values`` (None when empty)."""
    ordered = np.sort(np.asarray(list(values), dtype=float))
    if ordered.size == 0:
        return {key: None for key in ("min", "max", "mean", "median", "p95", "p99")}

    return {
        "min": float(ordered[0]),
        "max": float(ordered[-1]),
        "mean": float(np.sum(ordered) / ordered.size),
        "median": nearest_rank(ordered, MEDIAN_RANK),
        "p95": nearest_rank(ordered, P95_RANK),
        "p99": nearest_rank(ordered, P99_RANK),
    }


def _percent(part: int, whole: int) -> float:
    return (part / whole) * 100 if whole > 0 else 0.0


def summarize(observations: Sequence[Observation], duration_seconds: float) -> SummaryStatistics:
    """Derive summary statistics from a complete set of observations.

    Args:
        observations: All observations collected during the run, in any order
        duration_seconds: Length of the launch window, used for the achieved rate

    Returns:
        SummaryStatistics; timing fields are None when nothing succeeded
    """
    successful = [obs for obs in observations if obs.success]
    total = len(observations)
    stats = _distribution(obs.elapsed_ms for obs in successful)

    return SummaryStatistics(
        total_requests=total,
        successful_requests=len(successful),
        failed_requests=total - len(successful),
        success_rate_percent=_percent(len(successful), total),
        achieved_rate_per_second=total / duration_seconds if duration_seconds > 0 else 0.0,
        mean_ms=stats["mean"],
        median_ms=stats["median"],
        p95_ms=stats["p95"],
        p99_ms=stats["p99"],
        min_ms=stats["min"],
        max_ms=stats["max"],
    )


def summarize_benchmark(latencies_ms: Sequence[float], errors: int) -> BenchmarkStatistics:
    """Compute benchmark statistics from successful latencies and an error count."""
    stats = _distribution(latencies_ms)
    attempts = len(latencies_ms) + errors

    return BenchmarkStatistics(
        iterations=attempts,
        errors=errors,
        success_rate_percent=_percent(len(latencies_ms), attempts),
        min_ms=stats["min"],
        max_ms=stats["max"],
        avg_ms=stats["mean"],
        median_ms=stats["median"],
        p95_ms=stats["p95"],
        p99_ms=stats["p99"],
    )


def log_summary(summary: SummaryStatistics, title: str = "LOAD TEST SUMMARY") -> None:
    """Log a human-readable summary at INFO level."""
    logger.info("=" * 60)
    logger.info(title)
    logger.info("=" * 60)
    logger.info(
        f"Requests: {summary.total_requests} total, {summary.successful_requests} successful "
        f"({summary.success_rate_percent:.1f}% success rate)"
    )
    logger.info(f"Achieved rate: {summary.achieved_rate_per_second:.2f} req/s")
    if summary.has_timing_data:
        logger.info(
            f"Latency (ms): mean={summary.mean_ms:.1f}, median={summary.median_ms:.1f}, "
            f"P95={summary.p95_ms:.1f}, P99={summary.p99_ms:.1f}"
        )
    else:
        logger.info("Latency (ms): no successful requests")
    logger.info("=" * 60)


class SampleAggregator:
    """Append-only, thread-safe collection of observations for one run."""

    def __init__(self) -> None:
        self._observations: List[Observation] = []
        self._lock = threading.Lock()

    def record(self, observation: Observation) -> None:
        """Record one completed call attempt."""
        with self._lock:
            self._observations.append(observation)
        logger.debug(
            f"Recorded observation: success={observation.success}, "
            f"elapsed={observation.elapsed_ms:.1f}ms"
        )

    @property
    def observations(self) -> List[Observation]:
        """Snapshot of the observations recorded so far."""
        with self._lock:
            return list(self._observations)

    def __len__(self) -> int:
        with self._lock:
            return len(self._observations)

    def summarize(self, duration_seconds: float) -> SummaryStatistics:
        return summarize(self.observations, duration_seconds)

    def to_dataframe(self) -> pd.DataFrame:
        """Get all observations as a pandas DataFrame ordered by timestamp."""
        observations = self.observations
        if not observations:
            return pd.DataFrame(columns=["timestamp_ms", "elapsed_ms", "success", "error_reason"])

        df = pd.DataFrame([
            {
                "timestamp_ms": obs.timestamp_ms,
                "elapsed_ms": obs.elapsed_ms,
                "success": obs.success,
                "error_reason": obs.error_reason,
            }
            for obs in observations
        ])
        return df.sort_values("timestamp_ms", kind="stable").reset_index(drop=True)
