"""Data models for load-test metrics."""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Observation:
    """Outcome of a single call attempt during a load-test window."""

    timestamp_ms: int  # Wall-clock completion time (epoch milliseconds)
    elapsed_ms: float
    success: bool
    error_reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "timestampMs": self.timestamp_ms,
            "elapsedMs": self.elapsed_ms,
            "success": self.success,
        }
        if self.error_reason is not None:
            data["errorReason"] = self.error_reason
        return data


@dataclass(frozen=True)
class SummaryStatistics:
    """Aggregate statistics over one load-test run.

    Timing fields cover successful observations only and are ``None`` when
    there were none.
    """

    total_requests: int
    successful_requests: int
    failed_requests: int
    success_rate_percent: float
    achieved_rate_per_second: float

    # Timing statistics (in milliseconds)
    mean_ms: Optional[float] = None
    median_ms: Optional[float] = None
    p95_ms: Optional[float] = None
    p99_ms: Optional[float] = None
    min_ms: Optional[float] = None
    max_ms: Optional[float] = None

    @property
    def has_timing_data(self) -> bool:
        return self.successful_requests > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalRequests": self.total_requests,
            "successfulRequests": self.successful_requests,
            "failedRequests": self.failed_requests,
            "successRatePercent": self.success_rate_percent,
            "meanMs": self.mean_ms,
            "medianMs": self.median_ms,
            "p95Ms": self.p95_ms,
            "p99Ms": self.p99_ms,
            "minMs": self.min_ms,
            "maxMs": self.max_ms,
            "achievedRatePerSecond": self.achieved_rate_per_second,
        }


@dataclass(frozen=True)
class BenchmarkStatistics:
    """Latency statistics for one benchmarked target."""

    iterations: int
    errors: int
    success_rate_percent: float
    min_ms: Optional[float] = None
    max_ms: Optional[float] = None
    avg_ms: Optional[float] = None
    median_ms: Optional[float] = None
    p95_ms: Optional[float] = None
    p99_ms: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "min": self.min_ms,
            "max": self.max_ms,
            "avg": self.avg_ms,
            "median": self.median_ms,
            "p95": self.p95_ms,
            "p99": self.p99_ms,
            "errors": self.errors,
            "successRate": self.success_rate_percent,
        }
