"""Cost formulas and billing-regime comparison.

Two regimes are modeled for the same workload:

- metered: active CPU time is billed, idle (I/O wait) time is not
- full duration: the whole wall-clock window is billed as CPU time

Memory and invocation charges are identical in both regimes.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable

from .pricing import DEFAULT_PRICING, PricingTable

logger = logging.getLogger(__name__)

MS_PER_HOUR = 1000 * 60 * 60
MB_PER_GB = 1000  # 128 MB is billed as 0.128 GB


@dataclass(frozen=True)
class CostBreakdown:
    """Cost of one workload under one pricing regime."""

    active_cpu_ms: float
    provisioned_memory_gb_hours: float
    invocations: int
    active_cpu_cost_usd: float
    memory_cost_usd: float
    invocation_cost_usd: float
    total_cost_usd: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "activeCpuMs": self.active_cpu_ms,
            "provisionedMemoryGbHours": self.provisioned_memory_gb_hours,
            "invocations": self.invocations,
            "activeCpuCostUsd": self.active_cpu_cost_usd,
            "memoryCostUsd": self.memory_cost_usd,
            "invocationCostUsd": self.invocation_cost_usd,
            "totalCostUsd": self.total_cost_usd,
        }


@dataclass(frozen=True)
class ResourceMetrics:
    """Split of a workload's wall time into active CPU and idle time."""

    active_cpu_ms: float
    idle_ms: float
    wall_duration_ms: float
    cpu_utilization_percent: float
    memory_mb: float
    concurrent_invocations: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "activeCpuTime": self.active_cpu_ms,
            "totalExecutionTime": self.wall_duration_ms,
            "memoryUsed": self.memory_mb,
            "cpuUtilization": self.cpu_utilization_percent,
            "concurrentRequests": self.concurrent_invocations,
            "idleTime": self.idle_ms,
        }


@dataclass(frozen=True)
class ResourceProfile:
    """Synthetic utilization profile of one workload execution."""

    wall_duration_ms: float
    cpu_utilization_percent: float
    memory_mb: float
    concurrent_invocations: int = 1

    def __post_init__(self):
        if self.wall_duration_ms < 0:
            raise ValueError(f"wall_duration_ms must be non-negative, got {self.wall_duration_ms}")
        if not 0 <= self.cpu_utilization_percent <= 100:
            raise ValueError(
                f"cpu_utilization_percent must be in [0, 100], got {self.cpu_utilization_percent}"
            )
        if self.memory_mb < 0:
            raise ValueError(f"memory_mb must be non-negative, got {self.memory_mb}")
        if self.concurrent_invocations < 1:
            raise ValueError(
                f"concurrent_invocations must be at least 1, got {self.concurrent_invocations}"
            )

    @property
    def memory_gb(self) -> float:
        return self.memory_mb / MB_PER_GB

    @property
    def duration_hours(self) -> float:
        return self.wall_duration_ms / MS_PER_HOUR

    @property
    def metrics(self) -> ResourceMetrics:
        return derive_resource_metrics(
            self.wall_duration_ms,
            self.cpu_utilization_percent,
            self.memory_mb,
            self.concurrent_invocations,
        )

    @property
    def active_cpu_ms(self) -> float:
        return self.metrics.active_cpu_ms


@dataclass(frozen=True)
class CostComparison:
    """Metered cost versus full-duration cost for the same workload."""

    metered_cost: CostBreakdown
    full_duration_cost: CostBreakdown
    savings_usd: float
    savings_percent: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "meteredCost": self.metered_cost.to_dict(),
            "fullDurationCost": self.full_duration_cost.to_dict(),
            "savingsUsd": self.savings_usd,
            "savingsPercent": self.savings_percent,
        }


def cost_of(
    active_cpu_ms: float,
    memory_gb: float,
    duration_hours: float,
    invocations: int,
    pricing: PricingTable = DEFAULT_PRICING,
) -> CostBreakdown:
    """Compute the cost of a workload.

    Args:
        active_cpu_ms: Billed CPU time in milliseconds
        memory_gb: Provisioned memory in GB
        duration_hours: Time the memory stays provisioned, in hours
        invocations: Number of invocations billed
        pricing: Billing rates

    Returns:
        CostBreakdown with per-component and total cost in USD
    """
    active_cpu_cost = (active_cpu_ms / MS_PER_HOUR) * pricing.active_cpu_cost_per_hour
    memory_gb_hours = memory_gb * duration_hours
    memory_cost = memory_gb_hours * pricing.memory_cost_per_gb_hour
    invocation_cost = invocations * pricing.cost_per_invocation

    return CostBreakdown(
        active_cpu_ms=active_cpu_ms,
        provisioned_memory_gb_hours=memory_gb_hours,
        invocations=invocations,
        active_cpu_cost_usd=active_cpu_cost,
        memory_cost_usd=memory_cost,
        invocation_cost_usd=invocation_cost,
        total_cost_usd=active_cpu_cost + memory_cost + invocation_cost,
    )


def derive_resource_metrics(
    wall_duration_ms: float,
    cpu_utilization_percent: float,
    memory_mb: float,
    concurrent_invocations: int = 1,
) -> ResourceMetrics:
    """Split wall time into active CPU time and idle time."""
    active_cpu_ms = wall_duration_ms * (cpu_utilization_percent / 100)
    return ResourceMetrics(
        active_cpu_ms=active_cpu_ms,
        idle_ms=wall_duration_ms - active_cpu_ms,
        wall_duration_ms=wall_duration_ms,
        cpu_utilization_percent=cpu_utilization_percent,
        memory_mb=memory_mb,
        concurrent_invocations=concurrent_invocations,
    )


def _comparison(metered: CostBreakdown, full_duration: CostBreakdown) -> CostComparison:
    savings = full_duration.total_cost_usd - metered.total_cost_usd
    if full_duration.total_cost_usd == 0:
        savings_percent = 0.0
    else:
        savings_percent = savings / full_duration.total_cost_usd * 100

    return CostComparison(
        metered_cost=metered,
        full_duration_cost=full_duration,
        savings_usd=savings,
        savings_percent=savings_percent,
    )


def compare(
    profile: ResourceProfile, pricing: PricingTable = DEFAULT_PRICING, invocations: int = 1
) -> CostComparison:
    """Compare metered billing against full-duration billing for one workload.

    Both regimes use the same memory, duration and invocation count; only
    the billed CPU time differs (active CPU time versus full wall time).
    """
    memory_gb = profile.memory_gb
    duration_hours = profile.duration_hours

    metered = cost_of(profile.active_cpu_ms, memory_gb, duration_hours, invocations, pricing)
    full_duration = cost_of(profile.wall_duration_ms, memory_gb, duration_hours, invocations, pricing)

    comparison = _comparison(metered, full_duration)
    logger.debug(
        f"Cost comparison at {profile.cpu_utilization_percent}% CPU: "
        f"metered=${metered.total_cost_usd:.10f}, full=${full_duration.total_cost_usd:.10f}, "
        f"savings={comparison.savings_percent:.1f}%"
    )
    return comparison


def compare_shared(profile: ResourceProfile, pricing: PricingTable = DEFAULT_PRICING) -> CostComparison:
    """Compare N invocations sharing one instance against N isolated instances.

    The shared instance is billed once for its active CPU time and memory.
    The isolated baseline bills every invocation for the full wall time and
    its own copy of the memory.
    """
    n = profile.concurrent_invocations
    memory_gb = profile.memory_gb
    duration_hours = profile.duration_hours

    metered = cost_of(profile.active_cpu_ms, memory_gb, duration_hours, 1, pricing)
    isolated = cost_of(profile.wall_duration_ms * n, memory_gb * n, duration_hours, n, pricing)
    return _comparison(metered, isolated)


def cost_shares(breakdowns: Iterable[CostBreakdown]) -> Dict[str, float]:
    """Percent of the summed cost attributable to each billing component.

    Returns zeros for every component when the total is zero.
    """
    breakdowns = list(breakdowns)
    active_cpu = sum(b.active_cpu_cost_usd for b in breakdowns)
    memory = sum(b.memory_cost_usd for b in breakdowns)
    invocations = sum(b.invocation_cost_usd for b in breakdowns)
    total = active_cpu + memory + invocations

    if total == 0:
        return {"activeCpu": 0.0, "memory": 0.0, "invocations": 0.0}

    return {
        "activeCpu": active_cpu / total * 100,
        "memory": memory / total * 100,
        "invocations": invocations / total * 100,
    }
