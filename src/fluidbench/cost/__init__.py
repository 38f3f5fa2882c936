"""Active-CPU cost model and billing-regime comparison."""

from .formatting import format_cost, format_duration
from .model import (
    CostBreakdown,
    CostComparison,
    ResourceMetrics,
    ResourceProfile,
    compare,
    compare_shared,
    cost_of,
    cost_shares,
    derive_resource_metrics,
)
from .pricing import DEFAULT_PRICING, PricingTable, load_pricing
from .workloads import WORKLOAD_PRESETS, WorkloadPreset, get_preset, profile_for

__all__ = [
    "CostBreakdown",
    "CostComparison",
    "ResourceMetrics",
    "ResourceProfile",
    "PricingTable",
    "DEFAULT_PRICING",
    "WORKLOAD_PRESETS",
    "WorkloadPreset",
    "compare",
    "compare_shared",
    "cost_of",
    "cost_shares",
    "derive_resource_metrics",
    "format_cost",
    "format_duration",
    "get_preset",
    "load_pricing",
    "profile_for",
]
