"""fluidbench: load-test statistics and active-CPU cost modeling for serverless workloads."""

from .cost import (
    DEFAULT_PRICING,
    CostBreakdown,
    CostComparison,
    PricingTable,
    ResourceProfile,
    compare,
    cost_of,
    derive_resource_metrics,
)
from .exceptions import ConfigurationError, FluidBenchError, LoadTestValidationError
from .loadtest import LoadTestConfig, LoadTestResult, run_load_test
from .metrics import Observation, SampleAggregator, SummaryStatistics, summarize

__version__ = "0.1.0"
__all__ = [
    "CostBreakdown",
    "CostComparison",
    "PricingTable",
    "ResourceProfile",
    "DEFAULT_PRICING",
    "compare",
    "cost_of",
    "derive_resource_metrics",
    "ConfigurationError",
    "FluidBenchError",
    "LoadTestValidationError",
    "LoadTestConfig",
    "LoadTestResult",
    "run_load_test",
    "Observation",
    "SampleAggregator",
    "SummaryStatistics",
    "summarize",
]
