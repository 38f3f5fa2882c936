"""Load-test metrics aggregation module."""

from .aggregator import SampleAggregator, nearest_rank, summarize, summarize_benchmark
from .models import BenchmarkStatistics, Observation, SummaryStatistics

__all__ = [
    "SampleAggregator",
    "Observation",
    "SummaryStatistics",
    "BenchmarkStatistics",
    "nearest_rank",
    "summarize",
    "summarize_benchmark",
]
