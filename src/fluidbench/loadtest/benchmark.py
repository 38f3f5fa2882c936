"""Batched benchmark suite."""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from ..metrics import BenchmarkStatistics, summarize_benchmark
from .config import BenchmarkConfig
from .driver import attempt_call
from .targets import CallTarget

logger = logging.getLogger(__name__)

DEFAULT_TARGETS = [
    "/api/fluid/cpu-intensive",
    "/api/fluid/io-bound",
    "/api/fluid/concurrent",
    "/api/edge/quick-response",
    "/api/edge/geo-location",
    "/api/serverless/traditional",
    "/api/ai/text-generation",
    "/api/ai/agent-simulation",
]

# Request bodies the demo endpoints expect
DEFAULT_PAYLOADS: Dict[str, Dict[str, Any]] = {
    "/api/fluid/cpu-intensive": {"iterations": 30},
    "/api/fluid/io-bound": {"delay": 1000},
    "/api/fluid/concurrent": {"concurrentTasks": 3},
    "/api/edge/quick-response": {"message": "benchmark test"},
    "/api/edge/geo-location": {"userMessage": "benchmark test"},
    "/api/serverless/traditional": {"complexity": 500},
    "/api/ai/text-generation": {"tokens": 50},
    "/api/ai/agent-simulation": {"steps": 2},
}


@dataclass
class BenchmarkResult:
    """Statistics for one benchmarked target."""

    function_name: str
    statistics: BenchmarkStatistics

    def to_dict(self) -> Dict[str, Any]:
        return {"functionName": self.function_name, "results": self.statistics.to_dict()}


@dataclass
class SuiteResult:
    """Results for every target in a suite run."""

    config: BenchmarkConfig
    results: List[BenchmarkResult]
    total_time_ms: float

    def fastest(self) -> Optional[BenchmarkResult]:
        """Target with the lowest minimum latency."""
        timed = [r for r in self.results if r.statistics.min_ms is not None]
        return min(timed, key=lambda r: r.statistics.min_ms) if timed else None

    def slowest(self) -> Optional[BenchmarkResult]:
        """Target with the highest maximum latency."""
        timed = [r for r in self.results if r.statistics.max_ms is not None]
        return max(timed, key=lambda r: r.statistics.max_ms) if timed else None

    def to_dict(self) -> Dict[str, Any]:
        num_functions = len(self.results)
        fastest = self.fastest()
        slowest = self.slowest()
        return {
            "benchmarkConfig": {
                "iterations": self.config.iterations,
                "concurrency": self.config.concurrency,
                "functions": list(self.config.targets),
            },
            "results": [r.to_dict() for r in self.results],
            "summary": {
                "totalFunctions": num_functions,
                "totalRequests": num_functions * self.config.iterations,
                "totalTime": self.total_time_ms,
                "averageTimePerFunction": self.total_time_ms / num_functions if num_functions else 0.0,
                "fastest": fastest.to_dict() if fastest else None,
                "slowest": slowest.to_dict() if slowest else None,
            },
        }


async def run_benchmark(
    call_target: CallTarget, iterations: int, concurrency: int, name: str = "target"
) -> BenchmarkResult:
    """Run ``iterations`` calls in sequential batches of ``concurrency``.

    Each batch is awaited before the next starts, so at most ``concurrency``
    calls are in flight. Failed calls are counted as errors.
    """
    BenchmarkConfig(iterations=iterations, concurrency=concurrency).validate()

    latencies: List[float] = []
    errors = 0

    for start in range(0, iterations, concurrency):
        batch_size = min(concurrency, iterations - start)
        batch = await asyncio.gather(*(attempt_call(call_target) for _ in range(batch_size)))
        for observation in batch:
            if observation.success:
                latencies.append(observation.elapsed_ms)
            else:
                errors += 1

    if not latencies:
        logger.warning(f"All {iterations} requests failed for {name}")

    statistics = summarize_benchmark(latencies, errors)
    logger.info(
        f"Benchmarked {name}: {statistics.success_rate_percent:.1f}% success, "
        f"median={statistics.median_ms}ms"
    )
    return BenchmarkResult(function_name=name, statistics=statistics)


async def run_suite(targets: Mapping[str, CallTarget], config: BenchmarkConfig) -> SuiteResult:
    """Benchmark each target in turn.

    Targets run sequentially so one target's load does not skew another's
    latencies.
    """
    config.validate()
    started = time.perf_counter()
    results = []

    for name, call_target in targets.items():
        results.append(await run_benchmark(call_target, config.iterations, config.concurrency, name))

    total_time_ms = (time.perf_counter() - started) * 1000
    logger.info(f"Suite completed: {len(results)} targets in {total_time_ms:.0f}ms")
    return SuiteResult(config=config, results=results, total_time_ms=total_time_ms)
