"""
Unit tests for the batched benchmark suite.
"""

import asyncio

import pytest

from fluidbench.exceptions import LoadTestValidationError
from fluidbench.loadtest import BenchmarkConfig, CallOutcome, run_benchmark, run_suite


class BatchTarget:
    """Call target that records the peak number of concurrent calls."""

    def __init__(self, latency_s=0.01, fail=False):
        self.latency_s = latency_s
        self.fail = fail
        self.calls = 0
        self.in_flight = 0
        self.max_in_flight = 0

    async def __call__(self):
        self.calls += 1
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.latency_s)
        finally:
            self.in_flight -= 1
        if self.fail:
            return CallOutcome(success=False, error_reason="HTTP 500")
        return CallOutcome(success=True)


class TestRunBenchmark:
    """Test batched execution."""

    @pytest.mark.asyncio
    async def test_runs_all_iterations_in_bounded_batches(self):
        target = BatchTarget()
        result = await run_benchmark(target, iterations=5, concurrency=2, name="/api/fluid/io-bound")

        assert target.calls == 5
        assert target.max_in_flight <= 2
        assert result.function_name == "/api/fluid/io-bound"
        assert result.statistics.iterations == 5
        assert result.statistics.errors == 0
        assert result.statistics.success_rate_percent == 100

    @pytest.mark.asyncio
    async def test_all_failures_still_return_result(self):
        result = await run_benchmark(BatchTarget(fail=True), iterations=3, concurrency=3)

        assert result.statistics.errors == 3
        assert result.statistics.success_rate_percent == 0
        assert result.statistics.median_ms is None

    @pytest.mark.asyncio
    async def test_invalid_concurrency(self):
        with pytest.raises(LoadTestValidationError):
            await run_benchmark(BatchTarget(), iterations=3, concurrency=0)


class TestRunSuite:
    """Test suite-level aggregation."""

    @pytest.mark.asyncio
    async def test_fastest_and_slowest(self):
        targets = {
            "/api/edge/quick-response": BatchTarget(latency_s=0.0),
            "/api/fluid/io-bound": BatchTarget(latency_s=0.1),
        }
        config = BenchmarkConfig(iterations=2, concurrency=2, targets=list(targets))

        suite = await run_suite(targets, config)
        data = suite.to_dict()

        assert suite.fastest().function_name == "/api/edge/quick-response"
        assert suite.slowest().function_name == "/api/fluid/io-bound"
        assert data["summary"]["totalFunctions"] == 2
        assert data["summary"]["totalRequests"] == 4
        assert data["summary"]["totalTime"] > 0
        assert data["summary"]["fastest"]["functionName"] == "/api/edge/quick-response"

    @pytest.mark.asyncio
    async def test_suite_with_only_failures(self):
        targets = {"/api/x": BatchTarget(fail=True)}
        suite = await run_suite(targets, BenchmarkConfig(iterations=2, concurrency=1))

        assert suite.fastest() is None
        assert suite.to_dict()["summary"]["slowest"] is None
