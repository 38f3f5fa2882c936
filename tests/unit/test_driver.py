"""
Unit tests for the rate-bounded load driver.
"""

import asyncio

import pytest

from fluidbench.exceptions import LoadTestValidationError
from fluidbench.loadtest import CallOutcome, LoadTestConfig, attempt_call, run_load_test
from fluidbench.metrics import SampleAggregator


class CountingTarget:
    """In-process call target that tracks calls and concurrency."""

    def __init__(self, latency_s=0.0, outcome=None, error=None):
        self.latency_s = latency_s
        self.outcome = outcome or CallOutcome(success=True)
        self.error = error
        self.calls = 0
        self.in_flight = 0
        self.max_in_flight = 0

    async def __call__(self):
        self.calls += 1
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.latency_s)
            if self.error is not None:
                raise self.error
            return self.outcome
        finally:
            self.in_flight -= 1


class TestAttemptCall:
    """Test conversion of call outcomes into observations."""

    @pytest.mark.asyncio
    async def test_success(self):
        observation = await attempt_call(CountingTarget())
        assert observation.success
        assert observation.error_reason is None
        assert observation.elapsed_ms >= 0
        assert observation.timestamp_ms > 0

    @pytest.mark.asyncio
    async def test_failed_outcome(self):
        target = CountingTarget(outcome=CallOutcome(success=False, error_reason="HTTP 503"))
        observation = await attempt_call(target)
        assert not observation.success
        assert observation.error_reason == "HTTP 503"

    @pytest.mark.asyncio
    async def test_failed_outcome_without_reason(self):
        observation = await attempt_call(CountingTarget(outcome=CallOutcome(success=False)))
        assert observation.error_reason == "Unknown error"

    @pytest.mark.asyncio
    async def test_exception_becomes_failure(self):
        observation = await attempt_call(CountingTarget(error=RuntimeError("connection reset")))
        assert not observation.success
        assert observation.error_reason == "connection reset"

    @pytest.mark.asyncio
    async def test_failed_mapping_outcome(self):
        async def target():
            return {"success": False, "errorReason": "HTTP 500"}

        observation = await attempt_call(target)
        assert observation.success is False
        assert observation.error_reason == "HTTP 500"

    @pytest.mark.asyncio
    async def test_successful_mapping_outcome(self):
        async def target():
            return {"success": True}

        observation = await attempt_call(target)
        assert observation.success is True
        assert observation.error_reason is None

    @pytest.mark.asyncio
    async def test_unrecognized_outcome_is_failure(self):
        async def target():
            return "ok"

        observation = await attempt_call(target)
        assert observation.success is False
        assert observation.error_reason == "Invalid call outcome of type str"


class TestRunLoadTest:
    """Test the launch loop and final join."""

    @pytest.mark.asyncio
    async def test_rejects_invalid_config_before_calling(self):
        target = CountingTarget()
        config = LoadTestConfig(duration_seconds=1, target_rate_per_second=1000)

        with pytest.raises(LoadTestValidationError):
            await run_load_test(config, target)
        assert target.calls == 0

    @pytest.mark.asyncio
    async def test_rejects_long_duration_before_calling(self):
        target = CountingTarget()
        with pytest.raises(LoadTestValidationError):
            await run_load_test(LoadTestConfig(duration_seconds=61, target_rate_per_second=1), target)
        assert target.calls == 0

    @pytest.mark.asyncio
    async def test_launches_at_configured_rate(self):
        target = CountingTarget(latency_s=0.01)
        config = LoadTestConfig(duration_seconds=1, target_rate_per_second=10)

        result = await run_load_test(config, target)

        assert 1 <= target.calls <= 11
        assert result.summary.total_requests == target.calls
        assert len(result.observations) == target.calls
        assert result.summary.success_rate_percent == 100
        assert result.summary.achieved_rate_per_second == target.calls / 1

    @pytest.mark.asyncio
    async def test_calls_overlap_and_all_complete(self):
        target = CountingTarget(latency_s=0.3)
        config = LoadTestConfig(duration_seconds=1, target_rate_per_second=10)

        result = await run_load_test(config, target)

        assert target.max_in_flight > 1
        assert target.in_flight == 0
        assert len(result.observations) == target.calls
        assert result.summary.min_ms >= 250

    @pytest.mark.asyncio
    async def test_failures_are_data(self):
        target = CountingTarget(error=ValueError("bad gateway"))
        config = LoadTestConfig(duration_seconds=1, target_rate_per_second=5)

        result = await run_load_test(config, target)

        assert result.summary.total_requests == target.calls
        assert result.summary.success_rate_percent == 0
        assert result.summary.median_ms is None
        assert all(obs.error_reason == "bad gateway" for obs in result.observations)

    @pytest.mark.asyncio
    async def test_observations_go_to_supplied_aggregator(self):
        aggregator = SampleAggregator()
        target = CountingTarget()
        config = LoadTestConfig(duration_seconds=1, target_rate_per_second=5)

        result = await run_load_test(config, target, aggregator=aggregator)

        assert len(aggregator) == result.summary.total_requests

    @pytest.mark.asyncio
    async def test_to_dict_limits_reported_observations(self):
        target = CountingTarget()
        config = LoadTestConfig(duration_seconds=1, target_rate_per_second=5, target="/api/x")

        result = await run_load_test(config, target)
        data = result.to_dict(max_observations=2)

        assert len(data["results"]) <= 2
        assert data["summary"]["targetRatePerSecond"] == 5
        assert data["summary"]["durationSeconds"] == 1
        assert data["config"]["targetFunction"] == "/api/x"

    @pytest.mark.asyncio
    async def test_cancelled_run_keeps_completed_observations(self):
        aggregator = SampleAggregator()
        target = CountingTarget(latency_s=0.05)
        config = LoadTestConfig(duration_seconds=10, target_rate_per_second=20)

        task = asyncio.ensure_future(run_load_test(config, target, aggregator=aggregator))
        await asyncio.sleep(0.5)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert len(aggregator) > 0
        assert target.in_flight == 0
        summary = aggregator.summarize(config.duration_seconds)
        assert summary.total_requests == len(aggregator)
        assert summary.success_rate_percent == 100
        assert summary.median_ms is not None
