"""
Unit tests for sample aggregation and summary statistics.
"""

import random
import threading

import pytest

from fluidbench.metrics import (
    Observation,
    SampleAggregator,
    nearest_rank,
    summarize,
    summarize_benchmark,
)


def _obs(elapsed_ms, success=True, timestamp_ms=0, error_reason=None):
    return Observation(
        timestamp_ms=timestamp_ms,
        elapsed_ms=elapsed_ms,
        success=success,
        error_reason=error_reason,
    )


class TestNearestRank:
    """Test the floor(n * p) percentile rule."""

    def test_index_is_floor_of_n_times_fraction(self):
        values = [10, 20, 30, 40, 50, 60, 70, 80, 90, 100]
        assert nearest_rank(values, 0.5) == 60
        assert nearest_rank(values, 0.95) == 100
        assert nearest_rank(values, 0.99) == 100

    def test_twenty_values(self):
        """floor(20 * 0.95) = 19 picks the last element."""
        values = list(range(1, 21))
        assert nearest_rank(values, 0.95) == 20
        assert nearest_rank(values, 0.5) == 11

    def test_single_value(self):
        assert nearest_rank([42.0], 0.99) == 42.0

    def test_empty_raises(self):
        with pytest.raises(ValueError):
            nearest_rank([], 0.5)


class TestSummarize:
    """Test summary statistics over observations."""

    def test_four_successful_observations(self):
        observations = [_obs(100), _obs(200), _obs(300), _obs(400)]
        summary = summarize(observations, duration_seconds=1)

        assert summary.total_requests == 4
        assert summary.successful_requests == 4
        assert summary.failed_requests == 0
        assert summary.median_ms == 300
        assert summary.p95_ms == 400
        assert summary.p99_ms == 400
        assert summary.min_ms == 100
        assert summary.max_ms == 400
        assert summary.mean_ms == pytest.approx(250)
        assert summary.success_rate_percent == 100
        assert summary.achieved_rate_per_second == 4

    def test_unordered_input_is_sorted(self):
        observations = [_obs(400), _obs(100), _obs(300), _obs(200)]
        summary = summarize(observations, duration_seconds=1)
        assert summary.min_ms == 100
        assert summary.median_ms == 300
        assert summary.max_ms == 400

    def test_empty_observations(self):
        summary = summarize([], duration_seconds=1)

        assert summary.total_requests == 0
        assert summary.success_rate_percent == 0
        assert summary.median_ms is None
        assert summary.mean_ms is None
        assert summary.achieved_rate_per_second == 0
        assert not summary.has_timing_data

    def test_all_failures_report_no_timing_data(self):
        observations = [_obs(50, success=False, error_reason="HTTP 500") for _ in range(3)]
        summary = summarize(observations, duration_seconds=3)

        assert summary.total_requests == 3
        assert summary.failed_requests == 3
        assert summary.success_rate_percent == 0
        for value in (summary.mean_ms, summary.median_ms, summary.p95_ms,
                      summary.p99_ms, summary.min_ms, summary.max_ms):
            assert value is None
        assert summary.achieved_rate_per_second == 1

    def test_timing_uses_successful_subset_only(self):
        observations = [_obs(100), _obs(5000, success=False), _obs(300)]
        summary = summarize(observations, duration_seconds=1)

        assert summary.max_ms == 300
        assert summary.min_ms == 100
        assert summary.success_rate_percent == pytest.approx(200 / 3)

    def test_achieved_rate_uses_wall_window(self):
        observations = [_obs(10) for _ in range(30)]
        summary = summarize(observations, duration_seconds=10)
        assert summary.achieved_rate_per_second == 3

    def test_zero_duration_does_not_divide(self):
        summary = summarize([_obs(10)], duration_seconds=0)
        assert summary.achieved_rate_per_second == 0

    def test_ordering_property_on_random_samples(self):
        rng = random.Random(7)
        for n in range(1, 60):
            observations = [_obs(rng.uniform(0, 1000)) for _ in range(n)]
            summary = summarize(observations, duration_seconds=1)
            assert summary.min_ms <= summary.median_ms <= summary.max_ms
            assert summary.median_ms <= summary.p95_ms <= summary.p99_ms <= summary.max_ms

    def test_success_rate_identity(self):
        observations = [_obs(10, success=(i % 3 != 0)) for i in range(10)]
        summary = summarize(observations, duration_seconds=1)
        assert summary.success_rate_percent == pytest.approx(
            100 * summary.successful_requests / summary.total_requests
        )

    def test_to_dict_uses_reporting_names(self):
        summary = summarize([], duration_seconds=1)
        data = summary.to_dict()
        assert data["totalRequests"] == 0
        assert data["successRatePercent"] == 0
        assert data["medianMs"] is None
        assert set(data) == {
            "totalRequests", "successfulRequests", "failedRequests", "successRatePercent",
            "meanMs", "medianMs", "p95Ms", "p99Ms", "minMs", "maxMs", "achievedRatePerSecond",
        }


class TestSummarizeBenchmark:
    """Test benchmark statistics."""

    def test_stats_and_errors(self):
        stats = summarize_benchmark([30, 10, 20], errors=1)
        assert stats.min_ms == 10
        assert stats.max_ms == 30
        assert stats.avg_ms == pytest.approx(20)
        assert stats.median_ms == 20
        assert stats.errors == 1
        assert stats.iterations == 4
        assert stats.success_rate_percent == 75

    def test_all_failed(self):
        stats = summarize_benchmark([], errors=5)
        assert stats.median_ms is None
        assert stats.success_rate_percent == 0
        assert stats.to_dict()["errors"] == 5


class TestSampleAggregator:
    """Test the append-only observation collection."""

    def test_record_and_summarize(self):
        aggregator = SampleAggregator()
        for value in (100, 200, 300, 400):
            aggregator.record(_obs(value))

        assert len(aggregator) == 4
        assert aggregator.summarize(1).median_ms == 300

    def test_observations_returns_snapshot(self):
        aggregator = SampleAggregator()
        aggregator.record(_obs(1))
        snapshot = aggregator.observations
        aggregator.record(_obs(2))
        assert len(snapshot) == 1
        assert len(aggregator) == 2

    def test_concurrent_records_are_not_lost(self):
        aggregator = SampleAggregator()

        def worker():
            for i in range(500):
                aggregator.record(_obs(float(i)))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(aggregator) == 4000

    def test_dataframe_sorted_by_timestamp(self):
        aggregator = SampleAggregator()
        aggregator.record(_obs(10, timestamp_ms=300))
        aggregator.record(_obs(20, timestamp_ms=100, success=False, error_reason="boom"))
        aggregator.record(_obs(30, timestamp_ms=200))

        df = aggregator.to_dataframe()
        assert list(df["timestamp_ms"]) == [100, 200, 300]
        assert df.loc[0, "error_reason"] == "boom"

    def test_empty_dataframe_has_columns(self):
        df = SampleAggregator().to_dataframe()
        assert df.empty
        assert list(df.columns) == ["timestamp_ms", "elapsed_ms", "success", "error_reason"]
