"""Load tests in SimPy virtual time.

Runs the same launch cadence as the real driver against a synthetic target
whose latency is drawn from a configured distribution. Useful for dry runs
of the reporting pipeline and for reproducible tests.
"""

import logging
import math
from typing import Any, Dict, Generator, Optional

import simpy

from ..metrics import Observation, SampleAggregator
from ..metrics.aggregator import log_summary
from ..workload import DistributionSampler
from .config import LoadTestConfig
from .driver import LoadTestResult

logger = logging.getLogger(__name__)

SIMULATED_FAILURE_REASON = "Simulated failure"


class SimulatedLoadTest:
    """Drives a synthetic target on a simpy.Environment."""

    def __init__(
        self,
        config: LoadTestConfig,
        latency_dist_config: Dict[str, Any],
        failure_probability: float = 0.0,
        seed: Optional[int] = None,
        start_time_ms: int = 0,
    ):
        config.validate()
        if not 0.0 <= failure_probability <= 1.0:
            raise ValueError(f"failure_probability must be in [0, 1], got {failure_probability}")

        self.config = config
        self.latency_dist_config = latency_dist_config
        self.failure_probability = failure_probability
        self.start_time_ms = start_time_ms
        self.sampler = DistributionSampler(seed)
        self.env = simpy.Environment()
        self.aggregator = SampleAggregator()
        self.launched = 0

    def _now_ms(self) -> int:
        return self.start_time_ms + int(round(self.env.now * 1000))

    def _call(self) -> Generator[simpy.Event, None, None]:
        latency_ms = self.sampler.sample(self.latency_dist_config)
        failed = self.sampler.bernoulli(self.failure_probability)
        yield self.env.timeout(latency_ms / 1000)
        self.aggregator.record(Observation(
            timestamp_ms=self._now_ms(),
            elapsed_ms=float(latency_ms),
            success=not failed,
            error_reason=SIMULATED_FAILURE_REASON if failed else None,
        ))

    def _launcher(self) -> Generator[simpy.Event, None, None]:
        # Launch i happens at i / rate; the window admits duration * rate launches
        rate = self.config.target_rate_per_second
        total_launches = math.ceil(self.config.duration_seconds * rate)
        for i in range(total_launches):
            delay = i / rate - self.env.now
            if delay > 0:
                yield self.env.timeout(delay)
            self.env.process(self._call())
            self.launched += 1

    def run(self) -> LoadTestResult:
        """Run until every launched call has completed."""
        logger.info(
            f"Starting simulated load test: {self.config.target_rate_per_second} req/s for "
            f"{self.config.duration_seconds}s, latency={self.latency_dist_config}"
        )
        self.env.process(self._launcher())
        self.env.run()
        logger.info(f"Simulation finished at t={self.env.now:.3f}s after {self.launched} calls")

        summary = self.aggregator.summarize(self.config.duration_seconds)
        log_summary(summary, title="SIMULATED LOAD TEST SUMMARY")

        return LoadTestResult(
            config=self.config,
            observations=self.aggregator.observations,
            summary=summary,
            started_at_ms=self.start_time_ms,
            finished_at_ms=self._now_ms(),
        )


def simulate_load_test(
    config: LoadTestConfig,
    latency_dist_config: Dict[str, Any],
    failure_probability: float = 0.0,
    seed: Optional[int] = None,
) -> LoadTestResult:
    """Convenience wrapper around SimulatedLoadTest."""
    return SimulatedLoadTest(config, latency_dist_config, failure_probability, seed).run()
