"""Rate-bounded load driver."""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from ..metrics import Observation, SampleAggregator, SummaryStatistics
from ..metrics.aggregator import log_summary
from .config import LoadTestConfig
from .targets import CallOutcome, CallTarget

logger = logging.getLogger(__name__)

MAX_REPORTED_OBSERVATIONS = 100


def _now_ms() -> int:
    return int(time.time() * 1000)


def _as_outcome(outcome: Any) -> CallOutcome:
    """Normalize a call target's return value.

    Accepts a CallOutcome or a ``{"success": ..., "errorReason": ...}``
    mapping. Anything else is recorded as a failure.
    """
    if isinstance(outcome, CallOutcome):
        return outcome
    if isinstance(outcome, Mapping):
        return CallOutcome(
            success=bool(outcome.get("success")),
            error_reason=outcome.get("errorReason") or outcome.get("error_reason"),
        )
    return CallOutcome(
        success=False,
        error_reason=f"Invalid call outcome of type {type(outcome).__name__}",
    )


async def attempt_call(call_target: CallTarget) -> Observation:
    """Run one call attempt and convert its outcome into an Observation.

    Exceptions raised by the target are recorded as failures; only
    cancellation propagates.
    """
    start = time.perf_counter()
    try:
        outcome = await call_target()
    except Exception as e:
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.debug(f"Call raised {e.__class__.__name__}: {e}")
        return Observation(
            timestamp_ms=_now_ms(),
            elapsed_ms=elapsed_ms,
            success=False,
            error_reason=str(e) or e.__class__.__name__,
        )

    elapsed_ms = (time.perf_counter() - start) * 1000
    outcome = _as_outcome(outcome)

    return Observation(
        timestamp_ms=_now_ms(),
        elapsed_ms=elapsed_ms,
        success=outcome.success,
        error_reason=None if outcome.success else (outcome.error_reason or "Unknown error"),
    )


@dataclass
class LoadTestResult:
    """Observations and summary produced by one load-test run."""

    config: LoadTestConfig
    observations: List[Observation]
    summary: SummaryStatistics
    started_at_ms: int
    finished_at_ms: int

    def to_dict(self, max_observations: int = MAX_REPORTED_OBSERVATIONS) -> Dict[str, Any]:
        return {
            "config": self.config.to_dict(),
            "results": [obs.to_dict() for obs in self.observations[:max_observations]],
            "summary": {
                **self.summary.to_dict(),
                "targetRatePerSecond": self.config.target_rate_per_second,
                "durationSeconds": self.config.duration_seconds,
            },
            "timestamp": self.finished_at_ms,
        }


async def run_load_test(
    config: LoadTestConfig,
    call_target: CallTarget,
    aggregator: Optional[SampleAggregator] = None,
) -> LoadTestResult:
    """Drive ``call_target`` at the configured rate and summarize the run.

    A call is launched every ``1000 / target_rate_per_second`` ms until
    ``duration_seconds`` have elapsed. Launched calls are never awaited
    individually by the launch loop; once the window closes every launched
    call is awaited before the summary is computed. No timeout is applied to
    individual calls.

    Args:
        config: Load-test configuration, validated before any call is issued
        call_target: Async callable returning a CallOutcome (or a mapping
            with "success" and "errorReason")
        aggregator: Collection receiving observations as calls complete. Pass
            one in to keep access to partial results if the run is cancelled.
            On cancellation, calls still in flight are cancelled and not recorded.

    Returns:
        LoadTestResult with every observation and the summary statistics

    Raises:
        LoadTestValidationError: If the config is outside the allowed bounds
    """
    config.validate()
    aggregator = aggregator if aggregator is not None else SampleAggregator()

    async def _call_and_record() -> None:
        aggregator.record(await attempt_call(call_target))

    loop = asyncio.get_running_loop()
    interval = config.interval_seconds
    started_at_ms = _now_ms()
    deadline = loop.time() + config.duration_seconds
    pending: List[asyncio.Task] = []

    logger.info(
        f"Starting load test: {config.target_rate_per_second} req/s for "
        f"{config.duration_seconds}s (target: {config.target or 'in-process'})"
    )

    try:
        while loop.time() < deadline:
            pending.append(asyncio.ensure_future(_call_and_record()))
            await asyncio.sleep(interval)

        logger.info(f"Launch window closed after {len(pending)} calls, waiting for in-flight calls")
        await asyncio.gather(*pending)
    except asyncio.CancelledError:
        # Completed calls stay in the aggregator; in-flight ones are dropped
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        logger.warning(f"Load test cancelled after {len(aggregator)} completed calls")
        raise

    summary = aggregator.summarize(config.duration_seconds)
    log_summary(summary)

    return LoadTestResult(
        config=config,
        observations=aggregator.observations,
        summary=summary,
        started_at_ms=started_at_ms,
        finished_at_ms=_now_ms(),
    )
