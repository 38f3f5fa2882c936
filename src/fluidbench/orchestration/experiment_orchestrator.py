"""Experiment orchestrator for running configured load tests and cost comparisons."""

import asyncio
import copy
import json
import logging
from contextlib import AsyncExitStack
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pandas as pd
import yaml

from ..cost import PricingTable, ResourceProfile, compare, compare_shared, cost_shares, load_pricing, profile_for
from ..exceptions import ConfigurationError
from ..loadtest import (
    BenchmarkConfig,
    CallTarget,
    HttpCallTarget,
    LoadTestConfig,
    LoadTestResult,
    run_load_test,
    run_suite,
    simulate_load_test,
)
from ..loadtest.benchmark import DEFAULT_PAYLOADS, DEFAULT_TARGETS
from ..utils.config_validator import ExperimentConfigValidator, apply_defaults

logger = logging.getLogger(__name__)

TargetFactory = Callable[[str, Dict[str, Any]], CallTarget]


class ExperimentOrchestrator:
    """Main entry point to run the sections of an experiment document."""

    def __init__(self, config_data: Dict[str, Any], target_factory: Optional[TargetFactory] = None):
        """Initialize the orchestrator with experiment configuration.

        Args:
            config_data: Complete experiment configuration dictionary
            target_factory: Builds a call target from (path, payload). Defaults
                to HttpCallTarget against the configured base URL.
        """
        self.config = apply_defaults(copy.deepcopy(config_data))
        self._validate_config()

        self.pricing: PricingTable = load_pricing(self.config.get("pricing"))
        self.target_factory = target_factory
        self.last_observations: List[Dict[str, Any]] = []

        logger.info("ExperimentOrchestrator initialized")

    def _validate_config(self) -> None:
        is_valid, errors = ExperimentConfigValidator.validate(self.config)
        if not is_valid:
            raise ConfigurationError("Invalid experiment configuration: " + "; ".join(errors))
        logger.info("Configuration validated successfully")

    def _make_target(self, path: str, payload: Dict[str, Any], base_url: Optional[str]) -> CallTarget:
        if self.target_factory is not None:
            return self.target_factory(path, payload)
        return HttpCallTarget(path, payload, base_url=base_url)

    async def _run_load_test(self) -> LoadTestResult:
        section = self.config["load_test"]
        config = LoadTestConfig.from_dict(section)
        target = self._make_target(config.target, config.payload, section.get("base_url"))

        async with AsyncExitStack() as stack:
            if isinstance(target, HttpCallTarget):
                await stack.enter_async_context(target)
            return await run_load_test(config, target)

    async def _run_benchmark(self) -> Dict[str, Any]:
        section = self.config["benchmark"]
        functions = section.get("functions") or DEFAULT_TARGETS
        bench_config = BenchmarkConfig(
            iterations=section["iterations"],
            concurrency=section["concurrency"],
            targets=list(functions),
        )

        async with AsyncExitStack() as stack:
            targets = {}
            for path in functions:
                payload = section.get("payloads", {}).get(path, DEFAULT_PAYLOADS.get(path, {}))
                target = self._make_target(path, payload, section.get("base_url"))
                if isinstance(target, HttpCallTarget):
                    await stack.enter_async_context(target)
                targets[path] = target
            suite = await run_suite(targets, bench_config)

        return suite.to_dict()

    def _run_simulation(self) -> LoadTestResult:
        section = self.config["simulation"]
        config = LoadTestConfig.from_dict(section)
        return simulate_load_test(
            config,
            section["latency"],
            failure_probability=section.get("failure_probability", 0.0),
            seed=section.get("seed"),
        )

    def _build_profile(self, entry: Dict[str, Any]) -> ResourceProfile:
        concurrent = entry.get("concurrent_invocations", 1)
        if "workload" in entry:
            return profile_for(entry["workload"], entry["wall_duration_ms"], concurrent)
        return ResourceProfile(
            wall_duration_ms=entry["wall_duration_ms"],
            cpu_utilization_percent=entry["cpu_utilization_percent"],
            memory_mb=entry["memory_mb"],
            concurrent_invocations=concurrent,
        )

    def run_cost_comparisons(self) -> Dict[str, Any]:
        """Price every configured workload under both billing regimes."""
        comparisons = []
        metered_costs = []

        for i, entry in enumerate(self.config["cost_comparisons"]):
            profile = self._build_profile(entry)
            if entry.get("shared", False):
                comparison = compare_shared(profile, self.pricing)
            else:
                comparison = compare(profile, self.pricing)
            metered_costs.append(comparison.metered_cost)

            comparisons.append({
                "name": entry.get("name", entry.get("workload", f"workload-{i}")),
                "resourceMetrics": profile.metrics.to_dict(),
                **comparison.to_dict(),
            })

        total_metered = sum(c["meteredCost"]["totalCostUsd"] for c in comparisons)
        total_full = sum(c["fullDurationCost"]["totalCostUsd"] for c in comparisons)
        savings = total_full - total_metered

        return {
            "comparisons": comparisons,
            "costShares": cost_shares(metered_costs),
            "totals": {
                "meteredCostUsd": total_metered,
                "fullDurationCostUsd": total_full,
                "savingsUsd": savings,
                "savingsPercent": savings / total_full * 100 if total_full > 0 else 0.0,
            },
        }

    def run(self) -> Dict[str, Any]:
        """Run every configured section.

        Returns:
            Report dictionary keyed by section name
        """
        logger.info("=" * 60)
        logger.info("STARTING EXPERIMENT")
        logger.info("=" * 60)

        report: Dict[str, Any] = {"pricing": self.pricing.model_dump()}
        observations = []

        if "simulation" in self.config:
            result = self._run_simulation()
            report["simulation"] = result.to_dict()
            observations.extend(("simulation", obs) for obs in result.observations)

        if "load_test" in self.config:
            result = asyncio.run(self._run_load_test())
            report["load_test"] = result.to_dict()
            observations.extend(("load_test", obs) for obs in result.observations)

        if "benchmark" in self.config:
            report["benchmark"] = asyncio.run(self._run_benchmark())

        if "cost_comparisons" in self.config:
            report["cost_comparisons"] = self.run_cost_comparisons()

        self.last_observations = [{"source": source, **obs.to_dict()} for source, obs in observations]
        self._write_outputs(report)

        logger.info("=" * 60)
        logger.info("EXPERIMENT COMPLETED")
        logger.info("=" * 60)

        return report

    def _write_outputs(self, report: Dict[str, Any]) -> None:
        output = self.config.get("output") or {}

        summary_path = output.get("summary_json_path")
        if summary_path:
            summary_file = Path(summary_path)
            summary_file.parent.mkdir(parents=True, exist_ok=True)
            with open(summary_file, "w") as f:
                json.dump(report, f, indent=2)
            logger.info(f"Saved summary report to {summary_file}")

        csv_path = output.get("observations_csv_path")
        if csv_path:
            csv_file = Path(csv_path)
            csv_file.parent.mkdir(parents=True, exist_ok=True)
            df = pd.DataFrame(
                self.last_observations,
                columns=["source", "timestampMs", "elapsedMs", "success", "errorReason"],
            )
            df.to_csv(csv_file, index=False)
            logger.info(f"Saved {len(df)} observations to {csv_file}")

    @classmethod
    def from_yaml_file(cls, config_path: str, **kwargs) -> "ExperimentOrchestrator":
        """Create an orchestrator from a YAML configuration file."""
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f)

        return cls(config_data or {}, **kwargs)

    @classmethod
    def from_json_file(cls, config_path: str, **kwargs) -> "ExperimentOrchestrator":
        """Create an orchestrator from a JSON configuration file."""
        with open(config_path, "r") as f:
            config_data = json.load(f)

        return cls(config_data, **kwargs)
