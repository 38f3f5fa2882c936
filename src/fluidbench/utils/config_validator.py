"""
Validation for experiment configuration documents.

An experiment document may contain any of these sections:
- pricing: billing rates
- load_test: a real, rate-bounded run against an HTTP endpoint
- simulation: a load test in virtual time with a latency distribution
- benchmark: batched benchmark of one or more endpoints
- cost_comparisons: workloads to price under both billing regimes
- output: where to write the report files
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from pydantic import ValidationError

from ..cost.pricing import PricingTable
from ..cost.workloads import WORKLOAD_PRESETS
from ..loadtest.config import is_number, validate_load_test_fields
from ..workload.sampler import SUPPORTED_DISTRIBUTIONS

logger = logging.getLogger(__name__)

KNOWN_SECTIONS = {"pricing", "load_test", "simulation", "benchmark", "cost_comparisons", "output"}
RUNNABLE_SECTIONS = {"load_test", "simulation", "benchmark", "cost_comparisons"}


def load_config_file(config_path: str) -> Dict[str, Any]:
    """Load a YAML or JSON configuration file based on its suffix."""
    config_file = Path(config_path)
    with open(config_file, "r") as f:
        if config_file.suffix in [".yaml", ".yml"]:
            config = yaml.safe_load(f)
        else:
            config = json.load(f)
    return config or {}


def _load_test_fields(section: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "duration_seconds": section.get("duration_seconds", section.get("duration")),
        "target_rate_per_second": section.get("target_rate_per_second", section.get("rps")),
    }


class PricingConfigValidator:
    """Validates the pricing section."""

    @classmethod
    def validate(cls, section: Dict[str, Any]) -> List[str]:
        try:
            PricingTable(**section)
        except ValidationError as e:
            return [
                f"pricing.{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors()
            ]
        return []


class LoadTestConfigValidator:
    """Validates the load_test section."""

    @classmethod
    def validate(cls, section: Dict[str, Any]) -> List[str]:
        errors = [f"load_test: {e}" for e in validate_load_test_fields(_load_test_fields(section))]

        target = section.get("target", section.get("targetFunction"))
        if not target:
            errors.append("load_test: target is required")
        elif not str(target).startswith("/"):
            errors.append(f"load_test: target must be a path starting with '/', got {target!r}")

        if "payload" in section and not isinstance(section["payload"], dict):
            errors.append("load_test: payload must be a mapping")

        return errors


class SimulationConfigValidator:
    """Validates the simulation section."""

    @classmethod
    def validate(cls, section: Dict[str, Any]) -> List[str]:
        errors = [f"simulation: {e}" for e in validate_load_test_fields(_load_test_fields(section))]

        latency = section.get("latency")
        if latency is None:
            errors.append("simulation: latency distribution is required")
        elif not isinstance(latency, dict) or "type" not in latency:
            errors.append("simulation: latency must be a mapping with a 'type'")
        elif latency["type"] not in SUPPORTED_DISTRIBUTIONS:
            errors.append(
                f"simulation: unknown latency distribution {latency['type']!r} "
                f"(supported: {', '.join(SUPPORTED_DISTRIBUTIONS)})"
            )

        failure_probability = section.get("failure_probability", 0.0)
        if not is_number(failure_probability):
            errors.append(f"simulation: failure_probability must be a number, got {failure_probability!r}")
        elif not 0.0 <= failure_probability <= 1.0:
            errors.append(f"simulation: failure_probability must be in [0, 1], got {failure_probability}")

        return errors


class BenchmarkConfigValidator:
    """Validates the benchmark section."""

    @classmethod
    def validate(cls, section: Dict[str, Any]) -> List[str]:
        errors = []

        iterations = section.get("iterations", 10)
        if not isinstance(iterations, int) or iterations < 1:
            errors.append(f"benchmark: iterations must be a positive integer, got {iterations!r}")

        concurrency = section.get("concurrency", 2)
        if not isinstance(concurrency, int) or concurrency < 1:
            errors.append(f"benchmark: concurrency must be a positive integer, got {concurrency!r}")

        functions = section.get("functions")
        if functions is not None:
            if not isinstance(functions, list) or not functions:
                errors.append("benchmark: functions must be a non-empty list")
            else:
                for fn in functions:
                    if not str(fn).startswith("/"):
                        errors.append(f"benchmark: function path must start with '/', got {fn!r}")

        return errors


class CostComparisonValidator:
    """Validates entries of the cost_comparisons section."""

    @classmethod
    def validate(cls, entries: Any) -> List[str]:
        if not isinstance(entries, list):
            return ["cost_comparisons must be a list"]

        errors = []
        for i, entry in enumerate(entries):
            prefix = f"cost_comparisons[{i}]"
            if not isinstance(entry, dict):
                errors.append(f"{prefix}: must be a mapping")
                continue

            wall = entry.get("wall_duration_ms")
            if wall is None:
                errors.append(f"{prefix}: missing wall_duration_ms")
            elif not is_number(wall):
                errors.append(f"{prefix}: wall_duration_ms must be a number, got {wall!r}")
            elif wall < 0:
                errors.append(f"{prefix}: wall_duration_ms must be non-negative")

            workload = entry.get("workload")
            if workload is not None:
                if not isinstance(workload, str) or workload not in WORKLOAD_PRESETS:
                    errors.append(f"{prefix}: unknown workload {workload!r}")
            else:
                missing = {"cpu_utilization_percent", "memory_mb"} - set(entry.keys())
                if missing:
                    errors.append(f"{prefix}: without a workload preset, missing fields: {sorted(missing)}")
                else:
                    cpu = entry["cpu_utilization_percent"]
                    if not is_number(cpu):
                        errors.append(f"{prefix}: cpu_utilization_percent must be a number, got {cpu!r}")
                    elif not 0 <= cpu <= 100:
                        errors.append(f"{prefix}: cpu_utilization_percent must be in [0, 100]")

                    memory = entry["memory_mb"]
                    if not is_number(memory):
                        errors.append(f"{prefix}: memory_mb must be a number, got {memory!r}")
                    elif memory < 0:
                        errors.append(f"{prefix}: memory_mb must be non-negative")

            concurrent = entry.get("concurrent_invocations", 1)
            if not isinstance(concurrent, int) or isinstance(concurrent, bool) or concurrent < 1:
                errors.append(f"{prefix}: concurrent_invocations must be an integer of at least 1, got {concurrent!r}")

        return errors


class ExperimentConfigValidator:
    """Validates a complete experiment configuration."""

    @classmethod
    def validate(cls, config: Dict[str, Any]) -> Tuple[bool, List[str]]:
        all_errors = []

        if not isinstance(config, dict):
            return False, ["Configuration must be a mapping"]

        unknown = set(config.keys()) - KNOWN_SECTIONS
        if unknown:
            all_errors.append(f"Unknown top-level sections: {sorted(unknown)}")

        if not RUNNABLE_SECTIONS & set(config.keys()):
            all_errors.append(f"Configuration must contain at least one of: {sorted(RUNNABLE_SECTIONS)}")

        if "pricing" in config:
            all_errors.extend(PricingConfigValidator.validate(config["pricing"] or {}))
        if "load_test" in config:
            all_errors.extend(LoadTestConfigValidator.validate(config["load_test"] or {}))
        if "simulation" in config:
            all_errors.extend(SimulationConfigValidator.validate(config["simulation"] or {}))
        if "benchmark" in config:
            all_errors.extend(BenchmarkConfigValidator.validate(config["benchmark"] or {}))
        if "cost_comparisons" in config:
            all_errors.extend(CostComparisonValidator.validate(config["cost_comparisons"]))

        return len(all_errors) == 0, all_errors


def apply_defaults(config: Dict[str, Any]) -> Dict[str, Any]:
    """Fill optional fields with their defaults, in place."""
    if "benchmark" in config:
        benchmark = config["benchmark"] = config["benchmark"] or {}
        benchmark.setdefault("iterations", 10)
        benchmark.setdefault("concurrency", 2)
    if "simulation" in config:
        simulation = config["simulation"] = config["simulation"] or {}
        simulation.setdefault("failure_probability", 0.0)
    if "load_test" in config:
        load_test = config["load_test"] = config["load_test"] or {}
        load_test.setdefault("payload", {})
    return config


def validate_and_fix_config(config_path: str) -> Tuple[bool, List[str], Optional[Dict[str, Any]]]:
    """
    Load a configuration file, fill defaults and validate it.

    Returns:
        (is_valid, errors, config)
    """
    config = apply_defaults(load_config_file(config_path))
    is_valid, errors = ExperimentConfigValidator.validate(config)

    if not is_valid:
        logger.warning(f"Configuration has {len(errors)} validation errors")
        for error in errors[:10]:
            logger.warning(f"  - {error}")
        if len(errors) > 10:
            logger.warning(f"  ... and {len(errors) - 10} more errors")

    return is_valid, errors, config
