"""Command-line interface for fluidbench."""

import asyncio
import json
import logging
import sys
from pathlib import Path

import click

from fluidbench.cost import (
    DEFAULT_PRICING,
    WORKLOAD_PRESETS,
    ResourceProfile,
    compare,
    compare_shared,
    format_cost,
    format_duration,
    get_preset,
)
from fluidbench.loadtest import (
    BenchmarkConfig,
    HttpCallTarget,
    LoadTestConfig,
    run_load_test,
    run_suite,
    simulate_load_test,
)
from fluidbench.loadtest.benchmark import DEFAULT_PAYLOADS
from fluidbench.orchestration import ExperimentOrchestrator
from fluidbench.utils.config_validator import validate_and_fix_config

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

LOG_LEVELS = click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"])


def _set_log_level(log_level: str) -> None:
    logging.getLogger().setLevel(getattr(logging, log_level))


def _echo_summary(summary) -> None:
    click.echo(f"Total requests: {summary.total_requests}")
    click.echo(f"Success rate: {summary.success_rate_percent:.1f}%")
    click.echo(f"Achieved rate: {summary.achieved_rate_per_second:.2f} req/s")
    if summary.has_timing_data:
        click.echo(
            f"Latency: median {format_duration(summary.median_ms)}, "
            f"p95 {format_duration(summary.p95_ms)}, p99 {format_duration(summary.p99_ms)}"
        )
    else:
        click.echo("Latency: no successful requests")


def _write_json(output: str, data) -> None:
    output_path = Path(output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(data, f, indent=2)
    click.echo(f"Saved report to {output_path}")


@click.group()
@click.version_option(version="0.1.0", prog_name="fluidbench")
def cli():
    """fluidbench: load-test statistics and active-CPU cost modeling."""
    pass


@cli.command("load-test")
@click.argument("target")
@click.option("--duration", "-d", type=int, default=10, help="Test duration in seconds (max 60)")
@click.option("--rps", "-r", type=int, default=5, help="Requests per second (max 50)")
@click.option("--payload", "-p", default="{}", help="JSON payload sent with every request")
@click.option("--base-url", default=None, help="Server base URL (default: $FLUIDBENCH_BASE_URL)")
@click.option("--output", "-o", default=None, help="Write the JSON report to this path")
@click.option("--log-level", "-l", type=LOG_LEVELS, default="INFO", help="Logging level")
def load_test(target: str, duration: int, rps: int, payload: str, base_url: str, output: str, log_level: str):
    """Drive TARGET (an endpoint path) at a fixed request rate."""
    _set_log_level(log_level)

    async def _run():
        async with HttpCallTarget(target, json.loads(payload), base_url=base_url) as call_target:
            return await run_load_test(config, call_target)

    try:
        config = LoadTestConfig.from_dict({
            "target": target,
            "duration": duration,
            "rps": rps,
            "payload": json.loads(payload),
        })
        click.echo(f"Load testing {target} at {rps} req/s for {duration}s...")
        result = asyncio.run(_run())
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    _echo_summary(result.summary)
    if output:
        _write_json(output, result.to_dict())


@cli.command()
@click.option("--duration", "-d", type=int, default=10, help="Virtual test duration in seconds (max 60)")
@click.option("--rps", "-r", type=int, default=10, help="Requests per second (max 50)")
@click.option("--latency-median-ms", type=float, default=150.0, help="Median call latency")
@click.option("--latency-sigma", type=float, default=0.4, help="Log-space latency spread")
@click.option("--failure-probability", type=float, default=0.0, help="Chance each call fails")
@click.option("--seed", type=int, default=None, help="Random seed")
@click.option("--output", "-o", default=None, help="Write the JSON report to this path")
def simulate(duration, rps, latency_median_ms, latency_sigma, failure_probability, seed, output):
    """Run a load test in virtual time against a synthetic target."""
    try:
        config = LoadTestConfig.from_dict({"duration": duration, "rps": rps})
        result = simulate_load_test(
            config,
            {"type": "LogNormal", "median": latency_median_ms, "sigma": latency_sigma},
            failure_probability=failure_probability,
            seed=seed,
        )
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    _echo_summary(result.summary)
    if output:
        _write_json(output, result.to_dict())


@cli.command()
@click.argument("targets", nargs=-1, required=True)
@click.option("--iterations", "-n", type=int, default=10, help="Calls per target")
@click.option("--concurrency", "-c", type=int, default=2, help="Calls per batch")
@click.option("--base-url", default=None, help="Server base URL (default: $FLUIDBENCH_BASE_URL)")
@click.option("--output", "-o", default=None, help="Write the JSON report to this path")
def benchmark(targets, iterations: int, concurrency: int, base_url: str, output: str):
    """Benchmark one or more endpoint paths in concurrent batches."""
    config = BenchmarkConfig(iterations=iterations, concurrency=concurrency, targets=list(targets))

    async def _run():
        call_targets = {path: HttpCallTarget(path, DEFAULT_PAYLOADS.get(path), base_url=base_url) for path in targets}
        try:
            return await run_suite(call_targets, config)
        finally:
            for call_target in call_targets.values():
                await call_target.aclose()

    try:
        suite = asyncio.run(_run())
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    for result in suite.results:
        stats = result.statistics
        median = format_duration(stats.median_ms) if stats.median_ms is not None else "n/a"
        click.echo(
            f"{result.function_name}: median {median}, "
            f"{stats.success_rate_percent:.1f}% success ({stats.errors} errors)"
        )
    if output:
        _write_json(output, suite.to_dict())


@cli.command()
@click.argument("workload", type=click.Choice(sorted(WORKLOAD_PRESETS) + ["custom"]))
@click.option("--duration-ms", type=float, required=True, help="Measured wall-clock duration")
@click.option("--cpu", type=float, default=None, help="CPU utilization percent (overrides the preset)")
@click.option("--memory-mb", type=float, default=None, help="Memory in MB (overrides the preset)")
@click.option("--concurrency", type=int, default=1, help="Concurrent invocations sharing the instance")
def cost(workload: str, duration_ms: float, cpu: float, memory_mb: float, concurrency: int):
    """Compare metered and full-duration cost for WORKLOAD."""
    try:
        if workload == "custom":
            if cpu is None or memory_mb is None:
                raise click.UsageError("custom workloads need --cpu and --memory-mb")
        else:
            preset = get_preset(workload)
            cpu = preset.cpu_utilization_percent if cpu is None else cpu
            memory_mb = preset.memory_mb if memory_mb is None else memory_mb

        profile = ResourceProfile(duration_ms, cpu, memory_mb, concurrency)
    except click.UsageError:
        raise
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    comparison = compare_shared(profile, DEFAULT_PRICING) if concurrency > 1 else compare(profile, DEFAULT_PRICING)
    metrics = profile.metrics

    click.echo(f"Workload: {workload} ({cpu:g}% CPU, {memory_mb:g} MB, {format_duration(duration_ms)})")
    click.echo(f"Active CPU: {format_duration(metrics.active_cpu_ms)}, idle: {format_duration(metrics.idle_ms)}")
    click.echo(f"Metered cost: {format_cost(comparison.metered_cost.total_cost_usd)}")
    click.echo(f"Full-duration cost: {format_cost(comparison.full_duration_cost.total_cost_usd)}")
    click.echo(f"Savings: {format_cost(comparison.savings_usd)} ({comparison.savings_percent:.1f}%)")


@cli.command()
@click.argument("config_file", type=click.Path(exists=True))
@click.option(
    "--format", "-f", type=click.Choice(["yaml", "json"]), default="yaml",
    help="Configuration file format"
)
@click.option("--log-level", "-l", type=LOG_LEVELS, default="INFO", help="Logging level")
def run(config_file: str, format: str, log_level: str):
    """Run an experiment from a configuration file."""
    _set_log_level(log_level)
    click.echo(f"Loading configuration from {config_file}...")

    try:
        if format == "yaml":
            orchestrator = ExperimentOrchestrator.from_yaml_file(config_file)
        else:
            orchestrator = ExperimentOrchestrator.from_json_file(config_file)

        report = orchestrator.run()
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo("\nExperiment completed!")
    for section in ("simulation", "load_test"):
        if section in report:
            summary = report[section]["summary"]
            click.echo(
                f"{section}: {summary['totalRequests']} requests, "
                f"{summary['successRatePercent']:.1f}% success"
            )
    if "cost_comparisons" in report:
        totals = report["cost_comparisons"]["totals"]
        click.echo(f"Cost savings: {format_cost(totals['savingsUsd'])} ({totals['savingsPercent']:.1f}%)")


@cli.command()
@click.option("--output", "-o", default="example_config.yaml", help="Output file path")
@click.option(
    "--format", "-f", type=click.Choice(["yaml", "json"]), default="yaml",
    help="Configuration file format"
)
def generate_config(output: str, format: str):
    """Generate an example configuration file."""
    example_config = {
        "pricing": DEFAULT_PRICING.model_dump(),
        "simulation": {
            "duration": 10,
            "rps": 20,
            "latency": {"type": "LogNormal", "median": 150, "sigma": 0.4},
            "failure_probability": 0.02,
            "seed": 42,
        },
        "load_test": {
            "target": "/api/fluid/cpu-intensive",
            "duration": 30,
            "rps": 10,
            "payload": {"iterations": 30},
            "base_url": "http://localhost:3000",
        },
        "cost_comparisons": [
            {"workload": "cpu-intensive", "wall_duration_ms": 850},
            {"workload": "io-bound", "wall_duration_ms": 2000},
            {"workload": "concurrent", "wall_duration_ms": 1200, "concurrent_invocations": 5, "shared": True},
            {"name": "custom", "wall_duration_ms": 3000, "cpu_utilization_percent": 40, "memory_mb": 1024},
        ],
        "output": {
            "summary_json_path": "experiments/results/summary.json",
            "observations_csv_path": "experiments/results/observations.csv",
        },
    }

    output_path = Path(output)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    if format == "yaml":
        import yaml
        with open(output_path, "w") as f:
            yaml.dump(example_config, f, default_flow_style=False, sort_keys=False)
    else:
        with open(output_path, "w") as f:
            json.dump(example_config, f, indent=2)

    click.echo(f"Generated example configuration at {output_path}")


@cli.command()
@click.argument("config_file", type=click.Path(exists=True))
def validate(config_file: str):
    """Validate a configuration file without running it."""
    click.echo(f"Validating configuration: {config_file}")

    try:
        is_valid, errors, _ = validate_and_fix_config(config_file)
    except Exception as e:
        click.echo(click.style(f"Error validating configuration: {e}", fg="red"))
        sys.exit(1)

    if is_valid:
        click.echo(click.style("✓ Configuration is valid", fg="green"))
    else:
        click.echo(click.style(f"✗ Configuration has {len(errors)} errors:", fg="red"))
        for i, error in enumerate(errors[:20], 1):
            click.echo(f"  {i}. {error}")
        if len(errors) > 20:
            click.echo(f"  ... and {len(errors) - 20} more errors")

    sys.exit(0 if is_valid else 1)


if __name__ == "__main__":
    cli()
