"""Load generation: rate-bounded driver, batched benchmarks and simulated runs."""

from .benchmark import BenchmarkResult, SuiteResult, run_benchmark, run_suite
from .config import BenchmarkConfig, LoadTestConfig
from .driver import LoadTestResult, attempt_call, run_load_test
from .simulated import SimulatedLoadTest, simulate_load_test
from .targets import CallOutcome, CallTarget, HttpCallTarget

__all__ = [
    "LoadTestConfig",
    "BenchmarkConfig",
    "LoadTestResult",
    "BenchmarkResult",
    "SuiteResult",
    "CallOutcome",
    "CallTarget",
    "HttpCallTarget",
    "SimulatedLoadTest",
    "attempt_call",
    "run_load_test",
    "run_benchmark",
    "run_suite",
    "simulate_load_test",
]
