"""Named utilization presets for the demo workload types."""

from dataclasses import dataclass
from typing import Dict

from ..exceptions import UnknownWorkloadError
from .model import ResourceProfile


@dataclass(frozen=True)
class WorkloadPreset:
    name: str
    function_type: str  # fluid, edge or serverless
    cpu_utilization_percent: float
    memory_mb: float
    description: str = ""


WORKLOAD_PRESETS: Dict[str, WorkloadPreset] = {
    preset.name: preset
    for preset in [
        WorkloadPreset("cpu-intensive", "fluid", 95, 128, "CPU-bound computation"),
        WorkloadPreset("io-bound", "fluid", 15, 64, "Mostly waiting on I/O"),
        WorkloadPreset("concurrent", "fluid", 25, 256, "Parallel tasks sharing one instance"),
        WorkloadPreset("text-generation", "fluid", 20, 512, "Waiting on a model response"),
        WorkloadPreset("agent-simulation", "fluid", 8, 256, "Multi-step agent, mostly idle"),
        WorkloadPreset("traditional", "serverless", 100, 128, "Billed for the full duration"),
    ]
}


def get_preset(name: str) -> WorkloadPreset:
    try:
        return WORKLOAD_PRESETS[name]
    except KeyError:
        raise UnknownWorkloadError(name, WORKLOAD_PRESETS) from None


def profile_for(name: str, wall_duration_ms: float, concurrent_invocations: int = 1) -> ResourceProfile:
    """Build a ResourceProfile for a named preset and a measured duration."""
    preset = get_preset(name)
    return ResourceProfile(
        wall_duration_ms=wall_duration_ms,
        cpu_utilization_percent=preset.cpu_utilization_percent,
        memory_mb=preset.memory_mb,
        concurrent_invocations=concurrent_invocations,
    )
