"""Exception hierarchy for fluidbench."""


class FluidBenchError(Exception):
    """Base class for all fluidbench errors."""
    pass


class ConfigurationError(FluidBenchError):
    """Raised when configuration validation fails."""
    pass


class LoadTestValidationError(ConfigurationError, ValueError):
    """Raised when a load-test configuration is outside the allowed bounds.

    Always raised before any call is issued, so no partial run exists.
    """

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class UnknownWorkloadError(FluidBenchError, KeyError):
    """Raised when a workload preset name is not registered."""

    def __init__(self, name: str, available):
        self.name = name
        self.available = sorted(available)
        super().__init__(f"Unknown workload '{name}'. Available: {', '.join(self.available)}")

    def __str__(self) -> str:
        return self.args[0]
