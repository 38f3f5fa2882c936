"""Load-test and benchmark configuration models."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..exceptions import LoadTestValidationError

MAX_DURATION_SECONDS = 60
MAX_RATE_PER_SECOND = 50


@dataclass(frozen=True)
class LoadTestConfig:
    """Parameters for one rate-bounded load-test run."""

    duration_seconds: int
    target_rate_per_second: int
    target: Optional[str] = None  # Endpoint path, informational for in-process targets
    payload: Dict[str, Any] = field(default_factory=dict)

    @property
    def interval_ms(self) -> float:
        """Spacing between call launches."""
        return 1000 / self.target_rate_per_second

    @property
    def interval_seconds(self) -> float:
        return self.interval_ms / 1000

    def validate(self) -> None:
        """Raise LoadTestValidationError if the config is outside allowed bounds."""
        errors = validate_load_test_fields(
            {"duration_seconds": self.duration_seconds, "target_rate_per_second": self.target_rate_per_second}
        )
        if errors:
            raise LoadTestValidationError(errors)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoadTestConfig":
        """Build and validate a config from a plain mapping.

        Accepts both snake_case keys and the ``duration``/``rps``/``targetFunction``
        names used by the HTTP API.
        """
        raw = {
            "duration_seconds": data.get("duration_seconds", data.get("duration")),
            "target_rate_per_second": data.get("target_rate_per_second", data.get("rps")),
        }
        errors = validate_load_test_fields(raw)
        if errors:
            raise LoadTestValidationError(errors)

        config = cls(
            duration_seconds=int(raw["duration_seconds"]),
            target_rate_per_second=int(raw["target_rate_per_second"]),
            target=data.get("target", data.get("targetFunction")),
            payload=dict(data.get("payload") or {}),
        )
        return config

    def to_dict(self) -> Dict[str, Any]:
        return {
            "targetFunction": self.target,
            "duration": self.duration_seconds,
            "rps": self.target_rate_per_second,
            "payload": self.payload,
        }


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_load_test_fields(fields: Dict[str, Any]) -> List[str]:
    """Validate raw load-test fields and return a list of error messages."""
    errors = []

    duration = fields.get("duration_seconds")
    if duration is None:
        errors.append("duration_seconds is required")
    elif not is_number(duration):
        errors.append(f"duration_seconds must be a number, got {duration!r}")
    elif isinstance(duration, float) and not duration.is_integer():
        errors.append(f"duration_seconds must be a whole number, got {duration}")
    elif duration < 1:
        errors.append(f"duration_seconds must be at least 1, got {duration}")
    elif duration > MAX_DURATION_SECONDS:
        errors.append(f"Maximum duration is {MAX_DURATION_SECONDS} seconds, got {duration}")

    rate = fields.get("target_rate_per_second")
    if rate is None:
        errors.append("target_rate_per_second is required")
    elif not is_number(rate):
        errors.append(f"target_rate_per_second must be a number, got {rate!r}")
    elif isinstance(rate, float) and not rate.is_integer():
        errors.append(f"target_rate_per_second must be a whole number, got {rate}")
    elif rate < 1:
        errors.append(f"target_rate_per_second must be at least 1, got {rate}")
    elif rate > MAX_RATE_PER_SECOND:
        errors.append(f"Maximum RPS is {MAX_RATE_PER_SECOND}, got {rate}")

    return errors


@dataclass(frozen=True)
class BenchmarkConfig:
    """Parameters for a batched benchmark suite."""

    iterations: int = 10
    concurrency: int = 2
    targets: List[str] = field(default_factory=list)

    def validate(self) -> None:
        errors = []
        if self.iterations < 1:
            errors.append(f"iterations must be at least 1, got {self.iterations}")
        if self.concurrency < 1:
            errors.append(f"concurrency must be at least 1, got {self.concurrency}")
        if errors:
            raise LoadTestValidationError(errors)
