"""
Unit tests for load-test configuration validation.
"""

import pytest

from fluidbench.exceptions import ConfigurationError, LoadTestValidationError
from fluidbench.loadtest import BenchmarkConfig, LoadTestConfig
from fluidbench.loadtest.config import validate_load_test_fields


class TestLoadTestConfig:
    """Test LoadTestConfig bounds."""

    def test_valid_config(self):
        config = LoadTestConfig(duration_seconds=60, target_rate_per_second=50)
        config.validate()
        assert config.interval_ms == 20
        assert config.interval_seconds == pytest.approx(0.02)

    def test_duration_too_long(self):
        with pytest.raises(LoadTestValidationError, match="Maximum duration is 60 seconds"):
            LoadTestConfig(duration_seconds=61, target_rate_per_second=1).validate()

    def test_rate_too_high(self):
        with pytest.raises(LoadTestValidationError, match="Maximum RPS is 50"):
            LoadTestConfig(duration_seconds=1, target_rate_per_second=1000).validate()

    def test_zero_values_rejected(self):
        with pytest.raises(LoadTestValidationError) as exc_info:
            LoadTestConfig(duration_seconds=0, target_rate_per_second=0).validate()
        assert len(exc_info.value.errors) == 2

    def test_error_is_configuration_and_value_error(self):
        with pytest.raises(ConfigurationError):
            LoadTestConfig(duration_seconds=100, target_rate_per_second=1).validate()
        with pytest.raises(ValueError):
            LoadTestConfig(duration_seconds=100, target_rate_per_second=1).validate()

    def test_from_dict_accepts_api_names(self):
        config = LoadTestConfig.from_dict({
            "targetFunction": "/api/edge/quick-response",
            "duration": 20,
            "rps": 20,
            "payload": {"message": "load test"},
        })
        assert config.target == "/api/edge/quick-response"
        assert config.duration_seconds == 20
        assert config.target_rate_per_second == 20
        assert config.payload == {"message": "load test"}

    def test_from_dict_missing_fields(self):
        with pytest.raises(LoadTestValidationError) as exc_info:
            LoadTestConfig.from_dict({"target": "/api/x"})
        assert "duration_seconds is required" in exc_info.value.errors
        assert "target_rate_per_second is required" in exc_info.value.errors

    def test_to_dict_round_names(self):
        config = LoadTestConfig(duration_seconds=5, target_rate_per_second=2, target="/api/x")
        assert config.to_dict() == {"targetFunction": "/api/x", "duration": 5, "rps": 2, "payload": {}}


class TestValidateFields:
    """Test raw field validation."""

    def test_non_numeric(self):
        errors = validate_load_test_fields({"duration_seconds": "ten", "target_rate_per_second": True})
        assert len(errors) == 2
        assert all("must be a number" in e for e in errors)

    def test_valid(self):
        assert validate_load_test_fields({"duration_seconds": 1, "target_rate_per_second": 50}) == []


class TestBenchmarkConfig:
    """Test BenchmarkConfig validation."""

    def test_defaults_valid(self):
        BenchmarkConfig().validate()

    def test_invalid_values(self):
        with pytest.raises(LoadTestValidationError) as exc_info:
            BenchmarkConfig(iterations=0, concurrency=0).validate()
        assert len(exc_info.value.errors) == 2


class TestWholeNumberFields:
    """Test that fractional durations and rates are rejected, not truncated."""

    def test_fractional_duration_rejected(self):
        with pytest.raises(LoadTestValidationError, match="duration_seconds must be a whole number"):
            LoadTestConfig.from_dict({"duration": 1.9, "rps": 5})

    def test_fractional_rate_rejected(self):
        errors = validate_load_test_fields({"duration_seconds": 2, "target_rate_per_second": 2.5})
        assert errors == ["target_rate_per_second must be a whole number, got 2.5"]

    def test_integral_float_accepted(self):
        config = LoadTestConfig.from_dict({"duration": 2.0, "rps": 10.0})
        assert config.duration_seconds == 2
        assert config.target_rate_per_second == 10

    def test_direct_construction_validated(self):
        with pytest.raises(LoadTestValidationError):
            LoadTestConfig(duration_seconds=0.5, target_rate_per_second=1).validate()
