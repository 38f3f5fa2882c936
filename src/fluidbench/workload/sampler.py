"""Statistical distribution sampler for simulated call latencies."""

import logging
from typing import Any, Dict, Optional, Union

import numpy as np
from scipy import stats

logger = logging.getLogger(__name__)

SUPPORTED_DISTRIBUTIONS = ("Constant", "Uniform", "Normal", "LogNormal", "Exponential", "Gamma")


class DistributionSampler:
    """Samples non-negative values (latencies, in ms) from configured distributions."""

    def __init__(self, seed: Optional[int] = None):
        """Initialize the sampler.

        Args:
            seed: Random seed for reproducible simulated runs
        """
        self.rng = np.random.default_rng(seed)

    def sample(self, distribution_config: Dict[str, Any]) -> Union[float, int]:
        """Sample a value from the specified distribution.

        Args:
            distribution_config: Configuration dict with 'type' and distribution parameters.
                Examples:
                - {'type': 'Constant', 'value': 120}
                - {'type': 'LogNormal', 'median': 150, 'sigma': 0.4}
                - {'type': 'Uniform', 'low': 50, 'high': 250}

        Returns:
            Sampled value, clamped at zero (int when 'is_int' is set)

        Raises:
            ValueError: For an unknown distribution type
        """
        dist_type = distribution_config.get("type", "Constant")

        if dist_type == "Constant":
            value = distribution_config.get("value", 1.0)

        elif dist_type == "Uniform":
            low = distribution_config.get("low", 0.0)
            high = distribution_config.get("high", 1.0)
            value = stats.uniform.rvs(loc=low, scale=high - low, random_state=self.rng)

        elif dist_type == "Normal":
            mean = distribution_config.get("mean", 0.0)
            std = distribution_config.get("std", distribution_config.get("sigma", 1.0))
            value = stats.norm.rvs(loc=mean, scale=std, random_state=self.rng)

        elif dist_type == "LogNormal":
            # 'median' is in linear space; sigma is the log-space standard deviation
            median = distribution_config.get("median", 1.0)
            sigma = distribution_config.get("sigma", 1.0)
            value = stats.lognorm.rvs(s=sigma, scale=median, random_state=self.rng)

        elif dist_type == "Exponential":
            mean = distribution_config.get("mean", 1.0)
            value = stats.expon.rvs(scale=mean, random_state=self.rng)

        elif dist_type == "Gamma":
            shape = distribution_config.get("shape", 2.0)
            scale = distribution_config.get("scale", 1.0)
            value = stats.gamma.rvs(a=shape, scale=scale, random_state=self.rng)

        else:
            raise ValueError(
                f"Unknown distribution type: {dist_type}. "
                f"Supported: {', '.join(SUPPORTED_DISTRIBUTIONS)}"
            )

        value = max(0.0, float(value))
        if distribution_config.get("is_int", False):
            return int(round(value))
        return value

    def bernoulli(self, probability: float) -> bool:
        """Return True with the given probability."""
        if probability <= 0:
            return False
        return bool(self.rng.random() < probability)
