"""Latency distributions for simulated load."""

from .sampler import SUPPORTED_DISTRIBUTIONS, DistributionSampler

__all__ = ["DistributionSampler", "SUPPORTED_DISTRIBUTIONS"]
