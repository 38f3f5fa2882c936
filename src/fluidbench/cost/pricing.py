"""Pricing table for active-CPU billing."""

import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, NonNegativeFloat

logger = logging.getLogger(__name__)


class PricingTable(BaseModel):
    """Billing rates in USD. Immutable once constructed."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    active_cpu_cost_per_hour: NonNegativeFloat = 0.128
    memory_cost_per_gb_hour: NonNegativeFloat = 0.0106
    cost_per_invocation: NonNegativeFloat = 0.0000002


DEFAULT_PRICING = PricingTable()


def load_pricing(section: Optional[Dict[str, Any]] = None) -> PricingTable:
    """Build a PricingTable from a config section, falling back to defaults.

    Raises:
        pydantic.ValidationError: If a rate is negative or a key is unknown
    """
    if not section:
        return DEFAULT_PRICING

    pricing = PricingTable(**section)
    logger.info(
        f"Loaded pricing: active CPU ${pricing.active_cpu_cost_per_hour}/h, "
        f"memory ${pricing.memory_cost_per_gb_hour}/GB-h, "
        f"invocation ${pricing.cost_per_invocation}"
    )
    return pricing
