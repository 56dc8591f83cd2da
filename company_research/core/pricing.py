"""OpenAI per-token pricing by model and service tier (USD per 1M tokens).

Source: https://platform.openai.com/docs/pricing
"""

from typing import Literal, Optional

from pydantic import BaseModel

ServiceTier = Literal["batch", "flex", "standard", "priority"]

SERVICE_TIERS: tuple[str, ...] = ("batch", "flex", "standard", "priority")


class ModelPricing(BaseModel):
    """Prices for one model/tier combination."""

    input_price: float
    cached_price: Optional[float] = None
    output_price: float


def _tier(input_price: float, output_price: float, cached_price: float | None = None) -> ModelPricing:
    return ModelPricing(
        input_price=input_price, cached_price=cached_price, output_price=output_price
    )


MODEL_PRICING: dict[str, dict[str, ModelPricing]] = {
    "gpt-5.2": {
        "batch": _tier(0.875, 7.0, 0.0875),
        "flex": _tier(0.875, 7.0, 0.0875),
        "standard": _tier(1.75, 14.0, 0.175),
        "priority": _tier(3.5, 28.0, 0.35),
    },
    "gpt-5.1": {
        "batch": _tier(0.625, 5.0, 0.0625),
        "flex": _tier(0.625, 5.0, 0.0625),
        "standard": _tier(1.25, 10.0, 0.125),
        "priority": _tier(2.5, 20.0, 0.25),
    },
    "gpt-5": {
        "batch": _tier(0.625, 5.0, 0.0625),
        "flex": _tier(0.625, 5.0, 0.0625),
        "standard": _tier(1.25, 10.0, 0.125),
        "priority": _tier(2.5, 20.0, 0.25),
    },
    "gpt-5-mini": {
        "batch": _tier(0.125, 1.0, 0.0125),
        "flex": _tier(0.125, 1.0, 0.0125),
        "standard": _tier(0.25, 2.0, 0.025),
        "priority": _tier(0.45, 3.6, 0.045),
    },
    "gpt-5-nano": {
        "batch": _tier(0.025, 0.2, 0.0025),
        "flex": _tier(0.025, 0.2, 0.0025),
        "standard": _tier(0.05, 0.4, 0.005),
        "priority": _tier(0.2, 0.8, 0.05),
    },
    "gpt-5.2-pro": {
        "batch": _tier(10.5, 84.0),
        "flex": _tier(10.5, 84.0),
        "standard": _tier(21.0, 168.0),
        "priority": _tier(42.0, 336.0),
    },
    "gpt-5-pro": {
        "batch": _tier(7.5, 60.0),
        "flex": _tier(7.5, 60.0),
        "standard": _tier(15.0, 120.0),
        "priority": _tier(30.0, 240.0),
    },
    "gpt-4.1": {
        "batch": _tier(1.0, 4.0),
        "flex": _tier(1.5, 6.0),
        "standard": _tier(2.0, 8.0),
        "priority": _tier(3.5, 14.0, 0.875),
    },
    "gpt-4.1-mini": {
        "batch": _tier(0.2, 0.8),
        "flex": _tier(0.3, 1.2),
        "standard": _tier(0.4, 1.6, 0.1),
        "priority": _tier(0.7, 2.8, 0.175),
    },
    "gpt-4.1-nano": {
        "batch": _tier(0.05, 0.2),
        "flex": _tier(0.075, 0.3),
        "standard": _tier(0.1, 0.4, 0.025),
        "priority": _tier(0.2, 0.8, 0.05),
    },
    "gpt-4o": {
        "batch": _tier(1.25, 5.0),
        "flex": _tier(1.875, 7.5),
        "standard": _tier(2.5, 10.0, 1.25),
        "priority": _tier(4.25, 17.0, 2.125),
    },
    "gpt-4o-mini": {
        "batch": _tier(0.075, 0.3),
        "flex": _tier(0.1125, 0.45),
        "standard": _tier(0.15, 0.6, 0.075),
        "priority": _tier(0.25, 1.0, 0.125),
    },
}


def get_pricing(model: str | None, tier: str | None) -> ModelPricing | None:
    """Return pricing for a model/tier pair, or None if either is unknown."""
    if not model or not tier:
        return None
    return MODEL_PRICING.get(model, {}).get(tier)
