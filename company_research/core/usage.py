"""Token usage and cost accounting across LLM calls."""

import logging
import threading
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from company_research.core.pricing import get_pricing

logger = logging.getLogger(__name__)

# ── Token Usage ──────────────────────────────────────────────────────


class TokenUsage(BaseModel):
    """Token counters reported for a single LLM call."""

    input_tokens: int = Field(default=0, ge=0)
    cached_tokens: int = Field(default=0, ge=0)
    output_tokens: int = Field(default=0, ge=0)
    reasoning_tokens: int = Field(default=0, ge=0)
    total_tokens: int = Field(default=0, ge=0)


class UsageSummary(BaseModel):
    """Read-only snapshot of a tracker's running totals."""

    model_config = ConfigDict(frozen=True)

    total_calls: int
    input_tokens: int
    cached_tokens: int
    output_tokens: int
    reasoning_tokens: int
    total_tokens: int
    input_cost: float
    output_cost: float
    total_cost: float
    model: Optional[str]
    service_tier: Optional[str]


# ── Tracker ──────────────────────────────────────────────────────────


class UsageTracker:
    """Accumulates token counts and USD cost for a research run.

    Cost is looked up per call from the current model and service tier; an
    unset or unpriced combination contributes zero cost. Reasoning tokens are
    billed at the output rate.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.reset()

    def set_model(self, model: str | None) -> None:
        with self._lock:
            self._model = model

    def set_service_tier(self, tier: str | None) -> None:
        with self._lock:
            self._service_tier = tier

    def add_usage(self, usage: TokenUsage | dict) -> None:
        """Record one completed call."""
        if not isinstance(usage, TokenUsage):
            usage = TokenUsage.model_validate(usage)

        with self._lock:
            self._input_tokens += usage.input_tokens
            self._cached_tokens += usage.cached_tokens
            self._output_tokens += usage.output_tokens
            self._reasoning_tokens += usage.reasoning_tokens
            self._total_tokens += usage.total_tokens
            self._calls += 1

            pricing = get_pricing(self._model, self._service_tier)
            if pricing is not None:
                cached_price = (
                    pricing.cached_price
                    if pricing.cached_price is not None
                    else pricing.input_price
                )
                self._input_cost += (
                    usage.input_tokens * pricing.input_price
                    + usage.cached_tokens * cached_price
                ) / 1_000_000
                self._output_cost += (
                    (usage.output_tokens + usage.reasoning_tokens) * pricing.output_price
                ) / 1_000_000

    def get_summary(self) -> UsageSummary:
        with self._lock:
            return UsageSummary(
                total_calls=self._calls,
                input_tokens=self._input_tokens,
                cached_tokens=self._cached_tokens,
                output_tokens=self._output_tokens,
                reasoning_tokens=self._reasoning_tokens,
                total_tokens=self._total_tokens,
                input_cost=self._input_cost,
                output_cost=self._output_cost,
                total_cost=self._input_cost + self._output_cost,
                model=self._model,
                service_tier=self._service_tier,
            )

    def log_summary(self) -> UsageSummary:
        """Log the running totals and return the snapshot."""
        s = self.get_summary()
        logger.info("=" * 60)
        logger.info("TOKEN USAGE")
        logger.info("Total API calls: %d", s.total_calls)
        logger.info(
            "Tokens: %d input, %d cached, %d output, %d reasoning, %d total",
            s.input_tokens,
            s.cached_tokens,
            s.output_tokens,
            s.reasoning_tokens,
            s.total_tokens,
        )
        if s.model:
            logger.info("Model: %s", s.model)
        if s.service_tier:
            logger.info("Service tier: %s", s.service_tier)
        if s.total_cost > 0:
            logger.info(
                "Cost: $%.4f input, $%.4f output, $%.4f total",
                s.input_cost,
                s.output_cost,
                s.total_cost,
            )
        return s

    def reset(self) -> None:
        """Zero every counter and clear model and tier."""
        with self._lock:
            self._input_tokens = 0
            self._cached_tokens = 0
            self._output_tokens = 0
            self._reasoning_tokens = 0
            self._total_tokens = 0
            self._calls = 0
            self._input_cost = 0.0
            self._output_cost = 0.0
            self._model: str | None = None
            self._service_tier: str | None = None

    def __repr__(self) -> str:
        return (
            f"UsageTracker(model={self._model!r}, tier={self._service_tier!r}, "
            f"calls={self._calls}, cost=${self._input_cost + self._output_cost:.4f})"
        )
