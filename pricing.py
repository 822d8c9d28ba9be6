"""Token pricing lookup.

Per-model pricing in USD per 1M tokens. The table is built once at startup
(optionally with overrides from ``CUSTOM_PRICING_JSON``) and passed explicitly
to whoever needs to compute a cost.
"""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelPricing:
    input_per_million: float
    output_per_million: float


DEFAULT_PRICING: dict[str, ModelPricing] = {
    # Google Gemini
    "gemini-2.5-pro": ModelPricing(1.25, 10.0),
    "gemini-2.5-flash": ModelPricing(0.30, 2.50),
    "gemini-2.5-flash-lite": ModelPricing(0.10, 0.40),
    "gemini-2.0-flash": ModelPricing(0.10, 0.40),
    "gemini-2.0-flash-lite": ModelPricing(0.075, 0.30),
    # Anthropic Claude
    "claude-opus-4-20250514": ModelPricing(15.0, 75.0),
    "claude-sonnet-4-20250514": ModelPricing(3.0, 15.0),
    "claude-haiku-4-20250514": ModelPricing(0.25, 1.25),
    "claude-opus-4": ModelPricing(15.0, 75.0),
    "claude-sonnet-4": ModelPricing(3.0, 15.0),
    "claude-haiku-4": ModelPricing(0.25, 1.25),
    "claude-3-5-sonnet-20241022": ModelPricing(3.0, 15.0),
    "claude-3-5-haiku-20241022": ModelPricing(0.80, 4.0),
    "claude-3-opus-20240229": ModelPricing(15.0, 75.0),
    "claude-3-sonnet-20240229": ModelPricing(3.0, 15.0),
    "claude-3-haiku-20240307": ModelPricing(0.25, 1.25),
    # OpenAI
    "gpt-4": ModelPricing(30.0, 60.0),
    "gpt-4-turbo": ModelPricing(10.0, 30.0),
    "gpt-4o": ModelPricing(2.50, 10.0),
    "gpt-4o-mini": ModelPricing(0.15, 0.60),
    "gpt-3.5-turbo": ModelPricing(0.50, 1.50),
}


class PricingTable:
    """Read-only model-id -> pricing mapping."""

    def __init__(self, prices: Mapping[str, ModelPricing]):
        self._prices = MappingProxyType(dict(prices))
        # Longest first so prefix lookup picks the most specific family
        self._prefixes = sorted(self._prices, key=len, reverse=True)

    def __contains__(self, model: object) -> bool:
        return model in self._prices

    def __len__(self) -> int:
        return len(self._prices)

    def as_dict(self) -> dict[str, ModelPricing]:
        return dict(self._prices)

    def lookup(self, model: str | None) -> ModelPricing | None:
        """Exact id first, then the longest known prefix of *model*."""
        if not model:
            return None
        if model in self._prices:
            return self._prices[model]
        for prefix in self._prefixes:
            if model.startswith(prefix):
                return self._prices[prefix]
        return None


def parse_overrides(raw: str) -> dict[str, ModelPricing]:
    """
    Parse a JSON pricing override document.

    Expected shape::

        {"my-model": {"inputPerMillion": 1.0, "outputPerMillion": 2.0}}

    snake_case keys are accepted as well. Raises ``ValueError`` on bad input.
    """
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError("pricing overrides must be a JSON object")

    overrides: dict[str, ModelPricing] = {}
    for model, entry in data.items():
        if not isinstance(entry, dict):
            raise ValueError(f"pricing for {model!r} must be an object")
        try:
            overrides[model] = ModelPricing(
                input_per_million=float(
                    entry.get("inputPerMillion", entry.get("input_per_million"))
                ),
                output_per_million=float(
                    entry.get("outputPerMillion", entry.get("output_per_million"))
                ),
            )
        except (TypeError, ValueError) as e:
            raise ValueError(f"invalid pricing for {model!r}: {e}") from e
    return overrides


def load_pricing(overrides_json: str | None = None) -> PricingTable:
    """Build the pricing table, applying JSON overrides when given."""
    prices = dict(DEFAULT_PRICING)
    if overrides_json:
        try:
            overrides = parse_overrides(overrides_json)
        except ValueError as e:
            logger.warning("Ignoring CUSTOM_PRICING_JSON: %s", e)
        else:
            prices.update(overrides)
            logger.info("Loaded %d custom pricing override(s)", len(overrides))
    return PricingTable(prices)


def calculate_cost(
    table: PricingTable,
    model: str | None,
    input_tokens: int,
    output_tokens: int,
) -> float:
    """Cost in USD rounded to 6 decimals; 0 for unknown models."""
    pricing = table.lookup(model)
    if pricing is None:
        return 0.0

    input_cost = (input_tokens / 1_000_000) * pricing.input_per_million
    output_cost = (output_tokens / 1_000_000) * pricing.output_per_million
    return round(input_cost + output_cost, 6)
