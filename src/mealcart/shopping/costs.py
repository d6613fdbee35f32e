"""Heuristic ingredient cost estimation."""

from __future__ import annotations

import random
import re
from dataclasses import dataclass
from typing import Mapping, Optional

from mealcart.models.shopping import ShoppingItem


@dataclass(frozen=True)
class PriceBand:
    low: float
    high: float

    @property
    def midpoint(self) -> float:
        return (self.low + self.high) / 2

    def contains(self, value: float) -> bool:
        return self.low <= value < self.high


STANDARD_BAND = PriceBand(2.0, 4.0)
PREMIUM_BAND = PriceBand(5.0, 9.0)
PREMIUM_MARKERS: tuple[str, ...] = ("beef", "salmon", "fish")

DEFAULT_MISSING_COST = 2.50
_LEADING_NUMBER_RE = re.compile(r"^(\d+(?:\.\d+)?)")


def price_band(name: str) -> PriceBand:
    """Return the price band an ingredient draws its cost from."""

    lowered = (name or "").lower()
    if any(marker in lowered for marker in PREMIUM_MARKERS):
        return PREMIUM_BAND
    return STANDARD_BAND


def estimate(name: str) -> float:
    """Deterministic cost estimate: the midpoint of the ingredient's price band."""

    return price_band(name).midpoint


class CostEstimator:
    """
    Callable cost estimator with optional jitter and explicit prices.

    ``prices`` maps lower-cased ingredient names to known costs and takes precedence
    over the heuristic bands. With ``jitter`` enabled the cost is drawn uniformly
    from the band using ``rng``, which can be seeded for reproducible runs.
    """

    def __init__(
        self,
        *,
        jitter: bool = False,
        rng: Optional[random.Random] = None,
        prices: Optional[Mapping[str, float]] = None,
    ) -> None:
        self._jitter = jitter
        self._rng = rng or random.Random()
        self._prices = {key.strip().lower(): float(value) for key, value in (prices or {}).items()}

    def __call__(self, name: str) -> float:
        known = self._prices.get((name or "").strip().lower())
        if known is not None and known > 0:
            return known
        if not self._jitter:
            return estimate(name)
        band = price_band(name)
        return band.low + self._rng.random() * (band.high - band.low)


def fill_missing_cost(item: ShoppingItem) -> ShoppingItem:
    """Give an item with no cost a default price scaled by its leading quantity."""

    if item.estimated_cost > 0:
        return item
    price = DEFAULT_MISSING_COST
    match = _LEADING_NUMBER_RE.match(item.quantity or "")
    if match:
        amount = float(match.group(1))
        if amount > 0:
            price = price * (1 + min(amount / 2, 3))
    return item.model_copy(update={"estimated_cost": price})


__all__ = [
    "PriceBand",
    "STANDARD_BAND",
    "PREMIUM_BAND",
    "CostEstimator",
    "estimate",
    "fill_missing_cost",
    "price_band",
]
