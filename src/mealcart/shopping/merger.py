"""Deduplicate raw ingredient candidates into shopping items."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from mealcart.models.shopping import RawCandidate, ShoppingItem, format_number

logger = logging.getLogger(__name__)

_LEADING_NUMBER_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def leading_number(text: Optional[str]) -> Optional[float]:
    """Return the number a quantity string starts with, if any (``"200g"`` -> 200.0)."""

    if not text:
        return None
    match = _LEADING_NUMBER_RE.match(text)
    if not match:
        return None
    return float(match.group(1))


def merge_key(name: str) -> str:
    return name.lower()


@dataclass
class _MergedItem:
    name: str
    quantity: str
    estimated_cost: float
    category: str
    is_placeholder: bool
    meal_associations: List[str] = field(default_factory=list)

    def fold(self, candidate: RawCandidate) -> None:
        if candidate.day_label not in self.meal_associations:
            self.meal_associations.append(candidate.day_label)

        existing_qty = leading_number(self.quantity)
        incoming_qty = leading_number(candidate.quantity_text)
        if existing_qty is not None and incoming_qty is not None:
            self.quantity = format_number(existing_qty + incoming_qty)
        elif candidate.quantity_text:
            self.quantity = candidate.quantity_text

        # Pairwise, not a running mean: each step averages against the accumulated value.
        self.estimated_cost = (self.estimated_cost + candidate.estimated_cost) / 2

    def freeze(self) -> ShoppingItem:
        return ShoppingItem(
            name=self.name,
            quantity=self.quantity,
            estimated_cost=self.estimated_cost,
            category=self.category,
            meal_associations=list(self.meal_associations),
            is_placeholder=self.is_placeholder,
        )


def merge(candidates: Iterable[RawCandidate]) -> List[ShoppingItem]:
    """
    Fold candidates sharing a case-insensitive name into one ``ShoppingItem``.

    The first occurrence of a name seeds the item and fixes its display name and
    category. Later occurrences add their day label once, sum quantities when both
    start with a number (otherwise the later quantity replaces the earlier one), and
    average their cost against the accumulated cost. Items come back in first-seen
    order.
    """

    merged: Dict[str, _MergedItem] = {}
    total = 0
    for candidate in candidates:
        total += 1
        key = merge_key(candidate.name)
        existing = merged.get(key)
        if existing is None:
            merged[key] = _MergedItem(
                name=candidate.name,
                quantity=candidate.quantity_text,
                estimated_cost=candidate.estimated_cost,
                category=candidate.category,
                is_placeholder=candidate.is_placeholder,
                meal_associations=[candidate.day_label],
            )
        else:
            existing.fold(candidate)

    logger.debug("Merged %s candidate(s) into %s item(s)", total, len(merged))
    return [entry.freeze() for entry in merged.values()]


__all__ = ["leading_number", "merge", "merge_key"]
