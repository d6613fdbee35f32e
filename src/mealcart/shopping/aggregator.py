"""Day grouping, budget status, and category spend views over shopping items."""

from __future__ import annotations

import logging
import math
import numbers
from typing import Dict, Iterable, List, Optional, Sequence

from mealcart.models.plan import DAY_KEYS
from mealcart.models.shopping import (
    BUCKET_DISPLAY_NAMES,
    BUCKET_ORDER,
    SHARED_BUCKET,
    AggregateResult,
    BudgetStatus,
    CategorySpend,
    DailyShoppingGroup,
    ShoppingItem,
)

logger = logging.getLogger(__name__)

OVER_BUDGET_MARGIN = 1.02
NEAR_LIMIT_PERCENT = 90


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def validate_budget(weekly_budget: object) -> float:
    """Return the budget as a float, rejecting non-numbers and non-positive values."""

    if isinstance(weekly_budget, bool) or not isinstance(weekly_budget, numbers.Real):
        raise TypeError(f"weekly_budget must be a number, got {type(weekly_budget).__name__}")
    budget = float(weekly_budget)
    if not math.isfinite(budget) or budget <= 0:
        raise ValueError(f"weekly_budget must be a positive number, got {weekly_budget!r}")
    return budget


def assign_bucket(item: ShoppingItem) -> str:
    """Return the first weekday named in the item's associations, else ``"shared"``."""

    for association in item.meal_associations:
        lowered = association.lower()
        for day in DAY_KEYS:
            if day in lowered:
                return day
    return SHARED_BUCKET


def aggregate(items: Iterable[ShoppingItem], weekly_budget: float) -> AggregateResult:
    """Partition items into day buckets, each sorted by category then name.

    Every item lands in exactly one bucket.
    """

    budget = validate_budget(weekly_budget)
    buckets: Dict[str, List[ShoppingItem]] = {key: [] for key in BUCKET_ORDER}
    for item in items:
        buckets[assign_bucket(item)].append(item)

    result = AggregateResult(
        by_day={
            key: DailyShoppingGroup(day_name=BUCKET_DISPLAY_NAMES[key], items=sort_items(members))
            for key, members in buckets.items()
        },
        weekly_budget=budget,
    )
    logger.debug(
        "Aggregated %s item(s) total_cost=%.2f weekly_budget=%.2f",
        sum(len(members) for members in buckets.values()),
        result.total_cost,
        budget,
    )
    return result


def budget_status(result: AggregateResult) -> BudgetStatus:
    """Compare the aggregate total to the weekly budget (2% margin before "over")."""

    total = result.total_cost
    budget = result.weekly_budget
    is_over = total > budget * OVER_BUDGET_MARGIN
    usage = min(round_half_up(total / budget * 100), 100)
    if is_over:
        label = "over_budget"
    elif usage > NEAR_LIMIT_PERCENT:
        label = "near_limit"
    else:
        label = "within_budget"
    day_percents = {
        key: min(round_half_up(group.total_cost / budget * 100), 100)
        for key, group in result.by_day.items()
        if group.items
    }
    return BudgetStatus(
        total_cost=total,
        weekly_budget=budget,
        is_over_budget=is_over,
        usage_percent=usage,
        remaining=budget - total,
        label=label,
        day_percents=day_percents,
    )


def category_breakdown(
    items: Iterable[ShoppingItem], top_n: Optional[int] = None
) -> List[CategorySpend]:
    """Total spend per category, highest first; ties keep first-seen order."""

    totals: Dict[str, float] = {}
    for item in items:
        category = item.category or "other"
        totals[category] = totals.get(category, 0.0) + item.estimated_cost

    overall = sum(totals.values())
    ranked = sorted(totals.items(), key=lambda entry: entry[1], reverse=True)
    if top_n is not None:
        ranked = ranked[: max(0, top_n)]
    return [
        CategorySpend(
            category=category,
            total_cost=cost,
            percent=round_half_up(cost / overall * 100) if overall > 0 else 0,
        )
        for category, cost in ranked
    ]


def sort_items(items: Sequence[ShoppingItem]) -> List[ShoppingItem]:
    """Order items by category, then by name."""

    return sorted(items, key=lambda item: (item.category or "", item.name.lower()))


__all__ = [
    "aggregate",
    "assign_bucket",
    "budget_status",
    "category_breakdown",
    "round_half_up",
    "sort_items",
    "validate_budget",
]
