"""Shopping list generation entry point."""

from __future__ import annotations

import logging
import random
from typing import Any, Mapping, Optional, Union

from mealcart import metrics
from mealcart.config import Settings, get_settings
from mealcart.extractor import IngredientExtractor, build_ingredient_extractor
from mealcart.models.plan import MealPlan
from mealcart.models.shopping import ShoppingListResult
from mealcart.shopping.aggregator import (
    aggregate,
    budget_status,
    category_breakdown,
    validate_budget,
)
from mealcart.shopping.collector import MealIngredientCollector
from mealcart.shopping.costs import CostEstimator, fill_missing_cost
from mealcart.shopping.merger import merge

logger = logging.getLogger(__name__)

MealPlanInput = Union[MealPlan, Mapping[str, Any], None]


def coerce_meal_plan(meal_plan: MealPlanInput) -> Optional[MealPlan]:
    """
    Return a ``MealPlan`` or ``None`` when the input has no usable ``weeklyMeals``.

    Only the top-level ``weeklyMeals`` (or ``weekly_meals``) key is recognized; callers
    holding a plan nested inside another payload must unwrap it first. A ``weeklyMeals``
    that is not a mapping counts as missing. Malformed days and slots inside it are
    dropped individually by the model.
    """

    if isinstance(meal_plan, MealPlan):
        return meal_plan
    if not isinstance(meal_plan, Mapping):
        return None
    weekly_meals = meal_plan.get("weeklyMeals")
    if weekly_meals is None:
        weekly_meals = meal_plan.get("weekly_meals")
    if not isinstance(weekly_meals, Mapping):
        return None
    return MealPlan.model_validate({"weeklyMeals": weekly_meals})


def build_collector(
    extractor: Optional[IngredientExtractor] = None,
    settings: Optional[Settings] = None,
    *,
    rng: Optional[random.Random] = None,
) -> MealIngredientCollector:
    """Create a collector configured from application settings."""

    settings = settings or get_settings()
    return MealIngredientCollector(
        extractor or build_ingredient_extractor(settings),
        cost_estimator=CostEstimator(jitter=settings.cost_jitter, rng=rng),
        max_concurrency=settings.collector_max_concurrency,
        extraction_timeout=settings.collector_extraction_timeout,
    )


async def generate_shopping_list(
    meal_plan: MealPlanInput,
    weekly_budget: float,
    *,
    collector: Optional[MealIngredientCollector] = None,
    top_n: Optional[int] = None,
    fill_missing_costs: bool = False,
) -> ShoppingListResult:
    """
    Build a merged, day-grouped and budgeted shopping list for a weekly meal plan.

    Per-meal extraction problems degrade into placeholder lines, malformed slots are
    skipped, and a plan without ``weeklyMeals`` yields an empty list; none of these
    raise. An invalid ``weekly_budget`` raises ``TypeError``/``ValueError``. With
    ``fill_missing_costs`` zero-cost lines, placeholders included, get a default
    price before budgeting.
    """

    budget = validate_budget(weekly_budget)
    if top_n is None:
        top_n = get_settings().category_top_n

    plan = coerce_meal_plan(meal_plan)
    if plan is None:
        logger.error("No weekly meals found in meal plan; returning an empty shopping list")
        metrics.SHOPPING_LISTS.labels(result="empty_plan").inc()
        items = []
    else:
        collector = collector or build_collector()
        candidates = await collector.collect(plan)
        items = merge(candidates)
        if fill_missing_costs:
            items = [fill_missing_cost(item) for item in items]
        metrics.SHOPPING_LISTS.labels(result="generated").inc()

    result = aggregate(items, budget)
    status = budget_status(result)
    logger.info(
        "Generated shopping list items=%s total_cost=%.2f budget=%.2f status=%s",
        len(items),
        result.total_cost,
        budget,
        status.label,
    )
    return ShoppingListResult(
        items=items,
        aggregate=result,
        budget=status,
        categories=category_breakdown(items, top_n=top_n),
    )


__all__ = ["build_collector", "coerce_meal_plan", "generate_shopping_list"]
