"""Pydantic models defining shared data contracts."""

from mealcart.models.plan import DAY_KEYS, MEAL_SLOTS, DayMeals, MealItem, MealPlan
from mealcart.models.shopping import (
    AggregateResult,
    BudgetStatus,
    CategorySpend,
    DailyShoppingGroup,
    ExtractedIngredient,
    RawCandidate,
    ShoppingItem,
    ShoppingListResult,
)

__all__ = [
    "DAY_KEYS",
    "MEAL_SLOTS",
    "DayMeals",
    "MealItem",
    "MealPlan",
    "AggregateResult",
    "BudgetStatus",
    "CategorySpend",
    "DailyShoppingGroup",
    "ExtractedIngredient",
    "RawCandidate",
    "ShoppingItem",
    "ShoppingListResult",
]
