"""Shopping list generation: collection, merging, classification and aggregation."""

from .aggregator import aggregate, budget_status, category_breakdown, sort_items
from .classifier import CATEGORIES, classify
from .collector import MealIngredientCollector, iter_meal_occurrences
from .costs import CostEstimator, estimate, fill_missing_cost
from .merger import merge
from .pipeline import build_collector, generate_shopping_list

__all__ = [
    "CATEGORIES",
    "CostEstimator",
    "MealIngredientCollector",
    "aggregate",
    "budget_status",
    "build_collector",
    "category_breakdown",
    "classify",
    "estimate",
    "fill_missing_cost",
    "generate_shopping_list",
    "iter_meal_occurrences",
    "merge",
    "sort_items",
]
