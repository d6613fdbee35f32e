"""Dependency definitions for the Mealcart API server."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Mapping, Optional

from fastapi import Depends, HTTPException, Request, status

from mealcart.config import Settings, get_settings
from mealcart.extractor import IngredientExtractor, build_ingredient_extractor
from mealcart.models.shopping import ShoppingListResult
from mealcart.shopping.pipeline import build_collector, generate_shopping_list

ShoppingListGenerator = Callable[
    [Mapping[str, Any], float, bool],
    Awaitable[ShoppingListResult],
]


def get_ingredient_extractor(
    settings: Settings = Depends(get_settings),
) -> IngredientExtractor:
    """Return the configured ingredient extractor."""

    return build_ingredient_extractor(settings)


def get_shopping_list_generator(
    settings: Settings = Depends(get_settings),
    extractor: IngredientExtractor = Depends(get_ingredient_extractor),
) -> ShoppingListGenerator:
    """Return a coroutine function that runs the generation pipeline."""

    async def _generate(
        meal_plan: Mapping[str, Any], weekly_budget: float, fill_missing_costs: bool
    ) -> ShoppingListResult:
        return await generate_shopping_list(
            meal_plan,
            weekly_budget,
            collector=build_collector(extractor, settings),
            top_n=settings.category_top_n,
            fill_missing_costs=fill_missing_costs,
        )

    return _generate


def require_api_token(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> None:
    """Ensure requests carry the configured API token when required."""

    token: Optional[str] = settings.api_token
    if not token:
        return

    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.split("Bearer ")[-1].strip() == token:
        return

    if request.headers.get("X-API-Key") == token:
        return

    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
