"""Ingredient extractor interface and response coercion helpers."""

from __future__ import annotations

from typing import Any, List, Protocol, Sequence

from pydantic import ValidationError

from mealcart.models.shopping import ExtractedIngredient


class ExtractionError(RuntimeError):
    """Raised when ingredients cannot be extracted for a meal."""


class IngredientExtractor(Protocol):
    """Protocol for services that turn a meal description into ingredients."""

    async def extract(
        self, meal_name: str, meal_description: str
    ) -> Sequence[ExtractedIngredient]:
        """Return the ingredients needed to cook the described meal."""


def coerce_ingredients(payload: Any) -> List[ExtractedIngredient]:
    """
    Validate an extractor response and convert it to ``ExtractedIngredient`` rows.

    Accepts ``ExtractedIngredient`` instances or ``{"name", "quantity"}`` mappings. A
    non-list payload, an empty list, or any entry without a usable name raises
    ``ExtractionError`` so the caller can treat the whole response as a failure.
    """

    if isinstance(payload, (str, bytes)) or not isinstance(payload, (list, tuple)):
        raise ExtractionError(f"Expected a list of ingredients, got {type(payload).__name__}")
    if not payload:
        raise ExtractionError("Extractor returned no ingredients")

    ingredients: List[ExtractedIngredient] = []
    for entry in payload:
        if isinstance(entry, ExtractedIngredient):
            ingredients.append(entry)
            continue
        if not isinstance(entry, dict):
            raise ExtractionError(f"Malformed ingredient entry: {entry!r}")
        try:
            ingredients.append(ExtractedIngredient.model_validate(entry))
        except ValidationError as exc:
            raise ExtractionError(f"Malformed ingredient entry: {entry!r}") from exc
    return ingredients


__all__ = ["ExtractionError", "IngredientExtractor", "coerce_ingredients"]
