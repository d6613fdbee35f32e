"""Offline ingredient extraction based on quantity patterns in meal text."""

from __future__ import annotations

import logging
import re
from typing import List

from mealcart.extractor.base import ExtractionError, coerce_ingredients
from mealcart.models.shopping import ExtractedIngredient

logger = logging.getLogger(__name__)

_UNITS = r"kg|g|grams?|ml|l|cups?|tbsp|tsp|oz"
_INGREDIENT_LIST_RE = re.compile(r"ingredients:\s*\[(.*?)\]", re.IGNORECASE | re.DOTALL)
_LIST_ENTRY_RE = re.compile(rf"^(\d+(?:\.\d+)?)?\s*(?:({_UNITS})\b)?\s*(.+)$", re.IGNORECASE)
_QUANTITY_RE = re.compile(rf"(\d+(?:\.\d+)?)\s*({_UNITS})\s+([a-zA-Z ]+)", re.IGNORECASE)
_NAME_SPLIT_RE = re.compile(r"\s+and\s+|\s+with\s+|\s*,\s*|\s+&\s+", re.IGNORECASE)
_CONNECTOR_RE = re.compile(r"\s+(?:and|with|or|on|in)\b.*$", re.IGNORECASE)
_STOP_WORDS = {"the", "and", "with"}


def _join_quantity(amount: str | None, unit: str | None) -> str:
    if not amount:
        return ""
    if not unit:
        return amount
    unit = unit.lower()
    return f"{amount}{unit}" if unit in {"g", "kg", "ml", "l"} else f"{amount} {unit}"


class HeuristicIngredientExtractor:
    """
    Regex-driven extractor used when no LLM endpoint is configured.

    Tries, in order: an explicit ``ingredients: [...]`` list in the description,
    ``<amount><unit> <ingredient>`` fragments in free text, and finally the components
    of the meal name itself (``"Chicken and Rice"`` -> chicken, rice).
    """

    async def extract(self, meal_name: str, meal_description: str) -> List[ExtractedIngredient]:
        return self.parse(meal_name, meal_description)

    def parse(self, meal_name: str, meal_description: str) -> List[ExtractedIngredient]:
        entries = (
            self._from_ingredient_list(meal_description)
            or self._from_quantities(meal_description)
            or self._from_meal_name(meal_name)
        )
        if not entries:
            raise ExtractionError(f"No ingredients recognized for meal '{meal_name}'")
        logger.debug("Heuristic extraction found %s ingredient(s) for %s", len(entries), meal_name)
        return coerce_ingredients(entries)

    @staticmethod
    def _from_ingredient_list(description: str) -> list[dict[str, str]]:
        section = _INGREDIENT_LIST_RE.search(description or "")
        if not section:
            return []
        entries: list[dict[str, str]] = []
        for raw in section.group(1).split(","):
            cleaned = re.sub(r"[\"'\[\]]", "", raw).strip()
            if not cleaned:
                continue
            match = _LIST_ENTRY_RE.match(cleaned)
            if match and match.group(3).strip():
                amount, unit, name = match.groups()
                entries.append(
                    {"name": name.strip(), "quantity": _join_quantity(amount, unit) or "1"}
                )
            else:
                entries.append({"name": cleaned, "quantity": "as needed"})
        return entries

    @staticmethod
    def _from_quantities(description: str) -> list[dict[str, str]]:
        entries: list[dict[str, str]] = []
        for amount, unit, raw_name in _QUANTITY_RE.findall(description or ""):
            name = _CONNECTOR_RE.sub("", raw_name.strip()).strip()
            if name:
                entries.append({"name": name, "quantity": _join_quantity(amount, unit)})
        return entries

    @staticmethod
    def _from_meal_name(meal_name: str) -> list[dict[str, str]]:
        entries: list[dict[str, str]] = []
        for part in _NAME_SPLIT_RE.split(meal_name or ""):
            part = part.strip()
            if len(part) > 2 and part.lower() not in _STOP_WORDS:
                entries.append({"name": part, "quantity": "as needed"})
        return entries


__all__ = ["HeuristicIngredientExtractor"]
