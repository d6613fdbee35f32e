"""Walk a meal plan and turn each meal's extracted ingredients into raw candidates."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from time import perf_counter
from typing import Callable, Dict, Iterator, List, Optional

from mealcart import metrics
from mealcart.extractor.base import IngredientExtractor, coerce_ingredients
from mealcart.models.plan import DAY_KEYS, MEAL_SLOTS, MealItem, MealPlan
from mealcart.models.shopping import ExtractedIngredient, RawCandidate
from mealcart.shopping.classifier import OTHER_CATEGORY, classify
from mealcart.shopping.costs import estimate

logger = logging.getLogger(__name__)

PLACEHOLDER_QUANTITY = "Check recipe"


def capitalize_first(value: str) -> str:
    return value[:1].upper() + value[1:]


def slot_label(slot: str) -> str:
    return " ".join(capitalize_first(word) for word in slot.split("_"))


@dataclass(frozen=True)
class MealOccurrence:
    """One concrete meal on one day, with the key used to memoize its extraction."""

    day: str
    slot: str
    meal: MealItem
    day_label: str
    identity_key: str

    @property
    def name(self) -> str:
        return self.meal.name or ""

    @property
    def description(self) -> str:
        return self.meal.description or ""


def iter_meal_occurrences(meal_plan: MealPlan) -> Iterator[MealOccurrence]:
    """Yield eligible meals in day order, then slot order, snacks last."""

    for day in DAY_KEYS:
        day_meals = meal_plan.day(day)
        if day_meals is None:
            continue
        day_title = capitalize_first(day)

        for slot in MEAL_SLOTS:
            meal = day_meals.slot(slot)
            if meal is None:
                continue
            if not meal.is_complete:
                logger.debug("Skipping %s %s: meal is missing a name or description", day, slot)
                continue
            yield MealOccurrence(
                day=day,
                slot=slot,
                meal=meal,
                day_label=f"{day_title} {slot_label(slot)}",
                identity_key=f"{meal.name}_{day}_{slot}",
            )

        for index, snack in enumerate(day_meals.snacks):
            if snack is None or not snack.is_complete:
                continue
            yield MealOccurrence(
                day=day,
                slot="snacks",
                meal=snack,
                day_label=f"{day_title} Snack {index + 1}",
                identity_key=f"{snack.name}_{index}",
            )


class MealIngredientCollector:
    """
    Extract ingredients for every meal in a plan and emit tagged raw candidates.

    Each distinct meal identity is extracted once per ``collect`` call; the memo is local
    to the call. Extraction failures are isolated per meal and become a single zero-cost
    placeholder candidate so the gap stays visible on the list. ``max_concurrency`` bounds
    in-flight extractor calls (1 keeps the calls strictly sequential); candidates are
    always emitted in plan order.
    """

    def __init__(
        self,
        extractor: IngredientExtractor,
        *,
        classifier: Callable[[str], str] = classify,
        cost_estimator: Callable[[str], float] = estimate,
        max_concurrency: int = 1,
        extraction_timeout: Optional[float] = None,
    ) -> None:
        self._extractor = extractor
        self._classifier = classifier
        self._cost_estimator = cost_estimator
        self._max_concurrency = max(1, int(max_concurrency))
        self._extraction_timeout = extraction_timeout

    async def collect(self, meal_plan: MealPlan) -> List[RawCandidate]:
        occurrences = list(iter_meal_occurrences(meal_plan))
        unique: Dict[str, MealOccurrence] = {}
        for occurrence in occurrences:
            unique.setdefault(occurrence.identity_key, occurrence)

        semaphore = asyncio.Semaphore(self._max_concurrency)
        outcomes = await asyncio.gather(
            *(self._extract_once(occurrence, semaphore) for occurrence in unique.values())
        )
        memo: Dict[str, Optional[List[ExtractedIngredient]]] = dict(zip(unique, outcomes))

        candidates: List[RawCandidate] = []
        for occurrence in occurrences:
            ingredients = memo[occurrence.identity_key]
            if ingredients is None:
                candidates.append(self._placeholder(occurrence))
                continue
            candidates.extend(self._to_candidate(ingredient, occurrence) for ingredient in ingredients)

        logger.info(
            "Collected %s candidate(s) from %s meal(s) (%s extraction call(s))",
            len(candidates),
            len(occurrences),
            len(unique),
        )
        return candidates

    async def _extract_once(
        self, occurrence: MealOccurrence, semaphore: asyncio.Semaphore
    ) -> Optional[List[ExtractedIngredient]]:
        async with semaphore:
            start = perf_counter()
            try:
                call = self._extractor.extract(occurrence.name, occurrence.description)
                if self._extraction_timeout is not None:
                    raw = await asyncio.wait_for(call, timeout=self._extraction_timeout)
                else:
                    raw = await call
                ingredients = coerce_ingredients(raw)
            except Exception as exc:
                logger.warning(
                    "Ingredient extraction failed for meal=%s label=%s: %r",
                    occurrence.name,
                    occurrence.day_label,
                    exc,
                )
                metrics.EXTRACTIONS.labels(status="failed").inc()
                return None
            finally:
                metrics.EXTRACTION_LATENCY.observe(perf_counter() - start)

        metrics.EXTRACTIONS.labels(status="succeeded").inc()
        logger.debug(
            "Extracted %s ingredient(s) from %s: %s",
            len(ingredients),
            occurrence.name,
            ", ".join(ingredient.name for ingredient in ingredients[:3]),
        )
        return ingredients

    def _to_candidate(
        self, ingredient: ExtractedIngredient, occurrence: MealOccurrence
    ) -> RawCandidate:
        return RawCandidate(
            name=capitalize_first(ingredient.name),
            quantity_text=ingredient.quantity,
            day_label=occurrence.day_label,
            estimated_cost=self._cost_estimator(ingredient.name),
            category=self._classifier(ingredient.name),
        )

    @staticmethod
    def _placeholder(occurrence: MealOccurrence) -> RawCandidate:
        return RawCandidate(
            name=f"Ingredients for {occurrence.name}",
            quantity_text=PLACEHOLDER_QUANTITY,
            day_label=occurrence.day_label,
            estimated_cost=0.0,
            category=OTHER_CATEGORY,
            is_placeholder=True,
        )


__all__ = [
    "MealIngredientCollector",
    "MealOccurrence",
    "PLACEHOLDER_QUANTITY",
    "iter_meal_occurrences",
]
