"""Weekly meal plan input models."""

from __future__ import annotations

import logging
import math
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

DAY_KEYS: tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

# Snacks are handled separately and always come last.
MEAL_SLOTS: tuple[str, ...] = (
    "breakfast",
    "pre_workout",
    "lunch",
    "post_workout",
    "dinner",
    "evening",
)


def _optional_amount(value: Any) -> Optional[float]:
    """Nutrition figures are informational; anything that is not a plain amount is dropped."""

    if value is None or isinstance(value, bool):
        return None
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(amount) or amount < 0:
        return None
    return amount


class MealItem(BaseModel):
    """Single meal as produced by the plan generator."""

    name: Optional[str] = Field(default=None)
    description: Optional[str] = Field(default=None)
    calories: Optional[float] = Field(default=None)
    protein: Optional[float] = Field(default=None)
    carbs: Optional[float] = Field(default=None)
    fat: Optional[float] = Field(default=None)
    timing: Optional[str] = Field(default=None)

    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator("calories", "protein", "carbs", "fat", mode="before")
    @classmethod
    def _lenient_amount(cls, value):
        return _optional_amount(value)

    @field_validator("timing", mode="before")
    @classmethod
    def _lenient_timing(cls, value):
        return value if isinstance(value, str) else None

    @property
    def is_complete(self) -> bool:
        """True when the meal carries both a name and a description."""
        return bool((self.name or "").strip() and (self.description or "").strip())


def _meal_or_none(value: Any, where: str) -> Optional[MealItem]:
    if value is None or isinstance(value, MealItem):
        return value
    try:
        return MealItem.model_validate(value)
    except ValidationError as exc:
        logger.debug("Skipping malformed meal in %s: %s", where, exc.errors(include_url=False))
        return None


class DayMeals(BaseModel):
    """Meal slots planned for one day. Malformed slots are dropped, not rejected."""

    breakfast: Optional[MealItem] = Field(default=None)
    pre_workout: Optional[MealItem] = Field(default=None)
    lunch: Optional[MealItem] = Field(default=None)
    post_workout: Optional[MealItem] = Field(default=None)
    dinner: Optional[MealItem] = Field(default=None)
    evening: Optional[MealItem] = Field(default=None)
    snacks: list[Optional[MealItem]] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator(*MEAL_SLOTS, mode="before")
    @classmethod
    def _lenient_slot(cls, value, info):
        return _meal_or_none(value, info.field_name)

    @field_validator("snacks", mode="before")
    @classmethod
    def _lenient_snacks(cls, value):
        if not isinstance(value, (list, tuple)):
            if value is not None:
                logger.debug("Ignoring snacks that are not a list: %r", type(value).__name__)
            return []
        # Keep positions so snack labels and keys still follow the original index.
        return [_meal_or_none(snack, f"snack {index + 1}") for index, snack in enumerate(value)]

    def slot(self, slot_name: str) -> Optional[MealItem]:
        return getattr(self, slot_name, None)


class MealPlan(BaseModel):
    """Seven-day meal plan keyed by lowercase day name."""

    weekly_meals: dict[str, Optional[DayMeals]] = Field(alias="weeklyMeals")

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    @field_validator("weekly_meals", mode="before")
    @classmethod
    def _lenient_days(cls, value):
        if not isinstance(value, Mapping):
            return {}
        days: dict[str, Optional[DayMeals]] = {}
        for key, day in value.items():
            if not isinstance(key, str):
                continue
            if day is None or isinstance(day, DayMeals):
                days[key] = day
                continue
            try:
                days[key] = DayMeals.model_validate(day)
            except ValidationError as exc:
                logger.debug("Skipping malformed day %s: %s", key, exc.errors(include_url=False))
                days[key] = None
        return days

    def day(self, day_key: str) -> Optional[DayMeals]:
        return self.weekly_meals.get(day_key)


__all__ = ["DAY_KEYS", "MEAL_SLOTS", "MealItem", "DayMeals", "MealPlan"]
