"""Shopping list models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from mealcart.models.plan import DAY_KEYS

SHARED_BUCKET = "shared"
GENERAL_BUCKET = "general"
BUCKET_ORDER: tuple[str, ...] = DAY_KEYS + (SHARED_BUCKET, GENERAL_BUCKET)
BUCKET_DISPLAY_NAMES: dict[str, str] = {
    **{day: day.capitalize() for day in DAY_KEYS},
    SHARED_BUCKET: "Shared Items",
    GENERAL_BUCKET: "General",
}


class ExtractedIngredient(BaseModel):
    """Ingredient returned by an extractor for a single meal."""

    name: str = Field(min_length=1)
    quantity: str = Field(default="")

    model_config = ConfigDict(frozen=True)

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("quantity", mode="before")
    @classmethod
    def _stringify_quantity(cls, value):
        if value is None:
            return ""
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return format_number(value)
        return value


class RawCandidate(BaseModel):
    """One extracted ingredient occurrence tagged with its day and meal slot."""

    name: str
    quantity_text: str = Field(default="")
    day_label: str
    estimated_cost: float = Field(default=0.0, ge=0)
    category: str = Field(default="other")
    is_placeholder: bool = Field(default=False)

    model_config = ConfigDict(frozen=True)


class ShoppingItem(BaseModel):
    """Merged shopping list line."""

    name: str
    quantity: str = Field(default="")
    estimated_cost: float = Field(default=0.0, ge=0, alias="estimatedCost")
    category: str = Field(default="other")
    meal_associations: list[str] = Field(default_factory=list, alias="mealAssociations")
    is_placeholder: bool = Field(default=False, alias="isPlaceholder")

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class DailyShoppingGroup(BaseModel):
    """Items bought for one day bucket."""

    day_name: str = Field(alias="dayName")
    items: list[ShoppingItem] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @computed_field(alias="totalCost")  # type: ignore[prop-decorator]
    @property
    def total_cost(self) -> float:
        return sum(item.estimated_cost for item in self.items)


class AggregateResult(BaseModel):
    """Day-grouped shopping list with cost roll-ups."""

    by_day: dict[str, DailyShoppingGroup] = Field(alias="byDay")
    weekly_budget: float = Field(gt=0, alias="weeklyBudget")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @computed_field(alias="totalCost")  # type: ignore[prop-decorator]
    @property
    def total_cost(self) -> float:
        return sum(group.total_cost for group in self.by_day.values())

    def daily_groups(self) -> list[DailyShoppingGroup]:
        """Non-empty groups in Monday..Sunday, Shared, General order."""
        return [
            self.by_day[key]
            for key in BUCKET_ORDER
            if key in self.by_day and self.by_day[key].items
        ]


class BudgetStatus(BaseModel):
    """Derived comparison of total cost against the weekly budget."""

    total_cost: float = Field(alias="totalCost")
    weekly_budget: float = Field(alias="weeklyBudget")
    is_over_budget: bool = Field(alias="isOverBudget")
    usage_percent: int = Field(ge=0, le=100, alias="usagePercent")
    remaining: float
    label: str
    day_percents: dict[str, int] = Field(default_factory=dict, alias="dayPercents")

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class CategorySpend(BaseModel):
    """Total spend for one purchasing category."""

    category: str
    total_cost: float = Field(alias="totalCost")
    percent: int = Field(ge=0)

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class ShoppingListResult(BaseModel):
    """Complete output of one shopping list generation run."""

    items: list[ShoppingItem] = Field(default_factory=list)
    aggregate: AggregateResult
    budget: BudgetStatus
    categories: list[CategorySpend] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @property
    def placeholders(self) -> list[ShoppingItem]:
        return [item for item in self.items if item.is_placeholder]


def format_number(value: float) -> str:
    """Render a quantity number, dropping the fractional part of integral floats."""

    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


__all__ = [
    "SHARED_BUCKET",
    "GENERAL_BUCKET",
    "BUCKET_ORDER",
    "BUCKET_DISPLAY_NAMES",
    "ExtractedIngredient",
    "RawCandidate",
    "ShoppingItem",
    "DailyShoppingGroup",
    "AggregateResult",
    "BudgetStatus",
    "CategorySpend",
    "ShoppingListResult",
    "format_number",
]
