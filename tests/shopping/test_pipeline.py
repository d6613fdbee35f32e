"""End-to-end tests for shopping list generation."""

from __future__ import annotations

import asyncio

import pytest

from mealcart.extractor import ExtractionError
from mealcart.models.plan import MealPlan
from mealcart.shopping.collector import MealIngredientCollector
from mealcart.shopping.pipeline import coerce_meal_plan, generate_shopping_list
from tests.utils import StubExtractor, meal, weekly_plan


def _generate(plan, budget=80.0, extractor=None, **kwargs):
    collector = MealIngredientCollector(extractor or StubExtractor())
    return asyncio.run(generate_shopping_list(plan, budget, collector=collector, **kwargs))


def test_generates_budgeted_list(sample_meal_plan, sample_ingredients):
    result = _generate(sample_meal_plan, 50.0, StubExtractor(sample_ingredients))

    assert [item.name for item in result.items] == [
        "Rolled oats",
        "Milk",
        "Chicken breast",
        "Lettuce",
    ]
    monday = result.aggregate.by_day["monday"]
    assert len(monday.items) == 4
    assert monday.total_cost == pytest.approx(12.0)
    assert result.aggregate.total_cost == pytest.approx(12.0)
    assert result.budget.usage_percent == 24
    assert result.budget.label == "within_budget"
    assert result.budget.remaining == pytest.approx(38.0)
    assert [entry.category for entry in result.categories] == ["grains", "dairy", "meat", "produce"]
    assert all(entry.percent == 25 for entry in result.categories)
    assert result.placeholders == []


def test_meal_repeated_across_days_merges(sample_ingredients):
    plan = weekly_plan(
        monday={"breakfast": meal("Oats Bowl")},
        tuesday={"breakfast": meal("Oats Bowl")},
    )
    extractor = StubExtractor(sample_ingredients)

    result = _generate(plan, extractor=extractor)

    assert len(extractor.calls) == 2
    oats = result.items[0]
    assert oats.name == "Rolled oats"
    assert oats.quantity == "160"
    assert oats.meal_associations == ["Monday Breakfast", "Tuesday Breakfast"]
    assert [item.name for item in result.aggregate.by_day["monday"].items] == ["Milk", "Rolled oats"]
    assert result.aggregate.by_day["tuesday"].items == []


def test_failed_meal_degrades_to_placeholder(sample_meal_plan, sample_ingredients):
    responses = dict(sample_ingredients)
    responses["Oats Bowl"] = ExtractionError("timeout")

    result = _generate(sample_meal_plan, extractor=StubExtractor(responses))

    assert [item.name for item in result.placeholders] == ["Ingredients for Oats Bowl"]
    assert result.placeholders[0].estimated_cost == 0.0
    assert result.aggregate.total_cost == pytest.approx(6.0)


def test_fill_missing_costs_prices_placeholders(sample_meal_plan, sample_ingredients):
    responses = dict(sample_ingredients)
    responses["Oats Bowl"] = ExtractionError("timeout")

    result = _generate(
        sample_meal_plan, extractor=StubExtractor(responses), fill_missing_costs=True
    )

    assert result.placeholders[0].estimated_cost == pytest.approx(2.5)
    assert result.aggregate.total_cost == pytest.approx(8.5)


@pytest.mark.parametrize(
    "plan",
    [
        None,
        {},
        {"weeklyMeals": None},
        {"weeklyMeals": []},
        {"weeklyMeals": "x"},
        {"plan": {"weeklyMeals": {"monday": {"breakfast": meal("Oats Bowl")}}}},
        "not a plan",
    ],
)
def test_plan_without_weekly_meals_yields_empty_list(plan):
    extractor = StubExtractor()

    result = _generate(plan, extractor=extractor)

    assert result.items == []
    assert result.aggregate.total_cost == 0
    assert result.budget.usage_percent == 0
    assert result.budget.label == "within_budget"
    assert result.categories == []
    assert extractor.calls == []


def test_accepts_meal_plan_models_and_snake_case_keys(sample_meal_plan, sample_ingredients):
    model = MealPlan.model_validate(sample_meal_plan)
    snake = {"weekly_meals": sample_meal_plan["weeklyMeals"]}

    assert coerce_meal_plan(model) is model
    assert coerce_meal_plan(snake) == model

    result = _generate(model, extractor=StubExtractor(sample_ingredients))
    assert len(result.items) == 4


@pytest.mark.parametrize("budget", [0, -10])
def test_invalid_budget_raises_before_extraction(sample_meal_plan, budget):
    extractor = StubExtractor()

    with pytest.raises(ValueError):
        _generate(sample_meal_plan, budget, extractor=extractor)
    assert extractor.calls == []


def test_total_cost_matches_sum_of_items(sample_ingredients):
    plan = weekly_plan(
        monday={"breakfast": meal("Oats Bowl"), "lunch": meal("Chicken Salad")},
        thursday={"dinner": meal("Chicken Salad")},
        saturday={"snacks": [meal("Oats Bowl")]},
    )

    result = _generate(plan, 20.0, extractor=StubExtractor(sample_ingredients))

    assert result.aggregate.total_cost == pytest.approx(
        sum(item.estimated_cost for item in result.items)
    )
    placed = sum(len(group.items) for group in result.aggregate.by_day.values())
    assert placed == len(result.items)


def test_category_breakdown_respects_top_n(sample_meal_plan, sample_ingredients):
    result = _generate(sample_meal_plan, extractor=StubExtractor(sample_ingredients), top_n=2)

    assert len(result.categories) == 2


def test_result_serializes_with_camel_case(sample_meal_plan, sample_ingredients):
    result = _generate(sample_meal_plan, extractor=StubExtractor(sample_ingredients))

    payload = result.model_dump(mode="json", by_alias=True)

    assert payload["items"][0]["estimatedCost"] == 3.0
    assert payload["items"][0]["isPlaceholder"] is False
    assert payload["budget"]["usagePercent"] == 15
    assert payload["budget"]["dayPercents"] == {"monday": 15}
    assert payload["categories"][0]["totalCost"] == 3.0
    assert payload["aggregate"]["byDay"]["shared"]["items"] == []


def test_one_failed_meal_leaves_other_meals_intact():
    plan = weekly_plan(monday={"breakfast": meal("Scramble"), "dinner": meal("Curry")})
    extractor = StubExtractor(
        {
            "Scramble": [{"name": "egg", "quantity": "2"}],
            "Curry": ConnectionError("connection reset"),
        }
    )

    result = _generate(plan, extractor=extractor)

    assert [(item.name, item.is_placeholder) for item in result.items] == [
        ("Egg", False),
        ("Ingredients for Curry", True),
    ]
    assert result.items[1].estimated_cost == 0
    assert result.items[0].category == "other"


def test_two_meal_monday_scenario():
    plan = weekly_plan(
        monday={
            "breakfast": meal("Oats Bowl", "Warm oats"),
            "lunch": meal("Chicken Salad", "Chicken over greens"),
        }
    )
    extractor = StubExtractor(
        {
            "Oats Bowl": [{"name": "oats", "quantity": "1 cup"}],
            "Chicken Salad": [{"name": "chicken", "quantity": "200g"}],
        }
    )

    result = _generate(plan, extractor=extractor)

    assert [(item.name, item.meal_associations) for item in result.items] == [
        ("Oats", ["Monday Breakfast"]),
        ("Chicken", ["Monday Lunch"]),
    ]
    monday = result.aggregate.by_day["monday"]
    assert [item.name for item in monday.items] == ["Oats", "Chicken"]
    assert monday.total_cost == pytest.approx(sum(item.estimated_cost for item in result.items))


@pytest.mark.parametrize(
    "dinner",
    [
        meal("Curry", protein="30g"),
        meal("Curry", calories="450 kcal"),
        meal("Curry", carbs=None, fat=-5, timing=19),
    ],
)
def test_unparseable_nutrition_keeps_the_meal(sample_ingredients, dinner):
    responses = dict(sample_ingredients)
    responses["Curry"] = [{"name": "coconut milk", "quantity": "400ml"}]
    plan = weekly_plan(monday={"breakfast": meal("Oats Bowl"), "dinner": dinner})
    extractor = StubExtractor(responses)

    result = _generate(plan, extractor=extractor)

    assert [name for name, _ in extractor.calls] == ["Oats Bowl", "Curry"]
    assert "Coconut milk" in [item.name for item in result.items]
    parsed = coerce_meal_plan(plan).day("monday").dinner
    assert parsed.protein is None
    assert parsed.calories is None


@pytest.mark.parametrize(
    "dinner",
    [
        {"name": 42, "description": "x"},
        "Curry",
        ["Curry"],
    ],
)
def test_malformed_slot_is_skipped(sample_ingredients, dinner):
    plan = weekly_plan(monday={"breakfast": meal("Oats Bowl"), "dinner": dinner})
    extractor = StubExtractor(sample_ingredients)

    result = _generate(plan, extractor=extractor)

    assert [name for name, _ in extractor.calls] == ["Oats Bowl"]
    assert [item.name for item in result.items] == ["Rolled oats", "Milk"]
    assert coerce_meal_plan(plan).day("monday").dinner is None


def test_malformed_days_and_snacks_are_skipped(sample_ingredients):
    plan = weekly_plan(
        monday={"breakfast": meal("Oats Bowl"), "snacks": "many"},
        tuesday="rest day",
        wednesday={"snacks": ["crisps", meal("Chicken Salad")]},
    )
    extractor = StubExtractor(sample_ingredients)

    result = _generate(plan, extractor=extractor)

    assert [name for name, _ in extractor.calls] == ["Oats Bowl", "Chicken Salad"]
    assert result.items[-1].meal_associations == ["Wednesday Snack 2"]
    parsed = coerce_meal_plan(plan)
    assert parsed.day("monday").snacks == []
    assert parsed.day("tuesday") is None
