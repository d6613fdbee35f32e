"""Tests for day grouping, budget status, and category breakdowns."""

from __future__ import annotations

import math

import pytest

from mealcart.models.shopping import BUCKET_ORDER, ShoppingItem
from mealcart.shopping.aggregator import (
    aggregate,
    assign_bucket,
    budget_status,
    category_breakdown,
    round_half_up,
    sort_items,
    validate_budget,
)


def _item(name, cost, labels=("Monday Breakfast",), category="other"):
    return ShoppingItem(
        name=name,
        quantity="1",
        estimated_cost=cost,
        category=category,
        meal_associations=list(labels),
    )


@pytest.mark.parametrize(
    "labels,expected",
    [
        (["Tuesday Lunch", "Thursday Dinner"], "tuesday"),
        (["Thursday Dinner", "Tuesday Lunch"], "thursday"),
        (["Sunday Snack 2"], "sunday"),
        (["Shared Prep"], "shared"),
        ([], "shared"),
    ],
)
def test_assign_bucket_uses_first_named_day(labels, expected):
    assert assign_bucket(_item("Rice", 1.0, labels)) == expected


def test_aggregate_places_each_item_in_exactly_one_bucket():
    items = [
        _item("Oats", 3.0, ["Monday Breakfast"]),
        _item("Rice", 3.0, ["Tuesday Lunch", "Thursday Dinner"]),
        _item("Salt", 3.0, ["Shared Prep"]),
        _item("Beef", 7.0, ["Sunday Dinner"]),
    ]

    result = aggregate(items, 80)

    assert list(result.by_day) == list(BUCKET_ORDER)
    placed = [item.name for group in result.by_day.values() for item in group.items]
    assert sorted(placed) == sorted(item.name for item in items)
    assert [item.name for item in result.by_day["tuesday"].items] == ["Rice"]
    assert result.by_day["thursday"].items == []
    assert result.by_day["shared"].day_name == "Shared Items"
    assert result.by_day["general"].items == []
    assert result.total_cost == pytest.approx(16.0)
    assert result.by_day["sunday"].total_cost == pytest.approx(7.0)


def test_daily_groups_skip_empty_buckets():
    result = aggregate(
        [_item("Salt", 1.0, ["Shared Prep"]), _item("Oats", 2.0, ["Friday Breakfast"])], 50
    )

    assert [group.day_name for group in result.daily_groups()] == ["Friday", "Shared Items"]


def test_aggregate_serializes_with_camel_case_totals():
    payload = aggregate([_item("Oats", 2.5)], 40).model_dump(by_alias=True)

    assert payload["totalCost"] == 2.5
    assert payload["weeklyBudget"] == 40.0
    assert payload["byDay"]["monday"]["dayName"] == "Monday"
    assert payload["byDay"]["monday"]["totalCost"] == 2.5
    assert payload["byDay"]["monday"]["items"][0]["mealAssociations"] == ["Monday Breakfast"]


@pytest.mark.parametrize(
    "total,over,usage,label",
    [
        (45.0, False, 45, "within_budget"),
        (90.0, False, 90, "within_budget"),
        (91.0, False, 91, "near_limit"),
        (100.0, False, 100, "near_limit"),
        (102.0, False, 100, "near_limit"),
        (102.01, True, 100, "over_budget"),
        (250.0, True, 100, "over_budget"),
    ],
)
def test_budget_status_thresholds(total, over, usage, label):
    status = budget_status(aggregate([_item("Beef", total)], 100))

    assert status.is_over_budget is over
    assert status.usage_percent == usage
    assert status.label == label
    assert status.remaining == pytest.approx(100 - total)


def test_budget_status_for_empty_list():
    status = budget_status(aggregate([], 80))

    assert status.total_cost == 0
    assert status.usage_percent == 0
    assert status.remaining == 80
    assert status.label == "within_budget"
    assert status.day_percents == {}


def test_budget_status_reports_non_empty_day_percents():
    items = [
        _item("Oats", 20.0, ["Monday Breakfast"]),
        _item("Rice", 10.0, ["Wednesday Lunch"]),
        _item("Beef", 200.0, ["Friday Dinner"]),
    ]

    status = budget_status(aggregate(items, 80))

    assert status.day_percents == {"monday": 25, "wednesday": 13, "friday": 100}


def test_category_breakdown_orders_by_spend():
    items = [
        _item("Beef", 7.0, category="meat"),
        _item("Milk", 3.0, category="dairy"),
        _item("Kale", 3.0, category="produce"),
        _item("Oats", 1.0, category="grains"),
        _item("Extra milk", 0.0, category="dairy"),
    ]

    breakdown = category_breakdown(items)

    assert [entry.category for entry in breakdown] == ["meat", "dairy", "produce", "grains"]
    assert [entry.percent for entry in breakdown] == [50, 21, 21, 7]
    assert breakdown[0].total_cost == pytest.approx(7.0)


def test_category_breakdown_top_n():
    items = [_item(str(index), float(index), category=f"c{index}") for index in range(1, 8)]

    breakdown = category_breakdown(items, top_n=3)

    assert [entry.category for entry in breakdown] == ["c7", "c6", "c5"]
    assert category_breakdown(items, top_n=0) == []


def test_category_breakdown_with_zero_spend():
    breakdown = category_breakdown([_item("Ingredients for Stew", 0.0)])

    assert len(breakdown) == 1
    assert breakdown[0].percent == 0
    assert category_breakdown([]) == []


@pytest.mark.parametrize("value,expected", [(80, 80.0), (12.5, 12.5)])
def test_validate_budget_accepts_positive_numbers(value, expected):
    assert validate_budget(value) == expected


@pytest.mark.parametrize("value", [0, -5, -0.01, math.nan, math.inf])
def test_validate_budget_rejects_non_positive_values(value):
    with pytest.raises(ValueError):
        validate_budget(value)


@pytest.mark.parametrize("value", ["80", None, True, [80]])
def test_validate_budget_rejects_non_numbers(value):
    with pytest.raises(TypeError):
        validate_budget(value)


def test_aggregate_rejects_invalid_budget():
    with pytest.raises(ValueError):
        aggregate([_item("Oats", 1.0)], 0)


def test_round_half_up():
    assert round_half_up(12.5) == 13
    assert round_half_up(13.5) == 14
    assert round_half_up(12.49) == 12


def test_sort_items_by_category_then_name():
    items = [
        _item("rice", 1.0, category="grains"),
        _item("Apple", 1.0, category="produce"),
        _item("Barley", 1.0, category="grains"),
    ]

    assert [item.name for item in sort_items(items)] == ["Barley", "rice", "Apple"]


def test_aggregate_sorts_each_bucket_by_category_then_name():
    items = [
        _item("rice", 1.0, ["Monday Dinner"], category="grains"),
        _item("Spinach", 1.0, ["Monday Lunch"], category="produce"),
        _item("Milk", 1.0, ["Monday Breakfast"], category="dairy"),
        _item("Barley", 1.0, ["Monday Dinner"], category="grains"),
        _item("Salt", 1.0, ["Shared Prep"], category="baking"),
    ]

    result = aggregate(items, 80)

    assert [item.name for item in result.by_day["monday"].items] == [
        "Milk",
        "Barley",
        "rice",
        "Spinach",
    ]
    assert [item.name for item in result.by_day["shared"].items] == ["Salt"]
