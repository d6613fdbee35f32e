"""Shared helpers for Mealcart tests."""

from __future__ import annotations

import asyncio
from typing import Any, Mapping, Optional


class StubExtractor:
    """Extractor returning canned responses keyed by meal name.

    A response that is an exception instance is raised instead of returned; meals
    without a response get ``default``.
    """

    def __init__(
        self,
        responses: Optional[Mapping[str, Any]] = None,
        *,
        default: Any = None,
        delays: Optional[Mapping[str, float]] = None,
    ) -> None:
        self.responses = dict(responses or {})
        self.default = default
        self.delays = dict(delays or {})
        self.calls: list[tuple[str, str]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def extract(self, meal_name: str, meal_description: str) -> Any:
        self.calls.append((meal_name, meal_description))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            delay = self.delays.get(meal_name)
            if delay:
                await asyncio.sleep(delay)
            response = self.responses.get(meal_name, self.default)
            if isinstance(response, BaseException):
                raise response
            return response
        finally:
            self.in_flight -= 1


def meal(name: str, description: str = "A tasty meal", **extra: Any) -> dict[str, Any]:
    return {"name": name, "description": description, **extra}


def weekly_plan(**days: Any) -> dict[str, Any]:
    return {"weeklyMeals": days}
