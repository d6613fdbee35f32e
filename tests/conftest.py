"""Shared pytest fixtures for the Mealcart test suite."""

from __future__ import annotations

import os
from typing import Dict, Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from mealcart.config import get_settings
from mealcart.server.app import create_app


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Ensure each test starts from default settings, whatever the host environment holds."""

    for key in list(os.environ):
        if key.startswith("MEALCART_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def app() -> Generator[FastAPI, None, None]:
    """Create a new FastAPI app instance for each test and reset overrides."""

    application = create_app()
    yield application
    application.dependency_overrides.clear()


@pytest.fixture()
def client(app) -> TestClient:
    """Return a test client bound to the FastAPI app."""

    return TestClient(app)


@pytest.fixture()
def sample_meal_plan() -> Dict[str, object]:
    """A one-day plan with two complete meals."""

    return {
        "weeklyMeals": {
            "monday": {
                "breakfast": {
                    "name": "Oats Bowl",
                    "description": "Rolled oats cooked in milk",
                    "calories": 420,
                },
                "lunch": {
                    "name": "Chicken Salad",
                    "description": "Grilled chicken breast on lettuce",
                    "calories": 560,
                },
            }
        }
    }


@pytest.fixture()
def sample_ingredients() -> Dict[str, list]:
    """Canned extractor responses for the meals in ``sample_meal_plan``."""

    return {
        "Oats Bowl": [
            {"name": "rolled oats", "quantity": "80g"},
            {"name": "milk", "quantity": "200ml"},
        ],
        "Chicken Salad": [
            {"name": "chicken breast", "quantity": "150g"},
            {"name": "lettuce", "quantity": "1 head"},
        ],
    }
