"""Ingredient extraction backends."""

from __future__ import annotations

import logging

from mealcart.config import Settings, get_settings

from .base import ExtractionError, IngredientExtractor, coerce_ingredients
from .heuristic import HeuristicIngredientExtractor
from .llm_client import LLMIngredientExtractor, parse_ingredients_response

logger = logging.getLogger(__name__)


def build_ingredient_extractor(settings: Settings | None = None) -> IngredientExtractor:
    """Create the LLM extractor when an endpoint is configured, else the heuristic one."""

    settings = settings or get_settings()
    if not settings.extractor_base_url:
        logger.debug("No extractor base URL configured; using heuristic extraction.")
        return HeuristicIngredientExtractor()

    return LLMIngredientExtractor(
        base_url=settings.extractor_base_url,
        model=settings.extractor_model,
        provider=settings.extractor_provider,
        api_key=settings.extractor_api_key,
        temperature=settings.extractor_temperature,
        max_tokens=settings.extractor_max_tokens,
        timeout=settings.extractor_timeout,
        max_retries=settings.extractor_max_retries,
        backoff_seconds=settings.extractor_backoff_seconds,
    )


__all__ = [
    "ExtractionError",
    "IngredientExtractor",
    "HeuristicIngredientExtractor",
    "LLMIngredientExtractor",
    "build_ingredient_extractor",
    "coerce_ingredients",
    "parse_ingredients_response",
]
