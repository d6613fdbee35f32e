"""Application configuration helpers."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

ENV_FILE_CANDIDATES = (Path(".env"), Path(".env.local"))


class Settings(BaseModel):
    """Global application settings loaded from environment variables or .env files."""

    api_token: Optional[str] = Field(
        default=None,
        description="Bearer token required for authenticated endpoints.",
    )
    log_level: str = Field(default="INFO", description="Logging level (DEBUG/INFO/WARNING/ERROR)")
    log_format: str = Field(
        default="plain",
        description="Logging format (plain/json).",
    )
    log_requests: bool = Field(
        default=True,
        description="Emit request access logs when true.",
    )
    extractor_base_url: Optional[str] = Field(
        default=None,
        description="Ingredient extraction LLM base URL (OpenAI-compatible or Ollama).",
    )
    extractor_api_key: Optional[str] = Field(
        default=None,
        description="API key sent as a bearer token to the extraction LLM.",
    )
    extractor_model: str = Field(
        default="gpt-4o-mini",
        description="Model identifier passed to the extraction LLM endpoint.",
    )
    extractor_provider: str = Field(
        default="openai",
        description="Extraction LLM provider (openai or ollama).",
    )
    extractor_temperature: float = Field(
        default=0.0,
        description="Sampling temperature for ingredient extraction.",
    )
    extractor_max_tokens: int = Field(
        default=600,
        description="Max tokens for ingredient extraction responses.",
    )
    extractor_timeout: float = Field(
        default=30.0,
        description="HTTP timeout in seconds for a single extraction request.",
    )
    extractor_max_retries: int = Field(
        default=3,
        description="Retries after the first failed extraction attempt.",
    )
    extractor_backoff_seconds: float = Field(
        default=1.0,
        description="Initial backoff between extraction retries; doubles per attempt.",
    )
    collector_max_concurrency: int = Field(
        default=1,
        description="Maximum number of meals extracted at the same time (1 = sequential).",
    )
    collector_extraction_timeout: Optional[float] = Field(
        default=None,
        description="Per-meal extraction timeout enforced by the collector (seconds).",
    )
    cost_jitter: bool = Field(
        default=False,
        description="Randomize heuristic ingredient costs within their price band.",
    )
    default_weekly_budget: float = Field(
        default=80.0,
        gt=0,
        description="Weekly budget used when a request does not provide one.",
    )
    category_top_n: int = Field(
        default=5,
        description="Number of categories reported in the spend breakdown.",
    )

    model_config = ConfigDict(frozen=True)


def _coerce_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _parse_env_file(path: Path) -> dict[str, str]:
    payload: dict[str, str] = {}
    try:
        with path.open("r", encoding="utf-8") as handle:
            for raw_line in handle:
                line = raw_line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                key, raw_value = line.split("=", 1)
                payload[key.strip()] = raw_value.strip()
    except FileNotFoundError:
        return {}
    return payload


def _load_env_file_values() -> dict[str, str]:
    values: dict[str, str] = {}
    for candidate in ENV_FILE_CANDIDATES:
        values.update(_parse_env_file(candidate))
    return values


def _load_from_env() -> dict[str, object]:
    """Load optional overrides from env vars (with .env fallbacks)."""

    file_values = _load_env_file_values()

    def _env(key: str) -> Optional[str]:
        return os.environ.get(key) or file_values.get(key)

    payload: dict[str, object] = {}
    if (api_token := _env("MEALCART_API_TOKEN")):
        payload["api_token"] = api_token
    if (log_level := _env("MEALCART_LOG_LEVEL")):
        payload["log_level"] = log_level
    if (log_format := _env("MEALCART_LOG_FORMAT")):
        payload["log_format"] = log_format
    if (log_requests := _env("MEALCART_LOG_REQUESTS")):
        payload["log_requests"] = _coerce_bool(log_requests)
    if (base_url := _env("MEALCART_EXTRACTOR_BASE_URL")):
        payload["extractor_base_url"] = base_url
    if (api_key := _env("MEALCART_EXTRACTOR_API_KEY") or _env("OPENAI_API_KEY")):
        payload["extractor_api_key"] = api_key
    if (model := _env("MEALCART_EXTRACTOR_MODEL")):
        payload["extractor_model"] = model
    if (provider := _env("MEALCART_EXTRACTOR_PROVIDER")):
        payload["extractor_provider"] = provider
    if (temperature := _env("MEALCART_EXTRACTOR_TEMPERATURE")):
        try:
            payload["extractor_temperature"] = float(temperature)
        except ValueError:
            pass
    if (max_tokens := _env("MEALCART_EXTRACTOR_MAX_TOKENS")):
        try:
            payload["extractor_max_tokens"] = int(max_tokens)
        except ValueError:
            pass
    if (timeout := _env("MEALCART_EXTRACTOR_TIMEOUT")):
        try:
            payload["extractor_timeout"] = float(timeout)
        except ValueError:
            pass
    if (max_retries := _env("MEALCART_EXTRACTOR_MAX_RETRIES")):
        try:
            payload["extractor_max_retries"] = int(max_retries)
        except ValueError:
            pass
    if (backoff := _env("MEALCART_EXTRACTOR_BACKOFF_SECONDS")):
        try:
            payload["extractor_backoff_seconds"] = float(backoff)
        except ValueError:
            pass
    if (concurrency := _env("MEALCART_COLLECTOR_MAX_CONCURRENCY")):
        try:
            payload["collector_max_concurrency"] = int(concurrency)
        except ValueError:
            pass
    if (collector_timeout := _env("MEALCART_COLLECTOR_EXTRACTION_TIMEOUT")):
        try:
            payload["collector_extraction_timeout"] = float(collector_timeout)
        except ValueError:
            pass
    if (cost_jitter := _env("MEALCART_COST_JITTER")):
        payload["cost_jitter"] = _coerce_bool(cost_jitter)
    if (weekly_budget := _env("MEALCART_DEFAULT_WEEKLY_BUDGET")):
        try:
            payload["default_weekly_budget"] = float(weekly_budget)
        except ValueError:
            pass
    if (top_n := _env("MEALCART_CATEGORY_TOP_N")):
        try:
            payload["category_top_n"] = int(top_n)
        except ValueError:
            pass
    return payload


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings(**_load_from_env())
