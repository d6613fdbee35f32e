"""LLM-backed ingredient extraction."""

from __future__ import annotations

import asyncio
import json
import logging
import re
from typing import Any, List, Optional

import httpx

from mealcart.extractor.base import ExtractionError, coerce_ingredients
from mealcart.models.shopping import ExtractedIngredient, format_number

LLM_TIMEOUT = 30.0
_JSON_BLOCK_RE = re.compile(r"```(?:json)?\s*([\[{].*?[\]}])\s*```", re.DOTALL)

EXTRACTION_SYSTEM_PROMPT = (
    "You are a nutrition expert helping to build grocery lists from meal descriptions. "
    "Parse the meal and list every ingredient a shopper needs to buy. Extract the exact "
    "quantity and unit of each ingredient; when they are ambiguous make a reasonable "
    "estimate. Use plain, singular grocery names (\"chicken breast\", not \"grilled "
    "chicken breast strips\"). Do not list water. The schema:\n"
    "{\n"
    '  "ingredients": [\n'
    '    {"name": "ingredient name", "quantity": "amount with unit, e.g. 200g or 1 cup"}\n'
    "  ]\n"
    "}\n"
    "Return only JSON."
)

EXTRACTION_USER_PROMPT = (
    "Here is the meal name and description. Extract all ingredients with quantities and units.\n\n"
    "Meal: {meal_name}\n\n"
    "Description: {meal_description}"
)

logger = logging.getLogger(__name__)


class LLMIngredientExtractor:
    """Call an OpenAI/Ollama-compatible chat endpoint to extract meal ingredients."""

    def __init__(
        self,
        *,
        base_url: str,
        model: str,
        provider: str = "openai",
        api_key: Optional[str] = None,
        temperature: float = 0.0,
        max_tokens: int = 600,
        timeout: float = LLM_TIMEOUT,
        max_retries: int = 3,
        backoff_seconds: float = 1.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._provider = (provider or "openai").strip().lower()
        self._api_key = api_key
        self._temperature = max(0.0, float(temperature))
        self._max_tokens = max(1, int(max_tokens))
        self._timeout = timeout
        self._max_retries = max(0, int(max_retries))
        self._backoff_seconds = max(0.0, float(backoff_seconds))
        self._client = client

    async def extract(self, meal_name: str, meal_description: str) -> List[ExtractedIngredient]:
        """Extract ingredients, retrying with exponential backoff before giving up."""

        attempts = self._max_retries + 1
        last_error: Optional[Exception] = None
        for attempt in range(1, attempts + 1):
            logger.debug(
                "Extracting ingredients for meal=%s (attempt %s/%s)", meal_name, attempt, attempts
            )
            try:
                content = await self._execute_chat(meal_name, meal_description)
                return parse_ingredients_response(content)
            except (httpx.HTTPError, ExtractionError) as exc:
                logger.warning(
                    "Ingredient extraction attempt %s/%s failed for meal=%s: %s",
                    attempt,
                    attempts,
                    meal_name,
                    exc,
                )
                last_error = exc
                wait = self._backoff_seconds * (2 ** (attempt - 1))
                if attempt < attempts and wait:
                    await asyncio.sleep(wait)
        raise ExtractionError(
            f"All {attempts} extraction attempts failed for meal '{meal_name}'"
        ) from last_error

    def _build_messages(self, meal_name: str, meal_description: str) -> list[dict[str, str]]:
        description = meal_description.strip()
        if len(description) > 4000:
            description = description[:4000] + "\n...[truncated]"
        user = EXTRACTION_USER_PROMPT.format(
            meal_name=meal_name.strip(),
            meal_description=description,
        )
        return [
            {"role": "system", "content": EXTRACTION_SYSTEM_PROMPT},
            {"role": "user", "content": user},
        ]

    async def _post(self, endpoint: str, payload: dict[str, Any]) -> dict[str, Any]:
        headers = {"Authorization": f"Bearer {self._api_key}"} if self._api_key else {}
        if self._client is not None:
            response = await self._client.post(endpoint, json=payload, headers=headers)
        else:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(endpoint, json=payload, headers=headers)
        response.raise_for_status()
        try:
            body = response.json()
        except ValueError as exc:
            raise ExtractionError("Extraction LLM returned a non-JSON body") from exc
        if not isinstance(body, dict):
            raise ExtractionError("Extraction LLM returned an unexpected body shape")
        return body

    async def _execute_chat(self, meal_name: str, meal_description: str) -> str:
        messages = self._build_messages(meal_name, meal_description)
        if self._provider == "ollama":
            endpoint = self._base_url
            if not endpoint.endswith("/api/chat"):
                endpoint = f"{endpoint}/api/chat"
            body = await self._post(
                endpoint,
                {
                    "model": self._model,
                    "messages": messages,
                    "stream": False,
                    "format": "json",
                    "options": {
                        "temperature": self._temperature,
                        "num_predict": self._max_tokens,
                    },
                },
            )
            content = _message_content(body.get("message"))
            if not content:
                raise ExtractionError("Ollama extraction response did not include content.")
            return content

        endpoint = self._base_url
        if not endpoint.endswith("/chat/completions"):
            endpoint = f"{endpoint}/chat/completions"
        body = await self._post(
            endpoint,
            {
                "model": self._model,
                "temperature": self._temperature,
                "max_tokens": self._max_tokens,
                "messages": messages,
                "response_format": {"type": "json_object"},
            },
        )
        choices = body.get("choices") or []
        if not isinstance(choices, list) or not choices:
            raise ExtractionError("Extraction LLM returned no choices.")
        if not isinstance(choices[0], dict):
            raise ExtractionError("Extraction LLM returned a malformed choice.")
        content = _message_content(choices[0].get("message"))
        if not content:
            raise ExtractionError("Extraction LLM returned an empty response.")
        return content


def _message_content(message: Any) -> str:
    if message is None:
        return ""
    if not isinstance(message, dict):
        raise ExtractionError("Extraction LLM returned a malformed message.")
    content = message.get("content")
    return content.strip() if isinstance(content, str) else ""


def parse_ingredients_response(content: str) -> List[ExtractedIngredient]:
    """Parse the model's JSON reply into ingredient rows."""

    json_blob = _extract_json_blob(content)
    try:
        parsed = json.loads(json_blob)
    except json.JSONDecodeError as exc:
        snippet = json_blob.strip().replace("\n", " ")[:200]
        raise ExtractionError(f"Extraction LLM returned invalid JSON: {exc}: payload={snippet}") from exc

    if isinstance(parsed, dict):
        entries = parsed.get("ingredients")
        if entries is None and isinstance(parsed.get("categories"), dict):
            entries = [
                entry
                for group in parsed["categories"].values()
                if isinstance(group, list)
                for entry in group
            ]
    else:
        entries = parsed

    if isinstance(entries, list):
        entries = [_normalize_entry(entry) for entry in entries]
    return coerce_ingredients(entries)


def _normalize_entry(entry: Any) -> Any:
    if not isinstance(entry, dict):
        return entry
    quantity = entry.get("quantity")
    if isinstance(quantity, (int, float)) and not isinstance(quantity, bool):
        quantity = format_number(quantity)
    unit = (entry.get("unit") or "").strip() if isinstance(entry.get("unit"), str) else ""
    if unit and isinstance(quantity, str) and quantity and not quantity.endswith(unit):
        quantity = f"{quantity} {unit}"
    return {"name": entry.get("name"), "quantity": quantity if quantity is not None else ""}


def _extract_json_blob(text: str) -> str:
    stripped = text.strip()
    if stripped[:1] in ("{", "["):
        return stripped

    match = _JSON_BLOCK_RE.search(text)
    if match:
        return match.group(1).strip()

    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end != -1 and end > start:
        return text[start : end + 1].strip()
    return text.strip()


__all__ = ["LLMIngredientExtractor", "parse_ingredients_response"]
