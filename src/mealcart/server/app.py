"""ASGI application for Mealcart."""
# mypy: ignore-errors

from __future__ import annotations

import logging
from time import perf_counter
from typing import Any, Optional
from uuid import uuid4

from fastapi import Body, Depends, FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import BaseModel, ConfigDict, Field

from mealcart import __version__, metrics
from mealcart.config import Settings, get_settings
from mealcart.extractor import IngredientExtractor
from mealcart.logging_utils import configure_logging as configure_app_logging
from mealcart.models.shopping import ExtractedIngredient, ShoppingListResult
from mealcart.server import deps

logger = logging.getLogger(__name__)


class GenerateShoppingListRequest(BaseModel):
    meal_plan: dict[str, Any] = Field(alias="mealPlan")
    weekly_budget: Optional[float] = Field(default=None, gt=0, alias="weeklyBudget")
    fill_missing_costs: bool = Field(default=False, alias="fillMissingCosts")

    model_config = ConfigDict(populate_by_name=True)


class ExtractIngredientsRequest(BaseModel):
    meal_name: str = Field(default="", alias="mealName")
    meal_description: str = Field(default="", alias="mealDescription")

    model_config = ConfigDict(populate_by_name=True)


class ExtractIngredientsResponse(BaseModel):
    success: bool = True
    ingredients: list[ExtractedIngredient] = Field(default_factory=list)


def _json_safe(value: Any) -> Any:
    """Convert non-serializable values into JSON-safe representations."""

    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, (list, tuple)):
        return [_json_safe(entry) for entry in value]
    if isinstance(value, dict):
        return {key: _json_safe(sub_value) for key, sub_value in value.items()}
    return repr(value)


def _configure_logging(settings: Settings) -> None:
    secrets = [settings.api_token or "", settings.extractor_api_key or ""]
    configure_app_logging(settings.log_level, settings.log_format, secrets)


def create_app() -> FastAPI:
    """Create and configure a FastAPI application instance."""

    settings = get_settings()
    _configure_logging(settings)

    application = FastAPI(title="Mealcart Shopping Lists", version=__version__)
    logger.debug("Application created with log level %s", settings.log_level)

    if settings.log_requests:
        access_logger = logging.getLogger("mealcart.access")

        @application.middleware("http")
        async def log_request_response(request: Request, call_next):
            """Log request/response details without leaking sensitive data."""

            request_id = request.headers.get("X-Request-ID") or uuid4().hex
            request.state.request_id = request_id
            start = perf_counter()
            path = request.url.path
            method = request.method
            try:
                response: Response = await call_next(request)
            except Exception:
                duration_ms = (perf_counter() - start) * 1000
                access_logger.exception(
                    "HTTP %s %s status=500 duration_ms=%.2f",
                    method,
                    path,
                    duration_ms,
                    extra={"request_id": request_id},
                )
                metrics.REQUEST_COUNT.labels(method=method, path=path, status="500").inc()
                metrics.REQUEST_LATENCY.labels(method=method, path=path).observe(
                    duration_ms / 1000.0
                )
                raise

            duration_ms = (perf_counter() - start) * 1000
            response.headers.setdefault("X-Request-ID", request_id)
            access_logger.info(
                "HTTP %s %s status=%s duration_ms=%.2f",
                method,
                path,
                response.status_code,
                duration_ms,
                extra={"request_id": request_id},
            )
            metrics.REQUEST_COUNT.labels(
                method=method,
                path=path,
                status=str(response.status_code),
            ).inc()
            metrics.REQUEST_LATENCY.labels(method=method, path=path).observe(
                duration_ms / 1000.0
            )
            return response

    @application.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        body_preview: str | None = None
        raw_body = await request.body()
        if raw_body:
            decoded = raw_body.decode("utf-8", errors="replace")
            if len(decoded) > 2048:
                decoded = decoded[:2048] + "...(truncated)"
            body_preview = decoded

        log_kwargs: dict[str, Any] = {}
        request_id = getattr(request.state, "request_id", None)
        if request_id:
            log_kwargs["extra"] = {"request_id": request_id}

        logger.warning(
            "Validation error on %s %s: %s | body=%s",
            request.method,
            request.url.path,
            exc.errors(),
            body_preview,
            **log_kwargs,
        )
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": [_json_safe(error) for error in exc.errors()]},
        )

    @application.get("/healthz", summary="Liveness probe")
    def healthz() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    @application.get("/metrics", include_in_schema=False)
    def metrics_endpoint() -> Response:
        payload = generate_latest()
        return Response(content=payload, media_type=CONTENT_TYPE_LATEST)

    @application.post(
        "/shopping-list/generate",
        response_model=ShoppingListResult,
        summary="Generate a budgeted shopping list from a weekly meal plan",
    )
    async def generate_shopping_list_endpoint(
        payload: GenerateShoppingListRequest = Body(...),
        generator: deps.ShoppingListGenerator = Depends(deps.get_shopping_list_generator),
        settings: Settings = Depends(get_settings),
        auth: None = Depends(deps.require_api_token),
    ) -> ShoppingListResult:
        weekly_budget = payload.weekly_budget or settings.default_weekly_budget
        return await generator(payload.meal_plan, weekly_budget, payload.fill_missing_costs)

    @application.post(
        "/ingredients/extract",
        response_model=ExtractIngredientsResponse,
        summary="Extract ingredients from a single meal description",
    )
    async def extract_ingredients_endpoint(
        payload: ExtractIngredientsRequest = Body(...),
        extractor: IngredientExtractor = Depends(deps.get_ingredient_extractor),
        auth: None = Depends(deps.require_api_token),
    ):
        if not payload.meal_name.strip() or not payload.meal_description.strip():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Meal name and description are required",
            )
        try:
            ingredients = await extractor.extract(payload.meal_name, payload.meal_description)
        except Exception as exc:
            logger.exception("Error extracting ingredients for meal=%s", payload.meal_name)
            return JSONResponse(
                status_code=status.HTTP_502_BAD_GATEWAY,
                content={
                    "success": False,
                    "message": "Failed to extract ingredients",
                    "error": str(exc) or exc.__class__.__name__,
                },
            )
        return ExtractIngredientsResponse(ingredients=list(ingredients))

    return application


app = create_app()

__all__ = ["app", "create_app"]
