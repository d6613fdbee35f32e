"""Command-line interface for Mealcart."""

from __future__ import annotations

import asyncio
import json
import os
import random
from typing import Optional

import typer
import uvicorn

from mealcart.config import get_settings
from mealcart.extractor import HeuristicIngredientExtractor, build_ingredient_extractor
from mealcart.logging_utils import configure_logging
from mealcart.models.shopping import ShoppingListResult
from mealcart.shopping.aggregator import sort_items, validate_budget
from mealcart.shopping.collector import MealIngredientCollector
from mealcart.shopping.costs import CostEstimator
from mealcart.shopping.pipeline import generate_shopping_list

app = typer.Typer(help="Mealcart shopping list commands.")


def _render_text(result: ShoppingListResult) -> str:
    lines: list[str] = []
    for group in result.aggregate.daily_groups():
        lines.append(f"{group.day_name} ({group.total_cost:.2f})")
        for item in sort_items(group.items):
            marker = " [check recipe]" if item.is_placeholder else ""
            lines.append(
                f"  - {item.name}: {item.quantity} [{item.category}] {item.estimated_cost:.2f}{marker}"
            )
    budget = result.budget
    lines.append(
        f"Total {budget.total_cost:.2f} / {budget.weekly_budget:.2f} "
        f"({budget.usage_percent}% used, {budget.label.replace('_', ' ')})"
    )
    for spend in result.categories:
        lines.append(f"  {spend.category}: {spend.total_cost:.2f} ({spend.percent}%)")
    return "\n".join(lines)


@app.command()
def generate(
    plan_path: str = typer.Argument(..., help="Path to a meal plan JSON file with weeklyMeals."),
    budget: Optional[float] = typer.Option(None, "--budget", help="Weekly budget."),
    output: str = typer.Option("json", "--format", help="Output format (json or text)."),
    pretty: bool = typer.Option(False, "--pretty", help="Pretty-print output JSON."),
    offline: bool = typer.Option(
        False, "--offline", help="Use the heuristic extractor instead of the LLM endpoint."
    ),
    concurrency: Optional[int] = typer.Option(
        None, "--concurrency", min=1, help="Override the number of concurrent extractions."
    ),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for cost jitter."),
) -> None:
    """
    Generate a shopping list for the meal plan stored in PLAN_PATH.
    """
    settings = get_settings()
    with open(plan_path, "r", encoding="utf-8") as fh:
        payload = json.load(fh)

    extractor = HeuristicIngredientExtractor() if offline else build_ingredient_extractor(settings)
    rng = random.Random(seed) if seed is not None else None
    collector = MealIngredientCollector(
        extractor,
        cost_estimator=CostEstimator(jitter=settings.cost_jitter, rng=rng),
        max_concurrency=concurrency or settings.collector_max_concurrency,
        extraction_timeout=settings.collector_extraction_timeout,
    )
    try:
        weekly_budget = validate_budget(
            budget if budget is not None else settings.default_weekly_budget
        )
    except (TypeError, ValueError) as exc:
        raise typer.BadParameter(str(exc), param_hint="--budget") from exc

    result = asyncio.run(
        generate_shopping_list(
            payload,
            weekly_budget,
            collector=collector,
            top_n=settings.category_top_n,
        )
    )

    if output == "text":
        typer.echo(_render_text(result))
        return

    as_dict = result.model_dump(mode="json", by_alias=True)
    if pretty:
        typer.echo(json.dumps(as_dict, indent=2))
    else:
        typer.echo(json.dumps(as_dict))


@app.command()
def serve(
    host: str = typer.Option(
        os.environ.get("MEALCART_SERVER_HOST", "127.0.0.1"), "--host", help="Bind address."
    ),
    port: int = typer.Option(
        int(os.environ.get("MEALCART_SERVER_PORT", "8000")), "--port", help="Bind port."
    ),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes."),
) -> None:
    """Run the HTTP API with uvicorn."""
    uvicorn.run("mealcart.server.app:app", host=host, port=port, reload=reload)


@app.callback()
def _configure(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override the log level."),
) -> None:
    settings = get_settings()
    secrets = [settings.api_token or "", settings.extractor_api_key or ""]
    configure_logging(log_level or settings.log_level, settings.log_format, secrets)


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for `python -m mealcart`."""
    app(prog_name="mealcart", args=argv)


if __name__ == "__main__":
    main()
