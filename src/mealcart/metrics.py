"""Prometheus metrics definitions for Mealcart."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "mealcart_http_requests_total",
    "Total number of HTTP requests processed by the Mealcart API",
    ["method", "path", "status"],
)

REQUEST_LATENCY = Histogram(
    "mealcart_http_request_duration_seconds",
    "Latency of HTTP requests processed by the Mealcart API",
    ["method", "path"],
)

EXTRACTIONS = Counter(
    "mealcart_extractions_total",
    "Number of meal ingredient extractions by outcome",
    ["status"],
)

EXTRACTION_LATENCY = Histogram(
    "mealcart_extraction_duration_seconds",
    "Latency of a single meal ingredient extraction",
)

SHOPPING_LISTS = Counter(
    "mealcart_shopping_lists_generated_total",
    "Number of shopping lists generated by result",
    ["result"],
)

__all__ = [
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "EXTRACTIONS",
    "EXTRACTION_LATENCY",
    "SHOPPING_LISTS",
]
