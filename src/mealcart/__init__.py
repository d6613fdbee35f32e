"""
Mealcart shopping list engine.

The package turns a weekly meal plan into a merged, categorized and budgeted shopping
list. It exposes the generation pipeline, ingredient extractors, and an HTTP API.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
