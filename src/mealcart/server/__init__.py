"""ASGI application factory and dependencies for the Mealcart server."""

from mealcart.server.app import app, create_app

__all__ = ["app", "create_app"]
