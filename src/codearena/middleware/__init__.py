"""Middleware registration."""

from fastapi import FastAPI

from codearena.config import Settings
from codearena.middleware.cors import setup_cors
from codearena.middleware.error_handler import setup_error_handlers
from codearena.middleware.logging import setup_logging
from codearena.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register all middleware in the correct order.

    Starlette runs middleware in reverse-add order, so CORS is added last to
    wrap every other response, including error responses.
    """
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
