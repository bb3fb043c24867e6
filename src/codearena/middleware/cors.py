"""CORS for the CodeArena web client."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from codearena.config import Settings
from codearena.middleware.request_id import REQUEST_ID_HEADER

# The API is read-mostly; writes go through POST and PATCH only.
ALLOWED_METHODS = ["GET", "POST", "PATCH", "OPTIONS"]


def setup_cors(app: FastAPI, settings: Settings) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_origin_regex=settings.cors_origin_regex,
        allow_credentials=True,
        allow_methods=ALLOWED_METHODS,
        allow_headers=["Authorization", "Content-Type", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER],
    )
