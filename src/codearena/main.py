"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from codearena.config import get_settings
from codearena.health.router import router as health_router
from codearena.middleware import setup_middleware
from codearena.seed import bootstrap
from codearena.storage.factory import close_storage, init_storage


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    storage = await init_storage(settings)
    await bootstrap(storage, settings)

    yield

    await close_storage()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="CodeArena API",
        description="Contests, courses and coding challenges for competitive programmers",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])

    return app


app = create_app()
