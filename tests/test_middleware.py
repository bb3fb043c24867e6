"""Middleware tests: request ID, CORS, error handling."""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from codearena.config import Settings
from codearena.storage.errors import DuplicateUsernameError
from codearena.storage.factory import close_storage, init_storage


@pytest_asyncio.fixture
async def failing_client() -> AsyncGenerator[AsyncClient, None]:
    """Client over an app with routes that raise, for exercising the handlers."""
    from codearena.main import create_app

    await init_storage(Settings(storage_backend="memory", seed_sample_data=False))
    app: FastAPI = create_app()

    @app.get("/conflict")
    async def conflict() -> None:
        raise DuplicateUsernameError("alice")

    @app.get("/boom")
    async def boom() -> None:
        raise RuntimeError("database went away")

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    await close_storage()


@pytest.mark.asyncio
async def test_request_id_generated(client: AsyncClient) -> None:
    """Request ID is auto-generated when not provided."""
    response = await client.get("/health")
    assert "x-request-id" in response.headers
    assert len(response.headers["x-request-id"]) == 36  # UUID format


@pytest.mark.asyncio
async def test_request_id_preserved(client: AsyncClient) -> None:
    """Custom request ID is echoed back in response."""
    response = await client.get("/health", headers={"X-Request-Id": "test-abc-123"})
    assert response.headers["x-request-id"] == "test-abc-123"


@pytest.mark.asyncio
async def test_cors_preflight(client: AsyncClient) -> None:
    """CORS preflight returns access-control-allow-origin for configured origin."""
    response = await client.options(
        "/health",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "GET",
        },
    )
    assert "access-control-allow-origin" in response.headers


@pytest.mark.asyncio
async def test_404_returns_json(client: AsyncClient) -> None:
    """Unknown paths return 404 with JSON body."""
    response = await client.get("/nonexistent-path")
    assert response.status_code == 404
    assert response.json()["detail"] == "Not Found"


@pytest.mark.asyncio
async def test_conflict_returns_409(failing_client: AsyncClient) -> None:
    """A uniqueness conflict from storage maps to 409 with its message."""
    response = await failing_client.get("/conflict")
    assert response.status_code == 409
    assert response.json() == {"detail": "Username already exists: alice"}


@pytest.mark.asyncio
async def test_unhandled_error_returns_json_500(failing_client: AsyncClient) -> None:
    """Backend failures propagate to the catch-all and never leak details."""
    response = await failing_client.get("/boom")
    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}


@pytest.mark.asyncio
async def test_request_id_rejects_unsafe_value(client: AsyncClient) -> None:
    """A client id outside the allowed alphabet is replaced, not echoed."""
    response = await client.get("/health", headers={"X-Request-Id": "a b c"})
    assert response.headers["x-request-id"] != "a b c"
    assert len(response.headers["x-request-id"]) == 36
