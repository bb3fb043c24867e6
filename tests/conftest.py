"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from codearena.config import Settings
from codearena.database import close_db, get_engine, get_session_factory, init_db
from codearena.storage.base import Storage
from codearena.storage.database import DatabaseStorage
from codearena.storage.factory import close_storage, init_storage
from codearena.storage.memory import MemoryStorage


async def _open_sqlite_storage(tmp_path: Path) -> DatabaseStorage:
    """File-backed SQLite so concurrent sessions see each other's commits."""
    await init_db(f"sqlite+aiosqlite:///{tmp_path / 'codearena-test.db'}", create_schema=True)
    return DatabaseStorage(get_session_factory(), get_engine().dialect.name)


@pytest_asyncio.fixture(params=["memory", "database"])
async def storage(request: pytest.FixtureRequest, tmp_path: Path) -> AsyncGenerator[Storage, None]:
    """Every storage contract test runs against both backends."""
    if request.param == "memory":
        yield MemoryStorage()
        return

    backend = await _open_sqlite_storage(tmp_path)
    yield backend
    await close_db()


@pytest_asyncio.fixture
async def memory_storage() -> MemoryStorage:
    return MemoryStorage()


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """HTTP client over an app backed by in-memory storage.

    ASGITransport does not drive the lifespan, so storage is opened here.
    """
    from codearena.main import create_app

    await init_storage(Settings(storage_backend="memory", seed_sample_data=False))
    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    await close_storage()

