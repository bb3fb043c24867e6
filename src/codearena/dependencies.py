"""Shared FastAPI dependencies."""

from collections.abc import AsyncGenerator

from codearena.storage.base import Storage
from codearena.storage.factory import get_storage


async def get_storage_dep() -> AsyncGenerator[Storage, None]:
    """Yield the process-wide storage backend as a FastAPI dependency."""
    yield get_storage()
