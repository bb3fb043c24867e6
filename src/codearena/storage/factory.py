"""Startup backend selection.

``storage_backend`` is one of ``memory``, ``database`` or ``auto``. Under
``auto`` a configured database URL is tried first; if the engine cannot be
initialised or pinged the process falls back to memory once, at startup,
and stays there.
"""

from __future__ import annotations

import structlog

from codearena.config import Settings
from codearena.database import close_db, get_engine, get_session_factory, init_db
from codearena.storage.base import Storage
from codearena.storage.database import DatabaseStorage
from codearena.storage.memory import MemoryStorage

logger = structlog.get_logger()

BACKENDS = ("auto", "memory", "database")

_storage: Storage | None = None


async def _open_database(settings: Settings) -> DatabaseStorage:
    if not settings.database_url:
        msg = "storage_backend=database requires CODEARENA_DATABASE_URL"
        raise RuntimeError(msg)
    await init_db(
        settings.database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        create_schema=settings.create_schema,
    )
    storage = DatabaseStorage(
        get_session_factory(),
        get_engine().dialect.name,
        admin_username=settings.admin_username,
    )
    await storage.ping()
    return storage


async def init_storage(settings: Settings) -> Storage:
    """Create the process-wide storage backend."""
    global _storage  # noqa: PLW0603
    backend = settings.storage_backend.lower()
    if backend not in BACKENDS:
        msg = f"Unknown storage backend: {settings.storage_backend}"
        raise ValueError(msg)

    if backend == "memory" or (backend == "auto" and not settings.database_url):
        _storage = MemoryStorage(admin_username=settings.admin_username)
    elif backend == "database":
        _storage = await _open_database(settings)
    else:
        try:
            _storage = await _open_database(settings)
        except Exception as exc:  # noqa: BLE001
            logger.warning("storage_fallback_to_memory", error=str(exc), error_type=type(exc).__name__)
            await close_db()
            _storage = MemoryStorage(admin_username=settings.admin_username)

    logger.info("storage_backend_selected", backend=_storage.backend_name, requested=backend)
    return _storage


def get_storage() -> Storage:
    """Get the storage backend chosen at startup."""
    if _storage is None:
        msg = "Storage not initialized. Call init_storage() first."
        raise RuntimeError(msg)
    return _storage


async def close_storage() -> None:
    """Release the storage backend and its engine, if any."""
    global _storage  # noqa: PLW0603
    if _storage is not None:
        await _storage.close()
        if isinstance(_storage, DatabaseStorage):
            await close_db()
        _storage = None
