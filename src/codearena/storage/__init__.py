"""Storage layer: one interface, an in-memory and a relational backend."""

from codearena.storage.base import Storage
from codearena.storage.database import DatabaseStorage
from codearena.storage.errors import (
    ConflictError,
    DuplicateExternalKeyError,
    DuplicateUsernameError,
    StorageError,
)
from codearena.storage.factory import close_storage, get_storage, init_storage
from codearena.storage.memory import MemoryStorage

__all__ = [
    "ConflictError",
    "DatabaseStorage",
    "DuplicateExternalKeyError",
    "DuplicateUsernameError",
    "MemoryStorage",
    "Storage",
    "StorageError",
    "close_storage",
    "get_storage",
    "init_storage",
]
