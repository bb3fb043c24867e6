"""Storage failure taxonomy.

A missing record is not an error: lookups and updates return ``None``.
Conflicts are raised so the boundary can answer "already exists".
Backend failures (driver/SQLAlchemy exceptions) propagate untouched.
"""

from __future__ import annotations


class StorageError(Exception):
    """Base class for storage-level failures."""


class ConflictError(StorageError):
    """A write would violate a uniqueness rule."""


class DuplicateUsernameError(ConflictError):
    def __init__(self, username: str) -> None:
        super().__init__(f"Username already exists: {username}")
        self.username = username


class DuplicateExternalKeyError(ConflictError):
    def __init__(self, external_key: str) -> None:
        super().__init__("External identity is already linked to another user")
        self.external_key = external_key
