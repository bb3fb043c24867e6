"""Account registration, local login and Google account resolution."""

from __future__ import annotations

import random
import re
import secrets

import structlog

from codearena.storage.base import Storage
from codearena.storage.errors import DuplicateExternalKeyError, DuplicateUsernameError
from codearena.users.password import check_needs_rehash, hash_password, verify_password
from codearena.users.schemas import ROLE_USER, User, UserCreate

logger = structlog.get_logger()

USERNAME_SUFFIX_ATTEMPTS = 10
_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")


def legacy_google_username(google_id: str) -> str:
    """Username format Google accounts were stored under before google_id existed."""
    return f"google_{google_id}"


def sanitize_username(google_id: str, display_name: str | None = None, email: str | None = None) -> str:
    """Derive a base username from a Google profile.

    Every non-alphanumeric character becomes ``_`` and the result is
    lowercased. Falls back to the email local part, then to the tail of the
    Google id.
    """
    base = display_name or (email.split("@")[0] if email else f"User_{google_id[-6:]}")
    base = _NON_ALNUM.sub("_", base).lower()
    return base or f"user_{google_id[-6:]}"


async def register_user(storage: Storage, username: str, password: str, role: str | None = None) -> User:
    """Create a local account.

    Raises DuplicateUsernameError when the name is taken, including when a
    concurrent registration wins the race.
    """
    if await storage.get_user_by_username(username) is not None:
        raise DuplicateUsernameError(username)
    user = await storage.create_user(UserCreate(username=username, password=hash_password(password), role=role))
    logger.info("user_registered", user_id=user.id, username=user.username)
    return user


async def authenticate_user(storage: Storage, username: str, password: str) -> User | None:
    """Return the user when the credentials match, otherwise None."""
    user = await storage.get_user_by_username(username)
    if user is None or not verify_password(password, user.password):
        return None
    if check_needs_rehash(user.password):
        user = await storage.update_user(user.id, password=hash_password(password)) or user
    return user


async def _free_username(storage: Storage, base: str, google_id: str) -> str:
    candidate = base
    for _ in range(USERNAME_SUFFIX_ATTEMPTS):
        if await storage.get_user_by_username(candidate) is None:
            return candidate
        candidate = f"{base}_{random.randrange(10000)}"
    return legacy_google_username(google_id)


async def resolve_google_user(
    storage: Storage,
    google_id: str,
    display_name: str | None = None,
    email: str | None = None,
) -> User:
    """Find or create the user behind a Google identity.

    Lookup order: the linked google_id, then the legacy ``google_<id>``
    username, then a new account with a sanitized, unique username and a
    random password.
    """
    user = await storage.get_user_by_external_key(google_id)
    if user is not None:
        return user

    user = await storage.get_user_by_username(legacy_google_username(google_id))
    if user is not None:
        return user

    base = sanitize_username(google_id, display_name, email)
    password = hash_password(secrets.token_hex(32))
    for attempt in range(2):
        username = await _free_username(storage, base, google_id)
        try:
            user = await storage.create_user(
                UserCreate(username=username, password=password, role=ROLE_USER, google_id=google_id)
            )
            break
        except DuplicateExternalKeyError:
            # Two first logins for the same Google account raced; the other one won.
            user = await storage.get_user_by_external_key(google_id)
            if user is None:
                raise
            return user
        except DuplicateUsernameError:
            # Another signup took the name between the check and the insert.
            user = await storage.get_user_by_external_key(google_id)
            if user is not None:
                return user
            if attempt == 1:
                raise

    logger.info("google_user_created", user_id=user.id, username=user.username)
    return user
