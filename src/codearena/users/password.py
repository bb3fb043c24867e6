"""Argon2id hashing for account passwords.

Local registrations hash the password the user chose. Accounts created on a
first Google login get a random 64-hex-character password hashed the same
way, so every ``users.password`` value is an argon2id string and the
password login path never has to special-case Google users.
"""

from __future__ import annotations

import argon2

_hasher = argon2.PasswordHasher(
    time_cost=2,
    memory_cost=65536,  # 64 MB
    parallelism=1,
    hash_len=32,
    salt_len=16,
    type=argon2.Type.ID,
)


def hash_password(password: str) -> str:
    return _hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """False on a wrong password and on values that are not argon2 hashes.

    Seeded or legacy rows may hold such values; a login against them fails
    instead of raising.
    """
    try:
        return _hasher.verify(password_hash, password)
    except (argon2.exceptions.VerifyMismatchError, argon2.exceptions.InvalidHashError):
        return False


def check_needs_rehash(password_hash: str) -> bool:
    """True when ``authenticate_user`` should store a fresh hash after a good login."""
    return _hasher.check_needs_rehash(password_hash)
