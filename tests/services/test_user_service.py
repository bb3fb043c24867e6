"""Registration, login and Google account resolution."""

import asyncio

import pytest

from codearena.storage.base import Storage
from codearena.storage.errors import DuplicateUsernameError
from codearena.users.password import verify_password
from codearena.users.schemas import ROLE_USER, UserCreate
from codearena.users.service import authenticate_user, register_user, resolve_google_user

pytestmark = pytest.mark.asyncio


class TestRegistration:
    async def test_password_is_hashed(self, storage: Storage):
        user = await register_user(storage, "alice", "s3cret-pass")
        assert user.password != "s3cret-pass"
        assert verify_password("s3cret-pass", user.password) is True

    async def test_duplicate_username(self, storage: Storage):
        await register_user(storage, "alice", "s3cret-pass")
        with pytest.raises(DuplicateUsernameError):
            await register_user(storage, "alice", "another-pass")

    async def test_authenticate(self, storage: Storage):
        await register_user(storage, "alice", "s3cret-pass")
        assert (await authenticate_user(storage, "alice", "s3cret-pass")).username == "alice"
        assert await authenticate_user(storage, "alice", "wrong") is None
        assert await authenticate_user(storage, "nobody", "s3cret-pass") is None


class TestGoogleResolution:
    async def test_creates_user_once(self, storage: Storage):
        first = await resolve_google_user(storage, "g-100200300", "Ada Lovelace")
        assert first.username == "ada_lovelace"
        assert first.google_id == "g-100200300"
        assert first.role == ROLE_USER
        assert first.password.startswith("$argon2id$")

        second = await resolve_google_user(storage, "g-100200300", "Ada Lovelace")
        assert second.id == first.id
        assert len(await storage.get_all_users()) == 1

    async def test_taken_name_gets_suffix(self, storage: Storage):
        await storage.create_user(UserCreate(username="ada_lovelace", password="hash"))
        user = await resolve_google_user(storage, "g-1", "Ada Lovelace")
        assert user.username.startswith("ada_lovelace_")
        assert user.google_id == "g-1"

    async def test_legacy_username_is_found(self, storage: Storage):
        legacy = await storage.create_user(UserCreate(username="google_g-77", password="hash"))
        user = await resolve_google_user(storage, "g-77", "Someone Else")
        assert user.id == legacy.id

    async def test_name_taken_between_check_and_insert(self, storage: Storage, monkeypatch: pytest.MonkeyPatch):
        original_create = storage.create_user
        calls = []

        async def create_after_rival_signup(data: UserCreate):
            if not calls:
                await original_create(UserCreate(username=data.username, password="hash"))
            calls.append(data.username)
            return await original_create(data)

        monkeypatch.setattr(storage, "create_user", create_after_rival_signup)
        user = await resolve_google_user(storage, "g-42", "Grace Hopper")

        assert calls[0] == "grace_hopper"
        assert user.username.startswith("grace_hopper_")
        assert user.google_id == "g-42"
        assert len(await storage.get_all_users()) == 2

    async def test_concurrent_first_logins_with_same_name(self, storage: Storage):
        users = await asyncio.gather(
            resolve_google_user(storage, "g-1", "Alan Turing"),
            resolve_google_user(storage, "g-2", "Alan Turing"),
        )
        assert {u.google_id for u in users} == {"g-1", "g-2"}
        assert len({u.username for u in users}) == 2
        assert all(u.username.startswith("alan_turing") for u in users)
