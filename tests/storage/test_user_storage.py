"""User and daily-activity storage contract, run against both backends."""

import asyncio
from datetime import date

import pytest

from codearena.storage.base import Storage
from codearena.storage.errors import ConflictError, DuplicateExternalKeyError, DuplicateUsernameError
from codearena.users.schemas import ROLE_ADMIN, ROLE_USER, UserCreate

pytestmark = pytest.mark.asyncio


class TestUsers:
    async def test_create_fills_defaults(self, storage: Storage):
        user = await storage.create_user(UserCreate(username="alice", password="hash"))
        assert user.id
        assert user.role == ROLE_USER
        assert user.streak == 0
        assert user.last_daily_solve is None
        assert user.created_at.tzinfo is not None

    async def test_lookup_by_username_and_external_key(self, storage: Storage):
        created = await storage.create_user(UserCreate(username="bob", password="hash", google_id="g-123"))
        assert (await storage.get_user_by_username("bob")) == created
        assert (await storage.get_user_by_external_key("g-123")) == created
        assert (await storage.get_user(created.id)) == created

    async def test_missing_user_is_none(self, storage: Storage):
        """Absence is a value, not an exception."""
        assert await storage.get_user_by_username("nonexistent") is None
        assert await storage.get_user_by_external_key("nope") is None
        assert await storage.get_user("missing-id") is None

    async def test_duplicate_username_rejected(self, storage: Storage):
        await storage.create_user(UserCreate(username="carol", password="hash"))
        with pytest.raises(DuplicateUsernameError):
            await storage.create_user(UserCreate(username="carol", password="other"))
        assert len(await storage.get_all_users()) == 1

    async def test_duplicate_external_key_rejected(self, storage: Storage):
        await storage.create_user(UserCreate(username="dave", password="hash", google_id="g-1"))
        with pytest.raises(DuplicateExternalKeyError):
            await storage.create_user(UserCreate(username="dave2", password="hash", google_id="g-1"))

    async def test_conflicts_share_a_base_class(self, storage: Storage):
        await storage.create_user(UserCreate(username="erin", password="hash"))
        with pytest.raises(ConflictError):
            await storage.create_user(UserCreate(username="erin", password="hash"))

    async def test_reserved_admin_username_is_admin(self, storage: Storage):
        admin = await storage.create_user(UserCreate(username="admin", password="hash", role=ROLE_USER))
        assert admin.role == ROLE_ADMIN

    async def test_concurrent_registration_creates_one_user(self, storage: Storage):
        results = await asyncio.gather(
            *(storage.create_user(UserCreate(username="frank", password="hash")) for _ in range(5)),
            return_exceptions=True,
        )
        created = [r for r in results if not isinstance(r, BaseException)]
        assert len(created) == 1
        assert all(isinstance(r, DuplicateUsernameError) for r in results if isinstance(r, BaseException))

    async def test_update_user(self, storage: Storage):
        user = await storage.create_user(UserCreate(username="grace", password="hash"))
        updated = await storage.update_user(user.id, streak=4)
        assert updated is not None
        assert updated.streak == 4
        assert (await storage.get_user(user.id)).streak == 4

    async def test_update_missing_user_does_not_create(self, storage: Storage):
        assert await storage.update_user("missing-id", streak=1) is None
        assert await storage.get_all_users() == []

    async def test_update_rejects_unknown_fields(self, storage: Storage):
        user = await storage.create_user(UserCreate(username="heidi", password="hash"))
        with pytest.raises(ValueError, match="username"):
            await storage.update_user(user.id, username="mallory")

    async def test_returned_records_are_detached(self, storage: Storage):
        user = await storage.create_user(UserCreate(username="ivan", password="hash"))
        user.streak = 99
        assert (await storage.get_user(user.id)).streak == 0


class TestActivity:
    async def test_first_call_creates_record(self, storage: Storage):
        activity = await storage.track_activity("u1", 10, 2, day=date(2026, 3, 1))
        assert activity.minutes_active == 10
        assert activity.questions_solved == 2
        assert activity.date == date(2026, 3, 1)

    async def test_calls_are_additive(self, storage: Storage):
        day = date(2026, 3, 1)
        await storage.track_activity("u1", 10, 2, day=day)
        activity = await storage.track_activity("u1", 5, 1, day=day)
        assert activity.minutes_active == 15
        assert activity.questions_solved == 3

    async def test_concurrent_calls_sum_into_one_record(self, storage: Storage):
        day = date(2026, 3, 2)
        await asyncio.gather(*(storage.track_activity("u1", n, 1, day=day) for n in range(1, 11)))

        history = await storage.get_user_activity("u1")
        assert len(history) == 1
        assert history[0].minutes_active == sum(range(1, 11))
        assert history[0].questions_solved == 10

    async def test_days_are_separate_and_newest_first(self, storage: Storage):
        await storage.track_activity("u1", 10, 0, day=date(2026, 3, 1))
        await storage.track_activity("u1", 20, 0, day=date(2026, 3, 3))
        await storage.track_activity("u2", 30, 0, day=date(2026, 3, 3))

        history = await storage.get_user_activity("u1")
        assert [a.date for a in history] == [date(2026, 3, 3), date(2026, 3, 1)]

    async def test_negative_deltas_are_ignored(self, storage: Storage):
        day = date(2026, 3, 1)
        await storage.track_activity("u1", 10, 2, day=day)
        activity = await storage.track_activity("u1", -50, -5, day=day)
        assert activity.minutes_active == 10
        assert activity.questions_solved == 2
