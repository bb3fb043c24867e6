"""Startup bootstrap: admin account and sample data are create-if-absent."""

from datetime import timedelta

import pytest

from codearena.config import Settings
from codearena.seed import bootstrap, ensure_admin_user, seed_sample_data
from codearena.storage.base import Storage, utcnow
from codearena.users.password import verify_password
from codearena.users.schemas import ROLE_ADMIN
from tests.builders import teaser_input

pytestmark = pytest.mark.asyncio

EXPECTED_COUNTS = {
    "courses": 6,
    "lessons": 29,
    "typing_challenges": 6,
    "quiz_questions": 10,
    "brain_teasers": 3,
    "marathons": 2,
}


class TestSeed:
    async def test_first_run_loads_everything(self, storage: Storage):
        counts = await seed_sample_data(storage)
        assert counts == EXPECTED_COUNTS

        courses = await storage.get_all_courses()
        assert [c.level for c in courses] == ["beginner"] * 2 + ["intermediate"] * 2 + ["advanced"] * 2
        lessons = await storage.get_lessons_by_course("course-programming-fundamentals")
        assert [lesson.order for lesson in lessons] == [1, 2, 3, 4, 5]

    async def test_second_run_creates_nothing(self, storage: Storage):
        await seed_sample_data(storage)
        counts = await seed_sample_data(storage)
        assert counts == dict.fromkeys(EXPECTED_COUNTS, 0)
        assert len(await storage.get_all_courses()) == 6

    async def test_teaser_dates_relative_to_now(self, storage: Storage):
        now = utcnow()
        await seed_sample_data(storage, now=now)
        assert (await storage.get_brain_teaser_for_date(now.date())).id == "teaser-1"
        assert (await storage.get_brain_teaser_for_date(now.date() + timedelta(days=2))).id == "teaser-3"

        marathon = await storage.get_marathon("marathon-1")
        assert marathon.start_time.date() == (now + timedelta(days=2)).date()

    async def test_taken_teaser_date_is_skipped(self, storage: Storage):
        now = utcnow()
        await storage.create_brain_teaser(teaser_input(now.date()))
        counts = await seed_sample_data(storage, now=now)
        assert counts["brain_teasers"] == 2


class TestAdminBootstrap:
    async def test_admin_created_once(self, storage: Storage):
        settings = Settings(admin_username="root", admin_password="pa55word", seed_sample_data=False)
        admin = await ensure_admin_user(storage, settings)
        assert admin.role == ROLE_ADMIN
        assert verify_password("pa55word", admin.password)

        again = await ensure_admin_user(storage, settings)
        assert again.id == admin.id
        assert len(await storage.get_all_users()) == 1

    async def test_bootstrap_respects_seed_flag(self, storage: Storage):
        await bootstrap(storage, Settings(seed_sample_data=False))
        assert await storage.get_all_courses() == []
        assert (await storage.get_user_by_username("admin")).role == ROLE_ADMIN
