"""Lesson progress recorded through the course service."""

import pytest

from codearena.courses.service import record_lesson_progress
from codearena.storage.base import Storage
from tests.builders import course_input

pytestmark = pytest.mark.asyncio


class TestRecordLessonProgress:
    async def test_time_credited_as_activity(self, storage: Storage):
        course = await storage.create_course(course_input())
        enrollment = await storage.enroll("u1", course.id)

        progress = await record_lesson_progress(storage, enrollment.id, "l1", "u1", completed=True, time_spent=25)
        assert progress.completed is True
        assert progress.time_spent == 25
        assert (await storage.get_user_activity("u1"))[0].minutes_active == 25

    async def test_no_time_no_activity(self, storage: Storage):
        await record_lesson_progress(storage, "e1", "l1", "u1", completed=False)
        assert await storage.get_user_activity("u1") == []
