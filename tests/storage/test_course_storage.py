"""Course catalogue, enrollment and lesson-progress storage contract."""

import asyncio

import pytest

from codearena.courses.schemas import ENROLLMENT_ACTIVE, ENROLLMENT_COMPLETED, QuizItem
from codearena.storage.base import Storage
from codearena.storage.errors import ConflictError
from tests.builders import course_input, lesson_input

pytestmark = pytest.mark.asyncio


class TestCourses:
    async def test_create_defaults(self, storage: Storage):
        course = await storage.create_course(course_input())
        assert course.students == 0
        assert course.price == "Free"
        assert course.is_active is True
        assert course.topics == ["BFS", "Dijkstra"]

    async def test_create_with_fixed_id(self, storage: Storage):
        course = await storage.create_course(course_input(), course_id="course-graphs")
        assert course.id == "course-graphs"
        assert (await storage.get_course("course-graphs")) == course

    async def test_duplicate_fixed_id_conflicts(self, storage: Storage):
        await storage.create_course(course_input(), course_id="course-graphs")
        with pytest.raises(ConflictError):
            await storage.create_course(course_input(title="Other"), course_id="course-graphs")

    async def test_all_courses_ordered_by_level_then_title(self, storage: Storage):
        await storage.create_course(course_input("Zeta Trees", level="beginner"))
        await storage.create_course(course_input("Mystery", level="expert"))
        await storage.create_course(course_input("Alpha Flows", level="advanced"))
        await storage.create_course(course_input("Beta Graphs", level="intermediate"))
        await storage.create_course(course_input("Alpha Basics", level="beginner"))

        titles = [c.title for c in await storage.get_all_courses()]
        assert titles == ["Alpha Basics", "Zeta Trees", "Beta Graphs", "Alpha Flows", "Mystery"]

    async def test_inactive_courses_hidden(self, storage: Storage):
        hidden = await storage.create_course(course_input("Retired", level="beginner", is_active=False))
        await storage.create_course(course_input("Current", level="beginner"))

        assert [c.title for c in await storage.get_all_courses()] == ["Current"]
        assert [c.title for c in await storage.get_courses_by_level("beginner")] == ["Current"]
        # Still reachable by id.
        assert (await storage.get_course(hidden.id)) is not None

    async def test_courses_by_level(self, storage: Storage):
        await storage.create_course(course_input("B", level="advanced"))
        await storage.create_course(course_input("A", level="advanced"))
        await storage.create_course(course_input("C", level="beginner"))
        assert [c.title for c in await storage.get_courses_by_level("advanced")] == ["A", "B"]

    async def test_update_course(self, storage: Storage):
        course = await storage.create_course(course_input())
        updated = await storage.update_course(course.id, is_active=False, rating=4.5)
        assert updated.is_active is False
        assert updated.rating == 4.5
        assert await storage.update_course("missing", rating=1.0) is None


class TestLessons:
    async def test_lessons_ordered_and_active_only(self, storage: Storage):
        course = await storage.create_course(course_input())
        await storage.create_lesson(lesson_input(course.id, 3))
        await storage.create_lesson(lesson_input(course.id, 1))
        await storage.create_lesson(lesson_input(course.id, 2, is_active=False))
        await storage.create_lesson(lesson_input("other-course", 1))

        lessons = await storage.get_lessons_by_course(course.id)
        assert [lesson.order for lesson in lessons] == [1, 3]

    async def test_quiz_data_round_trips(self, storage: Storage):
        quiz = [QuizItem(question="2 + 2?", options=["3", "4"], correct_answer_index=1)]
        lesson = await storage.create_lesson(lesson_input("c1", 1, type="quiz", quiz_data=quiz))
        fetched = await storage.get_lesson(lesson.id)
        assert fetched.quiz_data == quiz

    async def test_update_lesson(self, storage: Storage):
        lesson = await storage.create_lesson(lesson_input("c1", 1))
        updated = await storage.update_lesson(lesson.id, title="Renamed", order=7)
        assert updated.title == "Renamed"
        assert updated.order == 7
        assert await storage.update_lesson("missing", title="x") is None


class TestEnrollment:
    async def test_enroll_creates_and_counts(self, storage: Storage):
        course = await storage.create_course(course_input())
        enrollment = await storage.enroll("u1", course.id)
        assert enrollment.status == ENROLLMENT_ACTIVE
        assert enrollment.progress == 0
        assert enrollment.time_spent == 0
        assert (await storage.get_course(course.id)).students == 1

    async def test_enroll_is_idempotent(self, storage: Storage):
        course = await storage.create_course(course_input())
        first = await storage.enroll("u1", course.id)
        second = await storage.enroll("u1", course.id)
        assert second.id == first.id
        assert (await storage.get_course(course.id)).students == 1
        assert len(await storage.get_user_enrollments("u1")) == 1

    async def test_concurrent_enroll_counts_once(self, storage: Storage):
        course = await storage.create_course(course_input())
        results = await asyncio.gather(*(storage.enroll("u1", course.id) for _ in range(8)))

        assert len({e.id for e in results}) == 1
        assert (await storage.get_course(course.id)).students == 1

    async def test_enroll_in_missing_course(self, storage: Storage):
        assert await storage.enroll("u1", "missing-course") is None
        assert await storage.get_user_enrollments("u1") == []

    async def test_progress_is_clamped(self, storage: Storage):
        course = await storage.create_course(course_input())
        await storage.enroll("u1", course.id)

        high = await storage.update_enrollment_progress("u1", course.id, 150)
        assert high.progress == 100
        low = await storage.update_enrollment_progress("u1", course.id, -10)
        assert low.progress == 0

    async def test_progress_accumulates_time(self, storage: Storage):
        course = await storage.create_course(course_input())
        await storage.enroll("u1", course.id)
        await storage.update_enrollment_progress("u1", course.id, 20, time_spent=15)
        enrollment = await storage.update_enrollment_progress("u1", course.id, 40, time_spent=10)
        assert enrollment.progress == 40
        assert enrollment.time_spent == 25

    async def test_progress_for_missing_enrollment(self, storage: Storage):
        assert await storage.update_enrollment_progress("u1", "c1", 50) is None
        assert await storage.complete_enrollment("u1", "c1") is None

    async def test_completion_is_terminal(self, storage: Storage):
        course = await storage.create_course(course_input())
        await storage.enroll("u1", course.id)

        completed = await storage.complete_enrollment("u1", course.id)
        assert completed.status == ENROLLMENT_COMPLETED
        assert completed.progress == 100
        assert completed.completed_at is not None

        after = await storage.update_enrollment_progress("u1", course.id, 10)
        assert after.status == ENROLLMENT_COMPLETED
        assert after.progress == 100

        again = await storage.complete_enrollment("u1", course.id)
        assert again.completed_at == completed.completed_at


class TestLessonProgress:
    async def test_first_call_creates_record(self, storage: Storage):
        progress = await storage.update_lesson_progress("e1", "l1", "u1", completed=False, time_spent=30)
        assert progress.completed is False
        assert progress.completed_at is None
        assert progress.time_spent == 30

    async def test_completed_at_stamped_once(self, storage: Storage):
        first = await storage.update_lesson_progress("e1", "l1", "u1", completed=True)
        assert first.completed is True
        assert first.completed_at is not None

        second = await storage.update_lesson_progress("e1", "l1", "u1", completed=True)
        assert second.completed_at == first.completed_at

        # A later "not completed" call never clears it.
        third = await storage.update_lesson_progress("e1", "l1", "u1", completed=False, time_spent=5)
        assert third.completed is True
        assert third.completed_at == first.completed_at

    async def test_concurrent_updates_keep_every_delta(self, storage: Storage):
        results = await asyncio.gather(
            *(storage.update_lesson_progress("e1", "l1", "u1", completed=True, time_spent=10) for _ in range(6))
        )
        assert len({r.completed_at for r in results}) == 1

        record = await storage.get_lesson_progress("u1", "l1")
        assert record.time_spent == 60
        assert record.completed_at == results[0].completed_at
        assert len(await storage.get_enrollment_lesson_progress("e1")) == 1

    async def test_lookups(self, storage: Storage):
        await storage.update_lesson_progress("e1", "l1", "u1", completed=False)
        await storage.update_lesson_progress("e1", "l2", "u1", completed=False)
        await storage.update_lesson_progress("e2", "l1", "u2", completed=False)

        assert len(await storage.get_enrollment_lesson_progress("e1")) == 2
        assert (await storage.get_lesson_progress("u2", "l1")).enrollment_id == "e2"
        assert await storage.get_lesson_progress("u3", "l1") is None

    async def test_lookup_prefers_most_recent_enrollment(self, storage: Storage):
        await storage.update_lesson_progress("e1", "l1", "u1", completed=False)
        await asyncio.sleep(0.002)
        await storage.update_lesson_progress("e2", "l1", "u1", completed=False)
        assert (await storage.get_lesson_progress("u1", "l1")).enrollment_id == "e2"

        await asyncio.sleep(0.002)
        await storage.update_lesson_progress("e1", "l1", "u1", completed=True)
        assert (await storage.get_lesson_progress("u1", "l1")).enrollment_id == "e1"
