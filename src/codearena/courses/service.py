"""Course progress helpers layered on storage."""

from __future__ import annotations

from codearena.courses.schemas import LessonProgress
from codearena.storage.base import Storage


async def record_lesson_progress(
    storage: Storage,
    enrollment_id: str,
    lesson_id: str,
    user_id: str,
    completed: bool,
    time_spent: int | None = None,
) -> LessonProgress:
    """Update per-lesson progress and credit the time as daily activity minutes."""
    progress = await storage.update_lesson_progress(enrollment_id, lesson_id, user_id, completed, time_spent)
    if time_spent and time_spent > 0:
        await storage.track_activity(user_id, time_spent, 0)
    return progress
