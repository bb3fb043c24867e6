"""Catalogue ordering shared by both storage backends."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from codearena.courses.schemas import Course

LEVEL_RANK: dict[str, int] = {
    "beginner": 1,
    "intermediate": 2,
    "advanced": 3,
}
UNKNOWN_LEVEL_RANK = 999


def level_rank(level: str) -> int:
    """Rank of a course level; unknown levels sort after every known one."""
    return LEVEL_RANK.get(level, UNKNOWN_LEVEL_RANK)


def course_sort_key(course: Course) -> tuple[int, str]:
    return level_rank(course.level), course.title


def clamp_progress(progress: int) -> int:
    """Clamp a progress percentage into [0, 100]."""
    return min(100, max(0, int(progress)))
