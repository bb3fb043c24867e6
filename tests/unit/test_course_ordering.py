"""Catalogue ordering and progress clamping."""

from datetime import datetime, timezone

import pytest

from codearena.courses.ordering import UNKNOWN_LEVEL_RANK, clamp_progress, course_sort_key, level_rank
from codearena.courses.schemas import Course


def _course(title: str, level: str) -> Course:
    return Course(
        id=title.lower(),
        title=title,
        description="",
        level=level,
        difficulty="medium",
        instructor="Staff",
        price="Free",
        created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )


class TestLevelRank:
    def test_known_levels_in_order(self):
        assert level_rank("beginner") < level_rank("intermediate") < level_rank("advanced")

    def test_unknown_level_sorts_last(self):
        assert level_rank("expert") == UNKNOWN_LEVEL_RANK
        assert level_rank("Beginner") == UNKNOWN_LEVEL_RANK  # exact match only

    def test_sort_key_level_then_title(self):
        courses = [
            _course("Zed", "beginner"),
            _course("Alpha", "mystery"),
            _course("Beta", "advanced"),
            _course("Able", "beginner"),
        ]
        assert [c.title for c in sorted(courses, key=course_sort_key)] == ["Able", "Zed", "Beta", "Alpha"]


class TestClampProgress:
    @pytest.mark.parametrize(
        ("given", "stored"),
        [(150, 100), (-10, 0), (0, 0), (100, 100), (42, 42)],
    )
    def test_clamp(self, given, stored):
        assert clamp_progress(given) == stored
