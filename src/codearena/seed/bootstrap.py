"""Startup bootstrap: default admin account and sample content.

Every step is create-if-absent by identifier, so running it on each start
(or from several workers at once) never duplicates records.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta
from typing import Any

from codearena.challenges.schemas import (
    BrainTeaserCreate,
    MarathonCreate,
    QuizQuestionCreate,
    TypingChallengeCreate,
)
from codearena.config import Settings
from codearena.courses.schemas import CourseCreate, LessonCreate
from codearena.seed.data import (
    BRAIN_TEASER_SEED_DATA,
    COURSE_SEED_DATA,
    MARATHON_SEED_DATA,
    QUIZ_QUESTION_SEED_DATA,
    TYPING_CHALLENGE_SEED_DATA,
    lesson_seed_data,
)
from codearena.storage.base import Storage, utcnow
from codearena.storage.errors import ConflictError, DuplicateUsernameError
from codearena.users.password import hash_password
from codearena.users.schemas import ROLE_ADMIN, User, UserCreate

logger = logging.getLogger(__name__)


def _split_id(entry: dict) -> tuple[str, dict]:
    data = dict(entry)
    return data.pop("id"), data


async def _create_if_absent(
    existing: Awaitable[Any | None],
    create: Callable[[], Awaitable[Any]],
) -> bool:
    if await existing is not None:
        return False
    try:
        await create()
    except ConflictError as exc:
        # Taken concurrently, or the natural key is already used by another record.
        logger.warning("Seed record skipped: %s", exc)
        return False
    return True


async def ensure_admin_user(storage: Storage, settings: Settings) -> User:
    """Create the reserved admin account unless it already exists."""
    existing = await storage.get_user_by_username(settings.admin_username)
    if existing is not None:
        return existing
    try:
        user = await storage.create_user(
            UserCreate(
                username=settings.admin_username,
                password=hash_password(settings.admin_password),
                role=ROLE_ADMIN,
            )
        )
    except DuplicateUsernameError:
        # Another worker created it first.
        user = await storage.get_user_by_username(settings.admin_username)
        if user is None:
            raise
        return user
    logger.info("Created default admin user '%s'", settings.admin_username)
    return user


async def seed_sample_data(storage: Storage, now: datetime | None = None) -> dict[str, int]:
    """Load the sample catalogue and challenge pools. Returns how many records were created."""
    now = now or utcnow()
    counts = dict.fromkeys(
        ("courses", "lessons", "typing_challenges", "quiz_questions", "brain_teasers", "marathons"), 0
    )

    for entry in COURSE_SEED_DATA:
        course_id, data = _split_id(entry)
        counts["courses"] += await _create_if_absent(
            storage.get_course(course_id),
            lambda data=data, course_id=course_id: storage.create_course(CourseCreate(**data), course_id=course_id),
        )
        for lesson_entry in lesson_seed_data(course_id):
            lesson_id, lesson_data = _split_id(lesson_entry)
            counts["lessons"] += await _create_if_absent(
                storage.get_lesson(lesson_id),
                lambda data=lesson_data, lesson_id=lesson_id: storage.create_lesson(
                    LessonCreate(**data), lesson_id=lesson_id
                ),
            )

    for entry in TYPING_CHALLENGE_SEED_DATA:
        challenge_id, data = _split_id(entry)
        counts["typing_challenges"] += await _create_if_absent(
            storage.get_typing_challenge(challenge_id),
            lambda data=data, challenge_id=challenge_id: storage.create_typing_challenge(
                TypingChallengeCreate(**data), challenge_id=challenge_id
            ),
        )

    for entry in QUIZ_QUESTION_SEED_DATA:
        question_id, data = _split_id(entry)
        counts["quiz_questions"] += await _create_if_absent(
            storage.get_quiz_question(question_id),
            lambda data=data, question_id=question_id: storage.create_quiz_question(
                QuizQuestionCreate(**data), question_id=question_id
            ),
        )

    for entry in BRAIN_TEASER_SEED_DATA:
        teaser_id, data = _split_id(entry)
        day = now.date() + timedelta(days=data.pop("day_offset"))
        counts["brain_teasers"] += await _create_if_absent(
            storage.get_brain_teaser(teaser_id),
            lambda data=data, day=day, teaser_id=teaser_id: storage.create_brain_teaser(
                BrainTeaserCreate(date=day, **data), teaser_id=teaser_id
            ),
        )

    for entry in MARATHON_SEED_DATA:
        marathon_id, data = _split_id(entry)
        start = now + timedelta(days=data.pop("start_offset_days"))
        end = start + timedelta(days=data.pop("duration_days"))
        counts["marathons"] += await _create_if_absent(
            storage.get_marathon(marathon_id),
            lambda data=data, start=start, end=end, marathon_id=marathon_id: storage.create_marathon(
                MarathonCreate(start_time=start, end_time=end, **data), marathon_id=marathon_id
            ),
        )

    logger.info(
        "Seeded %d courses, %d lessons, %d typing challenges, %d quiz questions, %d brain teasers, %d marathons",
        *counts.values(),
    )
    return counts


async def bootstrap(storage: Storage, settings: Settings) -> None:
    """Run every startup step the settings ask for."""
    await ensure_admin_user(storage, settings)
    if settings.seed_sample_data:
        await seed_sample_data(storage)
