"""The storage interface shared by the in-memory and relational backends.

Every operation is a coroutine. Lookups and updates on a missing id or
natural key return ``None``; uniqueness violations raise
``codearena.storage.errors.ConflictError``. Both backends give the same
guarantees for the read-modify-write operations:

* ``track_activity`` is an additive upsert keyed by (user, day).
* ``enroll`` / ``register_for_marathon`` create at most one record per
  pair and bump the parent counter exactly once, in the same unit of work.
* ``update_lesson_progress`` accumulates time and stamps ``completed_at``
  only on the first false -> true transition.
* ``settle_submission`` only moves a submission out of ``pending`` and
  reports whether this call was the one that moved it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, datetime, timezone
from typing import Any

from codearena.challenges.schemas import (
    BrainTeaser,
    BrainTeaserCreate,
    Marathon,
    MarathonCreate,
    MarathonParticipant,
    QuizAttempt,
    QuizAttemptCreate,
    QuizQuestion,
    QuizQuestionCreate,
    TeaserAttempt,
    TeaserResult,
    TypingChallenge,
    TypingChallengeCreate,
    TypingScore,
    TypingScoreCreate,
)
from codearena.contests.schemas import (
    Contest,
    ContestCreate,
    Problem,
    ProblemCreate,
    Submission,
    SubmissionCreate,
    SubmissionSettlement,
)
from codearena.courses.schemas import (
    Course,
    CourseCreate,
    Enrollment,
    Lesson,
    LessonCreate,
    LessonProgress,
)
from codearena.users.schemas import ROLE_ADMIN, ROLE_USER, User, UserActivity, UserCreate

USER_UPDATABLE_FIELDS = frozenset({"password", "role", "streak", "last_daily_solve"})
COURSE_UPDATABLE_FIELDS = frozenset(CourseCreate.model_fields)
LESSON_UPDATABLE_FIELDS = frozenset(LessonCreate.model_fields) - {"course_id"}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def utc_today() -> date:
    return utcnow().date()


def answers_match(answer: str, solution: str) -> bool:
    """Brain-teaser answers compare trimmed and case-insensitively."""
    return answer.strip().casefold() == solution.strip().casefold()


def check_fields(changes: dict[str, Any], allowed: frozenset[str]) -> None:
    unknown = set(changes) - allowed
    if unknown:
        msg = f"Cannot update field(s): {', '.join(sorted(unknown))}"
        raise ValueError(msg)


class Storage(ABC):
    """Persistence contract consumed by route handlers, auth and services."""

    backend_name: str = "abstract"

    def __init__(self, admin_username: str = "admin") -> None:
        self.admin_username = admin_username

    def resolve_role(self, data: UserCreate) -> str:
        """The reserved bootstrap username is always an admin."""
        if data.username == self.admin_username:
            return ROLE_ADMIN
        return data.role or ROLE_USER

    async def ping(self) -> None:
        """Raise if the backend is unreachable."""

    async def close(self) -> None:
        """Release backend resources."""

    # --- Users ---

    @abstractmethod
    async def get_user(self, user_id: str) -> User | None: ...

    @abstractmethod
    async def get_user_by_username(self, username: str) -> User | None: ...

    @abstractmethod
    async def get_user_by_external_key(self, google_id: str) -> User | None: ...

    @abstractmethod
    async def create_user(self, data: UserCreate) -> User: ...

    @abstractmethod
    async def get_all_users(self) -> list[User]: ...

    @abstractmethod
    async def update_user(self, user_id: str, **changes: Any) -> User | None: ...

    # --- Daily activity ---

    @abstractmethod
    async def track_activity(
        self, user_id: str, minutes: int, questions: int, day: date | None = None
    ) -> UserActivity: ...

    @abstractmethod
    async def get_user_activity(self, user_id: str) -> list[UserActivity]: ...

    # --- Contests ---

    @abstractmethod
    async def create_contest(self, data: ContestCreate) -> Contest: ...

    @abstractmethod
    async def get_contest(self, contest_id: str) -> Contest | None: ...

    @abstractmethod
    async def get_all_contests(self) -> list[Contest]: ...

    @abstractmethod
    async def update_contest_status(self, contest_id: str, status: str) -> Contest | None: ...

    @abstractmethod
    async def update_contest_participants(self, contest_id: str, participants: int) -> Contest | None: ...

    # --- Problems ---

    @abstractmethod
    async def create_problem(self, data: ProblemCreate) -> Problem: ...

    @abstractmethod
    async def get_problem(self, problem_id: str) -> Problem | None: ...

    @abstractmethod
    async def get_problems_by_contest(self, contest_id: str) -> list[Problem]: ...

    # --- Submissions ---

    @abstractmethod
    async def create_submission(self, data: SubmissionCreate) -> Submission: ...

    @abstractmethod
    async def get_submission(self, submission_id: str) -> Submission | None: ...

    @abstractmethod
    async def get_submissions_by_user(self, user_id: str, contest_id: str | None = None) -> list[Submission]: ...

    @abstractmethod
    async def get_submissions_by_problem(self, problem_id: str) -> list[Submission]: ...

    @abstractmethod
    async def settle_submission(
        self, submission_id: str, status: str, score: int | None = None
    ) -> SubmissionSettlement | None: ...

    async def update_submission_status(
        self, submission_id: str, status: str, score: int | None = None
    ) -> Submission | None:
        settlement = await self.settle_submission(submission_id, status, score)
        return settlement.submission if settlement is not None else None

    # --- Courses ---

    @abstractmethod
    async def create_course(self, data: CourseCreate, course_id: str | None = None) -> Course: ...

    @abstractmethod
    async def get_course(self, course_id: str) -> Course | None: ...

    @abstractmethod
    async def get_all_courses(self) -> list[Course]: ...

    @abstractmethod
    async def get_courses_by_level(self, level: str) -> list[Course]: ...

    @abstractmethod
    async def update_course(self, course_id: str, **changes: Any) -> Course | None: ...

    # --- Lessons ---

    @abstractmethod
    async def create_lesson(self, data: LessonCreate, lesson_id: str | None = None) -> Lesson: ...

    @abstractmethod
    async def get_lesson(self, lesson_id: str) -> Lesson | None: ...

    @abstractmethod
    async def get_lessons_by_course(self, course_id: str) -> list[Lesson]: ...

    @abstractmethod
    async def update_lesson(self, lesson_id: str, **changes: Any) -> Lesson | None: ...

    # --- Enrollments ---

    @abstractmethod
    async def enroll(self, user_id: str, course_id: str) -> Enrollment | None: ...

    @abstractmethod
    async def get_enrollment(self, user_id: str, course_id: str) -> Enrollment | None: ...

    @abstractmethod
    async def get_user_enrollments(self, user_id: str) -> list[Enrollment]: ...

    @abstractmethod
    async def update_enrollment_progress(
        self, user_id: str, course_id: str, progress: int, time_spent: int | None = None
    ) -> Enrollment | None: ...

    @abstractmethod
    async def complete_enrollment(self, user_id: str, course_id: str) -> Enrollment | None: ...

    # --- Lesson progress ---

    @abstractmethod
    async def update_lesson_progress(
        self,
        enrollment_id: str,
        lesson_id: str,
        user_id: str,
        completed: bool,
        time_spent: int | None = None,
    ) -> LessonProgress: ...

    @abstractmethod
    async def get_lesson_progress(self, user_id: str, lesson_id: str) -> LessonProgress | None: ...

    @abstractmethod
    async def get_enrollment_lesson_progress(self, enrollment_id: str) -> list[LessonProgress]: ...

    # --- Typing challenges ---

    @abstractmethod
    async def create_typing_challenge(
        self, data: TypingChallengeCreate, challenge_id: str | None = None
    ) -> TypingChallenge: ...

    @abstractmethod
    async def get_typing_challenge(self, challenge_id: str) -> TypingChallenge | None: ...

    @abstractmethod
    async def list_typing_challenges(
        self, language: str | None = None, difficulty: str | None = None
    ) -> list[TypingChallenge]: ...

    @abstractmethod
    async def add_typing_score(self, data: TypingScoreCreate) -> TypingScore: ...

    @abstractmethod
    async def list_typing_scores(self, user_id: str) -> list[TypingScore]: ...

    @abstractmethod
    async def get_top_typing_scores(self, limit: int = 10) -> list[TypingScore]: ...

    # --- Quiz ---

    @abstractmethod
    async def create_quiz_question(
        self, data: QuizQuestionCreate, question_id: str | None = None
    ) -> QuizQuestion: ...

    @abstractmethod
    async def get_quiz_question(self, question_id: str) -> QuizQuestion | None: ...

    @abstractmethod
    async def list_quiz_questions(
        self, topic: str | None = None, difficulty: str | None = None
    ) -> list[QuizQuestion]: ...

    @abstractmethod
    async def add_quiz_attempt(self, data: QuizAttemptCreate) -> QuizAttempt: ...

    @abstractmethod
    async def list_quiz_attempts(self, user_id: str) -> list[QuizAttempt]: ...

    # --- Brain teasers ---

    @abstractmethod
    async def create_brain_teaser(self, data: BrainTeaserCreate, teaser_id: str | None = None) -> BrainTeaser: ...

    @abstractmethod
    async def get_brain_teaser(self, teaser_id: str) -> BrainTeaser | None: ...

    @abstractmethod
    async def get_brain_teaser_for_date(self, day: date) -> BrainTeaser | None: ...

    @abstractmethod
    async def get_teaser_attempt(self, user_id: str, teaser_id: str) -> TeaserAttempt | None: ...

    @abstractmethod
    async def list_teaser_attempts(self, user_id: str) -> list[TeaserAttempt]: ...

    @abstractmethod
    async def submit_teaser_answer(self, user_id: str, teaser_id: str, answer: str) -> TeaserResult | None: ...

    @abstractmethod
    async def use_teaser_hint(self, user_id: str, teaser_id: str) -> TeaserAttempt | None: ...

    # --- Marathons ---

    @abstractmethod
    async def create_marathon(self, data: MarathonCreate, marathon_id: str | None = None) -> Marathon: ...

    @abstractmethod
    async def get_marathon(self, marathon_id: str) -> Marathon | None: ...

    @abstractmethod
    async def get_active_marathon(self) -> Marathon | None: ...

    @abstractmethod
    async def list_marathons(self, status: str | None = None) -> list[Marathon]: ...

    @abstractmethod
    async def register_for_marathon(self, marathon_id: str, user_id: str) -> MarathonParticipant | None: ...

    @abstractmethod
    async def get_marathon_participant(self, marathon_id: str, user_id: str) -> MarathonParticipant | None: ...

    @abstractmethod
    async def record_marathon_result(
        self, marathon_id: str, user_id: str, points: int, solved: int = 1
    ) -> MarathonParticipant | None: ...

    @abstractmethod
    async def get_marathon_leaderboard(self, marathon_id: str) -> list[MarathonParticipant]: ...

    @abstractmethod
    async def list_marathon_participations(self, user_id: str) -> list[MarathonParticipant]: ...
