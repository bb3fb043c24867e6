"""In-process storage backend.

Records live in dicts keyed by generated ids, with secondary indexes for
the natural keys (username, (user, course), (user, day), ...). Callers get
deep copies, so the only way to change a stored record is through a
storage operation. Read-modify-write operations run under a per-key
asyncio lock.
"""

from __future__ import annotations

import asyncio
import uuid
from collections import defaultdict
from collections.abc import AsyncIterator, Hashable, Iterable
from contextlib import asynccontextmanager
from datetime import date
from typing import Any, TypeVar

import structlog
from pydantic import BaseModel

from codearena.challenges.schemas import (
    MARATHON_LIVE,
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
    SUBMISSION_PENDING,
    Contest,
    ContestCreate,
    Problem,
    ProblemCreate,
    Submission,
    SubmissionCreate,
    SubmissionSettlement,
)
from codearena.courses.ordering import clamp_progress, course_sort_key
from codearena.courses.schemas import (
    ENROLLMENT_ACTIVE,
    ENROLLMENT_COMPLETED,
    Course,
    CourseCreate,
    Enrollment,
    Lesson,
    LessonCreate,
    LessonProgress,
)
from codearena.storage.base import (
    COURSE_UPDATABLE_FIELDS,
    LESSON_UPDATABLE_FIELDS,
    USER_UPDATABLE_FIELDS,
    Storage,
    answers_match,
    check_fields,
    utc_today,
    utcnow,
)
from codearena.storage.errors import ConflictError, DuplicateExternalKeyError, DuplicateUsernameError
from codearena.users.schemas import User, UserActivity, UserCreate

logger = structlog.get_logger()

RecordT = TypeVar("RecordT", bound=BaseModel)


def _new_id() -> str:
    return str(uuid.uuid4())


def _copy(record: RecordT) -> RecordT:
    return record.model_copy(deep=True)


def _copies(records: Iterable[RecordT]) -> list[RecordT]:
    return [_copy(r) for r in records]


def _store_new(table: dict[str, Any], record: BaseModel) -> None:
    record_id = record.id  # type: ignore[attr-defined]
    if record_id in table:
        msg = f"Record already exists: {record_id}"
        raise ConflictError(msg)
    table[record_id] = record


def _merge(record: RecordT, changes: dict[str, Any]) -> RecordT:
    """Apply a partial update, re-validating nested fields."""
    return type(record).model_validate({**record.model_dump(), **changes})


def _rank_participants(participants: list[MarathonParticipant]) -> list[MarathonParticipant]:
    ordered = sorted(
        participants,
        key=lambda p: (
            -p.total_score,
            p.last_submission_at is None,
            p.last_submission_at or p.registered_at,
            p.registered_at,
        ),
    )
    for position, participant in enumerate(ordered, start=1):
        participant.rank = position
    return ordered


class KeyedLock:
    """One asyncio.Lock per key, dropped again once nobody holds or waits on it."""

    def __init__(self) -> None:
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._users: dict[Hashable, int] = defaultdict(int)

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._users[key] += 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                self._locks.pop(key, None)

    def __len__(self) -> int:
        return len(self._locks)


class MemoryStorage(Storage):
    """Single-process backend used for development, tests and DB fallback."""

    backend_name = "memory"

    def __init__(self, admin_username: str = "admin") -> None:
        super().__init__(admin_username)
        self._locks = KeyedLock()

        self._users: dict[str, User] = {}
        self._user_ids_by_name: dict[str, str] = {}
        self._user_ids_by_google_id: dict[str, str] = {}
        self._activity: dict[tuple[str, date], UserActivity] = {}

        self._contests: dict[str, Contest] = {}
        self._problems: dict[str, Problem] = {}
        self._submissions: dict[str, Submission] = {}

        self._courses: dict[str, Course] = {}
        self._lessons: dict[str, Lesson] = {}
        self._enrollments: dict[tuple[str, str], Enrollment] = {}
        self._lesson_progress: dict[tuple[str, str, str], LessonProgress] = {}

        self._typing_challenges: dict[str, TypingChallenge] = {}
        self._typing_scores: list[TypingScore] = []
        self._quiz_questions: dict[str, QuizQuestion] = {}
        self._quiz_attempts: list[QuizAttempt] = []
        self._brain_teasers: dict[str, BrainTeaser] = {}
        self._teaser_attempts: dict[tuple[str, str], TeaserAttempt] = {}
        self._marathons: dict[str, Marathon] = {}
        self._marathon_participants: dict[tuple[str, str], MarathonParticipant] = {}

    # --- Users ---

    async def get_user(self, user_id: str) -> User | None:
        user = self._users.get(user_id)
        return _copy(user) if user else None

    async def get_user_by_username(self, username: str) -> User | None:
        user_id = self._user_ids_by_name.get(username)
        return await self.get_user(user_id) if user_id else None

    async def get_user_by_external_key(self, google_id: str) -> User | None:
        user_id = self._user_ids_by_google_id.get(google_id)
        return await self.get_user(user_id) if user_id else None

    async def create_user(self, data: UserCreate) -> User:
        async with self._locks.hold(("users",)):
            if data.username in self._user_ids_by_name:
                raise DuplicateUsernameError(data.username)
            if data.google_id is not None and data.google_id in self._user_ids_by_google_id:
                raise DuplicateExternalKeyError(data.google_id)

            user = User(
                id=_new_id(),
                username=data.username,
                password=data.password,
                role=self.resolve_role(data),
                google_id=data.google_id,
                created_at=utcnow(),
            )
            self._users[user.id] = user
            self._user_ids_by_name[user.username] = user.id
            if user.google_id is not None:
                self._user_ids_by_google_id[user.google_id] = user.id

        logger.info("user_created", user_id=user.id, role=user.role, backend=self.backend_name)
        return _copy(user)

    async def get_all_users(self) -> list[User]:
        return _copies(self._users.values())

    async def update_user(self, user_id: str, **changes: Any) -> User | None:
        check_fields(changes, USER_UPDATABLE_FIELDS)
        async with self._locks.hold(("user", user_id)):
            user = self._users.get(user_id)
            if user is None:
                return None
            user = self._users[user_id] = _merge(user, changes)
            return _copy(user)

    # --- Daily activity ---

    async def track_activity(
        self, user_id: str, minutes: int, questions: int, day: date | None = None
    ) -> UserActivity:
        key = (user_id, day or utc_today())
        async with self._locks.hold(("activity", *key)):
            activity = self._activity.get(key)
            if activity is None:
                activity = self._activity[key] = UserActivity(id=_new_id(), user_id=user_id, date=key[1])
            activity.minutes_active += max(0, minutes)
            activity.questions_solved += max(0, questions)
            return _copy(activity)

    async def get_user_activity(self, user_id: str) -> list[UserActivity]:
        rows = [a for (uid, _), a in self._activity.items() if uid == user_id]
        return _copies(sorted(rows, key=lambda a: a.date, reverse=True))

    # --- Contests ---

    async def create_contest(self, data: ContestCreate) -> Contest:
        contest = Contest(id=_new_id(), participants=0, **data.model_dump())
        self._contests[contest.id] = contest
        return _copy(contest)

    async def get_contest(self, contest_id: str) -> Contest | None:
        contest = self._contests.get(contest_id)
        return _copy(contest) if contest else None

    async def get_all_contests(self) -> list[Contest]:
        return _copies(sorted(self._contests.values(), key=lambda c: c.start_time))

    async def update_contest_status(self, contest_id: str, status: str) -> Contest | None:
        contest = self._contests.get(contest_id)
        if contest is None:
            return None
        contest.status = status
        return _copy(contest)

    async def update_contest_participants(self, contest_id: str, participants: int) -> Contest | None:
        contest = self._contests.get(contest_id)
        if contest is None:
            return None
        contest.participants = max(0, participants)
        return _copy(contest)

    # --- Problems ---

    async def create_problem(self, data: ProblemCreate) -> Problem:
        problem = Problem(id=_new_id(), **data.model_dump())
        self._problems[problem.id] = problem
        return _copy(problem)

    async def get_problem(self, problem_id: str) -> Problem | None:
        problem = self._problems.get(problem_id)
        return _copy(problem) if problem else None

    async def get_problems_by_contest(self, contest_id: str) -> list[Problem]:
        return _copies(p for p in self._problems.values() if p.contest_id == contest_id)

    # --- Submissions ---

    async def create_submission(self, data: SubmissionCreate) -> Submission:
        submission = Submission(
            id=_new_id(),
            status=SUBMISSION_PENDING,
            score=0,
            submitted_at=utcnow(),
            **data.model_dump(),
        )
        self._submissions[submission.id] = submission
        return _copy(submission)

    async def get_submission(self, submission_id: str) -> Submission | None:
        submission = self._submissions.get(submission_id)
        return _copy(submission) if submission else None

    async def get_submissions_by_user(self, user_id: str, contest_id: str | None = None) -> list[Submission]:
        matches = [
            s
            for s in self._submissions.values()
            if s.user_id == user_id and (contest_id is None or s.contest_id == contest_id)
        ]
        return _copies(sorted(matches, key=lambda s: s.submitted_at, reverse=True))

    async def get_submissions_by_problem(self, problem_id: str) -> list[Submission]:
        matches = [s for s in self._submissions.values() if s.problem_id == problem_id]
        return _copies(sorted(matches, key=lambda s: s.submitted_at, reverse=True))

    async def settle_submission(
        self, submission_id: str, status: str, score: int | None = None
    ) -> SubmissionSettlement | None:
        async with self._locks.hold(("submission", submission_id)):
            submission = self._submissions.get(submission_id)
            if submission is None:
                return None
            transitioned = submission.status == SUBMISSION_PENDING
            if transitioned:
                submission.status = status
                if score is not None:
                    submission.score = score
            return SubmissionSettlement(submission=_copy(submission), transitioned=transitioned)

    # --- Courses ---

    async def create_course(self, data: CourseCreate, course_id: str | None = None) -> Course:
        course = Course(id=course_id or _new_id(), students=0, created_at=utcnow(), **data.model_dump())
        _store_new(self._courses, course)
        return _copy(course)

    async def get_course(self, course_id: str) -> Course | None:
        course = self._courses.get(course_id)
        return _copy(course) if course else None

    async def get_all_courses(self) -> list[Course]:
        active = [c for c in self._courses.values() if c.is_active]
        return _copies(sorted(active, key=course_sort_key))

    async def get_courses_by_level(self, level: str) -> list[Course]:
        matches = [c for c in self._courses.values() if c.is_active and c.level == level]
        return _copies(sorted(matches, key=lambda c: c.title))

    async def update_course(self, course_id: str, **changes: Any) -> Course | None:
        check_fields(changes, COURSE_UPDATABLE_FIELDS)
        async with self._locks.hold(("course", course_id)):
            course = self._courses.get(course_id)
            if course is None:
                return None
            course = self._courses[course_id] = _merge(course, changes)
            return _copy(course)

    # --- Lessons ---

    async def create_lesson(self, data: LessonCreate, lesson_id: str | None = None) -> Lesson:
        lesson = Lesson(id=lesson_id or _new_id(), created_at=utcnow(), **data.model_dump())
        _store_new(self._lessons, lesson)
        return _copy(lesson)

    async def get_lesson(self, lesson_id: str) -> Lesson | None:
        lesson = self._lessons.get(lesson_id)
        return _copy(lesson) if lesson else None

    async def get_lessons_by_course(self, course_id: str) -> list[Lesson]:
        matches = [lesson for lesson in self._lessons.values() if lesson.course_id == course_id and lesson.is_active]
        return _copies(sorted(matches, key=lambda lesson: lesson.order))

    async def update_lesson(self, lesson_id: str, **changes: Any) -> Lesson | None:
        check_fields(changes, LESSON_UPDATABLE_FIELDS)
        async with self._locks.hold(("lesson", lesson_id)):
            lesson = self._lessons.get(lesson_id)
            if lesson is None:
                return None
            lesson = self._lessons[lesson_id] = _merge(lesson, changes)
            return _copy(lesson)

    # --- Enrollments ---

    async def enroll(self, user_id: str, course_id: str) -> Enrollment | None:
        key = (user_id, course_id)
        async with self._locks.hold(("enrollment", *key)):
            existing = self._enrollments.get(key)
            if existing is not None:
                return _copy(existing)

            course = self._courses.get(course_id)
            if course is None:
                return None

            now = utcnow()
            enrollment = Enrollment(
                id=_new_id(),
                user_id=user_id,
                course_id=course_id,
                enrolled_at=now,
                progress=0,
                time_spent=0,
                status=ENROLLMENT_ACTIVE,
                last_accessed_at=now,
            )
            # Both writes happen with no await in between.
            self._enrollments[key] = enrollment
            course.students += 1

        logger.info("enrollment_created", user_id=user_id, course_id=course_id, backend=self.backend_name)
        return _copy(enrollment)

    async def get_enrollment(self, user_id: str, course_id: str) -> Enrollment | None:
        enrollment = self._enrollments.get((user_id, course_id))
        return _copy(enrollment) if enrollment else None

    async def get_user_enrollments(self, user_id: str) -> list[Enrollment]:
        matches = [e for (uid, _), e in self._enrollments.items() if uid == user_id]
        return _copies(sorted(matches, key=lambda e: e.last_accessed_at, reverse=True))

    async def update_enrollment_progress(
        self, user_id: str, course_id: str, progress: int, time_spent: int | None = None
    ) -> Enrollment | None:
        key = (user_id, course_id)
        async with self._locks.hold(("enrollment", *key)):
            enrollment = self._enrollments.get(key)
            if enrollment is None:
                return None
            if enrollment.status != ENROLLMENT_COMPLETED:
                enrollment.progress = clamp_progress(progress)
            if time_spent is not None:
                enrollment.time_spent += max(0, time_spent)
            enrollment.last_accessed_at = utcnow()
            return _copy(enrollment)

    async def complete_enrollment(self, user_id: str, course_id: str) -> Enrollment | None:
        key = (user_id, course_id)
        async with self._locks.hold(("enrollment", *key)):
            enrollment = self._enrollments.get(key)
            if enrollment is None:
                return None
            now = utcnow()
            enrollment.progress = 100
            enrollment.status = ENROLLMENT_COMPLETED
            enrollment.completed_at = enrollment.completed_at or now
            enrollment.last_accessed_at = now
            return _copy(enrollment)

    # --- Lesson progress ---

    async def update_lesson_progress(
        self,
        enrollment_id: str,
        lesson_id: str,
        user_id: str,
        completed: bool,
        time_spent: int | None = None,
    ) -> LessonProgress:
        key = (enrollment_id, lesson_id, user_id)
        async with self._locks.hold(("lesson_progress", *key)):
            now = utcnow()
            record = self._lesson_progress.get(key)
            if record is None:
                record = self._lesson_progress[key] = LessonProgress(
                    id=_new_id(),
                    enrollment_id=enrollment_id,
                    lesson_id=lesson_id,
                    user_id=user_id,
                    last_accessed_at=now,
                )
            if time_spent is not None:
                record.time_spent += max(0, time_spent)
            if completed and not record.completed:
                record.completed = True
                record.completed_at = now
            record.last_accessed_at = now
            return _copy(record)

    async def get_lesson_progress(self, user_id: str, lesson_id: str) -> LessonProgress | None:
        matches = [p for (_, lid, uid), p in self._lesson_progress.items() if uid == user_id and lid == lesson_id]
        if not matches:
            return None
        # Most recently touched enrollment wins.
        return _copy(max(matches, key=lambda p: p.last_accessed_at))

    async def get_enrollment_lesson_progress(self, enrollment_id: str) -> list[LessonProgress]:
        matches = [p for (eid, _, _), p in self._lesson_progress.items() if eid == enrollment_id]
        return _copies(sorted(matches, key=lambda p: p.last_accessed_at, reverse=True))

    # --- Typing challenges ---

    async def create_typing_challenge(
        self, data: TypingChallengeCreate, challenge_id: str | None = None
    ) -> TypingChallenge:
        challenge = TypingChallenge(id=challenge_id or _new_id(), created_at=utcnow(), **data.model_dump())
        _store_new(self._typing_challenges, challenge)
        return _copy(challenge)

    async def get_typing_challenge(self, challenge_id: str) -> TypingChallenge | None:
        challenge = self._typing_challenges.get(challenge_id)
        return _copy(challenge) if challenge else None

    async def list_typing_challenges(
        self, language: str | None = None, difficulty: str | None = None
    ) -> list[TypingChallenge]:
        matches = [
            c
            for c in self._typing_challenges.values()
            if (language is None or c.language == language) and (difficulty is None or c.difficulty == difficulty)
        ]
        return _copies(sorted(matches, key=lambda c: c.created_at))

    async def add_typing_score(self, data: TypingScoreCreate) -> TypingScore:
        score = TypingScore(id=_new_id(), completed_at=utcnow(), **data.model_dump())
        self._typing_scores.append(score)
        return _copy(score)

    async def list_typing_scores(self, user_id: str) -> list[TypingScore]:
        matches = [s for s in self._typing_scores if s.user_id == user_id]
        return _copies(sorted(matches, key=lambda s: s.completed_at))

    async def get_top_typing_scores(self, limit: int = 10) -> list[TypingScore]:
        # sorted() is stable: full ties keep insertion order.
        ranked = sorted(self._typing_scores, key=lambda s: (-s.wpm, s.completed_at))
        return _copies(ranked[:limit])

    # --- Quiz ---

    async def create_quiz_question(
        self, data: QuizQuestionCreate, question_id: str | None = None
    ) -> QuizQuestion:
        question = QuizQuestion(id=question_id or _new_id(), created_at=utcnow(), **data.model_dump())
        _store_new(self._quiz_questions, question)
        return _copy(question)

    async def get_quiz_question(self, question_id: str) -> QuizQuestion | None:
        question = self._quiz_questions.get(question_id)
        return _copy(question) if question else None

    async def list_quiz_questions(
        self, topic: str | None = None, difficulty: str | None = None
    ) -> list[QuizQuestion]:
        matches = [
            q
            for q in self._quiz_questions.values()
            if (topic is None or q.topic == topic) and (difficulty is None or q.difficulty == difficulty)
        ]
        return _copies(sorted(matches, key=lambda q: q.created_at))

    async def add_quiz_attempt(self, data: QuizAttemptCreate) -> QuizAttempt:
        attempt = QuizAttempt(id=_new_id(), completed_at=utcnow(), **data.model_dump())
        self._quiz_attempts.append(attempt)
        return _copy(attempt)

    async def list_quiz_attempts(self, user_id: str) -> list[QuizAttempt]:
        matches = [a for a in self._quiz_attempts if a.user_id == user_id]
        return _copies(sorted(matches, key=lambda a: a.completed_at))

    # --- Brain teasers ---

    async def create_brain_teaser(self, data: BrainTeaserCreate, teaser_id: str | None = None) -> BrainTeaser:
        async with self._locks.hold(("brain_teaser_date", data.date)):
            if any(t.date == data.date for t in self._brain_teasers.values()):
                msg = f"A brain teaser already exists for {data.date.isoformat()}"
                raise ConflictError(msg)
            teaser = BrainTeaser(id=teaser_id or _new_id(), created_at=utcnow(), **data.model_dump())
            _store_new(self._brain_teasers, teaser)
            return _copy(teaser)

    async def get_brain_teaser(self, teaser_id: str) -> BrainTeaser | None:
        teaser = self._brain_teasers.get(teaser_id)
        return _copy(teaser) if teaser else None

    async def get_brain_teaser_for_date(self, day: date) -> BrainTeaser | None:
        for teaser in self._brain_teasers.values():
            if teaser.date == day:
                return _copy(teaser)
        return None

    async def get_teaser_attempt(self, user_id: str, teaser_id: str) -> TeaserAttempt | None:
        attempt = self._teaser_attempts.get((user_id, teaser_id))
        return _copy(attempt) if attempt else None

    async def list_teaser_attempts(self, user_id: str) -> list[TeaserAttempt]:
        matches = [a for (uid, _), a in self._teaser_attempts.items() if uid == user_id]
        return _copies(sorted(matches, key=lambda a: a.attempted_at, reverse=True))

    def _attempt_for(self, user_id: str, teaser_id: str) -> TeaserAttempt:
        key = (user_id, teaser_id)
        attempt = self._teaser_attempts.get(key)
        if attempt is None:
            attempt = self._teaser_attempts[key] = TeaserAttempt(
                id=_new_id(), user_id=user_id, teaser_id=teaser_id, attempted_at=utcnow()
            )
        return attempt

    async def submit_teaser_answer(self, user_id: str, teaser_id: str, answer: str) -> TeaserResult | None:
        teaser = self._brain_teasers.get(teaser_id)
        if teaser is None:
            return None

        correct = answers_match(answer, teaser.solution)
        async with self._locks.hold(("teaser_attempt", user_id, teaser_id)):
            attempt = self._attempt_for(user_id, teaser_id)
            attempt.attempts += 1
            attempt.user_answer = answer
            newly_solved = correct and not attempt.solved
            if newly_solved:
                attempt.solved = True
                attempt.solved_at = utcnow()
            return TeaserResult(correct=correct, newly_solved=newly_solved, attempt=_copy(attempt))

    async def use_teaser_hint(self, user_id: str, teaser_id: str) -> TeaserAttempt | None:
        teaser = self._brain_teasers.get(teaser_id)
        if teaser is None:
            return None

        async with self._locks.hold(("teaser_attempt", user_id, teaser_id)):
            attempt = self._attempt_for(user_id, teaser_id)
            if not attempt.solved and attempt.hints_used < len(teaser.hints):
                attempt.hints_used += 1
            return _copy(attempt)

    # --- Marathons ---

    async def create_marathon(self, data: MarathonCreate, marathon_id: str | None = None) -> Marathon:
        marathon = Marathon(
            id=marathon_id or _new_id(), participant_count=0, created_at=utcnow(), **data.model_dump()
        )
        _store_new(self._marathons, marathon)
        return _copy(marathon)

    async def get_marathon(self, marathon_id: str) -> Marathon | None:
        marathon = self._marathons.get(marathon_id)
        return _copy(marathon) if marathon else None

    async def get_active_marathon(self) -> Marathon | None:
        live = await self.list_marathons(status=MARATHON_LIVE)
        return live[0] if live else None

    async def list_marathons(self, status: str | None = None) -> list[Marathon]:
        matches = [m for m in self._marathons.values() if status is None or m.status == status]
        return _copies(sorted(matches, key=lambda m: m.start_time))

    async def register_for_marathon(self, marathon_id: str, user_id: str) -> MarathonParticipant | None:
        key = (marathon_id, user_id)
        async with self._locks.hold(("marathon_participant", *key)):
            existing = self._marathon_participants.get(key)
            if existing is not None:
                return _copy(existing)

            marathon = self._marathons.get(marathon_id)
            if marathon is None:
                return None

            participant = MarathonParticipant(
                id=_new_id(), marathon_id=marathon_id, user_id=user_id, registered_at=utcnow()
            )
            self._marathon_participants[key] = participant
            marathon.participant_count += 1
            return _copy(participant)

    async def get_marathon_participant(self, marathon_id: str, user_id: str) -> MarathonParticipant | None:
        participant = self._marathon_participants.get((marathon_id, user_id))
        return _copy(participant) if participant else None

    async def record_marathon_result(
        self, marathon_id: str, user_id: str, points: int, solved: int = 1
    ) -> MarathonParticipant | None:
        async with self._locks.hold(("marathon", marathon_id)):
            participant = self._marathon_participants.get((marathon_id, user_id))
            if participant is None:
                return None
            participant.total_score += points
            participant.problems_solved += max(0, solved)
            participant.last_submission_at = utcnow()
            _rank_participants(self._participants_of(marathon_id))
            return _copy(participant)

    def _participants_of(self, marathon_id: str) -> list[MarathonParticipant]:
        return [p for (mid, _), p in self._marathon_participants.items() if mid == marathon_id]

    async def get_marathon_leaderboard(self, marathon_id: str) -> list[MarathonParticipant]:
        async with self._locks.hold(("marathon", marathon_id)):
            return _copies(_rank_participants(self._participants_of(marathon_id)))

    async def list_marathon_participations(self, user_id: str) -> list[MarathonParticipant]:
        matches = [p for (_, uid), p in self._marathon_participants.items() if uid == user_id]
        return _copies(sorted(matches, key=lambda p: p.registered_at, reverse=True))
