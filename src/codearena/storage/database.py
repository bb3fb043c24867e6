"""SQLAlchemy-backed storage.

Every operation runs in its own session and transaction. Read-modify-write
operations are expressed as single statements the database serializes on
its own: ``INSERT ... ON CONFLICT`` upserts against the natural-key unique
constraints, and conditional ``UPDATE ... WHERE`` guards whose rowcount
tells whether this caller won the transition. The same statements run on
PostgreSQL (asyncpg) and SQLite (aiosqlite).
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from typing import Any, TypeVar

import structlog
from pydantic import BaseModel
from sqlalchemy import Select, case, func, select, text, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

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
    QuizItem,
)
from codearena.db.models import (
    BrainTeaserRow,
    ContestRow,
    CourseRow,
    EnrollmentRow,
    LessonProgressRow,
    LessonRow,
    MarathonParticipantRow,
    MarathonRow,
    ProblemRow,
    QuizAttemptRow,
    QuizQuestionRow,
    SubmissionRow,
    TeaserAttemptRow,
    TypingChallengeRow,
    TypingScoreRow,
    UserActivityRow,
    UserRow,
    new_id,
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

_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def _to_records(model: type[RecordT], rows: Sequence[Any]) -> list[RecordT]:
    return [model.model_validate(row) for row in rows]


def _plain_quiz_data(quiz_data: Any) -> list[dict[str, Any]] | None:
    if quiz_data is None:
        return None
    return [QuizItem.model_validate(item).model_dump() for item in quiz_data]


class DatabaseStorage(Storage):
    """Relational backend over an async SQLAlchemy session factory."""

    backend_name = "database"

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        dialect_name: str,
        admin_username: str = "admin",
    ) -> None:
        super().__init__(admin_username)
        if dialect_name not in _INSERTS:
            msg = f"Unsupported database dialect: {dialect_name}"
            raise ValueError(msg)
        self._session_factory = session_factory
        self._insert = _INSERTS[dialect_name]
        self.dialect_name = dialect_name

    async def ping(self) -> None:
        async with self._session_factory() as session:
            await session.execute(text("SELECT 1"))

    # --- helpers ---

    async def _get(self, model: type[RecordT], row_cls: type, row_id: str) -> RecordT | None:
        async with self._session_factory() as session:
            row = await session.get(row_cls, row_id)
            return model.model_validate(row) if row is not None else None

    async def _first(self, model: type[RecordT], stmt: Select) -> RecordT | None:
        async with self._session_factory() as session:
            row = (await session.scalars(stmt.limit(1))).first()
            return model.model_validate(row) if row is not None else None

    async def _all(self, model: type[RecordT], stmt: Select) -> list[RecordT]:
        async with self._session_factory() as session:
            rows = (await session.scalars(stmt)).all()
            return _to_records(model, rows)

    async def _add(self, model: type[RecordT], row: Any, conflict: str = "Record already exists") -> RecordT:
        try:
            async with self._session_factory() as session, session.begin():
                session.add(row)
                await session.flush()
                return model.model_validate(row)
        except IntegrityError as exc:
            raise ConflictError(conflict) from exc

    @staticmethod
    async def _execute_update(session: AsyncSession, stmt: Any) -> int:
        result = await session.execute(stmt, execution_options={"synchronize_session": False})
        return result.rowcount

    # --- Users ---

    async def get_user(self, user_id: str) -> User | None:
        return await self._get(User, UserRow, user_id)

    async def get_user_by_username(self, username: str) -> User | None:
        return await self._first(User, select(UserRow).where(UserRow.username == username))

    async def get_user_by_external_key(self, google_id: str) -> User | None:
        return await self._first(User, select(UserRow).where(UserRow.google_id == google_id))

    async def create_user(self, data: UserCreate) -> User:
        try:
            async with self._session_factory() as session, session.begin():
                taken = await session.scalar(select(UserRow.id).where(UserRow.username == data.username))
                if taken is not None:
                    raise DuplicateUsernameError(data.username)
                if data.google_id is not None:
                    linked = await session.scalar(select(UserRow.id).where(UserRow.google_id == data.google_id))
                    if linked is not None:
                        raise DuplicateExternalKeyError(data.google_id)

                row = UserRow(
                    id=new_id(),
                    username=data.username,
                    password=data.password,
                    role=self.resolve_role(data),
                    streak=0,
                    google_id=data.google_id,
                    created_at=utcnow(),
                )
                session.add(row)
                await session.flush()
                user = User.model_validate(row)
        except IntegrityError as exc:
            # Lost a race with a concurrent registration.
            if await self.get_user_by_username(data.username) is not None:
                raise DuplicateUsernameError(data.username) from exc
            if data.google_id is not None:
                raise DuplicateExternalKeyError(data.google_id) from exc
            raise

        logger.info("user_created", user_id=user.id, role=user.role, backend=self.backend_name)
        return user

    async def get_all_users(self) -> list[User]:
        return await self._all(User, select(UserRow).order_by(UserRow.created_at))

    async def update_user(self, user_id: str, **changes: Any) -> User | None:
        check_fields(changes, USER_UPDATABLE_FIELDS)
        if changes:
            async with self._session_factory() as session, session.begin():
                stmt = update(UserRow).where(UserRow.id == user_id).values(**changes)
                if await self._execute_update(session, stmt) == 0:
                    return None
        return await self.get_user(user_id)

    # --- Daily activity ---

    async def track_activity(
        self, user_id: str, minutes: int, questions: int, day: date | None = None
    ) -> UserActivity:
        day = day or utc_today()
        stmt = self._insert(UserActivityRow).values(
            id=new_id(),
            user_id=user_id,
            date=day,
            minutes_active=max(0, minutes),
            questions_solved=max(0, questions),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "date"],
            set_={
                "minutes_active": UserActivityRow.minutes_active + stmt.excluded.minutes_active,
                "questions_solved": UserActivityRow.questions_solved + stmt.excluded.questions_solved,
            },
        )
        async with self._session_factory() as session, session.begin():
            await session.execute(stmt)
            row = await session.scalar(
                select(UserActivityRow).where(UserActivityRow.user_id == user_id, UserActivityRow.date == day)
            )
            return UserActivity.model_validate(row)

    async def get_user_activity(self, user_id: str) -> list[UserActivity]:
        stmt = select(UserActivityRow).where(UserActivityRow.user_id == user_id).order_by(UserActivityRow.date.desc())
        return await self._all(UserActivity, stmt)

    # --- Contests ---

    async def create_contest(self, data: ContestCreate) -> Contest:
        return await self._add(Contest, ContestRow(id=new_id(), participants=0, **data.model_dump()))

    async def get_contest(self, contest_id: str) -> Contest | None:
        return await self._get(Contest, ContestRow, contest_id)

    async def get_all_contests(self) -> list[Contest]:
        return await self._all(Contest, select(ContestRow).order_by(ContestRow.start_time))

    async def _update_contest(self, contest_id: str, **values: Any) -> Contest | None:
        async with self._session_factory() as session, session.begin():
            stmt = update(ContestRow).where(ContestRow.id == contest_id).values(**values)
            if await self._execute_update(session, stmt) == 0:
                return None
        return await self.get_contest(contest_id)

    async def update_contest_status(self, contest_id: str, status: str) -> Contest | None:
        return await self._update_contest(contest_id, status=status)

    async def update_contest_participants(self, contest_id: str, participants: int) -> Contest | None:
        return await self._update_contest(contest_id, participants=max(0, participants))

    # --- Problems ---

    async def create_problem(self, data: ProblemCreate) -> Problem:
        return await self._add(Problem, ProblemRow(id=new_id(), **data.model_dump()))

    async def get_problem(self, problem_id: str) -> Problem | None:
        return await self._get(Problem, ProblemRow, problem_id)

    async def get_problems_by_contest(self, contest_id: str) -> list[Problem]:
        return await self._all(Problem, select(ProblemRow).where(ProblemRow.contest_id == contest_id))

    # --- Submissions ---

    async def create_submission(self, data: SubmissionCreate) -> Submission:
        row = SubmissionRow(
            id=new_id(),
            status=SUBMISSION_PENDING,
            score=0,
            submitted_at=utcnow(),
            **data.model_dump(),
        )
        return await self._add(Submission, row)

    async def get_submission(self, submission_id: str) -> Submission | None:
        return await self._get(Submission, SubmissionRow, submission_id)

    async def get_submissions_by_user(self, user_id: str, contest_id: str | None = None) -> list[Submission]:
        stmt = select(SubmissionRow).where(SubmissionRow.user_id == user_id)
        if contest_id is not None:
            stmt = stmt.where(SubmissionRow.contest_id == contest_id)
        return await self._all(Submission, stmt.order_by(SubmissionRow.submitted_at.desc()))

    async def get_submissions_by_problem(self, problem_id: str) -> list[Submission]:
        stmt = (
            select(SubmissionRow)
            .where(SubmissionRow.problem_id == problem_id)
            .order_by(SubmissionRow.submitted_at.desc())
        )
        return await self._all(Submission, stmt)

    async def settle_submission(
        self, submission_id: str, status: str, score: int | None = None
    ) -> SubmissionSettlement | None:
        values: dict[str, Any] = {"status": status}
        if score is not None:
            values["score"] = score
        async with self._session_factory() as session, session.begin():
            # Terminal statuses are final; only a pending submission moves.
            moved = await self._execute_update(
                session,
                update(SubmissionRow)
                .where(SubmissionRow.id == submission_id, SubmissionRow.status == SUBMISSION_PENDING)
                .values(**values),
            )
            row = await session.get(SubmissionRow, submission_id)
            if row is None:
                return None
            return SubmissionSettlement(submission=Submission.model_validate(row), transitioned=moved == 1)

    # --- Courses ---

    async def create_course(self, data: CourseCreate, course_id: str | None = None) -> Course:
        row = CourseRow(id=course_id or new_id(), students=0, created_at=utcnow(), **data.model_dump())
        return await self._add(Course, row)

    async def get_course(self, course_id: str) -> Course | None:
        return await self._get(Course, CourseRow, course_id)

    async def get_all_courses(self) -> list[Course]:
        # Ordered in Python so both backends share one collation.
        courses = await self._all(Course, select(CourseRow).where(CourseRow.is_active.is_(True)))
        return sorted(courses, key=course_sort_key)

    async def get_courses_by_level(self, level: str) -> list[Course]:
        stmt = select(CourseRow).where(CourseRow.is_active.is_(True), CourseRow.level == level)
        return sorted(await self._all(Course, stmt), key=lambda c: c.title)

    async def update_course(self, course_id: str, **changes: Any) -> Course | None:
        check_fields(changes, COURSE_UPDATABLE_FIELDS)
        if changes:
            async with self._session_factory() as session, session.begin():
                stmt = update(CourseRow).where(CourseRow.id == course_id).values(**changes)
                if await self._execute_update(session, stmt) == 0:
                    return None
        return await self.get_course(course_id)

    # --- Lessons ---

    async def create_lesson(self, data: LessonCreate, lesson_id: str | None = None) -> Lesson:
        row = LessonRow(id=lesson_id or new_id(), created_at=utcnow(), **data.model_dump())
        return await self._add(Lesson, row)

    async def get_lesson(self, lesson_id: str) -> Lesson | None:
        return await self._get(Lesson, LessonRow, lesson_id)

    async def get_lessons_by_course(self, course_id: str) -> list[Lesson]:
        stmt = (
            select(LessonRow)
            .where(LessonRow.course_id == course_id, LessonRow.is_active.is_(True))
            .order_by(LessonRow.order)
        )
        return await self._all(Lesson, stmt)

    async def update_lesson(self, lesson_id: str, **changes: Any) -> Lesson | None:
        check_fields(changes, LESSON_UPDATABLE_FIELDS)
        if "quiz_data" in changes:
            changes["quiz_data"] = _plain_quiz_data(changes["quiz_data"])
        if changes:
            async with self._session_factory() as session, session.begin():
                stmt = update(LessonRow).where(LessonRow.id == lesson_id).values(**changes)
                if await self._execute_update(session, stmt) == 0:
                    return None
        return await self.get_lesson(lesson_id)

    # --- Enrollments ---

    @staticmethod
    def _enrollment_key(user_id: str, course_id: str) -> tuple[Any, ...]:
        return (EnrollmentRow.user_id == user_id, EnrollmentRow.course_id == course_id)

    async def enroll(self, user_id: str, course_id: str) -> Enrollment | None:
        async with self._session_factory() as session, session.begin():
            existing = await session.scalar(select(EnrollmentRow).where(*self._enrollment_key(user_id, course_id)))
            if existing is not None:
                return Enrollment.model_validate(existing)
            if await session.get(CourseRow, course_id) is None:
                return None

            now = utcnow()
            stmt = (
                self._insert(EnrollmentRow)
                .values(
                    id=new_id(),
                    user_id=user_id,
                    course_id=course_id,
                    enrolled_at=now,
                    progress=0,
                    time_spent=0,
                    status=ENROLLMENT_ACTIVE,
                    last_accessed_at=now,
                )
                .on_conflict_do_nothing(index_elements=["user_id", "course_id"])
                .returning(EnrollmentRow.id)
            )
            created = (await session.execute(stmt)).scalar_one_or_none() is not None
            if created:
                # Same transaction as the insert: the counter moves iff a row was created.
                await self._execute_update(
                    session,
                    update(CourseRow).where(CourseRow.id == course_id).values(students=CourseRow.students + 1),
                )
            row = await session.scalar(select(EnrollmentRow).where(*self._enrollment_key(user_id, course_id)))
            enrollment = Enrollment.model_validate(row)

        if created:
            logger.info("enrollment_created", user_id=user_id, course_id=course_id, backend=self.backend_name)
        return enrollment

    async def get_enrollment(self, user_id: str, course_id: str) -> Enrollment | None:
        return await self._first(Enrollment, select(EnrollmentRow).where(*self._enrollment_key(user_id, course_id)))

    async def get_user_enrollments(self, user_id: str) -> list[Enrollment]:
        stmt = (
            select(EnrollmentRow)
            .where(EnrollmentRow.user_id == user_id)
            .order_by(EnrollmentRow.last_accessed_at.desc())
        )
        return await self._all(Enrollment, stmt)

    async def _update_enrollment(self, user_id: str, course_id: str, **values: Any) -> Enrollment | None:
        async with self._session_factory() as session, session.begin():
            stmt = update(EnrollmentRow).where(*self._enrollment_key(user_id, course_id)).values(**values)
            if await self._execute_update(session, stmt) == 0:
                return None
            row = await session.scalar(select(EnrollmentRow).where(*self._enrollment_key(user_id, course_id)))
            return Enrollment.model_validate(row)

    async def update_enrollment_progress(
        self, user_id: str, course_id: str, progress: int, time_spent: int | None = None
    ) -> Enrollment | None:
        values: dict[str, Any] = {
            "progress": case(
                (EnrollmentRow.status == ENROLLMENT_COMPLETED, EnrollmentRow.progress),
                else_=clamp_progress(progress),
            ),
            "last_accessed_at": utcnow(),
        }
        if time_spent is not None:
            values["time_spent"] = EnrollmentRow.time_spent + max(0, time_spent)
        return await self._update_enrollment(user_id, course_id, **values)

    async def complete_enrollment(self, user_id: str, course_id: str) -> Enrollment | None:
        now = utcnow()
        return await self._update_enrollment(
            user_id,
            course_id,
            progress=100,
            status=ENROLLMENT_COMPLETED,
            completed_at=func.coalesce(EnrollmentRow.completed_at, now),
            last_accessed_at=now,
        )

    # --- Lesson progress ---

    async def update_lesson_progress(
        self,
        enrollment_id: str,
        lesson_id: str,
        user_id: str,
        completed: bool,
        time_spent: int | None = None,
    ) -> LessonProgress:
        now = utcnow()
        key = (
            LessonProgressRow.enrollment_id == enrollment_id,
            LessonProgressRow.lesson_id == lesson_id,
            LessonProgressRow.user_id == user_id,
        )
        upsert = self._insert(LessonProgressRow).values(
            id=new_id(),
            enrollment_id=enrollment_id,
            lesson_id=lesson_id,
            user_id=user_id,
            completed=False,
            time_spent=max(0, time_spent or 0),
            last_accessed_at=now,
        )
        upsert = upsert.on_conflict_do_update(
            index_elements=["enrollment_id", "lesson_id", "user_id"],
            set_={
                "time_spent": LessonProgressRow.time_spent + upsert.excluded.time_spent,
                "last_accessed_at": upsert.excluded.last_accessed_at,
            },
        )
        async with self._session_factory() as session, session.begin():
            await session.execute(upsert)
            if completed:
                # Only the caller that flips false -> true stamps completed_at.
                await self._execute_update(
                    session,
                    update(LessonProgressRow)
                    .where(*key, LessonProgressRow.completed.is_(False))
                    .values(completed=True, completed_at=now),
                )
            row = await session.scalar(select(LessonProgressRow).where(*key))
            return LessonProgress.model_validate(row)

    async def get_lesson_progress(self, user_id: str, lesson_id: str) -> LessonProgress | None:
        stmt = (
            select(LessonProgressRow)
            .where(LessonProgressRow.user_id == user_id, LessonProgressRow.lesson_id == lesson_id)
            .order_by(LessonProgressRow.last_accessed_at.desc())
        )
        return await self._first(LessonProgress, stmt)

    async def get_enrollment_lesson_progress(self, enrollment_id: str) -> list[LessonProgress]:
        stmt = (
            select(LessonProgressRow)
            .where(LessonProgressRow.enrollment_id == enrollment_id)
            .order_by(LessonProgressRow.last_accessed_at.desc())
        )
        return await self._all(LessonProgress, stmt)

    # --- Typing challenges ---

    async def create_typing_challenge(
        self, data: TypingChallengeCreate, challenge_id: str | None = None
    ) -> TypingChallenge:
        row = TypingChallengeRow(id=challenge_id or new_id(), created_at=utcnow(), **data.model_dump())
        return await self._add(TypingChallenge, row)

    async def get_typing_challenge(self, challenge_id: str) -> TypingChallenge | None:
        return await self._get(TypingChallenge, TypingChallengeRow, challenge_id)

    async def list_typing_challenges(
        self, language: str | None = None, difficulty: str | None = None
    ) -> list[TypingChallenge]:
        stmt = select(TypingChallengeRow)
        if language is not None:
            stmt = stmt.where(TypingChallengeRow.language == language)
        if difficulty is not None:
            stmt = stmt.where(TypingChallengeRow.difficulty == difficulty)
        return await self._all(TypingChallenge, stmt.order_by(TypingChallengeRow.created_at))

    async def add_typing_score(self, data: TypingScoreCreate) -> TypingScore:
        return await self._add(TypingScore, TypingScoreRow(id=new_id(), completed_at=utcnow(), **data.model_dump()))

    async def list_typing_scores(self, user_id: str) -> list[TypingScore]:
        stmt = select(TypingScoreRow).where(TypingScoreRow.user_id == user_id).order_by(TypingScoreRow.completed_at)
        return await self._all(TypingScore, stmt)

    async def get_top_typing_scores(self, limit: int = 10) -> list[TypingScore]:
        stmt = (
            select(TypingScoreRow)
            .order_by(TypingScoreRow.wpm.desc(), TypingScoreRow.completed_at.asc())
            .limit(limit)
        )
        return await self._all(TypingScore, stmt)

    # --- Quiz ---

    async def create_quiz_question(
        self, data: QuizQuestionCreate, question_id: str | None = None
    ) -> QuizQuestion:
        row = QuizQuestionRow(id=question_id or new_id(), created_at=utcnow(), **data.model_dump())
        return await self._add(QuizQuestion, row)

    async def get_quiz_question(self, question_id: str) -> QuizQuestion | None:
        return await self._get(QuizQuestion, QuizQuestionRow, question_id)

    async def list_quiz_questions(
        self, topic: str | None = None, difficulty: str | None = None
    ) -> list[QuizQuestion]:
        stmt = select(QuizQuestionRow)
        if topic is not None:
            stmt = stmt.where(QuizQuestionRow.topic == topic)
        if difficulty is not None:
            stmt = stmt.where(QuizQuestionRow.difficulty == difficulty)
        return await self._all(QuizQuestion, stmt.order_by(QuizQuestionRow.created_at))

    async def add_quiz_attempt(self, data: QuizAttemptCreate) -> QuizAttempt:
        return await self._add(QuizAttempt, QuizAttemptRow(id=new_id(), completed_at=utcnow(), **data.model_dump()))

    async def list_quiz_attempts(self, user_id: str) -> list[QuizAttempt]:
        stmt = select(QuizAttemptRow).where(QuizAttemptRow.user_id == user_id).order_by(QuizAttemptRow.completed_at)
        return await self._all(QuizAttempt, stmt)

    # --- Brain teasers ---

    async def create_brain_teaser(self, data: BrainTeaserCreate, teaser_id: str | None = None) -> BrainTeaser:
        row = BrainTeaserRow(id=teaser_id or new_id(), created_at=utcnow(), **data.model_dump())
        return await self._add(BrainTeaser, row, f"A brain teaser already exists for {data.date.isoformat()}")

    async def get_brain_teaser(self, teaser_id: str) -> BrainTeaser | None:
        return await self._get(BrainTeaser, BrainTeaserRow, teaser_id)

    async def get_brain_teaser_for_date(self, day: date) -> BrainTeaser | None:
        return await self._first(BrainTeaser, select(BrainTeaserRow).where(BrainTeaserRow.date == day))

    @staticmethod
    def _attempt_key(user_id: str, teaser_id: str) -> tuple[Any, ...]:
        return (TeaserAttemptRow.user_id == user_id, TeaserAttemptRow.teaser_id == teaser_id)

    async def get_teaser_attempt(self, user_id: str, teaser_id: str) -> TeaserAttempt | None:
        return await self._first(TeaserAttempt, select(TeaserAttemptRow).where(*self._attempt_key(user_id, teaser_id)))

    async def list_teaser_attempts(self, user_id: str) -> list[TeaserAttempt]:
        stmt = (
            select(TeaserAttemptRow)
            .where(TeaserAttemptRow.user_id == user_id)
            .order_by(TeaserAttemptRow.attempted_at.desc())
        )
        return await self._all(TeaserAttempt, stmt)

    async def _ensure_attempt(self, session: AsyncSession, user_id: str, teaser_id: str) -> None:
        stmt = (
            self._insert(TeaserAttemptRow)
            .values(
                id=new_id(),
                user_id=user_id,
                teaser_id=teaser_id,
                solved=False,
                hints_used=0,
                attempts=0,
                attempted_at=utcnow(),
            )
            .on_conflict_do_nothing(index_elements=["user_id", "teaser_id"])
        )
        await session.execute(stmt)

    async def submit_teaser_answer(self, user_id: str, teaser_id: str, answer: str) -> TeaserResult | None:
        async with self._session_factory() as session, session.begin():
            teaser = await session.get(BrainTeaserRow, teaser_id)
            if teaser is None:
                return None
            correct = answers_match(answer, teaser.solution)
            key = self._attempt_key(user_id, teaser_id)

            await self._ensure_attempt(session, user_id, teaser_id)
            await self._execute_update(
                session,
                update(TeaserAttemptRow)
                .where(*key)
                .values(attempts=TeaserAttemptRow.attempts + 1, user_answer=answer),
            )
            newly_solved = False
            if correct:
                solved = await self._execute_update(
                    session,
                    update(TeaserAttemptRow)
                    .where(*key, TeaserAttemptRow.solved.is_(False))
                    .values(solved=True, solved_at=utcnow()),
                )
                newly_solved = solved == 1
            row = await session.scalar(select(TeaserAttemptRow).where(*key))
            attempt = TeaserAttempt.model_validate(row)

        return TeaserResult(correct=correct, newly_solved=newly_solved, attempt=attempt)

    async def use_teaser_hint(self, user_id: str, teaser_id: str) -> TeaserAttempt | None:
        async with self._session_factory() as session, session.begin():
            teaser = await session.get(BrainTeaserRow, teaser_id)
            if teaser is None:
                return None
            available = len(BrainTeaser.model_validate(teaser).hints)
            key = self._attempt_key(user_id, teaser_id)

            await self._ensure_attempt(session, user_id, teaser_id)
            await self._execute_update(
                session,
                update(TeaserAttemptRow)
                .where(*key, TeaserAttemptRow.solved.is_(False), TeaserAttemptRow.hints_used < available)
                .values(hints_used=TeaserAttemptRow.hints_used + 1),
            )
            row = await session.scalar(select(TeaserAttemptRow).where(*key))
            return TeaserAttempt.model_validate(row)

    # --- Marathons ---

    async def create_marathon(self, data: MarathonCreate, marathon_id: str | None = None) -> Marathon:
        row = MarathonRow(
            id=marathon_id or new_id(), participant_count=0, created_at=utcnow(), **data.model_dump()
        )
        return await self._add(Marathon, row)

    async def get_marathon(self, marathon_id: str) -> Marathon | None:
        return await self._get(Marathon, MarathonRow, marathon_id)

    async def get_active_marathon(self) -> Marathon | None:
        stmt = select(MarathonRow).where(MarathonRow.status == MARATHON_LIVE).order_by(MarathonRow.start_time)
        return await self._first(Marathon, stmt)

    async def list_marathons(self, status: str | None = None) -> list[Marathon]:
        stmt = select(MarathonRow)
        if status is not None:
            stmt = stmt.where(MarathonRow.status == status)
        return await self._all(Marathon, stmt.order_by(MarathonRow.start_time))

    @staticmethod
    def _participant_key(marathon_id: str, user_id: str) -> tuple[Any, ...]:
        return (MarathonParticipantRow.marathon_id == marathon_id, MarathonParticipantRow.user_id == user_id)

    @staticmethod
    def _standings(marathon_id: str) -> Select:
        return (
            select(MarathonParticipantRow)
            .where(MarathonParticipantRow.marathon_id == marathon_id)
            .order_by(
                MarathonParticipantRow.total_score.desc(),
                MarathonParticipantRow.last_submission_at.asc().nulls_last(),
                MarathonParticipantRow.registered_at.asc(),
            )
        )

    async def register_for_marathon(self, marathon_id: str, user_id: str) -> MarathonParticipant | None:
        key = self._participant_key(marathon_id, user_id)
        async with self._session_factory() as session, session.begin():
            existing = await session.scalar(select(MarathonParticipantRow).where(*key))
            if existing is not None:
                return MarathonParticipant.model_validate(existing)
            if await session.get(MarathonRow, marathon_id) is None:
                return None

            stmt = (
                self._insert(MarathonParticipantRow)
                .values(
                    id=new_id(),
                    marathon_id=marathon_id,
                    user_id=user_id,
                    problems_solved=0,
                    total_score=0,
                    rank=0,
                    registered_at=utcnow(),
                )
                .on_conflict_do_nothing(index_elements=["marathon_id", "user_id"])
                .returning(MarathonParticipantRow.id)
            )
            if (await session.execute(stmt)).scalar_one_or_none() is not None:
                await self._execute_update(
                    session,
                    update(MarathonRow)
                    .where(MarathonRow.id == marathon_id)
                    .values(participant_count=MarathonRow.participant_count + 1),
                )
            row = await session.scalar(select(MarathonParticipantRow).where(*key))
            return MarathonParticipant.model_validate(row)

    async def get_marathon_participant(self, marathon_id: str, user_id: str) -> MarathonParticipant | None:
        stmt = select(MarathonParticipantRow).where(*self._participant_key(marathon_id, user_id))
        return await self._first(MarathonParticipant, stmt)

    async def record_marathon_result(
        self, marathon_id: str, user_id: str, points: int, solved: int = 1
    ) -> MarathonParticipant | None:
        key = self._participant_key(marathon_id, user_id)
        async with self._session_factory() as session, session.begin():
            # Row lock on PostgreSQL so concurrent results re-rank one at a time.
            await session.execute(select(MarathonRow.id).where(MarathonRow.id == marathon_id).with_for_update())
            updated = await self._execute_update(
                session,
                update(MarathonParticipantRow)
                .where(*key)
                .values(
                    total_score=MarathonParticipantRow.total_score + points,
                    problems_solved=MarathonParticipantRow.problems_solved + max(0, solved),
                    last_submission_at=utcnow(),
                ),
            )
            if updated == 0:
                return None

            standings = (await session.scalars(self._standings(marathon_id))).all()
            for position, row in enumerate(standings, start=1):
                if row.rank != position:
                    row.rank = position
            await session.flush()
            row = await session.scalar(select(MarathonParticipantRow).where(*key))
            return MarathonParticipant.model_validate(row)

    async def get_marathon_leaderboard(self, marathon_id: str) -> list[MarathonParticipant]:
        board = await self._all(MarathonParticipant, self._standings(marathon_id))
        for position, participant in enumerate(board, start=1):
            participant.rank = position
        return board

    async def list_marathon_participations(self, user_id: str) -> list[MarathonParticipant]:
        stmt = (
            select(MarathonParticipantRow)
            .where(MarathonParticipantRow.user_id == user_id)
            .order_by(MarathonParticipantRow.registered_at.desc())
        )
        return await self._all(MarathonParticipant, stmt)
