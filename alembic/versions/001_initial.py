"""Initial schema: users, contests, courses, challenges.

Creates every table of the relational storage backend together with the
natural-key unique constraints the atomic upserts rely on.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

JSON = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _id() -> sa.Column:
    return sa.Column("id", sa.String(64), primary_key=True)


def upgrade() -> None:
    # --- Users ---
    op.create_table(
        "users",
        _id(),
        sa.Column("username", sa.Text, nullable=False),
        sa.Column("password", sa.Text, nullable=False),
        sa.Column("role", sa.String(16), nullable=False, server_default="user"),
        sa.Column("streak", sa.Integer, nullable=False, server_default="0"),
        sa.Column("last_daily_solve", sa.DateTime(timezone=True), nullable=True),
        sa.Column("google_id", sa.String(128), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("username", name="uq_users_username"),
        sa.UniqueConstraint("google_id", name="uq_users_google_id"),
    )

    op.create_table(
        "user_activity",
        _id(),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("date", sa.Date, nullable=False),
        sa.Column("minutes_active", sa.Integer, nullable=False, server_default="0"),
        sa.Column("questions_solved", sa.Integer, nullable=False, server_default="0"),
        sa.UniqueConstraint("user_id", "date", name="uq_user_activity_user_date"),
    )
    op.create_index("ix_user_activity_user_id", "user_activity", ["user_id"])

    # --- Contests ---
    op.create_table(
        "contests",
        _id(),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="upcoming"),
        sa.Column("participants", sa.Integer, nullable=False, server_default="0"),
        sa.Column("created_by", sa.String(64), nullable=False),
    )
    op.create_index("ix_contests_start_time", "contests", ["start_time"])

    op.create_table(
        "problems",
        _id(),
        sa.Column("contest_id", sa.String(64), nullable=False),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("difficulty", sa.String(16), nullable=False),
        sa.Column("points", sa.Integer, nullable=False, server_default="100"),
        sa.Column("test_cases", JSON, nullable=False),
        sa.Column("time_limit", sa.Integer, nullable=True),
        sa.Column("memory_limit", sa.Integer, nullable=True),
    )
    op.create_index("ix_problems_contest_id", "problems", ["contest_id"])

    op.create_table(
        "submissions",
        _id(),
        sa.Column("problem_id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("contest_id", sa.String(64), nullable=True),
        sa.Column("code", sa.Text, nullable=False),
        sa.Column("language", sa.String(32), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="pending"),
        sa.Column("score", sa.Integer, nullable=False, server_default="0"),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_submissions_problem_id", "submissions", ["problem_id"])
    op.create_index("ix_submissions_user_id", "submissions", ["user_id"])

    # --- Courses ---
    op.create_table(
        "courses",
        _id(),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("level", sa.String(32), nullable=False),
        sa.Column("duration", sa.String(64), nullable=False),
        sa.Column("difficulty", sa.String(16), nullable=False),
        sa.Column("topics", JSON, nullable=False),
        sa.Column("prerequisites", sa.Text, nullable=True),
        sa.Column("instructor", sa.Text, nullable=False),
        sa.Column("rating", sa.Float, nullable=True),
        sa.Column("students", sa.Integer, nullable=False, server_default="0"),
        sa.Column("price", sa.String(32), nullable=False),
        sa.Column("thumbnail", sa.Text, nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "lessons",
        _id(),
        sa.Column("course_id", sa.String(64), nullable=False),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("order", sa.Integer, nullable=False),
        sa.Column("duration", sa.Integer, nullable=True),
        sa.Column("video_url", sa.Text, nullable=True),
        sa.Column("type", sa.String(16), nullable=False, server_default="video"),
        sa.Column("quiz_data", JSON, nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_lessons_course_id", "lessons", ["course_id"])

    op.create_table(
        "enrollments",
        _id(),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("course_id", sa.String(64), nullable=False),
        sa.Column("enrolled_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("progress", sa.Integer, nullable=False, server_default="0"),
        sa.Column("time_spent", sa.Integer, nullable=False, server_default="0"),
        sa.Column("status", sa.String(16), nullable=False, server_default="active"),
        sa.Column("last_accessed_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("user_id", "course_id", name="uq_enrollment_user_course"),
    )
    op.create_index("ix_enrollments_user_id", "enrollments", ["user_id"])

    op.create_table(
        "lesson_progress",
        _id(),
        sa.Column("enrollment_id", sa.String(64), nullable=False),
        sa.Column("lesson_id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("completed", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("time_spent", sa.Integer, nullable=False, server_default="0"),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_accessed_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("enrollment_id", "lesson_id", "user_id", name="uq_lesson_progress_key"),
    )
    op.create_index("ix_lesson_progress_enrollment_id", "lesson_progress", ["enrollment_id"])

    # --- Typing ---
    op.create_table(
        "typing_challenges",
        _id(),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("code", sa.Text, nullable=False),
        sa.Column("language", sa.String(32), nullable=False),
        sa.Column("difficulty", sa.String(16), nullable=False),
        sa.Column("line_count", sa.Integer, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "typing_scores",
        _id(),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("challenge_id", sa.String(64), nullable=False),
        sa.Column("wpm", sa.Integer, nullable=False),
        sa.Column("accuracy", sa.Integer, nullable=False),
        sa.Column("time_spent", sa.Integer, nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_typing_scores_user_id", "typing_scores", ["user_id"])
    op.create_index("ix_typing_scores_wpm", "typing_scores", ["wpm"])

    # --- Quiz ---
    op.create_table(
        "quiz_questions",
        _id(),
        sa.Column("question", sa.Text, nullable=False),
        sa.Column("code_snippet", sa.Text, nullable=True),
        sa.Column("options", JSON, nullable=False),
        sa.Column("correct_answer", sa.Integer, nullable=False),
        sa.Column("topic", sa.String(64), nullable=False),
        sa.Column("difficulty", sa.String(16), nullable=False),
        sa.Column("explanation", sa.Text, nullable=False),
        sa.Column("time_limit", sa.Integer, nullable=False, server_default="60"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_quiz_questions_topic", "quiz_questions", ["topic"])

    op.create_table(
        "quiz_attempts",
        _id(),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("question_ids", JSON, nullable=False),
        sa.Column("user_answers", JSON, nullable=False),
        sa.Column("score", sa.Integer, nullable=False),
        sa.Column("total_questions", sa.Integer, nullable=False),
        sa.Column("topic", sa.String(64), nullable=False),
        sa.Column("time_spent", sa.Integer, nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_quiz_attempts_user_id", "quiz_attempts", ["user_id"])

    # --- Brain teasers ---
    op.create_table(
        "brain_teasers",
        _id(),
        sa.Column("date", sa.Date, nullable=False),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("puzzle", sa.Text, nullable=False),
        sa.Column("hint1", sa.Text, nullable=True),
        sa.Column("hint2", sa.Text, nullable=True),
        sa.Column("hint3", sa.Text, nullable=True),
        sa.Column("solution", sa.Text, nullable=False),
        sa.Column("difficulty", sa.String(16), nullable=False),
        sa.Column("explanation", sa.Text, nullable=False),
        sa.Column("category", sa.String(32), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("date", name="uq_brain_teasers_date"),
    )

    op.create_table(
        "teaser_attempts",
        _id(),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("teaser_id", sa.String(64), nullable=False),
        sa.Column("solved", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("hints_used", sa.Integer, nullable=False, server_default="0"),
        sa.Column("attempts", sa.Integer, nullable=False, server_default="0"),
        sa.Column("user_answer", sa.Text, nullable=True),
        sa.Column("solved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("attempted_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("user_id", "teaser_id", name="uq_teaser_attempt_user_teaser"),
    )
    op.create_index("ix_teaser_attempts_user_id", "teaser_attempts", ["user_id"])

    # --- Marathons ---
    op.create_table(
        "marathons",
        _id(),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("problem_ids", JSON, nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="upcoming"),
        sa.Column("difficulty", sa.String(16), nullable=False),
        sa.Column("participant_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "marathon_participants",
        _id(),
        sa.Column("marathon_id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("problems_solved", sa.Integer, nullable=False, server_default="0"),
        sa.Column("total_score", sa.Integer, nullable=False, server_default="0"),
        sa.Column("rank", sa.Integer, nullable=False, server_default="0"),
        sa.Column("last_submission_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("registered_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("marathon_id", "user_id", name="uq_marathon_participant"),
    )
    op.create_index("ix_marathon_participants_marathon_id", "marathon_participants", ["marathon_id"])
    op.create_index("ix_marathon_participants_user_id", "marathon_participants", ["user_id"])


def downgrade() -> None:
    op.drop_table("marathon_participants")
    op.drop_table("marathons")
    op.drop_table("teaser_attempts")
    op.drop_table("brain_teasers")
    op.drop_table("quiz_attempts")
    op.drop_table("quiz_questions")
    op.drop_table("typing_scores")
    op.drop_table("typing_challenges")
    op.drop_table("lesson_progress")
    op.drop_table("enrollments")
    op.drop_table("lessons")
    op.drop_table("courses")
    op.drop_table("submissions")
    op.drop_table("problems")
    op.drop_table("contests")
    op.drop_table("user_activity")
    op.drop_table("users")
