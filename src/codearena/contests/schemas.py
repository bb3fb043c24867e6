"""Contest, problem and submission records."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

CONTEST_STATUSES = ("upcoming", "live", "completed")
SUBMISSION_PENDING = "pending"
SUBMISSION_ACCEPTED = "accepted"
SUBMISSION_WRONG_ANSWER = "wrong_answer"


class Contest(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str | None = None
    start_time: datetime
    end_time: datetime
    status: str = "upcoming"
    participants: int = 0
    created_by: str


class ContestCreate(BaseModel):
    title: str
    description: str | None = None
    start_time: datetime
    end_time: datetime
    status: str = "upcoming"
    created_by: str


class Problem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    contest_id: str
    title: str
    description: str
    difficulty: str
    points: int = 100
    test_cases: list[dict[str, Any]] = Field(default_factory=list)
    time_limit: int | None = None
    memory_limit: int | None = None


class ProblemCreate(BaseModel):
    contest_id: str
    title: str
    description: str
    difficulty: str
    points: int = 100
    test_cases: list[dict[str, Any]] = Field(default_factory=list)
    time_limit: int | None = None
    memory_limit: int | None = None


class Submission(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    problem_id: str
    user_id: str
    contest_id: str | None = None
    code: str
    language: str
    status: str = SUBMISSION_PENDING
    score: int = 0
    submitted_at: datetime


class SubmissionCreate(BaseModel):
    problem_id: str
    user_id: str
    contest_id: str | None = None
    code: str
    language: str


class SubmissionSettlement(BaseModel):
    """A status update and whether this call moved the submission out of pending."""

    submission: Submission
    transitioned: bool


class PlatformStats(BaseModel):
    active_contests: int
    participants: int
    problems_solved: int
