"""Challenge records: typing races, quizzes, daily brain teasers, marathons."""

from __future__ import annotations

from datetime import date as calendar_date
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

MARATHON_UPCOMING = "upcoming"
MARATHON_LIVE = "live"
MARATHON_COMPLETED = "completed"


# --- Typing ---


class TypingChallenge(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    code: str
    language: str
    difficulty: str
    line_count: int
    created_at: datetime


class TypingChallengeCreate(BaseModel):
    title: str
    code: str
    language: str
    difficulty: str
    line_count: int


class TypingScore(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    challenge_id: str
    wpm: int
    accuracy: int
    time_spent: int
    completed_at: datetime


class TypingScoreCreate(BaseModel):
    user_id: str
    challenge_id: str
    wpm: int
    accuracy: int
    time_spent: int


class TypingLeaderboardEntry(BaseModel):
    rank: int
    user_id: str
    username: str
    challenge_id: str
    wpm: int
    accuracy: int
    completed_at: datetime


# --- Quiz ---


class QuizQuestion(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    question: str
    code_snippet: str | None = None
    options: list[str]
    correct_answer: int
    topic: str
    difficulty: str
    explanation: str
    time_limit: int = 60
    created_at: datetime


class QuizQuestionCreate(BaseModel):
    question: str
    code_snippet: str | None = None
    options: list[str]
    correct_answer: int
    topic: str
    difficulty: str
    explanation: str
    time_limit: int = 60


class QuizAttempt(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    question_ids: list[str]
    user_answers: list[int | None]
    score: int
    total_questions: int
    topic: str
    time_spent: int
    completed_at: datetime


class QuizAttemptCreate(BaseModel):
    user_id: str
    question_ids: list[str]
    user_answers: list[int | None]
    score: int
    total_questions: int
    topic: str
    time_spent: int


# --- Brain teasers ---


class BrainTeaser(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    date: calendar_date
    title: str
    puzzle: str
    hint1: str | None = None
    hint2: str | None = None
    hint3: str | None = None
    solution: str
    difficulty: str
    explanation: str
    category: str
    created_at: datetime

    @property
    def hints(self) -> list[str]:
        return [h for h in (self.hint1, self.hint2, self.hint3) if h]


class BrainTeaserCreate(BaseModel):
    date: calendar_date
    title: str
    puzzle: str
    hint1: str | None = None
    hint2: str | None = None
    hint3: str | None = None
    solution: str
    difficulty: str
    explanation: str
    category: str


class TeaserAttempt(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    teaser_id: str
    solved: bool = False
    hints_used: int = 0
    attempts: int = 0
    user_answer: str | None = None
    solved_at: datetime | None = None
    attempted_at: datetime


class TeaserResult(BaseModel):
    """Outcome of a single answer submission."""

    correct: bool
    newly_solved: bool
    attempt: TeaserAttempt


class CalendarEntry(BaseModel):
    date: calendar_date
    solved: bool


# --- Marathons ---


class Marathon(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str
    start_time: datetime
    end_time: datetime
    problem_ids: list[str] = Field(default_factory=list)
    status: str = MARATHON_UPCOMING
    difficulty: str
    participant_count: int = 0
    created_at: datetime


class MarathonCreate(BaseModel):
    title: str
    description: str
    start_time: datetime
    end_time: datetime
    problem_ids: list[str] = Field(default_factory=list)
    status: str = MARATHON_UPCOMING
    difficulty: str


class MarathonParticipant(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    marathon_id: str
    user_id: str
    problems_solved: int = 0
    total_score: int = 0
    rank: int = 0
    last_submission_at: datetime | None = None
    registered_at: datetime


# --- Aggregates ---


class TypingStats(BaseModel):
    completed: int = 0
    average_wpm: int = 0
    best_wpm: int = 0


class QuizStats(BaseModel):
    completed: int = 0
    average_score: int = 0


class BrainTeaserStats(BaseModel):
    solved: int = 0
    streak: int = 0


class MarathonStats(BaseModel):
    participated: int = 0
    best_rank: int = 0


class ChallengeStats(BaseModel):
    typing: TypingStats
    quiz: QuizStats
    brain_teaser: BrainTeaserStats
    marathon: MarathonStats
