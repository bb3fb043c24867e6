"""Challenge aggregation: stats, leaderboards, calendars, sampling and grading.

Everything here is derived from storage reads at call time; no aggregate is
cached between calls.
"""

from __future__ import annotations

import math
import random
from collections.abc import Sequence
from datetime import date

import structlog

from codearena.challenges.schemas import (
    BrainTeaser,
    BrainTeaserStats,
    CalendarEntry,
    ChallengeStats,
    MarathonStats,
    QuizAttempt,
    QuizAttemptCreate,
    QuizQuestion,
    QuizStats,
    TeaserAttempt,
    TeaserResult,
    TypingChallenge,
    TypingLeaderboardEntry,
    TypingScore,
    TypingScoreCreate,
    TypingStats,
)
from codearena.challenges.streaks import compute_streak
from codearena.storage.base import Storage, utc_today

logger = structlog.get_logger()

LEADERBOARD_SIZE = 10
DEFAULT_QUIZ_SIZE = 10
UNKNOWN_USERNAME = "Unknown"


def rounded_mean(values: Sequence[int]) -> int:
    """Mean rounded half-up; 0 for an empty sequence."""
    if not values:
        return 0
    return math.floor(sum(values) / len(values) + 0.5)


def seconds_to_minutes(seconds: int) -> int:
    return math.ceil(max(0, seconds) / 60)


class ChallengeService:
    """Derived views over typing, quiz, brain-teaser and marathon records."""

    def __init__(self, storage: Storage, rng: random.Random | None = None) -> None:
        self.storage = storage
        self._rng = rng or random.Random()

    # --- Stats ---

    async def get_challenge_stats(self, user_id: str, today: date | None = None) -> ChallengeStats:
        """Per-user rollup across every challenge type."""
        typing_scores = await self.storage.list_typing_scores(user_id)
        quiz_attempts = await self.storage.list_quiz_attempts(user_id)
        teaser_attempts = await self.storage.list_teaser_attempts(user_id)
        participations = await self.storage.list_marathon_participations(user_id)

        wpms = [s.wpm for s in typing_scores]
        calendar = await self._calendar_from_attempts(teaser_attempts)
        ranks = [p.rank for p in participations if p.rank > 0]

        return ChallengeStats(
            typing=TypingStats(
                completed=len(typing_scores),
                average_wpm=rounded_mean(wpms),
                best_wpm=max(wpms, default=0),
            ),
            quiz=QuizStats(
                completed=len(quiz_attempts),
                average_score=rounded_mean([a.score for a in quiz_attempts]),
            ),
            brain_teaser=BrainTeaserStats(
                solved=sum(1 for a in teaser_attempts if a.solved),
                streak=compute_streak(calendar, today or utc_today()),
            ),
            marathon=MarathonStats(
                participated=len(participations),
                best_rank=min(ranks, default=0),
            ),
        )

    # --- Typing ---

    async def get_typing_leaderboard(self, limit: int = LEADERBOARD_SIZE) -> list[TypingLeaderboardEntry]:
        """Top scores by wpm (earliest first on ties), joined with usernames."""
        scores = await self.storage.get_top_typing_scores(limit)
        usernames: dict[str, str] = {}
        entries = []
        for position, score in enumerate(scores, start=1):
            if score.user_id not in usernames:
                user = await self.storage.get_user(score.user_id)
                usernames[score.user_id] = user.username if user else UNKNOWN_USERNAME
            entries.append(
                TypingLeaderboardEntry(
                    rank=position,
                    user_id=score.user_id,
                    username=usernames[score.user_id],
                    challenge_id=score.challenge_id,
                    wpm=score.wpm,
                    accuracy=score.accuracy,
                    completed_at=score.completed_at,
                )
            )
        return entries

    async def pick_typing_challenge(
        self, language: str | None = None, difficulty: str | None = None
    ) -> TypingChallenge | None:
        pool = tuple(await self.storage.list_typing_challenges(language, difficulty))
        return self._rng.choice(pool) if pool else None

    async def submit_typing_score(
        self, user_id: str, challenge_id: str, wpm: int, accuracy: int, time_spent: int
    ) -> TypingScore:
        """Record a finished typing run and credit the time as daily activity."""
        score = await self.storage.add_typing_score(
            TypingScoreCreate(
                user_id=user_id,
                challenge_id=challenge_id,
                wpm=max(0, wpm),
                accuracy=min(100, max(0, accuracy)),
                time_spent=max(0, time_spent),
            )
        )
        await self.storage.track_activity(user_id, seconds_to_minutes(time_spent), 0)
        return score

    # --- Quiz ---

    async def get_quiz_questions(
        self, topic: str, difficulty: str, count: int = DEFAULT_QUIZ_SIZE
    ) -> list[QuizQuestion]:
        """Sample without replacement; returns fewer than ``count`` for a small pool."""
        pool = tuple(await self.storage.list_quiz_questions(topic, difficulty))
        if count <= 0 or not pool:
            return []
        return self._rng.sample(pool, min(count, len(pool)))

    async def submit_quiz(
        self,
        user_id: str,
        topic: str,
        question_ids: Sequence[str],
        answers: Sequence[int | None],
        time_spent: int,
    ) -> QuizAttempt:
        """Grade answers against the stored questions and record the attempt.

        Answers are matched to questions by position. Unknown question ids
        and missing answers count as wrong.
        """
        padded = list(answers[: len(question_ids)]) + [None] * (len(question_ids) - len(answers))
        score = 0
        for question_id, answer in zip(question_ids, padded):
            question = await self.storage.get_quiz_question(question_id)
            if question is not None and answer == question.correct_answer:
                score += 1

        attempt = await self.storage.add_quiz_attempt(
            QuizAttemptCreate(
                user_id=user_id,
                question_ids=list(question_ids),
                user_answers=padded,
                score=score,
                total_questions=len(question_ids),
                topic=topic,
                time_spent=max(0, time_spent),
            )
        )
        await self.storage.track_activity(user_id, seconds_to_minutes(time_spent), score)
        return attempt

    # --- Brain teasers ---

    async def get_daily_teaser(self, day: date | None = None) -> BrainTeaser | None:
        return await self.storage.get_brain_teaser_for_date(day or utc_today())

    async def _calendar_from_attempts(self, attempts: Sequence[TeaserAttempt]) -> list[CalendarEntry]:
        entries = []
        for attempt in attempts:
            teaser = await self.storage.get_brain_teaser(attempt.teaser_id)
            day = teaser.date if teaser is not None else attempt.attempted_at.date()
            entries.append(CalendarEntry(date=day, solved=attempt.solved))
        entries.sort(key=lambda e: e.date, reverse=True)
        return entries

    async def get_teaser_calendar(self, user_id: str) -> list[CalendarEntry]:
        """One {date, solved} entry per attempted teaser, newest first."""
        return await self._calendar_from_attempts(await self.storage.list_teaser_attempts(user_id))

    async def submit_teaser_answer(self, user_id: str, teaser_id: str, answer: str) -> TeaserResult | None:
        """Check an answer; the first correct one updates the user's streak."""
        result = await self.storage.submit_teaser_answer(user_id, teaser_id, answer)
        if result is None or not result.newly_solved:
            return result

        streak = compute_streak(await self.get_teaser_calendar(user_id), utc_today())
        await self.storage.update_user(user_id, streak=streak, last_daily_solve=result.attempt.solved_at)
        await self.storage.track_activity(user_id, 0, 1)
        logger.info("brain_teaser_solved", user_id=user_id, teaser_id=teaser_id, streak=streak)
        return result

    async def use_teaser_hint(self, user_id: str, teaser_id: str) -> TeaserAttempt | None:
        return await self.storage.use_teaser_hint(user_id, teaser_id)
