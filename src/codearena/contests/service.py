"""Platform-level contest aggregates and submission verdicts."""

from __future__ import annotations

import structlog

from codearena.contests.schemas import (
    SUBMISSION_ACCEPTED,
    SUBMISSION_PENDING,
    SUBMISSION_WRONG_ANSWER,
    PlatformStats,
    Submission,
)
from codearena.storage.base import Storage

logger = structlog.get_logger()

SUBMISSION_CREDIT_MINUTES = 15


async def get_platform_stats(storage: Storage) -> PlatformStats:
    """Live contests, summed participants, and distinct accepted (user, problem) pairs."""
    contests = await storage.get_all_contests()
    solved: set[tuple[str, str]] = set()
    for contest in contests:
        for problem in await storage.get_problems_by_contest(contest.id):
            for submission in await storage.get_submissions_by_problem(problem.id):
                if submission.status == SUBMISSION_ACCEPTED:
                    solved.add((submission.user_id, submission.problem_id))

    return PlatformStats(
        active_contests=sum(1 for c in contests if c.status == "live"),
        participants=sum(c.participants for c in contests),
        problems_solved=len(solved),
    )


async def record_verdict(storage: Storage, submission_id: str, accepted: bool) -> Submission | None:
    """Settle a pending submission and credit the attempt as daily activity.

    An accepted submission scores the problem's points. A submission that
    already has a verdict is returned unchanged and earns no credit.
    """
    submission = await storage.get_submission(submission_id)
    if submission is None or submission.status != SUBMISSION_PENDING:
        return submission

    problem = await storage.get_problem(submission.problem_id)
    status = SUBMISSION_ACCEPTED if accepted else SUBMISSION_WRONG_ANSWER
    score = problem.points if accepted and problem is not None else 0
    settlement = await storage.settle_submission(submission_id, status, score)
    if settlement is None or not settlement.transitioned:
        # A concurrent verdict got there first.
        return settlement.submission if settlement is not None else None

    await storage.track_activity(submission.user_id, SUBMISSION_CREDIT_MINUTES, 1 if accepted else 0)
    logger.info("submission_settled", submission_id=submission_id, status=status, score=score)
    return settlement.submission
