"""Platform stats and submission verdicts."""

import asyncio

import pytest

from codearena.contests.schemas import SUBMISSION_ACCEPTED, SUBMISSION_WRONG_ANSWER, SubmissionCreate
from codearena.contests.service import SUBMISSION_CREDIT_MINUTES, get_platform_stats, record_verdict
from codearena.storage.base import Storage
from tests.builders import contest_input, problem_input, utc

pytestmark = pytest.mark.asyncio


async def _submit(storage: Storage, problem_id: str, user_id: str):
    return await storage.create_submission(
        SubmissionCreate(problem_id=problem_id, user_id=user_id, code="solve()", language="python")
    )


class TestPlatformStats:
    async def test_empty_platform(self, storage: Storage):
        stats = await get_platform_stats(storage)
        assert (stats.active_contests, stats.participants, stats.problems_solved) == (0, 0, 0)

    async def test_counts(self, storage: Storage):
        live = await storage.create_contest(contest_input("Live", start=utc(2026, 3, 1), status="live"))
        past = await storage.create_contest(contest_input("Past", start=utc(2026, 2, 1), status="completed"))
        await storage.update_contest_participants(live.id, 30)
        await storage.update_contest_participants(past.id, 12)

        problem = await storage.create_problem(problem_input(live.id))
        for user_id in ("u1", "u1", "u2"):
            submission = await _submit(storage, problem.id, user_id)
            await storage.update_submission_status(submission.id, SUBMISSION_ACCEPTED, 100)
        await _submit(storage, problem.id, "u3")

        stats = await get_platform_stats(storage)
        assert stats.active_contests == 1
        assert stats.participants == 42
        # u1 solved the same problem twice: one distinct (user, problem) pair.
        assert stats.problems_solved == 2


class TestRecordVerdict:
    async def test_accepted_scores_problem_points(self, storage: Storage):
        problem = await storage.create_problem(problem_input("c1", points=250))
        submission = await _submit(storage, problem.id, "u1")

        settled = await record_verdict(storage, submission.id, accepted=True)
        assert settled.status == SUBMISSION_ACCEPTED
        assert settled.score == 250

        activity = (await storage.get_user_activity("u1"))[0]
        assert activity.minutes_active == SUBMISSION_CREDIT_MINUTES
        assert activity.questions_solved == 1

    async def test_rejected_scores_zero(self, storage: Storage):
        problem = await storage.create_problem(problem_input("c1"))
        submission = await _submit(storage, problem.id, "u1")

        settled = await record_verdict(storage, submission.id, accepted=False)
        assert settled.status == SUBMISSION_WRONG_ANSWER
        assert settled.score == 0
        assert (await storage.get_user_activity("u1"))[0].questions_solved == 0

    async def test_second_verdict_is_ignored(self, storage: Storage):
        problem = await storage.create_problem(problem_input("c1"))
        submission = await _submit(storage, problem.id, "u1")

        await record_verdict(storage, submission.id, accepted=True)
        again = await record_verdict(storage, submission.id, accepted=False)
        assert again.status == SUBMISSION_ACCEPTED
        assert again.score == 100
        assert (await storage.get_user_activity("u1"))[0].minutes_active == SUBMISSION_CREDIT_MINUTES

    async def test_missing_submission(self, storage: Storage):
        assert await record_verdict(storage, "missing", accepted=True) is None

    async def test_concurrent_verdicts_credit_once(self, storage: Storage):
        problem = await storage.create_problem(problem_input("c1"))
        submission = await _submit(storage, problem.id, "u1")

        results = await asyncio.gather(
            record_verdict(storage, submission.id, accepted=True),
            record_verdict(storage, submission.id, accepted=False),
        )
        final = await storage.get_submission(submission.id)
        assert final.status in (SUBMISSION_ACCEPTED, SUBMISSION_WRONG_ANSWER)
        assert all(r.status == final.status for r in results)

        activity = await storage.get_user_activity("u1")
        assert len(activity) == 1
        assert activity[0].minutes_active == SUBMISSION_CREDIT_MINUTES
        assert activity[0].questions_solved == (1 if final.status == SUBMISSION_ACCEPTED else 0)
