"""Brain-teaser streak computation."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, timedelta

from codearena.challenges.schemas import CalendarEntry


def compute_streak(calendar: Iterable[CalendarEntry], today: date | None = None) -> int:
    """Count consecutive solved days, newest first.

    The walk stops at the first unsolved entry or at a gap of more than one
    day between entries. With ``today`` given, a streak whose newest entry
    is older than yesterday has lapsed and counts as 0.
    """
    entries = sorted(calendar, key=lambda e: e.date, reverse=True)
    if not entries:
        return 0
    if today is not None and entries[0].date < today - timedelta(days=1):
        return 0

    streak = 0
    previous: date | None = None
    for entry in entries:
        if not entry.solved:
            break
        if previous is not None:
            if entry.date == previous:
                continue
            if (previous - entry.date).days > 1:
                break
        streak += 1
        previous = entry.date
    return streak
