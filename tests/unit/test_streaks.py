"""Brain-teaser streak tests: consecutive solved days, newest first."""

from datetime import date, timedelta

from codearena.challenges.schemas import CalendarEntry
from codearena.challenges.streaks import compute_streak

TODAY = date(2026, 3, 10)


def _days(*entries: tuple[int, bool]) -> list[CalendarEntry]:
    """Build calendar entries from (days before TODAY, solved) pairs."""
    return [CalendarEntry(date=TODAY - timedelta(days=back), solved=solved) for back, solved in entries]


class TestComputeStreak:
    def test_empty_calendar(self):
        assert compute_streak([]) == 0
        assert compute_streak([], TODAY) == 0

    def test_consecutive_days(self):
        assert compute_streak(_days((0, True), (1, True), (2, True)), TODAY) == 3

    def test_stops_at_unsolved(self):
        assert compute_streak(_days((0, True), (1, True), (2, False), (3, True)), TODAY) == 2

    def test_stops_at_gap(self):
        """Two solved days with a missing day between them do not chain."""
        assert compute_streak(_days((0, True), (2, True), (3, True)), TODAY) == 1

    def test_newest_unsolved_means_zero(self):
        assert compute_streak(_days((0, False), (1, True)), TODAY) == 0

    def test_input_order_does_not_matter(self):
        assert compute_streak(_days((2, True), (0, True), (1, True)), TODAY) == 3

    def test_yesterday_still_counts(self):
        """Today's teaser not attempted yet: the streak through yesterday is alive."""
        assert compute_streak(_days((1, True), (2, True)), TODAY) == 2

    def test_lapsed_streak(self):
        assert compute_streak(_days((2, True), (3, True)), TODAY) == 0

    def test_without_today_no_lapse_check(self):
        assert compute_streak(_days((5, True), (6, True))) == 2

    def test_duplicate_dates_count_once(self):
        assert compute_streak(_days((0, True), (0, True), (1, True)), TODAY) == 2
