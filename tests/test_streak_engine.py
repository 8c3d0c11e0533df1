"""Tests for StreakEngine - "never miss twice" streaks, no HA fixtures needed."""

from __future__ import annotations

from datetime import date, timedelta
from itertools import product

import pytest

from custom_components.numu import const
from custom_components.numu.engines import StreakEngine
from tests.helpers import cadence, make_task

NOV_1 = date(2025, 11, 1)


def _days(*numbers: int) -> list[date]:
    """November 2025 days by number."""
    return [date(2025, 11, number) for number in numbers]


# =============================================================================
# TEST: DAILY FAMILY
# =============================================================================


class TestDailyStreak:
    """Daily-family streak semantics."""

    def test_single_miss_is_absorbed(self) -> None:
        """Done, done, done, miss, done: the miss counts once the run resumes."""
        task = make_task(created=NOV_1, completed_on=_days(1, 2, 3, 5))
        summary = StreakEngine.summarize(task, date(2025, 11, 5))
        assert summary.current == 5
        assert summary.longest == 5
        assert not summary.at_risk

    def test_two_consecutive_misses_end_the_run(self) -> None:
        """Done, done, miss, miss, done: only the last day counts."""
        task = make_task(created=NOV_1, completed_on=_days(1, 2, 5))
        summary = StreakEngine.summarize(task, date(2025, 11, 5))
        assert summary.current == 1
        assert summary.longest == 2

    def test_unfinished_today_is_not_a_miss(self) -> None:
        """An open today neither breaks nor extends the streak."""
        task = make_task(created=NOV_1, completed_on=_days(1, 2, 3, 4))
        summary = StreakEngine.summarize(task, date(2025, 11, 5))
        assert summary.current == 4
        assert not summary.at_risk

    def test_completed_today_counts(self) -> None:
        """Checking off today extends the streak immediately."""
        task = make_task(created=NOV_1, completed_on=_days(1, 2, 3, 4, 5))
        assert StreakEngine.current_streak(task, date(2025, 11, 5)) == 5

    def test_trailing_single_miss_is_at_risk(self) -> None:
        """Yesterday missed, today open: alive but at risk."""
        task = make_task(created=NOV_1, completed_on=_days(1, 2, 3))
        summary = StreakEngine.summarize(task, date(2025, 11, 5))
        assert summary.current == 3
        assert summary.at_risk
        assert StreakEngine.is_streak_at_risk(task, date(2025, 11, 5))

    def test_grace_restored_after_completion(self) -> None:
        """Miss, done, miss, done keeps the run alive both times."""
        task = make_task(created=NOV_1, completed_on=_days(1, 3, 5))
        assert StreakEngine.current_streak(task, date(2025, 11, 5)) == 5

    def test_leading_misses_are_not_part_of_the_run(self) -> None:
        """Misses before the first completion do not count."""
        task = make_task(created=NOV_1, completed_on=_days(3, 4))
        assert StreakEngine.current_streak(task, date(2025, 11, 4)) == 2

    def test_no_completions(self) -> None:
        """No completions means no streak and nothing at risk."""
        task = make_task(created=NOV_1)
        summary = StreakEngine.summarize(task, date(2025, 11, 5))
        assert summary == (0, 0, False)

    def test_non_due_days_are_ignored(self) -> None:
        """A weekday task is not broken by the weekend."""
        task = make_task(
            created=date(2025, 11, 3),
            task_cadence=cadence(const.CADENCE_WEEKDAYS),
            completed_on=_days(3, 4, 5, 6, 7, 10),
        )
        assert StreakEngine.current_streak(task, date(2025, 11, 10)) == 6

    def test_specific_days_miss_then_recover(self) -> None:
        """Mon/Wed/Fri task: a missed Wednesday is absorbed by Friday."""
        task = make_task(
            created=date(2025, 11, 3),
            task_cadence=cadence(const.CADENCE_SPECIFIC_DAYS, days=[0, 2, 4]),
            completed_on=_days(3, 7),
        )
        assert StreakEngine.current_streak(task, date(2025, 11, 7)) == 3

    def test_longest_survives_broken_run(self) -> None:
        """The best run is kept after a break."""
        task = make_task(created=NOV_1, completed_on=_days(1, 2, 3, 4, 5, 6, 9))
        summary = StreakEngine.summarize(task, date(2025, 11, 9))
        assert summary.current == 1
        assert summary.longest == 6
        assert StreakEngine.longest_streak(task, date(2025, 11, 9)) == 6

    def test_missing_created_at_uses_first_completion(self) -> None:
        """Without a creation day the first completion anchors history."""
        task = make_task(completed_on=_days(4, 5))
        assert StreakEngine.current_streak(task, date(2025, 11, 5)) == 2


class TestWalkAgreement:
    """The forward scan and the backward walk agree."""

    @pytest.mark.parametrize("length", [1, 4, 7])
    def test_forward_equals_backward(self, length: int) -> None:
        """Every completion pattern yields the same current streak both ways."""
        for pattern in product([True, False], repeat=length):
            forward = StreakEngine.scan_forward(pattern)
            backward, at_risk = StreakEngine.walk_backward(pattern)
            assert forward.current == backward, pattern
            assert forward.pending_miss == at_risk, pattern
            assert forward.current <= forward.longest, pattern

    def test_daily_current_streak_matches_summary(self) -> None:
        """The backward helper matches the forward summary on real data."""
        task = make_task(created=NOV_1, completed_on=_days(1, 2, 4, 6, 7, 9))
        today = date(2025, 11, 10)
        assert StreakEngine.daily_current_streak(task, today) == (
            StreakEngine.summarize(task, today).current
        )


# =============================================================================
# TEST: WEEKLY TARGET
# =============================================================================


class TestWeeklyStreak:
    """Weekly-target streak semantics (Monday-start weeks)."""

    @staticmethod
    def _weekly(*completed: int) -> dict:
        return make_task(
            created=date(2025, 11, 3),
            task_cadence=cadence(const.CADENCE_WEEKLY_TARGET, count=3),
            completed_on=_days(*completed),
        )

    def test_current_week_in_progress(self) -> None:
        """Two met weeks; the unmet current week neither counts nor breaks."""
        task = self._weekly(3, 4, 5, 10, 11, 12, 17)
        summary = StreakEngine.summarize(task, date(2025, 11, 19))
        assert summary.current == 2
        assert summary.longest == 2
        assert not summary.at_risk

    def test_current_week_met_counts(self) -> None:
        """Meeting the target this week extends the streak."""
        task = self._weekly(3, 4, 5, 10, 11, 12, 17, 18, 19)
        assert StreakEngine.current_streak(task, date(2025, 11, 19)) == 3

    def test_unmet_past_week_breaks(self) -> None:
        """A completed week that missed its target ends the run."""
        task = self._weekly(3, 4, 5, 10, 17)
        summary = StreakEngine.summarize(task, date(2025, 11, 19))
        assert summary.current == 0
        assert summary.longest == 1

    def test_at_risk_when_days_run_out(self) -> None:
        """Saturday with two completions still needed is at risk."""
        task = self._weekly(3, 4, 5, 10, 11, 12, 17)
        assert StreakEngine.is_streak_at_risk(task, date(2025, 11, 22))

    def test_today_completion_reduces_days_left(self) -> None:
        """A completion today leaves fewer usable days in the week."""
        task = self._weekly(3, 4, 5, 10, 11, 12, 21)
        # Friday done: needed 2, days left Sat + Sun = 2
        assert StreakEngine.is_streak_at_risk(task, date(2025, 11, 21))

    def test_not_at_risk_without_streak(self) -> None:
        """Nothing to lose means nothing at risk."""
        task = self._weekly()
        assert not StreakEngine.is_streak_at_risk(task, date(2025, 11, 22))

    def test_sunday_week_start(self) -> None:
        """Sunday-start weeks bucket the same days differently."""
        task = self._weekly(2, 3, 4, 9, 10, 11)
        # Monday weeks: 3,4,9 met; 10,11 still open
        assert StreakEngine.current_streak(task, date(2025, 11, 12)) == 1
        # Sunday weeks: 2,3,4 met; 9,10,11 met
        assert (
            StreakEngine.current_streak(task, date(2025, 11, 12), first_weekday=6) == 2
        )


# =============================================================================
# TEST: SYSTEM STREAK
# =============================================================================


class TestSystemStreak:
    """All-tasks-done day streak for a system."""

    def test_all_done_days_count(self) -> None:
        """Three fully completed days; open today does not break."""
        tasks = [
            make_task("Run", created=date(2025, 11, 3), completed_on=_days(3, 4, 5)),
            make_task("Read", created=date(2025, 11, 3), completed_on=_days(3, 4, 5)),
        ]
        assert StreakEngine.system_streak(tasks, date(2025, 11, 6)) == 3

    def test_one_missing_task_breaks(self) -> None:
        """A day with an unfinished due task ends the system streak."""
        tasks = [
            make_task("Run", created=date(2025, 11, 3), completed_on=_days(3, 4, 5)),
            make_task("Read", created=date(2025, 11, 3), completed_on=_days(3, 5)),
        ]
        assert StreakEngine.system_streak(tasks, date(2025, 11, 5)) == 1

    def test_days_without_due_tasks_are_skipped(self) -> None:
        """The weekend does not break a weekday-only system."""
        tasks = [
            make_task(
                created=date(2025, 11, 6),
                task_cadence=cadence(const.CADENCE_WEEKDAYS),
                completed_on=_days(6, 7, 10),
            )
        ]
        assert StreakEngine.system_streak(tasks, date(2025, 11, 10)) == 3

    def test_weekly_tasks_ignored(self) -> None:
        """Only weekly tasks means no day-level streak."""
        tasks = [
            make_task(
                created=date(2025, 11, 3),
                task_cadence=cadence(const.CADENCE_WEEKLY_TARGET, count=2),
                completed_on=_days(3, 4),
            )
        ]
        assert StreakEngine.system_streak(tasks, date(2025, 11, 5)) == 0

    def test_bounded_by_creation(self) -> None:
        """Days before any task existed end the walk."""
        tasks = [make_task(created=date(2025, 11, 4), completed_on=_days(4, 5))]
        today = date(2025, 11, 5)
        assert StreakEngine.system_streak(tasks, today) == 2
        assert StreakEngine.system_streak(tasks, today + timedelta(days=1)) == 2
