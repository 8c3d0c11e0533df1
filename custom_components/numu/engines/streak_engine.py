"""Streak Engine - "Never miss twice" streak calculation.

Daily-family tasks (daily, weekdays, weekends, specific days):
    Only due days matter; non-due days neither extend nor break a run.
    A run starts on a completed due day. A single missed due day is absorbed
    (grace) and counted once the next due day is completed, which also
    restores the grace. Two consecutive missed due days end the run.
    Today counts when completed; an unfinished today is not a miss yet.

Weekly-target tasks:
    A week is met when its distinct completion days reach N. The streak is
    the run of consecutive met weeks ending at the current week. The current
    week, while unmet, is in progress: it neither counts nor breaks.

Forward scan and backward walk are both provided and always agree on the
current streak.

ARCHITECTURE: Pure logic engine with NO Home Assistant dependencies.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import TYPE_CHECKING, Any, NamedTuple

from ..utils.dt_utils import DAYS_PER_WEEK, dt_today_local, week_end, week_start
from .completion_engine import CompletionEngine
from .schedule_engine import ScheduleEngine

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence


class StreakSummary(NamedTuple):
    """Streak signals of a single task."""

    current: int
    longest: int
    at_risk: bool


class _DayWalk(NamedTuple):
    """Outcome of walking a sequence of due-day results."""

    current: int
    longest: int
    pending_miss: bool


class StreakEngine:
    """Stateless streak calculations over completion ledgers."""

    # ────────────────────────────────────────────────────────────────
    # Day sequences
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def day_results(task: Mapping[str, Any], today: date | None = None) -> list[bool]:
        """Return completed/missed flags for every due day up to today.

        Today is included only when it has already been completed.
        """
        today = today or dt_today_local()
        completed = CompletionEngine.completion_days(task)
        start = ScheduleEngine.created_on(task) or min(completed, default=today)
        results = [
            day in completed
            for day in ScheduleEngine.due_days(task, start, today)
        ]
        if results and ScheduleEngine.is_due(task, today) and not results[-1]:
            results.pop()
        return results

    @staticmethod
    def scan_forward(results: Sequence[bool]) -> _DayWalk:
        """Walk due-day results oldest first, tracking every run."""
        run = 0
        alive = False
        pending = False
        longest = 0

        for completed in results:
            if completed:
                if alive:
                    run += 2 if pending else 1
                else:
                    alive = True
                    run = 1
                pending = False
                longest = max(longest, run)
            elif not alive:
                continue
            elif not pending:
                pending = True
            else:
                alive = False
                pending = False
                run = 0

        return _DayWalk(run if alive else 0, longest, alive and pending)

    @staticmethod
    def walk_backward(results: Sequence[bool]) -> tuple[int, bool]:
        """Walk due-day results newest first; return (current, at_risk).

        Stops at the first pair of consecutive misses. A miss that precedes
        the earliest completion of the run is not part of it.
        """
        streak = 0
        misses_in_row = 0
        trailing_misses = 0
        pending = False
        seen_completion = False

        for completed in reversed(results):
            if completed:
                streak += 2 if pending else 1
                pending = False
                misses_in_row = 0
                seen_completion = True
                continue
            misses_in_row += 1
            if misses_in_row >= 2:
                break
            if seen_completion:
                pending = True
            else:
                trailing_misses += 1

        return streak, streak > 0 and trailing_misses == 1

    # ────────────────────────────────────────────────────────────────
    # Daily family
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def daily_current_streak(
        task: Mapping[str, Any], today: date | None = None
    ) -> int:
        """Return the current streak using the backward walk."""
        current, _ = StreakEngine.walk_backward(StreakEngine.day_results(task, today))
        return current

    @staticmethod
    def daily_summary(
        task: Mapping[str, Any], today: date | None = None
    ) -> StreakSummary:
        """Return current, longest and at-risk for a daily-family task."""
        walk = StreakEngine.scan_forward(StreakEngine.day_results(task, today))
        return StreakSummary(walk.current, walk.longest, walk.pending_miss)

    # ────────────────────────────────────────────────────────────────
    # Weekly target
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def week_results(
        task: Mapping[str, Any],
        today: date | None = None,
        first_weekday: int = 0,
    ) -> list[bool]:
        """Return met/unmet flags for every week since creation, current last."""
        today = today or dt_today_local()
        current_start = week_start(today, first_weekday)
        created = ScheduleEngine.created_on(task)
        if created is None:
            completed = CompletionEngine.completion_days(task)
            created = min(completed, default=today)
        start = week_start(min(created, today), first_weekday)

        results: list[bool] = []
        while start <= current_start:
            results.append(CompletionEngine.weekly_target_met(task, start))
            start += timedelta(days=DAYS_PER_WEEK)
        return results

    @staticmethod
    def weekly_summary(
        task: Mapping[str, Any],
        today: date | None = None,
        first_weekday: int = 0,
    ) -> StreakSummary:
        """Return current, longest and at-risk for a weekly-target task."""
        today = today or dt_today_local()
        results = StreakEngine.week_results(task, today, first_weekday)
        current_met = results[-1]
        history = results if current_met else results[:-1]

        current = 0
        for met in reversed(history):
            if not met:
                break
            current += 1

        longest = 0
        run = 0
        for met in history:
            run = run + 1 if met else 0
            longest = max(longest, run)

        at_risk = False
        if current > 0 and not current_met:
            this_week = week_start(today, first_weekday)
            needed = ScheduleEngine.target_count(task) - CompletionEngine.completions_in_week(
                task, this_week
            )
            days_left = (week_end(today, first_weekday) - today).days + 1
            if CompletionEngine.was_completed(task, today):
                days_left -= 1
            at_risk = days_left <= needed

        return StreakSummary(current, longest, at_risk)

    # ────────────────────────────────────────────────────────────────
    # Public API
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def summarize(
        task: Mapping[str, Any],
        today: date | None = None,
        first_weekday: int = 0,
    ) -> StreakSummary:
        """Return the streak summary for any cadence."""
        if ScheduleEngine.is_weekly(task):
            return StreakEngine.weekly_summary(task, today, first_weekday)
        return StreakEngine.daily_summary(task, today)

    @staticmethod
    def current_streak(
        task: Mapping[str, Any],
        today: date | None = None,
        first_weekday: int = 0,
    ) -> int:
        """Return the current streak for any cadence."""
        return StreakEngine.summarize(task, today, first_weekday).current

    @staticmethod
    def longest_streak(
        task: Mapping[str, Any],
        today: date | None = None,
        first_weekday: int = 0,
    ) -> int:
        """Return the longest streak for any cadence."""
        return StreakEngine.summarize(task, today, first_weekday).longest

    @staticmethod
    def is_streak_at_risk(
        task: Mapping[str, Any],
        today: date | None = None,
        first_weekday: int = 0,
    ) -> bool:
        """Return True when one more miss would end the current streak."""
        return StreakEngine.summarize(task, today, first_weekday).at_risk

    @staticmethod
    def system_streak(
        tasks: Iterable[Mapping[str, Any]], today: date | None = None
    ) -> int:
        """Count consecutive days on which every due task was completed.

        Days with nothing due are skipped. Today counts once all its due tasks
        are done and does not break the streak while still open. Weekly-target
        tasks have no day-level due and are ignored.
        """
        today = today or dt_today_local()
        daily_tasks = [task for task in tasks if not ScheduleEngine.is_weekly(task)]
        created_days = [
            created
            for created in (ScheduleEngine.created_on(task) for task in daily_tasks)
            if created is not None
        ]
        if not daily_tasks:
            return 0
        earliest = min(created_days, default=today)

        streak = 0
        day = today
        while day >= earliest:
            due = [task for task in daily_tasks if ScheduleEngine.is_due(task, day)]
            if due:
                if all(CompletionEngine.was_completed(task, day) for task in due):
                    streak += 1
                elif day != today:
                    break
            day -= timedelta(days=1)
        return streak
