"""Statistics Engine - Rates, rollups and calendar color buckets.

This engine turns per-task signals into aggregates:
- Daily rate: completed / due over daily-family tasks on one day
- Weekly rate: Σ min(completions, N) / Σ N over weekly-target tasks in a week
- Multi-system days: due and completed counts pooled across systems
- Multi-system weeks: arithmetic mean of per-system rates, never pooled
  counts, so a system with a large target cannot drown out a smaller one
- Color buckets for calendar cells and the month grid view model
- Long-run consistency since creation

Design Principles:
    - Stateless: No coordinator reference, operates on passed data structures
    - Total: empty or malformed input yields 0.0 / neutral, never an exception
    - Per-system `None` means "no applicable tasks" and is skipped by averages
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import TYPE_CHECKING, Any, NamedTuple

from .. import const
from ..utils.dt_utils import (
    DAYS_PER_WEEK,
    dt_today_local,
    iter_days,
    week_range,
    week_start,
    weeks_in_month,
)
from ..utils.math_utils import clamp, mean, safe_ratio
from .completion_engine import CompletionEngine
from .schedule_engine import ScheduleEngine

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    TaskList = Sequence[Mapping[str, Any]]


class DayTally(NamedTuple):
    """Due and completed daily-family task counts for one day."""

    due: int
    completed: int


class WeekTally(NamedTuple):
    """Capped completions versus summed targets for one week."""

    achieved: int
    target: int
    applicable: int


class DashboardSummary(NamedTuple):
    """Dashboard-wide rollup for today and the current week."""

    daily_rate: float
    weekly_rate: float
    active_systems: int
    tasks_due_today: int
    tasks_completed_today: int
    weekly_completions: int
    weekly_target: int


class CalendarDay(NamedTuple):
    """One cell of the month grid."""

    day: date
    color: str
    in_month: bool


class CalendarWeek(NamedTuple):
    """One row of the month grid."""

    start: date
    color: str
    days: list[CalendarDay]


class StatisticsEngine:
    """Stateless aggregation over systems and their tasks.

    Example:
        stats = StatisticsEngine()
        rate = stats.daily_rate(tasks, date(2025, 11, 12))
        color = stats.rate_color(rate)
    """

    # ────────────────────────────────────────────────────────────────
    # Day-level rates
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def day_tally(tasks: TaskList, day: date) -> DayTally:
        """Count daily-family tasks due on `day` and how many were completed."""
        due = [task for task in tasks if ScheduleEngine.is_due(task, day)]
        completed = sum(1 for task in due if CompletionEngine.was_completed(task, day))
        return DayTally(len(due), completed)

    @staticmethod
    def system_daily_rate(tasks: TaskList, day: date) -> float | None:
        """Return completed/due for one system, or None when nothing is due."""
        tally = StatisticsEngine.day_tally(tasks, day)
        if tally.due == 0:
            return None
        return tally.completed / tally.due

    @staticmethod
    def daily_rate(tasks: TaskList, day: date) -> float:
        """Return completed/due in [0, 1]; 0.0 when nothing is due.

        Callers must read a zero-due 0.0 as "no signal", not as a failure.
        """
        rate = StatisticsEngine.system_daily_rate(tasks, day)
        return 0.0 if rate is None else rate

    # ────────────────────────────────────────────────────────────────
    # Week-level rates
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def week_tally(
        tasks: TaskList, start: date, first_weekday: int = 0
    ) -> WeekTally:
        """Sum capped completions and positive targets of weekly tasks.

        `applicable` counts every weekly task active in the week, including
        those with a non-positive ("always met") target.
        """
        week = week_range(start, first_weekday)
        achieved = 0
        target = 0
        applicable = 0
        for task in tasks:
            if not ScheduleEngine.is_weekly(task):
                continue
            if not ScheduleEngine.is_active_in_week(task, week):
                continue
            applicable += 1
            count = ScheduleEngine.target_count(task)
            if count <= 0:
                continue
            target += count
            achieved += min(CompletionEngine.completions_in_week(task, week.start), count)
        return WeekTally(achieved, target, applicable)

    @staticmethod
    def system_weekly_rate(
        tasks: TaskList, start: date, first_weekday: int = 0
    ) -> float | None:
        """Return one system's weekly rate, or None without weekly tasks."""
        tally = StatisticsEngine.week_tally(tasks, start, first_weekday)
        if tally.applicable == 0:
            return None
        if tally.target == 0:
            return 1.0
        return tally.achieved / tally.target

    @staticmethod
    def weekly_rate(tasks: TaskList, start: date, first_weekday: int = 0) -> float:
        """Return Σ min(c, N) / Σ N in [0, 1]; 0.0 without weekly tasks."""
        rate = StatisticsEngine.system_weekly_rate(tasks, start, first_weekday)
        return 0.0 if rate is None else rate

    # ────────────────────────────────────────────────────────────────
    # Combined progress
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def system_progress_rate(
        tasks: TaskList, day: date, first_weekday: int = 0
    ) -> float | None:
        """Return today's combined progress for one system.

        Due daily-family tasks count 0 or 1; weekly tasks contribute
        min(1, completions / N) for the week containing `day`.
        """
        week = week_range(day, first_weekday)
        parts: list[float] = []
        for task in tasks:
            if ScheduleEngine.is_weekly(task):
                if not ScheduleEngine.is_active_in_week(task, week):
                    continue
                count = ScheduleEngine.target_count(task)
                done = CompletionEngine.completions_in_week(task, week.start)
                parts.append(1.0 if count <= 0 else clamp(done / count, 0.0, 1.0))
            elif ScheduleEngine.is_due(task, day):
                parts.append(1.0 if CompletionEngine.was_completed(task, day) else 0.0)
        if not parts:
            return None
        return mean(parts)

    @staticmethod
    def average_system_rates(rates: Iterable[float | None]) -> float | None:
        """Mean of per-system rates, skipping systems with nothing applicable.

        Example:
            average_system_rates([1.0, 0.0, None]) -> 0.5
        """
        applicable = [rate for rate in rates if rate is not None]
        if not applicable:
            return None
        return mean(applicable)

    @staticmethod
    def multi_system_daily_rate(systems: Iterable[TaskList], day: date) -> float | None:
        """Pooled completed/due across systems, or None when nothing is due.

        Day cells count tasks, not systems: 4 due with 3 done is 0.75 however
        those tasks are spread over systems.
        """
        due = 0
        completed = 0
        for tasks in systems:
            tally = StatisticsEngine.day_tally(tasks, day)
            due += tally.due
            completed += tally.completed
        if due == 0:
            return None
        return completed / due

    @staticmethod
    def multi_system_weekly_rate(
        systems: Iterable[TaskList], start: date, first_weekday: int = 0
    ) -> float | None:
        """Average of per-system weekly rates."""
        return StatisticsEngine.average_system_rates(
            StatisticsEngine.system_weekly_rate(tasks, start, first_weekday)
            for tasks in systems
        )

    # ────────────────────────────────────────────────────────────────
    # Dashboard
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def dashboard_summary(
        systems: Iterable[TaskList],
        today: date | None = None,
        first_weekday: int = 0,
    ) -> DashboardSummary:
        """Build the dashboard rollup across every system."""
        today = today or dt_today_local()
        start = week_start(today, first_weekday)
        system_list = [list(tasks) for tasks in systems]

        due = 0
        completed = 0
        weekly_done = 0
        weekly_target = 0
        for tasks in system_list:
            tally = StatisticsEngine.day_tally(tasks, today)
            due += tally.due
            completed += tally.completed
            week = StatisticsEngine.week_tally(tasks, start, first_weekday)
            weekly_done += week.achieved
            weekly_target += week.target

        daily = safe_ratio(completed, due) if due else None
        weekly = StatisticsEngine.multi_system_weekly_rate(
            system_list, start, first_weekday
        )
        return DashboardSummary(
            daily_rate=0.0 if daily is None else daily,
            weekly_rate=0.0 if weekly is None else weekly,
            active_systems=sum(1 for tasks in system_list if tasks),
            tasks_due_today=due,
            tasks_completed_today=completed,
            weekly_completions=weekly_done,
            weekly_target=weekly_target,
        )

    # ────────────────────────────────────────────────────────────────
    # Color buckets
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def rate_color(rate: float | None) -> str:
        """Map a rate to its color bucket; None means nothing applies."""
        if rate is None:
            return const.COLOR_NEUTRAL
        if rate >= const.RATE_THRESHOLD_GREEN:
            return const.COLOR_GREEN
        if rate >= const.RATE_THRESHOLD_YELLOW:
            return const.COLOR_YELLOW
        return const.COLOR_RED

    @staticmethod
    def day_color(
        systems: Iterable[TaskList], day: date, today: date | None = None
    ) -> str:
        """Color for a calendar day; neutral for future days."""
        if day > (today or dt_today_local()):
            return const.COLOR_NEUTRAL
        return StatisticsEngine.rate_color(
            StatisticsEngine.multi_system_daily_rate(systems, day)
        )

    @staticmethod
    def week_color(
        systems: Iterable[TaskList],
        start: date,
        today: date | None = None,
        first_weekday: int = 0,
    ) -> str:
        """Color for a calendar week row; neutral for future weeks."""
        start = week_start(start, first_weekday)
        if start > (today or dt_today_local()):
            return const.COLOR_NEUTRAL
        return StatisticsEngine.rate_color(
            StatisticsEngine.multi_system_weekly_rate(systems, start, first_weekday)
        )

    @staticmethod
    def month_grid(
        systems: Iterable[TaskList],
        year: int,
        month: int,
        today: date | None = None,
        first_weekday: int = 0,
    ) -> list[CalendarWeek]:
        """Build the month calendar: week rows, each with seven day cells."""
        today = today or dt_today_local()
        system_list = [list(tasks) for tasks in systems]
        rows: list[CalendarWeek] = []
        for start in weeks_in_month(year, month, first_weekday):
            days = [
                CalendarDay(
                    day=day,
                    color=StatisticsEngine.day_color(system_list, day, today),
                    in_month=day.month == month,
                )
                for day in iter_days(start, start + timedelta(days=DAYS_PER_WEEK - 1))
            ]
            rows.append(
                CalendarWeek(
                    start=start,
                    color=StatisticsEngine.week_color(
                        system_list, start, today, first_weekday
                    ),
                    days=days,
                )
            )
        return rows

    # ────────────────────────────────────────────────────────────────
    # Long-run consistency
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def _expected_and_completed(
        task: Mapping[str, Any], today: date, first_weekday: int
    ) -> tuple[int, int]:
        """Count expected units and completed units since creation."""
        completed_days = CompletionEngine.completion_days(task)
        created = ScheduleEngine.created_on(task) or min(completed_days, default=today)
        if created > today:
            return 0, 0

        if ScheduleEngine.is_weekly(task):
            count = ScheduleEngine.target_count(task)
            if count <= 0:
                return 0, 0
            expected = 0
            done = 0
            start = week_start(created, first_weekday)
            while start <= today:
                expected += count
                done += min(CompletionEngine.completions_in_week(task, start), count)
                start += timedelta(days=DAYS_PER_WEEK)
            return expected, done

        due_days = ScheduleEngine.due_days(task, created, today)
        return len(due_days), sum(1 for day in due_days if day in completed_days)

    @staticmethod
    def completion_rate_since_creation(
        task: Mapping[str, Any],
        today: date | None = None,
        first_weekday: int = 0,
    ) -> float:
        """Completed / expected since the task was created, capped at 1.0."""
        expected, done = StatisticsEngine._expected_and_completed(
            task, today or dt_today_local(), first_weekday
        )
        return min(1.0, safe_ratio(done, expected))

    @staticmethod
    def overall_consistency(
        tasks: TaskList,
        today: date | None = None,
        first_weekday: int = 0,
    ) -> float:
        """Completed / expected over every task of a system, capped at 1.0.

        Today is included, so an unfinished today lowers the value slightly
        until it is checked off.
        """
        today = today or dt_today_local()
        expected = 0
        done = 0
        for task in tasks:
            task_expected, task_done = StatisticsEngine._expected_and_completed(
                task, today, first_weekday
            )
            expected += task_expected
            done += task_done
        return min(1.0, safe_ratio(done, expected))
