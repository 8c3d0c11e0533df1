"""Completion Engine - Pure queries over a task's completion ledger.

Completion entries carry a full timestamp but have day-granularity meaning:
every query truncates to the local calendar day first. Duplicate entries on
the same day count once; entries with malformed timestamps are skipped.

ARCHITECTURE: Pure logic engine with NO Home Assistant dependencies.
Writes (toggle/upsert) belong in HabitManager.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils.dt_utils import DAYS_PER_WEEK, dt_today_local, to_local_date, week_start
from .schedule_engine import ScheduleEngine

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ..type_defs import CompletionEntry


class CompletionEngine:
    """Stateless ledger lookups for tasks."""

    @staticmethod
    def entries(task: Mapping[str, Any]) -> list[CompletionEntry]:
        """Return the task's entries, or an empty list for missing/corrupt data."""
        raw = task.get(const.DATA_TASK_ENTRIES)
        if not isinstance(raw, list):
            return []
        return [entry for entry in raw if isinstance(entry, dict)]

    @staticmethod
    def entry_day(entry: Mapping[str, Any]) -> date | None:
        """Return the local calendar day of an entry, or None if unparseable."""
        return to_local_date(entry.get(const.DATA_ENTRY_TIMESTAMP))

    @staticmethod
    def completion_days(task: Mapping[str, Any]) -> set[date]:
        """Return every distinct day on which the task was completed."""
        days: set[date] = set()
        for entry in CompletionEngine.entries(task):
            day = CompletionEngine.entry_day(entry)
            if day is not None:
                days.add(day)
        return days

    @staticmethod
    def was_completed(task: Mapping[str, Any], day: date | datetime) -> bool:
        """Return True if any entry of the task falls on `day`."""
        if isinstance(day, datetime):
            day = day.date()
        return any(
            CompletionEngine.entry_day(entry) == day
            for entry in CompletionEngine.entries(task)
        )

    @staticmethod
    def find_entry(
        task: Mapping[str, Any], day: date | datetime
    ) -> CompletionEntry | None:
        """Return the first entry logged on `day`, if any."""
        if isinstance(day, datetime):
            day = day.date()
        for entry in CompletionEngine.entries(task):
            if CompletionEngine.entry_day(entry) == day:
                return entry
        return None

    # ────────────────────────────────────────────────────────────────
    # Weekly counts
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def completions_in_week(task: Mapping[str, Any], start: date) -> int:
        """Count distinct completed days in `[start, start + 7 days)`."""
        end = start + timedelta(days=DAYS_PER_WEEK)
        return sum(
            1 for day in CompletionEngine.completion_days(task) if start <= day < end
        )

    @staticmethod
    def completions_this_week(
        task: Mapping[str, Any],
        today: date | None = None,
        first_weekday: int = 0,
    ) -> int:
        """Count distinct completed days in the current week."""
        reference = today or dt_today_local()
        return CompletionEngine.completions_in_week(
            task, week_start(reference, first_weekday)
        )

    @staticmethod
    def weekly_target_met(task: Mapping[str, Any], start: date) -> bool:
        """Return True when a weekly-target task reached N in the given week.

        A non-positive target is always met.
        """
        target = ScheduleEngine.target_count(task)
        if target <= 0:
            return True
        return CompletionEngine.completions_in_week(task, start) >= target

    @staticmethod
    def is_over_weekly_target(task: Mapping[str, Any], start: date) -> bool:
        """Return True when a weekly-target task went beyond N in the week."""
        target = ScheduleEngine.target_count(task)
        if target <= 0:
            return False
        return CompletionEngine.completions_in_week(task, start) > target

    # ────────────────────────────────────────────────────────────────
    # Time tracking
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def minutes_spent_on(task: Mapping[str, Any], day: date | datetime) -> int:
        """Sum `minutes_spent` over the entries logged on `day`."""
        if isinstance(day, datetime):
            day = day.date()
        total = 0
        for entry in CompletionEngine.entries(task):
            if CompletionEngine.entry_day(entry) != day:
                continue
            minutes = entry.get(const.DATA_ENTRY_MINUTES_SPENT)
            if isinstance(minutes, (int, float)) and not isinstance(minutes, bool):
                total += int(minutes)
        return total
