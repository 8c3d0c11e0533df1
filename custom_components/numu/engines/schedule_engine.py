"""Schedule Engine for Numu.

Answers "is this task due on this day?" for every cadence:
- `daily` / `weekdays` / `weekends` / `specific_days` are day-level schedules
- `weekly_target` has no day-level due; it is judged per week (N per week)

Due-day enumeration uses `dateutil.rrule` with weekday filters.

ARCHITECTURE: Pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in task dicts.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING, Any, ClassVar

from dateutil.rrule import DAILY, rrule

from .. import const
from ..utils.dt_utils import WeekRange, to_local_date, week_range

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ..type_defs import TaskData


class ScheduleEngine:
    """Stateless cadence predicates for tasks.

    Corrupt or unknown cadence data silently degrades to `daily`, so a bad
    record never takes the dashboard down. The coordinator warns about such
    records once, when it loads them.
    """

    # Weekday filters for the fixed day-level cadences (Monday=0)
    CADENCE_WEEKDAYS: ClassVar[dict[str, tuple[int, ...]]] = {
        const.CADENCE_DAILY: (0, 1, 2, 3, 4, 5, 6),
        const.CADENCE_WEEKDAYS: tuple(const.WEEKDAY_INDEXES),
        const.CADENCE_WEEKENDS: tuple(const.WEEKEND_INDEXES),
    }

    # ────────────────────────────────────────────────────────────────
    # Cadence normalization
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def has_known_cadence(task: Mapping[str, Any]) -> bool:
        """Return True when the stored cadence type is one Numu understands."""
        cadence = task.get(const.DATA_TASK_CADENCE)
        if not isinstance(cadence, dict):
            return False
        return cadence.get(const.CADENCE_TYPE) in const.CADENCE_TYPES

    @staticmethod
    def cadence_type(task: Mapping[str, Any]) -> str:
        """Return the task's cadence type, falling back to daily."""
        if not ScheduleEngine.has_known_cadence(task):
            return const.CADENCE_DAILY
        return task[const.DATA_TASK_CADENCE][const.CADENCE_TYPE]

    @staticmethod
    def specific_days(task: Mapping[str, Any]) -> tuple[int, ...]:
        """Return the sorted, de-duplicated weekday list of a specific_days task."""
        cadence = task.get(const.DATA_TASK_CADENCE) or {}
        raw_days = cadence.get(const.CADENCE_DAYS) if isinstance(cadence, dict) else None
        if not isinstance(raw_days, list):
            return ()
        return tuple(
            sorted(
                {
                    day
                    for day in raw_days
                    if isinstance(day, int) and not isinstance(day, bool) and 0 <= day <= 6
                }
            )
        )

    @staticmethod
    def weekdays_for(task: Mapping[str, Any]) -> tuple[int, ...]:
        """Return the weekdays a day-level task is due on (empty for weekly)."""
        cadence_type = ScheduleEngine.cadence_type(task)
        if cadence_type == const.CADENCE_WEEKLY_TARGET:
            return ()
        if cadence_type == const.CADENCE_SPECIFIC_DAYS:
            return ScheduleEngine.specific_days(task)
        return ScheduleEngine.CADENCE_WEEKDAYS[cadence_type]

    @staticmethod
    def is_weekly(task: Mapping[str, Any]) -> bool:
        """Return True for weekly-target tasks."""
        return ScheduleEngine.cadence_type(task) == const.CADENCE_WEEKLY_TARGET

    @staticmethod
    def target_count(task: Mapping[str, Any]) -> int:
        """Return N for weekly-target tasks, 0 for the daily family."""
        if not ScheduleEngine.is_weekly(task):
            return 0
        count = task[const.DATA_TASK_CADENCE].get(const.CADENCE_COUNT, 0)
        if isinstance(count, bool) or not isinstance(count, (int, float)):
            return 0
        return int(count)

    @staticmethod
    def created_on(task: Mapping[str, Any]) -> date | None:
        """Return the local creation day of a task, or None if unknown."""
        return to_local_date(task.get(const.DATA_TASK_CREATED_AT))

    # ────────────────────────────────────────────────────────────────
    # Day-level schedule
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def is_due(task: TaskData | Mapping[str, Any], day: date | datetime) -> bool:
        """Return True if a daily-family task is scheduled on `day`.

        Weekly-target tasks are never due on a specific day. A task is never
        due before the day it was created.

        Example:
            >>> ScheduleEngine.is_due(weekdays_task, date(2025, 11, 15))  # Saturday
            False
        """
        if isinstance(day, datetime):
            day = day.date()
        created = ScheduleEngine.created_on(task)
        if created is not None and day < created:
            return False
        return day.weekday() in ScheduleEngine.weekdays_for(task)

    @staticmethod
    def due_days(
        task: TaskData | Mapping[str, Any], start: date, end: date
    ) -> list[date]:
        """Enumerate the due days of a daily-family task in `[start, end]`.

        The window is clipped to the creation day. Weekly tasks yield nothing.
        """
        created = ScheduleEngine.created_on(task)
        if created is not None and created > start:
            start = created
        weekdays = ScheduleEngine.weekdays_for(task)
        if not weekdays or end < start:
            return []

        rule = rrule(
            DAILY,
            dtstart=datetime.combine(start, datetime.min.time()),
            until=datetime.combine(end, datetime.min.time()),
            byweekday=weekdays,
        )
        return [occurrence.date() for occurrence in rule]

    # ────────────────────────────────────────────────────────────────
    # Week-level schedule
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def week_bucket(
        day: date | datetime, first_weekday: int = 0
    ) -> WeekRange:
        """Return the calendar week containing `day`."""
        return week_range(day, first_weekday)

    @staticmethod
    def is_active_in_week(
        task: TaskData | Mapping[str, Any], week: WeekRange
    ) -> bool:
        """Return True if the task existed at some point during `week`."""
        created = ScheduleEngine.created_on(task)
        return created is None or created <= week.end

    # ────────────────────────────────────────────────────────────────
    # Display
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def describe_cadence(cadence: Mapping[str, Any] | None) -> str:
        """Return human readable cadence text.

        Examples:
            {"type": "daily"} -> "Every day"
            {"type": "weekly_target", "count": 3} -> "3x per week"
            {"type": "specific_days", "days": [0, 2]} -> "Mon, Wed"
        """
        cadence_type = (cadence or {}).get(const.CADENCE_TYPE)
        if cadence_type == const.CADENCE_WEEKDAYS:
            return "Weekdays"
        if cadence_type == const.CADENCE_WEEKENDS:
            return "Weekends"
        if cadence_type == const.CADENCE_WEEKLY_TARGET:
            return f"{(cadence or {}).get(const.CADENCE_COUNT, 0)}x per week"
        if cadence_type == const.CADENCE_SPECIFIC_DAYS:
            days = ScheduleEngine.specific_days({const.DATA_TASK_CADENCE: cadence})
            return ", ".join(const.WEEKDAY_SHORT_NAMES[day] for day in days)
        return "Every day"
