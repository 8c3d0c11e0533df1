"""Limit Engine - Time limits for break habits with gradual reduction.

A break habit ("scroll social media") may carry a time limit in minutes:
- `baseline`: the starting daily allowance
- `target`: the allowance the user is working toward
- `current_week_limit`: today's allowance, lowered week by week
- `reduction`: fraction removed after a successful week (default 17%)

A week is evaluated once seven days have passed since its start. If the user
stayed under the limit on at least 4 of the 7 days, the limit drops by the
reduction but never below the target. Either way a new window starts.

ARCHITECTURE: Pure logic engine with NO Home Assistant dependencies.
Evaluation returns the new values; HabitManager applies and persists them.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import TYPE_CHECKING, Any, NamedTuple

from .. import const
from ..utils.dt_utils import dt_today_local, to_local_date
from ..utils.math_utils import safe_ratio
from .completion_engine import CompletionEngine

if TYPE_CHECKING:
    from collections.abc import Mapping


class LimitEvaluation(NamedTuple):
    """Outcome of a weekly limit evaluation."""

    success_days: int
    reduced: bool
    new_limit: int
    new_week_start: date


class LimitEngine:
    """Stateless break-habit time limit calculations."""

    @staticmethod
    def time_limit(task: Mapping[str, Any]) -> dict[str, Any] | None:
        """Return the task's time limit settings, or None if it has none."""
        if task.get(const.DATA_TASK_HABIT_TYPE) != const.HABIT_TYPE_BREAK:
            return None
        limit = task.get(const.DATA_TASK_TIME_LIMIT)
        if not isinstance(limit, dict):
            return None
        return limit

    @staticmethod
    def current_limit(task: Mapping[str, Any]) -> int:
        """Return the current weekly allowance in minutes (0 without a limit)."""
        limit = LimitEngine.time_limit(task)
        if limit is None:
            return 0
        return int(
            limit.get(
                const.TIME_LIMIT_CURRENT_WEEK_LIMIT,
                limit.get(const.TIME_LIMIT_BASELINE, 0),
            )
        )

    @staticmethod
    def time_spent_today(task: Mapping[str, Any], today: date | None = None) -> int:
        """Return minutes logged today."""
        return CompletionEngine.minutes_spent_on(task, today or dt_today_local())

    @staticmethod
    def remaining_time_today(
        task: Mapping[str, Any], today: date | None = None
    ) -> int:
        """Return minutes left in today's allowance (0 without a limit)."""
        if LimitEngine.time_limit(task) is None:
            return 0
        return max(
            0, LimitEngine.current_limit(task) - LimitEngine.time_spent_today(task, today)
        )

    @staticmethod
    def is_under_limit_today(
        task: Mapping[str, Any], today: date | None = None
    ) -> bool:
        """Return True if today's minutes are within the allowance."""
        if LimitEngine.time_limit(task) is None:
            return False
        return LimitEngine.time_spent_today(task, today) <= LimitEngine.current_limit(task)

    @staticmethod
    def performance_zone(task: Mapping[str, Any], minutes: int) -> str:
        """Classify minutes spent as excellent, good or over the limit.

        Example:
            target 15, current limit 60: 10 -> excellent, 45 -> good, 90 -> over_limit
        """
        limit = LimitEngine.time_limit(task)
        if limit is None:
            return const.ZONE_GOOD
        if minutes <= int(limit.get(const.TIME_LIMIT_TARGET, 0)):
            return const.ZONE_EXCELLENT
        if minutes <= LimitEngine.current_limit(task):
            return const.ZONE_GOOD
        return const.ZONE_OVER_LIMIT

    @staticmethod
    def window_start(task: Mapping[str, Any]) -> date | None:
        """Return the first day of the current evaluation window."""
        limit = LimitEngine.time_limit(task)
        if limit is None:
            return None
        return to_local_date(limit.get(const.TIME_LIMIT_WEEK_START))

    @staticmethod
    def should_evaluate_week(
        task: Mapping[str, Any], today: date | None = None
    ) -> bool:
        """Return True once a full evaluation window has elapsed."""
        start = LimitEngine.window_start(task)
        if start is None:
            return False
        return ((today or dt_today_local()) - start).days >= const.LIMIT_EVALUATION_DAYS

    @staticmethod
    def successful_days(task: Mapping[str, Any]) -> int:
        """Count the days of the current window spent within the limit."""
        start = LimitEngine.window_start(task)
        if start is None:
            return 0
        allowance = LimitEngine.current_limit(task)
        return sum(
            1
            for offset in range(const.LIMIT_EVALUATION_DAYS)
            if CompletionEngine.minutes_spent_on(task, start + timedelta(days=offset))
            <= allowance
        )

    @staticmethod
    def evaluate_weekly_limit(
        task: Mapping[str, Any], today: date | None = None
    ) -> LimitEvaluation | None:
        """Evaluate a finished window; None when there is nothing to evaluate."""
        today = today or dt_today_local()
        limit = LimitEngine.time_limit(task)
        if limit is None or not LimitEngine.should_evaluate_week(task, today):
            return None

        current = LimitEngine.current_limit(task)
        target = int(limit.get(const.TIME_LIMIT_TARGET, 0))
        reduction = float(limit.get(const.TIME_LIMIT_REDUCTION, const.DEFAULT_LIMIT_REDUCTION))
        success_days = LimitEngine.successful_days(task)

        if success_days >= const.LIMIT_SUCCESS_DAYS_REQUIRED:
            new_limit = max(int(current - current * reduction), target)
            return LimitEvaluation(success_days, new_limit < current, new_limit, today)
        return LimitEvaluation(success_days, False, current, today)

    @staticmethod
    def week_progress(task: Mapping[str, Any], today: date | None = None) -> float:
        """Return today's minutes as a fraction of the allowance (may exceed 1)."""
        if LimitEngine.time_limit(task) is None:
            return 0.0
        return safe_ratio(
            LimitEngine.time_spent_today(task, today), LimitEngine.current_limit(task)
        )

    @staticmethod
    def format_minutes(minutes: int) -> str:
        """Format minutes as "45 min", "2 hr" or "1 hr 30 min"."""
        if minutes < 60:
            return f"{minutes} min"
        hours, mins = divmod(minutes, 60)
        if mins == 0:
            return f"{hours} hr"
        return f"{hours} hr {mins} min"
