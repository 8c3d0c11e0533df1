"""Habit Manager - Completion ledger and measurement writes.

This manager handles every write to the habit history:
- Toggling a task's completion for a day (insert if absent, remove if present)
- Upserting a completion with note / satisfaction / minutes spent
- Removing a completion
- Logging performance test measurements
- Weekly time limit adjustment for break habits

ARCHITECTURE:
- HabitManager = STATEFUL writes plus signal emission
- Schedule/Completion/Limit engines = STATELESS reads

At most one completion entry exists per task per calendar day; the toggle
and upsert paths both enforce it.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from homeassistant.exceptions import HomeAssistantError

from .. import const, data_builders as db
from ..engines.completion_engine import CompletionEngine
from ..engines.limit_engine import LimitEngine
from ..utils.dt_utils import dt_today_local, to_local_date
from .base_manager import BaseManager

if TYPE_CHECKING:
    from ..type_defs import CompletionEntry, TaskData, TestEntryData


class HabitManager(BaseManager):
    """Manager for completion and measurement writes.

    Responsibilities:
    - Keep the one-entry-per-day rule for completions
    - Emit SIGNAL_SUFFIX_COMPLETION_CHANGED / SIGNAL_SUFFIX_MEASUREMENT_LOGGED
    - Apply weekly limit reductions computed by LimitEngine

    NOT responsible for:
    - Streaks, rates and colors (computed by the engines on refresh)
    - System/task/test CRUD (coordinator)
    """

    async def async_setup(self) -> None:
        """Set up the HabitManager.

        Time spent on break habits can finish a limit window, so every
        completion change re-checks the limits.
        """
        self.listen(
            const.SIGNAL_SUFFIX_COMPLETION_CHANGED,
            self._on_completion_changed,
        )

    async def _on_completion_changed(self, payload: dict[str, Any]) -> None:
        """Re-evaluate time limits after a break habit entry changed."""
        task = self.coordinator.tasks_data.get(payload.get("task_id", ""))
        if task is None or LimitEngine.time_limit(task) is None:
            return
        self.evaluate_time_limits()

    # ────────────────────────────────────────────────────────────────
    # Day resolution
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def _resolve_day(day: date | datetime | str | None) -> date:
        """Normalize the target day (today when omitted)."""
        if day is None:
            return dt_today_local()
        resolved = to_local_date(day)
        if resolved is None:
            raise HomeAssistantError(f"Invalid date '{day}'")
        return resolved

    @staticmethod
    def _remove_entries_on(task: TaskData, day: date) -> int:
        """Drop every entry logged on `day`; return how many were removed."""
        entries = task[const.DATA_TASK_ENTRIES]
        kept = [entry for entry in entries if CompletionEngine.entry_day(entry) != day]
        removed = len(entries) - len(kept)
        task[const.DATA_TASK_ENTRIES] = kept
        return removed

    # ────────────────────────────────────────────────────────────────
    # Completions
    # ────────────────────────────────────────────────────────────────

    def toggle_completion(
        self,
        task_id: str,
        day: date | datetime | str | None = None,
        *,
        note: str | None = None,
        satisfaction: int | None = None,
        minutes_spent: int | None = None,
    ) -> bool:
        """Flip a task's completion for `day`.

        Returns:
            True if the task is now completed on that day, False if the
            completion was removed.

        Raises:
            HomeAssistantError: Unknown task or invalid date
            EntityValidationError: Invalid satisfaction or minutes
        """
        task = self.get_task(task_id)
        target_day = self._resolve_day(day)

        if CompletionEngine.was_completed(task, target_day):
            self._remove_entries_on(task, target_day)
            completed = False
        else:
            task[const.DATA_TASK_ENTRIES].append(
                db.build_completion_entry(
                    target_day,
                    note=note,
                    satisfaction=satisfaction,
                    minutes_spent=minutes_spent,
                )
            )
            completed = True

        const.LOGGER.info(
            "INFO: Task '%s' %s for %s",
            task.get(const.DATA_TASK_NAME),
            "completed" if completed else "uncompleted",
            target_day.isoformat(),
        )
        self.commit(
            const.SIGNAL_SUFFIX_COMPLETION_CHANGED,
            task_id=task_id,
            day=target_day.isoformat(),
            completed=completed,
        )
        return completed

    def log_completion(
        self,
        task_id: str,
        day: date | datetime | str | None = None,
        *,
        note: str | None = None,
        satisfaction: int | None = None,
        minutes_spent: int | None = None,
    ) -> CompletionEntry:
        """Record a completion for `day`, updating the existing one if present.

        Only the metadata values that are given overwrite an existing entry.
        """
        task = self.get_task(task_id)
        target_day = self._resolve_day(day)
        built = db.build_completion_entry(
            target_day,
            note=note,
            satisfaction=satisfaction,
            minutes_spent=minutes_spent,
        )

        entry = CompletionEngine.find_entry(task, target_day)
        if entry is None:
            task[const.DATA_TASK_ENTRIES].append(built)
            entry = built
        else:
            # Collapse stray duplicates left by older data
            self._remove_entries_on(task, target_day)
            task[const.DATA_TASK_ENTRIES].append(entry)
            if note is not None:
                entry[const.DATA_ENTRY_NOTE] = built[const.DATA_ENTRY_NOTE]
            if satisfaction is not None:
                entry[const.DATA_ENTRY_SATISFACTION] = satisfaction
            if minutes_spent is not None:
                entry[const.DATA_ENTRY_MINUTES_SPENT] = minutes_spent

        const.LOGGER.info(
            "INFO: Logged completion of task '%s' for %s",
            task.get(const.DATA_TASK_NAME),
            target_day.isoformat(),
        )
        self.commit(
            const.SIGNAL_SUFFIX_COMPLETION_CHANGED,
            task_id=task_id,
            day=target_day.isoformat(),
            completed=True,
        )
        return entry

    def remove_completion(
        self, task_id: str, day: date | datetime | str | None = None
    ) -> bool:
        """Remove a task's completion for `day`; False if there was none."""
        task = self.get_task(task_id)
        target_day = self._resolve_day(day)
        if not self._remove_entries_on(task, target_day):
            const.LOGGER.debug(
                "DEBUG: No completion of task '%s' on %s to remove",
                task.get(const.DATA_TASK_NAME),
                target_day.isoformat(),
            )
            return False

        self.commit(
            const.SIGNAL_SUFFIX_COMPLETION_CHANGED,
            task_id=task_id,
            day=target_day.isoformat(),
            completed=False,
        )
        return True

    # ────────────────────────────────────────────────────────────────
    # Measurements
    # ────────────────────────────────────────────────────────────────

    def log_test_entry(
        self,
        test_id: str,
        value: float,
        timestamp: date | datetime | str | None = None,
        *,
        notes: str | None = None,
        conditions: str | None = None,
    ) -> TestEntryData:
        """Append a measurement to a performance test."""
        test = self.get_test(test_id)

        entry = db.build_test_entry(value, timestamp, notes=notes, conditions=conditions)
        test[const.DATA_TEST_ENTRIES].append(entry)

        const.LOGGER.info(
            "INFO: Logged %s %s for test '%s'",
            entry[const.DATA_TEST_ENTRY_VALUE],
            test.get(const.DATA_TEST_UNIT, ""),
            test.get(const.DATA_TEST_NAME),
        )
        self.commit(
            const.SIGNAL_SUFFIX_MEASUREMENT_LOGGED,
            test_id=test_id,
            value=entry[const.DATA_TEST_ENTRY_VALUE],
        )
        return entry

    # ────────────────────────────────────────────────────────────────
    # Time limits
    # ────────────────────────────────────────────────────────────────

    def evaluate_time_limits(self, today: date | None = None) -> int:
        """Apply due weekly limit evaluations; return how many were evaluated."""
        today = today or dt_today_local()
        evaluated = 0
        for task_id, task in self.coordinator.tasks_data.items():
            result = LimitEngine.evaluate_weekly_limit(task, today)
            if result is None:
                continue
            limit = task[const.DATA_TASK_TIME_LIMIT]
            limit[const.TIME_LIMIT_CURRENT_WEEK_LIMIT] = result.new_limit
            limit[const.TIME_LIMIT_WEEK_START] = db.entry_timestamp(result.new_week_start)
            evaluated += 1
            const.LOGGER.info(
                "INFO: Time limit of '%s' evaluated: %d/7 good days, limit now %s",
                task.get(const.DATA_TASK_NAME),
                result.success_days,
                LimitEngine.format_minutes(result.new_limit),
            )
            if result.reduced:
                self.emit(
                    const.SIGNAL_SUFFIX_LIMIT_ADJUSTED,
                    task_id=task_id,
                    new_limit=result.new_limit,
                )

        if evaluated:
            self.coordinator._persist_and_update()
        return evaluated
