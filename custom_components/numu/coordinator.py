# File: coordinator.py
"""Coordinator for the Numu integration.

Loads systems, tasks and performance tests from storage, owns their CRUD
(with cascade deletes) and, on every refresh, recomputes the derived
consistency signals through the pure engines. The result is published as
`coordinator.data` for the sensor platform.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import TYPE_CHECKING, Any

from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from . import const, data_builders as db
from .engines import (
    CompletionEngine,
    MetricEngine,
    ScheduleEngine,
    StatisticsEngine,
    StreakEngine,
)
from .helpers.entity_helpers import remove_entities_by_item_id
from .managers import HabitManager
from .utils.dt_utils import dt_today_local, week_start
from .utils.math_utils import round_rate

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant

    from .store import NumuStore
    from .type_defs import (
        NumuSnapshot,
        SystemsCollection,
        TasksCollection,
        TestsCollection,
    )


class NumuDataCoordinator(DataUpdateCoordinator):
    """Coordinator for Numu integration.

    Manages data using internal_id for every entity. `self._data` is the
    stored document; `self.data` is the derived snapshot.
    """

    config_entry: ConfigEntry

    def __init__(
        self,
        hass: HomeAssistant,
        config_entry: ConfigEntry,
        store: NumuStore,
    ) -> None:
        """Initialize the NumuDataCoordinator."""
        super().__init__(
            hass,
            const.LOGGER,
            config_entry=config_entry,
            name=f"{const.DOMAIN}{const.COORDINATOR_SUFFIX}",
            update_interval=timedelta(minutes=const.DEFAULT_UPDATE_INTERVAL),
        )
        self.store = store
        self._data: dict[str, Any] = {}
        self.habit_manager = HabitManager(hass, self)

    # -------------------------------------------------------------------------------------
    # Data access
    # -------------------------------------------------------------------------------------

    @property
    def first_weekday(self) -> int:
        """Return the configured first day of the week (Monday=0)."""
        option = self.config_entry.options.get(
            const.CONF_WEEK_START, const.DEFAULT_WEEK_START
        )
        return const.WEEKDAY_OPTIONS.get(option, 0)

    @property
    def systems_data(self) -> SystemsCollection:
        """Return the systems section."""
        return self._data.setdefault(const.DATA_SYSTEMS, {})

    @property
    def tasks_data(self) -> TasksCollection:
        """Return the tasks section."""
        return self._data.setdefault(const.DATA_TASKS, {})

    @property
    def tests_data(self) -> TestsCollection:
        """Return the performance tests section."""
        return self._data.setdefault(const.DATA_TESTS, {})

    def tasks_for_system(self, system_id: str) -> list[dict[str, Any]]:
        """Return every task whose system_id points at `system_id`."""
        return [
            task
            for task in self.tasks_data.values()
            if task.get(const.DATA_TASK_SYSTEM_ID) == system_id
        ]

    def tests_for_system(self, system_id: str) -> list[dict[str, Any]]:
        """Return every performance test owned by `system_id`."""
        return [
            test
            for test in self.tests_data.values()
            if test.get(const.DATA_TEST_SYSTEM_ID) == system_id
        ]

    @staticmethod
    def _find_id_by_name(
        collection: dict[str, Any], name: str, system_id: str | None = None
    ) -> str | None:
        """Return the id of the first item named `name` (optionally in a system)."""
        for item_id, item in collection.items():
            if item.get("name") != name:
                continue
            if system_id is not None and item.get("system_id") != system_id:
                continue
            return item_id
        return None

    def get_system_id_by_name(self, name: str) -> str | None:
        """Resolve a system name to its internal_id."""
        return self._find_id_by_name(self.systems_data, name)

    def get_task_id_by_name(self, name: str, system_id: str | None = None) -> str | None:
        """Resolve a task name to its internal_id."""
        return self._find_id_by_name(self.tasks_data, name, system_id)

    def get_test_id_by_name(self, name: str, system_id: str | None = None) -> str | None:
        """Resolve a performance test name to its internal_id."""
        return self._find_id_by_name(self.tests_data, name, system_id)

    # -------------------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------------------

    async def async_config_entry_first_refresh(self) -> None:
        """Load from storage, set up managers, then run the first refresh."""
        self._data = self.store.data or self.store.get_default_structure()
        for key in (const.DATA_SYSTEMS, const.DATA_TASKS, const.DATA_TESTS):
            if not isinstance(self._data.get(key), dict):
                self._data[key] = {}
        for task in self.tasks_data.values():
            if not ScheduleEngine.has_known_cadence(task):
                const.LOGGER.warning(
                    "WARNING: Task '%s' has unknown cadence %s, treating as daily",
                    task.get(const.DATA_TASK_NAME),
                    task.get(const.DATA_TASK_CADENCE),
                )

        await self.habit_manager.async_setup()
        self.habit_manager.evaluate_time_limits()
        await super().async_config_entry_first_refresh()

    async def _async_update_data(self) -> NumuSnapshot:
        """Periodic update: recompute every derived signal."""
        try:
            return self.build_snapshot()
        except (KeyError, TypeError, ValueError) as err:
            raise UpdateFailed(f"Error updating Numu data: {err}") from err

    def _persist(self) -> None:
        """Save to persistent storage."""
        self.store.set_data(self._data)
        self.hass.add_job(self.store.async_save)

    def _persist_and_update(self) -> None:
        """Save and push a fresh snapshot to entities."""
        self._persist()
        self.async_set_updated_data(self.build_snapshot())

    # -------------------------------------------------------------------------------------
    # Snapshot
    # -------------------------------------------------------------------------------------

    def build_snapshot(self, today: date | None = None) -> NumuSnapshot:
        """Compute task, system, test and dashboard signals for `today`."""
        today = today or dt_today_local()
        first_weekday = self.first_weekday
        this_week = week_start(today, first_weekday)

        tasks: dict[str, Any] = {}
        for task_id, task in self.tasks_data.items():
            streak = StreakEngine.summarize(task, today, first_weekday)
            weekly = ScheduleEngine.is_weekly(task)
            tasks[task_id] = {
                const.ATTR_SYSTEM_ID: task.get(const.DATA_TASK_SYSTEM_ID),
                const.ATTR_CURRENT_STREAK: streak.current,
                const.ATTR_LONGEST_STREAK: streak.longest,
                const.ATTR_STREAK_AT_RISK: streak.at_risk,
                const.ATTR_IS_DUE: ScheduleEngine.is_due(task, today),
                const.ATTR_COMPLETED: CompletionEngine.was_completed(task, today),
                const.ATTR_CADENCE: ScheduleEngine.describe_cadence(
                    task.get(const.DATA_TASK_CADENCE)
                ),
                const.ATTR_WEEKLY_COMPLETIONS: CompletionEngine.completions_in_week(
                    task, this_week
                ),
                const.ATTR_WEEKLY_TARGET: ScheduleEngine.target_count(task),
                const.ATTR_WEEKLY_TARGET_MET: (
                    CompletionEngine.weekly_target_met(task, this_week) if weekly else None
                ),
                const.ATTR_COMPLETION_RATE: round_rate(
                    StatisticsEngine.completion_rate_since_creation(
                        task, today, first_weekday
                    )
                ),
            }

        systems: dict[str, Any] = {}
        system_task_lists: list[list[dict[str, Any]]] = []
        for system_id, system in self.systems_data.items():
            system_tasks = self.tasks_for_system(system_id)
            system_task_lists.append(system_tasks)
            tally = StatisticsEngine.day_tally(system_tasks, today)
            progress = StatisticsEngine.system_progress_rate(
                system_tasks, today, first_weekday
            )
            consistency = StatisticsEngine.overall_consistency(
                system_tasks, today, first_weekday
            )
            systems[system_id] = {
                const.ATTR_SYSTEM_NAME: system.get(const.DATA_SYSTEM_NAME),
                const.ATTR_TODAY_RATE: round_rate(progress or 0.0),
                const.ATTR_DAILY_RATE: round_rate(
                    StatisticsEngine.daily_rate(system_tasks, today)
                ),
                const.ATTR_WEEKLY_RATE: round_rate(
                    StatisticsEngine.weekly_rate(system_tasks, this_week, first_weekday)
                ),
                const.ATTR_CONSISTENCY: round_rate(consistency),
                const.ATTR_SYSTEM_STREAK: StreakEngine.system_streak(system_tasks, today),
                const.ATTR_TASKS_DUE: tally.due,
                const.ATTR_TASKS_COMPLETED: tally.completed,
                const.ATTR_DAY_COLOR: StatisticsEngine.day_color(
                    [system_tasks], today, today
                ),
                const.ATTR_WEEK_COLOR: StatisticsEngine.week_color(
                    [system_tasks], this_week, today, first_weekday
                ),
                const.ATTR_DUE_TESTS: [
                    test.get(const.DATA_TEST_NAME)
                    for test in self.tests_for_system(system_id)
                    if MetricEngine.is_due(test, today)
                ],
            }

        tests: dict[str, Any] = {}
        for test_id, test in self.tests_data.items():
            system_id = test.get(const.DATA_TEST_SYSTEM_ID)
            consistency = systems.get(system_id, {}).get(const.ATTR_CONSISTENCY, 0.0)
            tests[test_id] = MetricEngine.analyze(test, consistency, today)._asdict()

        summary = StatisticsEngine.dashboard_summary(
            system_task_lists, today, first_weekday
        )
        dashboard = summary._asdict()
        dashboard[const.ATTR_DAILY_RATE] = round_rate(summary.daily_rate)
        dashboard[const.ATTR_WEEKLY_RATE] = round_rate(summary.weekly_rate)
        dashboard[const.ATTR_DAY_COLOR] = StatisticsEngine.day_color(
            system_task_lists, today, today
        )
        dashboard[const.ATTR_WEEK_COLOR] = StatisticsEngine.week_color(
            system_task_lists, this_week, today, first_weekday
        )

        return {
            const.SNAPSHOT_TODAY: today.isoformat(),
            const.SNAPSHOT_TASKS: tasks,
            const.SNAPSHOT_SYSTEMS: systems,
            const.SNAPSHOT_TESTS: tests,
            const.SNAPSHOT_DASHBOARD: dashboard,
        }

    # -------------------------------------------------------------------------------------
    # Systems
    # -------------------------------------------------------------------------------------

    def create_system(self, user_input: dict[str, Any]) -> str:
        """Validate, build and store a new system; return its id.

        Raises:
            EntityValidationError: Empty/duplicate name or unknown category
        """
        errors = db.validate_system_data(user_input, self.systems_data)
        if errors:
            field, translation_key = next(iter(errors.items()))
            raise db.EntityValidationError(
                field=field,
                translation_key=translation_key,
                placeholders={
                    "name": str(user_input.get(const.DATA_SYSTEM_NAME)),
                    "value": str(user_input.get(const.DATA_SYSTEM_CATEGORY)),
                },
            )
        system = db.build_system(user_input)
        system_id = system[const.DATA_INTERNAL_ID]
        self.systems_data[system_id] = system
        self._persist_and_update()
        const.LOGGER.info("INFO: Created system '%s' (ID: %s)", system["name"], system_id)
        return system_id

    def delete_system(self, system_id: str) -> None:
        """Delete a system together with its tasks and tests."""
        if system_id not in self.systems_data:
            raise ValueError(const.ERROR_SYSTEM_NOT_FOUND_FMT.format(system_id))

        for task_id in [
            task_id
            for task_id, task in self.tasks_data.items()
            if task.get(const.DATA_TASK_SYSTEM_ID) == system_id
        ]:
            del self.tasks_data[task_id]
            remove_entities_by_item_id(self.hass, self.config_entry.entry_id, task_id)
        for test_id in [
            test_id
            for test_id, test in self.tests_data.items()
            if test.get(const.DATA_TEST_SYSTEM_ID) == system_id
        ]:
            del self.tests_data[test_id]
            remove_entities_by_item_id(self.hass, self.config_entry.entry_id, test_id)

        system = self.systems_data.pop(system_id)
        remove_entities_by_item_id(self.hass, self.config_entry.entry_id, system_id)
        self._persist_and_update()
        const.LOGGER.info(
            "INFO: Deleted system '%s' (ID: %s)",
            system.get(const.DATA_SYSTEM_NAME, system_id),
            system_id,
        )

    # -------------------------------------------------------------------------------------
    # Tasks
    # -------------------------------------------------------------------------------------

    def create_task(self, user_input: dict[str, Any]) -> str:
        """Build and store a new task; return its id."""
        system_id = user_input.get(const.DATA_TASK_SYSTEM_ID)
        if system_id not in self.systems_data:
            raise ValueError(const.ERROR_SYSTEM_NOT_FOUND_FMT.format(system_id))
        db.ensure_unique_in_system(
            user_input.get(const.DATA_TASK_NAME), self.tasks_data, system_id
        )
        task = db.build_task(user_input)
        task_id = task[const.DATA_INTERNAL_ID]
        self.tasks_data[task_id] = task
        self._persist_and_update()
        const.LOGGER.info("INFO: Created task '%s' (ID: %s)", task["name"], task_id)
        return task_id

    def update_task(self, task_id: str, user_input: dict[str, Any]) -> None:
        """Edit a task's metadata; its completion history is kept."""
        existing = self.tasks_data.get(task_id)
        if existing is None:
            raise ValueError(const.ERROR_TASK_NOT_FOUND_FMT.format(task_id))
        if const.DATA_TASK_NAME in user_input:
            db.ensure_unique_in_system(
                user_input[const.DATA_TASK_NAME],
                self.tasks_data,
                existing[const.DATA_TASK_SYSTEM_ID],
                current_id=task_id,
            )
        self.tasks_data[task_id] = db.build_task(user_input, existing=existing)
        self._persist_and_update()

    def delete_task(self, task_id: str) -> None:
        """Delete a task and its completion entries."""
        task = self.tasks_data.pop(task_id, None)
        if task is None:
            raise ValueError(const.ERROR_TASK_NOT_FOUND_FMT.format(task_id))
        remove_entities_by_item_id(self.hass, self.config_entry.entry_id, task_id)
        self._persist_and_update()
        const.LOGGER.info(
            "INFO: Deleted task '%s' (ID: %s)", task.get(const.DATA_TASK_NAME), task_id
        )

    # -------------------------------------------------------------------------------------
    # Performance tests
    # -------------------------------------------------------------------------------------

    def create_test(self, user_input: dict[str, Any]) -> str:
        """Build and store a new performance test; return its id."""
        system_id = user_input.get(const.DATA_TEST_SYSTEM_ID)
        if system_id not in self.systems_data:
            raise ValueError(const.ERROR_SYSTEM_NOT_FOUND_FMT.format(system_id))
        db.ensure_unique_in_system(
            user_input.get(const.DATA_TEST_NAME), self.tests_data, system_id
        )
        test = db.build_test(user_input)
        test_id = test[const.DATA_INTERNAL_ID]
        self.tests_data[test_id] = test
        self._persist_and_update()
        const.LOGGER.info("INFO: Created test '%s' (ID: %s)", test["name"], test_id)
        return test_id

    def delete_test(self, test_id: str) -> None:
        """Delete a performance test and its measurements."""
        test = self.tests_data.pop(test_id, None)
        if test is None:
            raise ValueError(const.ERROR_TEST_NOT_FOUND_FMT.format(test_id))
        remove_entities_by_item_id(self.hass, self.config_entry.entry_id, test_id)
        self._persist_and_update()
        const.LOGGER.info(
            "INFO: Deleted test '%s' (ID: %s)", test.get(const.DATA_TEST_NAME), test_id
        )
