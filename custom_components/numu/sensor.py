# File: sensor.py
"""Sensors for the Numu integration.

Every value is read from the coordinator's derived snapshot; sensors never
compute streaks or rates themselves.

Sensors Defined in This File (6):

# Per-Task Sensors (1)
01. TaskStreakSensor

# Per-System Sensors (2)
02. SystemTodayRateSensor
03. SystemConsistencySensor

# Per-Test Sensors (1)
04. TestLatestValueSensor

# Dashboard Sensors (2)
05. DashboardDailyRateSensor
06. DashboardWeeklyRateSensor
"""

from __future__ import annotations

from typing import Any

from homeassistant.components.sensor import SensorEntity, SensorStateClass
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import PERCENTAGE
from homeassistant.core import HomeAssistant

from . import const
from .coordinator import NumuDataCoordinator
from .engines import LimitEngine, ScheduleEngine
from .entity import NumuCoordinatorEntity
from .helpers.device_helpers import (
    create_dashboard_device_info,
    create_system_device_info,
)
from .utils.math_utils import calculate_percentage


async def async_setup_entry(
    hass: HomeAssistant, entry: ConfigEntry, async_add_entities
):
    """Set up sensors for Numu integration."""
    data = hass.data[const.DOMAIN][entry.entry_id]
    coordinator: NumuDataCoordinator = data[const.COORDINATOR]
    entities: list[SensorEntity] = []

    entities.append(DashboardDailyRateSensor(coordinator, entry))
    entities.append(DashboardWeeklyRateSensor(coordinator, entry))

    for system_id, system in coordinator.systems_data.items():
        system_name = system.get(const.DATA_SYSTEM_NAME)
        if not system_name:
            const.LOGGER.error(
                "ERROR: System %s has no name, skipping its sensors", system_id
            )
            continue

        entities.append(
            SystemTodayRateSensor(coordinator, entry, system_id, system_name)
        )
        entities.append(
            SystemConsistencySensor(coordinator, entry, system_id, system_name)
        )

        for task in coordinator.tasks_for_system(system_id):
            entities.append(
                TaskStreakSensor(
                    coordinator,
                    entry,
                    task[const.DATA_INTERNAL_ID],
                    task.get(const.DATA_TASK_NAME, ""),
                    system_id,
                    system_name,
                )
            )

        for test in coordinator.tests_for_system(system_id):
            entities.append(
                TestLatestValueSensor(
                    coordinator,
                    entry,
                    test[const.DATA_INTERNAL_ID],
                    test.get(const.DATA_TEST_NAME, ""),
                    system_id,
                    system_name,
                )
            )

    async_add_entities(entities)


# ------------------------------------------------------------------------------------------
class TaskStreakSensor(NumuCoordinatorEntity, SensorEntity):
    """Sensor for a task's current "never miss twice" streak.

    Counts due days for daily-family tasks and met weeks for weekly-target
    tasks. Longest streak, at-risk flag and today's status are attributes.
    """

    _attr_translation_key = const.TRANS_KEY_SENSOR_TASK_STREAK
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_icon = "mdi:fire"
    _snapshot_key = const.SNAPSHOT_TASKS

    def __init__(
        self,
        coordinator: NumuDataCoordinator,
        entry: ConfigEntry,
        task_id: str,
        task_name: str,
        system_id: str,
        system_name: str,
    ):
        """Initialize the sensor."""
        super().__init__(coordinator)
        self._item_id = task_id
        self._task_name = task_name
        self._attr_unique_id = (
            f"{entry.entry_id}_{task_id}{const.SENSOR_UID_SUFFIX_TASK_STREAK}"
        )
        self._attr_translation_placeholders = {"task_name": task_name}
        self._attr_device_info = create_system_device_info(
            system_id, system_name, entry
        )

    @property
    def _task(self) -> dict[str, Any]:
        return self.coordinator.tasks_data.get(self._item_id, {})

    @property
    def native_value(self) -> int:
        """Return the current streak."""
        return self._signals.get(const.ATTR_CURRENT_STREAK, 0)

    @property
    def native_unit_of_measurement(self) -> str:
        """Weeks for weekly-target tasks, days otherwise."""
        if ScheduleEngine.is_weekly(self._task):
            return const.UNIT_WEEKS
        return const.UNIT_DAYS

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Expose streak, cadence and (for break habits) time limit signals."""
        attributes = dict(self._signals)
        attributes["task_name"] = self._task_name

        task = self._task
        if LimitEngine.time_limit(task) is not None:
            spent = LimitEngine.time_spent_today(task)
            attributes["time_limit"] = LimitEngine.format_minutes(
                LimitEngine.current_limit(task)
            )
            attributes["time_spent_today"] = spent
            attributes["remaining_time_today"] = LimitEngine.remaining_time_today(task)
            attributes["performance_zone"] = LimitEngine.performance_zone(task, spent)
            attributes["limit_week_progress"] = LimitEngine.week_progress(task)
        return dict(sorted(attributes.items()))


# ------------------------------------------------------------------------------------------
class SystemTodayRateSensor(NumuCoordinatorEntity, SensorEntity):
    """Sensor for today's combined progress of one system, in percent."""

    _attr_translation_key = const.TRANS_KEY_SENSOR_SYSTEM_TODAY_RATE
    _attr_native_unit_of_measurement = PERCENTAGE
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_icon = "mdi:calendar-check"
    _snapshot_key = const.SNAPSHOT_SYSTEMS

    def __init__(
        self,
        coordinator: NumuDataCoordinator,
        entry: ConfigEntry,
        system_id: str,
        system_name: str,
    ):
        """Initialize the sensor."""
        super().__init__(coordinator)
        self._item_id = system_id
        self._attr_unique_id = (
            f"{entry.entry_id}_{system_id}{const.SENSOR_UID_SUFFIX_SYSTEM_TODAY_RATE}"
        )
        self._attr_translation_placeholders = {"system_name": system_name}
        self._attr_device_info = create_system_device_info(
            system_id, system_name, entry
        )

    @property
    def native_value(self) -> float:
        """Return today's progress as a percentage."""
        return calculate_percentage(self._signals.get(const.ATTR_TODAY_RATE, 0.0), 1)

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Expose due/completed counts, rates, colors and due tests."""
        return {
            key: self._signals.get(key)
            for key in (
                const.ATTR_SYSTEM_NAME,
                const.ATTR_TASKS_DUE,
                const.ATTR_TASKS_COMPLETED,
                const.ATTR_DAILY_RATE,
                const.ATTR_WEEKLY_RATE,
                const.ATTR_DAY_COLOR,
                const.ATTR_WEEK_COLOR,
                const.ATTR_SYSTEM_STREAK,
                const.ATTR_DUE_TESTS,
            )
        }


# ------------------------------------------------------------------------------------------
class SystemConsistencySensor(NumuCoordinatorEntity, SensorEntity):
    """Sensor for a system's completion rate since creation, in percent."""

    _attr_translation_key = const.TRANS_KEY_SENSOR_SYSTEM_CONSISTENCY
    _attr_native_unit_of_measurement = PERCENTAGE
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_icon = "mdi:chart-line"
    _snapshot_key = const.SNAPSHOT_SYSTEMS

    def __init__(
        self,
        coordinator: NumuDataCoordinator,
        entry: ConfigEntry,
        system_id: str,
        system_name: str,
    ):
        """Initialize the sensor."""
        super().__init__(coordinator)
        self._item_id = system_id
        self._attr_unique_id = (
            f"{entry.entry_id}_{system_id}"
            f"{const.SENSOR_UID_SUFFIX_SYSTEM_CONSISTENCY}"
        )
        self._attr_translation_placeholders = {"system_name": system_name}
        self._attr_device_info = create_system_device_info(
            system_id, system_name, entry
        )

    @property
    def native_value(self) -> float:
        """Return overall consistency as a percentage."""
        return calculate_percentage(self._signals.get(const.ATTR_CONSISTENCY, 0.0), 1)

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Expose the system streak."""
        streak = self._signals.get(const.ATTR_SYSTEM_STREAK, 0)
        return {const.ATTR_SYSTEM_STREAK: streak}


# ------------------------------------------------------------------------------------------
class TestLatestValueSensor(NumuCoordinatorEntity, SensorEntity):
    """Sensor for the latest measurement of a performance test."""

    _attr_translation_key = const.TRANS_KEY_SENSOR_TEST_LATEST
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_icon = "mdi:speedometer"
    _snapshot_key = const.SNAPSHOT_TESTS

    # Not a pytest test class
    __test__ = False

    def __init__(
        self,
        coordinator: NumuDataCoordinator,
        entry: ConfigEntry,
        test_id: str,
        test_name: str,
        system_id: str,
        system_name: str,
    ):
        """Initialize the sensor."""
        super().__init__(coordinator)
        self._item_id = test_id
        self._attr_unique_id = (
            f"{entry.entry_id}_{test_id}{const.SENSOR_UID_SUFFIX_TEST_LATEST}"
        )
        self._attr_translation_placeholders = {"test_name": test_name}
        self._attr_device_info = create_system_device_info(
            system_id, system_name, entry
        )

    @property
    def native_value(self) -> float | None:
        """Return the most recent measurement, or None before the first one."""
        return self._signals.get(const.ATTR_LATEST_VALUE)

    @property
    def native_unit_of_measurement(self) -> str | None:
        """Return the unit the test is measured in."""
        test = self.coordinator.tests_data.get(self._item_id, {})
        return test.get(const.DATA_TEST_UNIT) or None

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Expose best/average values, improvement, trend and due date."""
        attributes = dict(self._signals)
        next_due = attributes.get("next_due_date")
        if next_due is not None:
            attributes["next_due_date"] = next_due.isoformat()
        return attributes


# ------------------------------------------------------------------------------------------
class DashboardDailyRateSensor(NumuCoordinatorEntity, SensorEntity):
    """Sensor for today's completion rate across every system, in percent.

    Completed over due tasks, counted across all systems together.
    """

    _attr_translation_key = const.TRANS_KEY_SENSOR_DASHBOARD_DAILY_RATE
    _attr_native_unit_of_measurement = PERCENTAGE
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_icon = "mdi:view-dashboard"

    def __init__(self, coordinator: NumuDataCoordinator, entry: ConfigEntry):
        """Initialize the sensor."""
        super().__init__(coordinator)
        self._attr_unique_id = (
            f"{entry.entry_id}{const.SENSOR_UID_SUFFIX_DASHBOARD_DAILY_RATE}"
        )
        self._attr_device_info = create_dashboard_device_info(entry)

    @property
    def native_value(self) -> float:
        """Return the dashboard daily rate as a percentage."""
        dashboard = self._snapshot_section(const.SNAPSHOT_DASHBOARD)
        return calculate_percentage(dashboard.get(const.ATTR_DAILY_RATE, 0.0), 1)

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Expose the full dashboard rollup."""
        return dict(self._snapshot_section(const.SNAPSHOT_DASHBOARD))


# ------------------------------------------------------------------------------------------
class DashboardWeeklyRateSensor(NumuCoordinatorEntity, SensorEntity):
    """Sensor for this week's weekly-target rate across every system, in percent."""

    _attr_translation_key = const.TRANS_KEY_SENSOR_DASHBOARD_WEEKLY_RATE
    _attr_native_unit_of_measurement = PERCENTAGE
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_icon = "mdi:calendar-week"

    def __init__(self, coordinator: NumuDataCoordinator, entry: ConfigEntry):
        """Initialize the sensor."""
        super().__init__(coordinator)
        self._attr_unique_id = (
            f"{entry.entry_id}{const.SENSOR_UID_SUFFIX_DASHBOARD_WEEKLY_RATE}"
        )
        self._attr_device_info = create_dashboard_device_info(entry)

    @property
    def native_value(self) -> float:
        """Return the dashboard weekly rate as a percentage."""
        dashboard = self._snapshot_section(const.SNAPSHOT_DASHBOARD)
        return calculate_percentage(dashboard.get(const.ATTR_WEEKLY_RATE, 0.0), 1)

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Expose weekly completions against the summed target."""
        dashboard = self._snapshot_section(const.SNAPSHOT_DASHBOARD)
        return {
            const.ATTR_WEEKLY_COMPLETIONS: dashboard.get(const.ATTR_WEEKLY_COMPLETIONS, 0),
            const.ATTR_WEEKLY_TARGET: dashboard.get(const.ATTR_WEEKLY_TARGET, 0),
            const.ATTR_WEEK_COLOR: dashboard.get(const.ATTR_WEEK_COLOR),
        }
