# File: services.py
"""Defines custom services for the Numu integration.

These services let scripts and automations check off tasks, log test
measurements and manage systems, tasks and tests by name.
"""

from __future__ import annotations

from typing import Any

import voluptuous as vol
from homeassistant.core import HomeAssistant, ServiceCall
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers import config_validation as cv

from . import const, data_builders as db
from .coordinator import NumuDataCoordinator
from .helpers.entity_helpers import get_first_numu_entry

# --- Service Schemas ---
_WEEKDAY = vol.All(vol.Coerce(int), vol.Range(min=0, max=6))

COMPLETION_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_SYSTEM_NAME): cv.string,
        vol.Required(const.FIELD_TASK_NAME): cv.string,
        vol.Optional(const.FIELD_DATE): cv.date,
        vol.Optional(const.FIELD_NOTE): cv.string,
        vol.Optional(const.FIELD_SATISFACTION): vol.All(
            vol.Coerce(int),
            vol.Range(min=const.SATISFACTION_MIN, max=const.SATISFACTION_MAX),
        ),
        vol.Optional(const.FIELD_MINUTES_SPENT): vol.All(
            vol.Coerce(int), vol.Range(min=0)
        ),
    }
)

REMOVE_COMPLETION_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_SYSTEM_NAME): cv.string,
        vol.Required(const.FIELD_TASK_NAME): cv.string,
        vol.Optional(const.FIELD_DATE): cv.date,
    }
)

LOG_TEST_ENTRY_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_SYSTEM_NAME): cv.string,
        vol.Required(const.FIELD_TEST_NAME): cv.string,
        vol.Required(const.FIELD_VALUE): vol.Coerce(float),
        vol.Optional(const.FIELD_TIMESTAMP): cv.datetime,
        vol.Optional(const.FIELD_NOTE): cv.string,
        vol.Optional(const.FIELD_CONDITIONS): cv.string,
    }
)

CREATE_SYSTEM_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_NAME): cv.string,
        vol.Optional(const.FIELD_DESCRIPTION): cv.string,
        vol.Optional(const.FIELD_CATEGORY, default=const.DEFAULT_SYSTEM_CATEGORY): vol.In(
            list(const.SYSTEM_CATEGORIES)
        ),
    }
)

DELETE_SYSTEM_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_SYSTEM_NAME): cv.string,
    }
)

CREATE_TASK_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_SYSTEM_NAME): cv.string,
        vol.Required(const.FIELD_NAME): cv.string,
        vol.Optional(const.FIELD_DESCRIPTION): cv.string,
        vol.Optional(const.FIELD_CADENCE, default=const.CADENCE_DAILY): vol.In(
            const.CADENCE_TYPES
        ),
        vol.Optional(const.FIELD_DAYS): vol.All(cv.ensure_list, [_WEEKDAY]),
        vol.Optional(const.FIELD_WEEKLY_TARGET): vol.All(
            vol.Coerce(int), vol.Range(min=1)
        ),
        vol.Optional(const.FIELD_HABIT_TYPE, default=const.DEFAULT_HABIT_TYPE): vol.In(
            const.HABIT_TYPES
        ),
        vol.Optional(const.FIELD_BASELINE_LIMIT): vol.All(
            vol.Coerce(int), vol.Range(min=0)
        ),
        vol.Optional(const.FIELD_TARGET_LIMIT): vol.All(
            vol.Coerce(int), vol.Range(min=0)
        ),
    }
)

UPDATE_TASK_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_SYSTEM_NAME): cv.string,
        vol.Required(const.FIELD_TASK_NAME): cv.string,
        vol.Optional(const.FIELD_NAME): cv.string,
        vol.Optional(const.FIELD_DESCRIPTION): cv.string,
        vol.Optional(const.FIELD_CADENCE): vol.In(const.CADENCE_TYPES),
        vol.Optional(const.FIELD_DAYS): vol.All(cv.ensure_list, [_WEEKDAY]),
        vol.Optional(const.FIELD_WEEKLY_TARGET): vol.All(
            vol.Coerce(int), vol.Range(min=1)
        ),
    }
)

DELETE_TASK_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_SYSTEM_NAME): cv.string,
        vol.Required(const.FIELD_TASK_NAME): cv.string,
    }
)

CREATE_TEST_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_SYSTEM_NAME): cv.string,
        vol.Required(const.FIELD_NAME): cv.string,
        vol.Optional(const.FIELD_UNIT): cv.string,
        vol.Optional(const.FIELD_DESCRIPTION): cv.string,
        vol.Optional(const.FIELD_GOAL_DIRECTION, default=const.GOAL_HIGHER): vol.In(
            const.GOAL_DIRECTIONS
        ),
        vol.Optional(
            const.FIELD_FREQUENCY, default=const.DEFAULT_TEST_FREQUENCY
        ): vol.In(list(const.TEST_FREQUENCY_PRESETS)),
        vol.Optional(const.FIELD_TARGET_VALUE): vol.Coerce(float),
    }
)

DELETE_TEST_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_SYSTEM_NAME): cv.string,
        vol.Required(const.FIELD_TEST_NAME): cv.string,
    }
)


def _get_coordinator(hass: HomeAssistant, service: str) -> NumuDataCoordinator | None:
    """Return the coordinator of the first loaded entry, or None."""
    entry_id = get_first_numu_entry(hass)
    if not entry_id:
        const.LOGGER.warning("WARNING: %s: %s", service, const.MSG_NO_ENTRY_FOUND)
        return None
    return hass.data[const.DOMAIN][entry_id][const.COORDINATOR]


def _resolve_system(coordinator: NumuDataCoordinator, system_name: str) -> str:
    """Map a system name to its internal_id."""
    system_id = coordinator.get_system_id_by_name(system_name)
    if not system_id:
        raise HomeAssistantError(const.ERROR_SYSTEM_NOT_FOUND_FMT.format(system_name))
    return system_id


def _resolve_task(coordinator: NumuDataCoordinator, call: ServiceCall) -> str:
    """Map system_name + task_name to the task's internal_id."""
    system_id = _resolve_system(coordinator, call.data[const.FIELD_SYSTEM_NAME])
    task_name = call.data[const.FIELD_TASK_NAME]
    task_id = coordinator.get_task_id_by_name(task_name, system_id)
    if not task_id:
        raise HomeAssistantError(const.ERROR_TASK_NOT_FOUND_FMT.format(task_name))
    return task_id


def _resolve_test(coordinator: NumuDataCoordinator, call: ServiceCall) -> str:
    """Map system_name + test_name to the test's internal_id."""
    system_id = _resolve_system(coordinator, call.data[const.FIELD_SYSTEM_NAME])
    test_name = call.data[const.FIELD_TEST_NAME]
    test_id = coordinator.get_test_id_by_name(test_name, system_id)
    if not test_id:
        raise HomeAssistantError(const.ERROR_TEST_NOT_FOUND_FMT.format(test_name))
    return test_id


def _validation_error(err: db.EntityValidationError) -> HomeAssistantError:
    """Translate a builder validation failure into a user-facing error."""
    return HomeAssistantError(
        translation_domain=const.DOMAIN,
        translation_key=err.translation_key,
        translation_placeholders=err.placeholders,
    )


async def _async_reload(hass: HomeAssistant, coordinator: NumuDataCoordinator) -> None:
    """Reload the entry so sensors for new or deleted items are (re)built."""
    await coordinator.store.async_save()
    await hass.config_entries.async_reload(coordinator.config_entry.entry_id)


def async_setup_services(hass: HomeAssistant):
    """Register Numu services."""

    async def handle_toggle_completion(call: ServiceCall):
        """Handle toggling a task's completion for a day."""
        coordinator = _get_coordinator(hass, "Toggle Completion")
        if coordinator is None:
            return
        task_id = _resolve_task(coordinator, call)
        try:
            completed = coordinator.habit_manager.toggle_completion(
                task_id,
                call.data.get(const.FIELD_DATE),
                note=call.data.get(const.FIELD_NOTE),
                satisfaction=call.data.get(const.FIELD_SATISFACTION),
                minutes_spent=call.data.get(const.FIELD_MINUTES_SPENT),
            )
        except db.EntityValidationError as err:
            raise _validation_error(err) from err

        const.LOGGER.info(
            "INFO: Task '%s' toggled to %s",
            call.data[const.FIELD_TASK_NAME],
            "completed" if completed else "not completed",
        )

    async def handle_log_completion(call: ServiceCall):
        """Handle recording a completion with optional details."""
        coordinator = _get_coordinator(hass, "Log Completion")
        if coordinator is None:
            return
        task_id = _resolve_task(coordinator, call)
        try:
            coordinator.habit_manager.log_completion(
                task_id,
                call.data.get(const.FIELD_DATE),
                note=call.data.get(const.FIELD_NOTE),
                satisfaction=call.data.get(const.FIELD_SATISFACTION),
                minutes_spent=call.data.get(const.FIELD_MINUTES_SPENT),
            )
        except db.EntityValidationError as err:
            raise _validation_error(err) from err

    async def handle_remove_completion(call: ServiceCall):
        """Handle removing a task's completion for a day."""
        coordinator = _get_coordinator(hass, "Remove Completion")
        if coordinator is None:
            return
        task_id = _resolve_task(coordinator, call)
        if not coordinator.habit_manager.remove_completion(
            task_id, call.data.get(const.FIELD_DATE)
        ):
            const.LOGGER.info(
                "INFO: Task '%s' had no completion to remove",
                call.data[const.FIELD_TASK_NAME],
            )

    async def handle_log_test_entry(call: ServiceCall):
        """Handle logging a performance test measurement."""
        coordinator = _get_coordinator(hass, "Log Test Entry")
        if coordinator is None:
            return
        test_id = _resolve_test(coordinator, call)
        try:
            coordinator.habit_manager.log_test_entry(
                test_id,
                call.data[const.FIELD_VALUE],
                call.data.get(const.FIELD_TIMESTAMP),
                notes=call.data.get(const.FIELD_NOTE),
                conditions=call.data.get(const.FIELD_CONDITIONS),
            )
        except db.EntityValidationError as err:
            raise _validation_error(err) from err

    async def handle_create_system(call: ServiceCall):
        """Handle creating a habit system."""
        coordinator = _get_coordinator(hass, "Create System")
        if coordinator is None:
            return
        try:
            coordinator.create_system(
                {
                    const.DATA_SYSTEM_NAME: call.data[const.FIELD_NAME],
                    const.DATA_SYSTEM_DESCRIPTION: call.data.get(const.FIELD_DESCRIPTION),
                    const.DATA_SYSTEM_CATEGORY: call.data[const.FIELD_CATEGORY],
                }
            )
        except db.EntityValidationError as err:
            raise _validation_error(err) from err
        await _async_reload(hass, coordinator)

    async def handle_delete_system(call: ServiceCall):
        """Handle deleting a system with all of its tasks and tests."""
        coordinator = _get_coordinator(hass, "Delete System")
        if coordinator is None:
            return
        coordinator.delete_system(
            _resolve_system(coordinator, call.data[const.FIELD_SYSTEM_NAME])
        )
        await _async_reload(hass, coordinator)

    async def handle_create_task(call: ServiceCall):
        """Handle creating a task inside a system."""
        coordinator = _get_coordinator(hass, "Create Task")
        if coordinator is None:
            return
        system_id = _resolve_system(coordinator, call.data[const.FIELD_SYSTEM_NAME])
        user_input: dict[str, Any] = {
            const.DATA_TASK_SYSTEM_ID: system_id,
            const.DATA_TASK_NAME: call.data[const.FIELD_NAME],
            const.DATA_TASK_DESCRIPTION: call.data.get(const.FIELD_DESCRIPTION),
            const.DATA_TASK_HABIT_TYPE: call.data[const.FIELD_HABIT_TYPE],
        }
        try:
            user_input[const.DATA_TASK_CADENCE] = db.build_cadence(
                call.data[const.FIELD_CADENCE],
                call.data.get(const.FIELD_DAYS),
                call.data.get(const.FIELD_WEEKLY_TARGET),
            )
            if call.data[const.FIELD_HABIT_TYPE] == const.HABIT_TYPE_BREAK:
                baseline = call.data.get(const.FIELD_BASELINE_LIMIT)
                if baseline is not None:
                    user_input[const.DATA_TASK_TIME_LIMIT] = db.build_time_limit(
                        baseline, call.data.get(const.FIELD_TARGET_LIMIT, 0)
                    )
            coordinator.create_task(user_input)
        except db.EntityValidationError as err:
            raise _validation_error(err) from err
        await _async_reload(hass, coordinator)

    async def handle_update_task(call: ServiceCall):
        """Handle renaming a task or changing its cadence; history is kept."""
        coordinator = _get_coordinator(hass, "Update Task")
        if coordinator is None:
            return
        task_id = _resolve_task(coordinator, call)
        user_input: dict[str, Any] = {}
        if const.FIELD_NAME in call.data:
            user_input[const.DATA_TASK_NAME] = call.data[const.FIELD_NAME]
        if const.FIELD_DESCRIPTION in call.data:
            user_input[const.DATA_TASK_DESCRIPTION] = call.data[const.FIELD_DESCRIPTION]
        try:
            if const.FIELD_CADENCE in call.data:
                user_input[const.DATA_TASK_CADENCE] = db.build_cadence(
                    call.data[const.FIELD_CADENCE],
                    call.data.get(const.FIELD_DAYS),
                    call.data.get(const.FIELD_WEEKLY_TARGET),
                )
            coordinator.update_task(task_id, user_input)
        except db.EntityValidationError as err:
            raise _validation_error(err) from err
        await _async_reload(hass, coordinator)

    async def handle_delete_task(call: ServiceCall):
        """Handle deleting a task and its history."""
        coordinator = _get_coordinator(hass, "Delete Task")
        if coordinator is None:
            return
        coordinator.delete_task(_resolve_task(coordinator, call))
        await _async_reload(hass, coordinator)

    async def handle_create_test(call: ServiceCall):
        """Handle creating a performance test inside a system."""
        coordinator = _get_coordinator(hass, "Create Test")
        if coordinator is None:
            return
        system_id = _resolve_system(coordinator, call.data[const.FIELD_SYSTEM_NAME])
        try:
            coordinator.create_test(
                {
                    const.DATA_TEST_SYSTEM_ID: system_id,
                    const.DATA_TEST_NAME: call.data[const.FIELD_NAME],
                    const.DATA_TEST_UNIT: call.data.get(const.FIELD_UNIT),
                    const.DATA_TEST_DESCRIPTION: call.data.get(const.FIELD_DESCRIPTION),
                    const.DATA_TEST_GOAL_DIRECTION: call.data[const.FIELD_GOAL_DIRECTION],
                    const.DATA_TEST_FREQUENCY: call.data[const.FIELD_FREQUENCY],
                    const.DATA_TEST_TARGET_VALUE: call.data.get(const.FIELD_TARGET_VALUE),
                }
            )
        except db.EntityValidationError as err:
            raise _validation_error(err) from err
        await _async_reload(hass, coordinator)

    async def handle_delete_test(call: ServiceCall):
        """Handle deleting a performance test."""
        coordinator = _get_coordinator(hass, "Delete Test")
        if coordinator is None:
            return
        coordinator.delete_test(_resolve_test(coordinator, call))
        await _async_reload(hass, coordinator)

    for service, handler, schema in (
        (const.SERVICE_TOGGLE_COMPLETION, handle_toggle_completion, COMPLETION_SCHEMA),
        (const.SERVICE_LOG_COMPLETION, handle_log_completion, COMPLETION_SCHEMA),
        (
            const.SERVICE_REMOVE_COMPLETION,
            handle_remove_completion,
            REMOVE_COMPLETION_SCHEMA,
        ),
        (const.SERVICE_LOG_TEST_ENTRY, handle_log_test_entry, LOG_TEST_ENTRY_SCHEMA),
        (const.SERVICE_CREATE_SYSTEM, handle_create_system, CREATE_SYSTEM_SCHEMA),
        (const.SERVICE_DELETE_SYSTEM, handle_delete_system, DELETE_SYSTEM_SCHEMA),
        (const.SERVICE_CREATE_TASK, handle_create_task, CREATE_TASK_SCHEMA),
        (const.SERVICE_UPDATE_TASK, handle_update_task, UPDATE_TASK_SCHEMA),
        (const.SERVICE_DELETE_TASK, handle_delete_task, DELETE_TASK_SCHEMA),
        (const.SERVICE_CREATE_TEST, handle_create_test, CREATE_TEST_SCHEMA),
        (const.SERVICE_DELETE_TEST, handle_delete_test, DELETE_TEST_SCHEMA),
    ):
        hass.services.async_register(const.DOMAIN, service, handler, schema=schema)

    const.LOGGER.info("INFO: Numu services have been registered successfully")


async def async_unload_services(hass: HomeAssistant):
    """Unregister Numu services when unloading the integration."""
    services = [
        const.SERVICE_TOGGLE_COMPLETION,
        const.SERVICE_LOG_COMPLETION,
        const.SERVICE_REMOVE_COMPLETION,
        const.SERVICE_LOG_TEST_ENTRY,
        const.SERVICE_CREATE_SYSTEM,
        const.SERVICE_DELETE_SYSTEM,
        const.SERVICE_CREATE_TASK,
        const.SERVICE_UPDATE_TASK,
        const.SERVICE_DELETE_TASK,
        const.SERVICE_CREATE_TEST,
        const.SERVICE_DELETE_TEST,
    ]

    for service in services:
        if hass.services.has_service(const.DOMAIN, service):
            hass.services.async_remove(const.DOMAIN, service)

    const.LOGGER.info("INFO: Numu services have been unregistered")
