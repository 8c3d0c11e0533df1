"""Shared plumbing for Numu write managers.

Managers mutate the coordinator's stored sections, flush them, and then tell
the rest of the entry what changed over dispatcher signals scoped to the
config entry (see entity_helpers.get_event_signal).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.dispatcher import (
    async_dispatcher_connect,
    async_dispatcher_send,
)

from .. import const
from ..helpers.entity_helpers import get_event_signal

if TYPE_CHECKING:
    from collections.abc import Callable

    from homeassistant.core import HomeAssistant

    from ..coordinator import NumuDataCoordinator
    from ..type_defs import PerformanceTestData, TaskData


class BaseManager(ABC):
    """Base class for managers writing to the habit history.

    Subclasses get:
    - get_task / get_test: stored records, raising for unknown ids
    - commit: flush + refresh followed by a signal
    - emit / listen: signals scoped to this config entry; listeners are
      dropped when the entry unloads
    """

    def __init__(self, hass: HomeAssistant, coordinator: NumuDataCoordinator) -> None:
        """Bind the manager to one config entry's coordinator."""
        self.hass = hass
        self.coordinator = coordinator
        self.entry_id = coordinator.config_entry.entry_id

    @abstractmethod
    async def async_setup(self) -> None:
        """Register listeners; called once while the coordinator loads."""

    # ────────────────────────────────────────────────────────────────
    # Record access
    # ────────────────────────────────────────────────────────────────

    def get_task(self, task_id: str) -> TaskData:
        """Return a stored task with a usable entry list."""
        task = self.coordinator.tasks_data.get(task_id)
        if task is None:
            raise HomeAssistantError(const.ERROR_TASK_NOT_FOUND_FMT.format(task_id))
        if not isinstance(task.get(const.DATA_TASK_ENTRIES), list):
            const.LOGGER.warning(
                "WARNING: Entries of task '%s' were corrupt and have been reset",
                task.get(const.DATA_TASK_NAME),
            )
            task[const.DATA_TASK_ENTRIES] = []
        return task

    def get_test(self, test_id: str) -> PerformanceTestData:
        """Return a stored performance test with a usable entry list."""
        test = self.coordinator.tests_data.get(test_id)
        if test is None:
            raise HomeAssistantError(const.ERROR_TEST_NOT_FOUND_FMT.format(test_id))
        if not isinstance(test.get(const.DATA_TEST_ENTRIES), list):
            test[const.DATA_TEST_ENTRIES] = []
        return test

    # ────────────────────────────────────────────────────────────────
    # Change notification
    # ────────────────────────────────────────────────────────────────

    def commit(self, suffix: str, **payload: Any) -> None:
        """Persist the coordinator data, refresh entities, then emit `suffix`."""
        self.coordinator._persist_and_update()
        self.emit(suffix, **payload)

    def emit(self, suffix: str, **payload: Any) -> None:
        """Send `payload` to listeners of `suffix` on this entry.

        The dispatcher passes positional arguments only, so listeners receive
        the payload as a single dict.
        """
        const.LOGGER.debug(
            "DEBUG: %s emits '%s' (%s)",
            self.__class__.__name__,
            suffix,
            ", ".join(sorted(payload)),
        )
        signal = get_event_signal(self.entry_id, suffix)
        async_dispatcher_send(self.hass, signal, payload)

    def listen(self, suffix: str, callback: Callable[[dict[str, Any]], Any]) -> None:
        """Call `callback` with each payload of `suffix` until the entry unloads."""
        self.coordinator.config_entry.async_on_unload(
            async_dispatcher_connect(
                self.hass, get_event_signal(self.entry_id, suffix), callback
            )
        )
