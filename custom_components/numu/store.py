# File: store.py
"""Persistent storage for the Numu integration.

One JSON document (Home Assistant's Storage helper, key `numu_data`) holds
systems, tasks and performance tests in flat sections keyed by internal_id.
Completion and measurement entries live inside their task or test.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.helpers.storage import Store

from . import const
from .utils.dt_utils import dt_now_utc

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

# Sections that must always be dicts keyed by internal_id
_ITEM_SECTIONS = (const.DATA_SYSTEMS, const.DATA_TASKS, const.DATA_TESTS)


class NumuStore:
    """Loads, caches and saves the Numu document.

    Save failures are logged and never retried; the in-memory copy stays
    authoritative until the next successful save.
    """

    def __init__(
        self, hass: HomeAssistant, storage_key: str = const.STORAGE_KEY
    ) -> None:
        """Initialize the store."""
        self.hass = hass
        self._store: Store = Store(hass, const.STORAGE_VERSION, storage_key)
        self._data: dict[str, Any] = {}

    @staticmethod
    def get_default_structure() -> dict[str, Any]:
        """Return the empty document of a fresh installation."""
        structure: dict[str, Any] = {
            const.DATA_META: {
                const.DATA_META_SCHEMA_VERSION: const.SCHEMA_VERSION,
                const.DATA_META_LAST_SAVED: None,
            },
        }
        structure.update({section: {} for section in _ITEM_SECTIONS})
        return structure

    async def async_initialize(self) -> None:
        """Load the document, repairing sections that are missing or corrupt."""
        stored = await self._store.async_load()
        if stored is None:
            const.LOGGER.info("INFO: No Numu storage found, starting empty")
            self._data = self.get_default_structure()
            return

        self._data = stored
        if not isinstance(self._data.get(const.DATA_META), dict):
            self._data[const.DATA_META] = self.get_default_structure()[const.DATA_META]
        for section in _ITEM_SECTIONS:
            if not isinstance(self._data.get(section), dict):
                const.LOGGER.warning(
                    "WARNING: Storage section '%s' missing or corrupt, resetting it",
                    section,
                )
                self._data[section] = {}

        const.LOGGER.debug(
            "DEBUG: Loaded %d systems, %d tasks, %d tests (schema %s)",
            len(self._data[const.DATA_SYSTEMS]),
            len(self._data[const.DATA_TASKS]),
            len(self._data[const.DATA_TESTS]),
            self._data[const.DATA_META].get(const.DATA_META_SCHEMA_VERSION),
        )

    @property
    def data(self) -> dict[str, Any]:
        """The cached document."""
        return self._data

    def get_systems(self) -> dict[str, Any]:
        """Return the systems section."""
        return self._data.setdefault(const.DATA_SYSTEMS, {})

    def get_tasks(self) -> dict[str, Any]:
        """Return the tasks section."""
        return self._data.setdefault(const.DATA_TASKS, {})

    def get_tests(self) -> dict[str, Any]:
        """Return the performance tests section."""
        return self._data.setdefault(const.DATA_TESTS, {})

    def set_data(self, new_data: dict[str, Any]) -> None:
        """Replace the cached document."""
        self._data = new_data

    async def async_save(self) -> None:
        """Stamp meta.last_saved and write the document.

        OSError (disk, permissions), TypeError (non-serializable values) and
        ValueError (invalid JSON values) are logged, not raised.
        """
        meta = self._data.setdefault(const.DATA_META, {})
        meta[const.DATA_META_LAST_SAVED] = dt_now_utc().isoformat()
        try:
            await self._store.async_save(self._data)
        except (OSError, TypeError, ValueError) as err:
            const.LOGGER.error(
                "ERROR: Failed to save Numu storage to %s (%s): %s",
                self._store.path,
                type(err).__name__,
                err,
            )
            return
        const.LOGGER.debug("DEBUG: Numu storage saved")

    async def async_clear_data(self) -> None:
        """Reset to the empty document and save it."""
        const.LOGGER.warning("WARNING: Clearing all Numu data")
        self._data = self.get_default_structure()
        await self.async_save()

    async def async_delete_storage(self) -> None:
        """Clear the data and remove the storage file."""
        await self.async_clear_data()
        try:
            await self._store.async_remove()
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to remove storage file %s: %s", self._store.path, err
            )
            return
        const.LOGGER.info("INFO: Removed storage file %s", self._store.path)
