"""Base entity classes for Numu integration."""

from __future__ import annotations

from typing import Any

from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .coordinator import NumuDataCoordinator


class NumuCoordinatorEntity(CoordinatorEntity[NumuDataCoordinator]):
    """Base entity for sensors backed by the coordinator snapshot.

    Subclasses bound to one task, system or test set `_snapshot_key` (the
    snapshot section) and `_item_id`; they go unavailable once the item is no
    longer in the snapshot.
    """

    _attr_has_entity_name = True
    _snapshot_key: str | None = None
    _item_id: str | None = None

    @property
    def available(self) -> bool:
        """Available while the coordinator is and the backing item still exists."""
        if not super().available:
            return False
        if self._snapshot_key is None or self._item_id is None:
            return True
        return self._item_id in self._snapshot_section(self._snapshot_key)

    def _snapshot_section(self, section: str) -> dict[str, Any]:
        """Return one section of the derived snapshot (empty before first refresh)."""
        data = self.coordinator.data or {}
        return data.get(section) or {}

    @property
    def _signals(self) -> dict[str, Any]:
        """Derived signals of the backing item."""
        if self._snapshot_key is None or self._item_id is None:
            return {}
        return self._snapshot_section(self._snapshot_key).get(self._item_id) or {}
