"""Diagnostics support for Numu integration.

Returns the raw stored document plus the derived snapshot, so a habit
history can be inspected (or restored) without touching the storage file.
"""

from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.device_registry import DeviceEntry

from . import const
from .coordinator import NumuDataCoordinator


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant, entry: ConfigEntry
) -> dict[str, Any]:
    """Return diagnostics for a config entry."""
    coordinator: NumuDataCoordinator = hass.data[const.DOMAIN][entry.entry_id][
        const.COORDINATOR
    ]
    return {
        "storage": coordinator.store.data,
        "snapshot": coordinator.data,
    }


async def async_get_device_diagnostics(
    hass: HomeAssistant, entry: ConfigEntry, device: DeviceEntry
) -> dict[str, Any]:
    """Return the stored system, its tasks and tests for a system device."""
    coordinator: NumuDataCoordinator = hass.data[const.DOMAIN][entry.entry_id][
        const.COORDINATOR
    ]

    system_id = None
    for identifier in device.identifiers:
        if identifier[0] == const.DOMAIN:
            system_id = identifier[1]
            break

    if not system_id:
        return {"error": "Could not determine system_id from device identifiers"}

    system = coordinator.systems_data.get(system_id)
    if not system:
        return {"error": f"System data not found for system_id: {system_id}"}

    return {
        "system_id": system_id,
        "system": system,
        "tasks": coordinator.tasks_for_system(system_id),
        "tests": coordinator.tests_for_system(system_id),
    }
