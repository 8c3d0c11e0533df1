# File: helpers/device_helpers.py
"""Device registry helper functions for Numu.

Each system is a service device grouping its task and test sensors; the
dashboard sensors hang off a device for the config entry itself.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from homeassistant.helpers.device_registry import DeviceEntryType, DeviceInfo

from .. import const

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry


def create_system_device_info(
    system_id: str,
    system_name: str,
    config_entry: ConfigEntry,
) -> DeviceInfo:
    """Create device info for a habit system.

    Args:
        system_id: Internal ID (UUID) of the system
        system_name: Display name of the system
        config_entry: Config entry for this integration instance
    """
    return DeviceInfo(
        identifiers={(const.DOMAIN, system_id)},
        name=f"{system_name} ({config_entry.title})",
        manufacturer=const.NUMU_TITLE,
        model="Habit System",
        entry_type=DeviceEntryType.SERVICE,
    )


def create_dashboard_device_info(config_entry: ConfigEntry) -> DeviceInfo:
    """Create device info for the dashboard-wide sensors."""
    return DeviceInfo(
        identifiers={(const.DOMAIN, config_entry.entry_id)},
        name=f"{config_entry.title} Dashboard",
        manufacturer=const.NUMU_TITLE,
        model="Consistency Dashboard",
        entry_type=DeviceEntryType.SERVICE,
    )
