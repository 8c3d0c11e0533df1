# File: helpers/__init__.py
"""Home Assistant-bound helper functions for Numu.

This module contains functions that REQUIRE Home Assistant dependencies.
These helpers interact with the HA entity registry, device registry and
config entries.

NOTE: Functions that need `hass` object belong here, NOT in utils/.

Submodules:
    - entity_helpers: Event signals, entry lookup, entity registry cleanup
    - device_helpers: DeviceInfo construction

Usage:
    from .helpers import entity_helpers as eh
    from .helpers.device_helpers import create_system_device_info
"""

from . import device_helpers, entity_helpers

__all__ = [
    "device_helpers",
    "entity_helpers",
]
