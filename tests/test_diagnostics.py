"""Tests for Numu diagnostics."""

from homeassistant.core import HomeAssistant
from homeassistant.helpers import device_registry as dr
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.numu import const
from custom_components.numu.diagnostics import (
    async_get_config_entry_diagnostics,
    async_get_device_diagnostics,
)


async def test_config_entry_diagnostics(
    hass: HomeAssistant, init_scenario: MockConfigEntry
) -> None:
    """Test entry diagnostics return storage and the snapshot."""
    result = await async_get_config_entry_diagnostics(hass, init_scenario)

    assert set(result["storage"][const.DATA_TASKS]) == {
        "task-run",
        "task-stretch",
        "task-gym",
    }
    assert result["snapshot"][const.SNAPSHOT_TODAY] == "2025-11-12"


async def test_device_diagnostics(
    hass: HomeAssistant, init_scenario: MockConfigEntry
) -> None:
    """Test system device diagnostics return the system with its items."""
    device = dr.async_get(hass).async_get_device(
        identifiers={(const.DOMAIN, "system-1")}
    )
    assert device is not None

    result = await async_get_device_diagnostics(hass, init_scenario, device)

    assert result["system_id"] == "system-1"
    assert result["system"][const.DATA_SYSTEM_NAME] == "Marathon"
    assert len(result["tasks"]) == 3
    assert [test[const.DATA_TEST_NAME] for test in result["tests"]] == ["5K time"]


async def test_device_diagnostics_dashboard_device(
    hass: HomeAssistant, init_scenario: MockConfigEntry
) -> None:
    """Test the dashboard device has no system behind it."""
    device = dr.async_get(hass).async_get_device(
        identifiers={(const.DOMAIN, init_scenario.entry_id)}
    )
    assert device is not None

    result = await async_get_device_diagnostics(hass, init_scenario, device)
    assert "error" in result
