"""Tests for Numu config and options flows."""

from unittest.mock import patch

from homeassistant import config_entries
from homeassistant.core import HomeAssistant
from homeassistant.data_entry_flow import FlowResultType
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.numu.const import (
    CONF_WEEK_START,
    DOMAIN,
    NUMU_TITLE,
    TRANS_KEY_ERROR_SINGLE_INSTANCE,
    WEEKDAY_MONDAY,
    WEEKDAY_SUNDAY,
)


async def test_form_user_flow_success(hass: HomeAssistant) -> None:
    """Test the user step creates the entry with the week start option."""
    result = await hass.config_entries.flow.async_init(
        DOMAIN, context={"source": config_entries.SOURCE_USER}
    )
    assert result.get("type") == FlowResultType.FORM
    assert result.get("step_id") == "user"

    with patch(
        "custom_components.numu.async_setup_entry",
        return_value=True,
    ) as mock_setup_entry:
        result = await hass.config_entries.flow.async_configure(
            result.get("flow_id"),
            user_input={CONF_WEEK_START: WEEKDAY_SUNDAY},
        )
        await hass.async_block_till_done()

    assert result.get("type") == FlowResultType.CREATE_ENTRY
    assert result.get("title") == NUMU_TITLE
    assert result.get("data") == {}
    assert result.get("options") == {CONF_WEEK_START: WEEKDAY_SUNDAY}
    assert len(mock_setup_entry.mock_calls) == 1


async def test_single_instance_abort(
    hass: HomeAssistant, mock_config_entry: MockConfigEntry
) -> None:
    """Test a second entry is refused."""
    mock_config_entry.add_to_hass(hass)

    result = await hass.config_entries.flow.async_init(
        DOMAIN, context={"source": config_entries.SOURCE_USER}
    )
    assert result.get("type") == FlowResultType.ABORT
    assert result.get("reason") == TRANS_KEY_ERROR_SINGLE_INSTANCE


async def test_options_flow_changes_week_start(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Test the options flow saves a new week start and reloads."""
    assert init_integration.options[CONF_WEEK_START] == WEEKDAY_MONDAY

    result = await hass.config_entries.options.async_init(init_integration.entry_id)
    assert result.get("type") == FlowResultType.FORM
    assert result.get("step_id") == "init"

    result = await hass.config_entries.options.async_configure(
        result.get("flow_id"),
        user_input={CONF_WEEK_START: WEEKDAY_SUNDAY},
    )
    await hass.async_block_till_done()

    assert result.get("type") == FlowResultType.CREATE_ENTRY
    assert init_integration.options[CONF_WEEK_START] == WEEKDAY_SUNDAY
    coordinator = hass.data[DOMAIN][init_integration.entry_id]["coordinator"]
    assert coordinator.first_weekday == 6
