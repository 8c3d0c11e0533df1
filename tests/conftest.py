"""Shared fixtures for Numu tests."""

from collections.abc import Generator
from datetime import date
from typing import Any
from unittest.mock import patch
from zoneinfo import ZoneInfo

import pytest
from homeassistant.core import HomeAssistant
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.numu.const import (
    CADENCE_WEEKLY_TARGET,
    CONF_WEEK_START,
    DEFAULT_WEEK_START,
    DOMAIN,
    GOAL_LOWER,
    NUMU_TITLE,
)
from custom_components.numu.utils import dt_utils
from tests.helpers import cadence, make_storage, make_system, make_task, make_test

# pylint: disable=invalid-name
pytest_plugins = "pytest_homeassistant_custom_component"
# pylint: enable=invalid-name

# Wednesday; noon in the test harness' US/Pacific zone
FROZEN_NOW = "2025-11-12 20:00:00+00:00"


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations: Any) -> Any:
    """Enable custom integrations in tests."""
    # pylint: disable=unused-argument
    yield


@pytest.fixture(autouse=True)
def utc_default_timezone() -> Generator[None]:
    """Pin the engines' local timezone to UTC so stamped days stay put."""
    dt_utils.set_default_timezone(ZoneInfo("UTC"))
    yield
    dt_utils.set_default_timezone(ZoneInfo("UTC"))


@pytest.fixture
def frozen_now(freezer: Any) -> Any:
    """Freeze the clock on Wednesday 2025-11-12."""
    freezer.move_to(FROZEN_NOW)
    return freezer


@pytest.fixture
def mock_config_entry() -> MockConfigEntry:
    """Return a mock config entry."""
    return MockConfigEntry(
        domain=DOMAIN,
        title=NUMU_TITLE,
        data={},
        options={CONF_WEEK_START: DEFAULT_WEEK_START},
        entry_id="test_entry_id",
        unique_id="test_unique_id",
    )


@pytest.fixture
def mock_storage_data() -> dict[str, Any]:
    """Return an empty storage document."""
    return make_storage()


@pytest.fixture
def scenario_storage_data() -> dict[str, Any]:
    """Return one system with three tasks and a test, as of 2025-11-12.

    - Morning run: daily since Nov 10, done every day including today
    - Stretch: daily since Nov 10, never done
    - Gym: 3x per week since Nov 3, done Nov 10 and 11
    - 5K time: lower is better, measured Nov 1 (25.0) and Nov 8 (24.0)
    """
    return make_storage(
        systems=[make_system("Marathon")],
        tasks=[
            make_task(
                "Morning run",
                task_id="task-run",
                created=date(2025, 11, 10),
                completed_on=[date(2025, 11, day) for day in (10, 11, 12)],
            ),
            make_task("Stretch", task_id="task-stretch", created=date(2025, 11, 10)),
            make_task(
                "Gym",
                task_id="task-gym",
                created=date(2025, 11, 3),
                task_cadence=cadence(CADENCE_WEEKLY_TARGET, count=3),
                completed_on=[date(2025, 11, 10), date(2025, 11, 11)],
            ),
        ],
        tests=[
            make_test(
                "5K time",
                test_id="test-5k",
                goal_direction=GOAL_LOWER,
                measurements=[(date(2025, 11, 1), 25.0), (date(2025, 11, 8), 24.0)],
            )
        ],
    )


@pytest.fixture
async def init_integration(
    hass: HomeAssistant,
    frozen_now: Any,  # pylint: disable=redefined-outer-name,unused-argument
    mock_config_entry: MockConfigEntry,  # pylint: disable=redefined-outer-name
    mock_storage_data: dict[str, Any],  # pylint: disable=redefined-outer-name
) -> MockConfigEntry:
    """Set up the Numu integration for testing with mocked storage."""
    mock_config_entry.add_to_hass(hass)

    with patch(
        "homeassistant.helpers.storage.Store.async_load",
        return_value=mock_storage_data,
    ):
        assert await hass.config_entries.async_setup(mock_config_entry.entry_id)
        await hass.async_block_till_done()

    return mock_config_entry


@pytest.fixture
async def init_scenario(
    hass: HomeAssistant,
    frozen_now: Any,  # pylint: disable=redefined-outer-name,unused-argument
    mock_config_entry: MockConfigEntry,  # pylint: disable=redefined-outer-name
    scenario_storage_data: dict[str, Any],  # pylint: disable=redefined-outer-name
) -> MockConfigEntry:
    """Set up the Numu integration with the scenario storage."""
    mock_config_entry.add_to_hass(hass)

    with patch(
        "homeassistant.helpers.storage.Store.async_load",
        return_value=scenario_storage_data,
    ):
        assert await hass.config_entries.async_setup(mock_config_entry.entry_id)
        await hass.async_block_till_done()

    return mock_config_entry
