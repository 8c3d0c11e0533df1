"""Tests for NumuDataCoordinator - snapshot derivation and CRUD."""

# pylint: disable=protected-access  # Accessing coordinator internals for testing

from datetime import date
from typing import Any
from unittest.mock import patch

from homeassistant.core import HomeAssistant
from homeassistant.helpers import entity_registry as er
import pytest
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.numu import const
from custom_components.numu.coordinator import NumuDataCoordinator
from custom_components.numu.data_builders import EntityValidationError
from tests.helpers import make_storage, make_system, make_task

TODAY = date(2025, 11, 12)


def _coordinator(hass: HomeAssistant, entry: MockConfigEntry) -> NumuDataCoordinator:
    return hass.data[const.DOMAIN][entry.entry_id][const.COORDINATOR]


# ============================================================================
# Snapshot
# ============================================================================


async def test_snapshot_task_signals(
    hass: HomeAssistant, init_scenario: MockConfigEntry
) -> None:
    """Test per-task streak and status signals."""
    snapshot = _coordinator(hass, init_scenario).build_snapshot(TODAY)
    tasks = snapshot[const.SNAPSHOT_TASKS]

    run = tasks["task-run"]
    assert run[const.ATTR_CURRENT_STREAK] == 3
    assert run[const.ATTR_LONGEST_STREAK] == 3
    assert run[const.ATTR_STREAK_AT_RISK] is False
    assert run[const.ATTR_COMPLETED] is True
    assert run[const.ATTR_CADENCE] == "Every day"
    assert run[const.ATTR_WEEKLY_TARGET_MET] is None
    assert run[const.ATTR_COMPLETION_RATE] == 1.0

    stretch = tasks["task-stretch"]
    assert stretch[const.ATTR_CURRENT_STREAK] == 0
    assert stretch[const.ATTR_IS_DUE] is True
    assert stretch[const.ATTR_COMPLETED] is False

    gym = tasks["task-gym"]
    assert gym[const.ATTR_CURRENT_STREAK] == 0
    assert gym[const.ATTR_IS_DUE] is False
    assert gym[const.ATTR_WEEKLY_COMPLETIONS] == 2
    assert gym[const.ATTR_WEEKLY_TARGET] == 3
    assert gym[const.ATTR_WEEKLY_TARGET_MET] is False
    assert gym[const.ATTR_COMPLETION_RATE] == 0.3333
    assert gym[const.ATTR_CADENCE] == "3x per week"


async def test_snapshot_system_signals(
    hass: HomeAssistant, init_scenario: MockConfigEntry
) -> None:
    """Test the per-system rollup."""
    snapshot = _coordinator(hass, init_scenario).build_snapshot(TODAY)
    system = snapshot[const.SNAPSHOT_SYSTEMS]["system-1"]

    assert system[const.ATTR_SYSTEM_NAME] == "Marathon"
    assert system[const.ATTR_TASKS_DUE] == 2
    assert system[const.ATTR_TASKS_COMPLETED] == 1
    assert system[const.ATTR_DAILY_RATE] == 0.5
    assert system[const.ATTR_WEEKLY_RATE] == 0.6667
    # (1 + 0 + 2/3) / 3
    assert system[const.ATTR_TODAY_RATE] == 0.5556
    # 5 of 12 expected units since creation
    assert system[const.ATTR_CONSISTENCY] == 0.4167
    assert system[const.ATTR_SYSTEM_STREAK] == 0
    assert system[const.ATTR_DAY_COLOR] == const.COLOR_YELLOW
    assert system[const.ATTR_WEEK_COLOR] == const.COLOR_YELLOW
    assert system[const.ATTR_DUE_TESTS] == []


async def test_snapshot_tests_and_dashboard(
    hass: HomeAssistant, init_scenario: MockConfigEntry
) -> None:
    """Test performance test analytics and the dashboard section."""
    snapshot = _coordinator(hass, init_scenario).build_snapshot(TODAY)

    analytics = snapshot[const.SNAPSHOT_TESTS]["test-5k"]
    assert analytics["latest_value"] == 24.0
    assert analytics["best_value"] == 24.0
    assert analytics["improvement_percent"] == pytest.approx(4.0)
    assert analytics["trend"] == const.TREND_STABLE
    assert analytics["next_due_date"] == date(2025, 11, 15)
    assert analytics["is_due"] is False

    dashboard = snapshot[const.SNAPSHOT_DASHBOARD]
    assert dashboard[const.ATTR_DAILY_RATE] == 0.5
    assert dashboard[const.ATTR_WEEKLY_RATE] == 0.6667
    assert dashboard["active_systems"] == 1
    assert dashboard["tasks_due_today"] == 2
    assert dashboard["tasks_completed_today"] == 1
    assert dashboard["weekly_completions"] == 2
    assert dashboard["weekly_target"] == 3
    assert dashboard[const.ATTR_DAY_COLOR] == const.COLOR_YELLOW
    assert snapshot[const.SNAPSHOT_TODAY] == "2025-11-12"


async def test_snapshot_follows_week_start_option(
    hass: HomeAssistant, init_scenario: MockConfigEntry
) -> None:
    """Test Sunday weeks regroup the weekly buckets."""
    # The option change reloads the entry from storage
    await _coordinator(hass, init_scenario).store.async_save()
    hass.config_entries.async_update_entry(
        init_scenario, options={const.CONF_WEEK_START: const.WEEKDAY_SUNDAY}
    )
    await hass.async_block_till_done()
    coordinator = _coordinator(hass, init_scenario)

    assert coordinator.first_weekday == 6
    # Sunday Nov 9 to Saturday Nov 15 still holds both gym sessions
    gym = coordinator.build_snapshot(TODAY)[const.SNAPSHOT_TASKS]["task-gym"]
    assert gym[const.ATTR_WEEKLY_COMPLETIONS] == 2


async def test_coordinator_data_is_snapshot(
    hass: HomeAssistant, init_scenario: MockConfigEntry
) -> None:
    """Test the first refresh published a snapshot for today."""
    coordinator = _coordinator(hass, init_scenario)
    assert coordinator.data[const.SNAPSHOT_TODAY] == "2025-11-12"
    assert set(coordinator.data[const.SNAPSHOT_TASKS]) == {
        "task-run",
        "task-stretch",
        "task-gym",
    }


async def test_empty_storage_snapshot(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Test an empty install yields neutral values."""
    snapshot = _coordinator(hass, init_integration).build_snapshot(TODAY)
    assert snapshot[const.SNAPSHOT_SYSTEMS] == {}
    assert snapshot[const.SNAPSHOT_DASHBOARD][const.ATTR_DAILY_RATE] == 0.0
    assert snapshot[const.SNAPSHOT_DASHBOARD][const.ATTR_DAY_COLOR] == (
        const.COLOR_NEUTRAL
    )


# ============================================================================
# Lookups and CRUD
# ============================================================================


async def test_name_lookups(
    hass: HomeAssistant, init_scenario: MockConfigEntry
) -> None:
    """Test names resolve to ids, scoped by system."""
    coordinator = _coordinator(hass, init_scenario)
    assert coordinator.get_system_id_by_name("Marathon") == "system-1"
    assert coordinator.get_task_id_by_name("Gym", "system-1") == "task-gym"
    assert coordinator.get_task_id_by_name("Gym", "other-system") is None
    assert coordinator.get_test_id_by_name("5K time") == "test-5k"
    assert coordinator.get_system_id_by_name("Chess") is None


async def test_create_system_rejects_duplicate(
    hass: HomeAssistant, init_scenario: MockConfigEntry
) -> None:
    """Test system names are unique."""
    coordinator = _coordinator(hass, init_scenario)
    with pytest.raises(EntityValidationError) as err:
        coordinator.create_system({const.DATA_SYSTEM_NAME: "Marathon"})
    assert err.value.translation_key == const.TRANS_KEY_ERROR_DUPLICATE_NAME

    system_id = coordinator.create_system(
        {
            const.DATA_SYSTEM_NAME: "Reading",
            const.DATA_SYSTEM_CATEGORY: const.CATEGORY_LEARNING,
        }
    )
    assert coordinator.systems_data[system_id][const.DATA_SYSTEM_CATEGORY] == (
        const.CATEGORY_LEARNING
    )
    assert system_id in coordinator.data[const.SNAPSHOT_SYSTEMS]


async def test_create_and_update_task(
    hass: HomeAssistant, init_scenario: MockConfigEntry
) -> None:
    """Test creating a task and renaming it keeps history."""
    coordinator = _coordinator(hass, init_scenario)
    with pytest.raises(ValueError):
        coordinator.create_task(
            {const.DATA_TASK_NAME: "Orphan", const.DATA_TASK_SYSTEM_ID: "nope"}
        )

    coordinator.update_task("task-run", {const.DATA_TASK_NAME: "Easy run"})
    task = coordinator.tasks_data["task-run"]
    assert task[const.DATA_TASK_NAME] == "Easy run"
    assert len(task[const.DATA_TASK_ENTRIES]) == 3

    with pytest.raises(ValueError):
        coordinator.update_task("missing", {const.DATA_TASK_NAME: "x"})

    with pytest.raises(EntityValidationError):
        coordinator.update_task("task-run", {const.DATA_TASK_NAME: "Stretch"})
    with pytest.raises(EntityValidationError):
        coordinator.create_task(
            {const.DATA_TASK_NAME: "Gym", const.DATA_TASK_SYSTEM_ID: "system-1"}
        )


async def test_delete_system_cascades(
    hass: HomeAssistant, init_scenario: MockConfigEntry
) -> None:
    """Test deleting a system removes its tasks, tests and entities."""
    coordinator = _coordinator(hass, init_scenario)
    ent_reg = er.async_get(hass)
    streak_uid = (
        f"{init_scenario.entry_id}_task-run{const.SENSOR_UID_SUFFIX_TASK_STREAK}"
    )
    assert ent_reg.async_get_entity_id("sensor", const.DOMAIN, streak_uid)

    coordinator.delete_system("system-1")

    assert coordinator.systems_data == {}
    assert coordinator.tasks_data == {}
    assert coordinator.tests_data == {}
    assert ent_reg.async_get_entity_id("sensor", const.DOMAIN, streak_uid) is None

    with pytest.raises(ValueError):
        coordinator.delete_system("system-1")


async def test_delete_task_and_test(
    hass: HomeAssistant, init_scenario: MockConfigEntry
) -> None:
    """Test single deletes leave the rest of the system alone."""
    coordinator = _coordinator(hass, init_scenario)
    coordinator.delete_task("task-stretch")
    coordinator.delete_test("test-5k")

    assert set(coordinator.tasks_data) == {"task-run", "task-gym"}
    assert coordinator.tests_data == {}
    assert "system-1" in coordinator.systems_data
    with pytest.raises(ValueError):
        coordinator.delete_task("task-stretch")


async def test_unknown_cadence_warned_once_at_load(
    hass: HomeAssistant,
    frozen_now: Any,  # pylint: disable=unused-argument
    mock_config_entry: MockConfigEntry,
) -> None:
    """Test a corrupt cadence is reported at load, not on every refresh."""
    storage = make_storage(
        systems=[make_system("Marathon")],
        tasks=[
            make_task(
                "Hourly thing",
                task_id="task-odd",
                created=date(2025, 11, 1),
                task_cadence={"type": "hourly"},
            )
        ],
    )
    mock_config_entry.add_to_hass(hass)
    with (
        patch("homeassistant.helpers.storage.Store.async_load", return_value=storage),
        patch.object(const.LOGGER, "warning") as mock_warning,
    ):
        assert await hass.config_entries.async_setup(mock_config_entry.entry_id)
        await hass.async_block_till_done()
        coordinator = _coordinator(hass, mock_config_entry)
        await coordinator.async_refresh()
        await coordinator.async_refresh()

    cadence_warnings = [
        call for call in mock_warning.call_args_list if "unknown cadence" in call.args[0]
    ]
    assert len(cadence_warnings) == 1
    assert cadence_warnings[0].args[1] == "Hourly thing"
    # Still scheduled as a daily task
    assert coordinator.data[const.SNAPSHOT_TASKS]["task-odd"][const.ATTR_IS_DUE] is True


async def test_repairs_corrupt_sections(
    hass: HomeAssistant,
    frozen_now: Any,  # pylint: disable=unused-argument
    mock_config_entry: MockConfigEntry,
) -> None:
    """Test setup survives a storage file with a broken section."""
    mock_config_entry.add_to_hass(hass)
    with patch(
        "homeassistant.helpers.storage.Store.async_load",
        return_value={const.DATA_SYSTEMS: [], const.DATA_TASKS: {}},
    ):
        assert await hass.config_entries.async_setup(mock_config_entry.entry_id)
        await hass.async_block_till_done()

    coordinator = _coordinator(hass, mock_config_entry)
    assert coordinator.systems_data == {}
    assert coordinator.tests_data == {}
