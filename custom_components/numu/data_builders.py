"""Entity lifecycle management helpers.

This module is the SINGLE SOURCE OF TRUTH for:
- Entity field defaults
- Business logic validation
- Complete entity structure building

### Build Functions
Each entity type has a `build_<entity>()` function that:
- Takes user input with DATA_* keys
- Generates internal_id (UUID) for new entities
- Sets the created_at timestamp
- Applies field defaults
- Returns a complete entity dict ready for storage

Systems and tasks can also be rebuilt in update mode by passing `existing`,
which preserves every field not present in the input.

Consumers:
- services.py (programmatic entity management)
- coordinator.py (thin storage wrapper)
- managers/habit_manager.py (completion and measurement entries)
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any, cast
import uuid

from . import const
from .type_defs import (
    CompletionEntry,
    PerformanceTestData,
    SystemData,
    TaskData,
    TestEntryData,
)
from .utils.dt_utils import (
    as_utc,
    dt_now_utc,
    dt_parse,
    dt_today_local,
    start_of_local_day,
)

# ==============================================================================
# HELPER FUNCTIONS FOR FIELD NORMALIZATION
# ==============================================================================


def _normalize_name(value: Any) -> str:
    """Return a stripped name, or an empty string for missing values."""
    return str(value).strip() if value else ""


def _normalize_optional_text(value: Any) -> str | None:
    """Return stripped text, or None for blank values."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _get_field(
    user_input: dict[str, Any],
    existing: dict[str, Any] | None,
    data_key: str,
    default: Any,
) -> Any:
    """Get field value: user_input > existing > default."""
    if data_key in user_input:
        return user_input[data_key]
    if existing is not None:
        return existing.get(data_key, default)
    return default


# ==============================================================================
# EXCEPTIONS
# ==============================================================================


class EntityValidationError(Exception):
    """Validation error with field-specific information.

    Attributes:
        field: The FIELD_* / DATA_* key that failed validation
        translation_key: The TRANS_KEY_* constant for the error message
        placeholders: Optional dict for translation string placeholders

    Example:
        raise EntityValidationError(
            field=const.FIELD_SATISFACTION,
            translation_key=const.TRANS_KEY_ERROR_INVALID_SATISFACTION,
            placeholders={"value": "7"},
        )
    """

    def __init__(
        self,
        field: str,
        translation_key: str,
        placeholders: dict[str, str] | None = None,
    ) -> None:
        """Initialize EntityValidationError."""
        self.field = field
        self.translation_key = translation_key
        self.placeholders = placeholders or {}
        super().__init__(translation_key)


def entry_timestamp(day: date | datetime | str | None = None) -> str:
    """Return the ISO UTC timestamp stored for an entry on `day`.

    Today is stamped with the current time. Past or future days are stamped
    at local noon so DST shifts cannot move them to a neighbouring day.
    """
    if isinstance(day, str):
        parsed = dt_parse(day)
        if parsed is None:
            raise EntityValidationError(
                field=const.FIELD_DATE,
                translation_key=const.TRANS_KEY_ERROR_INVALID_VALUE,
                placeholders={"value": day},
            )
        return as_utc(parsed).isoformat()
    if isinstance(day, datetime):
        return as_utc(day).isoformat()
    if day is None or day == dt_today_local():
        return dt_now_utc().isoformat()

    midnight = cast("datetime", start_of_local_day(day))
    return as_utc(midnight + timedelta(hours=12)).isoformat()


# ==============================================================================
# SYSTEMS
# ==============================================================================


def validate_system_data(
    data: dict[str, Any],
    existing_systems: dict[str, Any] | None = None,
    *,
    current_system_id: str | None = None,
) -> dict[str, str]:
    """Validate system business rules.

    Returns:
        Dict of errors: {field: translation_key}. Empty dict means valid.

    Validation Rules:
        1. Name not empty
        2. Name not duplicate
        3. Category known (if provided)
    """
    errors: dict[str, str] = {}

    name = _normalize_name(data.get(const.DATA_SYSTEM_NAME))
    if not name:
        errors[const.DATA_SYSTEM_NAME] = const.TRANS_KEY_ERROR_INVALID_NAME
        return errors

    if existing_systems:
        for system_id, system_data in existing_systems.items():
            if system_id == current_system_id:
                continue
            if system_data.get(const.DATA_SYSTEM_NAME) == name:
                errors[const.DATA_SYSTEM_NAME] = const.TRANS_KEY_ERROR_DUPLICATE_NAME
                return errors

    category = data.get(const.DATA_SYSTEM_CATEGORY)
    if category is not None and category not in const.SYSTEM_CATEGORIES:
        errors[const.DATA_SYSTEM_CATEGORY] = const.TRANS_KEY_ERROR_INVALID_CATEGORY

    return errors


def ensure_unique_in_system(
    name: Any,
    items: dict[str, Any],
    system_id: str,
    *,
    current_id: str | None = None,
) -> None:
    """Raise if another task or test of `system_id` already uses `name`.

    Tasks and tests share the name/system_id keys, so one check covers both.
    """
    normalized = _normalize_name(name)
    for item_id, item in items.items():
        if item_id == current_id or item.get(const.DATA_TASK_SYSTEM_ID) != system_id:
            continue
        if item.get(const.DATA_TASK_NAME) == normalized:
            raise EntityValidationError(
                field=const.FIELD_NAME,
                translation_key=const.TRANS_KEY_ERROR_DUPLICATE_NAME,
                placeholders={"name": normalized},
            )


def build_system(
    user_input: dict[str, Any],
    existing: SystemData | None = None,
) -> SystemData:
    """Build system data for create or update operations.

    Color and icon default to the category's palette entry.

    Raises:
        EntityValidationError: If the name is empty or the category unknown
    """
    existing_dict = cast("dict[str, Any] | None", existing)
    name = _normalize_name(
        _get_field(user_input, existing_dict, const.DATA_SYSTEM_NAME, "")
    )
    if not name:
        raise EntityValidationError(
            field=const.DATA_SYSTEM_NAME,
            translation_key=const.TRANS_KEY_ERROR_INVALID_NAME,
        )

    category = _get_field(
        user_input,
        existing_dict,
        const.DATA_SYSTEM_CATEGORY,
        const.DEFAULT_SYSTEM_CATEGORY,
    )
    if category not in const.SYSTEM_CATEGORIES:
        raise EntityValidationError(
            field=const.DATA_SYSTEM_CATEGORY,
            translation_key=const.TRANS_KEY_ERROR_INVALID_CATEGORY,
            placeholders={"value": str(category)},
        )
    default_color, default_icon = const.SYSTEM_CATEGORIES[category]

    if existing is None:
        internal_id = str(uuid.uuid4())
        created_at = dt_now_utc().isoformat()
    else:
        internal_id = existing[const.DATA_INTERNAL_ID]
        created_at = existing.get(const.DATA_SYSTEM_CREATED_AT, dt_now_utc().isoformat())

    return SystemData(
        internal_id=internal_id,
        name=name,
        description=str(
            _get_field(user_input, existing_dict, const.DATA_SYSTEM_DESCRIPTION, "")
            or ""
        ),
        category=category,
        color=_get_field(user_input, existing_dict, const.DATA_SYSTEM_COLOR, None)
        or default_color,
        icon=_get_field(user_input, existing_dict, const.DATA_SYSTEM_ICON, None)
        or default_icon,
        created_at=created_at,
    )


# ==============================================================================
# TASKS
# ==============================================================================


def build_cadence(
    cadence_type: str | None,
    days: list[int] | None = None,
    weekly_target: int | None = None,
) -> dict[str, Any]:
    """Build and validate a cadence dict.

    Raises:
        EntityValidationError: Unknown type, missing/invalid weekdays for
            specific days, or a weekly target below 1
    """
    cadence_type = cadence_type or const.CADENCE_DAILY
    if cadence_type not in const.CADENCE_TYPES:
        raise EntityValidationError(
            field=const.FIELD_CADENCE,
            translation_key=const.TRANS_KEY_ERROR_INVALID_CADENCE,
            placeholders={"value": str(cadence_type)},
        )

    cadence: dict[str, Any] = {const.CADENCE_TYPE: cadence_type}
    if cadence_type == const.CADENCE_SPECIFIC_DAYS:
        clean_days = sorted(set(days or []))
        if not clean_days or any(
            not isinstance(day, int) or not 0 <= day <= 6 for day in clean_days
        ):
            raise EntityValidationError(
                field=const.FIELD_DAYS,
                translation_key=const.TRANS_KEY_ERROR_INVALID_DAYS,
            )
        cadence[const.CADENCE_DAYS] = clean_days
    elif cadence_type == const.CADENCE_WEEKLY_TARGET:
        if not isinstance(weekly_target, int) or weekly_target < 1:
            raise EntityValidationError(
                field=const.FIELD_WEEKLY_TARGET,
                translation_key=const.TRANS_KEY_ERROR_INVALID_WEEKLY_TARGET,
                placeholders={"value": str(weekly_target)},
            )
        cadence[const.CADENCE_COUNT] = weekly_target
    return cadence


def build_time_limit(baseline: int, target: int) -> dict[str, Any]:
    """Build the time limit settings of a break habit (minutes).

    Raises:
        EntityValidationError: Negative values or a target above the baseline
    """
    if baseline < 0 or target < 0 or target > baseline:
        raise EntityValidationError(
            field=const.FIELD_BASELINE_LIMIT,
            translation_key=const.TRANS_KEY_ERROR_INVALID_TIME_LIMIT,
            placeholders={"baseline": str(baseline), "target": str(target)},
        )
    return {
        const.TIME_LIMIT_BASELINE: baseline,
        const.TIME_LIMIT_TARGET: target,
        const.TIME_LIMIT_CURRENT_WEEK_LIMIT: baseline,
        const.TIME_LIMIT_WEEK_START: dt_now_utc().isoformat(),
        const.TIME_LIMIT_REDUCTION: const.DEFAULT_LIMIT_REDUCTION,
    }


def build_task(
    user_input: dict[str, Any],
    existing: TaskData | None = None,
) -> TaskData:
    """Build task data for create or update operations.

    `user_input` carries the cadence already built by `build_cadence()`.
    Entries are never touched here; in update mode they are preserved.

    Raises:
        EntityValidationError: Empty name, missing system or invalid habit type
    """
    existing_dict = cast("dict[str, Any] | None", existing)
    name = _normalize_name(_get_field(user_input, existing_dict, const.DATA_TASK_NAME, ""))
    if not name:
        raise EntityValidationError(
            field=const.DATA_TASK_NAME,
            translation_key=const.TRANS_KEY_ERROR_INVALID_NAME,
        )

    system_id = _get_field(user_input, existing_dict, const.DATA_TASK_SYSTEM_ID, None)
    if not system_id:
        raise EntityValidationError(
            field=const.DATA_TASK_SYSTEM_ID,
            translation_key=const.TRANS_KEY_ERROR_INVALID_NAME,
        )

    habit_type = _get_field(
        user_input, existing_dict, const.DATA_TASK_HABIT_TYPE, const.DEFAULT_HABIT_TYPE
    )
    if habit_type not in const.HABIT_TYPES:
        raise EntityValidationError(
            field=const.DATA_TASK_HABIT_TYPE,
            translation_key=const.TRANS_KEY_ERROR_INVALID_HABIT_TYPE,
            placeholders={"value": str(habit_type)},
        )

    time_limit = _get_field(user_input, existing_dict, const.DATA_TASK_TIME_LIMIT, None)
    if habit_type != const.HABIT_TYPE_BREAK:
        time_limit = None

    if existing is None:
        internal_id = str(uuid.uuid4())
        created_at = dt_now_utc().isoformat()
        entries: list[CompletionEntry] = []
    else:
        internal_id = existing[const.DATA_INTERNAL_ID]
        created_at = existing.get(const.DATA_TASK_CREATED_AT, dt_now_utc().isoformat())
        entries = list(existing.get(const.DATA_TASK_ENTRIES) or [])

    return TaskData(
        internal_id=internal_id,
        system_id=system_id,
        name=name,
        description=str(
            _get_field(user_input, existing_dict, const.DATA_TASK_DESCRIPTION, "") or ""
        ),
        cadence=_get_field(
            user_input,
            existing_dict,
            const.DATA_TASK_CADENCE,
            {const.CADENCE_TYPE: const.CADENCE_DAILY},
        ),
        habit_type=habit_type,
        time_limit=time_limit,
        created_at=created_at,
        entries=entries,
    )


def build_completion_entry(
    day: date | datetime | str | None = None,
    *,
    note: str | None = None,
    satisfaction: int | None = None,
    minutes_spent: int | None = None,
) -> CompletionEntry:
    """Build a completion entry for `day` (today when omitted).

    Raises:
        EntityValidationError: Satisfaction outside 1-5 or negative minutes
    """
    if satisfaction is not None and not (
        const.SATISFACTION_MIN <= satisfaction <= const.SATISFACTION_MAX
    ):
        raise EntityValidationError(
            field=const.FIELD_SATISFACTION,
            translation_key=const.TRANS_KEY_ERROR_INVALID_SATISFACTION,
            placeholders={"value": str(satisfaction)},
        )
    if minutes_spent is not None and minutes_spent < 0:
        raise EntityValidationError(
            field=const.FIELD_MINUTES_SPENT,
            translation_key=const.TRANS_KEY_ERROR_INVALID_MINUTES,
            placeholders={"value": str(minutes_spent)},
        )

    return CompletionEntry(
        internal_id=str(uuid.uuid4()),
        timestamp=entry_timestamp(day),
        note=_normalize_optional_text(note),
        satisfaction=satisfaction,
        minutes_spent=minutes_spent,
    )


# ==============================================================================
# PERFORMANCE TESTS
# ==============================================================================


def build_frequency(frequency: str | dict[str, Any] | None) -> dict[str, Any]:
    """Resolve a preset name or explicit frequency dict.

    Raises:
        EntityValidationError: Unknown preset, unknown type or count below 1
    """
    if frequency is None:
        frequency = const.DEFAULT_TEST_FREQUENCY
    if isinstance(frequency, str):
        preset = const.TEST_FREQUENCY_PRESETS.get(frequency)
        if preset is None:
            raise EntityValidationError(
                field=const.FIELD_FREQUENCY,
                translation_key=const.TRANS_KEY_ERROR_INVALID_FREQUENCY,
                placeholders={"value": frequency},
            )
        return dict(preset)

    freq_type = frequency.get(const.TEST_FREQUENCY_TYPE)
    count = frequency.get(const.TEST_FREQUENCY_COUNT)
    if freq_type not in (const.TEST_FREQUENCY_DAYS, const.TEST_FREQUENCY_WEEKS) or (
        not isinstance(count, int) or count < 1
    ):
        raise EntityValidationError(
            field=const.FIELD_FREQUENCY,
            translation_key=const.TRANS_KEY_ERROR_INVALID_FREQUENCY,
            placeholders={"value": str(frequency)},
        )
    return {const.TEST_FREQUENCY_TYPE: freq_type, const.TEST_FREQUENCY_COUNT: count}


def build_test(user_input: dict[str, Any]) -> PerformanceTestData:
    """Build a new performance test.

    Raises:
        EntityValidationError: Empty name, missing system, unknown goal
            direction or invalid frequency
    """
    name = _normalize_name(user_input.get(const.DATA_TEST_NAME))
    if not name:
        raise EntityValidationError(
            field=const.DATA_TEST_NAME,
            translation_key=const.TRANS_KEY_ERROR_INVALID_NAME,
        )
    system_id = user_input.get(const.DATA_TEST_SYSTEM_ID)
    if not system_id:
        raise EntityValidationError(
            field=const.DATA_TEST_SYSTEM_ID,
            translation_key=const.TRANS_KEY_ERROR_INVALID_NAME,
        )

    direction = user_input.get(const.DATA_TEST_GOAL_DIRECTION, const.GOAL_HIGHER)
    if direction not in const.GOAL_DIRECTIONS:
        raise EntityValidationError(
            field=const.DATA_TEST_GOAL_DIRECTION,
            translation_key=const.TRANS_KEY_ERROR_INVALID_GOAL_DIRECTION,
            placeholders={"value": str(direction)},
        )

    target_value = user_input.get(const.DATA_TEST_TARGET_VALUE)
    return PerformanceTestData(
        internal_id=str(uuid.uuid4()),
        system_id=system_id,
        name=name,
        unit=str(user_input.get(const.DATA_TEST_UNIT) or ""),
        description=str(user_input.get(const.DATA_TEST_DESCRIPTION) or ""),
        goal_direction=direction,
        target_value=float(target_value) if target_value is not None else None,
        frequency=cast(
            "Any", build_frequency(user_input.get(const.DATA_TEST_FREQUENCY))
        ),
        created_at=dt_now_utc().isoformat(),
        entries=[],
    )


def build_test_entry(
    value: float,
    timestamp: date | datetime | str | None = None,
    *,
    notes: str | None = None,
    conditions: str | None = None,
) -> TestEntryData:
    """Build a measurement entry.

    Raises:
        EntityValidationError: Non-numeric value or malformed timestamp
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise EntityValidationError(
            field=const.FIELD_VALUE,
            translation_key=const.TRANS_KEY_ERROR_INVALID_VALUE,
            placeholders={"value": str(value)},
        )
    return TestEntryData(
        internal_id=str(uuid.uuid4()),
        value=float(value),
        timestamp=entry_timestamp(timestamp),
        notes=_normalize_optional_text(notes),
        conditions=_normalize_optional_text(conditions),
    )

