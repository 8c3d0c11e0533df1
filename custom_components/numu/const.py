# File: const.py
"""Constants for the Numu integration.

This file centralizes configuration keys, defaults, storage field names,
service names, signal suffixes and platform identifiers for consistency across
the integration and its pure calculation engines.
"""

import logging

import homeassistant.util.dt as dt_util
from homeassistant.const import Platform

from .utils import dt_utils


def set_default_timezone(hass):
    """Set the default timezone based on the Home Assistant configuration."""
    global DEFAULT_TIME_ZONE
    DEFAULT_TIME_ZONE = dt_util.get_time_zone(hass.config.time_zone)
    if DEFAULT_TIME_ZONE is not None:
        dt_utils.set_default_timezone(DEFAULT_TIME_ZONE)


# ------------------------------------------------------------------------------------------------
# General / Integration Information
# ------------------------------------------------------------------------------------------------
NUMU_TITLE = "Numu"

# Integration Domain
DOMAIN = "numu"

# Logger
LOGGER = logging.getLogger(__package__)

# Supported Platforms
PLATFORMS = [
    Platform.SENSOR,
]

# Coordinator
COORDINATOR = "coordinator"
COORDINATOR_SUFFIX = "_coordinator"

# Storage and Versioning
STORE = "store"
STORAGE_KEY = "numu_data"
STORAGE_VERSION = 1
SCHEMA_VERSION = 1

# Default timezone: initially None, to be set once hass is available.
DEFAULT_TIME_ZONE = None

# Update Interval (minutes) - keeps day/week rollovers visible without writes
DEFAULT_UPDATE_INTERVAL = 15

# ------------------------------------------------------------------------------------------------
# Configuration Keys
# ------------------------------------------------------------------------------------------------
CONFIG_FLOW_STEP_USER = "user"

CONF_WEEK_START = "week_start"

WEEKDAY_MONDAY = "monday"
WEEKDAY_TUESDAY = "tuesday"
WEEKDAY_WEDNESDAY = "wednesday"
WEEKDAY_THURSDAY = "thursday"
WEEKDAY_FRIDAY = "friday"
WEEKDAY_SATURDAY = "saturday"
WEEKDAY_SUNDAY = "sunday"

# Python weekday numbering (Monday=0 ... Sunday=6)
WEEKDAY_OPTIONS: dict[str, int] = {
    WEEKDAY_MONDAY: 0,
    WEEKDAY_TUESDAY: 1,
    WEEKDAY_WEDNESDAY: 2,
    WEEKDAY_THURSDAY: 3,
    WEEKDAY_FRIDAY: 4,
    WEEKDAY_SATURDAY: 5,
    WEEKDAY_SUNDAY: 6,
}
WEEKDAY_SHORT_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

DEFAULT_WEEK_START = WEEKDAY_MONDAY

# ------------------------------------------------------------------------------------------------
# Storage Structure
# ------------------------------------------------------------------------------------------------
DATA_META = "meta"
DATA_META_SCHEMA_VERSION = "schema_version"
DATA_META_LAST_SAVED = "last_saved"

DATA_SYSTEMS = "systems"
DATA_TASKS = "tasks"
DATA_TESTS = "tests"

DATA_INTERNAL_ID = "internal_id"

# System fields
DATA_SYSTEM_NAME = "name"
DATA_SYSTEM_DESCRIPTION = "description"
DATA_SYSTEM_CATEGORY = "category"
DATA_SYSTEM_COLOR = "color"
DATA_SYSTEM_ICON = "icon"
DATA_SYSTEM_CREATED_AT = "created_at"

# Task fields
DATA_TASK_SYSTEM_ID = "system_id"
DATA_TASK_NAME = "name"
DATA_TASK_DESCRIPTION = "description"
DATA_TASK_CADENCE = "cadence"
DATA_TASK_HABIT_TYPE = "habit_type"
DATA_TASK_TIME_LIMIT = "time_limit"
DATA_TASK_CREATED_AT = "created_at"
DATA_TASK_ENTRIES = "entries"

# Cadence fields and types
CADENCE_TYPE = "type"
CADENCE_DAYS = "days"
CADENCE_COUNT = "count"

CADENCE_DAILY = "daily"
CADENCE_WEEKDAYS = "weekdays"
CADENCE_WEEKENDS = "weekends"
CADENCE_SPECIFIC_DAYS = "specific_days"
CADENCE_WEEKLY_TARGET = "weekly_target"

CADENCE_TYPES = [
    CADENCE_DAILY,
    CADENCE_WEEKDAYS,
    CADENCE_WEEKENDS,
    CADENCE_SPECIFIC_DAYS,
    CADENCE_WEEKLY_TARGET,
]
WEEKDAY_INDEXES = [0, 1, 2, 3, 4]
WEEKEND_INDEXES = [5, 6]

# Habit polarity
HABIT_TYPE_BUILD = "build"
HABIT_TYPE_BREAK = "break"
HABIT_TYPES = [HABIT_TYPE_BUILD, HABIT_TYPE_BREAK]
DEFAULT_HABIT_TYPE = HABIT_TYPE_BUILD

# Time limit fields (break habits with gradual reduction)
TIME_LIMIT_BASELINE = "baseline"
TIME_LIMIT_TARGET = "target"
TIME_LIMIT_CURRENT_WEEK_LIMIT = "current_week_limit"
TIME_LIMIT_WEEK_START = "week_start"
TIME_LIMIT_REDUCTION = "reduction"

DEFAULT_LIMIT_REDUCTION = 0.17
LIMIT_EVALUATION_DAYS = 7
LIMIT_SUCCESS_DAYS_REQUIRED = 4

# Completion entry fields
DATA_ENTRY_TIMESTAMP = "timestamp"
DATA_ENTRY_NOTE = "note"
DATA_ENTRY_SATISFACTION = "satisfaction"
DATA_ENTRY_MINUTES_SPENT = "minutes_spent"

SATISFACTION_MIN = 1
SATISFACTION_MAX = 5

# Performance test fields
DATA_TEST_SYSTEM_ID = "system_id"
DATA_TEST_NAME = "name"
DATA_TEST_UNIT = "unit"
DATA_TEST_DESCRIPTION = "description"
DATA_TEST_GOAL_DIRECTION = "goal_direction"
DATA_TEST_TARGET_VALUE = "target_value"
DATA_TEST_FREQUENCY = "frequency"
DATA_TEST_CREATED_AT = "created_at"
DATA_TEST_ENTRIES = "entries"

GOAL_HIGHER = "higher"
GOAL_LOWER = "lower"
GOAL_DIRECTIONS = [GOAL_HIGHER, GOAL_LOWER]

TEST_FREQUENCY_TYPE = "type"
TEST_FREQUENCY_COUNT = "count"
TEST_FREQUENCY_DAYS = "days"
TEST_FREQUENCY_WEEKS = "weeks"

TEST_FREQUENCY_PRESET_WEEKLY = "weekly"
TEST_FREQUENCY_PRESET_BIWEEKLY = "biweekly"
TEST_FREQUENCY_PRESET_MONTHLY = "monthly"
TEST_FREQUENCY_PRESETS: dict[str, dict[str, object]] = {
    TEST_FREQUENCY_PRESET_WEEKLY: {
        TEST_FREQUENCY_TYPE: TEST_FREQUENCY_WEEKS,
        TEST_FREQUENCY_COUNT: 1,
    },
    TEST_FREQUENCY_PRESET_BIWEEKLY: {
        TEST_FREQUENCY_TYPE: TEST_FREQUENCY_WEEKS,
        TEST_FREQUENCY_COUNT: 2,
    },
    TEST_FREQUENCY_PRESET_MONTHLY: {
        TEST_FREQUENCY_TYPE: TEST_FREQUENCY_DAYS,
        TEST_FREQUENCY_COUNT: 30,
    },
}
DEFAULT_TEST_FREQUENCY = TEST_FREQUENCY_PRESET_WEEKLY

# Test entry fields
DATA_TEST_ENTRY_VALUE = "value"
DATA_TEST_ENTRY_TIMESTAMP = "timestamp"
DATA_TEST_ENTRY_NOTES = "notes"
DATA_TEST_ENTRY_CONDITIONS = "conditions"

# System categories: name -> (default color, default icon)
CATEGORY_ATHLETICS = "athletics"
CATEGORY_HEALTH = "health"
CATEGORY_MIND = "mind"
CATEGORY_WORK = "work"
CATEGORY_RELATIONSHIPS = "relationships"
CATEGORY_CREATIVITY = "creativity"
CATEGORY_LEARNING = "learning"
CATEGORY_LIFESTYLE = "lifestyle"

SYSTEM_CATEGORIES: dict[str, tuple[str, str]] = {
    CATEGORY_ATHLETICS: ("#FF6B35", "mdi:run"),
    CATEGORY_HEALTH: ("#FF3B30", "mdi:heart"),
    CATEGORY_MIND: ("#5856D6", "mdi:brain"),
    CATEGORY_WORK: ("#007AFF", "mdi:briefcase"),
    CATEGORY_RELATIONSHIPS: ("#FF2D55", "mdi:account-multiple"),
    CATEGORY_CREATIVITY: ("#FF9500", "mdi:palette"),
    CATEGORY_LEARNING: ("#34C759", "mdi:book-open-variant"),
    CATEGORY_LIFESTYLE: ("#00C7BE", "mdi:home"),
}
DEFAULT_SYSTEM_CATEGORY = CATEGORY_ATHLETICS

# ------------------------------------------------------------------------------------------------
# Engine Thresholds
# ------------------------------------------------------------------------------------------------
COLOR_GREEN = "green"
COLOR_YELLOW = "yellow"
COLOR_RED = "red"
COLOR_NEUTRAL = "neutral"

RATE_THRESHOLD_GREEN = 0.8
RATE_THRESHOLD_YELLOW = 0.5

TREND_IMPROVING = "improving"
TREND_STABLE = "stable"
TREND_DECLINING = "declining"
TREND_NO_DATA = "no_data"

TREND_STABLE_THRESHOLD_PERCENT = 5.0
MIN_ENTRIES_FOR_IMPROVEMENT = 2
MIN_ENTRIES_FOR_CORRELATION = 3
CORRELATION_HIGH_CONSISTENCY = 0.8
CORRELATION_HIGH_IMPROVEMENT_PERCENT = 10.0
CORRELATION_STEADY_CONSISTENCY = 0.6

ZONE_EXCELLENT = "excellent"
ZONE_GOOD = "good"
ZONE_OVER_LIMIT = "over_limit"

# ------------------------------------------------------------------------------------------------
# Events / Signals (instance-scoped via get_event_signal)
# ------------------------------------------------------------------------------------------------
SIGNAL_SUFFIX_COMPLETION_CHANGED = "completion_changed"
SIGNAL_SUFFIX_MEASUREMENT_LOGGED = "measurement_logged"
SIGNAL_SUFFIX_LIMIT_ADJUSTED = "limit_adjusted"

# ------------------------------------------------------------------------------------------------
# Coordinator Snapshot Keys
# ------------------------------------------------------------------------------------------------
SNAPSHOT_TASKS = "tasks"
SNAPSHOT_SYSTEMS = "systems"
SNAPSHOT_TESTS = "tests"
SNAPSHOT_DASHBOARD = "dashboard"
SNAPSHOT_TODAY = "today"

ATTR_CURRENT_STREAK = "current_streak"
ATTR_LONGEST_STREAK = "longest_streak"
ATTR_STREAK_AT_RISK = "streak_at_risk"
ATTR_IS_DUE = "is_due"
ATTR_COMPLETED = "completed"
ATTR_CADENCE = "cadence"
ATTR_WEEKLY_COMPLETIONS = "weekly_completions"
ATTR_WEEKLY_TARGET = "weekly_target"
ATTR_WEEKLY_TARGET_MET = "weekly_target_met"
ATTR_COMPLETION_RATE = "completion_rate"
ATTR_SYSTEM_ID = "system_id"
ATTR_SYSTEM_NAME = "system_name"
ATTR_TODAY_RATE = "today_rate"
ATTR_DAILY_RATE = "daily_rate"
ATTR_WEEKLY_RATE = "weekly_rate"
ATTR_CONSISTENCY = "consistency"
ATTR_SYSTEM_STREAK = "system_streak"
ATTR_TASKS_DUE = "tasks_due"
ATTR_TASKS_COMPLETED = "tasks_completed"
ATTR_DAY_COLOR = "day_color"
ATTR_WEEK_COLOR = "week_color"
ATTR_DUE_TESTS = "due_tests"
ATTR_LATEST_VALUE = "latest_value"

# ------------------------------------------------------------------------------------------------
# Services
# ------------------------------------------------------------------------------------------------
SERVICE_TOGGLE_COMPLETION = "toggle_completion"
SERVICE_LOG_COMPLETION = "log_completion"
SERVICE_REMOVE_COMPLETION = "remove_completion"
SERVICE_LOG_TEST_ENTRY = "log_test_entry"
SERVICE_CREATE_SYSTEM = "create_system"
SERVICE_DELETE_SYSTEM = "delete_system"
SERVICE_CREATE_TASK = "create_task"
SERVICE_UPDATE_TASK = "update_task"
SERVICE_DELETE_TASK = "delete_task"
SERVICE_CREATE_TEST = "create_test"
SERVICE_DELETE_TEST = "delete_test"

FIELD_SYSTEM_NAME = "system_name"
FIELD_TASK_NAME = "task_name"
FIELD_TEST_NAME = "test_name"
FIELD_NAME = "name"
FIELD_DESCRIPTION = "description"
FIELD_CATEGORY = "category"
FIELD_CADENCE = "cadence"
FIELD_DAYS = "days"
FIELD_WEEKLY_TARGET = "weekly_target"
FIELD_HABIT_TYPE = "habit_type"
FIELD_BASELINE_LIMIT = "baseline_limit"
FIELD_TARGET_LIMIT = "target_limit"
FIELD_DATE = "date"
FIELD_NOTE = "note"
FIELD_SATISFACTION = "satisfaction"
FIELD_MINUTES_SPENT = "minutes_spent"
FIELD_VALUE = "value"
FIELD_UNIT = "unit"
FIELD_GOAL_DIRECTION = "goal_direction"
FIELD_FREQUENCY = "frequency"
FIELD_TARGET_VALUE = "target_value"
FIELD_CONDITIONS = "conditions"
FIELD_TIMESTAMP = "timestamp"

# ------------------------------------------------------------------------------------------------
# Sensors
# ------------------------------------------------------------------------------------------------
SENSOR_UID_SUFFIX_TASK_STREAK = "_task_streak"
SENSOR_UID_SUFFIX_SYSTEM_TODAY_RATE = "_system_today_rate"
SENSOR_UID_SUFFIX_SYSTEM_CONSISTENCY = "_system_consistency"
SENSOR_UID_SUFFIX_DASHBOARD_DAILY_RATE = "_dashboard_daily_rate"
SENSOR_UID_SUFFIX_DASHBOARD_WEEKLY_RATE = "_dashboard_weekly_rate"
SENSOR_UID_SUFFIX_TEST_LATEST = "_test_latest"

TRANS_KEY_SENSOR_TASK_STREAK = "task_streak"
TRANS_KEY_SENSOR_SYSTEM_TODAY_RATE = "system_today_rate"
TRANS_KEY_SENSOR_SYSTEM_CONSISTENCY = "system_consistency"
TRANS_KEY_SENSOR_DASHBOARD_DAILY_RATE = "dashboard_daily_rate"
TRANS_KEY_SENSOR_DASHBOARD_WEEKLY_RATE = "dashboard_weekly_rate"
TRANS_KEY_SENSOR_TEST_LATEST = "test_latest"

UNIT_DAYS = "days"
UNIT_WEEKS = "weeks"

# ------------------------------------------------------------------------------------------------
# Validation / Error Translation Keys
# ------------------------------------------------------------------------------------------------
TRANS_KEY_ERROR_SINGLE_INSTANCE = "single_instance_allowed"
TRANS_KEY_ERROR_INVALID_NAME = "invalid_name"
TRANS_KEY_ERROR_DUPLICATE_NAME = "duplicate_name"
TRANS_KEY_ERROR_INVALID_CADENCE = "invalid_cadence"
TRANS_KEY_ERROR_INVALID_WEEKLY_TARGET = "invalid_weekly_target"
TRANS_KEY_ERROR_INVALID_DAYS = "invalid_days"
TRANS_KEY_ERROR_INVALID_HABIT_TYPE = "invalid_habit_type"
TRANS_KEY_ERROR_INVALID_TIME_LIMIT = "invalid_time_limit"
TRANS_KEY_ERROR_INVALID_SATISFACTION = "invalid_satisfaction"
TRANS_KEY_ERROR_INVALID_MINUTES = "invalid_minutes"
TRANS_KEY_ERROR_INVALID_GOAL_DIRECTION = "invalid_goal_direction"
TRANS_KEY_ERROR_INVALID_FREQUENCY = "invalid_frequency"
TRANS_KEY_ERROR_INVALID_VALUE = "invalid_value"
TRANS_KEY_ERROR_INVALID_CATEGORY = "invalid_category"

ERROR_SYSTEM_NOT_FOUND_FMT = "System '{}' not found"
ERROR_TASK_NOT_FOUND_FMT = "Task '{}' not found"
ERROR_TEST_NOT_FOUND_FMT = "Performance test '{}' not found"
MSG_NO_ENTRY_FOUND = "No Numu entry found"
