"""Type definitions for Numu data structures.

Hybrid approach: TypedDict for entity records whose keys are fixed at design
time (systems, tasks, tests, entries), plain ``dict[str, Any]`` for the id-keyed
collections and coordinator snapshots whose keys are runtime UUIDs.

IMPORTANT: This file must NOT import from coordinator.py or any module that
imports the coordinator. TypedDict is static analysis only; runtime code keeps
its ``.get()`` defaults because stored data may be partial or corrupt.
"""

from typing import Any, Literal, NotRequired, TypedDict

# =============================================================================
# Type Aliases
# =============================================================================

SystemId = str  # UUID string
TaskId = str  # UUID string
TestId = str  # UUID string
ISODatetime = str  # ISO 8601 datetime string "2026-01-18T12:30:00+00:00"

CadenceType = Literal[
    "daily", "weekdays", "weekends", "specific_days", "weekly_target"
]
HabitType = Literal["build", "break"]
GoalDirection = Literal["higher", "lower"]
ColorBucket = Literal["green", "yellow", "red", "neutral"]


# =============================================================================
# Entities
# =============================================================================


class CadenceConfig(TypedDict, total=False):
    """Recurrence rule of a task."""

    type: CadenceType
    days: list[int]  # Python weekday numbers, only for specific_days
    count: int  # Completions per week, only for weekly_target


class TimeLimitConfig(TypedDict, total=False):
    """Gradual reduction settings for break habits (minutes)."""

    baseline: int
    target: int
    current_week_limit: int
    week_start: ISODatetime
    reduction: float


class CompletionEntry(TypedDict):
    """One completion of a task on a calendar day."""

    internal_id: str
    timestamp: ISODatetime
    note: str | None
    satisfaction: int | None
    minutes_spent: int | None


class TaskData(TypedDict):
    """A recurring habit owned by a system."""

    internal_id: TaskId
    system_id: SystemId
    name: str
    description: str
    cadence: CadenceConfig
    habit_type: HabitType
    created_at: ISODatetime
    entries: list[CompletionEntry]
    time_limit: NotRequired[TimeLimitConfig | None]


class SystemData(TypedDict):
    """A named group of tasks and performance tests."""

    internal_id: SystemId
    name: str
    description: str
    category: str
    color: str
    icon: str
    created_at: ISODatetime


class TestFrequency(TypedDict):
    """How often a performance test should be measured."""

    type: Literal["days", "weeks"]
    count: int


class TestEntryData(TypedDict):
    """One measurement of a performance test."""

    internal_id: str
    value: float
    timestamp: ISODatetime
    notes: str | None
    conditions: str | None


class PerformanceTestData(TypedDict):
    """A periodic numeric measurement owned by a system."""

    internal_id: TestId
    system_id: SystemId
    name: str
    unit: str
    description: str
    goal_direction: GoalDirection
    target_value: float | None
    frequency: TestFrequency
    created_at: ISODatetime
    entries: list[TestEntryData]


# =============================================================================
# Collections (dynamic keys)
# =============================================================================

SystemsCollection = dict[SystemId, SystemData]
TasksCollection = dict[TaskId, TaskData]
TestsCollection = dict[TestId, PerformanceTestData]

# Coordinator snapshot: computed per refresh, keyed by runtime ids
NumuSnapshot = dict[str, Any]
