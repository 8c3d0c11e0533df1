"""Engine modules for Numu integration.

Contains pure computation engines:
- schedule_engine: Cadence predicates and due-day enumeration
- completion_engine: Completion ledger queries
- streak_engine: "Never miss twice" daily and weekly streaks
- statistics_engine: Rates, rollups and calendar color buckets
- metric_engine: Performance test analytics
- limit_engine: Break-habit time limits with gradual reduction
"""

# Use relative imports within package to avoid mypy module resolution issues
from .completion_engine import CompletionEngine
from .limit_engine import LimitEngine, LimitEvaluation
from .metric_engine import MetricEngine, TestAnalytics
from .schedule_engine import ScheduleEngine
from .statistics_engine import (
    CalendarDay,
    CalendarWeek,
    DashboardSummary,
    DayTally,
    StatisticsEngine,
    WeekTally,
)
from .streak_engine import StreakEngine, StreakSummary

__all__ = [
    "CalendarDay",
    "CalendarWeek",
    "CompletionEngine",
    "DashboardSummary",
    "DayTally",
    "LimitEngine",
    "LimitEvaluation",
    "MetricEngine",
    "ScheduleEngine",
    "StatisticsEngine",
    "StreakEngine",
    "StreakSummary",
    "TestAnalytics",
    "WeekTally",
]
