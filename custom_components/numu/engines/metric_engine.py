"""Metric Engine - Analytics for periodic performance tests.

Performance tests are numeric measurements owned by a system ("mile time",
"max pushups"). This engine derives:
- latest / best / average values
- improvement percent from a baseline, signed toward the goal direction
  (for lower-is-better tests a decrease is a positive improvement)
- a qualitative trend (improving / stable / declining / no data)
- measurement due dates from the tracking frequency
- a deterministic narrative linking system consistency to results

ARCHITECTURE: Pure logic engine with NO Home Assistant dependencies.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, Any, NamedTuple

from .. import const
from ..utils.dt_utils import dt_parse, dt_today_local, to_local_date
from ..utils.math_utils import mean

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ..type_defs import TestEntryData


class TestAnalytics(NamedTuple):
    """Summary of a performance test for detail views and sensors."""

    latest_value: float | None
    best_value: float | None
    average_value: float
    improvement_percent: float | None
    trend: str
    is_due: bool
    next_due_date: date
    correlation: str


class MetricEngine:
    """Stateless performance test analytics."""

    # ────────────────────────────────────────────────────────────────
    # Entries
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def sorted_entries(test: Mapping[str, Any]) -> list[TestEntryData]:
        """Return valid entries ordered oldest first.

        Entries without a parseable timestamp or a numeric value are skipped.
        """
        raw = test.get(const.DATA_TEST_ENTRIES)
        if not isinstance(raw, list):
            return []

        dated: list[tuple[datetime, TestEntryData]] = []
        for entry in raw:
            if not isinstance(entry, dict):
                continue
            value = entry.get(const.DATA_TEST_ENTRY_VALUE)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                continue
            moment = dt_parse(entry.get(const.DATA_TEST_ENTRY_TIMESTAMP))
            if moment is None:
                continue
            dated.append((moment, entry))
        dated.sort(key=lambda item: item[0])
        return [entry for _, entry in dated]

    @staticmethod
    def values(test: Mapping[str, Any]) -> list[float]:
        """Return entry values ordered oldest first."""
        return [
            float(entry[const.DATA_TEST_ENTRY_VALUE])
            for entry in MetricEngine.sorted_entries(test)
        ]

    @staticmethod
    def goal_direction(test: Mapping[str, Any]) -> str:
        """Return the goal direction, defaulting to higher-is-better."""
        direction = test.get(const.DATA_TEST_GOAL_DIRECTION)
        return direction if direction in const.GOAL_DIRECTIONS else const.GOAL_HIGHER

    @staticmethod
    def latest_value(test: Mapping[str, Any]) -> float | None:
        """Return the most recent measurement."""
        values = MetricEngine.values(test)
        return values[-1] if values else None

    @staticmethod
    def best_value(test: Mapping[str, Any]) -> float | None:
        """Return the best measurement according to the goal direction."""
        values = MetricEngine.values(test)
        if not values:
            return None
        if MetricEngine.goal_direction(test) == const.GOAL_LOWER:
            return min(values)
        return max(values)

    @staticmethod
    def average_value(test: Mapping[str, Any]) -> float:
        """Return the mean measurement, 0.0 without entries."""
        return mean(MetricEngine.values(test))

    # ────────────────────────────────────────────────────────────────
    # Improvement and trend
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def improvement_percent(
        test: Mapping[str, Any], baseline_window: int = 1
    ) -> float | None:
        """Return percent change from baseline to latest, signed by goal.

        The baseline is the mean of the first `baseline_window` entries.
        Returns None with fewer than two entries or a zero baseline.

        Examples:
            higher-is-better, 10 -> 12: 20.0
            lower-is-better, 10 -> 8: 20.0
            lower-is-better, 10 -> 12: -20.0
        """
        values = MetricEngine.values(test)
        if len(values) < const.MIN_ENTRIES_FOR_IMPROVEMENT:
            return None

        window = max(1, min(baseline_window, len(values) - 1))
        baseline = mean(values[:window])
        if baseline == 0:
            return None

        change = (values[-1] - baseline) / abs(baseline) * 100
        if MetricEngine.goal_direction(test) == const.GOAL_LOWER:
            change = -change
        return change

    @staticmethod
    def trend(test: Mapping[str, Any], baseline_window: int = 1) -> str:
        """Classify the improvement as improving, stable, declining or no data."""
        improvement = MetricEngine.improvement_percent(test, baseline_window)
        if improvement is None:
            return const.TREND_NO_DATA
        if abs(improvement) < const.TREND_STABLE_THRESHOLD_PERCENT:
            return const.TREND_STABLE
        if improvement > 0:
            return const.TREND_IMPROVING
        return const.TREND_DECLINING

    # ────────────────────────────────────────────────────────────────
    # Measurement schedule
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def frequency_days(test: Mapping[str, Any]) -> int:
        """Return the measurement interval in days (weekly when invalid)."""
        frequency = test.get(const.DATA_TEST_FREQUENCY)
        if isinstance(frequency, str):
            frequency = const.TEST_FREQUENCY_PRESETS.get(frequency)
        if not isinstance(frequency, dict):
            return 7

        count = frequency.get(const.TEST_FREQUENCY_COUNT)
        if isinstance(count, bool) or not isinstance(count, int) or count < 1:
            return 7
        if frequency.get(const.TEST_FREQUENCY_TYPE) == const.TEST_FREQUENCY_DAYS:
            return count
        return count * 7

    @staticmethod
    def describe_frequency(test: Mapping[str, Any]) -> str:
        """Return display text such as "Weekly" or "Every 30 days"."""
        interval = MetricEngine.frequency_days(test)
        if interval == 1:
            return "Daily"
        if interval % 7 == 0:
            weeks = interval // 7
            return "Weekly" if weeks == 1 else f"Every {weeks} weeks"
        return f"Every {interval} days"

    @staticmethod
    def last_measured_on(test: Mapping[str, Any]) -> date | None:
        """Return the local day of the latest measurement."""
        entries = MetricEngine.sorted_entries(test)
        if not entries:
            return None
        return to_local_date(entries[-1][const.DATA_TEST_ENTRY_TIMESTAMP])

    @staticmethod
    def next_due_date(test: Mapping[str, Any], today: date | None = None) -> date:
        """Return the day the next measurement is due (today if never measured)."""
        last = MetricEngine.last_measured_on(test)
        if last is None:
            return today or dt_today_local()
        return last + timedelta(days=MetricEngine.frequency_days(test))

    @staticmethod
    def is_due(test: Mapping[str, Any], today: date | None = None) -> bool:
        """Return True if a new measurement should be recorded."""
        today = today or dt_today_local()
        return MetricEngine.next_due_date(test, today) <= today

    # ────────────────────────────────────────────────────────────────
    # Consistency correlation
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def consistency_correlation(
        test: Mapping[str, Any], consistency: float
    ) -> str:
        """Describe how system consistency relates to test results.

        A heuristic narrative, not a statistical test: tiers are monotonic in
        consistency. Only a gain toward the goal reaches the top tier.
        """
        improvement = MetricEngine.improvement_percent(test)
        if (
            improvement is None
            or len(MetricEngine.values(test)) < const.MIN_ENTRIES_FOR_CORRELATION
        ):
            return "Keep tracking to see how your system correlates with results"

        consistency_percent = int(consistency * 100)
        if (
            consistency >= const.CORRELATION_HIGH_CONSISTENCY
            and improvement >= const.CORRELATION_HIGH_IMPROVEMENT_PERCENT
        ):
            return (
                f"Your {consistency_percent}% consistency across all tasks led to "
                f"{int(improvement)}% improvement!"
            )
        if consistency >= const.CORRELATION_STEADY_CONSISTENCY:
            return (
                f"With {consistency_percent}% consistency, "
                "you're making steady progress"
            )
        return "Higher consistency in your daily tasks could accelerate your progress"

    @staticmethod
    def analyze(
        test: Mapping[str, Any],
        consistency: float,
        today: date | None = None,
    ) -> TestAnalytics:
        """Bundle every analytic of a test."""
        today = today or dt_today_local()
        return TestAnalytics(
            latest_value=MetricEngine.latest_value(test),
            best_value=MetricEngine.best_value(test),
            average_value=MetricEngine.average_value(test),
            improvement_percent=MetricEngine.improvement_percent(test),
            trend=MetricEngine.trend(test),
            is_due=MetricEngine.is_due(test, today),
            next_due_date=MetricEngine.next_due_date(test, today),
            correlation=MetricEngine.consistency_correlation(test, consistency),
        )
