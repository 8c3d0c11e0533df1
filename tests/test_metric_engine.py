"""Tests for MetricEngine - performance test analytics."""

from __future__ import annotations

from datetime import date

import pytest

from custom_components.numu import const
from custom_components.numu.engines import MetricEngine
from tests.helpers import make_test

NOV_3 = date(2025, 11, 3)


def _series(*values: float, start_day: int = 1, **kwargs) -> dict:
    """Return a test with one measurement per day starting Nov `start_day`."""
    return make_test(
        measurements=[
            (date(2025, 11, start_day + offset), value)
            for offset, value in enumerate(values)
        ],
        **kwargs,
    )


class TestValues:
    """Latest, best and average."""

    def test_entries_ordered_by_timestamp(self) -> None:
        """Latest is the newest measurement, not the last appended."""
        test = make_test(
            measurements=[(date(2025, 11, 5), 30.0), (date(2025, 11, 1), 20.0)]
        )
        assert MetricEngine.values(test) == [20.0, 30.0]
        assert MetricEngine.latest_value(test) == 30.0

    def test_best_follows_goal_direction(self) -> None:
        """Lower-is-better picks the minimum."""
        assert MetricEngine.best_value(_series(25.0, 22.0, 24.0)) == 25.0
        lower = _series(25.0, 22.0, 24.0, goal_direction=const.GOAL_LOWER)
        assert MetricEngine.best_value(lower) == 22.0

    def test_empty_test(self) -> None:
        """No entries: None values and a 0.0 average."""
        test = make_test()
        assert MetricEngine.latest_value(test) is None
        assert MetricEngine.best_value(test) is None
        assert MetricEngine.average_value(test) == 0.0

    def test_invalid_entries_skipped(self) -> None:
        """Non-numeric values and bad timestamps are ignored."""
        test = _series(10.0)
        test[const.DATA_TEST_ENTRIES].extend(
            [
                {
                    const.DATA_TEST_ENTRY_VALUE: "fast",
                    const.DATA_TEST_ENTRY_TIMESTAMP: "2025-11-02T12:00:00+00:00",
                },
                {
                    const.DATA_TEST_ENTRY_VALUE: 5.0,
                    const.DATA_TEST_ENTRY_TIMESTAMP: "soon",
                },
            ]
        )
        assert MetricEngine.values(test) == [10.0]


class TestImprovement:
    """Improvement percent and trend classification."""

    def test_higher_is_better(self) -> None:
        """10 -> 12 is a 20% improvement."""
        test = _series(10.0, 12.0)
        assert MetricEngine.improvement_percent(test) == pytest.approx(20.0)
        assert MetricEngine.trend(test) == const.TREND_IMPROVING

    def test_lower_is_better_decrease_is_positive(self) -> None:
        """A faster time improves a lower-is-better test."""
        test = _series(10.0, 8.0, goal_direction=const.GOAL_LOWER)
        assert MetricEngine.improvement_percent(test) == pytest.approx(20.0)
        assert MetricEngine.trend(test) == const.TREND_IMPROVING

    def test_lower_is_better_increase_is_declining(self) -> None:
        """A slower time is a negative improvement."""
        test = _series(10.0, 12.0, goal_direction=const.GOAL_LOWER)
        assert MetricEngine.improvement_percent(test) == pytest.approx(-20.0)
        assert MetricEngine.trend(test) == const.TREND_DECLINING

    def test_small_change_is_stable(self) -> None:
        """Changes under the threshold are stable."""
        assert MetricEngine.trend(_series(100.0, 103.0)) == const.TREND_STABLE

    def test_not_enough_data(self) -> None:
        """One entry or a zero baseline gives no improvement."""
        assert MetricEngine.improvement_percent(_series(10.0)) is None
        assert MetricEngine.trend(_series(10.0)) == const.TREND_NO_DATA
        assert MetricEngine.improvement_percent(_series(0.0, 5.0)) is None

    def test_baseline_window_averages_first_entries(self) -> None:
        """A window of two uses the mean of the first two values."""
        test = _series(8.0, 12.0, 15.0)
        assert MetricEngine.improvement_percent(test, baseline_window=2) == pytest.approx(
            50.0
        )


class TestSchedule:
    """Measurement frequency and due dates."""

    @pytest.mark.parametrize(
        ("preset", "days", "text"),
        [
            (const.TEST_FREQUENCY_PRESET_WEEKLY, 7, "Weekly"),
            (const.TEST_FREQUENCY_PRESET_BIWEEKLY, 14, "Every 2 weeks"),
            (const.TEST_FREQUENCY_PRESET_MONTHLY, 30, "Every 30 days"),
        ],
    )
    def test_presets(self, preset: str, days: int, text: str) -> None:
        """Presets resolve to day intervals and display text."""
        test = make_test(frequency=preset)
        assert MetricEngine.frequency_days(test) == days
        assert MetricEngine.describe_frequency(test) == text

    def test_custom_and_invalid_frequency(self) -> None:
        """Daily custom frequency; invalid counts fall back to weekly."""
        daily = make_test(
            frequency={
                const.TEST_FREQUENCY_TYPE: const.TEST_FREQUENCY_DAYS,
                const.TEST_FREQUENCY_COUNT: 1,
            }
        )
        assert MetricEngine.describe_frequency(daily) == "Daily"
        broken = make_test(
            frequency={
                const.TEST_FREQUENCY_TYPE: const.TEST_FREQUENCY_DAYS,
                const.TEST_FREQUENCY_COUNT: 0,
            }
        )
        assert MetricEngine.frequency_days(broken) == 7

    def test_next_due_after_last_measurement(self) -> None:
        """Weekly test measured Nov 3 is due again Nov 10."""
        test = make_test(measurements=[(NOV_3, 25.0)])
        assert MetricEngine.next_due_date(test, date(2025, 11, 5)) == date(2025, 11, 10)
        assert not MetricEngine.is_due(test, date(2025, 11, 9))
        assert MetricEngine.is_due(test, date(2025, 11, 10))

    def test_never_measured_is_due_today(self) -> None:
        """A fresh test is due right away."""
        test = make_test()
        assert MetricEngine.next_due_date(test, NOV_3) == NOV_3
        assert MetricEngine.is_due(test, NOV_3)


class TestCorrelation:
    """Narrative linking consistency and results."""

    def test_high_consistency_and_improvement(self) -> None:
        """Both high: the celebratory message with both numbers."""
        test = _series(10.0, 11.0, 12.0)
        assert MetricEngine.consistency_correlation(test, 0.85) == (
            "Your 85% consistency across all tasks led to 20% improvement!"
        )

    def test_decline_is_not_called_improvement(self) -> None:
        """A 20% drop at high consistency falls back to the steady tier."""
        test = _series(10.0, 9.0, 8.0)
        assert MetricEngine.improvement_percent(test) == pytest.approx(-20.0)
        message = MetricEngine.consistency_correlation(test, 0.85)
        assert "improvement" not in message
        assert message == "With 85% consistency, you're making steady progress"

    def test_steady_tier(self) -> None:
        """Moderate consistency reads as steady progress."""
        test = _series(10.0, 11.0, 12.0)
        assert MetricEngine.consistency_correlation(test, 0.7) == (
            "With 70% consistency, you're making steady progress"
        )

    def test_low_tier(self) -> None:
        """Low consistency suggests doing more."""
        test = _series(10.0, 11.0, 12.0)
        assert MetricEngine.consistency_correlation(test, 0.3).startswith(
            "Higher consistency"
        )

    def test_too_few_entries(self) -> None:
        """Fewer than three measurements asks to keep tracking."""
        assert MetricEngine.consistency_correlation(_series(10.0, 12.0), 0.9).startswith(
            "Keep tracking"
        )

    def test_analyze_bundles_everything(self) -> None:
        """analyze() agrees with the individual calls."""
        test = _series(30.0, 28.0, 27.0, goal_direction=const.GOAL_LOWER)
        analytics = MetricEngine.analyze(test, 0.5, today=date(2025, 11, 4))
        assert analytics.latest_value == 27.0
        assert analytics.best_value == 27.0
        assert analytics.average_value == pytest.approx(85.0 / 3)
        assert analytics.improvement_percent == pytest.approx(10.0)
        assert analytics.trend == const.TREND_IMPROVING
        assert analytics.next_due_date == date(2025, 11, 10)
        assert not analytics.is_due
