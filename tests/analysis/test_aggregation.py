"""Tests for temporal aggregation."""

from datetime import date, datetime, timedelta

import pytest

from swim_analyzer.analysis.aggregation import (
    consistency_score,
    date_rolling_average,
    group_by_day,
    group_by_month,
    group_by_week,
    linear_regression,
    metric_regression,
    rolling_average,
)
from swim_analyzer.models.analysis import TrendStatus


class TestGroupByWeek:
    """Tests for Monday-anchored weekly buckets."""

    def test_monday_to_sunday_share_a_bucket(self, session_factory):
        """Monday and the following Sunday fall in the same week."""
        sessions = [
            session_factory(1, datetime(2024, 3, 11, 7)),   # Monday
            session_factory(2, datetime(2024, 3, 17, 19)),  # Sunday
            session_factory(3, datetime(2024, 3, 18, 7)),   # next Monday
        ]
        buckets = group_by_week(sessions)
        assert [b.week_start for b in buckets] == [date(2024, 3, 11), date(2024, 3, 18)]
        assert buckets[0].count == 2
        assert buckets[1].count == 1

    def test_averages_exclude_invalid_values(self, session_factory):
        """A zero pace does not drag the average down."""
        sessions = [
            session_factory(1, datetime(2024, 3, 11, 7), pace=2.0, swolf=0),
            session_factory(2, datetime(2024, 3, 12, 7), pace=0, swolf=40),
        ]
        bucket = group_by_week(sessions)[0]
        assert bucket.avg_pace == pytest.approx(2.0)
        assert bucket.avg_swolf == pytest.approx(40)
        assert bucket.total_distance == 2000

    def test_empty(self):
        """No sessions, no buckets."""
        assert group_by_week([]) == []


class TestGroupByDay:
    """Tests for daily buckets."""

    def test_two_sessions_same_day(self, session_factory):
        """Morning and evening swims share a day."""
        sessions = [
            session_factory(1, datetime(2024, 3, 12, 7), distance=1000, duration=20),
            session_factory(2, datetime(2024, 3, 12, 19), distance=500, duration=12),
            session_factory(3, datetime(2024, 3, 10, 7)),
        ]
        buckets = group_by_day(sessions)
        assert [b.day for b in buckets] == [date(2024, 3, 10), date(2024, 3, 12)]
        assert buckets[1].total_distance == 1500
        assert buckets[1].total_duration == 32
        # Newest session first inside a bucket
        assert buckets[1].sessions[0].id == "2"


class TestGroupByMonth:
    """Tests for monthly buckets."""

    def test_month_keys_and_bests(self, session_factory):
        """Newest month first with best pace and longest swim."""
        sessions = [
            session_factory(1, datetime(2024, 2, 5, 7), pace=2.1, distance=1500),
            session_factory(2, datetime(2024, 2, 20, 7), pace=1.9, distance=1000),
            session_factory(3, datetime(2024, 3, 2, 7), pace=0, distance=800),
        ]
        buckets = group_by_month(sessions)
        assert [b.month_key for b in buckets] == ["2024-03", "2024-02"]
        february = buckets[1]
        assert february.best_pace.id == "2"
        assert february.longest_session.id == "1"
        assert buckets[0].best_pace is None


class TestRollingAverage:
    """Tests for trailing averages."""

    def test_window_of_two(self):
        """Each position averages itself and its predecessor."""
        assert rolling_average([1, 2, 3, 4], window=2) == pytest.approx([1, 1.5, 2.5, 3.5])

    def test_invalid_values_excluded(self):
        """Zeros are left out of the window average."""
        assert rolling_average([2, 0, 4], window=2) == pytest.approx([2, 2, 4])

    def test_no_valid_value_falls_back_to_raw(self):
        """A window with nothing valid keeps the raw value."""
        assert rolling_average([0], window=3) == [0]

    def test_date_window(self, session_factory):
        """Trailing 7-day window ending at each session."""
        base = datetime(2024, 3, 1, 8)
        sessions = [
            session_factory("c", base + timedelta(days=9), pace=1.6),
            session_factory("a", base, pace=2.0),
            session_factory("b", base + timedelta(days=2), pace=1.8),
        ]
        values = date_rolling_average(sessions, metric="pace", days=7)
        assert [v.session_id for v in values] == ["a", "b", "c"]
        assert values[0].rolling_average == pytest.approx(2.0)
        assert values[1].rolling_average == pytest.approx(1.9)
        # 'b' is exactly 7 days before 'c' and falls outside the window
        assert values[2].rolling_average == pytest.approx(1.6)


class TestLinearRegression:
    """Tests for least squares trend lines."""

    def test_perfect_line(self):
        """y = x + 1 fits exactly."""
        result = linear_regression([1, 2, 3, 4])
        assert result.slope == pytest.approx(1.0)
        assert result.intercept == pytest.approx(1.0)
        assert result.r_squared == pytest.approx(1.0)
        assert result.percent_change == 300
        assert result.trend == TrendStatus.IMPROVING

    def test_known_r_squared(self):
        """[1, 3, 2, 4] has R^2 = 0.64."""
        result = linear_regression([1, 3, 2, 4])
        assert result.slope == pytest.approx(0.8)
        assert result.intercept == pytest.approx(1.3)
        assert result.r_squared == pytest.approx(0.64)

    def test_lower_is_better_inverts_trend(self):
        """A rising pace is declining."""
        assert linear_regression([1, 2, 3, 4], lower_is_better=True).trend == TrendStatus.DECLINING
        assert linear_regression([4, 3, 2, 1], lower_is_better=True).trend == TrendStatus.IMPROVING

    def test_small_change_is_stable(self):
        """Within +/-3% of the fitted start the trend is stable."""
        assert linear_regression([100, 101, 100, 101]).trend == TrendStatus.STABLE

    def test_invalid_points_dropped_but_indexed(self):
        """Zeros are excluded and the remaining points keep their positions."""
        result = linear_regression([2, 0, 4])
        assert result.slope == pytest.approx(1.0)
        assert result.sample_size == 2

    def test_insufficient_points(self):
        """Fewer than two valid points gives a flat result."""
        result = linear_regression([0, 3, 0])
        assert result.slope == 0.0
        assert result.trend == TrendStatus.STABLE
        assert result.sample_size == 1

    def test_metric_regression_on_sessions(self, improving_sessions):
        """Steadily faster swims trend as improving pace."""
        result = metric_regression(improving_sessions, metric="pace")
        assert result.trend == TrendStatus.IMPROVING
        assert result.slope < 0


class TestConsistencyScore:
    """Tests for the 0-100 consistency score."""

    def test_no_sessions(self, now):
        """Nothing in the window scores 0."""
        assert consistency_score([], now=now) == 0

    def test_frequent_steady_swimmer(self, session_factory, now):
        """13 identical swims in 30 days is a perfect score."""
        sessions = [session_factory(i, now - timedelta(days=2 * i + 1)) for i in range(13)]
        assert consistency_score(sessions, days=30, now=now) == 100

    def test_single_session_frequency_only(self, session_factory, now):
        """One swim earns only frequency points."""
        sessions = [session_factory(1, now - timedelta(days=1))]
        # 1 / (30/7*3) * 50 = 3.9
        assert consistency_score(sessions, days=30, now=now) == 4

    def test_sessions_outside_window_ignored(self, session_factory, now):
        """Old swims do not count."""
        sessions = [session_factory(1, now - timedelta(days=45))]
        assert consistency_score(sessions, days=30, now=now) == 0
