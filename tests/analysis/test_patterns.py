"""Tests for day and time performance patterns."""

from datetime import datetime, timedelta

import pytest

from swim_analyzer.analysis.patterns import (
    analyze_monthly_patterns,
    detect_performance_streaks,
    find_performance_patterns,
)
from swim_analyzer.models.patterns import (
    DayOfWeek,
    PerformanceStreakType,
    TimeOfDay,
    get_day_of_week,
    get_time_of_day,
)


@pytest.fixture
def weekly_pattern_sessions(session_factory):
    """Fast Monday mornings, slower Wednesday evenings, one quick Friday afternoon."""
    return [
        session_factory(1, datetime(2024, 2, 26, 7), pace=1.8),
        session_factory(2, datetime(2024, 3, 4, 7), pace=1.8),
        session_factory(3, datetime(2024, 3, 11, 7), pace=1.8),
        session_factory(4, datetime(2024, 2, 28, 19), pace=2.2),
        session_factory(5, datetime(2024, 3, 6, 19), pace=2.2),
        session_factory(6, datetime(2024, 3, 8, 13), pace=1.5),
    ]


class TestBuckets:
    """Tests for day and time bucketing."""

    def test_time_of_day_boundaries(self):
        """Morning before noon, afternoon until 17:00, evening after."""
        assert get_time_of_day(11) == TimeOfDay.MORNING
        assert get_time_of_day(12) == TimeOfDay.AFTERNOON
        assert get_time_of_day(16) == TimeOfDay.AFTERNOON
        assert get_time_of_day(17) == TimeOfDay.EVENING

    def test_day_of_week(self):
        """2024-03-11 is a Monday."""
        assert get_day_of_week(datetime(2024, 3, 11).date()) == DayOfWeek.MONDAY
        assert get_day_of_week(datetime(2024, 3, 17).date()) == DayOfWeek.SUNDAY


class TestFindPerformancePatterns:
    """Tests for best day and best time detection."""

    def test_best_day_and_time(self, weekly_pattern_sessions):
        """Monday mornings win; the single Friday swim cannot compete."""
        patterns = find_performance_patterns(weekly_pattern_sessions)
        assert patterns.has_patterns
        assert patterns.best_day.day == DayOfWeek.MONDAY
        assert patterns.best_day.day_name == "Monday"
        assert patterns.best_day.count == 3
        assert patterns.best_time.time_of_day == TimeOfDay.MORNING

    def test_all_groups_listed_in_calendar_order(self, weekly_pattern_sessions):
        """Averages cover every group, Monday first and morning first."""
        patterns = find_performance_patterns(weekly_pattern_sessions)
        assert [d.day for d in patterns.day_averages] == [
            DayOfWeek.MONDAY,
            DayOfWeek.WEDNESDAY,
            DayOfWeek.FRIDAY,
        ]
        assert [t.time_of_day for t in patterns.time_averages] == [
            TimeOfDay.MORNING,
            TimeOfDay.AFTERNOON,
            TimeOfDay.EVENING,
        ]
        friday = patterns.day_averages[2]
        assert friday.avg_pace == pytest.approx(1.5)
        assert friday.count == 1

    def test_ties_go_to_earliest_group(self, session_factory):
        """Equal Monday and Tuesday averages pick Monday."""
        sessions = [
            session_factory(1, datetime(2024, 3, 5, 7), pace=2.0),
            session_factory(2, datetime(2024, 3, 12, 7), pace=2.0),
            session_factory(3, datetime(2024, 3, 4, 7), pace=2.0),
            session_factory(4, datetime(2024, 3, 11, 7), pace=2.0),
            session_factory(5, datetime(2024, 3, 13, 7), pace=2.0),
        ]
        patterns = find_performance_patterns(sessions)
        assert patterns.best_day.day == DayOfWeek.MONDAY

    def test_too_few_sessions(self, session_factory):
        """Four paced sessions are not enough."""
        sessions = [session_factory(i, datetime(2024, 3, i + 1, 7)) for i in range(4)]
        patterns = find_performance_patterns(sessions)
        assert not patterns.has_patterns
        assert patterns.message == "Need more data to identify patterns"
        assert patterns.best_day is None

    def test_invalid_pace_sessions_do_not_count(self, session_factory):
        """Sessions without a pace are ignored, even towards the minimum."""
        sessions = [session_factory(i, datetime(2024, 3, i + 1, 7)) for i in range(4)]
        sessions.append(session_factory(9, datetime(2024, 3, 9, 7), pace=0))
        assert not find_performance_patterns(sessions).has_patterns

    def test_no_group_large_enough(self, session_factory):
        """Patterns exist but no day has two sessions."""
        sessions = [session_factory(i, datetime(2024, 3, 4 + i, 7)) for i in range(5)]
        patterns = find_performance_patterns(sessions)
        assert patterns.has_patterns
        assert patterns.best_day is None
        assert patterns.best_time.time_of_day == TimeOfDay.MORNING


def _daily(session_factory, paces, start=datetime(2024, 3, 1, 7)):
    """One swim per day with the given paces, returned newest first."""
    sessions = [
        session_factory(i + 1, start + timedelta(days=i), pace=pace)
        for i, pace in enumerate(paces)
    ]
    return list(reversed(sessions))


class TestDetectPerformanceStreaks:
    """Tests for runs of same-direction pace changes."""

    def test_improving(self, session_factory):
        """Three changes of more than 2% faster make four swims."""
        streak = detect_performance_streaks(_daily(session_factory, [2.4, 2.3, 2.2, 2.1]))
        assert streak.has_streak
        assert streak.streak_type == PerformanceStreakType.IMPROVING
        assert streak.streak_length == 4
        assert streak.message == "You're on an improving streak! 4 consecutive swims with better pace."

    def test_declining(self, session_factory):
        """Slower every swim."""
        streak = detect_performance_streaks(_daily(session_factory, [2.0, 2.1, 2.2, 2.3]))
        assert streak.streak_type == PerformanceStreakType.DECLINING
        assert streak.streak_length == 4

    def test_consistent(self, session_factory):
        """Changes within 2% are consistent."""
        streak = detect_performance_streaks(_daily(session_factory, [2.0, 2.01, 2.0, 2.02]))
        assert streak.streak_type == PerformanceStreakType.CONSISTENT
        assert streak.message == "Great consistency! 4 swims with similar pace."

    def test_only_run_ending_at_latest_swim_counts(self, session_factory):
        """An earlier improving run is broken by the last swim."""
        streak = detect_performance_streaks(_daily(session_factory, [2.4, 2.3, 2.2, 2.1, 2.4]))
        assert not streak.has_streak
        assert streak.streak_type is None

    def test_looks_at_last_ten_swims(self, session_factory):
        """Twelve steady swims report a run of ten."""
        streak = detect_performance_streaks(_daily(session_factory, [2.0] * 12))
        assert streak.streak_length == 10

    def test_invalid_pace_pairs_are_skipped(self, session_factory):
        """A swim without pace does not break the run."""
        streak = detect_performance_streaks(_daily(session_factory, [2.4, 2.3, 0, 2.2, 2.1, 2.0]))
        assert streak.streak_type == PerformanceStreakType.IMPROVING
        assert streak.streak_length == 4

    def test_too_few_sessions(self, session_factory):
        """Fewer swims than the minimum streak."""
        assert not detect_performance_streaks(_daily(session_factory, [2.4, 2.3])).has_streak
        assert not detect_performance_streaks([]).has_streak


@pytest.fixture
def monthly_sessions(session_factory):
    """Two January swims, three faster February swims, one fast March swim."""
    return [
        session_factory(1, datetime(2024, 1, 5, 7), pace=2.0),
        session_factory(2, datetime(2024, 1, 20, 7), pace=2.2),
        session_factory(3, datetime(2024, 2, 2, 7), pace=1.9),
        session_factory(4, datetime(2024, 2, 9, 7), pace=1.9),
        session_factory(5, datetime(2024, 2, 16, 7), pace=2.0),
        session_factory(6, datetime(2024, 3, 1, 7), pace=1.5),
    ]


class TestAnalyzeMonthlyPatterns:
    """Tests for month-by-month patterns."""

    def test_month_stats(self, monthly_sessions):
        """Every month is listed oldest first."""
        monthly = analyze_monthly_patterns(reversed(monthly_sessions))
        assert monthly.has_sufficient_data
        assert [m.month for m in monthly.month_stats] == ["2024-01", "2024-02", "2024-03"]
        assert [m.count for m in monthly.month_stats] == [2, 3, 1]
        assert monthly.month_stats[0].total_distance == 2000
        assert monthly.month_stats[0].avg_pace == pytest.approx(2.1)

    def test_best_and_most_active(self, monthly_sessions):
        """A single March swim cannot be the best month."""
        monthly = analyze_monthly_patterns(monthly_sessions)
        assert monthly.best_month.month == "2024-02"
        assert monthly.most_active_month.month == "2024-02"

    def test_most_active_tie_keeps_earlier_month(self, session_factory):
        """Equal counts go to the earlier month."""
        sessions = [
            session_factory(i, datetime(2024, 1 + i // 3, 1 + i % 3, 7))
            for i in range(6)
        ]
        assert analyze_monthly_patterns(sessions).most_active_month.month == "2024-01"

    def test_months_without_pace_cannot_be_best(self, session_factory):
        """No valid pace anywhere leaves the best month empty."""
        sessions = [session_factory(i, datetime(2024, 1, 1 + i, 7), pace=0) for i in range(6)]
        monthly = analyze_monthly_patterns(sessions)
        assert monthly.has_sufficient_data
        assert monthly.best_month is None
        assert monthly.most_active_month.count == 6

    def test_too_few_sessions(self, monthly_sessions):
        """Six swims are needed."""
        assert not analyze_monthly_patterns(monthly_sessions[:5]).has_sufficient_data

    def test_no_month_with_two_swims(self, session_factory):
        """One swim a month is listed but not compared."""
        sessions = [session_factory(i, datetime(2024, i + 1, 1, 7)) for i in range(6)]
        monthly = analyze_monthly_patterns(sessions)
        assert not monthly.has_sufficient_data
        assert len(monthly.month_stats) == 6
        assert monthly.best_month is None
