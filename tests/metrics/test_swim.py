"""Tests for swimming metric helpers."""

from datetime import datetime

import pytest

from swim_analyzer.metrics.swim import (
    average_distance_per_stroke,
    best_dps_session,
    calculate_pace_per_100m,
    calculate_stroke_efficiency,
    coefficient_of_variation,
    dps_grade,
    dps_stats,
    dps_trend,
    format_distance,
    format_pace,
    lap_pace,
    usable_lap_paces,
)
from swim_analyzer.models.session import Lap


class TestLapPace:
    """Tests for deriving a lap's pace."""

    def test_explicit_pace_wins(self):
        """A recorded pace is used as-is."""
        assert lap_pace(Lap(pace=1.9, distance=50, duration=2.0)) == 1.9

    def test_derived_from_duration_and_distance(self):
        """1 minute for 50m is 2:00/100m."""
        assert lap_pace(Lap(distance=50, duration=1.0)) == pytest.approx(2.0)

    def test_no_pace_derivable(self):
        """A lap with only distance has no pace."""
        assert lap_pace(Lap(distance=50)) is None

    def test_usable_paces_skip_unusable_laps(self):
        """Unusable laps are dropped, order is kept."""
        laps = [Lap(pace=2.0), Lap(), Lap(distance=100, duration=2.2), Lap(duration=3.0)]
        assert usable_lap_paces(laps) == pytest.approx([2.0, 2.2])

    def test_pace_per_100m_missing_inputs(self):
        """Zero distance or duration gives no pace."""
        assert calculate_pace_per_100m(0, 10) is None
        assert calculate_pace_per_100m(400, 0) is None
        assert calculate_pace_per_100m(400, 8) == pytest.approx(2.0)


class TestCoefficientOfVariation:
    """Tests for CV."""

    def test_constant_series(self):
        """No variation."""
        assert coefficient_of_variation([2.0, 2.0, 2.0]) == 0.0

    def test_known_value(self):
        """Population std-dev of [1, 3] is 1, mean 2 -> 50%."""
        assert coefficient_of_variation([1.0, 3.0]) == pytest.approx(50.0)

    def test_empty(self):
        """Empty series is 0."""
        assert coefficient_of_variation([]) == 0.0


class TestStrokeEfficiency:
    """Tests for distance per stroke."""

    def test_basic(self):
        """1000m in 500 strokes is 2 m/stroke."""
        assert calculate_stroke_efficiency(1000, 500) == 2.0

    def test_no_strokes(self):
        """No stroke data gives 0."""
        assert calculate_stroke_efficiency(1000, 0) == 0.0


class TestFormatting:
    """Tests for display formatting."""

    def test_format_pace(self):
        """1.75 min/100m is 1:45."""
        assert format_pace(1.75) == "1:45/100m"

    def test_format_pace_rounds_seconds(self):
        """Seconds are rounded to whole numbers."""
        assert format_pace(2.0) == "2:00/100m"

    def test_format_invalid_pace(self):
        """Invalid pace renders as a placeholder."""
        assert format_pace(0) == "--"

    def test_format_distance(self):
        """Meters below a kilometer, km above."""
        assert format_distance(800) == "800m"
        assert format_distance(1500) == "1.5km"
        assert format_distance(2000) == "2km"


@pytest.fixture
def stroke_sessions(session_factory):
    """DPS 2.0, 2.5 and 1.25 in date order, plus a swim without strokes."""
    return [
        session_factory("s1", datetime(2024, 3, 1, 7), strokes=500),
        session_factory("s2", datetime(2024, 3, 5, 7), strokes=400),
        session_factory("s3", datetime(2024, 3, 10, 7), strokes=800),
        session_factory("s4", datetime(2024, 3, 11, 7), strokes=0),
    ]


class TestDistancePerStrokeAnalytics:
    """Tests for DPS across sessions."""

    def test_average_skips_sessions_without_strokes(self, stroke_sessions):
        """Only sessions with strokes recorded count."""
        assert average_distance_per_stroke(stroke_sessions) == pytest.approx(5.75 / 3)
        assert average_distance_per_stroke([]) == 0.0

    @pytest.mark.parametrize(
        "dps,grade",
        [
            (2.5, "Excellent"),
            (2.0, "Good"),
            (1.5, "Fair"),
            (1.49, "Needs Work"),
            (0.0, "Needs Work"),
        ],
    )
    def test_grade_bands(self, dps, grade):
        """Lower bounds are inclusive."""
        assert dps_grade(dps).grade == grade

    def test_trend_against_baseline(self, stroke_sessions):
        """Recent 1.25 against a 2.25 baseline."""
        assert dps_trend(stroke_sessions[2:3], stroke_sessions[:2]) == pytest.approx(-44.444, abs=0.001)

    def test_trend_without_baseline(self, stroke_sessions):
        """No baseline DPS means no trend."""
        assert dps_trend(stroke_sessions, stroke_sessions[3:]) == 0.0

    def test_best_session(self, stroke_sessions):
        """Highest DPS wins."""
        assert best_dps_session(stroke_sessions).id == "s2"
        assert best_dps_session(stroke_sessions[3:]) is None

    def test_best_session_tie_keeps_first(self, session_factory):
        """Equal DPS keeps the first session supplied."""
        sessions = [
            session_factory("x", datetime(2024, 3, 2), strokes=500),
            session_factory("y", datetime(2024, 3, 1), strokes=500),
        ]
        assert best_dps_session(sessions).id == "x"

    def test_stats(self, stroke_sessions):
        """Newest half against the older half."""
        stats = dps_stats(stroke_sessions)
        assert stats.count == 3
        assert stats.average == pytest.approx(5.75 / 3)
        assert stats.min == pytest.approx(1.25)
        assert stats.max == pytest.approx(2.5)
        assert stats.trend == pytest.approx(-44.444, abs=0.001)

    def test_stats_single_session(self, stroke_sessions):
        """One session has no trend."""
        stats = dps_stats(stroke_sessions[:1])
        assert stats.count == 1
        assert stats.trend == 0.0

    def test_stats_empty(self):
        """No strokes anywhere gives zeros."""
        stats = dps_stats([])
        assert stats.count == 0
        assert stats.to_dict() == {"average": 0.0, "min": 0.0, "max": 0.0, "trend": 0.0, "count": 0}
