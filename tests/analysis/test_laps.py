"""Tests for lap pacing and fatigue analysis."""

import pytest

from swim_analyzer.analysis.laps import calculate_fatigue_index, detect_pacing_strategy
from swim_analyzer.models.analysis import PacingStrategy
from swim_analyzer.models.session import Lap


def _laps(*paces):
    return [Lap(number=i + 1, distance=100, pace=p) for i, p in enumerate(paces)]


class TestDetectPacingStrategy:
    """Tests for pacing strategy classification."""

    def test_positive_split(self):
        """Slowing down through the set is a positive split."""
        result = detect_pacing_strategy(_laps(2.0, 2.0, 2.0, 2.3, 2.4, 2.5))
        assert result.strategy == PacingStrategy.POSITIVE
        assert result.pace_change > 3
        assert result.lap_count == 6
        assert result.avg_pace == pytest.approx(2.2)

    def test_negative_split(self):
        """Finishing faster is a negative split."""
        result = detect_pacing_strategy(_laps(2.2, 2.1, 2.0, 1.9, 1.8, 1.7))
        assert result.strategy == PacingStrategy.NEGATIVE
        assert result.pace_change < -3

    def test_even(self):
        """Small wobbles are even pacing."""
        result = detect_pacing_strategy(_laps(2.0, 2.02, 1.98, 2.0, 2.01, 1.99))
        assert result.strategy == PacingStrategy.EVEN
        assert result.consistency >= 90

    def test_erratic_beats_split_rules(self):
        """High variation is erratic regardless of split."""
        result = detect_pacing_strategy(_laps(1.5, 2.5, 1.5, 2.5, 1.5, 2.5))
        assert result.strategy == PacingStrategy.ERRATIC
        assert result.variation == 25
        assert result.consistency == 0

    def test_too_few_laps(self):
        """Fewer than three usable laps is unknown."""
        result = detect_pacing_strategy(_laps(2.0, 2.1))
        assert result.strategy == PacingStrategy.UNKNOWN
        assert result.lap_count == 2
        assert result.avg_pace is None

    def test_unusable_laps_are_skipped(self):
        """Laps without a pace do not count."""
        laps = _laps(2.0, 2.0) + [Lap(number=3), Lap(number=4, distance=100)]
        assert detect_pacing_strategy(laps).strategy == PacingStrategy.UNKNOWN

    def test_no_laps(self):
        """An empty lap list is unknown."""
        assert detect_pacing_strategy([]).strategy == PacingStrategy.UNKNOWN


class TestCalculateFatigueIndex:
    """Tests for the fatigue index."""

    def test_significant_fatigue(self):
        """Final third is 17% slower than laps 2-4."""
        result = calculate_fatigue_index(_laps(2.0, 2.0, 2.0, 2.3, 2.4, 2.5))
        assert result.sufficient_data
        assert result.fatigue_index == 17
        assert result.fading_lap_count == 2
        assert result.baseline_pace == pytest.approx(2.1)
        assert result.final_pace == pytest.approx(2.45)
        assert result.description == "Significant fatigue - focus on endurance"

    def test_first_lap_excluded_from_baseline(self):
        """A slow warmup lap does not lower the fatigue index."""
        result = calculate_fatigue_index(_laps(3.0, 2.0, 2.0, 2.0, 2.0, 2.0))
        assert result.fatigue_index == 0
        assert result.fading_lap_count == 0
        assert result.description == "Excellent endurance - minimal fatigue"

    @pytest.mark.parametrize(
        "final,description",
        [
            (2.06, "Good pacing - slight slowdown at end"),
            (2.14, "Moderate fatigue - consider pacing strategy"),
        ],
    )
    def test_description_bands(self, final, description):
        """Fatigue bands at 2, 5 and 10 percent."""
        result = calculate_fatigue_index(_laps(2.0, 2.0, 2.0, 2.0, final, final))
        assert result.description == description

    def test_insufficient_laps(self):
        """Fewer than five usable laps is insufficient."""
        result = calculate_fatigue_index(_laps(2.0, 2.1, 2.2, 2.3))
        assert not result.sufficient_data
        assert result.fatigue_index == 0
        assert result.description == "Insufficient data"
