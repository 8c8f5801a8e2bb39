"""End-to-end scenarios across the analytics components."""

from datetime import datetime

from swim_analyzer.analysis import (
    analyze_progress,
    calculate_fatigue_index,
    calculate_momentum,
    calculate_next_milestones,
    calculate_streaks,
    detect_anomalies,
    detect_pacing_strategy,
    find_performance_patterns,
    find_records,
    group_by_week,
)
from swim_analyzer.models.analysis import (
    AnalysisError,
    MomentumTrend,
    PacingStrategy,
    ProgressStatus,
)
from swim_analyzer.services import DeepAnalysisService


class TestSteadyImprovement:
    """Ten weekly swims, each 2% faster."""

    def test_progress_is_improving(self, improving_sessions, now):
        """The newer half is faster than the older half."""
        progress = analyze_progress(improving_sessions, days=90, now=now)
        assert progress.status == ProgressStatus.IMPROVING
        assert progress.weighted_score > 0
        assert progress.trends.pace == 10

    def test_latest_swim_is_fastest(self, improving_sessions):
        """The most recent swim holds the pace record."""
        assert find_records(improving_sessions).fastest_pace.id == "10"

    def test_milestones_are_bounded(self, improving_sessions):
        """At most three milestones, progress within 0-100."""
        milestones = calculate_next_milestones(find_records(improving_sessions), improving_sessions)
        assert len(milestones) <= 3
        assert all(0 <= m.progress <= 100 for m in milestones)


class TestFadingSession:
    """One session that starts even and fades."""

    def test_fatigue_and_pacing(self, session_factory):
        """Significant fatigue and a positive split."""
        session = session_factory(1, datetime(2024, 3, 12, 7), lap_paces=[2.0, 2.0, 2.0, 2.3, 2.4, 2.5])
        fatigue = calculate_fatigue_index(session.laps)
        assert fatigue.fatigue_index > 10
        assert fatigue.description == "Significant fatigue - focus on endurance"
        assert detect_pacing_strategy(session.laps).strategy == PacingStrategy.POSITIVE


class TestNoSessions:
    """Every component degrades to its empty sentinel."""

    def test_empty_history(self, now, settings):
        """No component raises for an empty collection."""
        assert analyze_progress([], now=now).status == ProgressStatus.NO_DATA
        assert calculate_streaks([], now=now).current_streak_weeks == 0
        assert calculate_momentum([], now=now).trend == MomentumTrend.INSUFFICIENT_DATA
        assert detect_pacing_strategy([]).strategy == PacingStrategy.UNKNOWN
        assert not calculate_fatigue_index([]).sufficient_data
        assert not find_performance_patterns([]).has_patterns
        assert find_records([]).is_empty
        assert calculate_next_milestones(find_records([]), []) == []
        assert not detect_anomalies([]).has_sufficient_data
        assert group_by_week([]) == []
        assert isinstance(DeepAnalysisService(settings).analyze_latest([], now=now), AnalysisError)
