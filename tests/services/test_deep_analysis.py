"""Tests for the deep analysis service."""

from datetime import datetime

import pytest

from swim_analyzer.config import Settings
from swim_analyzer.exceptions import ErrorCode, SessionNotFoundError
from swim_analyzer.models.analysis import AnalysisError, DeepAnalysis, PacingStrategy
from swim_analyzer.services.deep_analysis import DeepAnalysisService, analyze_session_deep


@pytest.fixture
def history(session_factory):
    """Fastest swim first, a long one, then a slower swim with fading laps."""
    return [
        session_factory("a", datetime(2024, 3, 1, 7), pace=1.8, distance=1000),
        session_factory("b", datetime(2024, 3, 6, 7), pace=2.0, distance=1500),
        session_factory(
            "c",
            datetime(2024, 3, 11, 7),
            pace=2.2,
            distance=1050,
            lap_paces=[2.0, 2.0, 2.0, 2.3, 2.4, 2.5],
        ),
    ]


@pytest.fixture
def service(settings):
    return DeepAnalysisService(settings)


class TestAnalyze:
    """Tests for the full insight bundle."""

    def test_latest_session_bundle(self, service, history, now):
        """The newest session is analyzed against everything."""
        result = service.analyze_latest(history, now=now)
        assert isinstance(result, DeepAnalysis)
        assert result.session.id == "c"
        assert result.generated_at == now
        assert result.pacing.strategy == PacingStrategy.POSITIVE
        assert result.fatigue.fatigue_index == 17
        assert result.days_since_previous == 5
        assert result.streaks.current_streak_weeks == 3
        assert not result.patterns.has_patterns

    def test_comparative(self, service, history, now):
        """Recent average, personal best, same distance and target pace."""
        comparative = service.analyze_latest(history, now=now).comparative
        assert comparative.vs_recent.avg_pace == pytest.approx(2.0)
        assert comparative.vs_recent.pace_diff == pytest.approx(10.0)
        assert not comparative.vs_recent.is_better
        assert comparative.vs_pb.pb_session_id == "a"
        assert comparative.vs_pb.pace_diff == pytest.approx(22.22, abs=0.01)
        assert not comparative.vs_pb.is_pb
        assert comparative.vs_same_distance.session_id == "a"
        assert comparative.percentile == 67
        assert comparative.target_pace == pytest.approx(1.92)

    def test_recommendations_attached_in_rule_order(self, service, history, now):
        """Rules fire in their fixed order."""
        result = service.analyze_latest(history, now=now)
        assert [r.title for r in result.recommendations] == [
            "Manage Your Pace",
            "Build Endurance",
            "Gap to Personal Best",
            "Work on Consistency",
        ]

    def test_no_laps_skips_lap_analysis(self, service, history, now):
        """Pacing and fatigue are absent without laps."""
        result = service.analyze(history[1], history, now=now)
        assert result.pacing is None
        assert result.fatigue is None

    def test_single_session(self, service, session_factory, now):
        """One swim has nothing to compare with."""
        only = session_factory("solo", datetime(2024, 3, 12, 7))
        result = service.analyze(only, [only], now=now)
        assert result.comparative is None
        assert result.days_since_previous is None
        assert len(result.recommendations) >= 1

    def test_target_without_pace(self, service, history, session_factory, now):
        """An invalid target pace yields an empty comparison."""
        target = session_factory("nopace", datetime(2024, 3, 12, 7), pace=0)
        result = service.analyze(target, history + [target], now=now)
        comparative = result.comparative
        assert comparative.vs_recent is None
        assert comparative.vs_pb is None
        assert comparative.percentile is None
        assert comparative.target_pace is None

    def test_is_pb(self, service, history, now):
        """The fastest session is its own personal best."""
        result = service.analyze(history[0], history, now=now)
        assert result.comparative.vs_pb.is_pb
        assert result.comparative.vs_pb.pace_diff == pytest.approx(0)
        # Same-distance history only looks backwards
        assert result.comparative.vs_same_distance is None

    def test_missing_target(self, service, history, now):
        """No target is an error marker, not an exception."""
        result = service.analyze(None, history, now=now)
        assert isinstance(result, AnalysisError)
        assert result.error == "No swim data provided"
        assert result.code == ErrorCode.NO_TARGET_SESSION

    def test_empty_history(self, service, now):
        """Analyzing the latest of nothing is an error marker."""
        assert isinstance(service.analyze_latest([], now=now), AnalysisError)


class TestAnalyzeById:
    """Tests for analyzing a chosen session."""

    def test_by_id(self, service, history, now):
        """Days since previous counts back from the chosen session."""
        result = service.analyze_by_id("b", history, now=now)
        assert result.session.id == "b"
        assert result.days_since_previous == 5
        assert result.comparative.vs_same_distance is None

    def test_unknown_id(self, service, history, now):
        """An unknown id raises."""
        with pytest.raises(SessionNotFoundError) as exc_info:
            service.analyze_by_id("missing", history, now=now)
        assert exc_info.value.code == ErrorCode.SESSION_NOT_FOUND
        assert exc_info.value.details == {"session_id": "missing"}


class TestSettings:
    """Settings flow into the analysis."""

    def test_same_distance_tolerance(self, history, now):
        """A tighter tolerance excludes the 1000m swim."""
        service = DeepAnalysisService(Settings(_env_file=None, same_distance_tolerance_m=25))
        assert service.analyze_latest(history, now=now).comparative.vs_same_distance is None

    def test_same_distance_tolerance_is_strict(self, history, now):
        """A swim exactly one tolerance away does not match."""
        service = DeepAnalysisService(Settings(_env_file=None, same_distance_tolerance_m=50))
        assert service.analyze_latest(history, now=now).comparative.vs_same_distance is None
        service = DeepAnalysisService(Settings(_env_file=None, same_distance_tolerance_m=51))
        assert service.analyze_latest(history, now=now).comparative.vs_same_distance.session_id == "a"

    def test_recent_window(self, history, now):
        """A one-session window compares the target with itself."""
        service = DeepAnalysisService(Settings(_env_file=None, recent_sessions_window=1))
        vs_recent = service.analyze_latest(history, now=now).comparative.vs_recent
        assert vs_recent.pace_diff == pytest.approx(0)

    def test_module_wrapper(self, history, settings, now):
        """analyze_session_deep matches the service."""
        result = analyze_session_deep(history[2], history, now=now, settings=settings)
        assert result.session.id == "c"
        assert result.to_dict()["daysSincePrevious"] == 5
