"""
Deep analysis service.

Builds the insight bundle for one target session: lap pacing and fatigue,
comparison against recent sessions, personal best and same-distance
history, day/time patterns, streaks and the gap to the previous session.
Coaching recommendations are generated from the bundle and attached to it.
"""

import logging
import statistics
from datetime import datetime
from typing import Iterable, List, Optional, Union

from ..analysis.laps import calculate_fatigue_index, detect_pacing_strategy
from ..analysis.patterns import find_performance_patterns
from ..analysis.streaks import calculate_streaks
from ..config import Settings, get_settings
from ..exceptions import ErrorCode, SessionNotFoundError
from ..metrics.trends import percentile
from ..models.analysis import (
    AnalysisError,
    ComparativeAnalysis,
    DeepAnalysis,
    PersonalBestComparison,
    RecentComparison,
    SameDistanceComparison,
)
from ..models.session import Session
from ..recommendations.engine import RecommendationContext, generate_recommendations
from ..utils.dates import newest_first, resolve_now

logger = logging.getLogger(__name__)

# Share of the gap to the personal best to close in the next session
TARGET_GAP_SHARE = 0.3
# Target pace when there is no personal best to aim for
FALLBACK_TARGET_FACTOR = 0.97


def _pace_diff(pace: float, reference: float) -> float:
    """Percent slower (positive) or faster (negative) than reference."""
    return (pace - reference) / reference * 100


class DeepAnalysisService:
    """
    Service for analyzing a single swim session against the swimmer's history.

    Missing data never fails the bundle: each part degrades to None on its
    own. The only error outcome is a missing target session, reported as
    an AnalysisError marker rather than an exception.
    """

    def __init__(self, settings: Optional[Settings] = None):
        """
        Initialize the deep analysis service.

        Args:
            settings: Analytics settings. Uses the cached settings if not provided.
        """
        self._settings = settings or get_settings()

    def analyze(
        self,
        target: Optional[Session],
        sessions: Iterable[Session],
        now: Optional[datetime] = None,
    ) -> Union[DeepAnalysis, AnalysisError]:
        """
        Analyze one session against the full history.

        Args:
            target: Session to analyze (normally the most recent)
            sessions: Full session history, in any order
            now: Reference time (system clock when None)

        Returns:
            DeepAnalysis with recommendations attached, or AnalysisError
            when no target session is supplied
        """
        if target is None:
            logger.info("Deep analysis requested without a target session")
            return AnalysisError(error="No swim data provided", code=ErrorCode.NO_TARGET_SESSION)

        now = resolve_now(now)
        history = newest_first(sessions)
        settings = self._settings

        pacing = fatigue = None
        if target.laps:
            pacing = detect_pacing_strategy(target.laps)
            fatigue = calculate_fatigue_index(target.laps)

        analysis = DeepAnalysis(
            session=target,
            generated_at=now,
            pacing=pacing,
            fatigue=fatigue,
            comparative=self._compare(target, history),
            patterns=find_performance_patterns(
                history,
                min_sessions=settings.min_sessions_for_patterns,
                min_group_size=settings.min_sessions_per_pattern_group,
            ),
            streaks=calculate_streaks(history, now=now),
            days_since_previous=self._days_since_previous(target, history),
        )

        context = RecommendationContext.from_sessions(
            history,
            now=now,
            recent_window=settings.recent_sessions_window,
            momentum_recent_days=settings.momentum_recent_days,
            momentum_comparison_days=settings.momentum_comparison_days,
        )
        recommendations = generate_recommendations(analysis, context=context)

        logger.info(
            "Analyzed session %s against %d sessions: %d recommendations",
            target.id,
            len(history),
            len(recommendations),
        )
        return analysis.model_copy(update={"recommendations": tuple(recommendations)})

    def analyze_latest(
        self,
        sessions: Iterable[Session],
        now: Optional[datetime] = None,
    ) -> Union[DeepAnalysis, AnalysisError]:
        """Analyze the most recent session in the history."""
        history = newest_first(sessions)
        return self.analyze(history[0] if history else None, history, now=now)

    def analyze_by_id(
        self,
        session_id: str,
        sessions: Iterable[Session],
        now: Optional[datetime] = None,
    ) -> Union[DeepAnalysis, AnalysisError]:
        """
        Analyze the session with the given id.

        Raises:
            SessionNotFoundError: If no session has that id
        """
        history = newest_first(sessions)
        for session in history:
            if session.id == session_id:
                return self.analyze(session, history, now=now)
        raise SessionNotFoundError(session_id)

    def _compare(self, target: Session, history: List[Session]) -> Optional[ComparativeAnalysis]:
        if len(history) < 2:
            logger.debug("Comparative analysis skipped: %d sessions", len(history))
            return None
        if not target.has_valid_pace:
            logger.debug("Comparative analysis skipped: session %s has no valid pace", target.id)
            return ComparativeAnalysis()

        paced = [s for s in history if s.has_valid_pace]

        vs_recent = None
        recent_paces = [s.pace for s in history[: self._settings.recent_sessions_window] if s.has_valid_pace]
        if recent_paces:
            avg_pace = statistics.fmean(recent_paces)
            vs_recent = RecentComparison(
                avg_pace=avg_pace,
                pace_diff=_pace_diff(target.pace, avg_pace),
                is_better=target.pace < avg_pace,
            )

        personal_best = min(paced, key=lambda s: s.pace) if paced else None
        vs_pb = None
        if personal_best is not None:
            vs_pb = PersonalBestComparison(
                pb_pace=personal_best.pace,
                pb_session_id=personal_best.id,
                pace_diff=_pace_diff(target.pace, personal_best.pace),
                is_pb=target.id == personal_best.id,
            )

        tolerance = self._settings.same_distance_tolerance_m
        same_distance = [
            s for s in paced
            if s.id != target.id
            and s.timestamp <= target.timestamp
            and abs(s.distance - target.distance) < tolerance
        ]
        vs_same_distance = None
        if same_distance:
            best = min(same_distance, key=lambda s: s.pace)
            vs_same_distance = SameDistanceComparison(
                best_pace=best.pace,
                session_id=best.id,
                pace_diff=_pace_diff(target.pace, best.pace),
                is_best=target.pace <= best.pace,
                timestamp=best.timestamp,
            )

        if personal_best is not None:
            target_pace = personal_best.pace + (target.pace - personal_best.pace) * TARGET_GAP_SHARE
        else:
            target_pace = target.pace * FALLBACK_TARGET_FACTOR

        return ComparativeAnalysis(
            vs_recent=vs_recent,
            vs_pb=vs_pb,
            vs_same_distance=vs_same_distance,
            percentile=percentile(target.pace, [s.pace for s in paced]),
            target_pace=round(target_pace, 2),
        )

    @staticmethod
    def _days_since_previous(target: Session, history: List[Session]) -> Optional[int]:
        earlier = [s for s in history if s.id != target.id and s.timestamp <= target.timestamp]
        if not earlier:
            return None
        previous = max(earlier, key=lambda s: s.timestamp)
        return int((target.timestamp - previous.timestamp).total_seconds() // 86400)


def analyze_session_deep(
    target: Optional[Session],
    sessions: Iterable[Session],
    now: Optional[datetime] = None,
    settings: Optional[Settings] = None,
) -> Union[DeepAnalysis, AnalysisError]:
    """Convenience wrapper around DeepAnalysisService.analyze."""
    return DeepAnalysisService(settings).analyze(target, sessions, now=now)
