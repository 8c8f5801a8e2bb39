"""
Coaching Recommendation Engine

Maps a deep analysis of one session, plus streak, momentum and weekly
activity context, to coaching recommendations. Rules are evaluated in a
fixed order and every applicable rule fires. The output keeps that order;
priority is descriptive and consumers that want priority ordering must
sort explicitly.
"""

import logging
import statistics
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional

from ..analysis.progress import current_week_stats
from ..analysis.streaks import calculate_momentum, calculate_streaks
from ..metrics.swim import format_distance, format_pace
from ..models.analysis import DeepAnalysis, MomentumScore, MomentumTrend, PacingStrategy, Streak
from ..models.patterns import get_day_of_week, get_time_of_day
from ..models.recommendations import (
    Recommendation,
    RecommendationCategory,
    RecommendationPriority,
)
from ..models.session import Session
from ..utils.dates import newest_first, resolve_now

logger = logging.getLogger(__name__)

# Thresholds
POSITIVE_SPLIT_PCT = 5
HIGH_FATIGUE_PCT = 10
LOW_FATIGUE_PCT = 2
PB_GAP_PCT = 10
NEAR_PB_PCT = 3
LOW_CONSISTENCY = 70
LONG_STREAK_WEEKS = 8
STREAK_WEEKS = 4
MOMENTUM_SWING_PCT = 20
REMINDER_WEEKDAY = 2  # Wednesday
SCHEDULING_GAP_DAYS = 2
COMEBACK_GAP_DAYS = 5
COMEBACK_RANGE = (0.6, 0.7)


@dataclass
class RecommendationContext:
    """History-derived context the rules read alongside the analysis."""

    now: datetime
    streak: Streak
    momentum: MomentumScore
    sessions_this_week: int
    days_since_last_session: Optional[int]
    normal_distance: float

    @classmethod
    def from_sessions(
        cls,
        sessions: Iterable[Session],
        now: Optional[datetime] = None,
        recent_window: int = 10,
        momentum_recent_days: int = 14,
        momentum_comparison_days: int = 28,
    ) -> "RecommendationContext":
        now = resolve_now(now)
        ordered = newest_first(sessions)

        days_since = None
        if ordered:
            days_since = int((now - ordered[0].timestamp).total_seconds() // 86400)

        distances = [s.distance for s in ordered[:recent_window] if s.distance > 0]

        return cls(
            now=now,
            streak=calculate_streaks(ordered, now=now),
            momentum=calculate_momentum(
                ordered,
                now=now,
                recent_days=momentum_recent_days,
                comparison_days=momentum_comparison_days,
            ),
            sessions_this_week=current_week_stats(ordered, now=now).count,
            days_since_last_session=days_since,
            normal_distance=statistics.fmean(distances) if distances else 0.0,
        )


def _recommendation(
    category: RecommendationCategory,
    priority: RecommendationPriority,
    title: str,
    message: str,
    action: str,
) -> Recommendation:
    return Recommendation(
        category=category,
        priority=priority,
        title=title,
        message=message,
        action=action,
    )


def _pacing_rules(analysis: DeepAnalysis) -> List[Recommendation]:
    pacing = analysis.pacing
    if pacing is None:
        return []

    if pacing.strategy == PacingStrategy.POSITIVE and pacing.pace_change > POSITIVE_SPLIT_PCT:
        return [_recommendation(
            RecommendationCategory.PACING,
            RecommendationPriority.HIGH,
            "Manage Your Pace",
            "You started too fast and slowed significantly. Try starting 5-10 seconds slower per 100m.",
            "Focus on controlled starts in your next swim",
        )]
    elif pacing.strategy == PacingStrategy.NEGATIVE:
        return [_recommendation(
            RecommendationCategory.PACING,
            RecommendationPriority.POSITIVE,
            "Excellent Pacing!",
            "You executed a negative split - getting faster as you went. This shows great race strategy.",
            "Keep this approach for longer distances",
        )]
    elif pacing.strategy == PacingStrategy.ERRATIC:
        return [_recommendation(
            RecommendationCategory.PACING,
            RecommendationPriority.MEDIUM,
            "Improve Consistency",
            f"Your pace varied by {pacing.variation}%. Work on maintaining steady effort throughout.",
            "Try counting strokes per length to stay consistent",
        )]
    return []


def _fatigue_rules(analysis: DeepAnalysis) -> List[Recommendation]:
    fatigue = analysis.fatigue
    if fatigue is None or not fatigue.sufficient_data:
        return []

    if fatigue.fatigue_index > HIGH_FATIGUE_PCT:
        return [_recommendation(
            RecommendationCategory.ENDURANCE,
            RecommendationPriority.HIGH,
            "Build Endurance",
            f"You slowed by {fatigue.fatigue_index}% in the final laps. Focus on aerobic base building.",
            "Add 1-2 longer, slower swims per week",
        )]
    elif fatigue.fatigue_index < LOW_FATIGUE_PCT:
        return [_recommendation(
            RecommendationCategory.ENDURANCE,
            RecommendationPriority.POSITIVE,
            "Strong Finish!",
            "Minimal fatigue detected. Your endurance is excellent for this distance.",
            "Consider increasing distance or intensity",
        )]
    return []


def _comparative_rules(analysis: DeepAnalysis) -> List[Recommendation]:
    comparative = analysis.comparative
    if comparative is None or comparative.vs_pb is None:
        return []

    pace_diff = comparative.vs_pb.pace_diff
    if pace_diff > PB_GAP_PCT:
        return [_recommendation(
            RecommendationCategory.PERFORMANCE,
            RecommendationPriority.MEDIUM,
            "Gap to Personal Best",
            f"You're {pace_diff:.1f}% off your PB pace. Break it down into smaller goals.",
            f"Target {format_pace(comparative.target_pace)} pace in your next session",
        )]
    elif abs(pace_diff) < NEAR_PB_PCT:
        return [_recommendation(
            RecommendationCategory.PERFORMANCE,
            RecommendationPriority.POSITIVE,
            "Near Your Best!",
            "You're swimming close to your personal best. A PR could be within reach!",
            "Consider a taper and targeted effort for a new PB",
        )]
    return []


def _timing_rules(analysis: DeepAnalysis) -> List[Recommendation]:
    patterns = analysis.patterns
    if patterns is None or patterns.best_day is None or patterns.best_time is None:
        return []

    stamp = analysis.session.timestamp
    same_day = get_day_of_week(stamp.date()) == patterns.best_day.day
    same_time = get_time_of_day(stamp.hour) == patterns.best_time.time_of_day
    if same_day and same_time:
        return []
    return [_recommendation(
        RecommendationCategory.TIMING,
        RecommendationPriority.LOW,
        "Optimize Your Timing",
        f"You typically swim best on {patterns.best_day.day_name}s in the "
        f"{patterns.best_time.time_of_day.value}.",
        "Schedule key workouts during your peak performance windows",
    )]


def _consistency_rules(analysis: DeepAnalysis) -> List[Recommendation]:
    pacing = analysis.pacing
    if pacing is None or pacing.strategy == PacingStrategy.UNKNOWN:
        return []
    if pacing.consistency >= LOW_CONSISTENCY:
        return []
    return [_recommendation(
        RecommendationCategory.TECHNIQUE,
        RecommendationPriority.MEDIUM,
        "Work on Consistency",
        "Your pace consistency could improve. This often comes from technique refinement.",
        "Try 6x100m at target pace with focus on stroke count",
    )]


def _streak_rules(context: RecommendationContext) -> List[Recommendation]:
    weeks = context.streak.current_streak_weeks
    if weeks >= LONG_STREAK_WEEKS:
        return [_recommendation(
            RecommendationCategory.MOTIVATION,
            RecommendationPriority.POSITIVE,
            "Incredible Consistency!",
            f"You've swum {weeks} weeks in a row. Consistency like this builds lasting fitness.",
            "Keep the streak alive with at least one swim this week",
        )]
    elif weeks >= STREAK_WEEKS:
        return [_recommendation(
            RecommendationCategory.MOTIVATION,
            RecommendationPriority.POSITIVE,
            "Building a Habit",
            f"{weeks}-week streak! Regular swimming is becoming part of your routine.",
            f"Reach {LONG_STREAK_WEEKS} weeks to make it a lasting habit",
        )]
    return []


def _momentum_rules(context: RecommendationContext) -> List[Recommendation]:
    momentum = context.momentum
    if momentum.trend == MomentumTrend.DOWN and momentum.percentage < -MOMENTUM_SWING_PCT:
        return [_recommendation(
            RecommendationCategory.MOMENTUM,
            RecommendationPriority.MEDIUM,
            "Rebuild Momentum",
            f"Training is down {abs(momentum.percentage)}% compared with the previous weeks.",
            "Plan two shorter swims this week to get back into rhythm",
        )]
    elif momentum.trend == MomentumTrend.UP and momentum.percentage > MOMENTUM_SWING_PCT:
        return [_recommendation(
            RecommendationCategory.MOMENTUM,
            RecommendationPriority.POSITIVE,
            "Great Momentum!",
            f"Training is up {momentum.percentage}% compared with the previous weeks.",
            "Keep building, but add an easy session so you don't overtrain",
        )]
    return []


def _activity_gap_rules(analysis: DeepAnalysis, context: RecommendationContext) -> List[Recommendation]:
    recommendations = []

    if context.sessions_this_week == 0 and context.now.weekday() >= REMINDER_WEEKDAY:
        recommendations.append(_recommendation(
            RecommendationCategory.CONSISTENCY,
            RecommendationPriority.MEDIUM,
            "Get a Swim In",
            "No swim yet this week. A short session keeps your routine on track.",
            "Schedule a swim in the next couple of days",
        ))

    days_since = context.days_since_last_session
    if days_since is None:
        return recommendations

    patterns = analysis.patterns
    if days_since >= SCHEDULING_GAP_DAYS and patterns is not None and (
        patterns.best_day is not None or patterns.best_time is not None
    ):
        windows = []
        if patterns.best_day is not None:
            windows.append(f"{patterns.best_day.day_name}s")
        if patterns.best_time is not None:
            windows.append(f"in the {patterns.best_time.time_of_day.value}")
        recommendations.append(_recommendation(
            RecommendationCategory.TIMING,
            RecommendationPriority.LOW,
            "Plan Your Next Swim",
            f"It's been {days_since} days since your last swim. You swim best {' '.join(windows)}.",
            "Book your next swim for your best performance window",
        ))

    if days_since >= COMEBACK_GAP_DAYS:
        if context.normal_distance > 0:
            low, high = (context.normal_distance * share for share in COMEBACK_RANGE)
            target = f"{format_distance(low)}-{format_distance(high)}"
        else:
            target = "60-70% of your usual distance"
        recommendations.append(_recommendation(
            RecommendationCategory.RECOVERY,
            RecommendationPriority.MEDIUM,
            "Easy Comeback",
            f"{days_since} days since your last swim. Ease back in rather than picking up where you left off.",
            f"Swim an easy {target} next time",
        ))

    return recommendations


def generate_recommendations(
    analysis: DeepAnalysis,
    sessions: Iterable[Session] = (),
    now: Optional[datetime] = None,
    context: Optional[RecommendationContext] = None,
) -> List[Recommendation]:
    """
    Generate coaching recommendations for an analyzed session.

    Rule groups, in evaluation order: pacing, fatigue, comparative,
    timing, consistency, streak, momentum, activity gaps. When no rule
    fires a single general recommendation is returned, so the list is
    never empty.

    Args:
        analysis: Deep analysis of the target session
        sessions: Full history, for streak/momentum/weekly context
        now: Reference time (system clock when None)
        context: Precomputed context; built from sessions when None

    Returns:
        Recommendations in rule order
    """
    if context is None:
        context = RecommendationContext.from_sessions(sessions, now=now)

    recommendations: List[Recommendation] = []
    recommendations.extend(_pacing_rules(analysis))
    recommendations.extend(_fatigue_rules(analysis))
    recommendations.extend(_comparative_rules(analysis))
    recommendations.extend(_timing_rules(analysis))
    recommendations.extend(_consistency_rules(analysis))
    recommendations.extend(_streak_rules(context))
    recommendations.extend(_momentum_rules(context))
    recommendations.extend(_activity_gap_rules(analysis, context))

    if not recommendations:
        recommendations.append(_recommendation(
            RecommendationCategory.GENERAL,
            RecommendationPriority.INFO,
            "Keep Building",
            "Solid swim! Continue building on this foundation with varied training.",
            "Mix in some intervals or technique work next session",
        ))

    logger.debug("Generated %d recommendations for session %s", len(recommendations), analysis.session.id)
    return recommendations
