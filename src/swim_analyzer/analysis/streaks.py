"""
Weekly and monthly streaks, streak milestones and training momentum.

A streak is a run of consecutive Monday-anchored weeks (or calendar months)
that each contain at least one session. Momentum compares frequency, volume and pace in a
recent window against the window before it.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from ..metrics.trends import classify_change
from ..models.achievements import NextStreakMilestone, StreakAchievement, StreakMilestone
from ..models.analysis import (
    MetricMomentum,
    MomentumBreakdown,
    MomentumScore,
    MomentumTrend,
    MonthlyStreak,
    Streak,
)
from ..models.session import Session
from ..utils.dates import resolve_now, sessions_between, week_start
from .aggregation import valid_mean

logger = logging.getLogger(__name__)

FREQUENCY_WEIGHT = 0.4
VOLUME_WEIGHT = 0.3
PACE_WEIGHT = 0.3

# Momentum score beyond which the trend is up or down
MOMENTUM_THRESHOLD = 10

STREAK_MILESTONES = (
    StreakMilestone(months=3, badge="Quarter Year", icon="🌱", message="3-month streak! You're building a habit"),
    StreakMilestone(months=6, badge="Half Year", icon="⚡", message="6 months! Consistency is key"),
    StreakMilestone(months=12, badge="Full Year", icon="🔥", message="1 year! You're on fire"),
    StreakMilestone(months=18, badge="Year & Half", icon="💪", message="18 months! Incredible dedication"),
    StreakMilestone(months=24, badge="Two Years", icon="🌟", message="2 years! You're unstoppable"),
    StreakMilestone(months=36, badge="Three Years", icon="👑", message="3 years! Elite level commitment"),
    StreakMilestone(months=48, badge="Four Year Legend", icon="🏆", message="4 years! Legendary consistency"),
)


def calculate_streaks(sessions: Iterable[Session], now: Optional[datetime] = None) -> Streak:
    """
    Current and longest streak of consecutive active weeks.

    The current streak only counts while the most recent active week is
    this week or last week; otherwise it is 0 whatever the history holds.

    Args:
        sessions: Sessions in any order
        now: Reference time (system clock when None)

    Returns:
        Streak with week counts and the sorted active week keys
    """
    weeks = sorted({week_start(s.timestamp) for s in sessions})
    if not weeks:
        return Streak()

    longest = 1
    run = 1
    for previous, current in zip(weeks, weeks[1:]):
        if (current - previous).days == 7:
            run += 1
        else:
            longest = max(longest, run)
            run = 1
    longest = max(longest, run)

    this_monday = week_start(resolve_now(now))
    last_monday = this_monday - timedelta(days=7)
    current_streak = run if weeks[-1] >= last_monday else 0

    return Streak(
        current_streak_weeks=current_streak,
        longest_streak_weeks=longest,
        sorted_week_keys=tuple(weeks),
    )


def _month_index(moment: datetime) -> int:
    return moment.year * 12 + moment.month - 1


def calculate_monthly_streak(sessions: Iterable[Session], now: Optional[datetime] = None) -> MonthlyStreak:
    """
    Current and longest run of consecutive calendar months with a session.

    The current streak only counts while the most recent active month is
    this month or last month.
    """
    months = sorted({_month_index(s.timestamp) for s in sessions})
    if not months:
        return MonthlyStreak()

    longest = 1
    run = 1
    for previous, current in zip(months, months[1:]):
        if current - previous == 1:
            run += 1
        else:
            longest = max(longest, run)
            run = 1
    longest = max(longest, run)

    this_month = _month_index(resolve_now(now))
    return MonthlyStreak(
        current_streak_months=run if months[-1] >= this_month - 1 else 0,
        longest_streak_months=longest,
    )


def check_streak_achievements(streak_months: int) -> List[StreakAchievement]:
    """Streak milestones reached by a monthly streak, smallest first."""
    return [
        StreakAchievement(
            **milestone.model_dump(),
            unlocked_at=streak_months,
            is_new=streak_months == milestone.months,
        )
        for milestone in STREAK_MILESTONES
        if streak_months >= milestone.months
    ]


def next_streak_milestone(streak_months: int) -> Optional[NextStreakMilestone]:
    """
    The first streak milestone beyond the current streak.

    Returns:
        NextStreakMilestone, or None once the last milestone is reached
    """
    for milestone in STREAK_MILESTONES:
        if milestone.months > streak_months:
            months_to_go = milestone.months - streak_months
            if months_to_go == 1:
                message = "1 month away from your next milestone!"
            else:
                message = f"{months_to_go} months away from {milestone.badge}"
            return NextStreakMilestone(
                months=milestone.months,
                badge=milestone.badge,
                icon=milestone.icon,
                message=message,
                months_to_go=months_to_go,
                progress_percent=round(streak_months / milestone.months * 100),
            )
    return None


@dataclass
class PeriodMetrics:
    """Frequency (sessions/week), mean distance and mean valid pace of one window."""

    frequency: float
    avg_distance: float
    avg_pace: float

    @classmethod
    def from_sessions(cls, sessions: List[Session]) -> "PeriodMetrics":
        if not sessions:
            return cls(frequency=0.0, avg_distance=0.0, avg_pace=0.0)
        stamps = [s.timestamp for s in sessions]
        span_days = max(1.0, (max(stamps) - min(stamps)).total_seconds() / 86400)
        return cls(
            frequency=len(sessions) / (span_days / 7),
            avg_distance=sum(s.distance for s in sessions) / len(sessions),
            avg_pace=valid_mean(s.pace for s in sessions),
        )


def _change(recent: float, comparison: float) -> float:
    if comparison <= 0:
        return 0.0
    return (recent - comparison) / comparison * 100


def _momentum_message(trend: MomentumTrend, score: float) -> str:
    if trend == MomentumTrend.UP:
        return f"Building momentum! Up {round(score)}% from last month"
    if trend == MomentumTrend.DOWN:
        return f"Training dipped {abs(round(score))}% - let's get back on track"
    return "Maintaining steady training - keep it consistent!"


def calculate_momentum(
    sessions: Iterable[Session],
    now: Optional[datetime] = None,
    recent_days: int = 14,
    comparison_days: int = 28,
) -> MomentumScore:
    """
    Weighted momentum score between the recent and the comparison window.

    The recent window is the last `recent_days` days; the comparison
    window is the `comparison_days` days before it. Score =
    0.4 * frequency change + 0.3 * volume change + 0.3 * inverted pace change.

    Args:
        sessions: Sessions in any order
        now: Reference time (system clock when None)
        recent_days: Length of the recent window
        comparison_days: Length of the comparison window

    Returns:
        MomentumScore; insufficient-data unless both windows hold a session
    """
    sessions = list(sessions)
    now = resolve_now(now)
    recent_start = now - timedelta(days=recent_days)
    comparison_start = recent_start - timedelta(days=comparison_days)

    recent = sessions_between(sessions, recent_start, now)
    comparison = sessions_between(sessions, comparison_start, recent_start, include_end=False)
    if not recent or not comparison:
        logger.debug(
            "Momentum: insufficient data (recent=%d, comparison=%d)",
            len(recent),
            len(comparison),
        )
        return MomentumScore()

    recent_metrics = PeriodMetrics.from_sessions(recent)
    comparison_metrics = PeriodMetrics.from_sessions(comparison)

    frequency_change = _change(recent_metrics.frequency, comparison_metrics.frequency)
    volume_change = _change(recent_metrics.avg_distance, comparison_metrics.avg_distance)
    # Lower pace is better
    pace_change = -_change(recent_metrics.avg_pace, comparison_metrics.avg_pace)
    if recent_metrics.avg_pace <= 0:
        pace_change = 0.0

    score = (
        frequency_change * FREQUENCY_WEIGHT
        + volume_change * VOLUME_WEIGHT
        + pace_change * PACE_WEIGHT
    )
    if score > MOMENTUM_THRESHOLD:
        trend = MomentumTrend.UP
    elif score < -MOMENTUM_THRESHOLD:
        trend = MomentumTrend.DOWN
    else:
        trend = MomentumTrend.STEADY

    breakdown = MomentumBreakdown(
        frequency=MetricMomentum(
            recent=round(recent_metrics.frequency, 1),
            comparison=round(comparison_metrics.frequency, 1),
            change=round(frequency_change),
            trend=classify_change(frequency_change, 5),
        ),
        volume=MetricMomentum(
            recent=round(recent_metrics.avg_distance),
            comparison=round(comparison_metrics.avg_distance),
            change=round(volume_change),
            trend=classify_change(volume_change, 5),
        ),
        pace=MetricMomentum(
            recent=round(recent_metrics.avg_pace, 2),
            comparison=round(comparison_metrics.avg_pace, 2),
            change=round(pace_change),
            trend=classify_change(pace_change, 3),
        ),
    )

    return MomentumScore(
        trend=trend,
        percentage=round(score),
        message=_momentum_message(trend, score),
        breakdown=breakdown,
    )


def momentum_motivation(momentum: Optional[MomentumScore]) -> str:
    """Short motivational line for a momentum score."""
    if momentum is None or momentum.trend == MomentumTrend.INSUFFICIENT_DATA:
        return "Keep swimming to build momentum!"
    if momentum.trend == MomentumTrend.UP:
        if momentum.percentage > 30:
            return "On fire! Amazing progress!"
        if momentum.percentage > 20:
            return "Crushing it! Keep going!"
        return "Building momentum nicely!"
    if momentum.trend == MomentumTrend.DOWN:
        if momentum.percentage < -30:
            return "Time to get back in the pool!"
        return "Small dip - easy to recover!"
    return "Consistent training pays off!"
