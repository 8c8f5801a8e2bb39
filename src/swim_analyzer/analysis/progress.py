"""
Progress analysis, compare mode, weekly statistics and distance goals.

Each function looks at one or two time windows relative to an injected
"now" and reports improvement-oriented changes between them.
"""

import logging
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from ..metrics.trends import classify_change, pace_trend, swolf_trend, trend, trend_result
from ..models.analysis import (
    GoalProgress,
    MomentumTrend,
    PeriodAverages,
    PeriodStats,
    ProgressAnalysis,
    ProgressStatus,
    ProgressTrends,
    TimeWindow,
    WeeklyMetricTrend,
    WeeklyTrend,
    WindowComparison,
)
from ..models.session import Session
from ..utils.dates import newest_first, resolve_now, sessions_between, week_window
from .aggregation import valid_mean
from .streaks import calculate_momentum, calculate_monthly_streak

logger = logging.getLogger(__name__)

# Progress weighting: technique metrics count double relative to volume
PACE_WEIGHT = 0.4
SWOLF_WEIGHT = 0.4
DISTANCE_WEIGHT = 0.2

PROGRESS_THRESHOLD = 3
COMPARE_THRESHOLD = 3
WEEKLY_THRESHOLD = 5

WEEKLY_GOAL_M = 7500
MONTHLY_GOAL_M = 30000

# Coaching insight thresholds
INSIGHT_TREND_THRESHOLD = 5
INSIGHT_DISTANCE_THRESHOLD = 10
INSIGHT_MOMENTUM_THRESHOLD = 15
LONG_STREAK_MONTHS = 12
STREAK_MONTHS = 3
# Thursday onwards an empty week gets a nudge
LATE_WEEK_DAY = 3


def period_averages(sessions: Iterable[Session]) -> PeriodAverages:
    """Mean pace, SWOLF and distance, each over its valid values only."""
    sessions = list(sessions)
    return PeriodAverages(
        pace=valid_mean(s.pace for s in sessions),
        swolf=valid_mean(s.swolf for s in sessions),
        distance=valid_mean(s.distance for s in sessions),
    )


def analyze_progress(
    sessions: Iterable[Session],
    days: int = 90,
    now: Optional[datetime] = None,
) -> ProgressAnalysis:
    """
    Decide whether the swimmer is improving over the trailing window.

    Sessions in the window are ordered newest first and split at the
    midpoint; the newer half is compared with the older half. Pace and
    SWOLF trends weigh 0.4 each and distance 0.2.

    Args:
        sessions: Full session history in any order
        days: Window length in days
        now: Reference time (system clock when None)

    Returns:
        ProgressAnalysis with status improving/declining/stable, or
        no-data / insufficient-data when the window has fewer than 2 sessions
    """
    sessions = list(sessions)
    if not sessions:
        return ProgressAnalysis(
            status=ProgressStatus.NO_DATA,
            message="No swim data available yet",
        )

    now = resolve_now(now)
    in_window = newest_first(sessions_between(sessions, now - timedelta(days=days), now))
    total_distance = sum(s.distance for s in in_window)

    if len(in_window) < 2:
        logger.debug("Progress analysis: %d sessions in %d-day window", len(in_window), days)
        return ProgressAnalysis(
            status=ProgressStatus.INSUFFICIENT_DATA,
            message="Upload more swims to see your progress",
            total_sessions=len(in_window),
            total_distance=total_distance,
        )

    midpoint = len(in_window) // 2
    newer = period_averages(in_window[:midpoint])
    older = period_averages(in_window[midpoint:])

    trends = ProgressTrends(
        pace=pace_trend(newer.pace, older.pace),
        swolf=swolf_trend(newer.swolf, older.swolf),
        distance=trend(newer.distance, older.distance),
    )
    score = (
        trends.pace * PACE_WEIGHT
        + trends.swolf * SWOLF_WEIGHT
        + trends.distance * DISTANCE_WEIGHT
    )

    if score > PROGRESS_THRESHOLD:
        status = ProgressStatus.IMPROVING
        message = f"You're improving! {abs(round(score))}% better over the last {days} days"
    elif score < -PROGRESS_THRESHOLD:
        status = ProgressStatus.DECLINING
        message = f"Let's refocus. Down {abs(round(score))}% over the last {days} days"
    else:
        status = ProgressStatus.STABLE
        message = "Staying consistent! Maintain this momentum"

    return ProgressAnalysis(
        status=status,
        message=message,
        improving=status == ProgressStatus.IMPROVING,
        total_sessions=len(in_window),
        total_distance=total_distance,
        averages=newer,
        trends=trends,
        weighted_score=round(score),
    )


def compare_windows(
    sessions: Iterable[Session],
    days: int = 30,
    now: Optional[datetime] = None,
) -> WindowComparison:
    """
    Compare the last `days` days against the `days` days before them.

    The current window is [now - days, now]; the previous window is
    [now - 2*days, now - days).
    """
    sessions = list(sessions)
    if not sessions:
        return WindowComparison()

    now = resolve_now(now)
    current_start = now - timedelta(days=days)
    previous_start = current_start - timedelta(days=days)
    current = newest_first(sessions_between(sessions, current_start, now))
    previous = newest_first(sessions_between(sessions, previous_start, current_start, include_end=False))

    current_avg = period_averages(current)
    previous_avg = period_averages(previous)
    count_change = len(current) - len(previous)

    return WindowComparison(
        current_sessions=tuple(current),
        previous_sessions=tuple(previous),
        current_averages=current_avg,
        previous_averages=previous_avg,
        pace=trend_result(current_avg.pace, previous_avg.pace, lower_is_better=True, threshold=COMPARE_THRESHOLD),
        distance=trend_result(current_avg.distance, previous_avg.distance, threshold=COMPARE_THRESHOLD),
        swolf=trend_result(current_avg.swolf, previous_avg.swolf, lower_is_better=True, threshold=COMPARE_THRESHOLD),
        count_change=count_change,
        count_change_pct=round(count_change / len(previous) * 100) if previous else 0,
    )


def _period_stats(sessions: List[Session], window: TimeWindow) -> PeriodStats:
    if not sessions:
        return PeriodStats(window=window)
    total_distance = sum(s.distance for s in sessions)
    total_duration = sum(s.duration for s in sessions)
    return PeriodStats(
        window=window,
        count=len(sessions),
        total_distance=total_distance,
        avg_distance=total_distance / len(sessions),
        avg_pace=valid_mean(s.pace for s in sessions),
        avg_swolf=valid_mean(s.swolf for s in sessions),
        total_duration=total_duration,
        avg_duration=total_duration / len(sessions),
        days_active=len({s.timestamp.date() for s in sessions}),
    )


def week_stats(
    sessions: Iterable[Session],
    weeks_ago: int = 0,
    now: Optional[datetime] = None,
) -> PeriodStats:
    """Statistics for the Monday-to-Sunday week `weeks_ago` weeks before the current one."""
    window = week_window(resolve_now(now), weeks_ago)
    in_week = sessions_between(sessions, window.start, window.end)
    return _period_stats(in_week, window)


def current_week_stats(sessions: Iterable[Session], now: Optional[datetime] = None) -> PeriodStats:
    return week_stats(sessions, 0, now)


def _change_from_zero_baseline(current: float, previous: float) -> float:
    if previous > 0:
        return (current - previous) / previous * 100
    return 100.0 if current > 0 else 0.0


def _metric_trend(change: float, current: float, previous: float) -> WeeklyMetricTrend:
    return WeeklyMetricTrend(
        change=round(change),
        trend=classify_change(change, WEEKLY_THRESHOLD),
        current=current,
        previous=previous,
    )


def weekly_trend(current: PeriodStats, previous: PeriodStats) -> WeeklyTrend:
    """
    Week-over-week change for count, distance, pace and active days.

    Growth from an empty previous week counts as +100%. Pace change is
    inverted (faster is up) and is 0 unless both weeks have a valid pace.
    """
    if current.avg_pace > 0 and previous.avg_pace > 0:
        pace_change = (previous.avg_pace - current.avg_pace) / previous.avg_pace * 100
    else:
        pace_change = 0.0

    return WeeklyTrend(
        count=_metric_trend(
            _change_from_zero_baseline(current.count, previous.count),
            current.count,
            previous.count,
        ),
        distance=_metric_trend(
            _change_from_zero_baseline(current.total_distance, previous.total_distance),
            current.total_distance,
            previous.total_distance,
        ),
        pace=_metric_trend(pace_change, current.avg_pace, previous.avg_pace),
        days_active=_metric_trend(
            _change_from_zero_baseline(current.days_active, previous.days_active),
            current.days_active,
            previous.days_active,
        ),
    )


def _goal_progress(sessions: Iterable[Session], start: datetime, now: datetime, goal_m: float) -> GoalProgress:
    current = sum(s.distance for s in sessions_between(sessions, start, now))
    percentage = min(current / goal_m * 100, 100.0) if goal_m > 0 else 100.0
    return GoalProgress(
        current=current,
        goal=goal_m,
        percentage=percentage,
        remaining=max(goal_m - current, 0.0),
        is_goal_met=current >= goal_m,
    )


def weekly_goal_progress(
    sessions: Iterable[Session],
    goal_m: float = WEEKLY_GOAL_M,
    now: Optional[datetime] = None,
) -> GoalProgress:
    """Distance swum since Monday 00:00 against a weekly goal."""
    now = resolve_now(now)
    return _goal_progress(sessions, week_window(now).start, now, goal_m)


def monthly_goal_progress(
    sessions: Iterable[Session],
    goal_m: float = MONTHLY_GOAL_M,
    now: Optional[datetime] = None,
) -> GoalProgress:
    """Distance swum since the first of the month against a monthly goal."""
    now = resolve_now(now)
    month_start = datetime(now.year, now.month, 1)
    return _goal_progress(sessions, month_start, now, goal_m)


def generate_coaching_insight(
    progress: ProgressAnalysis,
    sessions: Iterable[Session] = (),
    now: Optional[datetime] = None,
) -> str:
    """
    One coaching paragraph built from progress trends and recent activity.

    Lines are added in a fixed order: monthly streak, momentum, this
    week's activity, then pace, SWOLF and distance trends. A default line
    is used when nothing else applies.

    Args:
        progress: Output of analyze_progress
        sessions: Session history for streak, momentum and week context
        now: Reference time (system clock when None)

    Returns:
        The insight lines joined by spaces
    """
    if progress.status in (ProgressStatus.NO_DATA, ProgressStatus.INSUFFICIENT_DATA):
        return "Upload your swim data to get personalized coaching insights!"

    sessions = list(sessions)
    now = resolve_now(now)
    insights = []

    if sessions:
        streak = calculate_monthly_streak(sessions, now).current_streak_months
        if streak >= LONG_STREAK_MONTHS:
            insights.append(f"Impressive {streak}-month streak! Over a year of consistency!")
        elif streak >= STREAK_MONTHS:
            insights.append(f"You're on a {streak}-month streak!")

        momentum = calculate_momentum(sessions, now=now)
        if momentum.trend == MomentumTrend.UP and momentum.percentage > INSIGHT_MOMENTUM_THRESHOLD:
            insights.append(f"Building great momentum (+{momentum.percentage}%).")
        elif momentum.trend == MomentumTrend.DOWN and momentum.percentage < -INSIGHT_MOMENTUM_THRESHOLD:
            insights.append("Let's rebuild momentum - get back to your weekly routine.")

        if current_week_stats(sessions, now).count > 0:
            insights.append("Swam this week - keeping the streak alive!")
        elif now.weekday() >= LATE_WEEK_DAY:
            insights.append("No swim yet this week - try to get one in!")

    trends = progress.trends or ProgressTrends()
    if trends.pace > INSIGHT_TREND_THRESHOLD:
        insights.append(f"Your pace has improved by {trends.pace}%! Keep up the consistent effort.")
    elif trends.pace < -INSIGHT_TREND_THRESHOLD:
        insights.append("Your pace has slowed. Consider shorter, more intense intervals to build speed.")

    if trends.swolf > INSIGHT_TREND_THRESHOLD:
        insights.append(f"Great efficiency gains! Your SWOLF improved by {trends.swolf}%.")
    elif trends.swolf < -INSIGHT_TREND_THRESHOLD:
        insights.append("Focus on stroke technique - try counting your strokes per length.")

    if trends.distance > INSIGHT_DISTANCE_THRESHOLD:
        insights.append("You're swimming longer distances - excellent endurance building!")

    if not insights:
        insights.append(
            f"You're maintaining consistency with {progress.total_sessions} swims. "
            "Try mixing up your routine with intervals or technique work."
        )
    return " ".join(insights)
