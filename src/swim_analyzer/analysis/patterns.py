"""Performance patterns: day of week, time of day, pace streaks and months."""

import logging
import statistics
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, TypeVar

from ..models.patterns import (
    DayAverage,
    DayOfWeek,
    MonthlyPatterns,
    MonthStat,
    PerformancePatterns,
    PerformanceStreak,
    PerformanceStreakType,
    TimeAverage,
    TimeOfDay,
    get_day_of_week,
    get_time_of_day,
)
from ..models.session import Session
from ..utils.dates import oldest_first
from .aggregation import valid_mean

logger = logging.getLogger(__name__)

T = TypeVar("T", DayAverage, TimeAverage)

# Pace change between consecutive swims, in percent, beyond which the swim
# counts as faster or slower
STREAK_PACE_BAND = 2
STREAK_LOOKBACK = 10
MIN_MONTHLY_SESSIONS = 6
MIN_SESSIONS_PER_MONTH = 2


def _fastest(averages: List[T], min_count: int) -> Optional[T]:
    """Lowest average pace among groups with enough sessions; earliest group wins ties."""
    best = None
    for average in averages:
        if average.count < min_count:
            continue
        if best is None or average.avg_pace < best.avg_pace:
            best = average
    return best


def find_performance_patterns(
    sessions: Iterable[Session],
    min_sessions: int = 5,
    min_group_size: int = 2,
) -> PerformancePatterns:
    """
    Find the day of week and time of day the swimmer is fastest.

    Only sessions with a valid pace are considered. Every group is listed
    in the averages, but a group needs at least `min_group_size` sessions
    to be chosen as best day or best time.

    Args:
        sessions: Sessions in any order
        min_sessions: Valid-pace sessions required before looking for patterns
        min_group_size: Sessions a group needs to compete for best

    Returns:
        PerformancePatterns; has_patterns is False when there is too little data
    """
    paced = [s for s in sessions if s.has_valid_pace]
    if len(paced) < min_sessions:
        logger.debug("Patterns: %d valid-pace sessions, need %d", len(paced), min_sessions)
        return PerformancePatterns(message="Need more data to identify patterns")

    by_day: Dict[DayOfWeek, List[float]] = defaultdict(list)
    by_time: Dict[TimeOfDay, List[float]] = defaultdict(list)
    for session in paced:
        by_day[get_day_of_week(session.timestamp.date())].append(session.pace)
        by_time[get_time_of_day(session.timestamp.hour)].append(session.pace)

    day_averages = [
        DayAverage(
            day=day,
            day_name=day.display_name,
            avg_pace=statistics.fmean(by_day[day]),
            count=len(by_day[day]),
        )
        for day in DayOfWeek
        if day in by_day
    ]
    time_averages = [
        TimeAverage(
            time_of_day=time_of_day,
            avg_pace=statistics.fmean(by_time[time_of_day]),
            count=len(by_time[time_of_day]),
        )
        for time_of_day in TimeOfDay
        if time_of_day in by_time
    ]

    return PerformancePatterns(
        has_patterns=True,
        best_day=_fastest(day_averages, min_group_size),
        best_time=_fastest(time_averages, min_group_size),
        day_averages=tuple(day_averages),
        time_averages=tuple(time_averages),
    )


def _pace_direction(previous: float, current: float) -> PerformanceStreakType:
    change = (previous - current) / previous * 100
    if change > STREAK_PACE_BAND:
        return PerformanceStreakType.IMPROVING
    if change < -STREAK_PACE_BAND:
        return PerformanceStreakType.DECLINING
    return PerformanceStreakType.CONSISTENT


def _streak_message(streak_type: PerformanceStreakType, length: int) -> str:
    if streak_type == PerformanceStreakType.IMPROVING:
        return f"You're on an improving streak! {length} consecutive swims with better pace."
    if streak_type == PerformanceStreakType.DECLINING:
        return f"Your pace has been slower for {length} consecutive swims. Consider rest or technique work."
    return f"Great consistency! {length} swims with similar pace."


def detect_performance_streaks(sessions: Iterable[Session], min_streak: int = 3) -> PerformanceStreak:
    """
    Find the run of same-direction pace changes ending at the latest swim.

    The last 10 swims are compared pairwise in date order. A swim more than
    2% faster than the one before is improving, more than 2% slower is
    declining, anything in between is consistent. Pairs where either swim
    has no valid pace are skipped without breaking the run.

    Args:
        sessions: Sessions in any order
        min_streak: Pace changes a run needs to count as a streak

    Returns:
        PerformanceStreak; has_streak is False for shorter runs
    """
    sessions = list(sessions)
    if len(sessions) < min_streak:
        return PerformanceStreak()

    recent = oldest_first(sessions)[-STREAK_LOOKBACK:]
    run_type = None
    run = 0
    for previous, current in zip(recent, recent[1:]):
        if not previous.has_valid_pace or not current.has_valid_pace:
            continue
        direction = _pace_direction(previous.pace, current.pace)
        if direction == run_type:
            run += 1
        else:
            run_type = direction
            run = 1

    if run_type is None or run < min_streak:
        return PerformanceStreak()

    length = run + 1
    return PerformanceStreak(
        has_streak=True,
        streak_type=run_type,
        streak_length=length,
        message=_streak_message(run_type, length),
    )


def analyze_monthly_patterns(sessions: Iterable[Session]) -> MonthlyPatterns:
    """
    Per-month totals with the fastest and the most active month.

    Every month with a session is listed, oldest first. Only months with
    at least 2 sessions compete for best and most active; ties go to the
    earlier month.

    Args:
        sessions: Sessions in any order

    Returns:
        MonthlyPatterns; has_sufficient_data is False below 6 sessions or
        when no month has 2 sessions
    """
    sessions = list(sessions)
    if len(sessions) < MIN_MONTHLY_SESSIONS:
        logger.debug("Monthly patterns: %d sessions, need %d", len(sessions), MIN_MONTHLY_SESSIONS)
        return MonthlyPatterns()

    by_month: Dict[str, List[Session]] = defaultdict(list)
    for session in sessions:
        by_month[session.timestamp.strftime("%Y-%m")].append(session)

    month_stats = [
        MonthStat(
            month=month,
            count=len(by_month[month]),
            total_distance=sum(s.distance for s in by_month[month]),
            avg_pace=valid_mean(s.pace for s in by_month[month]),
        )
        for month in sorted(by_month)
    ]

    eligible = [m for m in month_stats if m.count >= MIN_SESSIONS_PER_MONTH]
    if not eligible:
        return MonthlyPatterns(month_stats=tuple(month_stats))

    best_month = None
    for month in eligible:
        if month.avg_pace > 0 and (best_month is None or month.avg_pace < best_month.avg_pace):
            best_month = month
    most_active = max(eligible, key=lambda m: m.count)

    return MonthlyPatterns(
        has_sufficient_data=True,
        month_stats=tuple(month_stats),
        best_month=best_month,
        most_active_month=most_active,
    )
