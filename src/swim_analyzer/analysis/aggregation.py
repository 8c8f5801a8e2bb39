"""
Temporal aggregation of swim sessions.

Groups sessions into day, week and month buckets, computes rolling
averages and fits least-squares trend lines over ordered series.
"""

import logging
import statistics
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from ..metrics.swim import coefficient_of_variation
from ..models.analysis import (
    DayBucket,
    MonthBucket,
    RegressionResult,
    RollingValue,
    TrendStatus,
    WeekBucket,
)
from ..models.session import Session
from ..utils.dates import newest_first, oldest_first, resolve_now, sessions_between, week_start

logger = logging.getLogger(__name__)

# Metrics where a lower value is an improvement
LOWER_IS_BETTER = frozenset({"pace", "swolf"})

# Percent change of the fitted line below which a trend is stable
REGRESSION_THRESHOLD_PCT = 3.0


def valid_mean(values: Iterable[float]) -> float:
    """Mean of the positive values, 0.0 when there are none."""
    valid = [v for v in values if v > 0]
    if not valid:
        return 0.0
    return statistics.fmean(valid)


def _bucket_fields(sessions: List[Session]) -> dict:
    ordered = newest_first(sessions)
    return {
        "sessions": tuple(ordered),
        "count": len(ordered),
        "total_distance": sum(s.distance for s in ordered),
        "total_duration": sum(s.duration for s in ordered),
        "avg_pace": valid_mean(s.pace for s in ordered),
        "avg_swolf": valid_mean(s.swolf for s in ordered),
        "avg_distance": valid_mean(s.distance for s in ordered),
    }


def _group(sessions: Iterable[Session], key: Callable[[Session], object]) -> Dict[object, List[Session]]:
    groups: Dict[object, List[Session]] = defaultdict(list)
    for session in sessions:
        groups[key(session)].append(session)
    return groups


def group_by_day(sessions: Iterable[Session]) -> List[DayBucket]:
    """Bucket sessions by calendar day, oldest day first."""
    groups = _group(sessions, lambda s: s.timestamp.date())
    return [
        DayBucket(day=day, **_bucket_fields(groups[day]))
        for day in sorted(groups)
    ]


def group_by_week(sessions: Iterable[Session]) -> List[WeekBucket]:
    """Bucket sessions by Monday-anchored week, oldest week first."""
    groups = _group(sessions, lambda s: week_start(s.timestamp))
    return [
        WeekBucket(week_start=monday, **_bucket_fields(groups[monday]))
        for monday in sorted(groups)
    ]


def group_by_month(sessions: Iterable[Session]) -> List[MonthBucket]:
    """
    Bucket sessions by calendar month, newest month first.

    Each bucket also carries its fastest-pace session and its longest
    session (by distance), or None when no session qualifies.
    """
    groups = _group(sessions, lambda s: (s.timestamp.year, s.timestamp.month))
    buckets = []
    for year, month in sorted(groups, reverse=True):
        members = groups[(year, month)]
        paced = [s for s in members if s.has_valid_pace]
        measured = [s for s in members if s.distance > 0]
        buckets.append(
            MonthBucket(
                month_key=f"{year:04d}-{month:02d}",
                year=year,
                month=month,
                best_pace=min(paced, key=lambda s: s.pace) if paced else None,
                longest_session=max(measured, key=lambda s: s.distance) if measured else None,
                **_bucket_fields(members),
            )
        )
    return buckets


def rolling_average(values: Sequence[float], window: int = 3) -> List[float]:
    """
    Trailing average of the last `window` values at each position.

    Non-positive values are left out of each window's average; a position
    whose window has no valid value keeps its raw value.
    """
    if window < 1:
        window = 1
    averages = []
    for index, value in enumerate(values):
        trailing = [v for v in values[max(0, index - window + 1): index + 1] if v > 0]
        averages.append(statistics.fmean(trailing) if trailing else value)
    return averages


def date_rolling_average(
    sessions: Iterable[Session],
    metric: str = "pace",
    days: int = 7,
) -> List[RollingValue]:
    """
    Trailing average of a session metric over the `days` calendar days ending at each session.

    Args:
        sessions: Sessions in any order
        metric: Session attribute to average ("pace", "swolf", "distance", ...)
        days: Window length in days

    Returns:
        One RollingValue per session, oldest first
    """
    ordered = oldest_first(sessions)
    results = []
    for index, session in enumerate(ordered):
        window_start = session.timestamp - timedelta(days=days)
        trailing = [
            getattr(s, metric)
            for s in ordered[: index + 1]
            if window_start < s.timestamp <= session.timestamp and getattr(s, metric) > 0
        ]
        value = getattr(session, metric)
        results.append(
            RollingValue(
                session_id=session.id,
                timestamp=session.timestamp,
                value=value,
                rolling_average=statistics.fmean(trailing) if trailing else value,
            )
        )
    return results


def linear_regression(values: Sequence[float], lower_is_better: bool = False) -> RegressionResult:
    """
    Ordinary least squares fit of value against position.

    Non-positive values are dropped but keep their original index as x.
    The trend compares the fitted start and end of the line against a
    +/-3% threshold, inverted when lower values are better.

    Args:
        values: Series ordered oldest to newest
        lower_is_better: True for pace and SWOLF

    Returns:
        RegressionResult; a flat stable result when fewer than 2 valid points
    """
    points = [(float(x), y) for x, y in enumerate(values) if y > 0]
    n = len(points)
    if n < 2:
        logger.debug("Regression skipped: %d valid points", n)
        return RegressionResult(sample_size=n)

    sum_x = sum(x for x, _ in points)
    sum_y = sum(y for _, y in points)
    sum_xy = sum(x * y for x, y in points)
    sum_xx = sum(x * x for x, _ in points)

    slope = (n * sum_xy - sum_x * sum_y) / (n * sum_xx - sum_x * sum_x)
    intercept = (sum_y - slope * sum_x) / n

    mean_y = sum_y / n
    ss_res = sum((y - (slope * x + intercept)) ** 2 for x, y in points)
    ss_tot = sum((y - mean_y) ** 2 for _, y in points)
    r_squared = 1 - ss_res / ss_tot if ss_tot > 0 else 0.0

    start_value = slope * points[0][0] + intercept
    end_value = slope * points[-1][0] + intercept
    percent_change = (end_value - start_value) / start_value * 100 if start_value != 0 else 0.0

    improvement = -percent_change if lower_is_better else percent_change
    if improvement > REGRESSION_THRESHOLD_PCT:
        status = TrendStatus.IMPROVING
    elif improvement < -REGRESSION_THRESHOLD_PCT:
        status = TrendStatus.DECLINING
    else:
        status = TrendStatus.STABLE

    return RegressionResult(
        slope=slope,
        intercept=intercept,
        r_squared=r_squared,
        trend=status,
        percent_change=round(percent_change),
        sample_size=n,
    )


def metric_regression(sessions: Iterable[Session], metric: str = "pace") -> RegressionResult:
    """Fit a trend line to one session metric in chronological order."""
    values = [getattr(s, metric) for s in oldest_first(sessions)]
    return linear_regression(values, lower_is_better=metric in LOWER_IS_BETTER)


def consistency_score(
    sessions: Iterable[Session],
    days: int = 30,
    now: Optional[datetime] = None,
) -> int:
    """
    Training consistency over the trailing `days` days, 0-100.

    Frequency earns up to 50 points (target: 3 sessions per week) and pace
    steadiness up to 50 points (CV of 5% or less scores 50, 20% or more
    scores 0, linear in between).
    """
    if days <= 0:
        return 0
    now = resolve_now(now)
    in_window = sessions_between(sessions, now - timedelta(days=days), now)
    if not in_window:
        return 0

    target_sessions = days / 7 * 3
    frequency_score = min(50.0, len(in_window) / target_sessions * 50)

    paces = [s.pace for s in in_window if s.has_valid_pace]
    if len(paces) < 2:
        return round(frequency_score)

    cv = coefficient_of_variation(paces)
    variability_score = max(0.0, min(50.0, 50 - (cv - 5) * (50 / 15)))
    return round(frequency_score + variability_score)
