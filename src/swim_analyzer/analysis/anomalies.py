"""
Outlier and sudden-change detection.

A value beyond 2 standard deviations of the mean is a moderate anomaly,
beyond 3 an extreme one. Only the most severe anomaly is kept per session.
"""

import logging
import statistics
from typing import Iterable, List, Optional

from ..metrics.swim import format_pace
from ..models.analysis import Anomaly, AnomalyReport, MetricStats, SuddenChange
from ..models.session import Session
from ..utils.dates import oldest_first

logger = logging.getLogger(__name__)

MIN_SESSIONS = 5
MIN_SESSIONS_FOR_CHANGES = 3
SUDDEN_PACE_CHANGE_PCT = 15
SUDDEN_DISTANCE_CHANGE_PCT = 30


def metric_stats(values: List[float]) -> Optional[MetricStats]:
    """Population mean and standard deviation with 2- and 3-sigma thresholds."""
    if not values:
        return None
    mean = statistics.fmean(values)
    std_dev = statistics.pstdev(values)
    return MetricStats(
        mean=mean,
        std_dev=std_dev,
        upper_threshold=mean + 2 * std_dev,
        lower_threshold=mean - 2 * std_dev,
        extreme_upper_threshold=mean + 3 * std_dev,
        extreme_lower_threshold=mean - 3 * std_dev,
    )


def _deviation(value: float, stats: MetricStats) -> float:
    if stats.mean == 0:
        return 0.0
    return (value - stats.mean) / stats.mean * 100


def _pace_anomaly(session: Session, stats: MetricStats) -> Optional[Anomaly]:
    deviation = _deviation(session.pace, stats)
    pace = format_pace(session.pace)
    if session.pace < stats.extreme_lower_threshold:
        severity, direction = "extreme", "positive"
        message = f"Exceptionally fast pace: {pace} ({abs(deviation):.1f}% faster than average)"
    elif session.pace < stats.lower_threshold:
        severity, direction = "moderate", "positive"
        message = f"Notably fast pace: {pace}"
    elif session.pace > stats.extreme_upper_threshold:
        severity, direction = "extreme", "negative"
        message = f"Unusually slow pace: {pace} ({abs(deviation):.1f}% slower than average)"
    elif session.pace > stats.upper_threshold:
        severity, direction = "moderate", "negative"
        message = f"Notably slow pace: {pace}"
    else:
        return None
    return Anomaly(
        session_id=session.id,
        metric="pace",
        severity=severity,
        direction=direction,
        message=message,
        deviation_from_mean=deviation,
    )


def _distance_anomaly(session: Session, stats: MetricStats) -> Optional[Anomaly]:
    deviation = _deviation(session.distance, stats)
    km = f"{session.distance / 1000:.2f}km"
    if session.distance > stats.extreme_upper_threshold:
        severity, direction = "extreme", "positive"
        message = f"Exceptionally long swim: {km} ({abs(deviation):.1f}% longer than average)"
    elif session.distance > stats.upper_threshold:
        severity, direction = "moderate", "positive"
        message = f"Notably long swim: {km}"
    elif session.distance < stats.extreme_lower_threshold:
        severity, direction = "extreme", "negative"
        message = f"Unusually short swim: {km}"
    elif session.distance < stats.lower_threshold:
        severity, direction = "moderate", "negative"
        message = f"Notably short swim: {km}"
    else:
        return None
    return Anomaly(
        session_id=session.id,
        metric="distance",
        severity=severity,
        direction=direction,
        message=message,
        deviation_from_mean=deviation,
    )


def _swolf_anomaly(session: Session, stats: MetricStats) -> Optional[Anomaly]:
    # Only extreme SWOLF values are flagged
    if session.swolf < stats.extreme_lower_threshold:
        direction, message = "positive", f"Exceptionally efficient swim: SWOLF {session.swolf:g}"
    elif session.swolf > stats.extreme_upper_threshold:
        direction, message = "negative", f"Unusually inefficient swim: SWOLF {session.swolf:g}"
    else:
        return None
    return Anomaly(
        session_id=session.id,
        metric="swolf",
        severity="extreme",
        direction=direction,
        message=message,
        deviation_from_mean=_deviation(session.swolf, stats),
    )


def detect_anomalies(sessions: Iterable[Session]) -> AnomalyReport:
    """
    Flag sessions whose pace, distance or SWOLF is far from the norm.

    Pace and SWOLF are only analysed when at least 5 sessions carry a
    valid value. Anomalies are ordered extreme first, then by absolute
    deviation from the mean.
    """
    sessions = list(sessions)
    if len(sessions) < MIN_SESSIONS:
        logger.debug("Anomalies: %d sessions, need %d", len(sessions), MIN_SESSIONS)
        return AnomalyReport()

    found: List[Anomaly] = []

    paced = [s for s in sessions if s.has_valid_pace]
    pace_stats = metric_stats([s.pace for s in paced]) if len(paced) >= MIN_SESSIONS else None
    if pace_stats is not None:
        found.extend(a for a in (_pace_anomaly(s, pace_stats) for s in paced) if a)

    distance_stats = metric_stats([s.distance for s in sessions])
    found.extend(a for a in (_distance_anomaly(s, distance_stats) for s in sessions) if a)

    scored = [s for s in sessions if s.has_valid_swolf]
    swolf_stats = metric_stats([s.swolf for s in scored]) if len(scored) >= MIN_SESSIONS else None
    if swolf_stats is not None:
        found.extend(a for a in (_swolf_anomaly(s, swolf_stats) for s in scored) if a)

    found.sort(key=lambda a: (a.severity != "extreme", -abs(a.deviation_from_mean)))
    unique: List[Anomaly] = []
    seen = set()
    for anomaly in found:
        if anomaly.session_id not in seen:
            unique.append(anomaly)
            seen.add(anomaly.session_id)

    return AnomalyReport(
        has_sufficient_data=True,
        anomalies=tuple(unique),
        pace_stats=pace_stats,
        distance_stats=distance_stats,
        swolf_stats=swolf_stats,
    )


def detect_sudden_changes(sessions: Iterable[Session]) -> List[SuddenChange]:
    """
    Large pace or distance changes between consecutive sessions.

    Pace changes beyond 15% and distance changes beyond 30% are reported,
    in chronological order. Fewer than 3 sessions yields no changes.
    """
    ordered = oldest_first(sessions)
    if len(ordered) < MIN_SESSIONS_FOR_CHANGES:
        return []

    changes = []
    for previous, current in zip(ordered, ordered[1:]):
        if previous.has_valid_pace and current.has_valid_pace:
            pace_change = (current.pace - previous.pace) / previous.pace * 100
            if abs(pace_change) > SUDDEN_PACE_CHANGE_PCT:
                improved = pace_change < 0
                changes.append(
                    SuddenChange(
                        metric="pace",
                        previous_session_id=previous.id,
                        current_session_id=current.id,
                        change_percent=pace_change,
                        direction="improvement" if improved else "decline",
                        message=(
                            f"Pace {'improved' if improved else 'declined'} by "
                            f"{abs(pace_change):.1f}% from previous swim"
                        ),
                    )
                )

        if previous.distance > 0:
            distance_change = (current.distance - previous.distance) / previous.distance * 100
            if abs(distance_change) > SUDDEN_DISTANCE_CHANGE_PCT:
                increased = distance_change > 0
                changes.append(
                    SuddenChange(
                        metric="distance",
                        previous_session_id=previous.id,
                        current_session_id=current.id,
                        change_percent=distance_change,
                        direction="increase" if increased else "decrease",
                        message=(
                            f"Distance {'increased' if increased else 'decreased'} by "
                            f"{abs(distance_change):.1f}% from previous swim"
                        ),
                    )
                )

    return changes
