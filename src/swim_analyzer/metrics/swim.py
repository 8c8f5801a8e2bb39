"""Swimming metric helpers (lap pace, variability, stroke efficiency, formatting)."""

import math
import statistics
from typing import Iterable, List, Optional, Sequence

from ..models.analysis import DPSGrade, DPSStats
from ..models.session import Lap, Session
from ..utils.dates import newest_first

# Lower bounds of each distance-per-stroke grade, best first
DPS_GRADES = (
    (2.5, DPSGrade(grade="Excellent", color="green", description="Outstanding stroke efficiency!")),
    (2.0, DPSGrade(grade="Good", color="blue", description="Solid stroke efficiency")),
    (1.5, DPSGrade(grade="Fair", color="yellow", description="Room for improvement")),
)
DPS_NEEDS_WORK = DPSGrade(
    grade="Needs Work",
    color="orange",
    description="Focus on technique to improve efficiency",
)


def calculate_pace_per_100m(distance_m: float, duration_min: float) -> Optional[float]:
    """
    Calculate swim pace in minutes per 100m.

    Typical swim paces:
    - Elite: 0:55-1:05 /100m
    - Competitive: 1:15-1:30 /100m
    - Recreational: 1:40-2:00 /100m
    - Beginner: 2:10-3:00 /100m

    Args:
        distance_m: Distance swum in meters
        duration_min: Duration in minutes

    Returns:
        Pace in minutes per 100m, or None when either input is missing
    """
    if distance_m <= 0 or duration_min <= 0:
        return None
    return duration_min / (distance_m / 100)


def lap_pace(lap: Lap) -> Optional[float]:
    """Pace of a lap: the recorded pace if present, else derived from duration and distance."""
    if lap.pace > 0:
        return lap.pace
    return calculate_pace_per_100m(lap.distance, lap.duration)


def usable_lap_paces(laps: Iterable[Lap]) -> List[float]:
    """Paces of the laps a pace can be derived for, in lap order."""
    paces = []
    for lap in laps:
        pace = lap_pace(lap)
        if pace is not None:
            paces.append(pace)
    return paces


def coefficient_of_variation(values: Sequence[float]) -> float:
    """
    Coefficient of variation as a percentage (population std-dev / mean * 100).

    Returns 0.0 for an empty series or a zero mean.
    """
    if not values:
        return 0.0
    mean = statistics.fmean(values)
    if mean == 0:
        return 0.0
    return statistics.pstdev(values) / mean * 100


def calculate_stroke_efficiency(distance_m: float, strokes: int) -> float:
    """
    Calculate Distance Per Stroke (DPS) - a key stroke efficiency metric.

    DPS represents how far a swimmer travels with each stroke. Higher values
    indicate more efficient technique.

    Typical DPS values (freestyle, 25m pool):
    - Elite swimmers: 2.0-2.5 m/stroke
    - Competitive: 1.6-2.0 m/stroke
    - Recreational: 1.2-1.6 m/stroke
    - Beginner: 0.8-1.2 m/stroke

    Args:
        distance_m: Total distance swum in meters
        strokes: Total number of strokes taken

    Returns:
        Distance per stroke in meters, 0.0 when no strokes were recorded
    """
    if distance_m <= 0 or strokes <= 0:
        return 0.0
    return round(distance_m / strokes, 2)


def session_distance_per_stroke(session: Session) -> float:
    return calculate_stroke_efficiency(session.distance, session.strokes)


def _has_strokes(session: Session) -> bool:
    return session.strokes > 0 and session.distance > 0


def _raw_dps(session: Session) -> float:
    return session.distance / session.strokes


def average_distance_per_stroke(sessions: Iterable[Session]) -> float:
    """Mean DPS over sessions with strokes and distance recorded, 0.0 when there are none."""
    values = [_raw_dps(s) for s in sessions if _has_strokes(s)]
    if not values:
        return 0.0
    return statistics.fmean(values)


def dps_grade(dps: float) -> DPSGrade:
    """
    Grade a distance-per-stroke value.

    Excellent from 2.5 m, Good from 2.0 m, Fair from 1.5 m, else Needs Work.
    """
    for threshold, grade in DPS_GRADES:
        if dps >= threshold:
            return grade
    return DPS_NEEDS_WORK


def dps_trend(recent: Iterable[Session], baseline: Iterable[Session]) -> float:
    """Percent change of the recent average DPS against the baseline average, 0.0 without a baseline."""
    baseline_avg = average_distance_per_stroke(baseline)
    if baseline_avg == 0:
        return 0.0
    return (average_distance_per_stroke(recent) - baseline_avg) / baseline_avg * 100


def best_dps_session(sessions: Iterable[Session]) -> Optional[Session]:
    """Session with the highest DPS; the earliest in the supplied order wins ties."""
    best = None
    for session in sessions:
        if not _has_strokes(session):
            continue
        if best is None or _raw_dps(session) > _raw_dps(best):
            best = session
    return best


def dps_stats(sessions: Iterable[Session]) -> DPSStats:
    """
    Average, range and trend of DPS.

    Sessions with strokes recorded are ordered newest first and split at
    the midpoint; the trend compares the newer half with the older half
    and is 0.0 when either half is empty.

    Args:
        sessions: Sessions in any order

    Returns:
        DPSStats, all zero when no session has strokes recorded
    """
    valid = newest_first(s for s in sessions if _has_strokes(s))
    if not valid:
        return DPSStats()

    values = [_raw_dps(s) for s in valid]
    midpoint = len(valid) // 2
    newer, older = valid[:midpoint], valid[midpoint:]
    return DPSStats(
        average=statistics.fmean(values),
        min=min(values),
        max=max(values),
        trend=dps_trend(newer, older) if newer else 0.0,
        count=len(valid),
    )


def format_pace(pace_min: float) -> str:
    """
    Format swim pace (min/100m) to mm:ss format.

    Args:
        pace_min: Pace in minutes per 100m

    Returns:
        Formatted string like "1:45/100m", or "--" for an invalid pace
    """
    if pace_min is None or pace_min <= 0 or math.isinf(pace_min):
        return "--"
    total_sec = int(round(pace_min * 60))
    minutes = total_sec // 60
    seconds = total_sec % 60
    return f"{minutes}:{seconds:02d}/100m"


def format_distance(distance_m: float) -> str:
    """Format meters as "800m" below 1 km, else "1.5km"."""
    if distance_m >= 1000:
        km = round(distance_m / 1000, 1)
        return f"{km:g}km"
    return f"{int(round(distance_m))}m"
