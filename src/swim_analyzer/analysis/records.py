"""
Personal records, next milestones, achievement badges and session ranking.

Sessions with an invalid (0) value for a metric never count toward that
metric's record or ranking.
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Callable, Iterable, List, Optional

from ..metrics.swim import format_pace
from ..metrics.trends import percentile
from ..models.achievements import Badge, BadgeCategory
from ..models.records import (
    Milestone,
    MilestoneType,
    PersonalRecords,
    RecordFlags,
    SessionRanking,
)
from ..models.session import Session
from ..utils.dates import resolve_now, sessions_between
from .streaks import calculate_streaks

logger = logging.getLogger(__name__)

PACE_STEP_SEC = 5
SWOLF_STEP = 5
DISTANCE_STEP_M = 500
TOTAL_DISTANCE_STEP_M = 10000
MAX_MILESTONES = 3
TOP_RECORD_RANK = 3


def find_records(sessions: Iterable[Session]) -> PersonalRecords:
    """
    Best-ever session per metric.

    Ties keep the earliest session in the supplied order.
    """
    sessions = list(sessions)
    paced = [s for s in sessions if s.has_valid_pace]
    measured = [s for s in sessions if s.distance > 0]
    scored = [s for s in sessions if s.has_valid_swolf]
    return PersonalRecords(
        fastest_pace=min(paced, key=lambda s: s.pace) if paced else None,
        longest_distance=max(measured, key=lambda s: s.distance) if measured else None,
        best_swolf=min(scored, key=lambda s: s.swolf) if scored else None,
    )


def _clamp(progress: float) -> float:
    return max(0.0, min(100.0, progress))


def _next_lower_step(current: float, step: int) -> int:
    """Largest multiple of step strictly below current."""
    return (math.ceil(round(current, 6) / step) - 1) * step


def _next_higher_step(current: float, step: int) -> int:
    """Smallest multiple of step strictly above current."""
    return (int(round(current, 6) // step) + 1) * step


def _pace_milestone(record: Session) -> Optional[Milestone]:
    current_sec = record.pace * 60
    target_sec = _next_lower_step(current_sec, PACE_STEP_SEC)
    if target_sec <= 0:
        return None
    gap = current_sec - target_sec
    return Milestone(
        type=MilestoneType.PACE,
        title="Faster Pace",
        current=record.pace,
        target=target_sec / 60,
        unit="min/100m",
        progress=_clamp((PACE_STEP_SEC - gap) / PACE_STEP_SEC * 100),
        display_current=format_pace(record.pace),
        display_target=format_pace(target_sec / 60),
        message=f"You're {round(gap)} seconds away from your next pace milestone!",
    )


def _distance_milestone(record: Session) -> Milestone:
    target = _next_higher_step(record.distance, DISTANCE_STEP_M)
    return Milestone(
        type=MilestoneType.DISTANCE,
        title="Longer Swim",
        current=record.distance,
        target=target,
        unit="m",
        progress=_clamp(record.distance / target * 100),
        display_current=f"{record.distance / 1000:.2f} km",
        display_target=f"{target / 1000:.1f} km",
        message=f"Just {round(target - record.distance)}m more to hit {target / 1000:g}km!",
    )


def _swolf_milestone(record: Session) -> Optional[Milestone]:
    target = _next_lower_step(record.swolf, SWOLF_STEP)
    if target <= 0:
        return None
    gap = record.swolf - target
    return Milestone(
        type=MilestoneType.SWOLF,
        title="Better Efficiency",
        current=record.swolf,
        target=target,
        unit="SWOLF",
        progress=_clamp((SWOLF_STEP - gap) / SWOLF_STEP * 100),
        display_current=f"{record.swolf:g}",
        display_target=str(target),
        message=f"{gap:g} points away from SWOLF {target}!",
    )


def _total_milestone(total_distance: float) -> Milestone:
    target = _next_higher_step(total_distance, TOTAL_DISTANCE_STEP_M)
    return Milestone(
        type=MilestoneType.TOTAL,
        title="Total Distance",
        current=total_distance,
        target=target,
        unit="m total",
        progress=_clamp(total_distance / target * 100),
        display_current=f"{total_distance / 1000:.1f} km",
        display_target=f"{target // 1000} km",
        message=f"{round(target - total_distance)}m until you hit {target // 1000}km total!",
    )


def calculate_next_milestones(
    records: PersonalRecords,
    sessions: Iterable[Session],
) -> List[Milestone]:
    """
    Next round-number targets beyond the current records.

    Pace moves in 5 s/100m steps, single-swim distance in 500 m steps,
    SWOLF in 5-point steps and cumulative distance in 10 km steps.

    Args:
        records: Output of find_records
        sessions: All sessions, for the cumulative distance total

    Returns:
        Up to 3 milestones, closest to completion first
    """
    sessions = list(sessions)
    if not sessions:
        logger.debug("Milestones: no sessions")
        return []

    candidates: List[Optional[Milestone]] = []
    if records.fastest_pace is not None:
        candidates.append(_pace_milestone(records.fastest_pace))
    if records.longest_distance is not None:
        candidates.append(_distance_milestone(records.longest_distance))
    if records.best_swolf is not None:
        candidates.append(_swolf_milestone(records.best_swolf))
    candidates.append(_total_milestone(sum(s.distance for s in sessions)))

    milestones = [m for m in candidates if m is not None]
    milestones.sort(key=lambda m: m.progress, reverse=True)
    return milestones[:MAX_MILESTONES]


def _rank(session: Session, ordered: List[Session]) -> int:
    for index, candidate in enumerate(ordered):
        if candidate.id == session.id:
            return index + 1
    return 0


def _ranked(
    sessions: List[Session],
    valid: Callable[[Session], bool],
    key: Callable[[Session], float],
    reverse: bool = False,
) -> List[Session]:
    return sorted((s for s in sessions if valid(s)), key=key, reverse=reverse)


def rank_session(
    session: Session,
    sessions: Iterable[Session],
    now: Optional[datetime] = None,
    month_days: int = 30,
) -> Optional[SessionRanking]:
    """
    Where a session ranks against the full history.

    Percentiles are oriented so that higher is better for every metric;
    the overall percentile is their mean. The month rank is the pace rank
    among sessions from the last `month_days` days.

    Returns:
        SessionRanking, or None when there is no history
    """
    sessions = list(sessions)
    if not sessions:
        return None

    by_pace = _ranked(sessions, lambda s: s.has_valid_pace, key=lambda s: s.pace)
    by_distance = _ranked(sessions, lambda s: s.distance > 0, key=lambda s: s.distance, reverse=True)
    by_swolf = _ranked(sessions, lambda s: s.has_valid_swolf, key=lambda s: s.swolf)

    pace_rank = _rank(session, by_pace)
    distance_rank = _rank(session, by_distance)
    swolf_rank = _rank(session, by_swolf)

    pace_percentile = None
    if session.has_valid_pace:
        raw = percentile(session.pace, [s.pace for s in by_pace])
        pace_percentile = None if raw is None else 100 - raw
    distance_percentile = None
    if session.distance > 0:
        distance_percentile = percentile(session.distance, [s.distance for s in by_distance])
    swolf_percentile = None
    if session.has_valid_swolf:
        raw = percentile(session.swolf, [s.swolf for s in by_swolf])
        swolf_percentile = None if raw is None else 100 - raw

    available = [p for p in (pace_percentile, distance_percentile, swolf_percentile) if p is not None]
    overall = round(sum(available) / len(available)) if available else 0

    now = resolve_now(now)
    recent = sessions_between(sessions, now - timedelta(days=month_days), now)
    month_rank = _rank(session, _ranked(recent, lambda s: s.has_valid_pace, key=lambda s: s.pace))

    return SessionRanking(
        overall_percentile=overall,
        pace_rank=pace_rank,
        distance_rank=distance_rank,
        swolf_rank=swolf_rank,
        month_rank=month_rank,
        month_total=len(recent),
        total_sessions=len(sessions),
        is_record=RecordFlags(
            pace=0 < pace_rank <= TOP_RECORD_RANK,
            distance=0 < distance_rank <= TOP_RECORD_RANK,
            swolf=0 < swolf_rank <= TOP_RECORD_RANK,
        ),
        pace_percentile=pace_percentile,
        distance_percentile=distance_percentile,
        swolf_percentile=swolf_percentile,
    )


def _percent(value: float, target: float) -> float:
    return _clamp(value / target * 100)


def check_achievement_badges(
    sessions: Iterable[Session],
    records: Optional[PersonalRecords] = None,
    now: Optional[datetime] = None,
) -> List[Badge]:
    """
    Every achievement badge with its earned status and progress.

    Args:
        sessions: All sessions
        records: Output of find_records (computed when None)
        now: Reference time for the weekly streak badges

    Returns:
        Badges in display order: distance, cumulative, consistency, speed,
        efficiency, special
    """
    sessions = list(sessions)
    if records is None:
        records = find_records(sessions)
    total_distance = sum(s.distance for s in sessions)
    total_swims = len(sessions)
    streak = calculate_streaks(sessions, now=now)
    best_streak = max(streak.current_streak_weeks, streak.longest_streak_weeks)
    longest = records.longest_distance.distance if records.longest_distance else 0.0
    fastest = records.fastest_pace.pace if records.fastest_pace else 0.0
    best_swolf = records.best_swolf.swolf if records.best_swolf else 0.0
    early = any(s.timestamp.hour < 6 for s in sessions)
    late = any(s.timestamp.hour >= 22 for s in sessions)
    weekend_swims = sum(1 for s in sessions if s.timestamp.weekday() >= 5)

    return [
        Badge(
            id="first-km",
            category=BadgeCategory.DISTANCE,
            name="First Kilometer",
            description="Swim your first 1km",
            icon="🏊",
            earned=longest >= 1000,
            progress=_percent(longest, 1000),
        ),
        Badge(
            id="marathon-swimmer",
            category=BadgeCategory.DISTANCE,
            name="Marathon Swimmer",
            description="Complete a 5km swim",
            icon="🏅",
            earned=longest >= 5000,
            progress=_percent(longest, 5000),
        ),
        Badge(
            id="century",
            category=BadgeCategory.CUMULATIVE,
            name="Century Club",
            description="Swim 100km total",
            icon="💯",
            earned=total_distance >= 100000,
            progress=_percent(total_distance, 100000),
        ),
        Badge(
            id="getting-started",
            category=BadgeCategory.CONSISTENCY,
            name="Getting Started",
            description="Complete 10 swims",
            icon="🎯",
            earned=total_swims >= 10,
            progress=_percent(total_swims, 10),
        ),
        Badge(
            id="dedicated",
            category=BadgeCategory.CONSISTENCY,
            name="Dedicated Swimmer",
            description="Complete 50 swims",
            icon="⭐",
            earned=total_swims >= 50,
            progress=_percent(total_swims, 50),
        ),
        Badge(
            id="streak-2",
            category=BadgeCategory.CONSISTENCY,
            name="On a Roll",
            description="Maintain a 2-week streak",
            icon="🔥",
            earned=best_streak >= 2,
            progress=_percent(best_streak, 2),
        ),
        Badge(
            id="streak-8",
            category=BadgeCategory.CONSISTENCY,
            name="Unstoppable",
            description="Maintain an 8-week streak",
            icon="🔥🔥",
            earned=best_streak >= 8,
            progress=_percent(best_streak, 8),
        ),
        # Speed and efficiency progress runs from 2:00/100m to 1:30/100m and SWOLF 45 to 35
        Badge(
            id="speedster",
            category=BadgeCategory.SPEED,
            name="Speedster",
            description="Swim under 2:00/100m pace",
            icon="⚡",
            earned=0 < fastest < 2.0,
            progress=_clamp((1 - (fastest - 1.5) / 0.5) * 100) if fastest > 0 else 0.0,
        ),
        Badge(
            id="efficiency",
            category=BadgeCategory.EFFICIENCY,
            name="Efficiency Expert",
            description="Achieve SWOLF under 40",
            icon="✨",
            earned=0 < best_swolf < 40,
            progress=_clamp((1 - (best_swolf - 35) / 10) * 100) if best_swolf > 0 else 0.0,
        ),
        Badge(
            id="early-bird",
            category=BadgeCategory.SPECIAL,
            name="Early Bird",
            description="Swim before 6 AM",
            icon="🌅",
            earned=early,
            progress=100.0 if early else 0.0,
        ),
        Badge(
            id="night-owl",
            category=BadgeCategory.SPECIAL,
            name="Night Owl",
            description="Swim after 10 PM",
            icon="🦉",
            earned=late,
            progress=100.0 if late else 0.0,
        ),
        Badge(
            id="weekend-warrior",
            category=BadgeCategory.SPECIAL,
            name="Weekend Warrior",
            description="Complete 10 swims on weekends",
            icon="🏖️",
            earned=weekend_swims >= 10,
            progress=_percent(weekend_swims, 10),
        ),
    ]
