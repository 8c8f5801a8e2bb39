"""
Lap-level pacing and fatigue analysis.

Laps without a derivable pace are skipped rather than treated as errors.
"""

import logging
import statistics
from typing import Sequence

from ..metrics.swim import coefficient_of_variation, usable_lap_paces
from ..models.analysis import FatigueResult, PacingResult, PacingStrategy
from ..models.session import Lap

logger = logging.getLogger(__name__)

MIN_LAPS_FOR_PACING = 3
MIN_LAPS_FOR_FATIGUE = 5

ERRATIC_CV_PCT = 15
SPLIT_THRESHOLD_PCT = 3
# A final lap slower than baseline by more than this factor is fading
FADING_FACTOR = 1.05


def detect_pacing_strategy(laps: Sequence[Lap]) -> PacingResult:
    """
    Classify how a session was paced from its laps.

    The first and last thirds of the usable laps are compared. Rules,
    first match wins:
    - CV > 15%: erratic
    - pace change < -3%: negative split (finishing faster)
    - pace change > 3%: positive split (finishing slower)
    - otherwise: even

    Args:
        laps: Laps in swim order

    Returns:
        PacingResult; strategy is unknown with fewer than 3 usable laps
    """
    paces = usable_lap_paces(laps or ())
    if len(paces) < MIN_LAPS_FOR_PACING:
        logger.debug("Pacing: %d usable laps, need %d", len(paces), MIN_LAPS_FOR_PACING)
        return PacingResult(lap_count=len(paces))

    cv = coefficient_of_variation(paces)

    third = len(paces) // 3
    first_avg = statistics.fmean(paces[:third])
    last_avg = statistics.fmean(paces[-third:])
    pace_change = (last_avg - first_avg) / first_avg * 100

    if cv > ERRATIC_CV_PCT:
        strategy = PacingStrategy.ERRATIC
    elif pace_change < -SPLIT_THRESHOLD_PCT:
        strategy = PacingStrategy.NEGATIVE
    elif pace_change > SPLIT_THRESHOLD_PCT:
        strategy = PacingStrategy.POSITIVE
    else:
        strategy = PacingStrategy.EVEN

    consistency = max(0.0, min(100.0, 100 - cv * 5))

    return PacingResult(
        strategy=strategy,
        consistency=round(consistency),
        variation=round(cv),
        pace_change=round(pace_change),
        avg_pace=statistics.fmean(paces),
        lap_count=len(paces),
    )


def _describe_fatigue(fatigue_index: float) -> str:
    if fatigue_index < 2:
        return "Excellent endurance - minimal fatigue"
    elif fatigue_index < 5:
        return "Good pacing - slight slowdown at end"
    elif fatigue_index < 10:
        return "Moderate fatigue - consider pacing strategy"
    else:
        return "Significant fatigue - focus on endurance"


def calculate_fatigue_index(laps: Sequence[Lap]) -> FatigueResult:
    """
    Measure how much a swimmer slowed down over a session.

    Baseline is the mean of laps 2-4 (the first lap is treated as warmup);
    the final segment is the last third of usable laps.

    Args:
        laps: Laps in swim order

    Returns:
        FatigueResult; sufficient_data is False with fewer than 5 usable laps
    """
    paces = usable_lap_paces(laps or ())
    if len(paces) < MIN_LAPS_FOR_FATIGUE:
        logger.debug("Fatigue: %d usable laps, need %d", len(paces), MIN_LAPS_FOR_FATIGUE)
        return FatigueResult()

    baseline = statistics.fmean(paces[1:4])
    final_laps = paces[-(len(paces) // 3):]
    final_avg = statistics.fmean(final_laps)

    fatigue_index = (final_avg - baseline) / baseline * 100
    fading = sum(1 for pace in final_laps if pace > baseline * FADING_FACTOR)

    return FatigueResult(
        fatigue_index=round(fatigue_index),
        fading_lap_count=fading,
        description=_describe_fatigue(fatigue_index),
        baseline_pace=baseline,
        final_pace=final_avg,
        sufficient_data=True,
    )
