"""
Trend primitives.

Percentage change between a current and a previous value. For metrics
where lower is better (pace, SWOLF) the operands are swapped so that a
positive result always means improvement.
"""

from typing import Optional, Sequence

from ..models.analysis import TrendDirection, TrendResult


def trend(current: float, previous: float) -> int:
    """
    Percentage change from previous to current, rounded to an integer.

    A zero baseline carries no signal and yields 0.
    """
    if previous == 0:
        return 0
    return round(100 * (current - previous) / previous)


def pace_trend(current: float, previous: float) -> int:
    """Percentage improvement in pace (a faster current pace is positive)."""
    if previous == 0:
        return 0
    return round(100 * (previous - current) / previous)


def swolf_trend(current: float, previous: float) -> int:
    """Percentage improvement in SWOLF (a lower current score is positive)."""
    if previous == 0:
        return 0
    return round(100 * (previous - current) / previous)


def classify_change(change: float, threshold: float = 5) -> TrendDirection:
    """Band an improvement-oriented change into up/down/steady."""
    if change > threshold:
        return TrendDirection.UP
    if change < -threshold:
        return TrendDirection.DOWN
    return TrendDirection.STEADY


def trend_result(
    current: float,
    previous: float,
    lower_is_better: bool = False,
    threshold: float = 0,
) -> TrendResult:
    """
    Build a TrendResult for two values.

    Args:
        current: Current value
        previous: Baseline value
        lower_is_better: Invert the sign (pace, SWOLF)
        threshold: Absolute percentage within which the direction is steady

    Returns:
        TrendResult with improvement-oriented percentage and direction
    """
    change = pace_trend(current, previous) if lower_is_better else trend(current, previous)
    return TrendResult(
        percentage_change=change,
        direction=classify_change(change, threshold),
    )


def percentile(value: float, all_values: Sequence[float]) -> Optional[int]:
    """
    Position of value within all_values, 0-100.

    Values are sorted ascending; ties rank at the first (lowest) matching
    position. A value greater than every entry is the 100th percentile.
    Returns None for an empty collection.
    """
    if not all_values:
        return None
    ordered = sorted(all_values)
    for index, candidate in enumerate(ordered):
        if candidate >= value:
            return round(100 * index / len(ordered))
    return 100
