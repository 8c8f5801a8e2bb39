"""Swim metric and trend primitives."""

from .trends import (
    trend,
    pace_trend,
    swolf_trend,
    classify_change,
    trend_result,
    percentile,
)
from .swim import (
    calculate_pace_per_100m,
    lap_pace,
    usable_lap_paces,
    coefficient_of_variation,
    calculate_stroke_efficiency,
    session_distance_per_stroke,
    average_distance_per_stroke,
    dps_grade,
    dps_trend,
    best_dps_session,
    dps_stats,
    format_pace,
    format_distance,
)

__all__ = [
    # Trends
    "trend",
    "pace_trend",
    "swolf_trend",
    "classify_change",
    "trend_result",
    "percentile",
    # Swim
    "calculate_pace_per_100m",
    "lap_pace",
    "usable_lap_paces",
    "coefficient_of_variation",
    "calculate_stroke_efficiency",
    "session_distance_per_stroke",
    "average_distance_per_stroke",
    "dps_grade",
    "dps_trend",
    "best_dps_session",
    "dps_stats",
    "format_pace",
    "format_distance",
]
