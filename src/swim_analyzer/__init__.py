"""
Swim Analyzer - performance analytics for swim session logs.

Turns a chronological collection of swim sessions into trends, streaks
and momentum, lap pacing and fatigue, day/time patterns, personal
records, milestones and badges, and rule-based coaching recommendations.
"""

from .analysis import (
    analyze_progress,
    calculate_fatigue_index,
    calculate_momentum,
    calculate_next_milestones,
    calculate_streaks,
    check_achievement_badges,
    compare_windows,
    detect_anomalies,
    detect_pacing_strategy,
    detect_performance_streaks,
    find_performance_patterns,
    find_records,
    generate_coaching_insight,
    group_by_day,
    group_by_month,
    group_by_week,
    linear_regression,
    rank_session,
    rolling_average,
)
from .config import Settings, get_settings
from .exceptions import (
    ConfigurationError,
    ErrorCode,
    SessionDataError,
    SessionNotFoundError,
    SwimAnalyzerError,
)
from .metrics import pace_trend, percentile, swolf_trend, trend
from .models import (
    AnalysisError,
    DeepAnalysis,
    Lap,
    Recommendation,
    Session,
)
from .recommendations import generate_recommendations
from .services import DeepAnalysisService, analyze_session_deep

__version__ = "0.1.0"

__all__ = [
    # Models
    "Session",
    "Lap",
    "DeepAnalysis",
    "AnalysisError",
    "Recommendation",
    # Trend primitives
    "trend",
    "pace_trend",
    "swolf_trend",
    "percentile",
    # Analysis
    "group_by_day",
    "group_by_week",
    "group_by_month",
    "rolling_average",
    "linear_regression",
    "analyze_progress",
    "compare_windows",
    "calculate_streaks",
    "calculate_momentum",
    "detect_pacing_strategy",
    "calculate_fatigue_index",
    "find_performance_patterns",
    "detect_performance_streaks",
    "find_records",
    "calculate_next_milestones",
    "rank_session",
    "check_achievement_badges",
    "generate_coaching_insight",
    "detect_anomalies",
    # Orchestration
    "DeepAnalysisService",
    "analyze_session_deep",
    "generate_recommendations",
    # Configuration and errors
    "Settings",
    "get_settings",
    "ErrorCode",
    "SwimAnalyzerError",
    "SessionDataError",
    "SessionNotFoundError",
    "ConfigurationError",
]
