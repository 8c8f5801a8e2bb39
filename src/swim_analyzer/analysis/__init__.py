"""
Analysis module for swim session history.

Provides temporal aggregation, progress tracking, streaks and momentum,
lap pacing and fatigue, performance patterns, records, badges and anomalies.
"""

from .aggregation import (
    valid_mean,
    group_by_day,
    group_by_week,
    group_by_month,
    rolling_average,
    date_rolling_average,
    linear_regression,
    metric_regression,
    consistency_score,
)
from .progress import (
    period_averages,
    analyze_progress,
    compare_windows,
    week_stats,
    current_week_stats,
    weekly_trend,
    weekly_goal_progress,
    monthly_goal_progress,
    generate_coaching_insight,
)
from .streaks import (
    STREAK_MILESTONES,
    calculate_streaks,
    calculate_monthly_streak,
    check_streak_achievements,
    next_streak_milestone,
    calculate_momentum,
    momentum_motivation,
)
from .laps import (
    detect_pacing_strategy,
    calculate_fatigue_index,
)
from .patterns import (
    find_performance_patterns,
    detect_performance_streaks,
    analyze_monthly_patterns,
)
from .records import (
    find_records,
    calculate_next_milestones,
    rank_session,
    check_achievement_badges,
)
from .anomalies import (
    metric_stats,
    detect_anomalies,
    detect_sudden_changes,
)

__all__ = [
    # Aggregation
    "valid_mean",
    "group_by_day",
    "group_by_week",
    "group_by_month",
    "rolling_average",
    "date_rolling_average",
    "linear_regression",
    "metric_regression",
    "consistency_score",
    # Progress
    "period_averages",
    "analyze_progress",
    "compare_windows",
    "week_stats",
    "current_week_stats",
    "weekly_trend",
    "weekly_goal_progress",
    "monthly_goal_progress",
    "generate_coaching_insight",
    # Streaks and momentum
    "STREAK_MILESTONES",
    "calculate_streaks",
    "calculate_monthly_streak",
    "check_streak_achievements",
    "next_streak_milestone",
    "calculate_momentum",
    "momentum_motivation",
    # Laps
    "detect_pacing_strategy",
    "calculate_fatigue_index",
    # Patterns
    "find_performance_patterns",
    "detect_performance_streaks",
    "analyze_monthly_patterns",
    # Records
    "find_records",
    "calculate_next_milestones",
    "rank_session",
    "check_achievement_badges",
    # Anomalies
    "metric_stats",
    "detect_anomalies",
    "detect_sudden_changes",
]
