"""Value records for sessions and derived analytics."""

from .base import ValueModel, to_camel
from .session import Lap, Session
from .patterns import (
    DayOfWeek,
    TimeOfDay,
    get_day_of_week,
    get_time_of_day,
    DayAverage,
    TimeAverage,
    PerformancePatterns,
    PerformanceStreakType,
    PerformanceStreak,
    MonthStat,
    MonthlyPatterns,
)
from .records import (
    MilestoneType,
    PersonalRecords,
    Milestone,
    RecordFlags,
    SessionRanking,
)
from .achievements import (
    BadgeCategory,
    Badge,
    StreakMilestone,
    StreakAchievement,
    NextStreakMilestone,
)
from .recommendations import (
    RecommendationCategory,
    RecommendationPriority,
    Recommendation,
)
from .analysis import (
    TrendDirection,
    TrendStatus,
    MomentumTrend,
    ProgressStatus,
    PacingStrategy,
    TimeWindow,
    TrendResult,
    SessionBucket,
    DayBucket,
    WeekBucket,
    MonthBucket,
    RollingValue,
    RegressionResult,
    Streak,
    MonthlyStreak,
    MetricMomentum,
    MomentumBreakdown,
    MomentumScore,
    PacingResult,
    FatigueResult,
    PeriodAverages,
    ProgressTrends,
    ProgressAnalysis,
    WindowComparison,
    PeriodStats,
    WeeklyMetricTrend,
    WeeklyTrend,
    GoalProgress,
    DPSGrade,
    DPSStats,
    MetricStats,
    Anomaly,
    AnomalyReport,
    SuddenChange,
    RecentComparison,
    PersonalBestComparison,
    SameDistanceComparison,
    ComparativeAnalysis,
    DeepAnalysis,
    AnalysisError,
)

__all__ = [
    "ValueModel",
    "to_camel",
    # Session
    "Lap",
    "Session",
    # Patterns
    "DayOfWeek",
    "TimeOfDay",
    "get_day_of_week",
    "get_time_of_day",
    "DayAverage",
    "TimeAverage",
    "PerformancePatterns",
    "PerformanceStreakType",
    "PerformanceStreak",
    "MonthStat",
    "MonthlyPatterns",
    # Records
    "MilestoneType",
    "PersonalRecords",
    "Milestone",
    "RecordFlags",
    "SessionRanking",
    # Achievements
    "BadgeCategory",
    "Badge",
    "StreakMilestone",
    "StreakAchievement",
    "NextStreakMilestone",
    # Recommendations
    "RecommendationCategory",
    "RecommendationPriority",
    "Recommendation",
    # Analysis
    "TrendDirection",
    "TrendStatus",
    "MomentumTrend",
    "ProgressStatus",
    "PacingStrategy",
    "TimeWindow",
    "TrendResult",
    "SessionBucket",
    "DayBucket",
    "WeekBucket",
    "MonthBucket",
    "RollingValue",
    "RegressionResult",
    "Streak",
    "MonthlyStreak",
    "MetricMomentum",
    "MomentumBreakdown",
    "MomentumScore",
    "PacingResult",
    "FatigueResult",
    "PeriodAverages",
    "ProgressTrends",
    "ProgressAnalysis",
    "WindowComparison",
    "PeriodStats",
    "WeeklyMetricTrend",
    "WeeklyTrend",
    "GoalProgress",
    "DPSGrade",
    "DPSStats",
    "MetricStats",
    "Anomaly",
    "AnomalyReport",
    "SuddenChange",
    "RecentComparison",
    "PersonalBestComparison",
    "SameDistanceComparison",
    "ComparativeAnalysis",
    "DeepAnalysis",
    "AnalysisError",
]
