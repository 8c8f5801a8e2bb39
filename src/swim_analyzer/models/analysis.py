"""Derived analytics models.

Every structure here is recomputed from the session collection on each
call; none is persisted or mutated in place.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional, Tuple

from pydantic import Field

from ..exceptions import ErrorCode
from .base import ValueModel
from .patterns import PerformancePatterns
from .recommendations import Recommendation
from .session import Session


class TrendDirection(str, Enum):
    """Direction of change, oriented so that UP is always an improvement."""
    UP = "up"
    DOWN = "down"
    STEADY = "steady"


class TrendStatus(str, Enum):
    """Classification of a fitted trend line."""
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


class MomentumTrend(str, Enum):
    """Momentum classification."""
    UP = "up"
    DOWN = "down"
    STEADY = "steady"
    INSUFFICIENT_DATA = "insufficient-data"


class ProgressStatus(str, Enum):
    """Outcome of a progress analysis."""
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"
    NO_DATA = "no-data"
    INSUFFICIENT_DATA = "insufficient-data"


class PacingStrategy(str, Enum):
    """Lap-level pacing strategies."""
    EVEN = "even"
    NEGATIVE = "negative"  # finishing faster
    POSITIVE = "positive"  # finishing slower
    ERRATIC = "erratic"
    UNKNOWN = "unknown"


class TimeWindow(ValueModel):
    """A [start, end] time range derived from "now" and a day offset."""
    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


class TrendResult(ValueModel):
    """Percentage change plus direction, with lower-is-better metrics inverted."""
    percentage_change: int = 0
    direction: TrendDirection = TrendDirection.STEADY


# ==============================================================================
# Temporal aggregation
# ==============================================================================

class SessionBucket(ValueModel):
    """Sessions grouped into a calendar bucket.

    Averages for pace and SWOLF only include sessions with a valid (>0)
    value; 0 means no valid value was present.
    """
    sessions: Tuple[Session, ...] = ()
    count: int = 0
    total_distance: float = 0.0
    total_duration: float = 0.0
    avg_pace: float = 0.0
    avg_swolf: float = 0.0
    avg_distance: float = 0.0


class DayBucket(SessionBucket):
    day: date


class WeekBucket(SessionBucket):
    week_start: date


class MonthBucket(SessionBucket):
    month_key: str
    year: int
    month: int
    best_pace: Optional[Session] = None
    longest_session: Optional[Session] = None


class RollingValue(ValueModel):
    """A session value with its trailing date-window average."""
    session_id: str
    timestamp: datetime
    value: float
    rolling_average: float


class RegressionResult(ValueModel):
    """Ordinary least squares fit over an ordered series."""
    slope: float = 0.0
    intercept: float = 0.0
    r_squared: float = 0.0
    trend: TrendStatus = TrendStatus.STABLE
    percent_change: int = 0
    sample_size: int = 0


# ==============================================================================
# Streaks and momentum
# ==============================================================================

class Streak(ValueModel):
    """Consecutive-week activity streaks. Weeks are keyed by their Monday."""
    current_streak_weeks: int = 0
    longest_streak_weeks: int = 0
    sorted_week_keys: Tuple[date, ...] = ()


class MonthlyStreak(ValueModel):
    """Consecutive calendar months that each contain a session."""
    current_streak_months: int = 0
    longest_streak_months: int = 0


class MetricMomentum(ValueModel):
    """Recent vs comparison value for one momentum component."""
    recent: float
    comparison: float
    change: int
    trend: TrendDirection


class MomentumBreakdown(ValueModel):
    frequency: MetricMomentum
    volume: MetricMomentum
    pace: MetricMomentum


class MomentumScore(ValueModel):
    """Weighted frequency/volume/pace change between two time windows."""
    trend: MomentumTrend = MomentumTrend.INSUFFICIENT_DATA
    percentage: int = 0
    message: str = "Keep swimming to build momentum!"
    breakdown: Optional[MomentumBreakdown] = None


# ==============================================================================
# Pacing and fatigue
# ==============================================================================

class PacingResult(ValueModel):
    """Pacing strategy of a session from its laps."""
    strategy: PacingStrategy = PacingStrategy.UNKNOWN
    consistency: int = 0
    variation: int = 0
    pace_change: int = 0
    avg_pace: Optional[float] = None
    lap_count: int = 0


class FatigueResult(ValueModel):
    """Within-session slowdown measured against an early-lap baseline."""
    fatigue_index: int = 0
    fading_lap_count: int = 0
    description: str = "Insufficient data"
    baseline_pace: Optional[float] = None
    final_pace: Optional[float] = None
    sufficient_data: bool = False


# ==============================================================================
# Progress, compare mode and weekly stats
# ==============================================================================

class PeriodAverages(ValueModel):
    """Mean pace, SWOLF and distance over valid values (0 = none valid)."""
    pace: float = 0.0
    swolf: float = 0.0
    distance: float = 0.0


class ProgressTrends(ValueModel):
    """Improvement-oriented percentage trends."""
    pace: int = 0
    swolf: int = 0
    distance: int = 0


class ProgressAnalysis(ValueModel):
    """Newer half vs older half of a trailing window."""
    status: ProgressStatus
    message: str
    improving: bool = False
    total_sessions: int = 0
    total_distance: float = 0.0
    averages: Optional[PeriodAverages] = None
    trends: Optional[ProgressTrends] = None
    weighted_score: Optional[int] = None


class WindowComparison(ValueModel):
    """Current window vs the equally long window before it."""
    current_sessions: Tuple[Session, ...] = ()
    previous_sessions: Tuple[Session, ...] = ()
    current_averages: PeriodAverages = Field(default_factory=PeriodAverages)
    previous_averages: PeriodAverages = Field(default_factory=PeriodAverages)
    pace: TrendResult = Field(default_factory=TrendResult)
    distance: TrendResult = Field(default_factory=TrendResult)
    swolf: TrendResult = Field(default_factory=TrendResult)
    count_change: int = 0
    count_change_pct: int = 0


class PeriodStats(ValueModel):
    """Statistics for the sessions inside one time window."""
    window: TimeWindow
    count: int = 0
    total_distance: float = 0.0
    avg_distance: float = 0.0
    avg_pace: float = 0.0
    avg_swolf: float = 0.0
    total_duration: float = 0.0
    avg_duration: float = 0.0
    days_active: int = 0


class WeeklyMetricTrend(ValueModel):
    change: int = 0
    trend: TrendDirection = TrendDirection.STEADY
    current: float = 0.0
    previous: float = 0.0


class WeeklyTrend(ValueModel):
    """Week-over-week change for the headline metrics."""
    count: WeeklyMetricTrend = Field(default_factory=WeeklyMetricTrend)
    distance: WeeklyMetricTrend = Field(default_factory=WeeklyMetricTrend)
    pace: WeeklyMetricTrend = Field(default_factory=WeeklyMetricTrend)
    days_active: WeeklyMetricTrend = Field(default_factory=WeeklyMetricTrend)


class GoalProgress(ValueModel):
    """Distance swum toward a weekly or monthly goal."""
    current: float = 0.0
    goal: float
    percentage: float = Field(default=0.0, ge=0.0, le=100.0)
    remaining: float = 0.0
    is_goal_met: bool = False


# ==============================================================================
# Stroke efficiency
# ==============================================================================

class DPSGrade(ValueModel):
    """Label for a distance-per-stroke value."""
    grade: str
    color: str
    description: str


class DPSStats(ValueModel):
    """Distance-per-stroke statistics over sessions with strokes recorded.

    trend is the percent change of the newer half against the older half.
    """
    average: float = 0.0
    min: float = 0.0
    max: float = 0.0
    trend: float = 0.0
    count: int = 0


# ==============================================================================
# Anomalies
# ==============================================================================

class MetricStats(ValueModel):
    """Population mean/std-dev with 2-sigma and 3-sigma thresholds."""
    mean: float
    std_dev: float
    upper_threshold: float
    lower_threshold: float
    extreme_upper_threshold: float
    extreme_lower_threshold: float


class Anomaly(ValueModel):
    session_id: str
    metric: str
    severity: str  # 'moderate' or 'extreme'
    direction: str  # 'positive' (better than usual) or 'negative'
    message: str
    deviation_from_mean: float


class AnomalyReport(ValueModel):
    has_sufficient_data: bool = False
    anomalies: Tuple[Anomaly, ...] = ()
    pace_stats: Optional[MetricStats] = None
    distance_stats: Optional[MetricStats] = None
    swolf_stats: Optional[MetricStats] = None


class SuddenChange(ValueModel):
    """A large change between two consecutive sessions."""
    metric: str
    previous_session_id: str
    current_session_id: str
    change_percent: float
    direction: str
    message: str


# ==============================================================================
# Deep analysis
# ==============================================================================

class RecentComparison(ValueModel):
    avg_pace: float
    pace_diff: float
    is_better: bool


class PersonalBestComparison(ValueModel):
    pb_pace: float
    pb_session_id: str
    pace_diff: float
    is_pb: bool


class SameDistanceComparison(ValueModel):
    best_pace: float
    session_id: str
    pace_diff: float
    is_best: bool
    timestamp: datetime


class ComparativeAnalysis(ValueModel):
    """Target session against recent average, personal best and same-distance history.

    Each sub-field is None when its prerequisite data is missing.
    """
    vs_recent: Optional[RecentComparison] = None
    vs_pb: Optional[PersonalBestComparison] = None
    vs_same_distance: Optional[SameDistanceComparison] = None
    percentile: Optional[int] = None
    target_pace: Optional[float] = None


class DeepAnalysis(ValueModel):
    """Insight bundle for one target session."""
    session: Session
    generated_at: datetime
    pacing: Optional[PacingResult] = None
    fatigue: Optional[FatigueResult] = None
    comparative: Optional[ComparativeAnalysis] = None
    patterns: Optional[PerformancePatterns] = None
    streaks: Optional[Streak] = None
    days_since_previous: Optional[int] = None
    recommendations: Tuple[Recommendation, ...] = ()


class AnalysisError(ValueModel):
    """Error marker returned instead of a DeepAnalysis."""
    error: str
    code: ErrorCode = ErrorCode.NO_TARGET_SESSION
