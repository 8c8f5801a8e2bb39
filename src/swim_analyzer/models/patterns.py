"""Pattern recognition models for day-of-week and time-of-day performance."""

from datetime import date
from enum import Enum
from typing import Optional, Tuple

from .base import ValueModel


class DayOfWeek(str, Enum):
    """Days of the week."""
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class TimeOfDay(str, Enum):
    """Time of day buckets for swim analysis."""
    MORNING = "morning"  # before 12:00
    AFTERNOON = "afternoon"  # 12:00-17:00
    EVENING = "evening"  # 17:00 onwards


def get_day_of_week(d: date) -> DayOfWeek:
    """Get the day of week for a date."""
    return list(DayOfWeek)[d.weekday()]


def get_time_of_day(hour: int) -> TimeOfDay:
    """Get the time-of-day bucket for an hour (0-23)."""
    if hour < 12:
        return TimeOfDay.MORNING
    elif hour < 17:
        return TimeOfDay.AFTERNOON
    else:
        return TimeOfDay.EVENING


class DayAverage(ValueModel):
    """Average pace for sessions on one day of the week."""
    day: DayOfWeek
    day_name: str
    avg_pace: float
    count: int


class TimeAverage(ValueModel):
    """Average pace for sessions in one time-of-day bucket."""
    time_of_day: TimeOfDay
    avg_pace: float
    count: int


class PerformancePatterns(ValueModel):
    """Day/time performance pattern analysis.

    Every group appears in the averages; only groups with enough sessions
    compete for best day and best time.
    """
    has_patterns: bool = False
    message: Optional[str] = None
    best_day: Optional[DayAverage] = None
    best_time: Optional[TimeAverage] = None
    day_averages: Tuple[DayAverage, ...] = ()
    time_averages: Tuple[TimeAverage, ...] = ()


class PerformanceStreakType(str, Enum):
    """Pace direction shared by a run of consecutive swims."""
    IMPROVING = "improving"
    DECLINING = "declining"
    CONSISTENT = "consistent"


class PerformanceStreak(ValueModel):
    """The run of same-direction pace changes ending at the latest swim.

    streak_length counts swims, one more than the number of changes.
    """
    has_streak: bool = False
    streak_type: Optional[PerformanceStreakType] = None
    streak_length: int = 0
    message: Optional[str] = None


class MonthStat(ValueModel):
    """Totals for one calendar month, keyed "YYYY-MM"."""
    month: str
    count: int
    total_distance: float
    avg_pace: float  # 0 when no session has a valid pace


class MonthlyPatterns(ValueModel):
    """Month-by-month totals with the fastest and the busiest month."""
    has_sufficient_data: bool = False
    month_stats: Tuple[MonthStat, ...] = ()
    best_month: Optional[MonthStat] = None
    most_active_month: Optional[MonthStat] = None
