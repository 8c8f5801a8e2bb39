"""Date and time-window helpers.

All analytics run on naive local datetimes. "now" is resolved once at the
entry point and passed down so results are deterministic for a given clock.
"""

from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Union

from ..models.analysis import TimeWindow
from ..models.session import Session


def resolve_now(now: Optional[datetime] = None) -> datetime:
    """Return now as a naive local datetime, reading the system clock if not given."""
    if now is None:
        return datetime.now()
    return now.replace(tzinfo=None) if now.tzinfo else now


def week_start(value: Union[date, datetime]) -> date:
    """Monday of the week containing value."""
    day = value.date() if isinstance(value, datetime) else value
    return day - timedelta(days=day.weekday())


def trailing_window(now: datetime, days: int, offset_days: int = 0) -> TimeWindow:
    """
    Window of `days` days ending `offset_days` before now.

    trailing_window(now, 14) covers the last 14 days;
    trailing_window(now, 28, offset_days=14) covers the 28 days before that.
    """
    end = now - timedelta(days=offset_days)
    return TimeWindow(start=end - timedelta(days=days), end=end)


def week_window(now: datetime, weeks_ago: int = 0) -> TimeWindow:
    """Monday 00:00 to Sunday 23:59:59.999999 of the week `weeks_ago` before now's week."""
    monday = week_start(now) - timedelta(weeks=weeks_ago)
    start = datetime.combine(monday, datetime.min.time())
    end = start + timedelta(days=7) - timedelta(microseconds=1)
    return TimeWindow(start=start, end=end)


def sessions_between(
    sessions: Iterable[Session],
    start: datetime,
    end: datetime,
    include_end: bool = True,
) -> List[Session]:
    """Sessions whose timestamp falls in [start, end] (or [start, end) when include_end is False)."""
    if include_end:
        return [s for s in sessions if start <= s.timestamp <= end]
    return [s for s in sessions if start <= s.timestamp < end]


def newest_first(sessions: Iterable[Session]) -> List[Session]:
    """A new list sorted by timestamp, most recent first."""
    return sorted(sessions, key=lambda s: s.timestamp, reverse=True)


def oldest_first(sessions: Iterable[Session]) -> List[Session]:
    return sorted(sessions, key=lambda s: s.timestamp)
