"""Utility modules for the swim analyzer."""

from .dates import (
    resolve_now,
    week_start,
    trailing_window,
    week_window,
    sessions_between,
    newest_first,
    oldest_first,
)

__all__ = [
    "resolve_now",
    "week_start",
    "trailing_window",
    "week_window",
    "sessions_between",
    "newest_first",
    "oldest_first",
]
