"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta

import pytest

from swim_analyzer.config import Settings
from swim_analyzer.models.session import Lap, Session


# Wednesday; the week starts Monday 2024-03-11
NOW = datetime(2024, 3, 13, 12, 0)


def make_session(
    session_id,
    timestamp,
    distance=1000.0,
    duration=20.0,
    pace=2.0,
    swolf=40.0,
    strokes=0,
    lap_paces=None,
):
    """Build a Session; lap_paces become laps with explicit paces."""
    laps = ()
    if lap_paces is not None:
        laps = tuple(
            Lap(number=i + 1, distance=100, pace=p) for i, p in enumerate(lap_paces)
        )
    return Session(
        id=str(session_id),
        timestamp=timestamp,
        distance=distance,
        duration=duration,
        pace=pace,
        swolf=swolf,
        strokes=strokes,
        laps=laps,
    )


@pytest.fixture
def now():
    """Fixed reference time."""
    return NOW


@pytest.fixture
def session_factory():
    """Factory for Session records."""
    return make_session


@pytest.fixture
def settings():
    """Default settings, ignoring any local .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def improving_sessions():
    """Ten weekly swims, oldest first, each 2% faster than the last at 1000m."""
    start = datetime(2024, 1, 3, 7, 30)
    return [
        make_session(
            i + 1,
            start + timedelta(weeks=i),
            distance=1000.0,
            pace=2.0 * (0.98 ** i),
            swolf=0,
        )
        for i in range(10)
    ]
