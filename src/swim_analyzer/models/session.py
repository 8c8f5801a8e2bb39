"""Swim session and lap records supplied by the ingestion layer."""

import math
from datetime import datetime
from typing import Any, Optional, Tuple

from pydantic import AliasChoices, Field, field_validator

from .base import ValueModel


def _coerce_measure(value: Any) -> float:
    """Coerce a numeric field, mapping malformed or negative input to 0 (absent)."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number) or number < 0:
        return 0.0
    return number


class Lap(ValueModel):
    """A single lap within a session.

    Pace is minutes per 100m; duration is minutes; distance is meters.
    A lap is usable for pacing only when a pace can be derived from it.
    """

    number: Optional[int] = None
    distance: float = 0.0
    duration: float = 0.0
    pace: float = 0.0
    strokes: int = 0

    @field_validator("distance", "duration", "pace", mode="before")
    @classmethod
    def _valid_measure(cls, value: Any) -> float:
        return _coerce_measure(value)

    @field_validator("number", mode="before")
    @classmethod
    def _valid_number(cls, value: Any) -> Optional[int]:
        number = _coerce_measure(value)
        return int(number) if number > 0 and number.is_integer() else None

    @field_validator("strokes", mode="before")
    @classmethod
    def _valid_strokes(cls, value: Any) -> int:
        return int(_coerce_measure(value))


class Session(ValueModel):
    """One swim session.

    Attributes:
        id: Session identifier
        timestamp: Local start time of the session
        distance: Meters swum
        duration: Minutes
        pace: Minutes per 100m (0 = invalid)
        swolf: Efficiency score, lower is better (0 = invalid)
        strokes: Total stroke count
        calories: Optional energy estimate
        laps: Ordered lap records
    """

    id: str
    timestamp: datetime = Field(validation_alias=AliasChoices("timestamp", "date"))
    distance: float = 0.0
    duration: float = 0.0
    pace: float = 0.0
    swolf: float = 0.0
    strokes: int = 0
    calories: Optional[float] = None
    laps: Tuple[Lap, ...] = ()

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_string(cls, value: Any) -> str:
        return str(value)

    @field_validator("timestamp")
    @classmethod
    def _local_wall_clock(cls, value: datetime) -> datetime:
        # Keep the session's own wall-clock time; offsets are dropped
        return value.replace(tzinfo=None) if value.tzinfo else value

    @field_validator("distance", "duration", "pace", "swolf", mode="before")
    @classmethod
    def _valid_measure(cls, value: Any) -> float:
        return _coerce_measure(value)

    @field_validator("strokes", mode="before")
    @classmethod
    def _valid_strokes(cls, value: Any) -> int:
        return int(_coerce_measure(value))

    @field_validator("calories", mode="before")
    @classmethod
    def _valid_calories(cls, value: Any) -> Optional[float]:
        number = _coerce_measure(value)
        return number if number > 0 else None

    @field_validator("laps", mode="before")
    @classmethod
    def _laps_or_empty(cls, value: Any) -> Any:
        return () if value is None else value

    @property
    def has_valid_pace(self) -> bool:
        return self.pace > 0

    @property
    def has_valid_swolf(self) -> bool:
        return self.swolf > 0
