"""Personal record, milestone and ranking models."""

from enum import Enum
from typing import Optional

from pydantic import Field

from .base import ValueModel
from .session import Session


class MilestoneType(str, Enum):
    """Metrics that carry round-number milestones."""
    PACE = "pace"
    DISTANCE = "distance"
    SWOLF = "swolf"
    TOTAL = "total"


class PersonalRecords(ValueModel):
    """Best-ever session per metric. A metric with no valid session is None."""
    fastest_pace: Optional[Session] = None
    longest_distance: Optional[Session] = None
    best_swolf: Optional[Session] = None

    @property
    def is_empty(self) -> bool:
        return (
            self.fastest_pace is None
            and self.longest_distance is None
            and self.best_swolf is None
        )


class Milestone(ValueModel):
    """Next round-number target beyond a personal best."""
    type: MilestoneType
    title: str
    current: float
    target: float
    unit: str
    progress: float = Field(ge=0.0, le=100.0, description="Completion toward the target, 0-100")
    display_current: str
    display_target: str
    message: str


class RecordFlags(ValueModel):
    """Whether a session ranks in the top 3 for each metric."""
    pace: bool = False
    distance: bool = False
    swolf: bool = False


class SessionRanking(ValueModel):
    """Where one session ranks against the full history.

    Ranks are 1-based (0 = not ranked). Percentiles are oriented so that
    higher is always better.
    """
    overall_percentile: int = 0
    pace_rank: int = 0
    distance_rank: int = 0
    swolf_rank: int = 0
    month_rank: int = 0
    month_total: int = 0
    total_sessions: int = 0
    is_record: RecordFlags = Field(default_factory=RecordFlags)
    pace_percentile: Optional[int] = None
    distance_percentile: Optional[int] = None
    swolf_percentile: Optional[int] = None
