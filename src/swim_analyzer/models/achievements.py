"""Achievement badge and streak milestone models."""

from enum import Enum

from pydantic import Field

from .base import ValueModel


class BadgeCategory(str, Enum):
    """Categories for achievement badges."""
    DISTANCE = "distance"
    CUMULATIVE = "cumulative"
    CONSISTENCY = "consistency"
    SPEED = "speed"
    EFFICIENCY = "efficiency"
    SPECIAL = "special"


class Badge(ValueModel):
    """An achievement badge with its earned status."""
    id: str = Field(..., description="Unique badge identifier")
    category: BadgeCategory
    name: str
    description: str = Field(..., description="How the badge is earned")
    icon: str
    earned: bool = False
    progress: float = Field(default=0.0, ge=0.0, le=100.0, description="Progress toward earning, 0-100")


class StreakMilestone(ValueModel):
    """A monthly streak length that unlocks a badge."""
    months: int
    badge: str
    icon: str
    message: str


class StreakAchievement(StreakMilestone):
    """A streak milestone the swimmer has reached."""
    unlocked_at: int
    is_new: bool = Field(default=False, description="Reached exactly this month")


class NextStreakMilestone(StreakMilestone):
    """The next streak milestone and the distance to it."""
    months_to_go: int
    progress_percent: int
