"""Coaching recommendation models."""

from enum import Enum

from .base import ValueModel


class RecommendationCategory(str, Enum):
    """Areas a recommendation addresses."""
    PACING = "pacing"
    ENDURANCE = "endurance"
    PERFORMANCE = "performance"
    TIMING = "timing"
    TECHNIQUE = "technique"
    MOTIVATION = "motivation"
    MOMENTUM = "momentum"
    CONSISTENCY = "consistency"
    RECOVERY = "recovery"
    GENERAL = "general"


class RecommendationPriority(str, Enum):
    """Descriptive priority. Lists are rendered in rule order, not sorted by this."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    POSITIVE = "positive"
    INFO = "info"


class Recommendation(ValueModel):
    """A single coaching recommendation."""
    category: RecommendationCategory
    priority: RecommendationPriority
    title: str
    message: str
    action: str
