"""Coaching recommendations for analyzed swim sessions."""

from .engine import (
    RecommendationContext,
    generate_recommendations,
)

__all__ = [
    "RecommendationContext",
    "generate_recommendations",
]
