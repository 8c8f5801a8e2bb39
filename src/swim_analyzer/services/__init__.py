"""Services that combine analysis modules into per-session results."""

from .deep_analysis import DeepAnalysisService, analyze_session_deep

__all__ = [
    "DeepAnalysisService",
    "analyze_session_deep",
]
