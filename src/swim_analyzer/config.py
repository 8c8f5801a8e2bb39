"""Configuration settings for the Swim Analyzer."""

from pathlib import Path
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


# __file__ = src/swim_analyzer/config.py
PACKAGE_ROOT = Path(__file__).parent.parent.parent


class Settings(BaseSettings):
    """Analytics settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SWIM_ANALYZER_",
        env_file=str(PACKAGE_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Comparative analysis
    recent_sessions_window: int = 10
    same_distance_tolerance_m: float = 100.0

    # Momentum windows (days)
    momentum_recent_days: int = 14
    momentum_comparison_days: int = 28

    # Progress and compare-mode windows (days)
    progress_window_days: int = 90
    compare_window_days: int = 30

    # Pattern detection
    min_sessions_for_patterns: int = 5
    min_sessions_per_pattern_group: int = 2

    # Distance goals (meters)
    weekly_distance_goal_m: float = 7500.0
    monthly_distance_goal_m: float = 30000.0

    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
