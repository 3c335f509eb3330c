"""Application configuration loaded from environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = "sqlite:///./hyrox_coach.db"

    # Logging
    LOG_LEVEL: str = "INFO"

    # Frontend URL for CORS
    FRONTEND_URL: str = "http://localhost:3000"

    # Missed-workout detection
    MISSED_CRITICAL_WINDOW_DAYS: int = 3  # Key workouts missed this recently are critical
    MISSED_STALE_AFTER_DAYS: int = 7      # Older misses are not worth making up
    MISSED_IMPACT_CRITICAL: int = -20
    MISSED_IMPACT_HIGH: int = -12
    MISSED_IMPACT_MEDIUM: int = -7
    MISSED_IMPACT_LOW: int = -4
    MISSED_IMPACT_FLOOR: int = -100

    # Key workouts: full simulations and coverage sessions at or above this percentage
    KEY_WORKOUT_MIN_COVERAGE: int = 75

    # Performance analysis
    FULL_COMPLETION_PERCENT: int = 80
    INTENSITY_MODIFIER_MIN: float = 0.7
    INTENSITY_MODIFIER_MAX: float = 1.3
    INTENSITY_MODIFIER_COMMIT_THRESHOLD: float = 0.05

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Create a global settings instance for direct import
settings = get_settings()
