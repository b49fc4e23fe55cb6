"""
MOTIONCOACH Configuration

Environment variables and application settings.
"""

from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "MOTIONCOACH"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173", "http://10.0.2.2:8000"]

    # Coaching
    DEFAULT_DIFFICULTY: str = "intermediate"
    MESSAGE_LOCALE: str = "en"

    # Landmark confidence
    VISIBILITY_THRESHOLD: float = 0.3
    CORRECTION_MIN_VISIBILITY: float = 0.5

    # Sessions
    MAX_ACTIVE_SESSIONS: int = 100
    # Sessions untouched this long are evicted when the registry is full
    SESSION_IDLE_TIMEOUT_SECONDS: int = 600
    ENABLE_CORRECTIONS: bool = True

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
