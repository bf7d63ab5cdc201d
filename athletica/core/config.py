"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables (.env file).
"""

from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Project Info
    PROJECT_NAME: str = "Athletica Workout Session Engine"
    VERSION: str = "0.1.0"
    AUTHORS: List[str] = ["Athletica Team"]
    PROJECT_URL: str = "https://github.com/athletica/workout-session-engine"

    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_USER: str = "postgres"
    DATABASE_PASSWORD: str = "postgres"
    DATABASE_HOST: str = "localhost"
    DATABASE_PORT: int = 5432
    DATABASE_DBNAME: str = "athletica"
    # Full URL override (e.g. ``sqlite:///./athletica.db`` for local runs)
    DATABASE_URL_OVERRIDE: Optional[str] = None

    # Live stats
    LIVE_STATS_CACHE_TTL_SECONDS: float = 5.0
    REFRESH_INTERVAL_ACTIVE_SET_SECONDS: float = 3.0
    REFRESH_INTERVAL_REST_SECONDS: float = 10.0
    REFRESH_INTERVAL_PAUSED_SECONDS: float = 30.0

    # Analytics constants
    ASSUMED_BODY_WEIGHT_KG: float = 75.0
    IDEAL_SESSION_DURATION_SECONDS: int = 45 * 60

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    @property
    def DATABASE_URL(self) -> str:
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return (f"postgresql://{self.DATABASE_USER}:{self.DATABASE_PASSWORD}@{self.DATABASE_HOST}"
                f":{self.DATABASE_PORT}"
                f"/{self.DATABASE_DBNAME}")


# Global settings instance
settings = Settings()
