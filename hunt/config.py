"""
Runtime configuration via environment variables.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Settings loaded from HUNT_* environment variables or a .env file."""

    # Storage
    db_path: str = "hunt.db"

    # Sequential page fetching; jitter keeps the cadence from looking scripted
    fetch_delay_s: int = Field(default=10, ge=0)
    fetch_jitter_ratio: float = Field(default=0.2, ge=0.0, le=1.0)

    # Browser
    browser_headless: bool = False
    browser_timeout_ms: int = 30000
    browser_user_data_dir: Optional[str] = None  # Chrome profile with a logged-in session

    # Logging
    log_level: str = "WARNING"

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v):
        return str(v or "WARNING").strip().upper()

    class Config:
        env_prefix = "HUNT_"
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
