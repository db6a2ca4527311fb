"""
Application configuration using Pydantic Settings.

All configuration is loaded from environment variables or a local .env file.
Governance constants (voting period, thresholds, activity deltas) live here so
deployments can tune them without code changes.
"""

import json
from functools import lru_cache
from typing import Any, Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "CivicVision"
    APP_ENV: str = "development"
    DEBUG: bool = False
    SECRET_KEY: str = ""  # Required - loaded from environment

    @field_validator("SECRET_KEY")
    @classmethod
    def validate_required_secrets(cls, v: str, info: Any) -> str:
        """Validate that required secrets are set."""
        if not v:
            raise ValueError(f"{info.field_name} must be set in environment")
        return v

    # Authentication
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Storage
    STORAGE_BACKEND: Literal["memory", "sql"] = "memory"
    DATABASE_URL: str = "sqlite+aiosqlite:///./civicvision.db"
    DATABASE_ECHO: bool = False

    # Governance identity and switches
    GOVERNANCE_OWNER: str = "governance-owner"
    GOVERNANCE_ENABLED: bool = True

    # Logical clock (one tick ~ one block)
    TICK_SECONDS: int = 600
    GENESIS_TIMESTAMP: int = 0

    # Lifecycle timing, in ticks
    VOTING_PERIOD_TICKS: int = 1008  # ~1 week of blocks
    REVIEW_INTERVAL_TICKS: int = 2016  # ~2 weeks of blocks

    # Reputation and vote weighting
    INITIAL_REPUTATION: int = 100
    MIN_REPUTATION: int = 1
    BASE_VOTE_WEIGHT: int = 100
    PARTICIPATION_BONUS_CAP: int = 50
    OFFICIAL_VOTE_MULTIPLIER: int = 150
    DEFAULT_VOTE_MULTIPLIER: int = 100

    # Finalization thresholds (percent x100)
    QUORUM_THRESHOLD: int = 3000
    APPROVAL_THRESHOLD: int = 6000

    # Activity deltas applied to the acting stakeholder
    ACTIVITY_CREATE_VISION: int = 10
    ACTIVITY_CAST_VOTE: int = 5
    ACTIVITY_VISION_APPROVED: int = 20
    ACTIVITY_VISION_REJECTED: int = -5
    ACTIVITY_COMMENT: int = 2

    # Input limits
    TITLE_MAX_LENGTH: int = 100
    DESCRIPTION_MIN_LENGTH: int = 10  # description must be strictly longer
    DESCRIPTION_MAX_LENGTH: int = 500
    CATEGORY_MAX_LENGTH: int = 50
    COMMENT_MAX_LENGTH: int = 500

    # Engagement log
    VALIDATE_COMMENT_PARENTS: bool = False

    # CORS - stored as comma-separated string to avoid pydantic-settings JSON parsing issues
    CORS_ORIGINS: str = "http://localhost:3000"

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        try:
            return json.loads(self.CORS_ORIGINS)
        except json.JSONDecodeError:
            return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
