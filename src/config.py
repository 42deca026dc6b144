"""Application configuration using pydantic-settings pattern."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Registry data (CSV or JSON); missing files fall back to built-in tables
    coach_registry_path: Path | None = Field(default=None)
    student_registry_path: Path | None = Field(default=None)

    # Matching
    fuzzy_threshold: float = Field(
        default=0.8,
        ge=0.0,
        le=1.0,
        description="Minimum similarity a fuzzy alias match must exceed",
    )
    review_threshold: int = Field(
        default=60,
        ge=0,
        le=100,
        description="Results scoring below this are flagged for manual review",
    )
    min_session_seconds: int = Field(
        default=300,
        ge=0,
        description="Sessions shorter than this are classified MISC",
    )

    # Domain knowledge
    coach_email_domains: list[str] = Field(
        default_factory=lambda: ["ivymentors.co", "ivylevel.com"],
        description="Email domains that identify coach/staff accounts",
    )
    known_coach_keywords: list[str] = Field(
        default_factory=lambda: [
            "jenny",
            "alan",
            "andrew",
            "rishi",
            "katie",
            "marissa",
            "juli",
            "erin",
            "aditi",
        ],
        description="Folder-name keywords that mark a coach's folder",
    )
    personal_room_markers: list[str] = Field(
        default_factory=lambda: ["personal meeting room", "'s zoom meeting"],
        description="Topic fragments that mark a host's personal room",
    )
    admin_room_owners: list[str] = Field(
        default_factory=lambda: ["ivylevel"],
        description="Shared admin accounts whose rooms and mailboxes name no coach",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
