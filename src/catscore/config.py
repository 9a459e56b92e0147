"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from catscore.domain.targets import ScoringPolicy, UnitCorrection

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    openai_api_key: str
    openai_model: str = "gpt-5.2"
    openai_reasoning_effort: str | None = "low"
    openai_store: bool = False
    extraction_retry_attempts: int = 1
    unit_correction: UnitCorrection = UnitCorrection.MAGNITUDE
    history_limit: int = 50
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def build_policy(settings: Settings) -> ScoringPolicy:
    """Derive the scoring policy from settings."""
    return ScoringPolicy(unit_correction=settings.unit_correction)
