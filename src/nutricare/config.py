"""Application configuration."""

import os
from uuid import UUID

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    fdc_api_key: str
    fdc_base_url: str = "https://api.nal.usda.gov/fdc/v1"
    fdc_timeout_seconds: float = 10.0
    food_search_ttl_seconds: int = 3600
    baseline_min_samples: int = 5
    debug_nutrition: bool = False
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_user_id(raw: str | None) -> UUID | None:
    """Parse the authenticated user id header."""
    if raw is None:
        return None
    cleaned = raw.strip()
    if not cleaned:
        return None
    try:
        return UUID(cleaned)
    except ValueError:
        return None
