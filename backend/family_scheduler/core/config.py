"""Application configuration managed via environment variables."""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Family Scheduler Backend"
    debug: bool = False
    log_level: str = "INFO"
    database_url: str = "postgresql+psycopg2://localhost:5432/family_scheduler"
    anthropic_api_key: str | None = None
    anthropic_base_url: str = "https://api.anthropic.com"
    anthropic_version: str = "2023-06-01"
    model_name: str = "claude-sonnet-4-20250514"
    max_tokens: int = 1000
    upstream_timeout_seconds: float = 60.0
    calendar_context_limit: int = 60
    google_calendar_base_url: str = "https://www.googleapis.com/calendar/v3"
    google_calendar_timeout_seconds: float = 15.0
    opik_enabled: bool = False
    opik_api_key: str | None = None
    opik_project: str = "family-scheduler"
    opik_workspace: str | None = None


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


settings = get_settings()
