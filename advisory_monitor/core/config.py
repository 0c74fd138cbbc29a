from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Ignore unrelated env keys so the .env shared with the frontend can stay in one place.
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Advisory+ Monitor API"
    environment: str = "development"
    api_prefix: str = "/api/v1"
    cors_allow_origins: str = "http://localhost:5173,http://127.0.0.1:5173"
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    supabase_url: str = Field(..., alias="SUPABASE_URL")
    supabase_service_role_key: Optional[str] = Field(
        default=None, alias="SUPABASE_SERVICE_ROLE_KEY"
    )
    supabase_anon_key: Optional[str] = Field(default=None, alias="SUPABASE_ANON_KEY")

    report_fetch_max_workers: int = Field(default=4, ge=1, alias="REPORT_FETCH_MAX_WORKERS")
    report_default_months: int = Field(default=6, ge=1, le=60, alias="REPORT_DEFAULT_MONTHS")
    calendar_timezone: str = Field(default="Europe/Rome", alias="CALENDAR_TIMEZONE")


@lru_cache
def get_settings() -> Settings:
    return Settings()


def get_cors_origins() -> list[str]:
    settings = get_settings()
    return [origin.strip() for origin in settings.cors_allow_origins.split(",") if origin.strip()]
