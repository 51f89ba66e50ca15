from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Ignore unrelated env keys so local/dev .env can include frontend-only values.
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Owner Portal Backend"
    environment: str = "development"
    api_prefix: str = "/api/v1"
    cors_allow_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    supabase_url: str = Field(..., alias="SUPABASE_URL")
    supabase_service_role_key: Optional[str] = Field(
        default=None, alias="SUPABASE_SERVICE_ROLE_KEY"
    )
    supabase_anon_key: Optional[str] = Field(default=None, alias="SUPABASE_ANON_KEY")

    forecast_horizons: str = Field(default="30,60,90", alias="FORECAST_HORIZONS")
    cancellation_statuses: str = Field(default="canceled,cancelled", alias="CANCELLATION_STATUSES")
    upcoming_reservations_limit: int = Field(default=5, alias="UPCOMING_RESERVATIONS_LIMIT")
    statement_history_limit: int = Field(default=60, alias="STATEMENT_HISTORY_LIMIT")
    booking_history_limit: int = Field(default=500, alias="BOOKING_HISTORY_LIMIT")


@lru_cache
def get_settings() -> Settings:
    return Settings()


def get_cors_origins() -> List[str]:
    settings = get_settings()
    return [origin.strip() for origin in settings.cors_allow_origins.split(",") if origin.strip()]


def get_cancellation_statuses(settings: Optional[Settings] = None) -> frozenset[str]:
    settings = settings or get_settings()
    return frozenset(
        status.strip().lower()
        for status in settings.cancellation_statuses.split(",")
        if status.strip()
    )
