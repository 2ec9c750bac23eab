from __future__ import annotations

from functools import lru_cache
from typing import Optional
from zoneinfo import ZoneInfo

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Ignore unrelated env keys so the dashboard's .env can be shared as-is.
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Comissionamento Backend"
    environment: str = "development"
    api_prefix: str = "/api/v1"
    cors_allow_origins: str = "http://localhost:5173,http://127.0.0.1:5173"
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    supabase_url: str = Field(..., alias="SUPABASE_URL")
    supabase_service_role_key: Optional[str] = Field(
        default=None, alias="SUPABASE_SERVICE_ROLE_KEY"
    )
    supabase_anon_key: Optional[str] = Field(default=None, alias="SUPABASE_ANON_KEY")

    business_timezone: str = Field(default="America/Sao_Paulo", alias="BUSINESS_TIMEZONE")
    batch_max_workers: int = Field(default=4, alias="BATCH_MAX_WORKERS")
    default_meeting_minutes: int = Field(default=60, alias="DEFAULT_MEETING_MINUTES")

    agendamentos_api_key: Optional[str] = Field(default=None, alias="AGENDAMENTOS_API_KEY")
    commission_recalc_token: Optional[str] = Field(default=None, alias="COMMISSION_RECALC_TOKEN")
    lead_default_source: str = Field(default="GreatPages", alias="LEAD_DEFAULT_SOURCE")


@lru_cache
def get_settings() -> Settings:
    return Settings()


def get_cors_origins() -> list[str]:
    settings = get_settings()
    return [origin.strip() for origin in settings.cors_allow_origins.split(",") if origin.strip()]


def get_business_timezone() -> ZoneInfo:
    return ZoneInfo(get_settings().business_timezone)
