"""Application configuration."""

import os
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Server settings loaded from environment variables."""

    storage_backend: Literal["supabase", "local"] = "local"
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    local_store_path: str = "brewvote.json"
    admin_employee_id: str = "ADM001"
    admin_name: str = "Event Manager"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


class ClientSettings(BaseSettings):
    """Settings for the polling client."""

    api_base_url: str = "http://localhost:5000/api"
    admin_poll_interval_seconds: float = 1.0
    employee_poll_interval_seconds: float = 5.0
    request_timeout_seconds: float = 10.0
    session_duration_minutes: int = 10
    local_store_path: str | None = None

    model_config = SettingsConfigDict(
        env_prefix="BREWVOTE_",
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
