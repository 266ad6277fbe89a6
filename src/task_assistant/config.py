"""Application configuration."""

import os
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    admin_token: str
    ai_provider: Literal["gemini", "openai"] = "gemini"
    gemini_api_key: str | None = None
    gemini_model: str = "gemini-1.5-pro"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    ai_temperature: float = 0.7
    ai_max_output_tokens: int = 1024
    ai_timeout_seconds: float = 30
    cache_cleanup_interval_seconds: int = 600
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
