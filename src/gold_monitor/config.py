"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    price_api_key: str
    price_api_base_url: str = "https://api.metalpriceapi.com/v1"
    fx_api_base_url: str = "https://open.er-api.com/v6"
    news_api_key: str | None = None
    news_api_base_url: str = "https://gnews.io/api/v4"
    http_timeout_seconds: float = 10.0
    current_ttl_seconds: int = 24 * 60 * 60
    historical_ttl_seconds: int = 30 * 24 * 60 * 60
    range_ttl_seconds: int = 24 * 60 * 60
    news_ttl_seconds: int = 60 * 60
    history_window_days: int = 365
    refresh_utc_offset_hours: float = 7.0
    dedupe_inflight_requests: bool = False
    log_level: str = "INFO"
    cors_allow_origins: str = "*"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_origins(raw: str | None) -> list[str]:
    """Parse allowed CORS origins from env."""
    if raw is None:
        return ["*"]
    cleaned = raw.strip()
    if cleaned in {"", "*"}:
        return ["*"]
    origins = [chunk.strip() for chunk in cleaned.split(",")]
    return [origin for origin in origins if origin] or ["*"]
