"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Nested BaseSettings don't inherit env_file, so populate os.environ first.
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


class UpstreamSettings(BaseSettings):
    """Twelve Data API configuration."""

    api_key: str | None = Field(
        None,
        description="Twelve Data API key (required to reach the upstream API)",
    )
    base_url: str = Field(
        "https://api.twelvedata.com",
        description="Base URL of the Twelve Data REST API",
    )
    timeout_seconds: float = Field(
        10.0,
        description="Upstream request timeout in seconds",
        gt=0,
    )
    symbols: str = Field(
        "SPY,DIA,QQQ,IWM",
        description="Comma-separated index symbols fetched by the quotes endpoint",
    )
    history_interval: str = Field(
        "1day",
        description="Bar interval requested from /time_series",
    )
    history_outputsize: int = Field(
        30,
        description="Number of bars requested from /time_series",
        ge=1,
    )

    model_config = SettingsConfigDict(
        env_prefix="TWELVE_DATA_",
        case_sensitive=False,
    )

    @property
    def symbol_list(self) -> list[str]:
        return [s.strip() for s in self.symbols.split(",") if s.strip()]


class AppSettings(BaseSettings):
    """Guard layer policy and application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    cors_origins: str = Field(
        "http://localhost:3000",
        description="Comma-separated list of origins allowed by CORS",
    )

    minute_limit: int = Field(
        20,
        description="Maximum upstream calls admitted per sliding window",
        ge=1,
    )
    minute_window_seconds: int = Field(
        60,
        description="Sliding window size in seconds",
        ge=1,
    )

    monthly_limit: int = Field(
        500,
        description="Upstream calls allowed per calendar month",
        ge=1,
    )
    usage_key_prefix: str = Field(
        "api:usage:",
        description="Key prefix of the persisted monthly usage counter",
    )
    budget_timezone: str = Field(
        "UTC",
        description="Time zone used to decide the current calendar month",
    )
    budget_increment_attempts: int = Field(
        2,
        description="Attempts made to persist a usage increment before giving up",
        ge=1,
    )
    usage_warning_threshold: float = Field(
        80.0,
        description="Monthly usage percentage above which the warning flag is raised",
    )

    quotes_cache_ttl_seconds: int = Field(
        120,
        description="Default TTL of cached quote results",
        ge=1,
    )
    history_cache_ttl_seconds: int = Field(
        300,
        description="Default TTL of cached history results",
        ge=1,
    )
    cache_max_entries: int | None = Field(
        1024,
        description="Maximum entries held by the in-memory cache store",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


class StoreSettings(BaseSettings):
    """Backing store for usage counters and cached results."""

    backend: Literal["redis", "memory"] = Field(
        "redis",
        description="Store backend: 'redis' (shared, persistent) or 'memory' (single process)",
    )
    redis_url: str = Field(
        "redis://localhost:6379/0",
        description="Redis connection URL",
    )
    socket_timeout_seconds: float = Field(
        2.0,
        description="Redis socket timeout in seconds",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="STORE_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field("INFO", description="Root log level")
    format: Literal["json", "plain"] = Field(
        "json",
        description="Log line format",
    )
    output: Literal["stdout", "file"] = Field(
        "stdout",
        description="Log destination",
    )
    file_path: str | None = Field(
        None,
        description="Log file path when output=file",
    )
    max_bytes: int = Field(
        10_485_760,
        description="Rotate the log file after this many bytes (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(
        5,
        description="Rotated log files to keep",
        ge=0,
    )
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header carrying the request correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if settings are invalid.
    """

    app_env: str = APP_ENV
    upstream: UpstreamSettings = Field(default_factory=UpstreamSettings)
    app: AppSettings = Field(default_factory=AppSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


settings = Settings()
