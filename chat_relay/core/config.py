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

from pydantic import AliasChoices, Field
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


# Nested BaseSettings don't inherit env_file, so populate os.environ up front.
# The test suite sets TESTING before importing settings to keep local files out.
if _env_file and not os.getenv("TESTING"):
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


GROQ_BASE_URL = "https://api.groq.com/openai/v1"


def _build_llm_settings() -> "LLMSettings":
    """Build LLM settings from environment."""

    return LLMSettings()  # type: ignore[call-arg]


def _build_app_settings() -> "AppSettings":
    """Build app settings from environment."""

    return AppSettings()  # type: ignore[call-arg]


def _build_log_settings() -> "LogSettings":
    return LogSettings()  # type: ignore[call-arg]


def parse_csv(value: str | None) -> list[str]:
    """Split a comma-separated setting into trimmed, non-empty items.

    Examples:
        >>> parse_csv("http://a.test, http://b.test ,")
        ['http://a.test', 'http://b.test']
        >>> parse_csv(None)
        []
    """
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


class LLMSettings(BaseSettings):
    """Upstream LLM provider configuration.

    Both supported providers speak the OpenAI chat-completions schema; the
    provider only decides the default base URL.
    """

    provider: Literal["groq", "openai"] = Field(
        "groq",
        description="Upstream provider name (groq or openai)",
    )
    model: str = Field(
        "meta-llama/llama-4-maverick-17b-128e-instruct",
        description="Model identifier sent with every chat completion",
    )
    api_key: str | None = Field(
        None,
        validation_alias=AliasChoices("LLM_API_KEY", "GROQ_API_KEY", "OPENAI_API_KEY"),
        description="Bearer credential for the upstream API",
    )
    base_url: str | None = Field(
        None,
        description="Override the provider's default API endpoint",
    )
    timeout_seconds: float = Field(
        60.0,
        description="Total timeout for a single upstream call in seconds",
        gt=0,
    )
    connect_timeout_seconds: float = Field(
        30.0,
        description="Connect timeout for upstream calls in seconds",
        gt=0,
    )
    max_tokens: int = Field(
        400,
        description="Maximum output length requested from the model",
        ge=1,
    )
    temperature: float = Field(
        0.2,
        description="Sampling temperature requested from the model",
        ge=0.0,
        le=2.0,
    )
    response_mode: Literal["raw", "extracted"] = Field(
        "raw",
        description="raw relays the upstream payload; extracted returns only the generated text",
    )
    retry_attempts: int = Field(
        1,
        description="Extra attempts after a transient I/O failure reaching the upstream",
        ge=0,
    )
    retry_backoff_seconds: float = Field(
        0.25,
        description="Fixed delay between attempts after an I/O failure",
        ge=0.0,
    )

    model_config = SettingsConfigDict(
        env_prefix="LLM_",
        case_sensitive=False,
        populate_by_name=True,
    )

    @property
    def resolved_base_url(self) -> str | None:
        """Base URL actually used by the client (None means SDK default)."""
        if self.base_url:
            return self.base_url
        if self.provider == "groq":
            return GROQ_BASE_URL
        return None


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    cors_allowed_origins: str = Field(
        "http://localhost:5173",
        description="Comma-separated list of origins allowed to call the API",
    )

    rate_limit_enabled: bool = Field(
        True,
        description="Enable the process-wide request quota",
    )
    rate_limit_capacity: int = Field(
        10,
        description="Maximum number of requests admitted per refill interval",
        ge=1,
    )
    rate_limit_refill_interval_seconds: int = Field(
        60,
        description="Seconds after which the quota snaps back to full capacity",
        ge=1,
    )
    rate_limit_include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers when throttling",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )

    @property
    def cors_origins(self) -> list[str]:
        return parse_csv(self.cors_allowed_origins)


class LogSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field("INFO", description="Root log level")
    format: Literal["json", "plain"] = Field(
        "json",
        description="json for machine-readable logs, plain for local development",
    )
    output: Literal["stdout", "file"] = Field(
        "stdout",
        description="Where log records are written",
    )
    file_path: str | None = Field(
        None,
        description="Log file path when output=file (default logs/app.log)",
    )
    max_bytes: int = Field(
        0,
        description="Rotate the log file at this size; 0 disables rotation",
        ge=0,
    )
    backup_count: int = Field(
        5,
        description="Number of rotated log files to keep",
        ge=0,
    )
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to accept and echo the request correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if a setting has an invalid value.
    """

    app_env: str = APP_ENV
    llm: LLMSettings = Field(default_factory=_build_llm_settings)
    app: AppSettings = Field(default_factory=_build_app_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
settings = Settings()
