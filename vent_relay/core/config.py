"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file

Values are read once at startup and never mutated afterwards. The upstream
credential (OPENAI_API_KEY) is mandatory: without it the relay must not
serve traffic.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from vent_relay.core.errors import ConfigurationError


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Map environments to their respective .env files (relative to PROJECT_ROOT)
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
# Tests set TESTING=true to keep local .env files out of the picture.
if _env_file and not os.getenv("TESTING"):
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_upstream_settings() -> "UpstreamSettings":
    """Build upstream settings from environment.

    Pydantic Settings (v2) can populate values from environment variables.
    However, static type checkers often treat required fields as required
    constructor arguments, which is not how BaseSettings is intended to be used.
    """

    return UpstreamSettings()  # type: ignore[call-arg]


def _build_app_settings() -> "AppSettings":
    return AppSettings()


def _build_server_settings() -> "ServerSettings":
    return ServerSettings()


def _build_log_settings() -> "LogSettings":
    return LogSettings()


class UpstreamSettings(BaseSettings):
    """OpenAI chat-completion upstream configuration."""

    api_key: str = Field(
        ...,
        min_length=1,
        description="Bearer credential for the upstream API (required)",
    )
    base_url: str = Field(
        "https://api.openai.com/v1",
        description="Upstream API base URL",
    )
    model: str = Field(
        "gpt-3.5-turbo",
        description="Chat model identifier sent with every request",
    )
    max_tokens: int = Field(
        180,
        description="Response length cap in tokens",
        ge=1,
    )
    temperature: float = Field(
        0.95,
        description="Sampling temperature",
        ge=0.0,
        le=2.0,
    )
    timeout_seconds: float = Field(
        30.0,
        description="Upper bound on the wait for an upstream reply",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="OPENAI_",
        case_sensitive=False,
    )


class AppSettings(BaseSettings):
    """Relay behaviour: shared secret, rate limiting, error exposure."""

    secret: str | None = Field(
        None,
        description="Shared secret expected in X-App-Secret; empty disables the check",
    )

    rate_limit_enabled: bool = Field(
        True,
        description="Enable per-caller rate limiting",
    )
    rate_limit_requests: int = Field(
        30,
        description="Maximum number of requests allowed per rolling window (per caller)",
        ge=1,
    )
    rate_limit_window_seconds: int = Field(
        60,
        description="Rolling window size in seconds",
        ge=1,
    )
    rate_limit_include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers when throttling",
    )
    trust_forwarded_for: bool = Field(
        False,
        description="Use the first X-Forwarded-For hop as caller address (behind a proxy)",
    )

    expose_upstream_errors: bool = Field(
        True,
        description="Echo upstream error bodies back to callers",
    )
    restrict_origin: bool = Field(
        False,
        description="Only allow ALLOWED_ORIGIN for cross-origin requests",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class ServerSettings(BaseSettings):
    """Process-level settings read from unprefixed variables (PORT, HOST...)."""

    host: str = Field("0.0.0.0", description="Bind address")
    port: int = Field(10000, description="Listening port", ge=1, le=65535)
    allowed_origin: str | None = Field(
        None,
        description="Browser origin allowed to call the relay",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: json or plain")
    output: str = Field("stdout", description="Log destination: stdout or file")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        10 * 1024 * 1024,
        description="Rotate file logs after this many bytes (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(5, description="Rotated files to keep", ge=0)
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

    Composed from domain-specific settings; raises validation errors on
    construction if required settings are missing.
    """

    app_env: str = APP_ENV
    upstream: UpstreamSettings = Field(default_factory=_build_upstream_settings)
    app: AppSettings = Field(default_factory=_build_app_settings)
    server: ServerSettings = Field(default_factory=_build_server_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


def load_settings() -> Settings:
    """Read and validate configuration from the environment.

    Returns:
        Fully validated Settings instance.

    Raises:
        ConfigurationError: If a required value is missing or invalid.
    """

    try:
        return Settings()
    except ValidationError as exc:
        fields = sorted(
            ".".join(str(part) for part in error["loc"]) for error in exc.errors()
        )
        raise ConfigurationError(
            code="invalid_configuration",
            message=f"Invalid or missing configuration in {exc.title}: {', '.join(fields)}",
            details={"hint": "OPENAI_API_KEY must be set", "context": {"fields": fields}},
        ) from exc
