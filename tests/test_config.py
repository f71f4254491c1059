"""Tests for settings loading and startup validation."""

import pytest

from vent_relay.core.config import Settings, load_settings
from vent_relay.core.errors import ConfigurationError


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in (
        "APP_SECRET",
        "ALLOWED_ORIGIN",
        "PORT",
        "HOST",
        "OPENAI_MODEL",
        "OPENAI_BASE_URL",
        "OPENAI_MAX_TOKENS",
        "OPENAI_TEMPERATURE",
        "OPENAI_TIMEOUT_SECONDS",
        "APP_RATE_LIMIT_REQUESTS",
        "APP_RATE_LIMIT_WINDOW_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    return monkeypatch


def test_defaults(clean_env) -> None:
    settings = load_settings()

    assert isinstance(settings, Settings)
    assert settings.upstream.api_key == "sk-test"
    assert settings.upstream.base_url == "https://api.openai.com/v1"
    assert settings.upstream.model == "gpt-3.5-turbo"
    assert settings.upstream.max_tokens == 180
    assert settings.upstream.temperature == 0.95
    assert settings.app.secret is None
    assert settings.app.rate_limit_requests == 30
    assert settings.app.rate_limit_window_seconds == 60
    assert settings.server.port == 10000
    assert settings.server.allowed_origin is None


def test_reads_environment(clean_env) -> None:
    clean_env.setenv("APP_SECRET", "shh")
    clean_env.setenv("ALLOWED_ORIGIN", "https://example.org")
    clean_env.setenv("PORT", "8080")

    settings = load_settings()

    assert settings.app.secret == "shh"
    assert settings.server.allowed_origin == "https://example.org"
    assert settings.server.port == 8080


def test_missing_api_key_is_fatal(clean_env) -> None:
    clean_env.delenv("OPENAI_API_KEY")

    with pytest.raises(ConfigurationError) as exc_info:
        load_settings()

    assert exc_info.value.code == "invalid_configuration"
    assert "OPENAI_API_KEY" in exc_info.value.details["hint"]


def test_empty_api_key_is_fatal(clean_env) -> None:
    clean_env.setenv("OPENAI_API_KEY", "")

    with pytest.raises(ConfigurationError):
        load_settings()


def test_invalid_port_is_fatal(clean_env) -> None:
    clean_env.setenv("PORT", "not-a-port")

    with pytest.raises(ConfigurationError) as exc_info:
        load_settings()

    assert exc_info.value.code == "invalid_configuration"
