"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
It sets TESTING so local .env files are never loaded, and provides an
upstream stub built on ``httpx.MockTransport`` so the real OpenAI SDK
request/response path runs without network access.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["TESTING"] = "true"

# Set default env vars that all tests might need
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ.pop("APP_SECRET", None)
os.environ.pop("OPENAI_BASE_URL", None)

import json
from typing import Any, Callable

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from vent_relay.core.app_factory import create_app
from vent_relay.core.config import (
    AppSettings,
    LogSettings,
    ServerSettings,
    Settings,
    UpstreamSettings,
)

TEST_SECRET = "s3cret-value"
CHAT_COMPLETIONS_URL = "https://api.openai.com/v1/chat/completions"


def completion_body(content: Any) -> dict[str, Any]:
    """Minimal chat-completion payload with one choice."""
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


class UpstreamStub:
    """Records outbound requests and answers with a configurable response."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.response_kwargs: dict[str, Any] = {"json": completion_body("Hello")}
        self.error: Callable[[httpx.Request], Exception] | None = None

    def respond_json(self, status_code: int, body: Any) -> None:
        self.status_code = status_code
        self.response_kwargs = {"json": body}

    def respond_text(self, status_code: int, text: str) -> None:
        self.status_code = status_code
        self.response_kwargs = {"text": text}

    def fail_with(self, factory: Callable[[httpx.Request], Exception]) -> None:
        self.error = factory

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error(request)
        # A fresh response per call; httpx responses can only be consumed once.
        return httpx.Response(self.status_code, **self.response_kwargs)

    @property
    def last_json(self) -> dict[str, Any]:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def upstream() -> UpstreamStub:
    return UpstreamStub()


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    """Build Settings with explicit values so the host environment can't leak in."""

    def _make(**app_overrides: Any) -> Settings:
        app_values: dict[str, Any] = {"secret": None}
        app_values.update(app_overrides)
        return Settings(
            upstream=UpstreamSettings(api_key="test-openai-key"),
            app=AppSettings(**app_values),
            server=ServerSettings(),
            log=LogSettings(level="WARNING"),
        )

    return _make


@pytest.fixture
def make_app(
    make_settings: Callable[..., Settings], upstream: UpstreamStub
) -> Callable[..., FastAPI]:
    """Build an isolated app (own rate-limit table) wired to the upstream stub."""

    def _make(**app_overrides: Any) -> FastAPI:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler))
        return create_app(make_settings(**app_overrides), http_client=http_client)

    return _make


@pytest.fixture
def client(make_app: Callable[..., FastAPI]) -> TestClient:
    """Client for an app without a shared secret."""
    return TestClient(make_app())


@pytest.fixture
def secret_client(make_app: Callable[..., FastAPI]) -> TestClient:
    """Client for an app requiring TEST_SECRET in X-App-Secret."""
    return TestClient(make_app(secret=TEST_SECRET))


@pytest.fixture
def valid_body() -> dict[str, str]:
    return {"systemPrompt": "You are a patient listener.", "userText": "Long day today."}
