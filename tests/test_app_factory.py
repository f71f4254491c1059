"""Tests for app wiring: health, CORS and OpenAPI customizations."""

from fastapi.testclient import TestClient

from vent_relay import __version__
from vent_relay.adapters.rate_limit.in_memory import SlidingWindowRateLimiter
from vent_relay.core.app_factory import create_app
from vent_relay.core.config import AppSettings, LogSettings, ServerSettings, Settings, UpstreamSettings


def _settings(allowed_origin: str | None = None, **app_values) -> Settings:
    return Settings(
        upstream=UpstreamSettings(api_key="test-key"),
        app=AppSettings(**app_values),
        server=ServerSettings(allowed_origin=allowed_origin),
        log=LogSettings(level="WARNING"),
    )


def test_health_is_open(make_app) -> None:
    client = TestClient(make_app(secret="s", rate_limit_requests=1))

    for _ in range(3):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "version": __version__}


def test_each_app_owns_its_rate_limiter(make_app) -> None:
    first = make_app()
    second = make_app()

    assert isinstance(first.state.rate_limiter, SlidingWindowRateLimiter)
    assert first.state.rate_limiter is not second.state.rate_limiter


def test_any_origin_allowed_by_default() -> None:
    client = TestClient(create_app(_settings(allowed_origin="https://app.example")))

    response = client.options(
        "/vent",
        headers={
            "Origin": "https://elsewhere.example",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "X-App-Secret",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"


def test_origin_restricted_when_enabled() -> None:
    client = TestClient(
        create_app(_settings(allowed_origin="https://app.example", restrict_origin=True))
    )
    preflight = {"Access-Control-Request-Method": "POST"}

    allowed = client.options("/vent", headers={"Origin": "https://app.example", **preflight})
    denied = client.options("/vent", headers={"Origin": "https://evil.example", **preflight})

    assert allowed.headers["access-control-allow-origin"] == "https://app.example"
    assert denied.status_code == 400


def test_openapi_documents_secret_header() -> None:
    client = TestClient(create_app(_settings()))

    schema = client.get("/openapi.json").json()

    scheme = schema["components"]["securitySchemes"]["AppSecretAuth"]
    assert scheme["name"] == "X-App-Secret"
    assert schema["paths"]["/health"]["get"]["security"] == []
    assert {tag["name"] for tag in schema["tags"]} >= {"Relay", "Health"}


def test_openapi_schema_is_stable_across_requests() -> None:
    client = TestClient(create_app(_settings()))

    client.get("/openapi.json")
    schema = client.get("/openapi.json").json()

    tag_names = [tag["name"] for tag in schema["tags"]]
    assert sorted(tag_names) == ["Health", "Relay"]
    assert schema["security"] == [{"AppSecretAuth": []}]
    assert "security" not in schema["paths"]["/vent"]["post"]
