"""OpenAPI schema additions: the ``X-App-Secret`` scheme and endpoint tags."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

SECURITY_SCHEME_NAME = "AppSecretAuth"

OPENAPI_TAGS = [
    {"name": "Relay", "description": "Forward a system prompt and user text to the chat model."},
    {"name": "Health", "description": "Liveness checks."},
]

# Paths served without the shared secret
PUBLIC_PATHS = frozenset({"/health"})


def apply_openapi_customizations(app: FastAPI) -> None:
    """Wrap ``app.openapi`` so the cached schema documents the shared secret.

    Every operation requires ``X-App-Secret`` except those under
    ``PUBLIC_PATHS``, which get an empty ``security`` list.
    """
    build_schema = app.openapi

    def relay_openapi() -> Dict[str, Any]:
        schema = build_schema()
        components = schema.setdefault("components", {})
        components.setdefault("securitySchemes", {})[SECURITY_SCHEME_NAME] = {
            "type": "apiKey",
            "in": "header",
            "name": "X-App-Secret",
            "description": "Shared secret, required when APP_SECRET is configured.",
        }
        schema["security"] = [{SECURITY_SCHEME_NAME: []}]

        known_tags = {tag["name"] for tag in schema.get("tags", [])}
        schema.setdefault("tags", []).extend(
            tag for tag in OPENAPI_TAGS if tag["name"] not in known_tags
        )

        for path in schema.get("paths", {}).keys() & PUBLIC_PATHS:
            for operation in schema["paths"][path].values():
                operation["security"] = []
        return schema

    app.openapi = relay_openapi  # type: ignore[assignment]
