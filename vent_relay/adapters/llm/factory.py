"""Factory for the upstream chat client."""

import httpx

from vent_relay.adapters.llm.base import AbstractChatClient
from vent_relay.adapters.llm.openai_client import OpenAIChatClient
from vent_relay.core.config import Settings
from vent_relay.core.errors import ConfigurationError


def create_llm_client(
    settings: Settings,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> AbstractChatClient:
    """Instantiate the OpenAI chat client from settings.

    Args:
        settings: Validated application settings.
        http_client: Optional httpx client handed to the SDK.

    Returns:
        AbstractChatClient: Configured client instance.

    Raises:
        ConfigurationError: If the upstream API key is empty.
    """
    upstream = settings.upstream
    if not upstream.api_key:
        raise ConfigurationError(
            code="llm_missing_api_key",
            message="OpenAI upstream requires OPENAI_API_KEY environment variable",
        )

    return OpenAIChatClient(
        api_key=upstream.api_key,
        model=upstream.model,
        base_url=upstream.base_url,
        max_tokens=upstream.max_tokens,
        temperature=upstream.temperature,
        timeout_seconds=upstream.timeout_seconds,
        expose_error_body=settings.app.expose_upstream_errors,
        http_client=http_client,
    )
