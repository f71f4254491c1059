"""OpenAI chat-completion adapter."""

import logging
from typing import Any

import httpx
from openai import APIResponseValidationError, APIStatusError, APITimeoutError, AsyncOpenAI

from vent_relay.adapters.llm.base import AbstractChatClient
from vent_relay.core.errors import UpstreamAppError

logger = logging.getLogger(__name__)

UPSTREAM_ERROR_PREFIX = "AI backend error: "


class OpenAIChatClient(AbstractChatClient):
    """Client for calling OpenAI chat completions and returning reply text.

    Uses the official OpenAI Python SDK with async support. Retries are
    disabled: a failed upstream call is surfaced to the caller immediately.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        *,
        base_url: str | None = None,
        max_tokens: int = 180,
        temperature: float = 0.95,
        timeout_seconds: float = 30.0,
        expose_error_body: bool = True,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize OpenAI async client.

        Args:
            api_key: OpenAI API key, sent as a bearer credential.
            model: Model name (e.g., "gpt-3.5-turbo").
            base_url: Optional custom base URL for the OpenAI API.
            max_tokens: Response length cap.
            temperature: Sampling temperature.
            timeout_seconds: Upper bound on the wait for a reply.
            expose_error_body: Put the upstream error body in error messages.
            http_client: Optional pre-built httpx client (custom transports).
        """
        self.client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_seconds,
            max_retries=0,
            http_client=http_client,
        )
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.expose_error_body = expose_error_body

    def build_request(self, *, system_prompt: str, user_text: str) -> dict[str, Any]:
        """Build the chat-completion request body."""
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_text},
            ],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }

    async def generate_reply(self, *, system_prompt: str, user_text: str) -> str | None:
        """Call chat completions and return the first choice's content.

        Args:
            system_prompt: Content of the system-role message.
            user_text: Content of the user-role message.

        Returns:
            str | None: Untrimmed reply content, or None when missing.

        Raises:
            UpstreamAppError: On non-success status or timeout.
        """
        request_params = self.build_request(system_prompt=system_prompt, user_text=user_text)

        try:
            completion = await self.client.chat.completions.create(**request_params)
        except APITimeoutError as exc:
            logger.error(
                "upstream.timeout",
                extra={"model": self.model, "timeout_s": self.client.timeout},
            )
            raise UpstreamAppError(
                code="upstream_timeout",
                message=f"{UPSTREAM_ERROR_PREFIX}upstream request timed out",
                details={"model": self.model},
            ) from exc
        except APIStatusError as exc:
            body = exc.response.text
            logger.error(
                "upstream.error",
                extra={
                    "model": self.model,
                    "upstream_status": exc.status_code,
                    "upstream_body": body,
                },
            )
            shown = body if self.expose_error_body else f"upstream returned status {exc.status_code}"
            raise UpstreamAppError(
                code="upstream_error",
                message=f"{UPSTREAM_ERROR_PREFIX}{shown}",
                details={"http_status": exc.status_code, "model": self.model},
            ) from exc
        except APIResponseValidationError as exc:
            logger.error(
                "upstream.malformed_response",
                extra={"model": self.model, "error_msg": str(exc)},
            )
            return None

        return _extract_content(completion)


def _extract_content(completion: Any) -> str | None:
    """Return ``choices[0].message.content`` or None if any part is missing."""
    choices = getattr(completion, "choices", None)
    if not choices:
        logger.error("upstream.no_choices", extra={"payload_type": type(completion).__name__})
        return None

    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None)
    if not isinstance(content, str):
        logger.error("upstream.no_content", extra={"choice_count": len(choices)})
        return None
    return content
