"""Relay service: validate the inbound payload and unwrap the model's reply.

The HTTP layer has already applied the secret and rate-limit checks by the
time this service runs. From here on:
- the raw body is validated into a typed RelayRequest (or BadInput),
- the upstream client is called once, with no retries,
- the first choice's content is returned with surrounding whitespace trimmed.
"""

import logging
from typing import Any

from pydantic import ValidationError

from vent_relay.adapters.llm.base import AbstractChatClient
from vent_relay.core.errors import EmptyReplyAppError, ValidationAppError
from vent_relay.schemas.relay import RelayRequest

logger = logging.getLogger(__name__)

MISSING_FIELDS_MESSAGE = "Missing systemPrompt or userText."
EMPTY_REPLY_MESSAGE = "AI gave no response."


def parse_relay_request(payload: Any) -> RelayRequest:
    """Validate a decoded JSON body into a RelayRequest.

    Args:
        payload: Decoded request body (anything ``json.loads`` can produce).

    Returns:
        RelayRequest with both fields present and non-empty.

    Raises:
        ValidationAppError: If the body is not an object or a field is
            missing, null, empty or not a string.
    """
    if not isinstance(payload, dict):
        raise ValidationAppError(
            code="invalid_body",
            message=MISSING_FIELDS_MESSAGE,
            details={"context": {"body_type": type(payload).__name__}},
        )

    try:
        return RelayRequest.model_validate(payload)
    except ValidationError as exc:
        fields = sorted({str(err["loc"][0]) for err in exc.errors() if err["loc"]})
        raise ValidationAppError(
            code="missing_fields",
            message=MISSING_FIELDS_MESSAGE,
            details={"context": {"fields": fields}},
        ) from exc


class RelayService:
    """Forward a validated relay request upstream and return the reply text."""

    def __init__(self, llm: AbstractChatClient) -> None:
        self.llm = llm

    async def relay(self, request: RelayRequest) -> str:
        """Get the model's reply for ``request``.

        Args:
            request: Validated relay request.

        Returns:
            str: Reply text with surrounding whitespace removed.

        Raises:
            UpstreamAppError: Propagated from the client on upstream failure.
            EmptyReplyAppError: If the upstream payload has no reply content.
        """
        logger.info(
            "relay.upstream_call",
            extra={
                "system_prompt_chars": len(request.system_prompt),
                "user_text_chars": len(request.user_text),
            },
        )

        content = await self.llm.generate_reply(
            system_prompt=request.system_prompt,
            user_text=request.user_text,
        )
        if not content:
            raise EmptyReplyAppError(code="empty_reply", message=EMPTY_REPLY_MESSAGE)

        reply = content.strip()
        logger.info("relay.success", extra={"reply_chars": len(reply)})
        return reply
