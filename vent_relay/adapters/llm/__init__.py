"""Upstream chat-completion adapter layer."""

from vent_relay.adapters.llm.base import AbstractChatClient
from vent_relay.adapters.llm.factory import create_llm_client
from vent_relay.adapters.llm.openai_client import OpenAIChatClient

__all__ = [
    "AbstractChatClient",
    "OpenAIChatClient",
    "create_llm_client",
]
