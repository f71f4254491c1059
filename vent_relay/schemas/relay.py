"""Pydantic schemas for the relay endpoint."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class RelayRequest(BaseModel):
    """Inbound chat request: a system directive and the user's text."""

    model_config = ConfigDict(populate_by_name=True)

    system_prompt: str = Field(
        ...,
        alias="systemPrompt",
        min_length=1,
        description="Instructions sent to the model as the system-role message.",
    )
    user_text: str = Field(
        ...,
        alias="userText",
        min_length=1,
        description="Text sent to the model as the user-role message.",
    )


class RelayResponse(BaseModel):
    """Reply envelope used for successes and errors alike."""

    reply: str = Field(
        ..., description="Model reply (trimmed), or a human-readable error message."
    )
