"""Pydantic request/response models."""
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

# Roles a visitor may contribute. Anything else (notably "system") is dropped.
ALLOWED_ROLES = frozenset({"user", "assistant"})


class ConversationTurn(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"]
    # Passed through as given: a string, or the provider's multi-part content list.
    content: Any


class SystemTurn(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Literal["system"] = "system"
    content: str


class CompletionRequest(BaseModel):
    """Outbound payload for the completion provider. Built once per request."""

    model_config = ConfigDict(frozen=True)

    model: str
    temperature: float
    max_tokens: int
    messages: tuple[SystemTurn | ConversationTurn, ...]


class ChatReply(BaseModel):
    reply: str


class ErrorBody(BaseModel):
    error: str
