"""core.types

Shared DTOs and enums used throughout *cgip*.

These models live in the **core** layer so that the conversation state, the
transcript codec and the transport adapters can depend on them without
causing circular imports.  The wire models mirror the chat-completion JSON
schema; only the fields the client consumes are required.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from cgip.core.exceptions import InvalidRoleError

# ---------------------------------------------------------------------------
# Chat roles
# ---------------------------------------------------------------------------


class Role(StrEnum):
    system = 'system'
    user = 'user'
    assistant = 'assistant'


def parse_role(raw: str) -> Role:
    """Parse *raw* into a :class:`Role`.

    Matching is exact: ``"User"``, ``" user"`` and ``""`` are all rejected.
    """
    try:
        return Role(raw)
    except ValueError as exc:
        raise InvalidRoleError(f'Invalid role: {raw!r}') from exc


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


class Message(BaseModel):
    """Single chat turn."""

    role: Role
    content: str

    # Immutable value-object, content trimmed on creation
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    def __str__(self) -> str:  # pragma: no cover - cosmetic
        return f'{self.role}: {self.content}'


# ---------------------------------------------------------------------------
# Wire models (chat-completion endpoint)
# ---------------------------------------------------------------------------


class ChatRequest(BaseModel):
    model: str
    messages: list[Message]


class Usage(BaseModel):
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


class ChoiceMessage(BaseModel):
    """Message as sent by the endpoint; content is kept verbatim."""

    role: str
    content: str


class Choice(BaseModel):
    message: ChoiceMessage
    finish_reason: str | None = None
    index: int


class ChatResponse(BaseModel):
    """Success body.  Only ``choices[0].message`` is consumed by the client."""

    id: str
    object: str
    created: int
    model: str
    usage: Usage
    choices: list[Choice] = Field(..., min_length=1)


class ErrorDetail(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    """Error body: ``{"error": {"message": ...}}``."""

    error: ErrorDetail
