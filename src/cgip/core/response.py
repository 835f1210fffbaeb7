"""core.response

Single-pass decoding of a chat-completion response body.

The endpoint answers with either the success schema or the error schema.
Both are tried in one validation pass over the union, and the outcome is a
tagged result the transport can branch on:

* :class:`Completion` … body matched :class:`~cgip.core.types.ChatResponse`
* :class:`ApiError` … body matched :class:`~cgip.core.types.ErrorResponse`
* :class:`Unparseable` … body matched neither
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from cgip.core.types import ChatResponse, ErrorResponse

logger = logging.getLogger(__name__)

_BODY_ADAPTER: TypeAdapter[ChatResponse | ErrorResponse] = TypeAdapter(ChatResponse | ErrorResponse)


class Completion(BaseModel):
    response: ChatResponse

    model_config = ConfigDict(frozen=True)

    @property
    def content(self) -> str:
        """Content of the first choice; further choices are ignored."""
        return self.response.choices[0].message.content


class ApiError(BaseModel):
    message: str

    model_config = ConfigDict(frozen=True)


class Unparseable(BaseModel):
    reason: str

    model_config = ConfigDict(frozen=True)


DecodedResponse = Completion | ApiError | Unparseable


def decode_completion(body: str | bytes) -> DecodedResponse:
    try:
        parsed = _BODY_ADAPTER.validate_json(body)
    except ValidationError as exc:
        logger.debug('Response body matched neither schema')
        return Unparseable(reason=str(exc))

    if isinstance(parsed, ErrorResponse):
        logger.debug('Response body is an API error')
        return ApiError(message=parsed.error.message)
    return Completion(response=parsed)
