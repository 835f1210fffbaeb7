"""core.abc

Abstract base class that *all* chat transports must implement.

Design goals
============
1. **Transport-agnostic public API** - callers interact exclusively via
    `complete()` passing a `ConversationState` and an `AppConfig`.
    They never touch request payloads or raw bodies.
2. **One exchange per call** - `complete()` sends the whole transcript once,
    with no retry, and appends exactly one assistant turn on success.  On any
    failure it raises and leaves the transcript unchanged.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from cgip.core.exceptions import MalformedResponseError
from cgip.core.response import ApiError, Completion, Unparseable, decode_completion
from cgip.core.types import ChatRequest, Role

if TYPE_CHECKING:
    from cgip.core.config import AppConfig
    from cgip.core.conversation import ConversationState

logger = logging.getLogger(__name__)


class AbstractChatTransport(ABC):
    """Chat-completion transport interface."""

    # ------------------------------------------------------------------
    # Public synchronous API
    # ------------------------------------------------------------------

    def complete(self, state: ConversationState, config: AppConfig) -> str:
        """Send the full transcript and return the assistant's reply.

        Subclasses **must not** override this - override `_invoke()` instead.

        Raises
        ------
        CredentialMissingError
            No credential is available to the transport.
        NetworkFailureError
            The exchange itself failed.
        MalformedResponseError
            The API reported an error, or the body matched neither schema.

        """
        request = ChatRequest(model=config.model, messages=list(state.messages))
        logger.debug('Requesting completion from %s with %d turns', request.model, len(request.messages))

        match decode_completion(self._invoke(request)):
            case Completion() as completion:
                reply = completion.content
            case ApiError(message=message):
                raise MalformedResponseError(message, upstream_message=message)
            case Unparseable(reason=reason):
                raise MalformedResponseError(f'Error while parsing response object: {reason}')

        state.append(Role.assistant, reply)
        return reply

    # ------------------------------------------------------------------
    # Methods to implement in concrete transports
    # ------------------------------------------------------------------

    @abstractmethod
    def _invoke(self, request: ChatRequest) -> str:
        """Perform the **blocking** exchange and return the raw response body."""

    # ------------------------------------------------------------------
    # Helper - string representation
    # ------------------------------------------------------------------

    def __repr__(self) -> str:  # pragma: no cover - cosmetic
        return f'<{self.__class__.__name__}>'
