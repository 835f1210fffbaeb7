"""core.conversation

Ordered transcript of turns for one invocation.

The first turn is always the system prompt supplied at construction; the
transcript is append-only afterwards.  Insertion order is chronological order
and is the order sent to the completion endpoint.
"""

from __future__ import annotations

import platform
from typing import TYPE_CHECKING, Self

from cgip.core import codec
from cgip.core.types import Message, Role

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

SYSTEM_PROMPT_TEMPLATE = """
You are a helpful command line assistant running in a terminal on {platform}, users can
pass you the standard output from their command line and you will try and
help them debug their issues or answer questions. Since you are a command line tool,
you write to standard out. So it is possible for your output to be directly executed
in the shell if your output is piped to it.
"""


def host_platform() -> str:
    """Return the lower-cased OS name (``linux``, ``darwin``, ``windows``)."""
    return platform.system().lower() or 'unknown'


def render_system_prompt(platform_name: str, template: str = SYSTEM_PROMPT_TEMPLATE) -> str:
    return template.format(platform=platform_name).strip()


class ConversationState:
    """Append-only transcript seeded with a system turn."""

    def __init__(self, system_prompt: str) -> None:
        self._messages: list[Message] = [Message(role=Role.system, content=system_prompt)]

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def append(self, role: Role, text: str) -> Self:
        """Append one turn; content is trimmed.  Returns ``self`` for chaining."""
        if not isinstance(role, Role):
            raise TypeError('role must be a parsed Role')
        self._messages.append(Message(role=role, content=text))
        return self

    def extend(self, messages: Iterable[Message]) -> Self:
        for message in messages:
            self.append(message.role, message.content)
        return self

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    def encode(self, *, exclude_system: bool = False) -> str:
        """Structured transcript text, optionally without system turns."""
        return codec.encode(self._messages, exclude_system=exclude_system)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))

    def __repr__(self) -> str:  # pragma: no cover - cosmetic
        return f'<{self.__class__.__name__} turns={len(self._messages)}>'
