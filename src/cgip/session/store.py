"""session.store

Interface of the session store: persistence that lets a transcript continue
across separate invocations from the same terminal.  The on-disk store lives
outside this package; :class:`InMemorySessionStore` is a reference
implementation for embedding and tests.
"""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Sequence

    from cgip.core.types import Message


class SessionStore(Protocol):
    def read_prior_turns(self, terminal: str) -> list[Message]: ...

    def append_turns(self, terminal: str, turns: Sequence[Message]) -> None: ...


class InMemorySessionStore:
    """Dictionary-backed store keyed by terminal identity."""

    def __init__(self) -> None:
        self._turns: defaultdict[str, list[Message]] = defaultdict(list)

    def read_prior_turns(self, terminal: str) -> list[Message]:
        return list(self._turns.get(terminal, ()))

    def append_turns(self, terminal: str, turns: Sequence[Message]) -> None:
        self._turns[terminal].extend(turns)
