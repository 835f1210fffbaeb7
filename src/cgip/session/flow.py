"""session.flow

One invocation of the tool, minus argument parsing and rendering:

1. seed the transcript with the system prompt,
2. route piped standard input (a structured transcript is continued, any
   other text becomes a user turn),
3. replay the terminal's prior session turns,
4. append the operator's questions,
5. complete against the transport.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from cgip.core import codec
from cgip.core.conversation import ConversationState, host_platform, render_system_prompt
from cgip.core.types import Message, Role

if TYPE_CHECKING:
    from collections.abc import Iterable

    from cgip.core.abc import AbstractChatTransport
    from cgip.core.config import AppConfig
    from cgip.session.store import SessionStore

logger = logging.getLogger(__name__)


def _seed(system_prompt: str | None) -> ConversationState:
    """Start a transcript; without a prompt, the default one for this host is used."""
    if system_prompt is None:
        system_prompt = render_system_prompt(host_platform())
    return ConversationState(system_prompt)


def route_piped_input(state: ConversationState, piped_input: str) -> None:
    """Append piped text to *state*: decoded turns, or a single user turn."""
    if not piped_input.strip():
        return
    if codec.is_structured_transcript(piped_input):
        turns = codec.decode(piped_input)
        logger.debug('Continuing piped transcript with %d turns', len(turns))
        state.extend(turns)
    else:
        state.append(Role.user, piped_input)


def assemble_conversation(
    system_prompt: str | None = None,
    *,
    piped_input: str = '',
    prior_turns: Iterable[Message] = (),
    questions: Iterable[str] = (),
) -> tuple[ConversationState, list[Message]]:
    """Build the transcript for one invocation.

    Returns the state and the user turns created from *questions*, which are
    the turns a session store should persist.
    """
    state = _seed(system_prompt)
    route_piped_input(state, piped_input)
    state.extend(prior_turns)

    new_turns: list[Message] = []
    for question in questions:
        if not question.strip():
            continue
        state.append(Role.user, question)
        new_turns.append(state.messages[-1])
    return state, new_turns


def view_transcript(system_prompt: str | None, piped_input: str) -> str:
    """Human-readable transcript of piped input, without system turns."""
    state = _seed(system_prompt)
    route_piped_input(state, piped_input)
    return state.encode(exclude_system=True)


def converse(
    transport: AbstractChatTransport,
    config: AppConfig,
    system_prompt: str | None = None,
    *,
    piped_input: str = '',
    questions: Iterable[str] = (),
    store: SessionStore | None = None,
    terminal: str | None = None,
) -> str:
    """Run one completion and return the reply.

    With a *store* and *terminal*, prior turns are replayed, the new user
    turns are persisted before the request, and the reply after it succeeds.
    """
    use_store = store is not None and terminal is not None
    prior = store.read_prior_turns(terminal) if use_store else []

    state, new_turns = assemble_conversation(
        system_prompt,
        piped_input=piped_input,
        prior_turns=prior,
        questions=questions,
    )
    if use_store and new_turns:
        store.append_turns(terminal, new_turns)

    reply = transport.complete(state, config)

    if use_store:
        store.append_turns(terminal, [state.messages[-1]])
    return reply
