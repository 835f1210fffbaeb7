"""core.codec

YAML form of a transcript, used for exporting, persisting and piping::

    - role: system
      content: You are a helpful command line assistant ...
    - role: user
      content: why does my build fail?

The same form is what :func:`is_structured_transcript` recognises on standard
input, so that a previously exported transcript piped back into the tool is
continued rather than treated as a new question.

An entry needs string ``role`` and ``content`` values; other keys are ignored.
An entry whose content is not a string (``content: 42``) does not count, so
such input is handled as free-form text.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import yaml

from cgip.core.exceptions import TranscriptDecodeError
from cgip.core.types import Message, Role, parse_role

if TYPE_CHECKING:
    from collections.abc import Iterable

_FIELDS = ('role', 'content')


def _load(text: str) -> Any:
    return yaml.safe_load(text)


def _is_turn(item: Any) -> bool:
    return (
        isinstance(item, dict)
        and all(isinstance(item.get(key), str) for key in _FIELDS)
    )


def is_structured_transcript(text: str) -> bool:
    """Return True iff *text* is a non-empty YAML list of ``{role, content}`` maps.

    Role values are not checked here; a transcript with a bad role is still
    recognised as one and then rejected by :func:`decode`.
    """
    try:
        data = _load(text)
    except yaml.YAMLError:
        return False
    return isinstance(data, list) and bool(data) and all(_is_turn(item) for item in data)


def decode(text: str) -> list[Message]:
    """Parse structured transcript text into messages, preserving order.

    Raises
    ------
    TranscriptDecodeError
        If *text* is not YAML or does not have the transcript shape.
    InvalidRoleError
        If any entry carries an unknown role; the whole decode fails.

    """
    try:
        data = _load(text)
    except yaml.YAMLError as exc:
        raise TranscriptDecodeError(f'Transcript is not valid YAML: {exc}') from exc

    if not isinstance(data, list):
        raise TranscriptDecodeError('Transcript must be a list of {role, content} entries')

    messages: list[Message] = []
    for position, item in enumerate(data):
        if not _is_turn(item):
            raise TranscriptDecodeError(f'Entry {position} is not a {{role, content}} mapping')
        messages.append(Message(role=parse_role(item['role']), content=item['content']))
    return messages


def encode(messages: Iterable[Message], *, exclude_system: bool = False) -> str:
    """Inverse of :func:`decode`; deterministic and order-preserving."""
    entries = [
        {'role': message.role.value, 'content': message.content}
        for message in messages
        if not (exclude_system and message.role is Role.system)
    ]
    return yaml.safe_dump(entries, sort_keys=False, allow_unicode=True, default_flow_style=False)
