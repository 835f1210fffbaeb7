from __future__ import annotations

import json
import platform

import pytest

from cgip.core.abc import AbstractChatTransport
from cgip.core.config import AppConfig
from cgip.core.exceptions import InvalidRoleError, MalformedResponseError
from cgip.core.types import ChatRequest, Message, Role
from cgip.session.flow import assemble_conversation, converse, view_transcript
from cgip.session.store import InMemorySessionStore

PIPED_TRANSCRIPT = """\
- role: user
  content: what is my ip?
- role: assistant
  content: Run `ip addr`.
"""


class EchoTransport(AbstractChatTransport):
    """Replies with the last user turn, upper-cased."""

    def __init__(self) -> None:
        self.sent: list[ChatRequest] = []

    def _invoke(self, request: ChatRequest) -> str:
        self.sent.append(request)
        last = request.messages[-1].content.upper()
        return json.dumps({
            'id': 'x',
            'object': 'chat.completion',
            'created': 0,
            'model': request.model,
            'usage': {'prompt_tokens': 1, 'completion_tokens': 1, 'total_tokens': 2},
            'choices': [{'message': {'role': 'assistant', 'content': last}, 'finish_reason': 'stop', 'index': 0}],
        })


class ErrorTransport(AbstractChatTransport):
    def _invoke(self, request: ChatRequest) -> str:  # noqa: ARG002
        return '{"error": {"message": "model overloaded"}}'


def test_free_form_stdin_becomes_user_turn() -> None:
    state, new_turns = assemble_conversation('sys', piped_input='bash: foo: command not found\n')
    assert [(m.role, m.content) for m in state] == [
        (Role.system, 'sys'),
        (Role.user, 'bash: foo: command not found'),
    ]
    assert new_turns == []


def test_structured_stdin_is_continued() -> None:
    state, _ = assemble_conversation('sys', piped_input=PIPED_TRANSCRIPT, questions=['and ipv6?'])
    assert [m.role for m in state] == [Role.system, Role.user, Role.assistant, Role.user]
    assert state.messages[2].content == 'Run `ip addr`.'


def test_prior_turns_follow_stdin_and_precede_questions() -> None:
    prior = [Message(role=Role.user, content='earlier'), Message(role=Role.assistant, content='reply')]
    state, new_turns = assemble_conversation(
        'sys',
        piped_input='stdin text',
        prior_turns=prior,
        questions=['query', '', 'file contents'],
    )
    assert [m.content for m in state] == ['sys', 'stdin text', 'earlier', 'reply', 'query', 'file contents']
    assert [m.content for m in new_turns] == ['query', 'file contents']


def test_bad_role_in_piped_transcript_fails() -> None:
    with pytest.raises(InvalidRoleError):
        assemble_conversation('sys', piped_input='- role: oracle\n  content: hi\n')


def test_view_transcript_hides_system() -> None:
    text = view_transcript('sys', PIPED_TRANSCRIPT)
    assert 'sys' not in text
    assert 'what is my ip?' in text


def test_converse_uses_and_updates_session_store() -> None:
    store = InMemorySessionStore()
    store.append_turns('/dev/pts/1', [Message(role=Role.user, content='hello')])
    transport = EchoTransport()

    reply = converse(
        transport,
        AppConfig(model='gpt-4o'),
        'sys',
        questions=['status?'],
        store=store,
        terminal='/dev/pts/1',
    )

    assert reply == 'STATUS?'
    assert [m.content for m in transport.sent[0].messages] == ['sys', 'hello', 'status?']
    assert [m.content for m in store.read_prior_turns('/dev/pts/1')] == ['hello', 'status?', 'STATUS?']
    assert store.read_prior_turns('/dev/pts/2') == []


def test_converse_failure_persists_only_user_turns() -> None:
    store = InMemorySessionStore()
    with pytest.raises(MalformedResponseError, match='model overloaded'):
        converse(ErrorTransport(), AppConfig(), 'sys', questions=['hi'], store=store, terminal='tty1')
    assert [m.role for m in store.read_prior_turns('tty1')] == [Role.user]


def test_converse_without_store() -> None:
    assert converse(EchoTransport(), AppConfig(), 'sys', piped_input='ping') == 'PING'


def test_default_system_prompt_names_host(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(platform, 'system', lambda: 'Linux')
    state, _ = assemble_conversation(questions=['uptime?'])
    assert state.messages[0].role is Role.system
    assert 'running in a terminal on linux' in state.messages[0].content
