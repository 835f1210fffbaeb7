from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from cgip.core.response import ApiError, Completion, Unparseable, decode_completion


def _success(*contents: str) -> str:
    return json.dumps({
        'id': 'chatcmpl-1',
        'object': 'chat.completion',
        'created': 1700000000,
        'model': 'gpt-4',
        'usage': {'prompt_tokens': 12, 'completion_tokens': 5, 'total_tokens': 17},
        'choices': [
            {'message': {'role': 'assistant', 'content': c}, 'finish_reason': 'stop', 'index': i}
            for i, c in enumerate(contents)
        ],
    })


def test_success_takes_first_choice() -> None:
    decoded = decode_completion(_success('first', 'second'))
    assert isinstance(decoded, Completion)
    assert decoded.content == 'first'
    assert decoded.response.usage.total_tokens == 17  # noqa: PLR2004


def test_error_body_is_tagged() -> None:
    decoded = decode_completion('{"error": {"message": "rate limit exceeded", "type": "requests"}}')
    assert decoded == ApiError(message='rate limit exceeded')


def test_empty_choices_is_unparseable() -> None:
    assert isinstance(decode_completion(_success()), Unparseable)


def test_garbage_is_unparseable() -> None:
    decoded = decode_completion('<html>502 Bad Gateway</html>')
    assert isinstance(decoded, Unparseable)
    assert decoded.reason


def test_tagged_results_are_frozen() -> None:
    decoded = decode_completion('{"error": {"message": "quota"}}')
    with pytest.raises(ValidationError):
        decoded.message = 'other'  # type: ignore[misc]


def test_choice_content_is_not_trimmed() -> None:
    decoded = decode_completion(_success('  spaced out \n'))
    assert isinstance(decoded, Completion)
    assert decoded.content == '  spaced out \n'
