"""adapters.openai_adapter

Concrete transport that bridges :class:`cgip.core.abc.AbstractChatTransport`
with the **OpenAI Chat Completions** HTTP API.

The SDK is used for the HTTP exchange only (``POST /chat/completions`` with
bearer auth and a JSON body).  Response bodies are returned raw, for success
and error statuses alike, so that :mod:`cgip.core.response` decides what they
mean.  SDK retries are disabled.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

import openai
from dotenv import load_dotenv

from cgip.core.abc import AbstractChatTransport
from cgip.core.exceptions import CredentialMissingError, NetworkFailureError

if TYPE_CHECKING:
    import httpx

    from cgip.core.types import ChatRequest

load_dotenv()

logger = logging.getLogger(__name__)

API_KEY_ENV = 'OPENAI_API_KEY'
DEFAULT_BASE_URL = 'https://api.openai.com/v1'
DEFAULT_TIMEOUT_SEC = 60.0

# ---------------------------------------------------------------------------
# Transport implementation
# ---------------------------------------------------------------------------


class OpenAITransport(AbstractChatTransport):
    """Transport for the OpenAI chat-completion endpoint."""

    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SEC,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url
        self._timeout = timeout
        self._http_client = http_client
        self._client: openai.OpenAI | None = None

    def _resolve_api_key(self) -> str:
        api_key = self._api_key or os.getenv(API_KEY_ENV)
        if not api_key:
            raise CredentialMissingError(f'Missing {API_KEY_ENV} environment variable')
        return api_key

    # ------------------------------------------------------------------
    # Synchronous path
    # ------------------------------------------------------------------

    @property
    def client(self) -> openai.OpenAI:
        """SDK client, built on first use so the credential is read at call time."""
        if self._client is None:
            self._client = openai.OpenAI(
                api_key=self._resolve_api_key(),
                base_url=self._base_url,
                timeout=self._timeout,
                max_retries=0,
                http_client=self._http_client,
            )
        return self._client

    def close(self) -> None:
        """Release the underlying HTTP connection pool."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def _invoke(self, request: ChatRequest) -> str:
        client = self.client
        payload = request.model_dump(mode='json')

        try:
            raw = client.chat.completions.with_raw_response.create(
                model=payload['model'],
                messages=payload['messages'],
            )
        except openai.APIStatusError as exc:
            # Error statuses still carry a body worth decoding.
            logger.debug('Endpoint answered with HTTP %s', exc.status_code)
            return exc.response.text
        except openai.APIConnectionError as exc:  # includes APITimeoutError
            raise NetworkFailureError(f'Error in response: {exc}') from exc
        except openai.OpenAIError as exc:  # generic fallback
            raise NetworkFailureError('Upstream provider error') from exc

        return raw.http_response.text
