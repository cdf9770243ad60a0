"""Model provider layer for shellexa.

This module contains abstractions over the language model backends that
turn a prompt into free-form text containing a shell command.  All
providers implement the ``CommandProvider`` interface with a
``generate`` method that accepts a fully composed prompt and returns the
raw model response.  Extracting the command from that response is the
job of :mod:`shellexa.parser`, not of the provider.

Supported providers:

* ``HTTPProvider`` – posts the prompt as a single-message chat request to
  a JSON HTTP endpoint (an Ollama ``/api/chat`` URL or an
  OpenAI-compatible ``/chat/completions`` URL) using ``requests``.  Every
  call is independent, so each prompt must carry the full context.
* ``ChatSessionProvider`` – wraps the ``ollama`` Python SDK and keeps the
  conversation history for the lifetime of one session.  Follow-up
  prompts only need the new instruction.

Any transport or backend failure is surfaced as :class:`ProviderError`.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx
import ollama
import requests

from . import ShellexaError

LOGGER = logging.getLogger(__name__)

_ERROR_EXCERPT_CHARS = 300


class ProviderError(ShellexaError):
    """Raised when a provider fails to return model text."""


class CommandProvider:
    """Abstract base class for all providers."""

    #: Whether the provider remembers earlier prompts of the session.
    keeps_history = False

    name = "base"

    def generate(self, prompt: str) -> str:
        """Return the model's free-form response to ``prompt``.

        Subclasses must implement this method.  If the backend cannot be
        reached or answers with something unusable, they should raise
        :class:`ProviderError`.
        """
        raise NotImplementedError

    def discard_last_exchange(self) -> None:
        """Forget the most recent prompt/response pair.

        Called when a response held no usable command, so a retry with the
        same prompt does not pile duplicate turns into a conversation.
        Stateless providers have nothing to forget.
        """

    def close(self) -> None:
        """Release transport resources held by the provider."""


class HTTPProvider(CommandProvider):
    """Provider that sends each prompt as one JSON chat request.

    The request body follows the chat shape shared by Ollama and
    OpenAI-compatible servers::

        {"model": "...", "messages": [{"role": "user", "content": "..."}],
         "stream": false}

    The reply is read from ``message.content`` (Ollama) or
    ``choices[0].message.content`` (OpenAI-compatible).
    """

    name = "http"

    def __init__(
        self,
        model_name: str,
        endpoint: str,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not endpoint:
            raise ProviderError("HTTP provider requires an API URL")
        self.model_name = model_name
        self.endpoint = endpoint
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model_name,
            "messages": [{"role": "user", "content": prompt}],
            "stream": False,
        }

    def generate(self, prompt: str) -> str:
        LOGGER.debug(
            "provider_request",
            extra={"provider": self.name, "model": self.model_name, "prompt_length": len(prompt)},
        )
        try:
            response = self.session.post(
                self.endpoint,
                json=self._payload(prompt),
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise ProviderError(f"Request to {self.endpoint} failed: {exc}") from exc

        if not response.ok:
            excerpt = response.text[:_ERROR_EXCERPT_CHARS].strip()
            message = f"HTTP {response.status_code} from {self.endpoint}"
            if excerpt:
                message = f"{message}: {excerpt}"
            raise ProviderError(message)

        try:
            data = response.json()
        except ValueError as exc:
            raise ProviderError(f"Malformed JSON response from {self.endpoint}") from exc

        content = self._extract_content(data)
        LOGGER.debug(
            "provider_response",
            extra={"provider": self.name, "response_length": len(content)},
        )
        return content

    @staticmethod
    def _extract_content(data: Any) -> str:
        """Pull the assistant text out of a decoded chat response."""
        if not isinstance(data, dict):
            raise ProviderError("Unexpected response payload: expected a JSON object")

        error = data.get("error")
        if error:
            if isinstance(error, dict):
                error = error.get("message") or error
            raise ProviderError(f"Backend reported an error: {error}")

        message = data.get("message")
        if not isinstance(message, dict):
            choices = data.get("choices")
            if isinstance(choices, list) and choices and isinstance(choices[0], dict):
                message = choices[0].get("message")

        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            raise ProviderError("Response did not contain any message content")
        return content

    def close(self) -> None:
        self.session.close()


class ChatSessionProvider(CommandProvider):
    """Provider that holds a multi-turn chat through the Ollama SDK.

    Each call appends the prompt to the conversation and sends the whole
    history, so the model sees its earlier suggestions and the errors they
    produced.  A failed call leaves the history as it was before the call,
    and an exchange whose reply held no command is dropped again through
    :meth:`discard_last_exchange` before the prompt is retried.
    """

    name = "chat"
    keeps_history = True

    def __init__(
        self,
        model_name: str,
        endpoint: Optional[str] = None,
        client: Optional[Any] = None,
    ) -> None:
        self.model_name = model_name
        self.endpoint = endpoint
        self.client = client if client is not None else ollama.Client(host=endpoint)
        self.history: List[Dict[str, str]] = []

    def generate(self, prompt: str) -> str:
        messages = self.history + [{"role": "user", "content": prompt}]
        LOGGER.debug(
            "provider_request",
            extra={"provider": self.name, "model": self.model_name, "turns": len(messages)},
        )
        try:
            response = self.client.chat(model=self.model_name, messages=messages)
        except ollama.ResponseError as exc:
            raise ProviderError(f"Model backend error: {exc.error}") from exc
        except (ollama.RequestError, ConnectionError, httpx.HTTPError) as exc:
            raise ProviderError(f"Failed to reach the model backend: {exc}") from exc

        content = _chat_content(response)
        self.history = messages + [{"role": "assistant", "content": content}]
        return content

    def discard_last_exchange(self) -> None:
        if len(self.history) >= 2 and self.history[-1]["role"] == "assistant":
            del self.history[-2:]

    def close(self) -> None:
        close = getattr(self.client, "close", None)
        if callable(close):
            close()
            return
        # ollama.Client keeps its httpx.Client on a private attribute.
        inner = getattr(self.client, "_client", None)
        if isinstance(inner, httpx.Client):
            inner.close()


def _chat_content(response: Any) -> str:
    # The SDK returns a ChatResponse that also supports item access.
    try:
        message = response["message"]
        content = message["content"]
    except (KeyError, TypeError) as exc:
        raise ProviderError("Chat response did not contain any message content") from exc
    if not isinstance(content, str):
        raise ProviderError("Chat response did not contain any message content")
    return content


def get_provider(
    provider_name: str,
    model_name: str,
    endpoint: Optional[str] = None,
    api_key: Optional[str] = None,
) -> CommandProvider:
    """Factory function to instantiate the appropriate provider.

    :param provider_name: Name of the provider ('http', 'chat').
    :param model_name: Name of the model to use.
    :param endpoint: URL of the backend.  Required for ``http``; optional
      for ``chat`` where the SDK falls back to its default host.
    :param api_key: Optional bearer token for HTTP backends.
    :returns: A provider instance.
    :raises ValueError: If the provider name is unknown.
    """
    name = provider_name.lower().strip()
    if name == "http":
        return HTTPProvider(model_name, endpoint or "", api_key=api_key)
    if name == "chat":
        return ChatSessionProvider(model_name, endpoint)
    raise ValueError(f"Unknown provider: {provider_name}")
