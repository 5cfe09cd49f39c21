"""Model provider layer for howtfdoi.

This module contains abstractions over the backends that can answer a
shell question.  All providers implement the ``BaseProvider``
interface with a ``query`` method that accepts a system prompt and the
user's question and returns the complete answer text.

Supported providers:

* ``AnthropicProvider`` – the hosted Anthropic Messages API.  The
  system prompt carries an ephemeral cache hint so repeated questions
  reuse the cached prompt prefix.  The hint is purely a performance
  optimisation and does not change the answer.
* ``OpenAIProvider`` – the OpenAI chat completions API.
* ``LMStudioProvider`` – a local LM Studio server speaking the
  OpenAI-compatible protocol at a configurable base URL.  No API key
  is required.

Every provider streams its answer and collects the incremental text
fragments with :func:`aggregate_stream`.  Aggregation is
all-or-nothing: if the stream fails at any point, including an
interrupt from the user, the partial text is thrown away and a
:class:`ProviderError` is raised instead.  A half-formed command must
never reach the safety check or the executor.
"""

from __future__ import annotations

from typing import Any, Callable, ContextManager, Iterable, List, Optional

import anthropic
import openai

from .config import (
    CLAUDE_MODEL,
    DEFAULT_LMSTUDIO_BASE_URL,
    DEFAULT_LMSTUDIO_MODEL,
    GPT_MODEL,
    LMSTUDIO_API_KEY,
    PROVIDER_ANTHROPIC,
    PROVIDER_LMSTUDIO,
    PROVIDER_OPENAI,
    Config,
)

MAX_TOKENS = 1024


class ProviderError(Exception):
    """Raised when a provider fails to produce an answer."""


def aggregate_stream(
    open_stream: Callable[[], ContextManager[Iterable[Any]]],
    extract_text: Callable[[Any], Optional[str]],
) -> str:
    """Open a streaming call and concatenate its text fragments.

    :param open_stream: Zero-argument callable starting the request.  It
      must return a context manager that yields an iterable of stream
      events and releases the connection on exit.
    :param extract_text: Maps one event to its incremental answer text,
      or ``None`` for control and metadata events.
    :returns: The fragments joined in arrival order, untrimmed.
    :raises ProviderError: On any failure while opening or reading the
      stream.  Text received before the failure is discarded.
    """
    fragments: List[str] = []
    try:
        with open_stream() as stream:
            for event in stream:
                text = extract_text(event)
                if text:
                    fragments.append(text)
    except KeyboardInterrupt as exc:
        raise ProviderError("request cancelled") from exc
    except ProviderError:
        raise
    except Exception as exc:
        raise ProviderError(str(exc) or exc.__class__.__name__) from exc
    return "".join(fragments)


def _anthropic_text(event: Any) -> Optional[str]:
    if getattr(event, "type", None) != "content_block_delta":
        return None
    delta = event.delta
    if getattr(delta, "type", None) != "text_delta":
        return None
    return delta.text


def _openai_text(chunk: Any) -> Optional[str]:
    if not chunk.choices:
        return None
    return chunk.choices[0].delta.content


class BaseProvider:
    """Abstract base class for all providers."""

    name = "base"

    def __init__(self, model: str) -> None:
        self.model = model

    def query(self, system_prompt: str, user_query: str) -> str:
        """Return the model's complete answer to ``user_query``.

        Subclasses must implement this method.  Any failure, whether
        raised by the transport, reported by the backend mid-stream or
        caused by a cancelled request, is raised as
        :class:`ProviderError`.  No retries are attempted here.
        """
        raise NotImplementedError


class AnthropicProvider(BaseProvider):
    """Provider for Anthropic's hosted Messages API."""

    name = PROVIDER_ANTHROPIC

    def __init__(
        self,
        api_key: str,
        model: str = CLAUDE_MODEL,
        client: Optional[anthropic.Anthropic] = None,
    ) -> None:
        super().__init__(model)
        self.client = client or anthropic.Anthropic(api_key=api_key)

    def query(self, system_prompt: str, user_query: str) -> str:
        return aggregate_stream(
            lambda: self.client.messages.stream(
                model=self.model,
                max_tokens=MAX_TOKENS,
                system=[
                    {
                        "type": "text",
                        "text": system_prompt,
                        "cache_control": {"type": "ephemeral"},
                    }
                ],
                messages=[{"role": "user", "content": user_query}],
            ),
            _anthropic_text,
        )


class OpenAIProvider(BaseProvider):
    """Provider for OpenAI-compatible chat completion endpoints.

    With ``base_url`` left as ``None`` the public OpenAI endpoint is
    used.
    """

    name = PROVIDER_OPENAI

    def __init__(
        self,
        api_key: str,
        model: str = GPT_MODEL,
        base_url: Optional[str] = None,
        client: Optional[openai.OpenAI] = None,
    ) -> None:
        super().__init__(model)
        self.base_url = base_url
        self.client = client or openai.OpenAI(api_key=api_key, base_url=base_url)

    def query(self, system_prompt: str, user_query: str) -> str:
        return aggregate_stream(
            lambda: self.client.chat.completions.create(
                model=self.model,
                max_tokens=MAX_TOKENS,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_query},
                ],
                stream=True,
            ),
            _openai_text,
        )


class LMStudioProvider(OpenAIProvider):
    """Provider for a local LM Studio server.

    LM Studio exposes the OpenAI chat completions protocol, so this is
    an :class:`OpenAIProvider` pointed at the local base URL.
    """

    name = PROVIDER_LMSTUDIO

    def __init__(
        self,
        base_url: str = DEFAULT_LMSTUDIO_BASE_URL,
        model: str = DEFAULT_LMSTUDIO_MODEL,
        client: Optional[openai.OpenAI] = None,
    ) -> None:
        super().__init__(LMSTUDIO_API_KEY, model=model, base_url=base_url, client=client)


def get_provider(config: Config) -> BaseProvider:
    """Factory function to instantiate the configured provider.

    :param config: Resolved runtime configuration.
    :returns: A provider instance.
    :raises ValueError: If the provider name is unknown.
    """
    if config.provider == PROVIDER_ANTHROPIC:
        return AnthropicProvider(config.api_key, model=config.model or CLAUDE_MODEL)
    if config.provider == PROVIDER_OPENAI:
        return OpenAIProvider(config.api_key, model=config.model or GPT_MODEL)
    if config.provider == PROVIDER_LMSTUDIO:
        return LMStudioProvider(
            base_url=config.base_url or DEFAULT_LMSTUDIO_BASE_URL,
            model=config.model or DEFAULT_LMSTUDIO_MODEL,
        )
    raise ValueError(f"Unknown provider: {config.provider}")
