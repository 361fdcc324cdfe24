"""OpenAI-compatible chat transport.

Works against any endpoint that speaks the Chat Completions protocol
(OpenAI itself, DeepSeek, Gemini's OpenAI-compatible surface, proxies).
"""

import logging
import time
from collections.abc import Callable
from typing import Any

import openai
from openai import AsyncOpenAI

from ..config import DEFAULT_MAX_TOKENS, DEFAULT_MODEL, DEFAULT_TEMPERATURE
from ..errors import TransportError
from .base import ChatTransport
from .models import ChatMessage, TransportReply

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class OpenAIChatTransport(ChatTransport):
    """Chat transport over the OpenAI Python SDK.

    Hidden design decisions:
    - OpenAI API client initialization
    - Message format conversion
    - Translation of SDK exceptions into TransportError
    - Authentication mechanism
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: str | None = None,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int | None = DEFAULT_MAX_TOKENS,
        clock: Callable[[], int] | None = None,
        client: AsyncOpenAI | None = None,
        **client_kwargs: Any
    ):
        """Initialize the transport.

        Args:
            api_key: API key for the endpoint
            model: Default model to use
            base_url: Optional custom API base URL
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate (None leaves it to the server)
            clock: Epoch-milliseconds clock used to stamp replies
            client: Pre-built client, mainly for tests
            **client_kwargs: Additional kwargs for AsyncOpenAI client
        """
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._clock = clock or _now_ms
        self._client = client or AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            **client_kwargs
        )

    @property
    def model(self) -> str:
        """Get the default model name."""
        return self._model

    async def send(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        **kwargs: Any
    ) -> TransportReply:
        """Send a chat completion request.

        Args:
            messages: Role-tagged messages
            model: Model to use (overrides default)
            **kwargs: Additional Chat Completions parameters

        Returns:
            TransportReply with generated content

        Raises:
            TransportError: On API status errors, connection failures,
                or a response without a message
        """
        model_to_use = model or self._model

        request_params: dict[str, Any] = {
            "model": model_to_use,
            "messages": [{"role": msg.role, "content": msg.content} for msg in messages],
            "temperature": self._temperature,
            "stream": False,
            **kwargs
        }
        if self._max_tokens is not None:
            request_params.setdefault("max_tokens", self._max_tokens)

        try:
            completion = await self._client.chat.completions.create(**request_params)
        except openai.APIStatusError as e:
            logger.error("Chat request to %s failed with status %s", model_to_use, e.status_code)
            raise TransportError(e.message, status_code=e.status_code) from e
        except openai.APIError as e:
            logger.error("Chat request to %s failed: %s", model_to_use, e)
            raise TransportError(str(e)) from e

        if not completion.choices or completion.choices[0].message is None:
            raise TransportError("response has no choices")

        content = completion.choices[0].message.content
        if content is None:
            raise TransportError("response message has no content")

        usage = None
        if completion.usage:
            usage = {
                "prompt_tokens": completion.usage.prompt_tokens,
                "completion_tokens": completion.usage.completion_tokens,
                "total_tokens": completion.usage.total_tokens
            }

        return TransportReply(
            content=content,
            timestamp=self._clock(),
            model=completion.model or model_to_use,
            usage=usage
        )

    async def close(self) -> None:
        """Close the OpenAI client."""
        await self._client.close()
