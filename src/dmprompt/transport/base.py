from abc import ABC, abstractmethod
from typing import Any

from .models import ChatMessage, TransportReply


class ChatTransport(ABC):
    """Abstract base class for chat transports.

    This module hides the design decision of how a composed prompt reaches
    the model. Implementations must handle:
    - API client setup and authentication
    - Request/response format conversion
    - Timeouts and retries
    - Mapping every failure to TransportError

    Model selection and sampling parameters are transport configuration;
    the composer never sees them.

    Supports async context manager protocol for proper resource cleanup:
        async with transport:
            reply = await transport.send(messages, "gemini-2.5-flash")
    """

    @abstractmethod
    async def send(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        **kwargs: Any
    ) -> TransportReply:
        """Send messages and wait for the model's reply.

        Args:
            messages: Role-tagged messages, system message first if present
            model: Model to use (None uses the transport's default)
            **kwargs: Transport-specific parameters

        Returns:
            TransportReply with the content and a receive timestamp

        Raises:
            TransportError: On non-success status or an unusable response body
        """

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections or resources."""

    async def __aenter__(self) -> "ChatTransport":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit with automatic cleanup.

        Note: Suppresses "Event loop is closed" errors during cleanup.
        This is a known harmless race condition in httpx/anyio cleanup:
        https://github.com/encode/httpx/issues/914
        """
        try:
            await self.close()
        except RuntimeError as e:
            if "Event loop is closed" not in str(e):
                raise
