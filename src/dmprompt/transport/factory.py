from typing import Any

from .base import ChatTransport
from .openai import OpenAIChatTransport

# OpenAI-compatible endpoints for providers without their own SDK here
PROVIDER_BASE_URLS = {
    "openai": None,
    "deepseek": "https://api.deepseek.com",
    "gemini": "https://generativelanguage.googleapis.com/v1beta/openai/",
}


def create_chat_transport(provider: str = "openai", **config: Any) -> ChatTransport:
    """Create a chat transport instance.

    Every supported provider is reached through its OpenAI-compatible API,
    so this only picks a default base URL.

    Args:
        provider: Provider type ('openai', 'deepseek', 'gemini')
        **config: Transport configuration
            - api_key: str (required)
            - model: str (default: 'gemini-2.5-flash')
            - base_url: str | None (overrides the provider default)
            - temperature: float (default: 0.7)
            - max_tokens: int | None (default: 2000)

    Returns:
        Initialized chat transport

    Raises:
        ValueError: If provider type is not supported
        TypeError: If required configuration is missing

    Examples:
        >>> transport = create_chat_transport(
        ...     "deepseek",
        ...     api_key="sk-...",
        ...     model="deepseek-chat"
        ... )
    """
    provider_lower = provider.lower()

    if provider_lower not in PROVIDER_BASE_URLS:
        raise ValueError(
            f"Unsupported provider: {provider}. "
            f"Supported providers: {', '.join(repr(p) for p in PROVIDER_BASE_URLS)}"
        )

    if not config.get("api_key"):
        raise TypeError(f"{provider_lower} transport requires 'api_key' in config")

    if config.get("base_url") is None:
        config["base_url"] = PROVIDER_BASE_URLS[provider_lower]

    return OpenAIChatTransport(**config)
