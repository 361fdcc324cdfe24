from .base import ChatTransport
from .factory import create_chat_transport
from .models import ChatMessage, TransportReply
from .openai import OpenAIChatTransport

__all__ = [
    "ChatTransport",
    "create_chat_transport",
    "ChatMessage",
    "TransportReply",
    "OpenAIChatTransport",
]
