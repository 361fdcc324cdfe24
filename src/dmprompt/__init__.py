"""
dmprompt: sectioned prompt composition and durable conversation state for a
tabletop DM assistant.

Each module hides one design decision: how fragments are modeled, how they
are serialized into a prompt, how drafts and exchanges are persisted, and
how the prompt reaches the model.
"""

__version__ = "0.1.0"

from .composer import ComposedPrompt, PromptComposer, assemble
from .drafts import DraftCache, create_key_value_store
from .errors import DMPromptError, ParseError, StorageError, TransportError, ValidationError
from .fragments import FragmentSet, StructuredFragment, TextFragment, parse_fragment
from .history import ExchangeRecord, HistoryStore, Message, create_history_store, hydrate
from .session import ChatSession
from .tokens import estimate_tokens
from .transport import ChatMessage, ChatTransport, TransportReply, create_chat_transport

__all__ = [
    "ChatMessage",
    "ChatSession",
    "ChatTransport",
    "ComposedPrompt",
    "DMPromptError",
    "DraftCache",
    "ExchangeRecord",
    "FragmentSet",
    "HistoryStore",
    "Message",
    "ParseError",
    "PromptComposer",
    "StorageError",
    "StructuredFragment",
    "TextFragment",
    "TransportError",
    "TransportReply",
    "ValidationError",
    "assemble",
    "create_chat_transport",
    "create_history_store",
    "create_key_value_store",
    "estimate_tokens",
    "hydrate",
    "parse_fragment",
]
