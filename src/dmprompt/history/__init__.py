"""Exchange history module for dmprompt.

Persists completed exchanges and rebuilds the visible thread from them.
"""

from .base import HistoryStore
from ..backends import create_history_store
from .hydrator import (
    HISTORY_UNAVAILABLE_TEXT,
    MISSING_PROMPT_TEXT,
    UNPARSEABLE_RECORD_TEXT,
    history_error_message,
    hydrate,
    message_id,
)
from .models import ExchangeRecord, HistoryPage, Message

__all__ = [
    "ExchangeRecord",
    "HISTORY_UNAVAILABLE_TEXT",
    "HistoryPage",
    "HistoryStore",
    "MISSING_PROMPT_TEXT",
    "Message",
    "UNPARSEABLE_RECORD_TEXT",
    "create_history_store",
    "history_error_message",
    "hydrate",
    "message_id",
]
