"""Chat session orchestration for dmprompt."""

from .chat import SEND_FAILED_TEXT, ChatSession

__all__ = ["ChatSession", "SEND_FAILED_TEXT"]
