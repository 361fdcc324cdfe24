"""Prompt composition module for dmprompt.

Builds the outbound role-tagged message from a fragment set.
"""

from .assembler import CURRENT_PROMPT_TITLE, SECTION_ORDER, PromptComposer, assemble, section_header
from .models import ComposedPrompt

__all__ = [
    "CURRENT_PROMPT_TITLE",
    "SECTION_ORDER",
    "ComposedPrompt",
    "PromptComposer",
    "assemble",
    "section_header",
]
