"""Draft cache module for dmprompt.

Keeps the unsent fragment set across sessions with debounced writes.
"""

from .base import KeyValueStore
from .cache import DraftCache, DraftCacheEntry, OnceInitializer
from .debounce import Debouncer
from ..backends import create_key_value_store

__all__ = [
    "Debouncer",
    "DraftCache",
    "DraftCacheEntry",
    "KeyValueStore",
    "OnceInitializer",
    "create_key_value_store",
]
