"""Storage backend selection for the history and draft stores.

Both stores come in the same two flavors. Backend names are matched
case-insensitively, and a database path is only meaningful for sqlite, so
callers can pass Settings values straight through for either backend.
"""

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .drafts.base import KeyValueStore
    from .history.base import HistoryStore

SUPPORTED_BACKENDS = ("memory", "sqlite")


def normalize_backend(backend: str, purpose: str) -> str:
    """Validate a backend name and return its canonical form.

    Args:
        backend: Backend name as configured (e.g. "SQLite")
        purpose: What the backend stores, used in the error message

    Raises:
        ValueError: If the backend is not supported
    """
    name = backend.strip().lower()
    if name not in SUPPORTED_BACKENDS:
        raise ValueError(
            f"Unsupported {purpose} backend: {backend}. "
            f"Supported backends: {', '.join(SUPPORTED_BACKENDS)}"
        )
    return name


def create_history_store(
    backend: str = "memory",
    path: str | Path | None = None
) -> "HistoryStore":
    """Create a history store (not yet connected).

    Args:
        backend: Backend type ("memory" or "sqlite")
        path: Database file for sqlite; ignored for memory

    Returns:
        HistoryStore instance
    """
    if normalize_backend(backend, "history") == "sqlite":
        from .history.sqlite import SQLiteHistoryStore
        return SQLiteHistoryStore(path) if path is not None else SQLiteHistoryStore()

    from .history.in_memory import InMemoryHistoryStore
    return InMemoryHistoryStore()


def create_key_value_store(
    backend: str = "memory",
    path: str | Path | None = None,
    table: str = "cache"
) -> "KeyValueStore":
    """Create a key-value store for the draft cache (not yet connected).

    Args:
        backend: Backend type ("memory" or "sqlite")
        path: Database file for sqlite; ignored for memory
        table: Table name for sqlite

    Returns:
        KeyValueStore instance
    """
    if normalize_backend(backend, "draft store") == "sqlite":
        from .drafts.sqlite import SQLiteKeyValueStore
        if path is None:
            return SQLiteKeyValueStore(table=table)
        return SQLiteKeyValueStore(path, table=table)

    from .drafts.in_memory import InMemoryKeyValueStore
    return InMemoryKeyValueStore()
