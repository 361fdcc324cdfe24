"""Abstract base class for key-value storage backends.

This module defines the interface the draft cache persists through.
The abstraction hides:
- Storage format (JSON text, native objects)
- Persistence mechanism (file, database, in-memory)
- Connection management
"""

from abc import ABC, abstractmethod
from typing import Any


class KeyValueStore(ABC):
    """Abstract asynchronous key-value store.

    Values are JSON-compatible mappings. Backend failures surface as
    StorageError.
    """

    @abstractmethod
    async def connect(self) -> None:
        """Initialize the store (create files, schema, connections)."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the store gracefully."""

    @abstractmethod
    async def get(self, key: str) -> dict[str, Any] | None:
        """Get the value stored under key, or None if absent."""

    @abstractmethod
    async def put(self, key: str, value: dict[str, Any]) -> None:
        """Store value under key, replacing any previous value."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove key if present."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""
