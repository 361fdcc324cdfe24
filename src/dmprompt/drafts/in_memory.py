"""In-memory key-value backend.

Simple dict-based storage. Data is lost when the application exits.
"""

import copy
from typing import Any

from .base import KeyValueStore


class InMemoryKeyValueStore(KeyValueStore):
    """In-memory key-value store (process-only).

    Values are deep-copied on the way in and out so callers never share
    state with the store. Suitable for testing.
    """

    def __init__(self) -> None:
        self._data: dict[str, dict[str, Any]] = {}

    async def connect(self) -> None:
        """Initialize memory (no-op for in-memory)."""

    async def disconnect(self) -> None:
        """Close memory (no-op for in-memory)."""

    async def get(self, key: str) -> dict[str, Any] | None:
        value = self._data.get(key)
        return copy.deepcopy(value) if value is not None else None

    async def put(self, key: str, value: dict[str, Any]) -> None:
        self._data[key] = copy.deepcopy(value)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    @property
    def backend_type(self) -> str:
        return "memory"
