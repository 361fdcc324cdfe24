"""Abstract base class for exchange history backends.

The abstraction hides:
- Storage format and schema
- Persistence mechanism (database file, in-memory)
- Connection management

Stores only append, list and delete; existing records are never mutated.
"""

from abc import ABC, abstractmethod

from .models import ExchangeRecord, HistoryPage


class HistoryStore(ABC):
    """Abstract exchange history store."""

    @abstractmethod
    async def connect(self) -> None:
        """Initialize the history backend."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the history backend gracefully."""

    @abstractmethod
    async def list(self, page: int = 1, limit: int = 20) -> HistoryPage:
        """List records most-recent-first.

        Args:
            page: 1-based page number
            limit: Records per page

        Raises:
            ValueError: If page or limit is below 1
            StorageError: If the backend fails
        """

    @abstractmethod
    async def append(self, record: ExchangeRecord) -> None:
        """Append one record."""

    @abstractmethod
    async def delete_by_timestamp(self, timestamp: int) -> bool:
        """Delete every record with this timestamp; return whether any existed."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""

    @staticmethod
    def _check_paging(page: int, limit: int) -> None:
        if page < 1:
            raise ValueError("page must be >= 1")
        if limit < 1:
            raise ValueError("limit must be >= 1")
