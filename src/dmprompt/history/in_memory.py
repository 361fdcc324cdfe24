"""In-memory history backend.

Simple list-based storage for session-only history.
Data is lost when the application exits.
"""

from .base import HistoryStore
from .models import ExchangeRecord, HistoryPage


class InMemoryHistoryStore(HistoryStore):
    """In-memory history store (session-only).

    Suitable for single-session use or testing.
    """

    def __init__(self, records: list[ExchangeRecord] | None = None):
        self._records: list[ExchangeRecord] = list(records or [])

    async def connect(self) -> None:
        """Initialize memory (no-op for in-memory)."""

    async def disconnect(self) -> None:
        """Close memory (no-op for in-memory)."""

    async def list(self, page: int = 1, limit: int = 20) -> HistoryPage:
        self._check_paging(page, limit)
        # Later appends win ties, matching insertion order reversed
        ordered = sorted(
            enumerate(self._records),
            key=lambda pair: (pair[1].timestamp, pair[0]),
            reverse=True
        )
        offset = (page - 1) * limit
        records = [record for _, record in ordered[offset:offset + limit]]
        return HistoryPage(records=records, total=len(self._records), page=page, limit=limit)

    async def append(self, record: ExchangeRecord) -> None:
        self._records.append(record)

    async def delete_by_timestamp(self, timestamp: int) -> bool:
        before = len(self._records)
        self._records = [r for r in self._records if r.timestamp != timestamp]
        return len(self._records) != before

    @property
    def backend_type(self) -> str:
        return "memory"
