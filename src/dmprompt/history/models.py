"""Data models for exchange history.

These models define persisted exchange records and the transient message
view built from them, independent of the storage backend used.
"""

import math
from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field

from ..fragments import FragmentSet


class ExchangeRecord(BaseModel):
    """One completed request/response pair, immutable once created.

    The timestamp is the primary and sort key. It is not guaranteed to be
    unique: two exchanges finishing in the same millisecond share it.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: int = Field(ge=0, description="Epoch milliseconds; primary and sort key")
    user_input: str = Field(description="JSON snapshot of the fragment set at submission")
    ai_response: str | None = Field(default=None, description="Model reply, if one was stored")
    created_at: str | None = Field(default=None, description="ISO creation time set by the store")

    @classmethod
    def from_exchange(
        cls,
        fragment_set: FragmentSet,
        response: str | None,
        timestamp: int
    ) -> "ExchangeRecord":
        """Snapshot a fragment set together with its reply."""
        return cls(
            timestamp=timestamp,
            user_input=fragment_set.to_json(),
            ai_response=response,
            created_at=datetime.now(timezone.utc).isoformat()
        )


class Message(BaseModel):
    """A thread entry derived from history or a live submission; never persisted."""

    model_config = ConfigDict(frozen=True)

    id: str
    role: Literal["user", "assistant"]
    content: str
    timestamp: int
    blocks: FragmentSet | None = Field(
        default=None,
        description="Full fragment snapshot, user messages only"
    )


class HistoryPage(BaseModel):
    """One page of history, most recent record first."""

    records: list[ExchangeRecord] = Field(default_factory=list)
    total: int = Field(ge=0)
    page: int = Field(ge=1)
    limit: int = Field(ge=1)

    @computed_field
    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit)
