"""Durable single-slot cache for the in-progress fragment set.

Edits are saved through a trailing-edge debounce so a typing burst turns
into one write. Storage failures never reach the editor: saves are logged
and dropped, loads fall back to an empty fragment set.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from ..config import DEFAULT_DEBOUNCE_SECONDS, DRAFT_CACHE_KEY
from ..errors import StorageError
from ..fragments import FragmentSet
from .base import KeyValueStore
from .debounce import Debouncer

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class DraftCacheEntry(BaseModel):
    """The persisted draft: latest fragment set plus when it was written."""

    key: str = DRAFT_CACHE_KEY
    current_blocks: FragmentSet = Field(default_factory=FragmentSet.empty)
    last_updated: int = Field(ge=0, description="Epoch milliseconds of the write")


class OnceInitializer:
    """Runs an async initializer exactly once, on first demand.

    Concurrent callers wait on the same lock; a failed attempt is not
    remembered, so the next call tries again.
    """

    def __init__(self, initializer: Callable[[], Awaitable[None]]):
        self._initializer = initializer
        self._lock = asyncio.Lock()
        self._done = False

    @property
    def done(self) -> bool:
        return self._done

    async def ensure(self) -> None:
        if self._done:
            return
        async with self._lock:
            if not self._done:
                await self._initializer()
                self._done = True

    def reset(self) -> None:
        self._done = False


class DraftCache:
    """Debounced, durable persistence of the current draft.

    Hidden design decisions:
    - Reserved key and entry layout
    - When the underlying store gets connected
    - Debounce window and coalescing
    """

    def __init__(
        self,
        store: KeyValueStore,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        key: str = DRAFT_CACHE_KEY,
        clock: Callable[[], int] | None = None
    ):
        """Initialize the draft cache.

        Args:
            store: Key-value store to persist into (connected lazily)
            debounce_seconds: Quiet period before a save is written
            key: Reserved storage key for the single draft slot
            clock: Epoch-milliseconds clock for last_updated
        """
        self._store = store
        self._key = key
        self._clock = clock or _now_ms
        self._initializer = OnceInitializer(store.connect)
        self._debouncer: Debouncer[FragmentSet] = Debouncer(self._write, debounce_seconds)

    @property
    def store(self) -> KeyValueStore:
        return self._store

    @property
    def pending(self) -> bool:
        """Whether a save is waiting for the debounce window to close."""
        return self._debouncer.pending

    def save(self, fragment_set: FragmentSet) -> None:
        """Schedule a write of fragment_set; returns immediately.

        A later call within the debounce window replaces this one.
        """
        self._debouncer.schedule(fragment_set)

    async def flush(self) -> None:
        """Write any pending draft now and wait for writes in flight."""
        await self._debouncer.flush()

    async def load(self) -> FragmentSet:
        """Load the persisted draft.

        Returns:
            The stored fragment set, or an empty one when nothing is stored,
            the entry is unreadable, or the store fails
        """
        try:
            await self._initializer.ensure()
            raw = await self._store.get(self._key)
        except StorageError:
            logger.exception("Failed to load draft cache")
            return FragmentSet.empty()

        if raw is None:
            logger.info("No cached draft found, starting empty")
            return FragmentSet.empty()

        try:
            entry = DraftCacheEntry.model_validate(raw)
        except PydanticValidationError:
            logger.warning("Cached draft is unreadable, starting empty", exc_info=True)
            return FragmentSet.empty()

        logger.info("Loaded cached draft last updated at %s", entry.last_updated)
        return entry.current_blocks

    async def has(self) -> bool:
        """Check whether a draft is stored.

        Raises:
            StorageError: If the store fails
        """
        await self._initializer.ensure()
        return await self._store.get(self._key) is not None

    async def clear(self) -> None:
        """Delete the stored draft and drop any pending save.

        Raises:
            StorageError: If the store fails
        """
        self._debouncer.cancel()
        await self._initializer.ensure()
        await self._store.delete(self._key)
        logger.info("Draft cache cleared")

    async def close(self) -> None:
        """Write any pending draft, then close the store."""
        await self.flush()
        if self._initializer.done:
            await self._store.disconnect()
            self._initializer.reset()

    async def _write(self, fragment_set: FragmentSet) -> None:
        entry = DraftCacheEntry(
            key=self._key,
            current_blocks=fragment_set,
            last_updated=self._clock()
        )
        try:
            await self._initializer.ensure()
            await self._store.put(self._key, entry.model_dump(mode="json"))
        except StorageError:
            logger.exception("Failed to save draft cache")
            return
        logger.debug("Draft cache saved")
