"""Trailing-edge debounce for async writes.

A single pending slot plus a cancel-and-reschedule timer: each schedule()
call replaces the pending value and restarts the timer, so a burst of calls
produces one callback with the last value. Once the timer has fired, the
callback runs to completion even if new values are scheduled meanwhile.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_EMPTY = object()


class Debouncer(Generic[T]):
    """Coalesces rapid calls into one deferred async callback."""

    def __init__(self, callback: Callable[[T], Awaitable[None]], delay: float):
        if delay < 0:
            raise ValueError("delay must be >= 0")
        self._callback = callback
        self._delay = delay
        self._pending: object = _EMPTY
        self._timer: asyncio.Task[None] | None = None
        self._in_flight: set[asyncio.Task[None]] = set()

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def pending(self) -> bool:
        """Whether a value is waiting for its timer."""
        return self._pending is not _EMPTY

    def schedule(self, value: T) -> None:
        """Replace the pending value and restart the timer.

        Must be called from within a running event loop.
        """
        self._cancel_timer()
        self._pending = value
        self._timer = asyncio.get_running_loop().create_task(self._fire_later())
        self._in_flight.add(self._timer)
        self._timer.add_done_callback(self._in_flight.discard)

    async def flush(self) -> None:
        """Run the pending callback now and wait for every write in flight."""
        self._cancel_timer()
        value = self._take_pending()
        if value is not _EMPTY:
            await self._invoke(value)  # type: ignore[arg-type]
        if self._in_flight:
            await asyncio.gather(*self._in_flight, return_exceptions=True)

    def cancel(self) -> None:
        """Drop the pending value without running the callback."""
        self._cancel_timer()
        self._pending = _EMPTY

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._in_flight.discard(self._timer)
            self._timer = None

    def _take_pending(self) -> object:
        value, self._pending = self._pending, _EMPTY
        return value

    async def _fire_later(self) -> None:
        await asyncio.sleep(self._delay)
        # Past this point the write is in flight and no longer cancellable
        self._timer = None
        value = self._take_pending()
        if value is not _EMPTY:
            await self._invoke(value)  # type: ignore[arg-type]

    async def _invoke(self, value: T) -> None:
        try:
            await self._callback(value)
        except Exception:
            logger.exception("Debounced callback failed")
