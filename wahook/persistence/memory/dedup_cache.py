"""
Time-bounded deduplication cache.

Guards side effects that must happen at most once per logical event under
at-least-once upstream delivery (e.g. one call rejection per call-ended
event). Expiry is driven by a single min-heap swept on every guard and by an
optional background task, instead of one timer per entry.
"""

import asyncio
import heapq
import threading
import time
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager, suppress

from wahook.core.config.settings import CALL_DEDUP_TTL_SECONDS
from wahook.core.logging.logger import get_logger


def call_key(call_id: str, phone: str) -> str:
    """Composite identity of a call-ended notification."""
    return f"{call_id}:{phone}"


class DedupCache:
    """
    Thread-safe check-and-set set with TTL.

    Storage Structure:
        _entries: {key: expires_at}
        _heap:    [(expires_at, key), ...]  # may hold stale pairs

    A heap pair is stale when the key was evicted or re-inserted with a new
    expiry; the sweep skips pairs that no longer match ``_entries``.
    """

    def __init__(
        self,
        ttl_seconds: float = CALL_DEDUP_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, float] = {}
        self._heap: list[tuple[float, str]] = []
        self._lock = threading.Lock()
        self._sweep_task: asyncio.Task | None = None
        self.logger = get_logger(__name__)

    def __len__(self) -> int:
        with self._lock:
            self._sweep_locked(self._clock())
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            self._sweep_locked(self._clock())
            return key in self._entries

    def guard(self, key: str) -> bool:
        """
        Atomically insert ``key`` if absent.

        Returns:
            True if this call is the first observer within the TTL window,
            False if the key was already present (duplicate).
        """
        with self._lock:
            now = self._clock()
            self._sweep_locked(now)
            if key in self._entries:
                return False
            expires_at = now + self.ttl_seconds
            self._entries[key] = expires_at
            heapq.heappush(self._heap, (expires_at, key))
            return True

    def evict(self, key: str) -> bool:
        """
        Remove ``key`` immediately.

        Used as a compensating rollback when the guarded action failed, so a
        genuine redelivery is not suppressed.
        """
        with self._lock:
            return self._entries.pop(key, None) is not None

    def sweep(self) -> int:
        """Drop expired entries, returning how many were removed."""
        with self._lock:
            return self._sweep_locked(self._clock())

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._heap.clear()

    def _sweep_locked(self, now: float) -> int:
        removed = 0
        while self._heap and self._heap[0][0] <= now:
            expires_at, key = heapq.heappop(self._heap)
            if self._entries.get(key) == expires_at:
                del self._entries[key]
                removed += 1
        return removed

    @asynccontextmanager
    async def guarded(self, key: str) -> AsyncIterator[bool]:
        """
        Guard a block of work.

        Yields whether the caller is the first observer. If the block raises
        after a successful guard, the key is evicted before the error
        propagates.

        Example:
            async with cache.guarded(call_key(call_id, phone)) as first:
                if first:
                    await client.reject_call(jid, call_id)
        """
        first_observer = self.guard(key)
        try:
            yield first_observer
        except BaseException:
            if first_observer:
                self.evict(key)
            raise

    # Background sweeper

    def start_sweeper(self, interval_seconds: float = 60.0) -> None:
        """Start the background expiry task on the running loop."""
        if self._sweep_task is None or self._sweep_task.done():
            self._sweep_task = asyncio.create_task(self._sweep_forever(interval_seconds))
            self.logger.info("Started dedup cache sweeper")

    async def stop_sweeper(self) -> None:
        if self._sweep_task and not self._sweep_task.done():
            self._sweep_task.cancel()
            with suppress(asyncio.CancelledError):
                await self._sweep_task
            self.logger.info("Stopped dedup cache sweeper")
        self._sweep_task = None

    async def _sweep_forever(self, interval_seconds: float) -> None:
        while True:
            await asyncio.sleep(interval_seconds)
            removed = self.sweep()
            if removed:
                self.logger.debug(f"Dedup cache sweep removed {removed} expired keys")
