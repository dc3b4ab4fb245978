"""
Response Cache

A process-wide store of key -> (value, freshness, subscriber count).

This service handles:
1. Serving cached responses while they are inside their dedupe window
2. Sharing one in-flight request between concurrent readers of a key
3. Invalidating entries by predicate, and refetching the ones in use
4. Focus/reconnect revalidation for policies that ask for it

CRITICAL: After invalidate() returns, no matching entry is served as
fresh again until a request started after the invalidation completes.
A request that was already in flight still stores its result, but
stores it as stale.

The cache never retries. A failed fetch leaves its error on the entry
until the next explicit revalidation or the dedupe window runs out.

THREADING: One cache may be shared by several threads, each driving
its own event loop (Streamlit runs every session on its own thread).
The entry map and each entry's freshness fields are only touched under
one lock. In-flight tasks are never shared across loops.

The map is bounded: once it holds more than max_entries keys, settled
entries nobody subscribes to and whose dedupe window has run out are
dropped.
"""

import asyncio
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional

from fintio.cache.keys import CacheKey, KeyPredicate
from fintio.telemetry import get_logger


Fetcher = Callable[[CacheKey], Awaitable[Any]]


@dataclass(frozen=True)
class CachePolicy:
    """
    Per-resource freshness policy.

    dedupe_interval is in seconds. Zero means every load revalidates,
    though concurrent loads still share one request.
    """
    dedupe_interval: float = 2.0
    revalidate_on_focus: bool = False
    revalidate_on_reconnect: bool = True


DEFAULT_POLICY = CachePolicy()


@dataclass
class CacheEntry:
    """State of one key. Readers see data and error; the rest is bookkeeping."""
    key: CacheKey
    policy: CachePolicy = DEFAULT_POLICY
    data: Any = None
    error: Optional[BaseException] = None
    fetched_at: Optional[float] = None
    stale: bool = False
    subscribers: int = 0
    generation: int = 0
    fetcher: Optional[Fetcher] = field(default=None, repr=False)
    inflight: Optional[asyncio.Task] = field(default=None, repr=False)
    inflight_generation: int = -1

    @property
    def has_settled(self) -> bool:
        """Has at least one request for this key finished?"""
        return self.fetched_at is not None

    @property
    def is_validating(self) -> bool:
        return self.inflight is not None and not self.inflight.done()


class ResponseCache:
    """
    Explicit replacement for an implicit client-side request cache.

    Readers call get(key, fetcher, policy); writers call
    invalidate(predicate). Nothing else touches the entries.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int = 1024,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._entries: dict[CacheKey, CacheEntry] = {}
        self._lock = threading.RLock()
        self._clock = clock
        self._max_entries = max_entries
        self._background: set[asyncio.Task] = set()
        self._logger = get_logger("fintio.cache")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def peek(self, key: CacheKey) -> Optional[CacheEntry]:
        """Current entry for a key without triggering any request."""
        with self._lock:
            return self._entries.get(key)

    def keys(self) -> list[CacheKey]:
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def is_fresh(self, entry: CacheEntry) -> bool:
        """Inside the dedupe window and not invalidated since it was fetched."""
        if entry.fetched_at is None or entry.stale:
            return False
        return self._clock() - entry.fetched_at < entry.policy.dedupe_interval

    async def get(
        self,
        key: CacheKey,
        fetcher: Fetcher,
        policy: CachePolicy = DEFAULT_POLICY,
        force: bool = False,
    ) -> CacheEntry:
        """
        Fetch-or-serve a key.

        Args:
            key: The request to serve
            fetcher: Coroutine function performing the request
            policy: Freshness policy for this key
            force: Skip the dedupe window (an explicit revalidation)

        Returns:
            The entry after any request has settled. Fetch errors are on
            entry.error; they are never raised from here.
        """
        with self._lock:
            entry = self._entry(key)
            entry.fetcher = fetcher
            entry.policy = policy

        task = self._current_inflight(entry)
        if task is not None:
            self._logger.debug("cache_dedupe", key=key.url)
            await asyncio.shield(task)
            return entry

        if not force and self.is_fresh(entry):
            self._logger.debug("cache_hit", key=key.url)
            return entry

        await self._start_fetch(entry)
        return entry

    async def revalidate(self, key: CacheKey) -> Optional[CacheEntry]:
        """
        Force a new request for a key using its last fetcher.

        Returns None if the key was never fetched.
        """
        entry = self.peek(key)
        if entry is None or entry.fetcher is None:
            return None
        return await self.get(key, entry.fetcher, entry.policy, force=True)

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, key: CacheKey) -> CacheEntry:
        """Register a live reader. Invalidation refetches subscribed keys."""
        with self._lock:
            entry = self._entry(key)
            entry.subscribers += 1
            return entry

    def unsubscribe(self, key: CacheKey) -> None:
        """
        Drop a live reader.

        Safe while a request is in flight: the request keeps running and
        its result stays cached for the next reader.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry.subscribers > 0:
                entry.subscribers -= 1

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def invalidate(self, predicate: KeyPredicate) -> list[CacheKey]:
        """
        Mark every matching entry stale.

        Entries with live subscribers are refetched in the background when
        an event loop is running. Returns the keys that were invalidated.
        """
        with self._lock:
            matched = [
                entry for key, entry in list(self._entries.items()) if predicate(key)
            ]
            refetch = []
            for entry in matched:
                entry.generation += 1
                entry.stale = True
                if entry.subscribers > 0 and entry.fetcher is not None:
                    refetch.append(entry.key)

        for key in refetch:
            self._schedule_revalidation(key)

        keys = [entry.key for entry in matched]
        self._logger.info(
            "cache_invalidated",
            keys=[key.url for key in keys],
            count=len(keys),
        )
        return keys

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    # ------------------------------------------------------------------
    # Environment events
    # ------------------------------------------------------------------

    async def notify_focus(self) -> list[CacheKey]:
        """Revalidate subscribed keys whose policy revalidates on focus."""
        return await self._revalidate_where(lambda p: p.revalidate_on_focus)

    async def notify_reconnect(self) -> list[CacheKey]:
        """Revalidate subscribed keys whose policy revalidates on reconnect."""
        return await self._revalidate_where(lambda p: p.revalidate_on_reconnect)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _entry(self, key: CacheKey) -> CacheEntry:
        # Caller holds the lock
        entry = self._entries.get(key)
        if entry is None:
            entry = CacheEntry(key=key)
            self._entries[key] = entry
            if len(self._entries) > self._max_entries:
                self._evict_idle()
        return entry

    def _evict_idle(self) -> None:
        """Drop settled, unsubscribed, idle entries past their window."""
        idle = [
            key
            for key, entry in list(self._entries.items())
            if entry.has_settled
            and entry.subscribers == 0
            and not entry.is_validating
            and not self.is_fresh(entry)
        ]
        for key in idle:
            del self._entries[key]
        if idle:
            self._logger.debug("cache_evicted", count=len(idle), size=len(self._entries))

    def _current_inflight(self, entry: CacheEntry) -> Optional[asyncio.Task]:
        """
        The in-flight task a reader may join.

        A task from another event loop, or one started before the latest
        invalidation, cannot be joined.
        """
        task = entry.inflight
        if task is None or task.done():
            return None
        if task.get_loop() is not asyncio.get_running_loop():
            return None
        if entry.inflight_generation != entry.generation:
            return None
        return task

    async def _start_fetch(self, entry: CacheEntry) -> None:
        loop = asyncio.get_running_loop()
        generation = entry.generation
        task = loop.create_task(self._fetch(entry, generation))
        entry.inflight = task
        entry.inflight_generation = generation
        await asyncio.shield(task)

    async def _fetch(self, entry: CacheEntry, generation: int) -> None:
        key = entry.key
        self._logger.debug("cache_fetch", key=key.url, generation=generation)
        try:
            data = await entry.fetcher(key)
        except Exception as e:
            # Read-path failures are recovered into the entry
            entry.error = e
            self._logger.warning(
                "cache_fetch_failed",
                key=key.url,
                error=str(e),
                error_type=type(e).__name__,
            )
        else:
            entry.data = data
            entry.error = None
        finally:
            if entry.inflight is asyncio.current_task():
                entry.inflight = None

        with self._lock:
            entry.fetched_at = self._clock()
            entry.stale = generation != entry.generation

    def _schedule_revalidation(self, key: CacheKey) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop: the next get() refetches because the entry is stale
            return
        task = loop.create_task(self.revalidate(key))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _revalidate_where(
        self,
        wants: Callable[[CachePolicy], bool],
    ) -> list[CacheKey]:
        with self._lock:
            keys = [
                entry.key
                for entry in list(self._entries.values())
                if entry.subscribers > 0 and entry.fetcher is not None and wants(entry.policy)
            ]
        await asyncio.gather(*(self.revalidate(key) for key in keys))
        return keys
