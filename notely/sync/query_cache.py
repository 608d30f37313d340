"""
Query Cache.

Keyed cache for read requests against the API.

- Keys are tuples; ``invalidate("notes")`` marks every key starting with
  ``("notes",)`` stale, so ``("notes",)`` and ``("notes", "pinned")`` are
  both refetched on next use.
- Concurrent fetches of one key share a single in-flight task. Callers
  await it through ``asyncio.shield`` so one cancelled caller does not
  abort the fetch for the others.
- A key invalidated while its fetch is in flight stays stale when the
  fetch lands, because the response may predate the mutation.
- Reads are retried a fixed number of times with a fixed delay
  (notely.core.resilience.read_retrying). Writes never pass through here.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, TypeVar

from notely.core.logging import get_logger, log_with_source
from notely.core.resilience import read_retrying

logger = get_logger(__name__)

QueryKey = tuple[str, ...]
T = TypeVar("T")


@dataclass
class CacheEntry:
    data: Any
    fetched_at: float = field(default_factory=time.monotonic)
    stale: bool = False


class QueryCache:
    """
    Read cache with per-key request de-duplication and prefix invalidation.

    Usage:
        cache = QueryCache(retry_attempts=2, retry_delay=1.0)
        notes = await cache.fetch(("notes",), api.list_notes)
        cache.invalidate("notes")
    """

    def __init__(self, retry_attempts: int = 2, retry_delay: float = 1.0) -> None:
        self.retry_attempts = retry_attempts
        self.retry_delay = retry_delay
        self._entries: dict[QueryKey, CacheEntry] = {}
        self._inflight: dict[QueryKey, asyncio.Task] = {}
        self._versions: dict[QueryKey, int] = {}

    async def fetch(
        self,
        key: QueryKey,
        fetcher: Callable[[], Awaitable[T]],
        *,
        force: bool = False,
    ) -> T:
        """
        Return fresh cached data for key, or fetch it.

        Args:
            key: Cache key
            fetcher: Coroutine function performing the read
            force: Ignore a fresh cache entry and refetch

        Raises:
            ApplicationError: The last error once retries are exhausted
        """
        entry = self._entries.get(key)
        if entry is not None and not entry.stale and not force:
            return entry.data

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._run(key, fetcher, self._versions.get(key, 0)))
            self._inflight[key] = task
            task.add_done_callback(lambda done, key=key: self._finished(key, done))
        else:
            log_with_source(logger, "sync", "debug", "Joining in-flight query", key=key)

        return await asyncio.shield(task)

    async def _run(self, key: QueryKey, fetcher: Callable[[], Awaitable[T]], version: int) -> T:
        async for attempt in read_retrying(self.retry_attempts, self.retry_delay):
            with attempt:
                data = await fetcher()
        stale = self._versions.get(key, 0) != version
        self._entries[key] = CacheEntry(data=data, stale=stale)
        log_with_source(logger, "sync", "debug", "Query fetched", key=key, stale=stale)
        return data

    def _finished(self, key: QueryKey, task: asyncio.Task) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        if not task.cancelled():
            # retrieve so an error nobody awaited is not reported as lost
            task.exception()

    def invalidate(self, *prefix: str) -> None:
        """Mark every key starting with prefix stale."""
        n = len(prefix)
        for key, entry in self._entries.items():
            if key[:n] == prefix:
                entry.stale = True
        for key in set(self._entries) | set(self._inflight):
            if key[:n] == prefix:
                self._versions[key] = self._versions.get(key, 0) + 1
        log_with_source(logger, "sync", "debug", "Queries invalidated", prefix=prefix)

    def peek(self, key: QueryKey) -> Any | None:
        """Cached data for key regardless of staleness, or None."""
        entry = self._entries.get(key)
        return entry.data if entry is not None else None

    def is_stale(self, key: QueryKey) -> bool:
        """True when key is missing or marked stale."""
        entry = self._entries.get(key)
        return entry is None or entry.stale

    def is_fetching(self, key: QueryKey) -> bool:
        return key in self._inflight

    def clear(self) -> None:
        """Drop every entry and cancel in-flight fetches."""
        for task in self._inflight.values():
            task.cancel()
        self._inflight.clear()
        self._entries.clear()
        self._versions.clear()
