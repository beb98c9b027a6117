"""Bounded response cache with single-flight fetch deduplication."""

from __future__ import annotations

import asyncio
from collections import OrderedDict
from functools import partial
from logging import getLogger
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Hashable

log = getLogger(__name__)

DEFAULT_CAPACITY = 1000


K = TypeVar("K", bound="Hashable")
V = TypeVar("V")


class DedupCache(Generic[K, V]):
    """LRU store of decoded responses keyed by request descriptor.

    Concurrent callers asking for the same key while a fetch is running share
    that fetch. The fetch runs in its own task: a cancelled waiter leaves it
    running for the others, and only when the last waiter is cancelled is the
    fetch itself cancelled. Failed fetches are not stored; every waiter sees
    the failure and the next call starts a new fetch.

    All bookkeeping happens between awaits on one event loop, which is what
    keeps the single-flight check and the in-flight registration atomic.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._entries: OrderedDict[K, V] = OrderedDict()
        self._in_flight: dict[K, asyncio.Task[V]] = {}
        self._waiters: dict[asyncio.Task[V], int] = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def peek(self, key: K) -> V | None:
        """Return a cached value without touching recency."""
        return self._entries.get(key)

    def clear(self) -> None:
        self._entries.clear()

    async def get_or_fetch(self, key: K, fetch: Callable[[], Awaitable[V]]) -> V:
        if key in self._entries:
            self._entries.move_to_end(key)
            self.hits += 1
            return self._entries[key]

        task = self._in_flight.get(key)
        if task is None:
            self.misses += 1
            task = asyncio.ensure_future(self._fetch_and_store(key, fetch))
            task.add_done_callback(partial(self._forget, key))
            self._in_flight[key] = task
        else:
            log.debug("Joining in-flight fetch for %s", key)

        self._waiters[task] = self._waiters.get(task, 0) + 1
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            if self._waiters[task] == 1 and not task.done():
                if self._in_flight.get(key) is task:
                    del self._in_flight[key]
                log.debug("Cancelling abandoned fetch for %s", key)
                task.cancel()
            raise
        finally:
            self._waiters[task] -= 1
            if not self._waiters[task]:
                del self._waiters[task]

    async def _fetch_and_store(self, key: K, fetch: Callable[[], Awaitable[V]]) -> V:
        try:
            value = await fetch()
        finally:
            if self._in_flight.get(key) is asyncio.current_task():
                del self._in_flight[key]
        self._store(key, value)
        return value

    def _store(self, key: K, value: V) -> None:
        self._entries[key] = value
        self._entries.move_to_end(key)
        while len(self._entries) > self.capacity:
            evicted, _ = self._entries.popitem(last=False)
            log.debug("Evicted %s from response cache", evicted)

    def _forget(self, key: K, task: asyncio.Task[V]) -> None:
        # A task cancelled before it ever ran never reaches its own cleanup.
        if self._in_flight.get(key) is task:
            del self._in_flight[key]
        # Marks the failure as observed when every waiter has gone away.
        if not task.cancelled():
            task.exception()
