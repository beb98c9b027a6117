from __future__ import annotations

import asyncio

import pytest

from midata.domain.dedup_cache import DedupCache


class CountingFetch:
    def __init__(self, value: str = "value", *, fail_times: int = 0) -> None:
        self.value = value
        self.calls = 0
        self.fail_times = fail_times

    async def __call__(self) -> str:
        self.calls += 1
        await asyncio.sleep(0.01)
        if self.calls <= self.fail_times:
            raise RuntimeError(f"boom {self.calls}")
        return f"{self.value}-{self.calls}"


def test_cached_value_is_returned_without_fetching() -> None:
    cache: DedupCache[str, str] = DedupCache()
    fetch = CountingFetch()

    async def scenario() -> tuple[str, str]:
        first = await cache.get_or_fetch("k", fetch)
        second = await cache.get_or_fetch("k", fetch)
        return first, second

    first, second = asyncio.run(scenario())

    assert first == second == "value-1"
    assert fetch.calls == 1
    assert cache.hits == 1
    assert cache.misses == 1


def test_concurrent_identical_requests_share_one_fetch() -> None:
    cache: DedupCache[str, str] = DedupCache()
    fetch = CountingFetch()

    async def scenario() -> list[str]:
        return list(
            await asyncio.gather(
                cache.get_or_fetch("k", fetch),
                cache.get_or_fetch("k", fetch),
                cache.get_or_fetch("k", fetch),
            )
        )

    results = asyncio.run(scenario())

    assert fetch.calls == 1
    assert results == ["value-1", "value-1", "value-1"]
    assert results[0] is results[1]


def test_failure_reaches_all_waiters_and_is_not_cached() -> None:
    cache: DedupCache[str, str] = DedupCache()
    fetch = CountingFetch(fail_times=1)

    async def scenario() -> tuple[list[BaseException | str], str]:
        failed = await asyncio.gather(
            cache.get_or_fetch("k", fetch),
            cache.get_or_fetch("k", fetch),
            return_exceptions=True,
        )
        retried = await cache.get_or_fetch("k", fetch)
        return list(failed), retried

    failed, retried = asyncio.run(scenario())

    assert all(isinstance(result, RuntimeError) for result in failed)
    assert str(failed[0]) == "boom 1"
    assert retried == "value-2"
    assert fetch.calls == 2
    assert "k" in cache


def test_least_recently_used_entry_is_evicted() -> None:
    cache: DedupCache[str, str] = DedupCache(capacity=2)

    async def fetch_value(value: str) -> str:
        return value

    async def scenario() -> None:
        await cache.get_or_fetch("a", lambda: fetch_value("a"))
        await cache.get_or_fetch("b", lambda: fetch_value("b"))
        await cache.get_or_fetch("a", lambda: fetch_value("a"))
        await cache.get_or_fetch("c", lambda: fetch_value("c"))

    asyncio.run(scenario())

    assert len(cache) == 2
    assert "a" in cache
    assert "b" not in cache
    assert cache.peek("c") == "c"


def test_cancelled_waiter_does_not_cancel_shared_fetch() -> None:
    cache: DedupCache[str, str] = DedupCache()
    fetch = CountingFetch()

    async def scenario() -> str:
        doomed = asyncio.ensure_future(cache.get_or_fetch("k", fetch))
        survivor = asyncio.ensure_future(cache.get_or_fetch("k", fetch))
        await asyncio.sleep(0)
        doomed.cancel()
        return await survivor

    assert asyncio.run(scenario()) == "value-1"
    assert fetch.calls == 1


def test_capacity_must_be_positive() -> None:
    with pytest.raises(ValueError, match="capacity"):
        DedupCache(capacity=0)


def test_fetch_is_cancelled_when_its_last_waiter_is() -> None:
    cache: DedupCache[str, str] = DedupCache()
    started = asyncio.Event()
    outcome: list[str] = []

    async def slow_fetch() -> str:
        started.set()
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            outcome.append("cancelled")
            raise
        return "late"

    async def scenario() -> None:
        waiter = asyncio.ensure_future(cache.get_or_fetch("k", slow_fetch))
        await started.wait()
        waiter.cancel()
        with pytest.raises(asyncio.CancelledError):
            await waiter
        await asyncio.sleep(0)

    asyncio.run(scenario())

    assert outcome == ["cancelled"]
    assert "k" not in cache


def test_key_is_fetched_again_after_an_abandoned_fetch() -> None:
    cache: DedupCache[str, str] = DedupCache()
    fetch = CountingFetch()

    async def scenario() -> str:
        waiter = asyncio.ensure_future(cache.get_or_fetch("k", fetch))
        await asyncio.sleep(0)
        waiter.cancel()
        with pytest.raises(asyncio.CancelledError):
            await waiter
        await asyncio.sleep(0)
        return await cache.get_or_fetch("k", fetch)

    assert asyncio.run(scenario()) == "value-2"
    assert fetch.calls == 2


def test_caller_joining_just_after_abandonment_gets_a_fresh_fetch() -> None:
    cache: DedupCache[str, str] = DedupCache()
    started = asyncio.Event()

    async def slow_fetch() -> str:
        started.set()
        await asyncio.sleep(10)
        return "late"

    async def fast_fetch() -> str:
        return "fresh"

    async def scenario() -> str:
        waiter = asyncio.ensure_future(cache.get_or_fetch("k", slow_fetch))
        await started.wait()
        waiter.cancel()
        # runs after the waiter gives up the fetch but before the fetch sees its cancellation
        joiner = asyncio.ensure_future(cache.get_or_fetch("k", fast_fetch))
        with pytest.raises(asyncio.CancelledError):
            await waiter
        return await joiner

    assert asyncio.run(scenario()) == "fresh"
    assert cache.peek("k") == "fresh"
    assert cache.misses == 2
