from __future__ import annotations

import asyncio

import pytest

from midata.domain.dedup_cache import DedupCache
from midata.domain.dispatch import BatchDispatcher, chunked
from midata.domain.errors import TransportError
from midata.domain.model import FetchGroup, Group, RequestDescriptor, ResponseEnvelope


def _envelope(group_id: str) -> ResponseEnvelope:
    return ResponseEnvelope(groups=(Group(id=group_id),))


class RecordingFetch:
    def __init__(self, delays: dict[str, float] | None = None) -> None:
        self.delays = delays or {}
        self.started: list[str] = []
        self.completed = 0
        self.completed_when_started: list[int] = []
        self.in_flight = 0
        self.peak = 0
        self.failures: dict[str, Exception] = {}
        self.cancelled: list[str] = []

    async def __call__(self, descriptor: RequestDescriptor) -> ResponseEnvelope:
        self.started.append(descriptor.group_id)
        self.completed_when_started.append(self.completed)
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(descriptor.group_id, 0))
            await asyncio.sleep(0)
            failure = self.failures.get(descriptor.group_id)
            if failure is not None:
                raise failure
            return _envelope(descriptor.group_id)
        except asyncio.CancelledError:
            self.cancelled.append(descriptor.group_id)
            raise
        finally:
            self.in_flight -= 1
            self.completed += 1


def _dispatcher(fetch: RecordingFetch, *, width: int = 100) -> BatchDispatcher:
    return BatchDispatcher(cache=DedupCache(), fetch=fetch, width=width)


def _ids(responses: list[ResponseEnvelope]) -> list[str]:
    return [response.groups[0].id for response in responses if response.groups]


def test_chunked_splits_into_fixed_sizes() -> None:
    assert [len(chunk) for chunk in chunked(range(250), 100)] == [100, 100, 50]
    assert list(chunked([], 100)) == []
    with pytest.raises(ValueError, match="positive"):
        list(chunked([1], 0))


def test_output_order_matches_input_despite_completion_order() -> None:
    fetch = RecordingFetch(delays={"A": 0.05, "B": 0.0, "C": 0.02})
    dispatcher = _dispatcher(fetch)

    responses = asyncio.run(
        dispatcher.dispatch([FetchGroup("A"), FetchGroup("B"), FetchGroup("C")])
    )

    assert _ids(responses) == ["A", "B", "C"]


def test_large_batches_run_in_sequential_chunks() -> None:
    fetch = RecordingFetch()
    dispatcher = _dispatcher(fetch)
    descriptors = [FetchGroup(str(index)) for index in range(250)]

    responses = asyncio.run(dispatcher.dispatch(descriptors))

    assert _ids(responses) == [str(index) for index in range(250)]
    assert len(fetch.started) == 250
    assert fetch.peak == 100
    # every fetch of a chunk starts only after the previous chunk completed
    starts_per_chunk = {
        done: fetch.completed_when_started.count(done)
        for done in sorted(set(fetch.completed_when_started))
    }
    assert starts_per_chunk == {0: 100, 100: 100, 200: 50}


def test_cache_hits_and_duplicates_are_not_refetched() -> None:
    fetch = RecordingFetch()
    dispatcher = _dispatcher(fetch)

    async def scenario() -> list[ResponseEnvelope]:
        await dispatcher.dispatch([FetchGroup("A")])
        return await dispatcher.dispatch([FetchGroup("B"), FetchGroup("A"), FetchGroup("B")])

    responses = asyncio.run(scenario())

    assert _ids(responses) == ["B", "A", "B"]
    assert fetch.started == ["A", "B"]
    assert responses[0] is responses[2]


def test_first_failure_aborts_the_whole_dispatch() -> None:
    fetch = RecordingFetch(delays={"slow": 1.0})
    fetch.failures["bad"] = TransportError("GET /groups/bad answered 500", status_code=500)
    dispatcher = _dispatcher(fetch)

    with pytest.raises(TransportError) as exc:
        asyncio.run(dispatcher.dispatch([FetchGroup("ok"), FetchGroup("bad"), FetchGroup("slow")]))

    assert exc.value.status_code == 500
    assert fetch.cancelled == ["slow"]


def test_failure_in_first_chunk_prevents_later_chunks() -> None:
    fetch = RecordingFetch()
    fetch.failures["1"] = TransportError("boom")
    dispatcher = _dispatcher(fetch, width=2)

    with pytest.raises(TransportError):
        asyncio.run(dispatcher.dispatch([FetchGroup(str(index)) for index in range(6)]))

    assert sorted(fetch.started) == ["0", "1"]


def test_width_must_be_positive() -> None:
    with pytest.raises(ValueError, match="width"):
        BatchDispatcher(cache=DedupCache(), fetch=RecordingFetch(), width=0)
