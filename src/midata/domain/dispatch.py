"""Chunked, order-preserving, fail-fast fan-out of descriptor fetches."""

from __future__ import annotations

import asyncio
from itertools import islice
from logging import getLogger
from typing import TYPE_CHECKING, TypeAlias, TypeVar

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable, Sequence

    from midata.domain.dedup_cache import DedupCache
    from midata.domain.model import RequestDescriptor, ResponseEnvelope

log = getLogger(__name__)

MAX_BATCH_WIDTH = 100

FetchFunction: TypeAlias = "Callable[[RequestDescriptor], Awaitable[ResponseEnvelope]]"


T = TypeVar("T")


def chunked(items: Iterable[T], size: int) -> Iterable[list[T]]:
    if size <= 0:
        raise ValueError("chunk size must be positive")
    iterator = iter(items)
    while chunk := list(islice(iterator, size)):
        yield chunk


class BatchDispatcher:
    """Fetch descriptors through a cache, at most ``width`` at a time.

    Chunks run one after another, so no more than ``width`` fetches are ever
    outstanding. Within a chunk every fetch runs concurrently. The first
    failure cancels the rest of its chunk and is raised as-is; there are no
    partial results.
    """

    def __init__(
        self,
        *,
        cache: DedupCache[RequestDescriptor, ResponseEnvelope],
        fetch: FetchFunction,
        width: int = MAX_BATCH_WIDTH,
    ) -> None:
        if width <= 0:
            raise ValueError("width must be positive")
        self._cache = cache
        self._fetch = fetch
        self.width = width

    async def dispatch(self, descriptors: Sequence[RequestDescriptor]) -> list[ResponseEnvelope]:
        responses: list[ResponseEnvelope] = []
        total = len(descriptors)
        for index, chunk in enumerate(chunked(descriptors, self.width)):
            log.debug(
                "Dispatching chunk %s (%s descriptors, %s/%s done)",
                index,
                len(chunk),
                len(responses),
                total,
            )
            responses.extend(await self._dispatch_chunk(chunk))
        return responses

    async def _dispatch_chunk(
        self, chunk: Sequence[RequestDescriptor]
    ) -> list[ResponseEnvelope]:
        try:
            async with asyncio.TaskGroup() as group:
                tasks = [group.create_task(self._fetch_one(descriptor)) for descriptor in chunk]
        except ExceptionGroup as exc_group:
            first = _first_leaf(exc_group)
            log.warning("Batch aborted after %s: %s", type(first).__name__, first)
            raise first from None
        return [task.result() for task in tasks]

    async def _fetch_one(self, descriptor: RequestDescriptor) -> ResponseEnvelope:
        return await self._cache.get_or_fetch(descriptor, lambda: self._fetch(descriptor))


def _first_leaf(exc_group: BaseExceptionGroup[Exception]) -> Exception:
    first = exc_group.exceptions[0]
    while isinstance(first, BaseExceptionGroup):
        first = first.exceptions[0]
    return first
