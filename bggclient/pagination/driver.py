"""Concurrent multi-page assembly.

A PageDriver takes the outcome of a resource's first page, works out how
many pages remain from the resource's own metadata, fetches all of them
concurrently and merges everything into a single result. A page that fails
is logged and reported in ``Outcome.skipped``; the result still succeeds.

What a page *is* differs per resource, so the driver talks to a PageCursor
that knows where the current page and totals live and how to merge.
"""

from __future__ import annotations

import asyncio
import math
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Generic, Hashable, Iterable, Sequence, TypeVar

from ..core.types import Outcome, SkippedFetch
from ..observability.logger import get_logger, log_context
from ..observability.metrics import RequestMetrics
from .buffer import AccumulationBuffer

logger = get_logger(__name__)

T = TypeVar("T")
K = TypeVar("K")
R = TypeVar("R")

PageFetcher = Callable[[int], Awaitable[Outcome[T]]]


async def run_concurrently(
    keys: Iterable[K],
    worker: Callable[[K], Awaitable[R]],
) -> list[R]:
    """Spawn one task per key, then wait for all of them.

    If the caller is cancelled, or a worker raises, every task still running
    is cancelled and awaited before the exception propagates, so no
    follow-up outlives the operation that started it.
    """
    tasks = [asyncio.ensure_future(worker(key)) for key in keys]
    if not tasks:
        return []

    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


class PageCursor(ABC, Generic[T]):
    """Pagination metadata and merge rules of one resource."""

    #: Short resource name used in logs
    resource: str = "resource"

    def __init__(self, fetch_page: PageFetcher[T]):
        self.fetch_page = fetch_page

    @abstractmethod
    def page_size(self) -> int:
        ...

    @abstractmethod
    def current_page(self, data: T) -> int:
        ...

    @abstractmethod
    def total_items(self, data: T) -> int:
        ...

    @abstractmethod
    def streams(self, data: T) -> dict[str, Sequence[Any]]:
        """Items of one page, per accumulated list."""

    @abstractmethod
    def merge(self, data: T, streams: dict[str, list[Any]], last_page: int) -> T:
        """Copy of the first page's ``data`` holding every accumulated item."""

    def item_key(self, stream: str) -> Callable[[Any], Hashable] | None:
        """Identity of an item in ``stream``, None to keep duplicates."""
        return None

    def skip_key(self, page: int) -> str:
        return str(page)

    def last_page(self, data: T) -> int:
        return math.ceil(self.total_items(data) / self.page_size())


class PageDriver(Generic[T]):
    """Drives a PageCursor from its first page to the last one requested.

    Usage:
        driver = PageDriver(PlaysCursor(fetch_page), metrics)
        outcome = await driver.run(await fetch_page(1), to_page=3)
    """

    def __init__(self, cursor: PageCursor[T], metrics: RequestMetrics | None = None):
        self.cursor = cursor
        self.metrics = metrics or RequestMetrics()

    async def run(self, first: Outcome[T], to_page: int | None = None) -> Outcome[T]:
        """Fetch and merge the pages following ``first``.

        Args:
            first: Outcome of the initial request, returned as is on failure
            to_page: Last page to fetch; defaults to the resource's last page

        Returns:
            Success with the merged data, or the initial failure
        """
        if first.is_error() or first.data is None:
            return first

        cursor = self.cursor
        data = first.data
        current_page = cursor.current_page(data)
        last_page = cursor.last_page(data)
        if to_page is not None:
            last_page = min(last_page, to_page)

        buffers = {
            name: AccumulationBuffer(key=cursor.item_key(name))
            for name in cursor.streams(data)
        }
        for name, items in cursor.streams(data).items():
            buffers[name].append(current_page, items)

        skipped: dict[int, SkippedFetch] = {}

        async def fetch(page: int) -> None:
            with log_context(operation="paginate", resource=cursor.resource, page=page):
                outcome = await cursor.fetch_page(page)
                if outcome.is_error() or outcome.data is None:
                    logger.warning(
                        f"Error paginating {cursor.resource} page {page}, skipping",
                        extra={"skip_key": cursor.skip_key(page)},
                    )
                    skipped[page] = SkippedFetch(cursor.skip_key(page), outcome.error or "")
                    self.metrics.record_skip()
                    return

                for name, items in cursor.streams(outcome.data).items():
                    buffers.setdefault(
                        name, AccumulationBuffer(key=cursor.item_key(name))
                    ).append(page, items)

        pages = range(current_page + 1, last_page + 1)
        if pages:
            logger.debug(
                f"Paginating {cursor.resource} pages {pages.start}..{pages.stop - 1}",
                extra={"pages": len(pages)},
            )
        await run_concurrently(pages, fetch)

        merged = cursor.merge(
            data,
            {name: buffer.items() for name, buffer in buffers.items()},
            max(current_page, last_page),
        )
        return Outcome.success(
            merged,
            skipped=tuple(skipped[page] for page in sorted(skipped)),
        )
