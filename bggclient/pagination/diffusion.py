"""Sitemap fan-out.

A sitemap index lists hundreds of sitemaps, each holding a slice of one
category of pages. ``DiffusingSitemap.diffuse()`` fetches the index, keeps
the locations of the requested categories and fetches all of them
concurrently, returning every URL grouped by category.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Awaitable, Callable, Iterable

from ..core.types import Outcome, SitemapLocationType, SkippedFetch
from ..observability.logger import get_logger, log_context
from ..observability.metrics import RequestMetrics
from ..request import Request
from ..responses import Sitemap, SitemapIndex, SitemapLocation, SitemapUrl
from .buffer import CategoryAccumulator
from .driver import run_concurrently

if TYPE_CHECKING:
    from ..client import BggClient

logger = get_logger(__name__)

SitemapsByType = dict[SitemapLocationType, list[SitemapUrl]]


def select_locations(
    index: SitemapIndex,
    types: Iterable[SitemapLocationType] = (),
) -> list[SitemapLocation]:
    """Locations of an index to fetch.

    Unclassifiable locations are never fetched. An empty ``types`` keeps
    every other category.
    """
    wanted = set(types)
    return [
        location
        for location in index.sitemaps
        if location.type is not SitemapLocationType.UNKNOWN
        and (not wanted or location.type in wanted)
    ]


class FanOutCollector:
    """Fetches a set of sitemaps concurrently and groups their URLs."""

    def __init__(
        self,
        fetch_sitemap: Callable[[str], Awaitable[Outcome[Sitemap]]],
        metrics: RequestMetrics | None = None,
    ):
        self.fetch_sitemap = fetch_sitemap
        self.metrics = metrics or RequestMetrics()

    async def run(
        self,
        index: Outcome[SitemapIndex],
        types: Iterable[SitemapLocationType] = (),
    ) -> Outcome[SitemapsByType]:
        """Fan out over the locations of a fetched index.

        Returns:
            The index failure unchanged, or success with URLs per category.
            Sitemaps that failed are listed in ``skipped`` by URL.
        """
        if index.is_error() or index.data is None:
            return index.cast()

        locations = select_locations(index.data, types)
        accumulator: CategoryAccumulator[SitemapLocationType, SitemapUrl] = CategoryAccumulator()
        skipped: dict[int, SkippedFetch] = {}

        logger.info(
            f"Diffusing {len(locations)} of {len(index.data.sitemaps)} sitemaps",
            extra={"types": sorted(t.name for t in set(types))},
        )

        async def fetch(position: int) -> None:
            location = locations[position]
            with log_context(operation="diffuse", url=location.location):
                outcome = await self.fetch_sitemap(location.location)
                if outcome.is_error() or outcome.data is None:
                    logger.warning(f"Error retrieving {location.location}, skipping")
                    skipped[position] = SkippedFetch(location.location, outcome.error or "")
                    self.metrics.record_skip()
                    return
                accumulator.append(location.type, position, outcome.data.urls)

        await run_concurrently(range(len(locations)), fetch)

        return Outcome.success(
            accumulator.result(),
            skipped=tuple(skipped[position] for position in sorted(skipped)),
        )


class DiffusingSitemap(Request[SitemapIndex]):
    """Sitemap index request that can also fetch the sitemaps it lists.

    Usage:
        index = client.sitemap_index(Domain.BOARD_GAMES)
        outcome = await index.diffuse(SitemapLocationType.BOARD_GAMES).call()
        for url in outcome.data[SitemapLocationType.BOARD_GAMES]:
            ...

    Without types every classifiable sitemap is fetched, which is several
    hundred requests for the board game domain.
    """

    def __init__(
        self,
        client: BggClient,
        fetch_index: Callable[[], Awaitable[Outcome[SitemapIndex]]],
        fetch_sitemap: Callable[[str], Awaitable[Outcome[Sitemap]]],
    ):
        super().__init__(client, fetch_index)
        self._fetch_sitemap = fetch_sitemap

    def diffuse(self, *types: SitemapLocationType) -> Request[SitemapsByType]:
        async def run() -> Outcome[SitemapsByType]:
            collector = FanOutCollector(self._fetch_sitemap, self._client.metrics)
            return await collector.run(await self._operation(), types)

        return Request(self._client, run)
