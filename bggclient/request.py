"""Deferred requests.

Endpoint methods on BggClient do not hit the network; they return a Request
that runs when called:

    outcome = await client.forum(id=3696796).call()

    # Or schedule it and receive the outcome in a callback
    client.forum(id=3696796).call_async(print)

Paginated endpoints return a PaginatedRequest, whose ``paginate()`` builds
a Request for the merged result.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Generator, Generic, TypeVar

from .core.errors import ClientClosedError, ConfigurationError
from .core.types import Outcome
from .observability.logger import get_logger
from .pagination.driver import PageCursor, PageDriver

if TYPE_CHECKING:
    from .client import BggClient

logger = get_logger(__name__)

T = TypeVar("T")

PageRequest = Callable[[int | None], Awaitable[Outcome[T]]]


class Request(Generic[T]):
    """A request that runs when called. Can be called more than once."""

    def __init__(self, client: BggClient, operation: Callable[[], Awaitable[Outcome[T]]]):
        self._client = client
        self._operation = operation

    async def call(self) -> Outcome[T]:
        """Run the request.

        Raises:
            ClientClosedError: The client was closed
        """
        self._ensure_open()
        return await self._operation()

    def call_async(self, callback: Callable[[Outcome[T]], Any]) -> asyncio.Task[Outcome[T]]:
        """Schedule the request on the running loop and pass its outcome to callback.

        The returned task resolves to the outcome. An exception raised by
        the callback is logged and does not fail the task.
        """
        self._ensure_open()

        async def run() -> Outcome[T]:
            outcome = await self._operation()
            try:
                callback(outcome)
            except Exception:
                logger.exception(f"Callback {callback!r} raised")
            return outcome

        return asyncio.ensure_future(run())

    def __await__(self) -> Generator[Any, None, Outcome[T]]:
        return self.call().__await__()

    def _ensure_open(self) -> None:
        if self._client.closed:
            raise ClientClosedError()


class PaginatedRequest(Request[T], ABC):
    """A request for one page of a resource that can also fetch the rest.

    Args:
        client: Client running the requests
        fetch_page: Fetches the resource at a page (None for BGG's default)
        page: Page of the initial request; pagination continues from there
    """

    def __init__(
        self,
        client: BggClient,
        fetch_page: PageRequest[T],
        page: int | None = None,
    ):
        super().__init__(client, lambda: fetch_page(page))
        self._fetch_page = fetch_page
        self.page = page

    def paginate(self, to_page: int | None = None) -> Request[T]:
        """Request every page from the initial one up to ``to_page``.

        Pages past the resource's last page are never requested. Pages that
        fail are left out and listed in ``Outcome.skipped``.

        Raises:
            ConfigurationError: The request has nothing to paginate
        """
        if to_page is not None and to_page < 1:
            raise ConfigurationError("to_page must be at least 1", field="to_page", value=to_page)
        self.check_paginate()
        return Request(self._client, lambda: self._paginate(to_page))

    def check_paginate(self) -> None:
        """Raise ConfigurationError if this request cannot be paginated."""

    @abstractmethod
    async def _paginate(self, to_page: int | None) -> Outcome[T]:
        """Fetch the initial page and the ones following it, merged."""


class CursorPaginatedRequest(PaginatedRequest[T]):
    """Paginated request whose pages are described by a single PageCursor."""

    @abstractmethod
    def cursor(self) -> PageCursor[T]:
        """Cursor paging through this resource."""

    async def _paginate(self, to_page: int | None) -> Outcome[T]:
        first = await self._operation()
        return await PageDriver(self.cursor(), self._client.metrics).run(first, to_page)
