"""
BoardGameGeek XML API 2 client

Typed, throttled access to the BGG XML API 2, including concurrent
pagination of plays, forums, guild members, user buddies/guilds and thing
comments, and fan-out over sitemaps.

API Documentation: https://boardgamegeek.com/wiki/page/BGG_XML_API2

Usage:
    from bggclient import BggClient

    async with BggClient() as client:
        plays = await client.plays(username="Novaeux").paginate().call()
        forum = await client.forum(id=3696796).call()

Rate Limits:
    - At most ``max_concurrent_requests`` requests in flight
    - At most ``requests_per_window_limit`` requests per ``request_window_size`` seconds
    - 202/429/5xx answers are retried with exponential backoff
"""

from __future__ import annotations

from datetime import date
from typing import Any, Callable, Sequence, TypeVar

from pydantic import ValidationError

from .config import ClientSettings
from .config.constants import (
    PARAM_BUDDIES,
    PARAM_COMMENTS,
    PARAM_DOMAIN,
    PARAM_GUILDS,
    PARAM_HOT,
    PARAM_ID,
    PARAM_MARKETPLACE,
    PARAM_MAXIMUM_DATE,
    PARAM_MEMBERS,
    PARAM_MINIMUM_DATE,
    PARAM_NAME,
    PARAM_PAGE,
    PARAM_PAGE_SIZE,
    PARAM_RATING_COMMENTS,
    PARAM_SORT,
    PARAM_STATS,
    PARAM_SUBTYPE,
    PARAM_TOP,
    PARAM_TYPE,
    PARAM_USERNAME,
    PARAM_VERSIONS,
    PARAM_VIDEOS,
    PATH_FORUM,
    PATH_GUILDS,
    PATH_PLAYS,
    PATH_SITEMAP_INDEX,
    PATH_THING,
    PATH_USER,
    REQUEST_DATE_FORMAT,
    THING_COMMENTS_PAGE_SIZE_RANGE,
)
from .core.errors import ConfigurationError, DecodeError
from .core.types import Domain, HttpRequest, Outcome
from .http.transport import AiohttpTransport, Transport
from .observability.logger import get_logger, log_context
from .observability.metrics import RequestMetrics
from .pagination.diffusion import DiffusingSitemap
from .pagination.resources import (
    PaginatedForum,
    PaginatedGuild,
    PaginatedPlays,
    PaginatedThings,
    PaginatedUser,
)
from .request import Request
from .resilience import AdmissionGate, RetryingTransport, ThrottledTransport, WindowLimiter
from .responses import (
    Forum,
    Guild,
    Plays,
    Sitemap,
    SitemapIndex,
    Things,
    User,
    parse_forum,
    parse_guild,
    parse_plays,
    parse_sitemap,
    parse_sitemap_index,
    parse_things,
    parse_user,
)

logger = get_logger(__name__)

T = TypeVar("T")


def _flag(enabled: bool) -> str | None:
    return "1" if enabled else None


class BggClient:
    """BoardGameGeek XML API 2 client.

    Every client owns its own concurrency gate, rate window and metrics;
    nothing is shared between instances.
    """

    def __init__(
        self,
        settings: ClientSettings | None = None,
        transport: Transport | None = None,
    ):
        """
        Initialize the client.

        Args:
            settings: Client settings (or use BGG_* env vars). The instance is
                read at request time, so later changes apply to new requests.
            transport: Network transport; an aiohttp transport by default
        """
        self.settings = settings or ClientSettings()
        self.metrics = RequestMetrics()

        self.gate = AdmissionGate(self.settings, self.metrics)
        self.window = WindowLimiter(self.settings, self.metrics)
        self.transport = transport or AiohttpTransport(self.settings)
        self._retrying = RetryingTransport(
            ThrottledTransport(self.transport, self.window, self.gate),
            self.settings,
            self.metrics,
        )
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def close(self) -> None:
        """Close the transport. Requests made afterwards raise ClientClosedError."""
        if self._closed:
            return
        self._closed = True
        await self._retrying.close()
        logger.debug("Client closed", extra={"metrics": self.metrics.to_dict()})

    async def __aenter__(self) -> BggClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    def configure(self, **changes: Any) -> ClientSettings:
        """Update settings in place, e.g. ``configure(max_retries=2)``.

        Raises:
            ConfigurationError: Unknown setting or invalid value
        """
        for name, value in changes.items():
            if name not in ClientSettings.model_fields:
                raise ConfigurationError(f"Unknown setting: {name}", field=name, value=value)
            try:
                setattr(self.settings, name, value)
            except ValidationError as e:
                raise ConfigurationError(
                    f"Invalid value for {name}: {value!r}",
                    field=name,
                    value=value,
                ) from e
        return self.settings

    # === Execution ===

    def _url(self, path: str) -> str:
        return f"{self.settings.base_url.rstrip('/')}/{path}"

    async def _execute(
        self,
        url: str,
        params: dict[str, str | None],
        decode: Callable[[bytes], T],
    ) -> Outcome[T]:
        """Send a GET through the retry and admission layers and decode it."""
        request = HttpRequest(url, {k: v for k, v in params.items() if v is not None})

        with log_context(url=request.display_url):
            outcome = await self._retrying.execute(request)
            if outcome.is_error() or outcome.data is None:
                return outcome.cast()

            try:
                return Outcome.success(decode(outcome.data))
            except DecodeError as e:
                logger.warning(f"Could not decode response: {e}")
                self.metrics.record_decode_failure()
                return Outcome.failure(e.body)

    # === Endpoints ===

    def plays(
        self,
        username: str | None = None,
        id: int | None = None,
        type: str | None = None,
        min_date: date | None = None,
        max_date: date | None = None,
        subtype: str | None = None,
        page: int | None = None,
    ) -> PaginatedPlays:
        """Plays logged by a user, or of a thing (``id`` with ``type`` thing/family).

        Raises:
            ConfigurationError: Neither username nor id given
        """
        if username is None and id is None:
            raise ConfigurationError("Either username or id is required", field="username")

        async def fetch_page(page: int | None) -> Outcome[Plays]:
            return await self._execute(
                self._url(PATH_PLAYS),
                {
                    PARAM_USERNAME: username,
                    PARAM_ID: str(id) if id is not None else None,
                    PARAM_TYPE: type,
                    PARAM_MINIMUM_DATE: min_date.strftime(REQUEST_DATE_FORMAT) if min_date else None,
                    PARAM_MAXIMUM_DATE: max_date.strftime(REQUEST_DATE_FORMAT) if max_date else None,
                    PARAM_SUBTYPE: subtype,
                    PARAM_PAGE: str(page) if page is not None else None,
                },
                parse_plays,
            )

        return PaginatedPlays(self, fetch_page, page)

    def forum(self, id: int, page: int = 1) -> PaginatedForum:
        """Threads of a forum, 50 per page."""

        async def fetch_page(page: int | None) -> Outcome[Forum]:
            return await self._execute(
                self._url(PATH_FORUM),
                {PARAM_ID: str(id), PARAM_PAGE: str(page or 1)},
                parse_forum,
            )

        return PaginatedForum(self, fetch_page, page)

    def guild(
        self,
        id: int,
        members: bool = False,
        sort: str | None = None,
        page: int | None = None,
    ) -> PaginatedGuild:
        """A guild, optionally with its members (25 per page).

        ``sort`` is ``username`` or ``date``.
        """

        async def fetch_page(page: int | None) -> Outcome[Guild]:
            return await self._execute(
                self._url(PATH_GUILDS),
                {
                    PARAM_ID: str(id),
                    PARAM_MEMBERS: _flag(members),
                    PARAM_SORT: sort,
                    PARAM_PAGE: str(page) if page is not None else None,
                },
                parse_guild,
            )

        return PaginatedGuild(self, fetch_page, page, members=members)

    def user(
        self,
        name: str,
        buddies: bool = False,
        guilds: bool = False,
        top: bool = False,
        hot: bool = False,
        domain: Domain | None = None,
        page: int | None = None,
    ) -> PaginatedUser:
        """A user profile, optionally with buddies and guilds (1000 per page)."""

        async def fetch_page(page: int | None) -> Outcome[User]:
            return await self._execute(
                self._url(PATH_USER),
                {
                    PARAM_NAME: name,
                    PARAM_BUDDIES: _flag(buddies),
                    PARAM_GUILDS: _flag(guilds),
                    PARAM_TOP: _flag(top),
                    PARAM_HOT: _flag(hot),
                    PARAM_DOMAIN: domain.value if domain else None,
                    PARAM_PAGE: str(page) if page is not None else None,
                },
                parse_user,
            )

        return PaginatedUser(self, fetch_page, page, buddies=buddies, guilds=guilds)

    def things(
        self,
        ids: Sequence[int],
        types: Sequence[str] = (),
        stats: bool = False,
        versions: bool = False,
        videos: bool = False,
        marketplace: bool = False,
        comments: bool = False,
        rating_comments: bool = False,
        page: int | None = None,
        page_size: int | None = None,
    ) -> PaginatedThings:
        """Things by id, optionally with a page of (rating) comments each.

        Raises:
            ConfigurationError: No ids, page_size outside 10..100, or both
                comments and rating_comments requested
        """
        if not ids:
            raise ConfigurationError("At least one id is required", field="ids", value=ids)
        low, high = THING_COMMENTS_PAGE_SIZE_RANGE
        if page_size is not None and not low <= page_size <= high:
            raise ConfigurationError(
                f"page_size must be between {low} and {high}",
                field="page_size",
                value=page_size,
            )
        if comments and rating_comments:
            raise ConfigurationError(
                "comments and rating_comments can't both be requested",
                field="rating_comments",
                value=rating_comments,
            )

        async def fetch_things(ids: Sequence[int], page: int | None) -> Outcome[Things]:
            return await self._execute(
                self._url(PATH_THING),
                {
                    PARAM_ID: ",".join(str(i) for i in ids),
                    PARAM_TYPE: ",".join(types) if types else None,
                    PARAM_STATS: _flag(stats),
                    PARAM_VERSIONS: _flag(versions),
                    PARAM_VIDEOS: _flag(videos),
                    PARAM_MARKETPLACE: _flag(marketplace),
                    PARAM_COMMENTS: _flag(comments),
                    PARAM_RATING_COMMENTS: _flag(rating_comments),
                    PARAM_PAGE: str(page) if page is not None else None,
                    PARAM_PAGE_SIZE: str(page_size) if page_size is not None else None,
                },
                parse_things,
            )

        return PaginatedThings(
            self,
            fetch_things,
            ids,
            page,
            page_size=page_size,
            comments=comments,
            rating_comments=rating_comments,
        )

    def sitemap_index(self, domain: Domain = Domain.BOARD_GAMES) -> DiffusingSitemap:
        """The sitemap index of a domain; ``diffuse()`` fetches the sitemaps it lists."""

        async def fetch_index() -> Outcome[SitemapIndex]:
            return await self._execute(
                f"{domain.address}/{PATH_SITEMAP_INDEX}", {}, parse_sitemap_index
            )

        async def fetch_sitemap(url: str) -> Outcome[Sitemap]:
            return await self._execute(url, {}, parse_sitemap)

        return DiffusingSitemap(self, fetch_index, fetch_sitemap)

    def sitemap(self, url: str) -> Request[Sitemap]:
        """A single sitemap, e.g. one listed in a sitemap index."""

        async def fetch() -> Outcome[Sitemap]:
            return await self._execute(url, {}, parse_sitemap)

        return Request(self, fetch)
