"""Paginated BGG resources.

Each resource pairs a PageCursor (where its page metadata lives, how its
pages merge) with the PaginatedRequest returned by the client endpoint.

| Resource      | Page size | Current page      | Total                       |
|---------------|-----------|-------------------|-----------------------------|
| plays         | 100       | plays@page        | plays@total                 |
| forum         | 50        | requested page    | forum@numthreads            |
| guild members | 25        | members@page      | members@count               |
| user          | 1000      | guilds/buddies@page | max of guilds/buddies@total |
| thing comments| pagesize  | comments@page     | comments@totalitems         |
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Hashable, Sequence

from ..config.constants import (
    FORUM_PAGE_SIZE,
    GUILD_MEMBERS_PAGE_SIZE,
    PLAYS_PAGE_SIZE,
    THING_COMMENTS_PAGE_SIZE,
    USER_PAGE_SIZE,
)
from ..core.errors import ConfigurationError
from ..core.types import Outcome
from ..request import CursorPaginatedRequest, PageRequest, PaginatedRequest
from ..responses import Forum, Guild, Plays, Thing, Things, User
from .driver import PageCursor, PageDriver, PageFetcher, run_concurrently

if TYPE_CHECKING:
    from ..client import BggClient


def _by_id(item: Any) -> Hashable:
    return item.id


def _by_name(item: Any) -> Hashable:
    return item.name


# === Plays ===


class PlaysCursor(PageCursor[Plays]):
    resource = "plays"

    def page_size(self) -> int:
        return PLAYS_PAGE_SIZE

    def current_page(self, data: Plays) -> int:
        return data.page

    def total_items(self, data: Plays) -> int:
        return data.total

    def streams(self, data: Plays) -> dict[str, Sequence[Any]]:
        return {"plays": data.plays}

    def item_key(self, stream: str) -> Callable[[Any], Hashable] | None:
        return _by_id

    def merge(self, data: Plays, streams: dict[str, list[Any]], last_page: int) -> Plays:
        return replace(data, page=last_page, plays=streams["plays"])


class PaginatedPlays(CursorPaginatedRequest[Plays]):
    def cursor(self) -> PlaysCursor:
        return PlaysCursor(self._fetch_page)


# === Forum ===


class ForumCursor(PageCursor[Forum]):
    """Forums don't report their page, the requested one is used instead."""

    resource = "forum"

    def __init__(self, fetch_page: PageFetcher[Forum], requested_page: int | None):
        super().__init__(fetch_page)
        self.requested_page = requested_page or 1

    def page_size(self) -> int:
        return FORUM_PAGE_SIZE

    def current_page(self, data: Forum) -> int:
        return self.requested_page

    def total_items(self, data: Forum) -> int:
        return data.num_threads

    def streams(self, data: Forum) -> dict[str, Sequence[Any]]:
        return {"threads": data.threads}

    def item_key(self, stream: str) -> Callable[[Any], Hashable] | None:
        return _by_id

    def merge(self, data: Forum, streams: dict[str, list[Any]], last_page: int) -> Forum:
        return replace(data, threads=streams["threads"])


class PaginatedForum(CursorPaginatedRequest[Forum]):
    def cursor(self) -> ForumCursor:
        return ForumCursor(self._fetch_page, self.page)


# === Guild ===


class GuildCursor(PageCursor[Guild]):
    resource = "guild"

    def page_size(self) -> int:
        return GUILD_MEMBERS_PAGE_SIZE

    def current_page(self, data: Guild) -> int:
        return data.members.page if data.members else 1

    def total_items(self, data: Guild) -> int:
        # Without members there is nothing past the first page.
        return data.members.count if data.members else 0

    def streams(self, data: Guild) -> dict[str, Sequence[Any]]:
        return {"members": data.members.members} if data.members else {}

    def item_key(self, stream: str) -> Callable[[Any], Hashable] | None:
        return _by_name

    def merge(self, data: Guild, streams: dict[str, list[Any]], last_page: int) -> Guild:
        if data.members is None:
            return data
        members = replace(data.members, page=last_page, members=streams.get("members", []))
        return replace(data, members=members)


class PaginatedGuild(CursorPaginatedRequest[Guild]):
    def __init__(
        self,
        client: BggClient,
        fetch_page: PageRequest[Guild],
        page: int | None = None,
        *,
        members: bool,
    ):
        super().__init__(client, fetch_page, page)
        self.members = members

    def check_paginate(self) -> None:
        if not self.members:
            raise ConfigurationError(
                "Nothing to paginate without the members parameter set",
                field="members",
                value=self.members,
            )

    def cursor(self) -> GuildCursor:
        return GuildCursor(self._fetch_page)


# === User ===


class UserCursor(PageCursor[User]):
    """Buddies and guilds share the page parameter and are paged together."""

    resource = "user"

    def page_size(self) -> int:
        return USER_PAGE_SIZE

    def current_page(self, data: User) -> int:
        if data.guilds is not None:
            return data.guilds.page
        if data.buddies is not None:
            return data.buddies.page
        return 1

    def total_items(self, data: User) -> int:
        return max(
            data.guilds.total if data.guilds else 0,
            data.buddies.total if data.buddies else 0,
        )

    def streams(self, data: User) -> dict[str, Sequence[Any]]:
        streams: dict[str, Sequence[Any]] = {}
        if data.buddies is not None:
            streams["buddies"] = data.buddies.buddies
        if data.guilds is not None:
            streams["guilds"] = data.guilds.guilds
        return streams

    def item_key(self, stream: str) -> Callable[[Any], Hashable] | None:
        return _by_id

    def merge(self, data: User, streams: dict[str, list[Any]], last_page: int) -> User:
        buddies = data.buddies
        if buddies is not None:
            buddies = replace(buddies, page=last_page, buddies=streams.get("buddies", []))
        guilds = data.guilds
        if guilds is not None:
            guilds = replace(guilds, page=last_page, guilds=streams.get("guilds", []))
        return replace(data, buddies=buddies, guilds=guilds)


class PaginatedUser(CursorPaginatedRequest[User]):
    def __init__(
        self,
        client: BggClient,
        fetch_page: PageRequest[User],
        page: int | None = None,
        *,
        buddies: bool,
        guilds: bool,
    ):
        super().__init__(client, fetch_page, page)
        self.buddies = buddies
        self.guilds = guilds

    def check_paginate(self) -> None:
        if not (self.buddies or self.guilds):
            raise ConfigurationError(
                "Nothing to paginate without either the buddies or guilds parameter set",
                field="buddies",
            )

    def cursor(self) -> UserCursor:
        return UserCursor(self._fetch_page)


# === Things ===


class ThingCommentsCursor(PageCursor[Thing]):
    """Comments of a single thing.

    Things in a multi-id request have different comment counts, so each
    thing is paged on its own.
    """

    resource = "thing comments"

    def __init__(self, fetch_page: PageFetcher[Thing], thing_id: int, page_size: int):
        super().__init__(fetch_page)
        self.thing_id = thing_id
        self._page_size = page_size

    def page_size(self) -> int:
        return self._page_size

    def current_page(self, data: Thing) -> int:
        return data.comments.page if data.comments else 1

    def total_items(self, data: Thing) -> int:
        return data.comments.total_items if data.comments else 0

    def streams(self, data: Thing) -> dict[str, Sequence[Any]]:
        return {"comments": data.comments.comments} if data.comments else {}

    def skip_key(self, page: int) -> str:
        return f"{self.thing_id}:{page}"

    def merge(self, data: Thing, streams: dict[str, list[Any]], last_page: int) -> Thing:
        if data.comments is None:
            return data
        comments = replace(data.comments, page=last_page, comments=streams.get("comments", []))
        return replace(data, comments=comments)


class PaginatedThings(PaginatedRequest[Things]):
    """Things request whose comments (or rating comments) can be paginated."""

    def __init__(
        self,
        client: BggClient,
        fetch_things: Callable[[Sequence[int], int | None], Awaitable[Outcome[Things]]],
        ids: Sequence[int],
        page: int | None = None,
        *,
        page_size: int | None,
        comments: bool,
        rating_comments: bool,
    ):
        super().__init__(client, lambda p: fetch_things(ids, p), page)
        self._fetch_things = fetch_things
        self.ids = tuple(ids)
        self.page_size = page_size or THING_COMMENTS_PAGE_SIZE
        self.comments = comments
        self.rating_comments = rating_comments

    def check_paginate(self) -> None:
        if not (self.comments or self.rating_comments):
            raise ConfigurationError(
                "Nothing to paginate without either the comments or rating_comments parameter set",
                field="comments",
            )

    def thing_cursor(self, thing_id: int) -> ThingCommentsCursor:
        async def fetch_page(page: int) -> Outcome[Thing]:
            outcome = await self._fetch_things([thing_id], page)
            if outcome.is_error() or outcome.data is None:
                return outcome.cast()
            thing = outcome.data.get(thing_id)
            if thing is None:
                return Outcome.failure(f"Thing {thing_id} missing from page {page}")
            return Outcome.success(thing)

        return ThingCommentsCursor(fetch_page, thing_id, self.page_size)

    async def _paginate(self, to_page: int | None) -> Outcome[Things]:
        first = await self._operation()
        if first.is_error() or first.data is None:
            return first

        async def drive(thing: Thing) -> Outcome[Thing]:
            if thing.comments is None:
                return Outcome.success(thing)
            driver = PageDriver(self.thing_cursor(thing.id), self._client.metrics)
            return await driver.run(Outcome.success(thing), to_page)

        results = await run_concurrently(first.data.things, drive)
        return Outcome.success(
            replace(first.data, things=[result.data for result in results]),
            skipped=tuple(skip for result in results for skip in result.skipped),
        )
