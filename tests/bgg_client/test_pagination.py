"""Tests for bggclient/pagination (driver, buffer, resources).

Every resource is paginated through a BggClient backed by a scripted
transport that serves pages by their ``page`` parameter.
"""

import asyncio

import pytest

from bggclient.core.errors import ConfigurationError
from bggclient.core.types import Outcome, SkippedFetch
from bggclient.pagination import AccumulationBuffer, CategoryAccumulator, run_concurrently
from bggclient.request import CursorPaginatedRequest, PaginatedRequest
from fixtures.bgg_xml import forum_xml, guild_xml, plays_xml, things_xml, user_xml
from fixtures.transport import path_of, response


def page_of(request, default: int = 1) -> int:
    return int(request.params.get("page", default))


def plays_handler(total: int = 270, failing_pages: frozenset[int] = frozenset()):
    """Serve ``total`` plays, 100 per page, with ids 1..total."""

    def handler(request):
        page = page_of(request)
        if page in failing_pages:
            return response("Internal error", 500)
        ids = range((page - 1) * 100 + 1, min(page * 100, total) + 1)
        return response(plays_xml(page=page, total=total, ids=ids))

    return handler


# =============================================================================
# AccumulationBuffer
# =============================================================================


class TestAccumulationBuffer:
    """Tests for AccumulationBuffer / CategoryAccumulator."""

    def test_items_in_index_order(self):
        """Chunks are read back by index, not by arrival."""
        buffer = AccumulationBuffer()
        buffer.append(3, ["e", "f"])
        buffer.append(1, ["a", "b"])
        buffer.append(2, ["c", "d"])

        assert buffer.items() == ["a", "b", "c", "d", "e", "f"]

    def test_key_drops_repeated_entries(self):
        """An entry repeated across a page boundary is kept once."""
        buffer = AccumulationBuffer(key=lambda item: item["id"])
        buffer.append(1, [{"id": 1}, {"id": 2}])
        buffer.append(2, [{"id": 2}, {"id": 3}])

        assert [item["id"] for item in buffer.items()] == [1, 2, 3]
        assert len(buffer) == 3

    def test_without_key_keeps_duplicates(self):
        buffer = AccumulationBuffer()
        buffer.append(1, ["x"])
        buffer.append(2, ["x"])

        assert buffer.items() == ["x", "x"]

    def test_falsy_keys_are_not_deduplicated(self):
        """Items without an identity are kept, however many there are."""
        buffer = AccumulationBuffer(key=lambda item: item["id"])
        buffer.append(1, [{"id": 0}, {"id": 1}])
        buffer.append(2, [{"id": 0}, {"id": 1}, {"id": None}])

        assert [item["id"] for item in buffer.items()] == [0, 1, 0, None]

    def test_category_accumulator(self):
        accumulator = CategoryAccumulator()
        accumulator.append("rpg", 2, ["r2"])
        accumulator.append("games", 0, ["g0"])
        accumulator.append("rpg", 1, ["r1"])

        assert accumulator.result() == {"rpg": ["r1", "r2"], "games": ["g0"]}


# =============================================================================
# run_concurrently
# =============================================================================


class TestRunConcurrently:
    """Tests for run_concurrently()."""

    @pytest.mark.asyncio
    async def test_runs_all_keys(self):
        async def double(key: int) -> int:
            await asyncio.sleep(0)
            return key * 2

        assert await run_concurrently([1, 2, 3], double) == [2, 4, 6]

    @pytest.mark.asyncio
    async def test_empty(self):
        async def never(key):
            raise AssertionError

        assert await run_concurrently([], never) == []

    @pytest.mark.asyncio
    async def test_failure_cancels_siblings(self):
        """A raising worker cancels the ones still running."""
        cancelled = []

        async def worker(key: int) -> None:
            if key == 0:
                raise ValueError("boom")
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.append(key)
                raise

        with pytest.raises(ValueError):
            await run_concurrently([0, 1, 2], worker)

        assert sorted(cancelled) == [1, 2]


# =============================================================================
# Plays
# =============================================================================


class TestPaginatedPlays:
    """Tests for plays().paginate()."""

    @pytest.mark.asyncio
    async def test_all_pages(self, make_client):
        """270 plays, 100 per page: 3 requests and 270 merged plays."""
        client, transport = make_client(plays_handler())

        outcome = await client.plays(username="Novaeux").paginate().call()

        assert outcome.is_success()
        assert not outcome.is_partial
        assert len(outcome.data.plays) == 270
        assert outcome.data.page == 3
        assert len(transport.requests) == 3
        assert sorted(p or 1 for p in transport.pages()) == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_to_page(self, make_client):
        """paginate(to_page=2) stops after 200 plays and 2 requests."""
        client, transport = make_client(plays_handler())

        outcome = await client.plays(username="Novaeux").paginate(to_page=2).call()

        assert len(outcome.data.plays) == 200
        assert outcome.data.page == 2
        assert len(transport.requests) == 2

    @pytest.mark.asyncio
    async def test_to_page_beyond_last_page(self, make_client):
        """No requests are made past the resource's last page."""
        client, transport = make_client(plays_handler())

        outcome = await client.plays(username="Novaeux").paginate(to_page=10).call()

        assert len(outcome.data.plays) == 270
        assert len(transport.requests) == 3

    @pytest.mark.asyncio
    async def test_failed_page_is_skipped(self, make_client, settings):
        """Page 2 failing leaves 170 plays and a successful, partial outcome."""
        client, transport = make_client(plays_handler(failing_pages=frozenset({2})))

        outcome = await client.plays(username="Novaeux").paginate().call()

        assert outcome.is_success()
        assert outcome.is_partial
        assert len(outcome.data.plays) == 170
        assert outcome.skipped == (SkippedFetch("2", "Internal error"),)
        assert client.metrics.skipped_fetches == 1
        # Initial page, page 3, and page 2 with all of its retries
        assert len(transport.requests) == 2 + settings.max_retries + 1

    @pytest.mark.asyncio
    async def test_failed_initial_request_returned_unchanged(self, make_client):
        """A failing first page ends pagination at once."""
        client, transport = make_client(lambda request: response("Not found", 404))

        outcome = await client.plays(username="Novaeux").paginate().call()

        assert outcome == Outcome.failure("Not found")
        assert len(transport.requests) == 1

    @pytest.mark.asyncio
    async def test_merge_in_page_order(self, make_client):
        """Plays come back in page order even when later pages answer first."""
        client, _ = make_client(
            plays_handler(),
            delay=lambda request: 0.03 if page_of(request) == 2 else 0.0,
        )

        outcome = await client.plays(username="Novaeux").paginate().call()

        ids = [play.id for play in outcome.data.plays]
        assert ids == list(range(1, 271))

    @pytest.mark.asyncio
    async def test_shifted_entries_deduplicated(self, make_client):
        """A play repeated on the next page (list shifted) is merged once."""
        pages = {1: range(1, 101), 2: range(100, 200), 3: range(200, 251)}

        def handler(request):
            page = page_of(request)
            return response(plays_xml(page=page, total=250, ids=pages[page]))

        client, _ = make_client(handler)

        outcome = await client.plays(username="Novaeux").paginate().call()

        ids = [play.id for play in outcome.data.plays]
        assert len(ids) == len(set(ids)) == 250

    @pytest.mark.asyncio
    async def test_starts_from_requested_page(self, make_client):
        """Pagination continues from the page of the initial request."""
        client, transport = make_client(plays_handler())

        outcome = await client.plays(username="Novaeux", page=2).paginate().call()

        assert transport.pages() == [2, 3]
        assert len(outcome.data.plays) == 170

    def test_invalid_to_page(self, make_client):
        client, _ = make_client(plays_handler())

        with pytest.raises(ConfigurationError):
            client.plays(username="Novaeux").paginate(to_page=0)

    @pytest.mark.asyncio
    async def test_cancel_releases_gate_slots(self, make_client, settings):
        """Cancelling pagination cancels follow-ups and frees their slots."""
        settings.max_concurrent_requests = 2
        client, transport = make_client(
            plays_handler(total=1_000),
            delay=lambda request: 10.0 if page_of(request) > 1 else 0.0,
        )

        task = asyncio.ensure_future(client.plays(username="Novaeux").paginate().call())
        for _ in range(100):
            await asyncio.sleep(0.005)
            if transport.in_flight == 2:
                break
        assert client.gate.in_flight == 2
        assert client.gate.waiting > 0

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert client.gate.in_flight == 0
        assert client.gate.waiting == 0
        assert transport.in_flight == 0

    @pytest.mark.asyncio
    async def test_plays_without_ids_are_all_kept(self, make_client):
        """Entries decoded without an id are never merged into one."""

        def handler(request):
            page = page_of(request)
            return response(plays_xml(page=page, total=150, ids=[0] * (100 if page == 1 else 50)))

        client, _ = make_client(handler)

        outcome = await client.plays(username="Novaeux").paginate().call()

        assert len(outcome.data.plays) == 150

    def test_paginated_request_is_abstract(self, make_client):
        """A paginated request must say how its pages are merged."""
        client, _ = make_client(lambda request: response())

        with pytest.raises(TypeError):
            PaginatedRequest(client, lambda page: None)
        with pytest.raises(TypeError):
            CursorPaginatedRequest(client, lambda page: None)


# =============================================================================
# Forum
# =============================================================================


class TestPaginatedForum:
    """Tests for forum().paginate()."""

    @staticmethod
    def handler(request):
        page = page_of(request)
        ids = range((page - 1) * 50 + 1, min(page * 50, 120) + 1)
        return response(forum_xml(forum_id=3696796, num_threads=120, thread_ids=ids))

    @pytest.mark.asyncio
    async def test_all_pages(self, make_client):
        """120 threads at 50 per page take 3 requests."""
        client, transport = make_client(self.handler)

        outcome = await client.forum(id=3696796).paginate().call()

        assert len(outcome.data.threads) == 120
        assert sorted(transport.pages()) == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_current_page_is_requested_page(self, make_client):
        """The forum body has no page attribute; the requested page is used."""
        client, transport = make_client(self.handler)

        outcome = await client.forum(id=3696796, page=2).paginate().call()

        assert transport.pages() == [2, 3]
        assert len(outcome.data.threads) == 70


# =============================================================================
# Guild
# =============================================================================


class TestPaginatedGuild:
    """Tests for guild().paginate()."""

    @staticmethod
    def handler(request):
        page = page_of(request)
        names = [f"member{i}" for i in range((page - 1) * 25 + 1, min(page * 25, 60) + 1)]
        return response(guild_xml(guild_id=1229, members=(60, page, names)))

    @pytest.mark.asyncio
    async def test_members_paginated(self, make_client):
        """60 members at 25 per page take 3 requests."""
        client, transport = make_client(self.handler)

        outcome = await client.guild(id=1229, members=True).paginate().call()

        assert len(outcome.data.members.members) == 60
        assert outcome.data.members.page == 3
        assert len(transport.requests) == 3
        assert all(r.params["members"] == "1" for r in transport.requests)

    def test_paginate_without_members_rejected(self, make_client):
        """Nothing to paginate without members; raised before any request."""
        client, transport = make_client(self.handler)

        with pytest.raises(ConfigurationError):
            client.guild(id=1229).paginate()

        assert transport.requests == []


# =============================================================================
# User
# =============================================================================


class TestPaginatedUser:
    """Tests for user().paginate()."""

    @staticmethod
    def handler(request):
        page = page_of(request)
        buddy_ids = range((page - 1) * 1000 + 1, min(page * 1000, 1500) + 1)
        guild_ids = range(1, 11) if page == 1 else []
        return response(
            user_xml(
                "Novaeux",
                buddies=(1500, page, buddy_ids),
                guilds=(10, page, guild_ids),
            )
        )

    @pytest.mark.asyncio
    async def test_buddies_and_guilds_paginated(self, make_client):
        """The larger of the two totals decides the page count."""
        client, transport = make_client(self.handler)

        outcome = await client.user(name="Novaeux", buddies=True, guilds=True).paginate().call()

        assert len(outcome.data.buddies.buddies) == 1500
        assert len(outcome.data.guilds.guilds) == 10
        assert outcome.data.buddies.page == 2
        assert len(transport.requests) == 2

    def test_paginate_without_buddies_or_guilds_rejected(self, make_client):
        client, transport = make_client(self.handler)

        with pytest.raises(ConfigurationError):
            client.user(name="Novaeux", top=True).paginate()

        assert transport.requests == []


# =============================================================================
# Things
# =============================================================================


class TestPaginatedThings:
    """Tests for things().paginate()."""

    TOTALS = {1: 250, 2: 50, 3: 0}

    def handler(self, failing: frozenset[tuple[int, int]] = frozenset()):
        def handle(request):
            page = page_of(request)
            items = []
            for thing_id in (int(i) for i in request.params["id"].split(",")):
                if (thing_id, page) in failing:
                    return response("Internal error", 500)
                total = self.TOTALS[thing_id]
                start = (page - 1) * 100 + 1
                users = [f"user{thing_id}_{i}" for i in range(start, min(page * 100, total) + 1)]
                items.append((thing_id, page, total, users))
            return response(things_xml(items))

        return handle

    @pytest.mark.asyncio
    async def test_each_thing_paged_independently(self, make_client):
        """Only thing 1 has more than one page of comments."""
        client, transport = make_client(self.handler())

        outcome = await client.things(ids=[1, 2], comments=True).paginate().call()

        comments = {thing.id: thing.comments for thing in outcome.data.things}
        assert len(comments[1].comments) == 250
        assert comments[1].page == 3
        assert len(comments[2].comments) == 50
        assert [thing.id for thing in outcome.data.things] == [1, 2]
        # One request for both things, then pages 2 and 3 of thing 1 only
        assert len(transport.requests) == 3
        assert sorted(r.params["id"] for r in transport.requests[1:]) == ["1", "1"]

    @pytest.mark.asyncio
    async def test_failed_thing_page_skipped(self, make_client):
        """A failing page is reported as id:page."""
        client, _ = make_client(self.handler(failing=frozenset({(1, 3)})))

        outcome = await client.things(ids=[1, 2], comments=True).paginate().call()

        assert outcome.is_partial
        assert [skip.key for skip in outcome.skipped] == ["1:3"]
        assert len(outcome.data.things[0].comments.comments) == 200

    @pytest.mark.asyncio
    async def test_page_size_drives_page_count(self, make_client):
        """pagesize=50 spreads 120 comments over 3 pages."""
        requests = []

        def handler(request):
            requests.append(request)
            page = page_of(request)
            users = [f"u{i}" for i in range((page - 1) * 50 + 1, min(page * 50, 120) + 1)]
            return response(things_xml([(1, page, 120, users)]))

        client, _ = make_client(handler)

        outcome = await client.things(ids=[1], rating_comments=True, page_size=50).paginate().call()

        assert len(outcome.data.things[0].comments.comments) == 120
        assert len(requests) == 3
        assert all(r.params["pagesize"] == "50" for r in requests)
        assert all(r.params["ratingcomments"] == "1" for r in requests)

    def test_paginate_without_comments_rejected(self, make_client):
        client, _ = make_client(self.handler())

        with pytest.raises(ConfigurationError):
            client.things(ids=[1]).paginate()

    @pytest.mark.parametrize("page_size", [5, 9, 101])
    def test_page_size_out_of_range(self, make_client, page_size):
        client, _ = make_client(self.handler())

        with pytest.raises(ConfigurationError):
            client.things(ids=[1], comments=True, page_size=page_size)

    def test_comments_and_rating_comments_exclusive(self, make_client):
        client, _ = make_client(self.handler())

        with pytest.raises(ConfigurationError):
            client.things(ids=[1], comments=True, rating_comments=True)

    @pytest.mark.asyncio
    async def test_thing_missing_from_page(self, make_client):
        """A follow-up page without the thing counts as a skipped page."""

        def handler(request):
            page = page_of(request)
            if page == 1:
                return response(things_xml([(1, 1, 150, ["a"])]))
            return response(things_xml([]))

        client, _ = make_client(handler)

        outcome = await client.things(ids=[1], comments=True).paginate().call()

        assert [skip.key for skip in outcome.skipped] == ["1:2"]
        assert "missing" in outcome.skipped[0].error

    @pytest.mark.asyncio
    async def test_paths(self, make_client):
        client, transport = make_client(self.handler())

        await client.things(ids=[2], comments=True).paginate().call()

        assert [path_of(r) for r in transport.requests] == ["thing"]
