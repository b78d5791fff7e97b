"""Shared types for the BGG client.

These types are used across the transport, pagination and diffusion layers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, Mapping, TypeVar

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class HttpRequest:
    """A single outbound GET/POST against the API."""

    url: str
    params: Mapping[str, str] = field(default_factory=dict)
    method: str = "GET"

    @property
    def display_url(self) -> str:
        """URL with query string, for logs."""
        if not self.params:
            return self.url
        query = "&".join(f"{k}={v}" for k, v in self.params.items())
        return f"{self.url}?{query}"


@dataclass(frozen=True)
class HttpResponse:
    """Raw response as handed back by a transport."""

    status: int
    body: bytes
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


@dataclass(frozen=True)
class SkippedFetch:
    """A page or sub-resource that failed and was left out of an aggregate."""

    key: str
    error: str


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Success-or-failure result of a request.

    Exactly one of ``data`` / ``error`` is set. ``error`` holds the raw
    response body (or the transport error message) of the failed call.
    ``skipped`` lists the follow-up requests a paginated or diffused
    request had to leave out; it is empty for plain requests.
    """

    data: T | None = None
    error: str | None = None
    skipped: tuple[SkippedFetch, ...] = ()

    @classmethod
    def success(cls, data: T, skipped: tuple[SkippedFetch, ...] = ()) -> Outcome[T]:
        return cls(data=data, skipped=skipped)

    @classmethod
    def failure(cls, error: str) -> Outcome[T]:
        return cls(error=error)

    def is_success(self) -> bool:
        return self.error is None

    def is_error(self) -> bool:
        return not self.is_success()

    @property
    def is_partial(self) -> bool:
        """Succeeded, but some follow-up requests were dropped."""
        return self.is_success() and bool(self.skipped)

    def cast(self) -> Outcome[U]:
        """Re-type a failure so it can be returned from another request."""
        if self.is_success():
            raise ValueError("Only failed outcomes can be cast")
        return Outcome(error=self.error, skipped=self.skipped)


class Domain(str, Enum):
    """BGG site domains, each with its own sitemap index."""

    BOARD_GAMES = "boardgame"
    RPG = "rpg"
    VIDEO_GAMES = "videogame"

    @property
    def address(self) -> str:
        return {
            Domain.BOARD_GAMES: "https://boardgamegeek.com",
            Domain.RPG: "https://rpggeek.com",
            Domain.VIDEO_GAMES: "https://videogamegeek.com",
        }[self]


class SitemapLocationType(str, Enum):
    """Category of a sitemap location, derived from a marker in its URL.

    Members are matched in declaration order and the first marker found in
    the URL wins. UNKNOWN has no marker and is only used as the fallback.
    """

    UNKNOWN = ""
    BOARD_GAMES = "geekitems_boardgame_page"
    BOARD_GAME_ACCESSORIES = "boardgameaccessory_page"
    BOARD_GAME_ACCESSORY_FAMILIES = "bgaccessoryfamily_page"
    BOARD_GAME_ACCESSORY_VERSIONS = "bgaccessoryversion_page"
    BOARD_GAME_ARTISTS = "boardgameartist_page"
    BOARD_GAME_AUTHORS = "boardgameauthor_page"
    BOARD_GAME_COMPILATIONS = "boardgamecompilation_page"
    BOARD_GAME_DESIGNERS = "boardgamedesigner_page"
    BOARD_GAME_EVENTS = "boardgameevent_page"
    BOARD_GAME_EXPANSIONS = "boardgameexpansion_page"
    BOARD_GAME_FAMILIES = "boardgamefamily_page"
    BOARD_GAME_IMPLEMENTATIONS = "boardgameimplementation_page"
    BOARD_GAME_ISSUES = "boardgameissue_page"
    BOARD_GAME_ISSUE_ARTICLES = "boardgameissuearticle_page"
    BOARD_GAME_ISSUE_VERSIONS = "boardgameissueversion_page"
    BOARD_GAME_PERIODICALS = "boardgameperiodical_page"
    BOARD_GAME_PUBLISHERS = "boardgamepublisher_page"
    BOARD_GAME_SLEEVES = "bgsleeve_page"
    BOARD_GAME_SLEEVE_MANUFACTURERS = "bgsleevemfg_page"
    BOARD_GAME_SUB_DOMAINS = "boardgamesubdomain_page"
    BOARD_GAME_VERSIONS = "boardgameversion_page_"
    CARD_TYPES = "cardtype_page"
    CARD_SETS = "cardset_page"
    FILES = "files_page"
    GEEK_LISTS = "geeklists_page"
    IMAGES = "images_page"
    RPG = "rpg_page"
    RPG_ARTISTS = "rpgartist_page"
    RPG_CATEGORIES = "rpgcategory_page"
    RPG_DESIGNERS = "rpgdesigner_page"
    RPG_FAMILIES = "rpgfamily_page"
    RPG_GENRES = "rpggenre_page"
    RPG_ISSUE = "rpgissue_page"
    RPG_ISSUE_ARTICLE = "rpgissuearticle_page"
    RPG_ISSUE_VERSION = "rpgissueversion_page"
    RPG_ITEM = "rpgitem_page"
    RPG_ITEM_VERSION = "rpgitemversion_page"
    RPG_MECHANIC = "rpgmechanic_page"
    RPG_PERIODICAL = "rpgperiodical_page"
    RPG_PRODUCERS = "rpgproducer_page"
    RPG_PUBLISHER = "rpgpublisher_page"
    RPG_SERIES = "rpgseries_page"
    RPG_SETTING = "rpgsetting_page"
    RPG_SYSTEM = "rpgsystem_page"
    THREADS = "threads_page"
    VIDEO_GAMES = "videogame_page"
    VIDEO_GAME_BOARD_GAMES = "videogamebg_page"
    VIDEO_GAME_CHARACTERS = "videogamecharacter_page"
    VIDEO_GAME_CHARACTER_VERSIONS = "vgcharacterversion_page"
    VIDEO_GAME_COMPILATION = "videogamecompilation_page"
    VIDEO_GAME_DEVELOPER = "videogamedeveloper_page"
    VIDEO_GAME_EXPANSION = "videogameexpansion_page"
    VIDEO_GAME_FRANCHISE = "videogamefranchise_page"
    VIDEO_GAME_GENRES = "videogamegenre_page"
    VIDEO_GAME_HARDWARE = "videogamehardware_page"
    VIDEO_GAME_HARDWARE_VERSION = "videogamehwversion_page"
    VIDEO_GAME_PLATFORM = "videogameplatform_page"
    VIDEO_GAME_PUBLISHER = "videogamepublisher_page"
    VIDEO_GAME_SERIES = "videogameseries_page"
    VIDEO_GAME_THEMES = "videogametheme_page"
    VIDEO_GAME_VERSION = "videogameversion_page"
    WIKI_PAGES = "wiki_page"

    @property
    def marker(self) -> str:
        """URL fragment identifying this category."""
        return self.value

    @classmethod
    def from_url(cls, url: str) -> SitemapLocationType:
        """Classify a sitemap URL; first matching marker wins."""
        for member in cls:
            if member.marker and member.marker in url:
                return member
        return cls.UNKNOWN
