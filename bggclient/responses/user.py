"""Decoder for ``/user`` responses."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from bs4 import Tag

from .xml import attr_int, attr_str, child_value, load_root, parse_date


@dataclass(frozen=True)
class Buddy:
    id: int
    name: str


@dataclass(frozen=True)
class Buddies:
    total: int
    page: int
    buddies: list[Buddy] = field(default_factory=list)


@dataclass(frozen=True)
class GuildReference:
    id: int
    name: str


@dataclass(frozen=True)
class Guilds:
    total: int
    page: int
    guilds: list[GuildReference] = field(default_factory=list)


@dataclass(frozen=True)
class User:
    """A user profile, optionally with one page (1000 entries) of buddies and guilds."""

    id: int | None
    name: str
    first_name: str | None = None
    last_name: str | None = None
    avatar_link: str | None = None
    year_registered: int | None = None
    last_login: date | None = None
    state_or_province: str | None = None
    country: str | None = None
    web_address: str | None = None
    trade_rating: int | None = None
    buddies: Buddies | None = None
    guilds: Guilds | None = None


def _references(tag: Tag, name: str) -> list[tuple[int, str]]:
    return [
        (attr_int(child, "id", 0), attr_str(child, "name") or "")
        for child in tag.find_all(name, recursive=False)
    ]


def parse_user(body: bytes | str) -> User:
    root = load_root(body, "user")

    buddies = None
    buddies_tag = root.find("buddies", recursive=False)
    if buddies_tag is not None:
        buddies = Buddies(
            total=attr_int(buddies_tag, "total", 0),
            page=attr_int(buddies_tag, "page", 1),
            buddies=[Buddy(*ref) for ref in _references(buddies_tag, "buddy")],
        )

    guilds = None
    guilds_tag = root.find("guilds", recursive=False)
    if guilds_tag is not None:
        guilds = Guilds(
            total=attr_int(guilds_tag, "total", 0),
            page=attr_int(guilds_tag, "page", 1),
            guilds=[
                GuildReference(*ref) for ref in _references(guilds_tag, "guild")
            ],
        )

    year_registered = child_value(root, "yearregistered")
    trade_rating = child_value(root, "traderating")

    return User(
        id=attr_int(root, "id"),
        name=attr_str(root, "name") or "",
        first_name=child_value(root, "firstname"),
        last_name=child_value(root, "lastname"),
        avatar_link=child_value(root, "avatarlink"),
        year_registered=int(year_registered) if year_registered and year_registered.isdigit() else None,
        last_login=parse_date(child_value(root, "lastlogin")),
        state_or_province=child_value(root, "stateorprovince"),
        country=child_value(root, "country"),
        web_address=child_value(root, "webaddress"),
        trade_rating=int(trade_rating) if trade_rating and trade_rating.isdigit() else None,
        buddies=buddies,
        guilds=guilds,
    )
