"""Decoder for ``/plays`` responses."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from bs4 import Tag

from .xml import (
    attr_bool,
    attr_float,
    attr_int,
    attr_str,
    child_text,
    load_root,
    parse_date,
)


@dataclass(frozen=True)
class Player:
    username: str | None
    user_id: int | None
    name: str | None
    start_position: str | None = None
    color: str | None = None
    score: float | None = None
    rating: float | None = None
    new: bool = False
    win: bool = False


@dataclass(frozen=True)
class Play:
    """A single logged play of a thing."""

    id: int
    date: date | None
    quantity: int
    length_in_minutes: int
    incomplete: bool
    no_win_stats: bool
    location: str | None
    item_name: str | None
    object_type: str | None
    object_id: int | None
    subtypes: tuple[str, ...] = ()
    comments: str | None = None
    players: tuple[Player, ...] = ()


@dataclass(frozen=True)
class Plays:
    """One page of a user's (or a thing's) plays.

    ``total`` is the number of plays across all pages, 100 per page.
    """

    username: str | None
    user_id: int | None
    total: int
    page: int
    plays: list[Play] = field(default_factory=list)


def _parse_player(tag: Tag) -> Player:
    return Player(
        username=attr_str(tag, "username") or None,
        user_id=attr_int(tag, "userid"),
        name=attr_str(tag, "name") or None,
        start_position=attr_str(tag, "startposition") or None,
        color=attr_str(tag, "color") or None,
        score=attr_float(tag, "score"),
        rating=attr_float(tag, "rating"),
        new=attr_bool(tag, "new"),
        win=attr_bool(tag, "win"),
    )


def _parse_play(tag: Tag) -> Play:
    item = tag.find("item", recursive=False)
    subtypes: tuple[str, ...] = ()
    if item is not None:
        subtypes = tuple(attr_str(s, "value") or "" for s in item.find_all("subtype"))

    players: tuple[Player, ...] = ()
    players_tag = tag.find("players", recursive=False)
    if players_tag is not None:
        players = tuple(
            _parse_player(p) for p in players_tag.find_all("player", recursive=False)
        )

    return Play(
        id=attr_int(tag, "id", 0),
        date=parse_date(attr_str(tag, "date")),
        quantity=attr_int(tag, "quantity", 1),
        length_in_minutes=attr_int(tag, "length", 0),
        incomplete=attr_bool(tag, "incomplete"),
        no_win_stats=attr_bool(tag, "nowinstats"),
        location=attr_str(tag, "location") or None,
        item_name=attr_str(item, "name"),
        object_type=attr_str(item, "objecttype"),
        object_id=attr_int(item, "objectid"),
        subtypes=subtypes,
        comments=child_text(tag, "comments") or None,
        players=players,
    )


def parse_plays(body: bytes | str) -> Plays:
    root = load_root(body, "plays")
    return Plays(
        username=attr_str(root, "username"),
        user_id=attr_int(root, "userid"),
        total=attr_int(root, "total", 0),
        page=attr_int(root, "page", 1),
        plays=[_parse_play(tag) for tag in root.find_all("play", recursive=False)],
    )
