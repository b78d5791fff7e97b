"""Decoder for ``/thing`` responses.

Only the fields the client needs to page through comments are decoded in
detail; the rest of a thing's schema is left out.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .xml import attr_int, attr_str, load_root


@dataclass(frozen=True)
class Comment:
    username: str
    rating: str | None = None
    value: str | None = None


@dataclass(frozen=True)
class Comments:
    """One page of a thing's (rating) comments.

    ``total_items`` counts comments across all pages; the page size is the
    ``pagesize`` the request was made with.
    """

    page: int
    total_items: int
    comments: list[Comment] = field(default_factory=list)


@dataclass(frozen=True)
class Thing:
    id: int
    type: str | None
    name: str | None = None
    year_published: int | None = None
    comments: Comments | None = None


@dataclass(frozen=True)
class Things:
    things: list[Thing] = field(default_factory=list)

    def get(self, thing_id: int) -> Thing | None:
        return next((thing for thing in self.things if thing.id == thing_id), None)


def parse_things(body: bytes | str) -> Things:
    root = load_root(body, "items")

    things = []
    for item in root.find_all("item", recursive=False):
        comments = None
        comments_tag = item.find("comments", recursive=False)
        if comments_tag is not None:
            comments = Comments(
                page=attr_int(comments_tag, "page", 1),
                total_items=attr_int(comments_tag, "totalitems", 0),
                comments=[
                    Comment(
                        username=attr_str(tag, "username") or "",
                        rating=attr_str(tag, "rating"),
                        value=attr_str(tag, "value"),
                    )
                    for tag in comments_tag.find_all("comment", recursive=False)
                ],
            )

        name = item.find("name", attrs={"type": "primary"}, recursive=False)
        things.append(
            Thing(
                id=attr_int(item, "id", 0),
                type=attr_str(item, "type"),
                name=attr_str(name, "value"),
                year_published=attr_int(item.find("yearpublished", recursive=False), "value"),
                comments=comments,
            )
        )

    return Things(things=things)
