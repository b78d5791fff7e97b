"""Decoder for ``/guild`` responses."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .xml import attr_int, attr_str, child_text, load_root, parse_rfc_datetime


@dataclass(frozen=True)
class GuildMember:
    name: str
    join_date: datetime | None = None


@dataclass(frozen=True)
class GuildMembers:
    """One page (25 entries) of a guild's members."""

    count: int
    page: int
    members: list[GuildMember] = field(default_factory=list)


@dataclass(frozen=True)
class Guild:
    id: int
    name: str
    created: datetime | None = None
    category: str | None = None
    website: str | None = None
    manager: str | None = None
    description: str | None = None
    members: GuildMembers | None = None


def parse_guild(body: bytes | str) -> Guild:
    root = load_root(body, "guild")

    members = None
    members_tag = root.find("members", recursive=False)
    if members_tag is not None:
        members = GuildMembers(
            count=attr_int(members_tag, "count", 0),
            page=attr_int(members_tag, "page", 1),
            members=[
                GuildMember(
                    name=attr_str(tag, "name") or "",
                    join_date=parse_rfc_datetime(attr_str(tag, "date")),
                )
                for tag in members_tag.find_all("member", recursive=False)
            ],
        )

    return Guild(
        id=attr_int(root, "id", 0),
        name=attr_str(root, "name") or "",
        created=parse_rfc_datetime(attr_str(root, "created")),
        category=child_text(root, "category"),
        website=child_text(root, "website"),
        manager=child_text(root, "manager"),
        description=child_text(root, "description"),
        members=members,
    )
