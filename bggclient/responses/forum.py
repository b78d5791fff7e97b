"""Decoder for ``/forum`` responses."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .xml import attr_bool, attr_int, attr_str, load_root, parse_rfc_datetime


@dataclass(frozen=True)
class ThreadSummary:
    id: int
    subject: str
    author: str
    num_articles: int
    post_date: datetime | None = None
    last_post_date: datetime | None = None


@dataclass(frozen=True)
class Forum:
    """A forum with one page (50 entries) of its threads."""

    id: int
    title: str
    num_threads: int
    num_posts: int
    no_posting: bool = False
    last_post_date: datetime | None = None
    threads: list[ThreadSummary] = field(default_factory=list)


def parse_forum(body: bytes | str) -> Forum:
    root = load_root(body, "forum")

    threads_tag = root.find("threads", recursive=False)
    threads = [
        ThreadSummary(
            id=attr_int(tag, "id", 0),
            subject=attr_str(tag, "subject") or "",
            author=attr_str(tag, "author") or "",
            num_articles=attr_int(tag, "numarticles", 0),
            post_date=parse_rfc_datetime(attr_str(tag, "postdate")),
            last_post_date=parse_rfc_datetime(attr_str(tag, "lastpostdate")),
        )
        for tag in (threads_tag.find_all("thread", recursive=False) if threads_tag else [])
    ]

    return Forum(
        id=attr_int(root, "id", 0),
        title=attr_str(root, "title") or "",
        num_threads=attr_int(root, "numthreads", 0),
        num_posts=attr_int(root, "numposts", 0),
        no_posting=attr_bool(root, "noposting"),
        last_post_date=parse_rfc_datetime(attr_str(root, "lastpostdate")),
        threads=threads,
    )
