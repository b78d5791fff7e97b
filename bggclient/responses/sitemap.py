"""Decoders for sitemap index and sitemap documents."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from ..core.types import SitemapLocationType
from .xml import child_text, load_root, parse_date


@dataclass(frozen=True)
class SitemapLocation:
    """A sitemap listed in a sitemap index.

    The category is derived from the URL once, when the location is created.
    """

    location: str
    type: SitemapLocationType = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", SitemapLocationType.from_url(self.location))


@dataclass(frozen=True)
class SitemapIndex:
    sitemaps: list[SitemapLocation] = field(default_factory=list)


@dataclass(frozen=True)
class SitemapUrl:
    location: str
    change_frequency: str | None = None
    priority: float | None = None
    last_modified: date | None = None


@dataclass(frozen=True)
class Sitemap:
    urls: list[SitemapUrl] = field(default_factory=list)


def parse_sitemap_index(body: bytes | str) -> SitemapIndex:
    root = load_root(body, "sitemapindex")
    return SitemapIndex(
        sitemaps=[
            SitemapLocation(child_text(tag, "loc") or "")
            for tag in root.find_all("sitemap", recursive=False)
        ]
    )


def parse_sitemap(body: bytes | str) -> Sitemap:
    root = load_root(body, "urlset")

    urls = []
    for tag in root.find_all("url", recursive=False):
        priority = child_text(tag, "priority")
        try:
            parsed_priority = float(priority) if priority else None
        except ValueError:
            parsed_priority = None
        urls.append(
            SitemapUrl(
                location=child_text(tag, "loc") or "",
                change_frequency=child_text(tag, "changefreq"),
                priority=parsed_priority,
                last_modified=parse_date(child_text(tag, "lastmod")),
            )
        )
    return Sitemap(urls=urls)
