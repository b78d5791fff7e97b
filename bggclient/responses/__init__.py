"""Typed BGG responses and their XML decoders.

Every ``parse_*`` function raises DecodeError when the body is not the
expected document.
"""

from .forum import Forum, ThreadSummary, parse_forum
from .guild import Guild, GuildMember, GuildMembers, parse_guild
from .plays import Play, Player, Plays, parse_plays
from .sitemap import (
    Sitemap,
    SitemapIndex,
    SitemapLocation,
    SitemapUrl,
    parse_sitemap,
    parse_sitemap_index,
)
from .things import Comment, Comments, Thing, Things, parse_things
from .user import Buddies, Buddy, GuildReference, Guilds, User, parse_user

__all__ = [
    # Plays
    "Play",
    "Player",
    "Plays",
    "parse_plays",
    # Forum
    "Forum",
    "ThreadSummary",
    "parse_forum",
    # Guild
    "Guild",
    "GuildMember",
    "GuildMembers",
    "parse_guild",
    # User
    "Buddies",
    "Buddy",
    "GuildReference",
    "Guilds",
    "User",
    "parse_user",
    # Things
    "Comment",
    "Comments",
    "Thing",
    "Things",
    "parse_things",
    # Sitemaps
    "Sitemap",
    "SitemapIndex",
    "SitemapLocation",
    "SitemapUrl",
    "parse_sitemap",
    "parse_sitemap_index",
]
