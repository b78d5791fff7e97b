"""Helpers shared by the XML decoders.

BGG answers some errors with HTTP 200 and a body that is not the expected
document (``<error>``, ``<errors>`` or an HTML ``<div class='messagebox
error'>``). ``load_root`` turns any of those into a DecodeError.
"""

from __future__ import annotations

import contextlib
from datetime import date, datetime
from email.utils import parsedate_to_datetime

from bs4 import BeautifulSoup, Tag

from ..core.errors import DecodeError


def load_root(body: bytes | str, expected: str) -> Tag:
    """Parse body and return its root element.

    Raises:
        DecodeError: The body is empty, not XML, or rooted elsewhere
    """
    text = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else body
    soup = BeautifulSoup(text, "xml")
    root = next((child for child in soup.children if isinstance(child, Tag)), None)

    if root is None:
        raise DecodeError("Empty or non-XML response", body=text)
    if root.name != expected:
        raise DecodeError(
            f"Expected <{expected}> document, got <{root.name}>",
            body=text,
        )
    return root


def attr_str(tag: Tag | None, name: str) -> str | None:
    if tag is None:
        return None
    value = tag.get(name)
    return value.strip() if isinstance(value, str) else None


def attr_int(tag: Tag | None, name: str, default: int | None = None) -> int | None:
    value = attr_str(tag, name)
    if value:
        with contextlib.suppress(ValueError):
            return int(value)
    return default


def attr_float(tag: Tag | None, name: str) -> float | None:
    value = attr_str(tag, name)
    if value:
        with contextlib.suppress(ValueError):
            return float(value)
    return None


def attr_bool(tag: Tag | None, name: str) -> bool:
    """BGG encodes flags as "0"/"1"."""
    return attr_int(tag, name, 0) == 1


def child_text(tag: Tag, name: str) -> str | None:
    child = tag.find(name, recursive=False)
    if child is None:
        return None
    return child.get_text().strip()


def child_value(tag: Tag, name: str) -> str | None:
    """Value of a ``<name value="..."/>`` child element."""
    return attr_str(tag.find(name, recursive=False), "value")


def parse_date(value: str | None) -> date | None:
    """Parse a yyyy-mm-dd date; BGG sends 0000-00-00 for unknown."""
    if not value:
        return None
    with contextlib.suppress(ValueError):
        return datetime.strptime(value, "%Y-%m-%d").date()
    return None


def parse_rfc_datetime(value: str | None) -> datetime | None:
    """Parse an RFC 2822 timestamp such as ``Sun, 04 Feb 2024 08:31:57 +0000``."""
    if not value:
        return None
    with contextlib.suppress(TypeError, ValueError):
        return parsedate_to_datetime(value)
    return None
