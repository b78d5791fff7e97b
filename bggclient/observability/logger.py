"""Structured logger for the BGG client.

Provides context-aware logging with optional JSON formatting.

Usage:
    from bggclient.observability import get_logger, log_context

    logger = get_logger(__name__)

    with log_context(operation="paginate", resource="plays"):
        logger.warning("Skipping page", extra={"page": 3})
        # Output: {"timestamp": "...", "operation": "paginate", "resource": "plays", "message": "...", "page": 3}

The library never installs handlers on its own; applications opt in with
``setup_logging()`` or wire the ``bggclient`` logger into their own setup.
"""

from __future__ import annotations

import contextvars
import json
import logging
import sys
from contextlib import contextmanager
from dataclasses import asdict, dataclass, fields, replace
from datetime import datetime, timezone
from typing import Any, Iterator

ROOT_LOGGER_NAME = "bggclient"


@dataclass(frozen=True)
class LogContext:
    """Fields attached to every record logged inside a ``log_context`` block."""

    operation: str | None = None
    resource: str | None = None
    page: int | None = None
    url: str | None = None
    correlation_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict, excluding None values."""
        return {k: v for k, v in asdict(self).items() if v is not None}


_CONTEXT_FIELDS = frozenset(f.name for f in fields(LogContext))

_log_context: contextvars.ContextVar[LogContext] = contextvars.ContextVar(
    "log_context",
    default=LogContext(),
)


def current_context() -> LogContext:
    return _log_context.get()


@contextmanager
def log_context(**changes: Any) -> Iterator[LogContext]:
    """Layer fields over the current log context for the duration of the block.

    Example:
        with log_context(operation="diffuse", resource="sitemapindex"):
            logger.info("Fetching sitemaps")

    Tasks created inside the block inherit the context, so follow-up
    requests spawned by a paginated call log with the caller's fields.

    Raises:
        TypeError: Unknown context field
    """
    unknown = set(changes) - _CONTEXT_FIELDS
    if unknown:
        raise TypeError(f"Unknown log context fields: {sorted(unknown)}")

    context = replace(_log_context.get(), **changes)
    token = _log_context.set(context)
    try:
        yield context
    finally:
        _log_context.reset(token)


# Attributes every LogRecord has; anything else came in through ``extra``
_RECORD_ATTRIBUTES = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {k: v for k, v in vars(record).items() if k not in _RECORD_ATTRIBUTES}


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, context and extras flattened in."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
            **current_context().to_dict(),
            **_extra_fields(record),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str, ensure_ascii=False)


class PrettyFormatter(logging.Formatter):
    """Human-readable formatter for development.

    ``12:00:01 WARN [paginate] [plays] [page 3] Skipping page | skip_key=3``
    """

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        ctx = current_context()
        tags = [f"[{value}]" for value in (ctx.operation, ctx.resource) if value]
        if ctx.page is not None:
            tags.append(f"[page {ctx.page}]")

        color = self.COLORS.get(record.levelname, "")
        parts = [
            datetime.now().strftime("%H:%M:%S"),
            f"{color}{record.levelname[:4]}{self.RESET}",
            *tags,
            record.getMessage(),
        ]
        formatted = " ".join(parts)

        extras = _extra_fields(record)
        if extras:
            formatted += " | " + ", ".join(f"{k}={v}" for k, v in extras.items())
        if record.exc_info:
            formatted += "\n" + self.formatException(record.exc_info)

        return formatted


# Library default: stay silent unless the application configures logging.
logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


def setup_logging(
    level: int = logging.INFO,
    json_format: bool = False,
    quiet: bool = False,
) -> logging.Handler:
    """Replace the client's handlers with a single stderr handler.

    Args:
        level: Logging level (default: INFO)
        json_format: Use JSON format (default: False, use pretty format)
        quiet: Suppress all output except errors (default: False)

    Returns:
        The installed handler
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(logging.ERROR if quiet else level)
    handler.setFormatter(StructuredFormatter() if json_format else PrettyFormatter())
    root.addHandler(handler)

    # aiohttp logs every connection reset at INFO
    logging.getLogger("aiohttp").setLevel(logging.WARNING)

    return handler


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the ``bggclient`` namespace.

    Args:
        name: Module name (usually __name__)
    """
    if not name.startswith(ROOT_LOGGER_NAME):
        name = f"{ROOT_LOGGER_NAME}.{name}"

    return logging.getLogger(name)
