"""Error hierarchy for the BGG client.

All client errors inherit from BggError.
Use `is_retryable` property to determine if an error can be retried.

Only configuration misuse is raised to callers; everything that happens
on the wire is turned into an ``Outcome`` before it reaches them.
"""

from __future__ import annotations

import asyncio
from typing import Any

import aiohttp


class BggError(Exception):
    """Base error for all client errors.

    Attributes:
        message: Error description
        url: Requested URL (if applicable)
        status: HTTP status code (if applicable)
    """

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        status: int | None = None,
    ) -> None:
        self.url = url
        self.status = status
        super().__init__(message)

    @property
    def is_retryable(self) -> bool:
        """Whether this error can be retried."""
        return False

    def to_dict(self) -> dict[str, Any]:
        """Serialize for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": str(self),
            "url": self.url,
            "status": self.status,
            "is_retryable": self.is_retryable,
        }


class TimeoutError(BggError):
    """Request timed out.

    This is retryable - BGG is regularly slow under load.
    """

    def __init__(
        self,
        message: str = "Request timed out",
        *,
        timeout_seconds: float | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.timeout_seconds = timeout_seconds

    @property
    def is_retryable(self) -> bool:
        return True

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d["timeout_seconds"] = self.timeout_seconds
        return d


class NetworkError(BggError):
    """Network connectivity error.

    This is retryable - might be a temporary network issue.
    """

    def __init__(self, message: str = "Network error", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)

    @property
    def is_retryable(self) -> bool:
        return True


class DecodeError(BggError):
    """Response body could not be decoded into the expected structure.

    This is NOT retryable - BGG answers with the same body again. The raw
    body is kept so it can be surfaced as the failure outcome.
    """

    def __init__(
        self,
        message: str = "Could not decode response",
        *,
        body: str = "",
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.body = body


class ConfigurationError(BggError):
    """Invalid client configuration or request parameters.

    Raised before anything is sent.
    """

    def __init__(
        self,
        message: str = "Invalid configuration",
        *,
        field: str | None = None,
        value: Any = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d["field"] = self.field
        d["value"] = str(self.value) if self.value is not None else None
        return d


class ClientClosedError(BggError):
    """Request issued on a client that has already been closed."""

    def __init__(
        self,
        message: str = "Client closed, create a new client to make requests",
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)


def classify_exception(error: Exception, url: str | None = None) -> BggError:
    """Classify a transport exception into a BggError.

    Args:
        error: The exception raised while talking to BGG
        url: Requested URL for context

    Returns:
        Appropriate BggError subclass
    """
    if isinstance(error, BggError):
        return error

    if isinstance(error, (asyncio.TimeoutError, aiohttp.ServerTimeoutError)):
        return TimeoutError(str(error) or "Request timed out", url=url)

    if isinstance(error, (aiohttp.ClientError, ConnectionError)):
        return NetworkError(str(error) or type(error).__name__, url=url)

    error_str = str(error).lower()

    timeout_indicators = ["timeout", "timed out", "deadline exceeded"]
    if any(indicator in error_str for indicator in timeout_indicators):
        return TimeoutError(str(error), url=url)

    network_indicators = [
        "connection",
        "network",
        "unreachable",
        "refused",
        "reset",
        "broken pipe",
    ]
    if any(indicator in error_str for indicator in network_indicators):
        return NetworkError(str(error), url=url)

    return BggError(str(error), url=url)
