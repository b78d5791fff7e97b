"""Core infrastructure for the BGG client."""

from .errors import (
    BggError,
    ClientClosedError,
    ConfigurationError,
    DecodeError,
    NetworkError,
    TimeoutError,
    classify_exception,
)
from .types import (
    Domain,
    HttpRequest,
    HttpResponse,
    Outcome,
    SitemapLocationType,
    SkippedFetch,
)

__all__ = [
    # Errors
    "BggError",
    "TimeoutError",
    "NetworkError",
    "DecodeError",
    "ConfigurationError",
    "ClientClosedError",
    "classify_exception",
    # Types
    "Domain",
    "HttpRequest",
    "HttpResponse",
    "Outcome",
    "SitemapLocationType",
    "SkippedFetch",
]
