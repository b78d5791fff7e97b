"""Async client for the BoardGameGeek XML API 2."""

from .client import BggClient
from .config import ClientSettings
from .core import (
    BggError,
    ClientClosedError,
    ConfigurationError,
    DecodeError,
    Domain,
    NetworkError,
    Outcome,
    SitemapLocationType,
    SkippedFetch,
    TimeoutError,
)
from .request import PaginatedRequest, Request

__version__ = "0.1.0"

__all__ = [
    "BggClient",
    "ClientSettings",
    # Results
    "Outcome",
    "SkippedFetch",
    "Request",
    "PaginatedRequest",
    # Enums
    "Domain",
    "SitemapLocationType",
    # Errors
    "BggError",
    "ClientClosedError",
    "ConfigurationError",
    "DecodeError",
    "NetworkError",
    "TimeoutError",
]
