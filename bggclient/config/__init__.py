"""Configuration module for the BGG client."""

from .settings import ClientSettings
from .constants import (
    # Admission control
    DEFAULT_MAX_CONCURRENT_REQUESTS,
    DEFAULT_REQUESTS_PER_WINDOW_LIMIT,
    DEFAULT_REQUEST_WINDOW_SIZE,
    # Retry
    MAX_RETRIES,
    TRANSIENT_STATUS_CODES,
    # Endpoint
    XML2_API_URL,
)

__all__ = [
    "ClientSettings",
    "DEFAULT_MAX_CONCURRENT_REQUESTS",
    "DEFAULT_REQUESTS_PER_WINDOW_LIMIT",
    "DEFAULT_REQUEST_WINDOW_SIZE",
    "MAX_RETRIES",
    "TRANSIENT_STATUS_CODES",
    "XML2_API_URL",
]
