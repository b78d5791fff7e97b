"""HTTP transport layer."""

from .transport import AiohttpTransport, RequestTimeouts, Transport

__all__ = [
    "AiohttpTransport",
    "RequestTimeouts",
    "Transport",
]
