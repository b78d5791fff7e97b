"""Network transport for the BGG client.

The core only needs ``send(request, timeouts) -> HttpResponse``; the
aiohttp implementation below is what a client uses unless a test or an
application supplies its own.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Protocol

import aiohttp

from ..config import ClientSettings
from ..core.errors import ClientClosedError, TimeoutError, classify_exception
from ..core.types import HttpRequest, HttpResponse
from ..observability.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RequestTimeouts:
    """Per-call timeouts in seconds. None disables that timeout."""

    total: float | None = None
    connect: float | None = None
    socket: float | None = None

    @classmethod
    def from_settings(cls, settings: ClientSettings) -> RequestTimeouts:
        def seconds(ms: int | None) -> float | None:
            return ms / 1000 if ms is not None else None

        return cls(
            total=seconds(settings.request_timeout_ms),
            connect=seconds(settings.connect_timeout_ms),
            socket=seconds(settings.socket_timeout_ms),
        )


class Transport(Protocol):
    """Sends one request and returns the raw response."""

    async def send(
        self,
        request: HttpRequest,
        timeouts: RequestTimeouts | None = None,
    ) -> HttpResponse:
        """Send request.

        Raises:
            TimeoutError: The call exceeded one of its timeouts
            NetworkError: Connection level failure
            ClientClosedError: The transport was closed
        """
        ...

    async def close(self) -> None:
        ...


class AiohttpTransport:
    """aiohttp backed transport with a lazily created session."""

    DEFAULT_HEADERS = {
        "Accept": "*/*",
        "Accept-Charset": "UTF-8",
        "Accept-Encoding": "gzip",
    }

    def __init__(self, settings: ClientSettings):
        """
        Initialize the transport.

        Args:
            settings: Client settings, read for headers when the session is
                created and for timeouts on every call.
        """
        self.settings = settings
        self._session: aiohttp.ClientSession | None = None
        self._closed = False

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session.

        Raises:
            ClientClosedError: The transport was closed
        """
        if self._closed:
            raise ClientClosedError()
        if self._session is None or self._session.closed:
            headers = {**self.DEFAULT_HEADERS, "User-Agent": self.settings.user_agent}
            self._session = aiohttp.ClientSession(headers=headers)
        return self._session

    async def close(self) -> None:
        """Close the session. Later sends raise ClientClosedError."""
        self._closed = True
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    @property
    def closed(self) -> bool:
        return self._closed

    async def __aenter__(self) -> AiohttpTransport:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def send(
        self,
        request: HttpRequest,
        timeouts: RequestTimeouts | None = None,
    ) -> HttpResponse:
        if self._closed:
            # Follow-ups still queued when the client closed
            raise ClientClosedError(url=request.display_url)
        timeouts = timeouts or RequestTimeouts.from_settings(self.settings)
        client_timeout = aiohttp.ClientTimeout(
            total=timeouts.total,
            connect=timeouts.connect,
            sock_read=timeouts.socket,
        )
        session = await self._get_session()

        try:
            async with session.request(
                request.method,
                request.url,
                params=dict(request.params),
                timeout=client_timeout,
            ) as resp:
                body = await resp.read()
                return HttpResponse(
                    status=resp.status,
                    body=body,
                    headers=dict(resp.headers),
                )
        except asyncio.TimeoutError as e:
            raise TimeoutError(
                f"Request timed out: {request.display_url}",
                url=request.display_url,
                timeout_seconds=timeouts.total,
            ) from e
        except (aiohttp.ClientError, OSError) as e:
            raise classify_exception(e, url=request.display_url) from e
