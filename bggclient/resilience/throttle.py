"""Transport wrapper applying both admission constraints.

Every call first takes an admission from the rate window, then a
concurrency slot, and only then reaches the network.
"""

from __future__ import annotations

from ..core.types import HttpRequest, HttpResponse
from ..http.transport import RequestTimeouts, Transport
from .admission import AdmissionGate
from .window import WindowLimiter


class ThrottledTransport:
    """Transport admitting each call through a WindowLimiter and an AdmissionGate."""

    def __init__(
        self,
        transport: Transport,
        window: WindowLimiter,
        gate: AdmissionGate,
    ):
        self.transport = transport
        self.window = window
        self.gate = gate

    async def send(
        self,
        request: HttpRequest,
        timeouts: RequestTimeouts | None = None,
    ) -> HttpResponse:
        await self.window.acquire()
        async with self.gate:
            return await self.transport.send(request, timeouts)

    async def close(self) -> None:
        await self.transport.close()
