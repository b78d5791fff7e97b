"""Concurrency gate for outbound requests.

Bounds the number of requests in flight for one client:
- Requests over the limit wait in FIFO order
- A finishing request hands its slot directly to the next waiter
- The limit is read from the settings on every admission
"""

from __future__ import annotations

import asyncio
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, TypeVar

from ..config import ClientSettings
from ..observability.logger import get_logger
from ..observability.metrics import RequestMetrics

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class AdmissionGate:
    """Counting gate with an explicit wait-queue.

    Usage:
        gate = AdmissionGate(settings)

        async with gate:
            response = await transport.send(request)

        # Or with admit:
        response = await gate.admit(transport.send, request)

    Never rejects: a caller waits as long as it takes for a slot. Lowering
    the limit at runtime does not revoke slots already handed out; the
    in-flight count drains down to the new limit.
    """

    settings: ClientSettings
    metrics: RequestMetrics | None = None

    # State
    _in_flight: int = field(default=0, init=False)
    _waiters: deque[asyncio.Future[None]] = field(default_factory=deque, init=False)

    @property
    def limit(self) -> int:
        """Current concurrency limit."""
        return self.settings.max_concurrent_requests

    @property
    def in_flight(self) -> int:
        """Number of reserved slots."""
        return self._in_flight

    @property
    def waiting(self) -> int:
        """Number of callers queued for a slot."""
        return sum(1 for waiter in self._waiters if not waiter.done())

    async def __aenter__(self) -> AdmissionGate:
        await self.acquire()
        return self

    async def __aexit__(self, *args: Any) -> None:
        self.release()

    async def admit(
        self,
        operation: Callable[..., Awaitable[T]],
        *args: Any,
        **kwargs: Any,
    ) -> T:
        """Run operation once a slot is free, releasing it afterwards.

        The slot is released however the operation ends, cancellation
        included.
        """
        await self.acquire()
        try:
            return await operation(*args, **kwargs)
        finally:
            self.release()

    async def acquire(self) -> None:
        """Reserve a slot, waiting in line if none is free."""
        # A raised limit frees slots for callers already in line first.
        self._wake_waiters()

        if self._in_flight < self.limit and not self.waiting:
            self._in_flight += 1
            return

        logger.debug(
            "Concurrent request limit reached",
            extra={"in_flight": self._in_flight, "limit": self.limit},
        )
        if self.metrics is not None:
            self.metrics.record_gate_wait()

        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        try:
            await waiter
        except asyncio.CancelledError:
            if waiter.done() and not waiter.cancelled():
                # Slot was handed over just before the cancellation landed.
                self.release()
            raise
        finally:
            if waiter in self._waiters:
                self._waiters.remove(waiter)

    def release(self) -> None:
        """Free a slot and hand it to the next waiter, if any."""
        if self._in_flight <= 0:
            raise RuntimeError("AdmissionGate released more times than acquired")
        self._in_flight -= 1
        self._wake_waiters()

    def _wake_waiters(self) -> None:
        """Hand free slots to queued callers in arrival order."""
        while self._waiters and self._in_flight < self.limit:
            waiter = self._waiters.popleft()
            if waiter.done():
                continue
            # Reserve on the waiter's behalf so no newcomer can overtake it.
            self._in_flight += 1
            waiter.set_result(None)
