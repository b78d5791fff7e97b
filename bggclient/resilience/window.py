"""Fixed-window rate limiter.

Bounds the number of requests admitted per window for one client:
- The window opens on the first admission after a rollover
- Once `requests_per_window_limit` requests were admitted, callers sleep
  until the window rolls over, then compete for the fresh window
- Window size and limit are read from the settings on every check
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, TypeVar

from ..config import ClientSettings
from ..observability.logger import get_logger
from ..observability.metrics import RequestMetrics

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class WindowLimiter:
    """Counter-plus-rollover window limiter.

    Usage:
        limiter = WindowLimiter(settings)

        # Acquire before making request
        await limiter.acquire()
        await make_request()

        # Or wrap the call
        await limiter.admit(make_request)
    """

    settings: ClientSettings
    metrics: RequestMetrics | None = None
    clock: Callable[[], float] = time.monotonic

    # State
    _window_start: float | None = field(default=None, init=False)
    _count: int = field(default=0, init=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False)

    @property
    def count(self) -> int:
        """Admissions in the current window."""
        return self._count

    @property
    def window_start(self) -> float | None:
        return self._window_start

    async def admit(
        self,
        operation: Callable[..., Awaitable[T]],
        *args: Any,
        **kwargs: Any,
    ) -> T:
        """Wait for window capacity, then run operation."""
        await self.acquire()
        return await operation(*args, **kwargs)

    async def acquire(self) -> float:
        """Take one admission from the current window.

        Blocks until the window has spare capacity.

        Returns:
            Total time spent waiting in seconds
        """
        waited = 0.0
        while True:
            async with self._lock:
                wait_time = self._try_admit()

            if wait_time is None:
                if waited:
                    if self.metrics is not None:
                        self.metrics.record_window_wait(waited)
                return waited

            logger.debug(
                f"Request window full, waiting {wait_time:.2f}s",
                extra={
                    "count": self._count,
                    "limit": self.settings.requests_per_window_limit,
                },
            )
            await asyncio.sleep(wait_time)
            waited += wait_time

    def reset(self) -> None:
        """Forget the current window."""
        self._window_start = None
        self._count = 0

    def _try_admit(self) -> float | None:
        """Admit now and return None, or return seconds until rollover."""
        now = self.clock()
        window_size = self.settings.request_window_size

        if self._window_start is None or now - self._window_start >= window_size:
            self._window_start = now
            self._count = 0

        if self._count < self.settings.requests_per_window_limit:
            self._count += 1
            return None

        return max(0.0, window_size - (now - self._window_start))
