"""Status-aware retrying transport.

Provides automatic retry with exponential backoff and jitter:
- Retries 202 (queued, try later), 429 (throttled) and any 5xx
- Retries timeouts and connection errors
- Other 4xx are terminal and returned at once
- Turns the final result into an Outcome, never raising for wire errors
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

from ..config import ClientSettings
from ..config.constants import TRANSIENT_STATUS_CODES
from ..core.errors import BggError
from ..core.types import HttpRequest, Outcome
from ..http.transport import RequestTimeouts, Transport
from ..observability.logger import get_logger
from ..observability.metrics import RequestMetrics
from .backoff import ExponentialBackoff

logger = get_logger(__name__)


def is_transient_status(status: int) -> bool:
    """Whether BGG may answer differently if asked again later."""
    return status in TRANSIENT_STATUS_CODES or 500 <= status <= 599


def is_success_status(status: int) -> bool:
    return 200 <= status <= 299 and status not in TRANSIENT_STATUS_CODES


class RetryingTransport:
    """Executes requests with retries on transient failures.

    Usage:
        retrying = RetryingTransport(transport, settings)

        outcome = await retrying.execute(HttpRequest(url, params))
        if outcome.is_success():
            body = outcome.data
    """

    def __init__(
        self,
        transport: Transport,
        settings: ClientSettings,
        metrics: RequestMetrics | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.transport = transport
        self.settings = settings
        self.metrics = metrics or RequestMetrics()
        self._sleep = sleep

    async def execute(self, request: HttpRequest) -> Outcome[bytes]:
        """Execute request, retrying transient failures.

        Args:
            request: Request to send

        Returns:
            Success with the response body, or failure with the last
            response body (error message for network failures)
        """
        url = request.display_url
        attempt = 0

        while True:
            self.metrics.record_attempt()
            try:
                response = await self.transport.send(
                    request, RequestTimeouts.from_settings(self.settings)
                )
            except BggError as e:
                if not e.is_retryable:
                    logger.debug(f"Non-retryable error: {type(e).__name__}", extra={"url": url})
                    return self._fail(str(e))
                reason = type(e).__name__
                last_body = str(e)
            else:
                if is_success_status(response.status):
                    self.metrics.record_success()
                    return Outcome.success(response.body)

                if not is_transient_status(response.status):
                    logger.info(
                        f"Got status code {response.status}, not retrying",
                        extra={"url": url, "status": response.status},
                    )
                    return self._fail(response.text)

                reason = str(response.status)
                last_body = response.text

            # Read per attempt so a runtime change applies to in-flight requests
            max_retries = self.settings.max_retries
            if attempt >= max_retries:
                logger.warning(
                    f"Max retries ({max_retries}) exhausted",
                    extra={"url": url, "reason": reason},
                )
                return self._fail(last_body)

            attempt += 1
            delay = ExponentialBackoff.from_settings(self.settings).next_delay(attempt)
            logger.info(
                f"Got status code {reason}, retrying request "
                f"{attempt}/{max_retries} after {delay:.1f}s",
                extra={"url": url, "reason": reason},
            )
            self.metrics.record_retry(reason)
            await self._sleep(delay)

    async def close(self) -> None:
        await self.transport.close()

    def _fail(self, body: str) -> Outcome[bytes]:
        self.metrics.record_failure()
        return Outcome.failure(body)
