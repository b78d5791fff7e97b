"""Tests for bggclient/resilience/retry.py and backoff.py.

Transport replies are scripted; backoff sleeps are recorded instead of
waited for.
"""

import pytest

from bggclient.config import ClientSettings
from bggclient.core.errors import BggError, NetworkError, TimeoutError
from bggclient.core.types import HttpRequest
from bggclient.observability.metrics import RequestMetrics
from bggclient.resilience import (
    ExponentialBackoff,
    RetryingTransport,
    is_success_status,
    is_transient_status,
)
from fixtures.transport import ScriptedTransport, response

REQUEST = HttpRequest("https://boardgamegeek.com/xmlapi2/plays", {"username": "Novaeux"})


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def retrying(
    transport: ScriptedTransport,
    settings: ClientSettings,
    metrics: RequestMetrics | None = None,
) -> tuple[RetryingTransport, RecordingSleep]:
    sleep = RecordingSleep()
    return RetryingTransport(transport, settings, metrics, sleep=sleep), sleep


# =============================================================================
# Status classification
# =============================================================================


class TestStatusClassification:
    """Tests for is_transient_status() / is_success_status()."""

    @pytest.mark.parametrize("status", [202, 429, 500, 502, 503, 599])
    def test_transient(self, status):
        assert is_transient_status(status)
        assert not is_success_status(status)

    @pytest.mark.parametrize("status", [400, 401, 403, 404])
    def test_terminal_client_errors(self, status):
        assert not is_transient_status(status)
        assert not is_success_status(status)

    def test_success(self):
        assert is_success_status(200)
        assert is_success_status(204)


# =============================================================================
# RetryingTransport
# =============================================================================


class TestRetryingTransport:
    """Tests for RetryingTransport.execute()."""

    @pytest.mark.asyncio
    async def test_recovers_from_transient_statuses(self, settings):
        """[202, 429, 500, 200] takes exactly 4 attempts and succeeds."""
        transport = ScriptedTransport.sequence(
            [
                response("queued", 202),
                response("slow down", 429),
                response("oops", 500),
                response("<plays/>", 200),
            ]
        )
        metrics = RequestMetrics()
        client, sleep = retrying(transport, settings, metrics)

        outcome = await client.execute(REQUEST)

        assert outcome.is_success()
        assert outcome.data == b"<plays/>"
        assert len(transport.requests) == 4
        assert len(sleep.delays) == 3
        assert metrics.retries_by_reason == {"202": 1, "429": 1, "500": 1}
        assert metrics.successful == 1

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self, settings):
        """Five 500s with max_retries=3: 4 attempts, failure with the last body."""
        transport = ScriptedTransport.sequence(
            [response(f"error {i}", 500) for i in range(1, 6)]
        )
        client, _ = retrying(transport, settings)

        outcome = await client.execute(REQUEST)

        assert outcome.is_error()
        assert outcome.error == "error 4"
        assert len(transport.requests) == 4

    @pytest.mark.asyncio
    async def test_client_error_is_terminal(self, settings):
        """A 404 is returned at once."""
        transport = ScriptedTransport.sequence([response("not found", 404)])
        metrics = RequestMetrics()
        client, sleep = retrying(transport, settings, metrics)

        outcome = await client.execute(REQUEST)

        assert outcome.error == "not found"
        assert len(transport.requests) == 1
        assert sleep.delays == []
        assert metrics.failed == 1

    @pytest.mark.asyncio
    async def test_zero_retries_single_attempt(self, settings):
        """max_retries=0 sends exactly once."""
        settings.max_retries = 0
        transport = ScriptedTransport.sequence([response("busy", 503)])
        client, _ = retrying(transport, settings)

        outcome = await client.execute(REQUEST)

        assert outcome.error == "busy"
        assert len(transport.requests) == 1

    @pytest.mark.asyncio
    async def test_timeout_is_retried(self, settings):
        """Transport timeouts count as transient."""
        transport = ScriptedTransport.sequence(
            [TimeoutError("Request timed out", url=REQUEST.url), response("<plays/>")]
        )
        metrics = RequestMetrics()
        client, _ = retrying(transport, settings, metrics)

        outcome = await client.execute(REQUEST)

        assert outcome.is_success()
        assert len(transport.requests) == 2
        assert metrics.retries_by_reason == {"TimeoutError": 1}

    @pytest.mark.asyncio
    async def test_network_errors_exhaust_to_failure(self, settings):
        """Persistent connection errors end as a failure outcome, not an exception."""
        transport = ScriptedTransport.sequence([NetworkError("Connection refused")])
        client, _ = retrying(transport, settings)

        outcome = await client.execute(REQUEST)

        assert outcome.error == "Connection refused"
        assert len(transport.requests) == settings.max_retries + 1

    @pytest.mark.asyncio
    async def test_non_retryable_error_is_terminal(self, settings):
        """A non-retryable BggError from the transport is not retried."""
        transport = ScriptedTransport.sequence([BggError("bad request")])
        client, _ = retrying(transport, settings)

        outcome = await client.execute(REQUEST)

        assert outcome.error == "bad request"
        assert len(transport.requests) == 1

    @pytest.mark.asyncio
    async def test_unexpected_exception_propagates(self, settings):
        """Bugs below the retry layer are not turned into outcomes."""
        transport = ScriptedTransport.sequence([ValueError("bug")])
        client, _ = retrying(transport, settings)

        with pytest.raises(ValueError):
            await client.execute(REQUEST)

    @pytest.mark.asyncio
    async def test_delays_grow_exponentially(self):
        """Delays are base**attempt seconds without jitter."""
        settings = ClientSettings(
            max_retries=3, retry_base=2.0, retry_max_delay_ms=60_000, retry_jitter_ms=0
        )
        transport = ScriptedTransport.sequence([response("", 500)])
        client, sleep = retrying(transport, settings)

        await client.execute(REQUEST)

        assert sleep.delays == [2.0, 4.0, 8.0]

    @pytest.mark.asyncio
    async def test_max_retries_read_per_attempt(self, settings):
        """Lowering max_retries mid-request applies to that request."""

        def handler(request):
            settings.max_retries = 1
            return response("busy", 503)

        transport = ScriptedTransport(handler)
        client, _ = retrying(transport, settings)

        await client.execute(REQUEST)

        assert len(transport.requests) == 2

    @pytest.mark.asyncio
    async def test_timeouts_passed_from_settings(self, settings):
        """Every send carries the configured per-call timeouts."""
        settings.request_timeout_ms = 2_500
        settings.connect_timeout_ms = 500
        transport = ScriptedTransport.sequence([response("<plays/>")])
        client, _ = retrying(transport, settings)

        await client.execute(REQUEST)

        timeouts = transport.timeouts[0]
        assert timeouts.total == 2.5
        assert timeouts.connect == 0.5
        assert timeouts.socket is None


# =============================================================================
# ExponentialBackoff
# =============================================================================


class TestExponentialBackoff:
    """Tests for ExponentialBackoff.next_delay()."""

    def test_capped_at_max_delay(self):
        backoff = ExponentialBackoff(base=2.0, max_delay_ms=60_000, jitter_ms=0)
        assert backoff.next_delay(10) == 60.0

    def test_jitter_within_bounds(self):
        backoff = ExponentialBackoff(base=2.0, max_delay_ms=60_000, jitter_ms=1_000)
        for _ in range(50):
            assert 2.0 <= backoff.next_delay(1) <= 3.0

    def test_cap_includes_jitter(self):
        backoff = ExponentialBackoff(base=2.0, max_delay_ms=2_500, jitter_ms=1_000)
        for _ in range(50):
            assert backoff.next_delay(1) <= 2.5

    def test_huge_attempt_does_not_overflow(self):
        backoff = ExponentialBackoff(base=10.0, max_delay_ms=5_000, jitter_ms=0)
        assert backoff.next_delay(10_000) == 5.0

    def test_from_settings(self):
        settings = ClientSettings(retry_base=3.0, retry_max_delay_ms=100_000, retry_jitter_ms=0)
        assert ExponentialBackoff.from_settings(settings).next_delay(2) == 9.0
