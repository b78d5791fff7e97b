"""Pytest configuration and shared fixtures."""

import pytest

from bggclient.config import ClientSettings


@pytest.fixture
def settings() -> ClientSettings:
    """Settings for fast tests.

    Retries wait at most 1ms and the rate window never fills up.
    """
    return ClientSettings(
        max_concurrent_requests=10,
        requests_per_window_limit=10_000,
        request_window_size=60.0,
        max_retries=3,
        retry_max_delay_ms=1,
        retry_jitter_ms=0,
    )
