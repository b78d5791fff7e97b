"""Pytest fixtures for BGG client tests."""

from collections.abc import Callable

import pytest

from bggclient import BggClient
from bggclient.config import ClientSettings
from bggclient.core.types import HttpRequest
from fixtures.transport import Reply, ScriptedTransport


@pytest.fixture
def make_client(settings: ClientSettings) -> Callable[..., tuple[BggClient, ScriptedTransport]]:
    """Build a client answering from a handler instead of the network."""

    def factory(
        handler: Callable[[HttpRequest], Reply],
        delay: float | Callable[[HttpRequest], float] = 0.0,
    ) -> tuple[BggClient, ScriptedTransport]:
        transport = ScriptedTransport(handler, delay=delay)
        return BggClient(settings=settings, transport=transport), transport

    return factory
