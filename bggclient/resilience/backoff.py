"""Backoff policies for retrying transient BGG responses."""

import random
from abc import ABC, abstractmethod
from dataclasses import dataclass

from ..config import ClientSettings


class BackoffPolicy(ABC):
    """Abstract base for backoff policies.

    A backoff policy determines how long to wait between retry attempts.
    """

    @abstractmethod
    def next_delay(self, attempt: int) -> float:
        """Calculate delay for the next retry attempt.

        Args:
            attempt: The retry number (1 for the first retry)

        Returns:
            Delay in seconds before the next attempt
        """
        ...


@dataclass
class ExponentialBackoff(BackoffPolicy):
    """Exponential backoff with jitter.

    delay = min(base ^ attempt * 1000ms + uniform(0, jitter_ms), max_delay_ms)

    Example with defaults (base=2, jitter 1s, max 60s):
        retry 1: 2s + jitter
        retry 2: 4s + jitter
        retry 3: 8s + jitter
        retry 6: 60s (capped)
    """

    base: float = 2.0
    max_delay_ms: int = 60_000
    jitter_ms: int = 1_000

    @classmethod
    def from_settings(cls, settings: ClientSettings) -> "ExponentialBackoff":
        """Build a policy from the current settings values."""
        return cls(
            base=settings.retry_base,
            max_delay_ms=settings.retry_max_delay_ms,
            jitter_ms=settings.retry_jitter_ms,
        )

    def next_delay(self, attempt: int) -> float:
        """Calculate exponential delay with jitter, in seconds."""
        try:
            delay_ms = self.base**attempt * 1000
        except OverflowError:
            return self.max_delay_ms / 1000
        if self.jitter_ms > 0:
            delay_ms += random.uniform(0, self.jitter_ms)
        return min(delay_ms, self.max_delay_ms) / 1000
