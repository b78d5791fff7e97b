"""Request metrics for the BGG client.

Tracks what the admission and retry layers did for one client instance.

Usage:
    async with BggClient() as client:
        await client.plays(username="Novaeux").paginate().call()
        print(client.metrics.to_summary())
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class RequestMetrics:
    """Counters for a single client instance.

    Single event loop: plain increments never interleave.
    """

    started_at: datetime = field(default_factory=datetime.now)

    # Wire
    attempts: int = 0
    successful: int = 0
    failed: int = 0
    retries: int = 0

    # Retries by HTTP status (or error type for network failures)
    retries_by_reason: dict[str, int] = field(default_factory=dict)

    # Admission
    gate_waits: int = 0
    window_waits: int = 0
    window_wait_seconds: float = 0.0

    # Decoding (wire success, unusable body)
    decode_failures: int = 0

    # Aggregation
    skipped_fetches: int = 0

    @property
    def success_rate(self) -> float:
        """Success rate of completed requests as percentage (0-100)."""
        completed = self.successful + self.failed
        if completed == 0:
            return 0.0
        return self.successful / completed * 100

    def record_attempt(self) -> None:
        """Record a request leaving the process."""
        self.attempts += 1

    def record_success(self) -> None:
        self.successful += 1

    def record_failure(self) -> None:
        """Record a request that ended as a failure outcome."""
        self.failed += 1

    def record_retry(self, reason: str) -> None:
        """Record a retry with its reason (status code or error type)."""
        self.retries += 1
        self.retries_by_reason[reason] = self.retries_by_reason.get(reason, 0) + 1

    def record_gate_wait(self) -> None:
        """Record a request waiting for a concurrency slot."""
        self.gate_waits += 1

    def record_window_wait(self, seconds: float) -> None:
        """Record a request waiting for the rate window to roll over."""
        self.window_waits += 1
        self.window_wait_seconds += seconds

    def record_decode_failure(self) -> None:
        self.decode_failures += 1

    def record_skip(self, count: int = 1) -> None:
        """Record follow-up fetches dropped from an aggregate."""
        self.skipped_fetches += count

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "started_at": self.started_at.isoformat(),
            "attempts": self.attempts,
            "successful": self.successful,
            "failed": self.failed,
            "success_rate": round(self.success_rate, 2),
            "retries": self.retries,
            "retries_by_reason": self.retries_by_reason,
            "gate_waits": self.gate_waits,
            "window_waits": self.window_waits,
            "window_wait_seconds": round(self.window_wait_seconds, 2),
            "decode_failures": self.decode_failures,
            "skipped_fetches": self.skipped_fetches,
        }

    def to_summary(self) -> str:
        """Generate human-readable summary."""
        lines = [
            "Request Summary",
            "=" * 40,
            f"Attempts: {self.attempts}",
            f"Success: {self.successful} ({self.success_rate:.1f}%)",
            f"Failed: {self.failed}",
            f"Retries: {self.retries}",
        ]

        if self.retries_by_reason:
            lines.append("")
            lines.append("Retries by Reason:")
            for reason, count in sorted(self.retries_by_reason.items(), key=lambda x: -x[1]):
                lines.append(f"  {reason}: {count}")

        if self.gate_waits or self.window_waits:
            lines.append("")
            lines.append(f"Concurrency Waits: {self.gate_waits}")
            lines.append(
                f"Window Waits: {self.window_waits} ({self.window_wait_seconds:.1f}s)"
            )

        if self.decode_failures > 0:
            lines.append(f"\nDecode Failures: {self.decode_failures}")

        if self.skipped_fetches > 0:
            lines.append(f"\nSkipped Fetches: {self.skipped_fetches}")

        return "\n".join(lines)
