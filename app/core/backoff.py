"""Retry delay schedules."""

from __future__ import annotations

from collections.abc import Iterator


def retry_schedule(*, max_attempts: int = 2, delay: float = 1.0) -> Iterator[tuple[int, float]]:
    """Yield (attempt, delay_seconds) pairs; the delay is slept before the next attempt.

    With the defaults the schedule is one retry after a fixed one second pause.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")
    if delay < 0:
        raise ValueError("delay must be >= 0")

    for attempt in range(1, max_attempts + 1):
        yield attempt, delay
