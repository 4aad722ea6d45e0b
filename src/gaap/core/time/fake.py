"""Fake clock implementation for testing.

FakeTime hands out strictly increasing timestamps and a monotonic value that
only moves when a test advances it.
"""

from datetime import UTC, datetime, timedelta

from gaap.core.time.abc import Time


class FakeTime(Time):
    """In-memory clock.

    Each now() call returns a timestamp one second after the previous one, so
    "strictly later" assertions hold without sleeping.
    """

    def __init__(self, *, start: datetime | None = None, monotonic_start: float = 0.0) -> None:
        """Create FakeTime.

        Args:
            start: First timestamp returned by now() (default 2024-01-01 UTC)
            monotonic_start: Initial monotonic clock value
        """
        self._next = start or datetime(2024, 1, 1, tzinfo=UTC)
        self._monotonic = monotonic_start
        self._now_calls = 0

    @property
    def now_calls(self) -> int:
        """Number of now() calls made, for test assertions."""
        return self._now_calls

    def advance(self, seconds: float) -> None:
        """Move the monotonic clock forward."""
        self._monotonic += seconds

    def now(self) -> datetime:
        self._now_calls += 1
        current = self._next
        self._next = current + timedelta(seconds=1)
        return current

    def monotonic(self) -> float:
        return self._monotonic
