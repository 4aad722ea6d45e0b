"""Deadline and cancellation token threaded through every network call."""

from gaap.core.errors import UpstreamError
from gaap.core.time.abc import Time


class CancellationToken:
    """Bounds a blocking operation by a deadline and an explicit cancel flag.

    The caller creates one token per operation and hands it to the release
    source, which asks ``remaining()`` for each request's timeout and calls
    ``raise_if_done()`` between pages and download chunks.
    """

    def __init__(self, time: Time, timeout_seconds: float | None) -> None:
        """Create a token.

        Args:
            time: Clock used to measure the deadline
            timeout_seconds: Seconds from now; None means no deadline
        """
        self._time = time
        self._timeout = timeout_seconds
        self._deadline = None if timeout_seconds is None else time.monotonic() + timeout_seconds
        self._cancelled = False

    @classmethod
    def unbounded(cls, time: Time) -> "CancellationToken":
        return cls(time, None)

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def expired(self) -> bool:
        return self._deadline is not None and self._time.monotonic() >= self._deadline

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None when unbounded."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - self._time.monotonic())

    def raise_if_done(self) -> None:
        """Raise a timeout-classed UpstreamError once cancelled or expired."""
        if self._cancelled:
            raise UpstreamError("operation cancelled", timed_out=True)
        if self.expired():
            raise UpstreamError(f"operation timed out after {self._timeout:g}s", timed_out=True)

    def restart(self) -> None:
        """Start the deadline again from now, after time spent waiting on the user."""
        if self._timeout is not None:
            self._deadline = self._time.monotonic() + self._timeout
