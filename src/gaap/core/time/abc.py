"""Clock abstraction for testing.

Provides wall-clock timestamps for metadata records and a monotonic clock for
request deadlines, so tests can control both without sleeping.
"""

from abc import ABC, abstractmethod
from datetime import datetime


class Time(ABC):
    """Abstract clock operations for dependency injection."""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current time as a timezone-aware UTC datetime."""
        ...

    @abstractmethod
    def monotonic(self) -> float:
        """Return seconds from a monotonic clock, for measuring deadlines."""
        ...
