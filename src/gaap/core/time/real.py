"""Real clock implementation."""

import time
from datetime import UTC, datetime

from gaap.core.time.abc import Time


class RealTime(Time):
    """Production implementation backed by the system clock."""

    def now(self) -> datetime:
        return datetime.now(UTC)

    def monotonic(self) -> float:
        return time.monotonic()
