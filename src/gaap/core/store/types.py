"""Core types for the metadata store."""

from dataclasses import dataclass
from datetime import datetime, timedelta


@dataclass(frozen=True)
class PackageRecord:
    """An installed package as the metadata store knows it.

    installed_at and updated_at are assigned by the store; values passed in
    to add() or update() are ignored.
    """

    owner: str
    repo: str
    version: str  # release tag, e.g. "v1.2.3"
    binary: str  # file name inside the binary store
    frozen: bool
    platform: str  # "os-arch"
    installed_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


def strictly_after(now: datetime, previous: datetime | None) -> datetime:
    """Return ``now``, nudged forward when the clock has not moved past ``previous``."""
    if previous is not None and now <= previous:
        return previous + timedelta(microseconds=1)
    return now
