"""Error taxonomy shared by every gaap component.

All failures the engine, resolver, store and release source surface derive
from GaapError. The engine annotates errors with the operation and package
identity before re-raising them, so the CLI can print a single line that says
what was being done to which package.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gaap.core.github.types import Repository


class GaapError(Exception):
    """Base class for all gaap failures."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
        self.operation: str | None = None
        self.package: str | None = None

    def annotate(self, operation: str, package: str) -> "GaapError":
        """Attach operation and package identity, keeping the first annotation.

        Returns self so callers can write ``raise err.annotate(...)``.
        """
        if self.operation is None:
            self.operation = operation
            self.package = package
        return self

    def __str__(self) -> str:
        if self.operation is None:
            return self.message
        return f"{self.operation} {self.package}: {self.message}"


class NotFoundError(GaapError):
    """No matching repository, or no package record."""


class AmbiguousRepositoryError(NotFoundError):
    """Search matched several repositories and nobody could pick one."""

    def __init__(self, query: str, candidates: "list[Repository]") -> None:
        names = ", ".join(c.full_name for c in candidates[:5])
        more = "" if len(candidates) <= 5 else f" (+{len(candidates) - 5} more)"
        super().__init__(
            f"'{query}' matches {len(candidates)} repositories: {names}{more}; "
            "use the exact owner/repo form"
        )
        self.query = query
        self.candidates = candidates


class AlreadyExistsError(GaapError):
    """Duplicate install target or duplicate metadata record."""


class NoSuitableAssetError(GaapError):
    """Platform resolution yielded nothing usable."""


class UpstreamError(GaapError):
    """Network or API failure talking to GitHub."""

    def __init__(
        self, message: str, *, status_code: int | None = None, timed_out: bool = False
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.timed_out = timed_out


class FilesystemError(GaapError):
    """Permission or I/O failure while touching the binary store or symlinks."""


class IntegrityViolationError(GaapError):
    """Metadata store and filesystem disagree."""


class MetadataStoreError(GaapError):
    """The metadata database failed for a reason other than a missing or duplicate key."""


class InvalidPackageNameError(GaapError):
    """User input cannot name a repository."""


class OperationCancelled(GaapError):
    """The user backed out of an interactive choice.

    Not a failure: the CLI reports it and exits successfully.
    """
