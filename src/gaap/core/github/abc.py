"""Abstract base class for the GitHub release source."""

from abc import ABC, abstractmethod
from pathlib import Path

from gaap.core.cancellation import CancellationToken
from gaap.core.github.types import Asset, Release, SearchResult


class GitHub(ABC):
    """Abstract interface for GitHub release and search operations.

    All implementations (real and fake) must implement this interface. Every
    method blocks until done and is bound by the supplied token; network and
    API failures raise UpstreamError.
    """

    @abstractmethod
    def get_latest_release(self, owner: str, repo: str, token: CancellationToken) -> Release:
        """Fetch the latest published release.

        Raises:
            NotFoundError: If the repository has no published release
            UpstreamError: On any other API or transport failure
        """
        ...

    @abstractmethod
    def get_releases(self, owner: str, repo: str, token: CancellationToken) -> list[Release]:
        """Fetch every release, following pagination, newest first."""
        ...

    @abstractmethod
    def search_repositories(self, query: str, token: CancellationToken) -> SearchResult:
        """Run a repository search, accumulating every result page.

        Args:
            query: GitHub search syntax, e.g. "in:name ripgrep sort:stars-desc"
            token: Deadline for the whole paginated search
        """
        ...

    @abstractmethod
    def download_asset(self, asset: Asset, dest: Path, token: CancellationToken) -> None:
        """Download an asset to ``dest``, creating parent directories.

        A failed download leaves nothing at ``dest``.
        """
        ...

    def close(self) -> None:
        """Release connections held by the implementation. The default holds none."""
