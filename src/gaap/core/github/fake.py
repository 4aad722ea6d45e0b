"""Fake GitHub operations for testing.

FakeGitHub is an in-memory implementation that accepts pre-configured state
in its constructor. Construct instances directly with keyword arguments.
"""

from pathlib import Path

from gaap.core.cancellation import CancellationToken
from gaap.core.errors import GaapError, NotFoundError
from gaap.core.github.abc import GitHub
from gaap.core.github.types import Asset, Release, SearchResult

DEFAULT_ASSET_CONTENT = b"#!/bin/sh\necho fake binary\n"


class FakeGitHub(GitHub):
    """In-memory fake implementation of the release source.

    This class has NO public setup methods. All state is provided via constructor
    using keyword arguments with sensible defaults (empty dicts).
    """

    def __init__(
        self,
        *,
        releases: dict[str, list[Release]] | None = None,
        search_results: dict[str, SearchResult] | None = None,
        asset_contents: dict[str, bytes] | None = None,
        latest_release_error: GaapError | None = None,
        search_error: GaapError | None = None,
        download_error: GaapError | None = None,
    ) -> None:
        """Create FakeGitHub with pre-configured state.

        Args:
            releases: Mapping of "owner/repo" -> releases, newest first
            search_results: Mapping of exact search query -> SearchResult
                (unlisted queries return zero results)
            asset_contents: Mapping of download URL -> bytes written on download
            latest_release_error: Raised by every get_latest_release() call
            search_error: Raised by every search_repositories() call
            download_error: Raised by every download_asset() call, before writing
        """
        self._releases = releases or {}
        self._search_results = search_results or {}
        self._asset_contents = asset_contents or {}
        self._latest_release_error = latest_release_error
        self._search_error = search_error
        self._download_error = download_error
        self._latest_release_calls: list[tuple[str, str]] = []
        self._search_calls: list[str] = []
        self._downloads: list[tuple[Asset, Path]] = []
        self._closed = False

    @property
    def latest_release_calls(self) -> list[tuple[str, str]]:
        """Read-only access to (owner, repo) pairs passed to get_latest_release()."""
        return self._latest_release_calls

    @property
    def search_calls(self) -> list[str]:
        """Queries passed to search_repositories(), in order."""
        return self._search_calls

    @property
    def downloads(self) -> list[tuple[Asset, Path]]:
        """(asset, destination) pairs passed to download_asset()."""
        return self._downloads

    @property
    def network_calls(self) -> int:
        return len(self._latest_release_calls) + len(self._search_calls) + len(self._downloads)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        self._closed = True

    def get_latest_release(self, owner: str, repo: str, token: CancellationToken) -> Release:
        self._latest_release_calls.append((owner, repo))
        token.raise_if_done()
        if self._latest_release_error is not None:
            raise self._latest_release_error
        releases = self._releases.get(f"{owner}/{repo}")
        if not releases:
            raise NotFoundError(f"no published release found for {owner}/{repo}")
        return releases[0]

    def get_releases(self, owner: str, repo: str, token: CancellationToken) -> list[Release]:
        token.raise_if_done()
        key = f"{owner}/{repo}"
        if key not in self._releases:
            raise NotFoundError(f"repository {key} not found")
        return list(self._releases[key])

    def search_repositories(self, query: str, token: CancellationToken) -> SearchResult:
        self._search_calls.append(query)
        token.raise_if_done()
        if self._search_error is not None:
            raise self._search_error
        return self._search_results.get(query, SearchResult(total_count=0, items=[]))

    def download_asset(self, asset: Asset, dest: Path, token: CancellationToken) -> None:
        self._downloads.append((asset, dest))
        token.raise_if_done()
        if self._download_error is not None:
            raise self._download_error
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(self._asset_contents.get(asset.download_url, DEFAULT_ASSET_CONTENT))
