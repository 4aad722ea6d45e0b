"""Real GitHub implementation using the REST API over httpx.

Every request derives its timeout from the caller's CancellationToken, and
paginated endpoints follow ``Link: rel="next"`` URLs until they run out.
"""

import logging
import os
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any, TypeVar

import httpx

from gaap.core.cancellation import CancellationToken
from gaap.core.errors import FilesystemError, NotFoundError, UpstreamError
from gaap.core.github.abc import GitHub
from gaap.core.github.types import Asset, Release, Repository, SearchResult

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
SEARCH_PAGE_SIZE = 100
DOWNLOAD_CHUNK_SIZE = 64 * 1024
# Used only when the caller's token carries no deadline.
FALLBACK_TIMEOUT_SECONDS = 30.0


def _parse_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value)


def parse_release(data: dict[str, Any]) -> Release:
    return Release(
        tag_name=data["tag_name"],
        name=data.get("name") or "",
        assets=[
            Asset(
                name=asset["name"],
                size=int(asset.get("size") or 0),
                download_url=asset["browser_download_url"],
            )
            for asset in data.get("assets") or []
        ],
        published_at=_parse_datetime(data.get("published_at")),
        body=data.get("body") or "",
    )


def parse_repository(data: dict[str, Any]) -> Repository:
    owner = (data.get("owner") or {}).get("login", "")
    return Repository(
        full_name=data["full_name"],
        owner=owner,
        name=data["name"],
        description=data.get("description") or "",
        stars=int(data.get("stargazers_count") or 0),
        updated_at=data.get("updated_at") or "",
    )


def _parse_release_page(data: list[dict[str, Any]]) -> list[Release]:
    return [parse_release(item) for item in data]


def _parse_search_page(data: dict[str, Any]) -> SearchResult:
    return SearchResult(
        total_count=int(data.get("total_count") or 0),
        items=[parse_repository(item) for item in data.get("items") or []],
    )


T = TypeVar("T")


def _decode(response: httpx.Response, context: str, parse: Callable[[Any], T]) -> T:
    """Parse a 200 body; a malformed payload is an upstream failure like any other."""
    try:
        return parse(response.json())
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        msg = f"{context}: malformed response from {response.url}: {e!r}"
        raise UpstreamError(msg, status_code=response.status_code) from e


class RealGitHub(GitHub):
    """Production implementation talking to api.github.com.

    Args:
        github_token: Personal access token; anonymous requests when None
        api_url: API root, overridable for GitHub Enterprise
        transport: httpx transport, injected by tests (httpx.MockTransport)
    """

    def __init__(
        self,
        *,
        github_token: str | None,
        api_url: str = GITHUB_API_URL,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": "gaap",
        }
        if github_token:
            headers["Authorization"] = f"token {github_token}"
        self._api_url = api_url.rstrip("/")
        self._client = httpx.Client(headers=headers, follow_redirects=True, transport=transport)

    def close(self) -> None:
        self._client.close()

    def _timeout(self, token: CancellationToken) -> httpx.Timeout:
        remaining = token.remaining()
        return httpx.Timeout(FALLBACK_TIMEOUT_SECONDS if remaining is None else remaining)

    def _get(
        self, url: str, token: CancellationToken, params: dict[str, Any] | None = None
    ) -> httpx.Response:
        token.raise_if_done()
        logger.debug("GET %s params=%s", url, params)
        try:
            response = self._client.get(url, params=params, timeout=self._timeout(token))
        except httpx.TimeoutException as e:
            raise UpstreamError(f"request to {url} timed out", timed_out=True) from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"request to {url} failed: {e}") from e
        token.raise_if_done()
        return response

    def _paginate(
        self, url: str, token: CancellationToken, params: dict[str, Any] | None
    ) -> list[httpx.Response]:
        pages: list[httpx.Response] = []
        next_url: str | None = url
        while next_url is not None:
            response = self._get(next_url, token, params)
            pages.append(response)
            if response.status_code != 200:
                break
            # the next link already carries the query string
            params = None
            next_url = response.links.get("next", {}).get("url")
        return pages

    def get_latest_release(self, owner: str, repo: str, token: CancellationToken) -> Release:
        url = f"{self._api_url}/repos/{owner}/{repo}/releases/latest"
        response = self._get(url, token)
        if response.status_code == 404:
            raise NotFoundError(f"no published release found for {owner}/{repo}")
        _raise_for_status(response, "failed to get latest release")
        return _decode(response, "failed to get latest release", parse_release)

    def get_releases(self, owner: str, repo: str, token: CancellationToken) -> list[Release]:
        url = f"{self._api_url}/repos/{owner}/{repo}/releases"
        releases: list[Release] = []
        for response in self._paginate(url, token, None):
            if response.status_code == 404:
                raise NotFoundError(f"repository {owner}/{repo} not found")
            _raise_for_status(response, "failed to get releases")
            releases.extend(_decode(response, "failed to get releases", _parse_release_page))
        return releases

    def search_repositories(self, query: str, token: CancellationToken) -> SearchResult:
        url = f"{self._api_url}/search/repositories"
        params = {"q": query, "per_page": SEARCH_PAGE_SIZE}
        total_count = 0
        items: list[Repository] = []
        for response in self._paginate(url, token, params):
            if response.status_code == 422:
                # GitHub rejects qualifiers naming unknown users instead of returning nothing
                logger.debug("search %r rejected as invalid: %s", query, response.text)
                return SearchResult(total_count=0, items=[])
            _raise_for_status(response, "failed to search repositories")
            page = _decode(response, "failed to search repositories", _parse_search_page)
            total_count = page.total_count
            items.extend(page.items)
        return SearchResult(total_count=total_count, items=items)

    def download_asset(self, asset: Asset, dest: Path, token: CancellationToken) -> None:
        token.raise_if_done()
        partial = dest.with_name(dest.name + ".part")
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemError(f"failed to create directory {dest.parent}: {e}") from e

        logger.debug("Downloading %s to %s", asset.download_url, dest)
        try:
            with self._client.stream(
                "GET",
                asset.download_url,
                headers={"Accept": "application/octet-stream"},
                timeout=self._timeout(token),
            ) as response:
                if response.status_code != 200:
                    response.read()
                    _raise_for_status(response, f"failed to download asset {asset.name}")
                with partial.open("wb") as f:
                    for chunk in response.iter_bytes(DOWNLOAD_CHUNK_SIZE):
                        token.raise_if_done()
                        f.write(chunk)
            os.replace(partial, dest)
        except httpx.TimeoutException as e:
            partial.unlink(missing_ok=True)
            raise UpstreamError(f"download of {asset.name} timed out", timed_out=True) from e
        except httpx.HTTPError as e:
            partial.unlink(missing_ok=True)
            raise UpstreamError(f"download of {asset.name} failed: {e}") from e
        except OSError as e:
            partial.unlink(missing_ok=True)
            raise FilesystemError(f"failed to write {dest}: {e}") from e
        except UpstreamError:
            partial.unlink(missing_ok=True)
            raise


def _raise_for_status(response: httpx.Response, context: str) -> None:
    if response.status_code == 200:
        return
    detail = response.text.strip()[:200]
    message = f"{context}: {response.status_code} {response.reason_phrase}"
    if detail:
        message = f"{message} - {detail}"
    raise UpstreamError(message, status_code=response.status_code)
