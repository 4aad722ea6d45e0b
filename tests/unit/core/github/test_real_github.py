"""Tests for RealGitHub over httpx.MockTransport (no real network)."""

from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

import httpx
import pytest

from gaap.core.cancellation import CancellationToken
from gaap.core.chooser.fake import FakeRepositoryChooser
from gaap.core.engine import PackageEngine, UpdateStatus
from gaap.core.errors import NotFoundError, UpstreamError
from gaap.core.github.real import RealGitHub
from gaap.core.platform import Platform
from gaap.core.resolver import RepositoryResolver
from gaap.core.store.fake import FakePackageStore
from gaap.core.time.fake import FakeTime
from tests.test_utils.builders import config_at, make_asset, make_record

RELEASE_JSON = {
    "tag_name": "v1.2.3",
    "name": "Version 1.2.3",
    "published_at": "2024-02-03T04:05:06Z",
    "body": "notes",
    "assets": [
        {
            "name": "tool-linux-amd64.tar.gz",
            "size": 2048,
            "browser_download_url": "https://github.com/acme/tool/releases/download/v1.2.3/t.tgz",
        }
    ],
}


def _repo_json(full_name: str, stars: int) -> dict[str, object]:
    owner, name = full_name.split("/")
    return {
        "full_name": full_name,
        "name": name,
        "owner": {"login": owner},
        "description": None,
        "stargazers_count": stars,
        "updated_at": "2024-01-01T00:00:00Z",
    }


def _client(
    handler: Callable[[httpx.Request], httpx.Response], token: str | None = None
) -> RealGitHub:
    return RealGitHub(github_token=token, transport=httpx.MockTransport(handler))


def _token() -> CancellationToken:
    return CancellationToken(FakeTime(), 30.0)


def test_get_latest_release_parses_payload() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=RELEASE_JSON)

    release = _client(handler, token="abc123").get_latest_release("acme", "tool", _token())

    assert release.tag_name == "v1.2.3"
    assert release.published_at == datetime(2024, 2, 3, 4, 5, 6, tzinfo=UTC)
    assert release.assets[0].name == "tool-linux-amd64.tar.gz"
    assert release.assets[0].size == 2048
    assert requests[0].url.path == "/repos/acme/tool/releases/latest"
    assert requests[0].headers["Authorization"] == "token abc123"
    assert requests[0].headers["Accept"] == "application/vnd.github.v3+json"


def test_anonymous_requests_send_no_authorization() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=RELEASE_JSON)

    _client(handler).get_latest_release("acme", "tool", _token())

    assert "Authorization" not in seen[0].headers


def test_latest_release_404_is_not_found() -> None:
    github = _client(lambda request: httpx.Response(404, json={"message": "Not Found"}))

    with pytest.raises(NotFoundError, match="acme/tool"):
        github.get_latest_release("acme", "tool", _token())


def test_server_error_is_upstream_error() -> None:
    github = _client(lambda request: httpx.Response(502, text="bad gateway"))

    with pytest.raises(UpstreamError) as exc_info:
        github.get_latest_release("acme", "tool", _token())

    assert exc_info.value.status_code == 502
    assert "bad gateway" in str(exc_info.value)


def test_timeout_is_classified() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("read timed out", request=request)

    with pytest.raises(UpstreamError) as exc_info:
        _client(handler).get_latest_release("acme", "tool", _token())

    assert exc_info.value.timed_out


def test_expired_token_sends_nothing() -> None:
    calls: list[httpx.Request] = []
    time = FakeTime()
    token = CancellationToken(time, 1.0)
    time.advance(2.0)

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=RELEASE_JSON)

    with pytest.raises(UpstreamError):
        _client(handler).get_latest_release("acme", "tool", token)

    assert calls == []


def test_search_follows_next_links() -> None:
    requests: list[httpx.Request] = []
    page_two = "https://api.github.com/search/repositories?q=tool&per_page=100&page=2"

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.url.params.get("page") == "2":
            return httpx.Response(
                200, json={"total_count": 3, "items": [_repo_json("c/tool", 1)]}
            )
        return httpx.Response(
            200,
            json={
                "total_count": 3,
                "items": [_repo_json("a/tool", 10), _repo_json("b/tool", 5)],
            },
            headers={"Link": f'<{page_two}>; rel="next"'},
        )

    result = _client(handler).search_repositories("tool", _token())

    assert result.total_count == 3
    assert [r.full_name for r in result.items] == ["a/tool", "b/tool", "c/tool"]
    assert result.items[0].owner == "a"
    assert result.items[0].stars == 10
    assert result.items[0].description == ""
    assert requests[0].url.params["q"] == "tool"
    assert requests[0].url.params["per_page"] == "100"
    assert str(requests[1].url) == page_two


def test_search_422_means_no_results() -> None:
    github = _client(lambda request: httpx.Response(422, json={"message": "Validation Failed"}))

    result = github.search_repositories("user:ghost-user sort:stars-desc", _token())

    assert result.total_count == 0
    assert result.items == []


def test_get_releases_accumulates_pages_in_order() -> None:
    page_two = "https://api.github.com/repositories/1/releases?page=2"

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params.get("page") == "2":
            return httpx.Response(200, json=[{**RELEASE_JSON, "tag_name": "v1.0.0"}])
        return httpx.Response(
            200,
            json=[{**RELEASE_JSON, "tag_name": "v2.0.0"}],
            headers={"Link": f'<{page_two}>; rel="next"'},
        )

    releases = _client(handler).get_releases("acme", "tool", _token())

    assert [r.tag_name for r in releases] == ["v2.0.0", "v1.0.0"]


def test_download_writes_file_atomically(tmp_path: Path) -> None:
    payload = b"\x7fELF" + b"x" * 200_000

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Accept"] == "application/octet-stream"
        return httpx.Response(200, content=payload)

    dest = tmp_path / "bin" / "actual" / "acme-tool-v1"

    _client(handler).download_asset(make_asset("tool-linux-amd64"), dest, _token())

    assert dest.read_bytes() == payload
    assert list(dest.parent.iterdir()) == [dest]


def test_failed_download_leaves_no_partial_file(tmp_path: Path) -> None:
    github = _client(lambda request: httpx.Response(404, text="missing"))
    dest = tmp_path / "acme-tool-v1"

    with pytest.raises(UpstreamError) as exc_info:
        github.download_asset(make_asset("tool-linux-amd64"), dest, _token())

    assert exc_info.value.status_code == 404
    assert list(tmp_path.iterdir()) == []


def test_non_json_body_is_upstream_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>captive portal</html>")

    with pytest.raises(UpstreamError, match="malformed response") as exc_info:
        _client(handler).get_latest_release("acme", "tool", _token())

    assert exc_info.value.status_code == 200
    assert not exc_info.value.timed_out


@pytest.mark.parametrize(
    "payload",
    [
        {"name": "no tag"},
        {"tag_name": "v1", "assets": [{"name": "tool"}]},
        ["not", "an", "object"],
    ],
)
def test_release_payload_missing_fields_is_upstream_error(payload: object) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=payload)

    with pytest.raises(UpstreamError, match="failed to get latest release: malformed"):
        _client(handler).get_latest_release("acme", "tool", _token())


def test_search_item_without_full_name_is_upstream_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"total_count": 1, "items": [{"name": "tool"}]})

    with pytest.raises(UpstreamError, match="failed to search repositories: malformed"):
        _client(handler).search_repositories("in:name tool", _token())


def test_update_all_continues_past_malformed_release(tmp_path: Path) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/repos/a/one/releases/latest":
            return httpx.Response(200, text="<html>captive portal</html>")
        return httpx.Response(200, json=RELEASE_JSON)

    github = _client(handler)
    store = FakePackageStore([make_record("a/one", "v1"), make_record("b/tool", "v1")])
    engine = PackageEngine(
        config=config_at(tmp_path),
        github=github,
        store=store,
        resolver=RepositoryResolver(github, FakeRepositoryChooser()),
        platform=Platform("linux", "amd64"),
    )

    report = engine.update_all(dry_run=True, token_factory=_token)

    assert [f.full_name for f in report.failures] == ["a/one"]
    assert isinstance(report.failures[0].error, UpstreamError)
    assert str(report.failures[0].error).startswith("update a/one: failed to get latest release")
    assert [(o.full_name, o.status) for o in report.outcomes] == [
        ("b/tool", UpdateStatus.PLANNED)
    ]
