"""Tests for the update command."""

from pathlib import Path

from click.testing import CliRunner

from gaap.cli.cli import cli
from gaap.core.context import GaapContext
from gaap.core.github.fake import FakeGitHub
from gaap.core.store.fake import FakePackageStore
from tests.fakes.user_feedback import FakeUserFeedback
from tests.test_utils.builders import config_at, make_record, make_release


def test_update_without_packages() -> None:
    runner = CliRunner()

    result = runner.invoke(cli, ["update"], obj=GaapContext.for_test())

    assert result.exit_code == 0, result.output
    assert "No packages installed." in result.output


def test_update_single_frozen_package_is_skipped() -> None:
    runner = CliRunner()
    github = FakeGitHub()
    feedback = FakeUserFeedback()
    ctx = GaapContext.for_test(
        github=github,
        store=FakePackageStore([make_record("cli/cli", "v1", frozen=True)]),
        feedback=feedback,
    )

    result = runner.invoke(cli, ["update", "cli"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert feedback.contains("Skipped cli/cli (frozen at v1)")
    assert github.network_calls == 0


def test_update_dry_run_prints_plan() -> None:
    runner = CliRunner()
    github = FakeGitHub(releases={"cli/cli": [make_release("v2", "gh_linux_amd64.tar.gz")]})
    store = FakePackageStore([make_record("cli/cli", "v1")])
    ctx = GaapContext.for_test(github=github, store=store)

    result = runner.invoke(cli, ["update", "--dry-run", "cli/cli"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert "Would update cli/cli v1 -> v2 (gh_linux_amd64.tar.gz)" in result.output
    assert store.updated == []


def test_update_unknown_package_exits_1() -> None:
    runner = CliRunner()

    result = runner.invoke(cli, ["update", "nope"], obj=GaapContext.for_test())

    assert result.exit_code == 1
    assert "Error: package not found: nope" in result.output


def test_update_all_reports_failures_and_exits_1(tmp_path: Path) -> None:
    runner = CliRunner()
    github = FakeGitHub(releases={"b/fresh": [make_release("v2", "fresh-linux-amd64")]})
    store = FakePackageStore([make_record("b/fresh", "v1"), make_record("c/gone", "v1")])
    feedback = FakeUserFeedback()
    ctx = GaapContext.for_test(
        config=config_at(tmp_path), github=github, store=store, feedback=feedback
    )

    result = runner.invoke(cli, ["update", "--yes"], obj=ctx)

    assert result.exit_code == 1
    assert feedback.contains("Updated b/fresh v1 -> v2")
    assert "Error: update c/gone: no published release found for c/gone" in result.output
    assert "1 package(s) failed to update." in result.output
    fresh = store.get("b", "fresh")
    assert fresh is not None and fresh.version == "v2"


def test_update_declined_leaves_package_alone(tmp_path: Path) -> None:
    runner = CliRunner()
    github = FakeGitHub(releases={"cli/cli": [make_release("v2", "gh_linux_amd64.tar.gz")]})
    store = FakePackageStore([make_record("cli/cli", "v1")])
    ctx = GaapContext.for_test(config=config_at(tmp_path), github=github, store=store)

    result = runner.invoke(cli, ["update", "cli"], obj=ctx, input="n\n")

    assert result.exit_code == 0, result.output
    assert "Updating cli/cli v1 -> v2" in result.output
    assert "Cancelled." in result.output
    assert github.downloads == []
    assert store.updated == []


def test_update_all_asks_per_package(tmp_path: Path) -> None:
    runner = CliRunner()
    github = FakeGitHub(
        releases={
            "a/one": [make_release("v2", "one-linux-amd64")],
            "b/two": [make_release("v2", "two-linux-amd64")],
        }
    )
    store = FakePackageStore([make_record("a/one", "v1"), make_record("b/two", "v1")])
    feedback = FakeUserFeedback()
    ctx = GaapContext.for_test(
        config=config_at(tmp_path), github=github, store=store, feedback=feedback
    )

    result = runner.invoke(cli, ["update"], obj=ctx, input="n\ny\n")

    assert result.exit_code == 0, result.output
    assert feedback.contains("Left a/one at v1")
    assert feedback.contains("Updated b/two v1 -> v2")
    one = store.get("a", "one")
    assert one is not None and one.version == "v1"
