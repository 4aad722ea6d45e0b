"""Tests for the doctor command."""

from pathlib import Path

from click.testing import CliRunner

from gaap.cli.cli import cli
from gaap.core.context import GaapContext
from gaap.core.store.fake import FakePackageStore
from tests.fakes.user_feedback import FakeUserFeedback
from tests.test_utils.builders import config_at, make_record


def test_doctor_clean() -> None:
    runner = CliRunner()
    feedback = FakeUserFeedback()
    ctx = GaapContext.for_test(
        store=FakePackageStore([make_record("cli/cli", "v1")]), feedback=feedback
    )

    result = runner.invoke(cli, ["doctor"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert feedback.contains("No problems found")


def test_doctor_reports_broken_records() -> None:
    runner = CliRunner()
    store = FakePackageStore([make_record("acme/tool", "v1", binary="")])
    ctx = GaapContext.for_test(store=store)

    result = runner.invoke(cli, ["doctor"], obj=ctx)

    assert result.exit_code == 1
    assert "broken: acme/tool v1: empty or whitespace binary name" in result.output
    assert "gaap doctor --fix" in result.output
    assert "Error: 1 broken record(s): acme/tool" in result.output
    assert store.deleted == []


def test_doctor_fix_removes_broken_records() -> None:
    runner = CliRunner()
    store = FakePackageStore(
        [make_record("acme/tool", "v1", binary="wrong-name"), make_record("cli/cli", "v1")]
    )
    ctx = GaapContext.for_test(store=store)

    result = runner.invoke(cli, ["doctor", "--fix"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert "removed: acme/tool v1" in result.output
    assert [r.full_name for r in store.list_packages()] == ["cli/cli"]


def test_doctor_reports_orphans_without_failing(tmp_path: Path) -> None:
    runner = CliRunner()
    actual = tmp_path / "bin" / "actual"
    actual.mkdir(parents=True)
    (actual / "stray-binary-v0").write_bytes(b"x")
    ctx = GaapContext.for_test(config=config_at(tmp_path))

    result = runner.invoke(cli, ["doctor", "--fix"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert "orphan: binary" in result.output
    assert "sweep_orphans = true" in result.output
    assert (actual / "stray-binary-v0").exists()
