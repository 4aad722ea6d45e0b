"""Tests for the freeze and unfreeze commands."""

from click.testing import CliRunner

from gaap.cli.cli import cli
from gaap.core.context import GaapContext
from gaap.core.store.fake import FakePackageStore
from tests.fakes.user_feedback import FakeUserFeedback
from tests.test_utils.builders import make_record


def test_freeze_then_unfreeze() -> None:
    runner = CliRunner()
    store = FakePackageStore([make_record("cli/cli", "v1")])
    feedback = FakeUserFeedback()
    ctx = GaapContext.for_test(store=store, feedback=feedback)

    frozen = runner.invoke(cli, ["freeze", "cli"], obj=ctx)
    record = store.get("cli", "cli")
    assert record is not None and record.frozen

    thawed = runner.invoke(cli, ["unfreeze", "cli/cli"], obj=ctx)
    record = store.get("cli", "cli")
    assert record is not None and not record.frozen

    assert frozen.exit_code == 0, frozen.output
    assert thawed.exit_code == 0, thawed.output
    assert feedback.contains("cli/cli v1 is now frozen")
    assert feedback.contains("cli/cli v1 is now unfrozen")


def test_freeze_already_frozen() -> None:
    runner = CliRunner()
    store = FakePackageStore([make_record("cli/cli", "v1", frozen=True)])
    feedback = FakeUserFeedback()
    ctx = GaapContext.for_test(store=store, feedback=feedback)

    result = runner.invoke(cli, ["freeze", "cli/cli"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert feedback.contains("already frozen")
    assert store.updated == []


def test_freeze_unknown_package() -> None:
    runner = CliRunner()

    result = runner.invoke(cli, ["freeze", "cli/cli"], obj=GaapContext.for_test())

    assert result.exit_code == 1
    assert "Error: package not found: cli/cli" in result.output
