"""Freeze and unfreeze commands."""

import click

from gaap.cli.core import cli_errors, open_store
from gaap.core.context import GaapContext


def _set_frozen(ctx: GaapContext, package: str, frozen: bool) -> None:
    open_store(ctx)
    engine = ctx.engine(non_interactive=True)
    with cli_errors():
        before = engine.lookup(package)
        record = engine.set_frozen(before.owner, before.repo, frozen)

    state = "frozen" if frozen else "unfrozen"
    if before.frozen == frozen:
        ctx.feedback.info(f"{record.full_name} is already {state}")
        return
    ctx.feedback.success(f"✓ {record.full_name} {record.version} is now {state}")


@click.command("freeze")
@click.argument("package")
@click.pass_obj
def freeze_cmd(ctx: GaapContext, package: str) -> None:
    """Pin PACKAGE at its installed version."""
    _set_frozen(ctx, package, True)


@click.command("unfreeze")
@click.argument("package")
@click.pass_obj
def unfreeze_cmd(ctx: GaapContext, package: str) -> None:
    """Let `gaap update` move PACKAGE again."""
    _set_frozen(ctx, package, False)
