import click

from gaap.cli.core import cli_errors, open_store
from gaap.cli.output import user_output
from gaap.core.context import GaapContext


@click.command("remove")
@click.argument("package")
@click.option("--dry-run", is_flag=True, help="Show what would be deleted without deleting it.")
@click.pass_obj
def remove_cmd(ctx: GaapContext, package: str, dry_run: bool) -> None:
    """Remove an installed PACKAGE (REPO or OWNER/REPO)."""
    open_store(ctx)
    engine = ctx.engine(non_interactive=True)

    with cli_errors():
        record = engine.lookup(package)
        outcome = engine.remove(record.owner, record.repo, dry_run=dry_run)

    if outcome.dry_run:
        user_output(f"Would remove {record.full_name} {record.version}")
        user_output(f"  symlink: {outcome.symlink_path}")
        user_output(f"  binary:  {outcome.binary_path}")
        return

    ctx.feedback.success(f"✓ Removed {record.full_name} {record.version}")
    if not outcome.removed_symlink:
        ctx.feedback.info(f"  (symlink {outcome.symlink_path} was already gone)")
    if not outcome.removed_binary:
        ctx.feedback.info(f"  (binary {outcome.binary_path} was already gone)")
