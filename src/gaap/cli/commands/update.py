import click

from gaap.cli.core import cli_errors, open_store
from gaap.cli.output import error_output, user_output
from gaap.core.context import GaapContext
from gaap.core.engine import UpdateOutcome, UpdateStatus


def confirm_update(planned: UpdateOutcome) -> bool:
    user_output(f"Updating {planned.full_name} {planned.from_version} -> {planned.to_version}")
    if planned.asset is not None:
        user_output(f"  asset: {planned.asset.name}")
    return click.confirm("Proceed?", default=True, err=True)


def _report(ctx: GaapContext, outcome: UpdateOutcome) -> None:
    name = outcome.full_name
    if outcome.status == UpdateStatus.UPDATED:
        ctx.feedback.success(f"✓ Updated {name} {outcome.from_version} -> {outcome.to_version}")
    elif outcome.status == UpdateStatus.PLANNED:
        asset = outcome.asset.name if outcome.asset is not None else "?"
        user_output(f"Would update {name} {outcome.from_version} -> {outcome.to_version} ({asset})")
    elif outcome.status == UpdateStatus.SKIPPED_FROZEN:
        ctx.feedback.info(f"Skipped {name} (frozen at {outcome.from_version})")
    elif outcome.status == UpdateStatus.DECLINED:
        ctx.feedback.info(f"Left {name} at {outcome.from_version}")
    else:
        ctx.feedback.info(f"{name} is already at the latest release ({outcome.from_version})")


@click.command("update")
@click.argument("package", required=False)
@click.option("--dry-run", is_flag=True, help="Show available updates without installing them.")
@click.option(
    "-y",
    "--yes",
    "--non-interactive",
    "yes",
    is_flag=True,
    help="Update without asking for confirmation.",
)
@click.pass_obj
def update_cmd(ctx: GaapContext, package: str | None, dry_run: bool, yes: bool) -> None:
    """Update PACKAGE, or every installed package when none is given.

    Frozen packages are skipped. A failure in one package does not stop the
    others; the command exits 1 if any package failed.
    """
    open_store(ctx)
    engine = ctx.engine(non_interactive=True)
    confirm = None if yes else confirm_update

    if package is not None:
        with cli_errors():
            record = engine.lookup(package)
            outcome = engine.update(
                record.owner,
                record.repo,
                dry_run=dry_run,
                token=ctx.new_token(),
                confirm=confirm,
            )
        _report(ctx, outcome)
        return

    report = engine.update_all(dry_run=dry_run, token_factory=ctx.new_token, confirm=confirm)
    if not report.outcomes and not report.failures:
        user_output("No packages installed.")
        return

    for outcome in report.outcomes:
        _report(ctx, outcome)
    for failure in report.failures:
        error_output(str(failure.error))

    if not report.ok:
        user_output(f"\n{len(report.failures)} package(s) failed to update.")
        raise SystemExit(1)
