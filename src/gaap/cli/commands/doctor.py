import click

from gaap.cli.core import cli_errors, open_store
from gaap.cli.output import user_output
from gaap.core.context import GaapContext


@click.command("doctor")
@click.option(
    "--fix",
    is_flag=True,
    help="Delete broken records (and orphaned files when sweep_orphans is enabled).",
)
@click.pass_obj
def doctor_cmd(ctx: GaapContext, fix: bool) -> None:
    """Check installed packages against the binary store."""
    open_store(ctx)
    with cli_errors():
        report = ctx.auditor().audit(fix=fix)

    if report.clean:
        ctx.feedback.success("✓ No problems found")
        return

    for violation in report.violations:
        record = violation.record
        label = "removed" if record in report.removed_records else "broken"
        user_output(f"{label}: {record.full_name} {record.version}: {violation.reason}")
    for orphan in report.orphans:
        label = "removed" if orphan in report.removed_orphans else "orphan"
        user_output(f"{label}: {orphan.kind} {orphan.path}")

    if report.orphans and not report.removed_orphans:
        user_output("Orphaned files are only deleted by --fix with sweep_orphans = true.")
    if report.violations and not fix:
        user_output("Run `gaap doctor --fix` to delete broken records.")

    with cli_errors():
        report.raise_if_unfixed()
