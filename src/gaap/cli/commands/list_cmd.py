from datetime import datetime, timedelta

import click
from rich.console import Console
from rich.table import Table

from gaap.cli.core import cli_errors, open_store
from gaap.cli.output import user_output
from gaap.core.context import GaapContext
from gaap.core.store.types import PackageRecord


def _format_timestamp(value: datetime | None) -> str:
    if value is None:
        return "-"
    return value.strftime("%Y-%m-%d %H:%M")


def _is_stale(record: PackageRecord, cutoff: datetime) -> bool:
    last_touched = record.updated_at or record.installed_at
    return last_touched is None or last_touched < cutoff


def build_package_table(records: list[PackageRecord]) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("package", style="cyan", no_wrap=True)
    table.add_column("version", no_wrap=True)
    table.add_column("frozen", no_wrap=True)
    table.add_column("platform", no_wrap=True)
    table.add_column("updated", no_wrap=True)
    for record in records:
        table.add_row(
            record.full_name,
            record.version,
            "yes" if record.frozen else "",
            record.platform,
            _format_timestamp(record.updated_at),
        )
    return table


@click.command("list")
@click.option("--frozen", "frozen_only", is_flag=True, help="Only show frozen packages.")
@click.option(
    "--stale-days",
    type=click.IntRange(min=0),
    default=None,
    help="Only show packages not updated in the last N days.",
)
@click.pass_obj
def list_cmd(ctx: GaapContext, frozen_only: bool, stale_days: int | None) -> None:
    """List installed packages."""
    open_store(ctx)
    with cli_errors():
        records = ctx.store.list_packages()

    if frozen_only:
        records = [r for r in records if r.frozen]
    if stale_days is not None:
        cutoff = ctx.time.now() - timedelta(days=stale_days)
        records = [r for r in records if _is_stale(r, cutoff)]

    if not records:
        user_output("No packages found.")
        return

    console = Console(stderr=True, width=200)
    console.print(build_package_table(records))
