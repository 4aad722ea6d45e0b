import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from gaap.cli.core import cli_errors
from gaap.cli.output import error_output, user_output
from gaap.core.asset_selector import select_release_asset
from gaap.core.context import GaapContext
from gaap.core.errors import NoSuitableAssetError
from gaap.core.github.types import Release
from gaap.core.platform import Platform
from gaap.core.resolver import parse_query


def _asset_cell(platform: Platform, release: Release) -> str:
    try:
        return select_release_asset(platform, release.assets).name
    except NoSuitableAssetError:
        return "[dim]none[/dim]"


@click.command("releases")
@click.argument("repository")
@click.option("--limit", type=click.IntRange(min=1), default=10, show_default=True)
@click.pass_obj
def releases_cmd(ctx: GaapContext, repository: str, limit: int) -> None:
    """Show recent releases of OWNER/REPO and the asset gaap would pick."""
    with cli_errors():
        query = parse_query(repository)
    if query.owner is None:
        error_output(f"expected OWNER/REPO, got '{repository}'")
        raise SystemExit(1)

    with cli_errors():
        releases = ctx.github.get_releases(query.owner, query.name, ctx.new_token())

    if not releases:
        user_output(f"{query.owner}/{query.name} has no published releases.")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("tag", style="cyan", no_wrap=True)
    table.add_column("name")
    table.add_column("published", no_wrap=True)
    table.add_column("assets", justify="right")
    table.add_column(f"asset for {ctx.platform}", no_wrap=True)
    for release in releases[:limit]:
        published = release.published_at.strftime("%Y-%m-%d") if release.published_at else "-"
        table.add_row(
            release.tag_name,
            escape(release.name),
            published,
            str(len(release.assets)),
            _asset_cell(ctx.platform, release),
        )

    console = Console(stderr=True, width=200)
    console.print(table)
