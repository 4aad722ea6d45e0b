import logging
import os

import click

from gaap.cli.commands.configure import configure_group
from gaap.cli.commands.doctor import doctor_cmd
from gaap.cli.commands.freeze import freeze_cmd, unfreeze_cmd
from gaap.cli.commands.install import install_cmd
from gaap.cli.commands.list_cmd import list_cmd
from gaap.cli.commands.releases import releases_cmd
from gaap.cli.commands.remove import remove_cmd
from gaap.cli.commands.update import update_cmd
from gaap.core.context import create_context

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="gaap")
@click.option("-v", "--verbose", is_flag=True, help="Log debug detail to stderr.")
@click.option("-q", "--quiet", is_flag=True, help="Only print errors.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, quiet: bool) -> None:
    """Install command-line tools from GitHub releases."""
    # Enable debug logging with -v or the GAAP_DEBUG environment variable
    if verbose or os.getenv("GAAP_DEBUG"):
        logging.basicConfig(level=logging.DEBUG, format="[DEBUG %(name)s:%(lineno)d] %(message)s")

    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        ctx.obj = create_context(quiet=quiet)
        ctx.call_on_close(ctx.obj.store.close)
        ctx.call_on_close(ctx.obj.github.close)


cli.add_command(install_cmd)
cli.add_command(update_cmd)
cli.add_command(remove_cmd)
cli.add_command(list_cmd)
cli.add_command(freeze_cmd)
cli.add_command(unfreeze_cmd)
cli.add_command(releases_cmd)
cli.add_command(doctor_cmd)
cli.add_command(configure_group)


def main() -> None:
    """CLI entry point used by the `gaap` console script."""
    cli()
