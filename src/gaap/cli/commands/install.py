import click

from gaap.cli.core import cli_errors, open_store
from gaap.cli.output import user_output
from gaap.core.context import GaapContext
from gaap.core.engine import InstallPlan


def confirm_install(plan: InstallPlan) -> bool:
    user_output(f"Installing {plan.full_name} {plan.version}")
    user_output(f"  asset: {plan.asset.name}")
    return click.confirm("Proceed?", default=True, err=True)


@click.command("install")
@click.argument("package")
@click.option("--freeze", is_flag=True, help="Pin the package so `gaap update` skips it.")
@click.option("--dry-run", is_flag=True, help="Show what would be installed without doing it.")
@click.option("-y", "--yes", is_flag=True, help="Install without asking for confirmation.")
@click.option(
    "--non-interactive",
    is_flag=True,
    help="Never prompt: fail when several repositories match and skip confirmation.",
)
@click.pass_obj
def install_cmd(
    ctx: GaapContext,
    package: str,
    freeze: bool,
    dry_run: bool,
    yes: bool,
    non_interactive: bool,
) -> None:
    """Install the latest release of PACKAGE (NAME or OWNER/REPO)."""
    open_store(ctx)
    engine = ctx.engine(non_interactive=non_interactive)
    confirm = None if yes or non_interactive else confirm_install

    with cli_errors():
        outcome = engine.install(
            package, freeze=freeze, dry_run=dry_run, token=ctx.new_token(), confirm=confirm
        )

    plan = outcome.plan
    if outcome.dry_run:
        user_output(f"Would install {plan.full_name} {plan.version} ({plan.platform})")
        user_output(f"  asset:   {plan.asset.name} ({plan.asset.size} bytes)")
        user_output(f"  binary:  {plan.binary_path}")
        user_output(f"  symlink: {plan.symlink_path}")
        if plan.frozen:
            user_output("  frozen:  yes")
        return

    ctx.feedback.success(f"✓ Installed {plan.full_name} {plan.version}")
    ctx.feedback.info(f"  {plan.symlink_path} -> {plan.binary_path}")
    if plan.frozen:
        ctx.feedback.info("  Frozen: `gaap update` will leave it alone.")
