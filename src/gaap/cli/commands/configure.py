"""View and change ~/.config/gaap/config.toml."""

from dataclasses import replace

import click

from gaap.cli.output import error_output, machine_output, user_output
from gaap.core.config import GaapConfig, expand_root
from gaap.core.context import GaapContext


def mask_token(token: str | None) -> str:
    if not token:
        return "(not set)"
    if len(token) <= 8:
        return "****"
    return f"{token[:4]}****{token[-4:]}"


def _load_stored(ctx: GaapContext) -> GaapConfig:
    try:
        return ctx.config_store.load()
    except ValueError as e:
        error_output(str(e))
        raise SystemExit(1) from e


def _save(ctx: GaapContext, config: GaapConfig) -> None:
    try:
        ctx.config_store.save(config)
    except PermissionError as e:
        error_output(str(e))
        raise SystemExit(1) from e


@click.group("configure")
def configure_group() -> None:
    """Manage gaap configuration."""
    pass


@configure_group.command("show")
@click.pass_obj
def show_cmd(ctx: GaapContext) -> None:
    """Print the effective configuration (environment overrides included)."""
    config = ctx.config
    location = str(ctx.config_store.path())
    if not ctx.config_store.exists():
        location += " (not created yet)"
    user_output(f"Config file: {location}")
    machine_output(f"root_dir = {config.root_dir}")
    machine_output(f"github_token = {mask_token(config.github_token)}")
    machine_output(f"timeout_seconds = {config.timeout_seconds:g}")
    machine_output(f"sweep_orphans = {str(config.sweep_orphans).lower()}")


@configure_group.command("token")
@click.argument("token", required=False)
@click.pass_obj
def token_cmd(ctx: GaapContext, token: str | None) -> None:
    """Store a GitHub token for API requests. An empty value clears it."""
    if token is None:
        token = click.prompt(
            "GitHub token (empty to clear)",
            default="",
            show_default=False,
            hide_input=True,
            err=True,
        )
    value = token.strip() or None

    _save(ctx, replace(_load_stored(ctx), github_token=value))

    if value is None:
        ctx.feedback.success("✓ GitHub token cleared")
    else:
        ctx.feedback.success(f"✓ GitHub token saved ({mask_token(value)})")


@configure_group.command("root")
@click.argument("path")
@click.pass_obj
def root_cmd(ctx: GaapContext, path: str) -> None:
    """Set the directory gaap installs into (default ~/gaap)."""
    root = expand_root(path)
    _save(ctx, replace(_load_stored(ctx), root_dir=root))
    ctx.feedback.success(f"✓ Root directory set to {root}")
    ctx.feedback.info(f"  Add {root / 'bin'} to your PATH to use installed tools.")
