"""Output helpers for CLI commands with clear intent.

user_output: human-facing messages (stderr), so stdout stays clean
machine_output: data meant to be piped (stdout)
"""

import click


def user_output(message: str = "") -> None:
    click.echo(message, err=True)


def machine_output(message: str = "") -> None:
    click.echo(message)


def error_output(message: str) -> None:
    """Print ``message`` behind a red "Error: " prefix."""
    user_output(click.style("Error: ", fg="red") + message)
