"""Shared plumbing for gaap commands."""

from collections.abc import Iterator
from contextlib import contextmanager

from gaap.cli.output import error_output, user_output
from gaap.core.context import GaapContext
from gaap.core.errors import GaapError, OperationCancelled


@contextmanager
def cli_errors() -> Iterator[None]:
    """Turn GaapError into a styled message and exit status 1.

    OperationCancelled is not a failure: it prints "Cancelled." and exits 0.
    """
    try:
        yield
    except OperationCancelled:
        user_output("Cancelled.")
        raise SystemExit(0) from None
    except GaapError as e:
        error_output(str(e))
        raise SystemExit(1) from e


def open_store(ctx: GaapContext) -> None:
    """Create the metadata schema if needed; every store-backed command calls this first."""
    with cli_errors():
        ctx.store.initialize()
