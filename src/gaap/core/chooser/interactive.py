"""Terminal chooser: a numbered rich table and a click prompt."""

from collections.abc import Sequence

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from gaap.core.chooser.abc import RepositoryChooser, SelectionCancelled
from gaap.core.github.types import Repository

MAX_ROWS = 20
DESCRIPTION_WIDTH = 100


def _truncate(text: str, width: int) -> str:
    if len(text) <= width:
        return text
    return text[: width - 3] + "..."


def build_candidate_table(query: str, candidates: Sequence[Repository], total: int) -> Table:
    table = Table(title=f"Select a repository for '{query}' (found {total})", show_lines=False)
    table.add_column("#", justify="right", style="cyan", no_wrap=True)
    table.add_column("Repository", style="bold", no_wrap=True)
    table.add_column("Stars", justify="right")
    table.add_column("Description")
    for number, repo in enumerate(candidates, start=1):
        table.add_row(
            str(number),
            repo.full_name,
            f"⭐ {repo.stars}",
            escape(_truncate(repo.description, DESCRIPTION_WIDTH)),
        )
    return table


class InteractiveChooser(RepositoryChooser):
    """Blocks on stdin until the user picks a number or quits."""

    def __init__(self, console: Console | None = None, max_rows: int = MAX_ROWS) -> None:
        self._console = console or Console(stderr=True)
        self._max_rows = max_rows

    def present(
        self, query: str, candidates: Sequence[Repository]
    ) -> Repository | SelectionCancelled:
        shown = list(candidates[: self._max_rows])
        self._console.print(build_candidate_table(query, shown, len(candidates)))
        if len(candidates) > len(shown):
            self._console.print(
                f"[dim]Showing the {len(shown)} most starred;"
                " refine the query to narrow it down.[/dim]"
            )

        while True:
            try:
                answer = click.prompt(
                    f"Choose 1-{len(shown)} (q to quit)", type=str, err=True
                ).strip()
            except click.Abort:
                return SelectionCancelled()
            if answer.lower() in ("q", "quit"):
                return SelectionCancelled()
            if answer.isdigit() and 1 <= int(answer) <= len(shown):
                return shown[int(answer) - 1]
            click.echo(f"Please enter a number between 1 and {len(shown)}.", err=True)
