"""Chooser used with --non-interactive: ambiguity is an error."""

from collections.abc import Sequence

from gaap.core.chooser.abc import RepositoryChooser, SelectionCancelled
from gaap.core.errors import AmbiguousRepositoryError
from gaap.core.github.types import Repository


class NonInteractiveChooser(RepositoryChooser):
    def present(
        self, query: str, candidates: Sequence[Repository]
    ) -> Repository | SelectionCancelled:
        raise AmbiguousRepositoryError(query, list(candidates))
