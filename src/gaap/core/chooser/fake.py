"""Fake chooser for testing."""

from collections.abc import Sequence

from gaap.core.chooser.abc import RepositoryChooser, SelectionCancelled
from gaap.core.github.types import Repository


class FakeRepositoryChooser(RepositoryChooser):
    """Returns a pre-configured pick and records what it was shown.

    This class has NO public setup methods. All state is provided via constructor.
    """

    def __init__(self, *, pick_index: int | None = 0) -> None:
        """Args:
        pick_index: Index into the candidates to return; None simulates cancellation
        """
        self._pick_index = pick_index
        self._presented: list[tuple[str, list[Repository]]] = []

    @property
    def presented(self) -> list[tuple[str, list[Repository]]]:
        """(query, candidates) pairs passed to present(), for test assertions."""
        return self._presented

    def present(
        self, query: str, candidates: Sequence[Repository]
    ) -> Repository | SelectionCancelled:
        self._presented.append((query, list(candidates)))
        if self._pick_index is None:
            return SelectionCancelled()
        return candidates[self._pick_index]
