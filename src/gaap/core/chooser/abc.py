"""Capability interface for picking one repository out of several."""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from gaap.core.github.types import Repository


class SelectionCancelled:
    """Sentinel returned when the user backs out without choosing."""

    def __repr__(self) -> str:
        return "SelectionCancelled()"


class RepositoryChooser(ABC):
    """Presents ranked candidates and returns a single pick.

    Keeps the resolver headless: interactive implementations block on the
    terminal, the non-interactive one fails instead of prompting.
    """

    @abstractmethod
    def present(
        self, query: str, candidates: Sequence[Repository]
    ) -> Repository | SelectionCancelled:
        """Ask for one of ``candidates`` (ranked best first).

        Args:
            query: The user's original input, for display and error messages
            candidates: At least two repositories, ranked by stars descending

        Raises:
            AmbiguousRepositoryError: If this chooser cannot prompt
        """
        ...
