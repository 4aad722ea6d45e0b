"""Map free-form user input to exactly one GitHub repository."""

import logging
from dataclasses import dataclass

from gaap.core.cancellation import CancellationToken
from gaap.core.chooser.abc import RepositoryChooser, SelectionCancelled
from gaap.core.errors import InvalidPackageNameError, NotFoundError, OperationCancelled
from gaap.core.github.abc import GitHub
from gaap.core.github.types import Repository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParsedQuery:
    """User input split into an optional owner and a name."""

    raw: str
    owner: str | None
    name: str


def parse_query(raw: str) -> ParsedQuery:
    """Validate input of the form "name" or "owner/name".

    Raises:
        InvalidPackageNameError: On empty input, empty halves or more than one "/"
    """
    text = raw.strip()
    if not text:
        raise InvalidPackageNameError("package name required")
    if "/" not in text:
        return ParsedQuery(raw=text, owner=None, name=text)
    parts = text.split("/")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        msg = f"invalid repository name: {raw} (expected format: owner/repo)"
        raise InvalidPackageNameError(msg)
    return ParsedQuery(raw=text, owner=parts[0], name=parts[1])


def rank_by_stars(items: list[Repository]) -> list[Repository]:
    """Stars descending; equal star counts keep search order."""
    return sorted(items, key=lambda repo: repo.stars, reverse=True)


class RepositoryResolver:
    """Runs the search cascade and disambiguates through a chooser.

    Cascade, stopping at the first step with any match:

    1. ``repo:owner/name`` when the input has a slash; one hit returns directly
    2. ``user:owner name in:name`` when the input has a slash
    3. ``in:name <input> sort:stars-desc``
    4. ``user:<input> sort:stars-desc``

    A step with a single match returns it; several matches go to the chooser.
    """

    def __init__(self, github: GitHub, chooser: RepositoryChooser) -> None:
        self._github = github
        self._chooser = chooser

    def search_steps(self, query: ParsedQuery) -> list[str]:
        steps: list[str] = []
        if query.owner is not None:
            steps.append(f"repo:{query.owner}/{query.name}")
            steps.append(f"user:{query.owner} {query.name} in:name")
        steps.append(f"in:name {query.raw} sort:stars-desc")
        steps.append(f"user:{query.raw} sort:stars-desc")
        return steps

    def resolve(self, raw: str, token: CancellationToken) -> Repository:
        """Resolve ``raw`` to one repository.

        Raises:
            InvalidPackageNameError: If ``raw`` cannot name a repository
            NotFoundError: If no step finds anything
            AmbiguousRepositoryError: If several match and the chooser cannot prompt
            OperationCancelled: If the user backs out of the choice
            UpstreamError: If a search fails
        """
        query = parse_query(raw)
        steps = self.search_steps(query)

        for position, search in enumerate(steps):
            result = self._github.search_repositories(search, token)
            logger.debug("search %r -> %d result(s)", search, result.total_count)
            if result.total_count == 0 or not result.items:
                continue

            exact_step = query.owner is not None and position == 0
            if exact_step:
                if result.total_count == 1:
                    return result.items[0]
                continue

            if len(result.items) == 1:
                return result.items[0]

            choice = self._chooser.present(query.raw, rank_by_stars(result.items))
            if isinstance(choice, SelectionCancelled):
                raise OperationCancelled("no repository selected")
            token.restart()
            return choice

        raise NotFoundError(f"no repositories found matching '{query.raw}'")
