"""GitHub release source: releases, repository search and asset download."""

from gaap.core.github.abc import GitHub
from gaap.core.github.types import Asset, Release, Repository, SearchResult

__all__ = ["Asset", "GitHub", "Release", "Repository", "SearchResult"]
