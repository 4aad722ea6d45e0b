"""Type definitions for GitHub release and search data."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class Asset:
    """A single downloadable file attached to a release."""

    name: str
    size: int
    download_url: str


@dataclass(frozen=True)
class Release:
    """A GitHub release."""

    tag_name: str
    assets: list[Asset] = field(default_factory=list)
    name: str = ""
    published_at: datetime | None = None
    body: str = ""


@dataclass(frozen=True)
class Repository:
    """A repository search hit."""

    full_name: str  # "owner/name"
    owner: str
    name: str
    description: str = ""
    stars: int = 0
    updated_at: str = ""


@dataclass(frozen=True)
class SearchResult:
    """Accumulated repository search results across all pages."""

    total_count: int
    items: list[Repository]
