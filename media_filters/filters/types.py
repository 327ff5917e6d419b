"""
Filter scope and result types.

A Scope describes what a caller wants filter values for: who is
looking, under which container, and which item types and content
predicates apply. Results are plain ordered lists ready to be shipped
to a filtering UI.

Design Principles:
1. Everything here is request scoped and never cached
2. "Unspecified" is always None, never a sentinel value
3. Item type names are kept as given; comparisons fold case
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..protocol import LibraryItem, LibraryUser, NameIdPair


@dataclass(frozen=True)
class ContentFilters:
    """Tri-state live-TV content predicates.

    None leaves the predicate unconstrained; True/False require the
    item flag to have exactly that value.
    """

    is_airing: bool | None = None
    is_movie: bool | None = None
    is_sports: bool | None = None
    is_kids: bool | None = None
    is_news: bool | None = None
    is_series: bool | None = None

    def has_filters(self) -> bool:
        """Check if any predicate is specified."""
        return any(value is not None for value in self.to_dict().values())

    def to_dict(self) -> dict[str, bool | None]:
        return {
            "is_airing": self.is_airing,
            "is_movie": self.is_movie,
            "is_sports": self.is_sports,
            "is_kids": self.is_kids,
            "is_news": self.is_news,
            "is_series": self.is_series,
        }


@dataclass(frozen=True)
class ResolvedScope:
    """Outcome of scope resolution.

    Attributes:
        parent: Explicit parent to scope by, or None for "no parent"
        overridden: Whether the type-override rule discarded the parent
    """

    parent: LibraryItem | None
    overridden: bool = False


@dataclass
class Scope:
    """Everything a facet computation needs to know about one request."""

    user: LibraryUser | None = None
    parent: LibraryItem | None = None
    include_item_types: tuple[str, ...] = ()
    media_types: tuple[str, ...] = ()
    recursive: bool | None = None
    content: ContentFilters = field(default_factory=ContentFilters)


@dataclass
class LegacyQueryFilters:
    """Distinct facet values observed under a scope (legacy mode)."""

    years: list[int] = field(default_factory=list)
    genres: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    official_ratings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for transport."""
        return {
            "years": list(self.years),
            "genres": list(self.genres),
            "tags": list(self.tags),
            "official_ratings": list(self.official_ratings),
        }


@dataclass
class QueryFilters:
    """Genre references resolved through a genre index (indexed mode)."""

    genres: list[NameIdPair] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for transport."""
        return {"genres": [genre.to_dict() for genre in self.genres]}
