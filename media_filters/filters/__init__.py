"""
Library filters module.

This module provides:
- ScopeResolver: Maps a request parent/type combination to a scan scope
- LegacyFacetAggregator: Distinct years, genres, tags and ratings by scan
- IndexedFacetResolver: Genre name/id pairs via the genre indexes
- FiltersService: The two entry operations wired to a backend

Usage:
    from media_filters.filters import FiltersService

    service = FiltersService.from_backend(backend)
    legacy = service.get_legacy_filters(user_id="u1", parent_id="movies")
    filters = service.get_filters(include_item_types=["MusicAlbum"])
"""

from .indexed import INDEXED_DTO_OPTIONS, IndexedFacetResolver
from .legacy import LEGACY_DTO_OPTIONS, LegacyFacetAggregator, distinct_ignore_case
from .scope import ScopeResolver
from .service import FiltersService
from .types import ContentFilters, LegacyQueryFilters, QueryFilters, ResolvedScope, Scope

__all__ = [
    # Types
    "Scope",
    "ResolvedScope",
    "ContentFilters",
    "LegacyQueryFilters",
    "QueryFilters",
    # Scope
    "ScopeResolver",
    # Legacy
    "LegacyFacetAggregator",
    "LEGACY_DTO_OPTIONS",
    "distinct_ignore_case",
    # Indexed
    "IndexedFacetResolver",
    "INDEXED_DTO_OPTIONS",
    # Service
    "FiltersService",
]
