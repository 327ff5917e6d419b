"""
Filters service exposing the two entry operations.

This module provides a service layer that coordinates:
- User lookup from raw request ids
- Scope resolution (parent lookup and type overrides)
- Legacy facet aggregation or indexed genre resolution

Both operations are read-only and idempotent: calling them twice
against an unchanged store yields identical results.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from ..backends.base import GenreIndex, ItemStore, LibraryBackend, UserStore
from ..id_utils import is_empty_id
from ..logging_utils import FiltersLoggerAdapter
from ..protocol import LibraryUser
from .indexed import IndexedFacetResolver
from .legacy import LegacyFacetAggregator
from .scope import ScopeResolver
from .types import ContentFilters, LegacyQueryFilters, QueryFilters, Scope

logger = logging.getLogger(__name__)


class FiltersService:
    """Service resolving filter values for library browsing UIs.

    Usage:
        service = FiltersService.from_backend(backend)

        # Distinct years/genres/tags/ratings under a folder
        legacy = service.get_legacy_filters(parent_id="movies", include_item_types=["Movie"])

        # Genre name/id pairs from the genre indexes
        filters = service.get_filters(include_item_types=["Audio"], recursive=True)
    """

    def __init__(
        self,
        item_store: ItemStore,
        user_store: UserStore,
        genre_index: GenreIndex,
        music_genre_index: GenreIndex,
    ) -> None:
        """Initialize the service.

        Args:
            item_store: Item tree access
            user_store: User lookup
            genre_index: Index over genres of non-music items
            music_genre_index: Index over genres of music items
        """
        self.user_store = user_store
        self.resolver = ScopeResolver(item_store)
        self.legacy_aggregator = LegacyFacetAggregator(item_store, self.resolver)
        self.indexed_resolver = IndexedFacetResolver(genre_index, music_genre_index)

    @classmethod
    def from_backend(cls, backend: LibraryBackend) -> FiltersService:
        """Create a service whose collaborators all come from one backend."""
        return cls(
            item_store=backend,
            user_store=backend,
            genre_index=backend.genre_index,
            music_genre_index=backend.music_genre_index,
        )

    def get_legacy_filters(
        self,
        user_id: str | None = None,
        parent_id: str | None = None,
        include_item_types: Sequence[str] = (),
        media_types: Sequence[str] = (),
    ) -> LegacyQueryFilters:
        """Get distinct years, genres, tags and official ratings.

        Args:
            user_id: Viewing user, None/empty/all-zero for anonymous
            parent_id: Container to scan, None/empty for the root
            include_item_types: Item type names to include (any case)
            media_types: Media types to include (any case)

        Returns:
            LegacyQueryFilters with every facet distinct and ordered

        Raises:
            NotAContainerError: If parent_id names a non-container item
        """
        log = FiltersLoggerAdapter(
            logger,
            {"operation": "get_legacy_filters", "user_id": user_id, "parent_id": parent_id},
        )
        user = self._lookup_user(user_id, log)
        resolved = self.resolver.resolve(parent_id, user, include_item_types)

        scope = Scope(
            user=user,
            parent=resolved.parent,
            include_item_types=tuple(include_item_types),
            media_types=tuple(media_types),
            recursive=True,
        )
        result = self.legacy_aggregator.aggregate(scope)

        log.debug(
            "Legacy filters: %d years, %d genres, %d tags, %d ratings",
            len(result.years),
            len(result.genres),
            len(result.tags),
            len(result.official_ratings),
        )
        return result

    def get_filters(
        self,
        user_id: str | None = None,
        parent_id: str | None = None,
        include_item_types: Sequence[str] = (),
        is_airing: bool | None = None,
        is_movie: bool | None = None,
        is_sports: bool | None = None,
        is_kids: bool | None = None,
        is_news: bool | None = None,
        is_series: bool | None = None,
        recursive: bool | None = None,
    ) -> QueryFilters:
        """Get genre name/id pairs from the genre indexes.

        Args:
            user_id: Viewing user, None/empty/all-zero for anonymous
            parent_id: Container to localize the lookup to, None for all
            include_item_types: Item type names to include (any case)
            is_airing, is_movie, is_sports, is_kids, is_news, is_series:
                Tri-state content predicates, None leaves them open
            recursive: Search descendants (default) or direct children only

        Returns:
            QueryFilters with genres in index order
        """
        log = FiltersLoggerAdapter(
            logger, {"operation": "get_filters", "user_id": user_id, "parent_id": parent_id}
        )
        user = self._lookup_user(user_id, log)
        resolved = self.resolver.resolve(parent_id, user, include_item_types)

        scope = Scope(
            user=user,
            parent=resolved.parent,
            include_item_types=tuple(include_item_types),
            recursive=recursive,
            content=ContentFilters(
                is_airing=is_airing,
                is_movie=is_movie,
                is_sports=is_sports,
                is_kids=is_kids,
                is_news=is_news,
                is_series=is_series,
            ),
        )
        genres = self.indexed_resolver.resolve_genres(scope)

        log.debug("Indexed filters: %d genres", len(genres))
        return QueryFilters(genres=genres)

    def _lookup_user(self, user_id: str | None, log: logging.LoggerAdapter) -> LibraryUser | None:
        if is_empty_id(user_id):
            return None

        user = self.user_store.get_user_by_id(user_id.strip())
        if user is None:
            log.warning("Unknown user %s, resolving filters without a user", user_id)
        return user
