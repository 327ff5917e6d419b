"""
Indexed facet resolution.

Answers genre filters from a genre index instead of scanning items.
Two decisions are made per call:

1. Scope: ancestor-scoped (all descendants) when recursion is requested
   or implied by the parent kind, direct-parent scoped otherwise.
2. Index: the music genre index for a single music-like item type, the
   generic genre index for everything else.

The indexes deduplicate and order their results; this module only
routes and projects.
"""

from __future__ import annotations

import logging

from ..backends.base import GenreIndex
from ..item_types import MUSIC_ITEM_TYPES, is_single_type_in
from ..protocol import DtoOptions, ItemQuery, NameIdPair
from .types import Scope

logger = logging.getLogger(__name__)

INDEXED_DTO_OPTIONS = DtoOptions(fields=(), enable_images=False, enable_user_data=False)


class IndexedFacetResolver:
    """Routes genre queries to the generic or music genre index."""

    def __init__(self, genre_index: GenreIndex, music_genre_index: GenreIndex):
        """Initialize the resolver.

        Args:
            genre_index: Index over genres of non-music items
            music_genre_index: Index over genres of music items
        """
        self.genre_index = genre_index
        self.music_genre_index = music_genre_index

    def build_query(self, scope: Scope) -> ItemQuery:
        """Build the genre index query for a scope."""
        content = scope.content
        query = ItemQuery(
            user=scope.user,
            include_item_types=tuple(scope.include_item_types),
            dto_options=INDEXED_DTO_OPTIONS,
            is_airing=content.is_airing,
            is_movie=content.is_movie,
            is_sports=content.is_sports,
            is_kids=content.is_kids,
            is_news=content.is_news,
            is_series=content.is_series,
        )

        parent = scope.parent
        recursive = scope.recursive if scope.recursive is not None else True
        if recursive or (parent is not None and parent.kind.implies_recursive):
            query.ancestor_ids = [parent.id] if parent is not None else []
        else:
            query.parent = parent

        return query

    def select_index(self, scope: Scope) -> GenreIndex:
        """Pick the genre index that answers a scope."""
        if is_single_type_in(scope.include_item_types, MUSIC_ITEM_TYPES):
            return self.music_genre_index
        return self.genre_index

    def resolve_genres(self, scope: Scope) -> list[NameIdPair]:
        """Resolve the genres available under a scope, in index order."""
        query = self.build_query(scope)
        index = self.select_index(scope)
        logger.debug(
            "Resolving genres via %s (ancestors=%s, parent=%s)",
            "music genre index" if index is self.music_genre_index else "genre index",
            query.ancestor_ids,
            query.parent.id if query.parent else None,
        )
        return [NameIdPair(name=entry.name, id=entry.id) for entry in index.query_genres(query)]
