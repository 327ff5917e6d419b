"""
Legacy facet aggregation.

Materializes every item under a scope with one recursive scan and
derives four independent facets from the list:

- years: positive production years, distinct, ascending
- genres: distinct ignoring case (first spelling seen wins), ordinal order
- tags: same rules as genres
- official ratings: non-blank, distinct ignoring case, ordinal order

Items lacking a field contribute nothing to that facet.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ..backends.base import ItemStore
from ..exceptions import NotAContainerError
from ..protocol import DtoOptions, ItemField, ItemQuery, LibraryItem
from .scope import ScopeResolver
from .types import LegacyQueryFilters, Scope

logger = logging.getLogger(__name__)

# Detail fields the aggregator consumes; stores must not hydrate anything else
LEGACY_DTO_OPTIONS = DtoOptions(
    fields=(ItemField.GENRES, ItemField.TAGS),
    enable_images=False,
    enable_user_data=False,
)


def distinct_ignore_case(values: Iterable[str]) -> list[str]:
    """Drop case-insensitive duplicates, keeping the first spelling seen."""
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        key = value.lower()
        if key not in seen:
            seen.add(key)
            result.append(value)
    return result


class LegacyFacetAggregator:
    """Computes legacy facets by scanning all items under a scope."""

    def __init__(self, item_store: ItemStore, resolver: ScopeResolver | None = None):
        self.item_store = item_store
        self.resolver = resolver or ScopeResolver(item_store)

    def build_query(self, scope: Scope) -> ItemQuery:
        """Build the scan query for a scope.

        Recursion is always on here, whatever the scope says.
        """
        return ItemQuery(
            user=scope.user,
            include_item_types=tuple(scope.include_item_types),
            media_types=tuple(scope.media_types),
            recursive=True,
            enable_total_record_count=False,
            dto_options=LEGACY_DTO_OPTIONS,
        )

    def aggregate(self, scope: Scope) -> LegacyQueryFilters:
        """Compute years, genres, tags and official ratings under a scope.

        Raises:
            NotAContainerError: If the scan root cannot list children
        """
        root = self.resolver.scan_root(scope.parent, scope.user)
        if not root.is_container:
            raise NotAContainerError(root.id, root.item_type)

        items = self.item_store.list_items(root, self.build_query(scope))
        logger.debug("Aggregating legacy facets over %d items under %s", len(items), root.id)

        return LegacyQueryFilters(
            years=self._years(items),
            genres=sorted(distinct_ignore_case(g for item in items for g in item.genres)),
            tags=sorted(distinct_ignore_case(t for item in items for t in item.tags)),
            official_ratings=sorted(
                distinct_ignore_case(
                    item.official_rating
                    for item in items
                    if item.official_rating and item.official_rating.strip()
                )
            ),
        )

    @staticmethod
    def _years(items: list[LibraryItem]) -> list[int]:
        # Unknown years are stored as None or a non-positive sentinel
        return sorted(
            {
                item.production_year
                for item in items
                if item.production_year is not None and item.production_year > 0
            }
        )
