"""
Scope resolution.

Translates the (parent id, user, item types) triple of a request into
the container that facet computations run against.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from ..backends.base import ItemStore
from ..id_utils import is_empty_id
from ..item_types import GLOBAL_ITEM_TYPES, is_single_type_in
from ..protocol import LibraryItem, LibraryUser
from .types import ResolvedScope

logger = logging.getLogger(__name__)


class ScopeResolver:
    """Resolves request parents against an item store.

    Rules, applied in order:
    - No parent id: no explicit parent.
    - Parent id unknown to the store: no explicit parent (not an error).
    - Exactly one requested type in GLOBAL_ITEM_TYPES: the parent is
      discarded, those types are always searched library-wide.

    Returned items are borrowed from the store and must not be mutated.
    """

    def __init__(self, item_store: ItemStore):
        self.item_store = item_store

    def resolve(
        self,
        parent_id: str | None,
        user: LibraryUser | None,
        include_item_types: Sequence[str],
    ) -> ResolvedScope:
        """Resolve the explicit parent of a request.

        Args:
            parent_id: Requested parent id, None/empty for no parent
            user: Viewing user (only logged here; roots are picked by scan_root)
            include_item_types: Requested item type names

        Returns:
            ResolvedScope with the parent (or None) and whether the
            type-override rule fired
        """
        parent: LibraryItem | None = None
        if not is_empty_id(parent_id):
            parent = self.item_store.get_item_by_id(parent_id)
            if parent is None:
                logger.debug("Parent %s not found, using no parent", parent_id)

        if is_single_type_in(include_item_types, GLOBAL_ITEM_TYPES):
            logger.debug(
                "Item type %s is searched globally, ignoring parent %s for user %s",
                include_item_types[0],
                parent_id,
                user.user_id if user else None,
            )
            return ResolvedScope(parent=None, overridden=True)

        return ResolvedScope(parent=parent)

    def scan_root(self, parent: LibraryItem | None, user: LibraryUser | None) -> LibraryItem:
        """Pick the container a recursive scan starts from.

        The explicit parent wins; without one the scan covers the user's
        root when a user is present, the whole library otherwise.
        """
        if parent is not None:
            return parent
        if user is not None:
            return self.item_store.get_user_root_container(user)
        return self.item_store.get_root_container()
