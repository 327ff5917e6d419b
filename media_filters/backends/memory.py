"""
In-memory library backend.

Keeps the item tree in dictionaries. Ideal for tests, small libraries
loaded from a snapshot file, and embedding in hosts that already hold
their library in memory.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import replace

from ..exceptions import NotAContainerError, StorageIOError
from ..item_types import is_music_type, normalize_type_name, type_name_set
from ..protocol import DtoOptions, ItemField, ItemQuery, LibraryItem, LibraryUser, NameIdPair
from .base import GenreIndex, LibraryBackend, to_name_id_pairs

logger = logging.getLogger(__name__)


class MemoryGenreIndex(GenreIndex):
    """Genre index computed on demand from a MemoryBackend."""

    def __init__(self, backend: MemoryBackend, music: bool):
        self._backend = backend
        self._music = music

    def query_genres(self, query: ItemQuery) -> list[NameIdPair]:
        # lower(name) -> ordinal-minimum representative
        representatives: dict[str, str] = {}
        for item in self._backend.iter_scoped_items(query):
            if is_music_type(item.item_type) != self._music:
                continue
            for genre in item.genres:
                key = genre.lower()
                current = representatives.get(key)
                if current is None or genre < current:
                    representatives[key] = genre

        ordered = sorted(representatives.values(), key=lambda name: (name.lower(), name))
        return to_name_id_pairs(ordered, music=self._music)


class MemoryBackend(LibraryBackend):
    """
    Dictionary-backed library backend.

    Features:
    - Items keyed by id, children kept in insertion order
    - Recursive listing by depth-first walk
    - Genre indexes computed per query (no caching)
    - Returned items are copies projected to the requested detail fields
    """

    def __init__(self) -> None:
        self._items: dict[str, LibraryItem] = {}
        self._children: dict[str, list[str]] = {}
        self._users: dict[str, LibraryUser] = {}
        self._root_id: str | None = None
        self._user_root_id: str | None = None
        self._genre_index = MemoryGenreIndex(self, music=False)
        self._music_genre_index = MemoryGenreIndex(self, music=True)
        self._initialized = False

    @classmethod
    def create(cls) -> MemoryBackend:
        """Create and initialize an empty in-memory backend."""
        backend = cls()
        backend.initialize()
        return backend

    def initialize(self) -> None:
        self._initialized = True

    def close(self) -> None:
        self._initialized = False

    @property
    def genre_index(self) -> GenreIndex:
        return self._genre_index

    @property
    def music_genre_index(self) -> GenreIndex:
        return self._music_genre_index

    # =========================================================================
    # Writes
    # =========================================================================

    def add_items(self, items: Iterable[LibraryItem]) -> int:
        count = 0
        for item in items:
            previous = self._items.get(item.id)
            if previous is not None and previous.parent_id is not None:
                siblings = self._children.get(previous.parent_id, [])
                if item.id in siblings:
                    siblings.remove(item.id)

            self._items[item.id] = replace(item, genres=list(item.genres), tags=list(item.tags))
            if item.parent_id is not None:
                self._children.setdefault(item.parent_id, []).append(item.id)
            count += 1

        logger.debug("Loaded %d items into memory backend", count)
        return count

    def add_users(self, users: Iterable[LibraryUser]) -> int:
        count = 0
        for user in users:
            self._users[user.user_id] = replace(user, blocked_tags=list(user.blocked_tags))
            count += 1
        return count

    def set_roots(self, root_id: str, user_root_id: str | None = None) -> None:
        self._root_id = root_id
        self._user_root_id = user_root_id

    # =========================================================================
    # Reads
    # =========================================================================

    def get_item_by_id(self, item_id: str) -> LibraryItem | None:
        item = self._items.get(item_id)
        return self._project(item, DtoOptions(fields=tuple(ItemField))) if item else None

    def get_root_container(self) -> LibraryItem:
        root = self._items.get(self._root_id) if self._root_id else None
        if root is None:
            raise StorageIOError("get_root_container", cause=LookupError("library root is not set"))
        return self._project(root, DtoOptions(fields=tuple(ItemField)))

    def get_user_root_container(self, user: LibraryUser) -> LibraryItem:
        user_root = self._items.get(self._user_root_id) if self._user_root_id else None
        if user_root is None:
            return self.get_root_container()
        return self._project(user_root, DtoOptions(fields=tuple(ItemField)))

    def get_user_by_id(self, user_id: str) -> LibraryUser | None:
        return self._users.get(user_id)

    def list_items(self, container: LibraryItem, query: ItemQuery) -> list[LibraryItem]:
        if not container.is_container:
            raise NotAContainerError(container.id, container.item_type)

        if query.recursive:
            candidates = self._iter_descendants(container.id)
        else:
            candidates = self._iter_children(container.id)

        matcher = _QueryMatcher(query)
        return [
            self._project(item, query.dto_options) for item in candidates if matcher.matches(item)
        ]

    def iter_scoped_items(self, query: ItemQuery) -> Iterator[LibraryItem]:
        """Yield stored items matching `query`, honoring its ancestor/parent scope."""
        if query.ancestor_ids:
            seen: set[str] = set()
            candidates: list[LibraryItem] = []
            for ancestor_id in query.ancestor_ids:
                for item in self._iter_descendants(ancestor_id):
                    if item.id not in seen:
                        seen.add(item.id)
                        candidates.append(item)
        elif query.parent is not None:
            candidates = list(self._iter_children(query.parent.id))
        else:
            candidates = list(self._items.values())

        matcher = _QueryMatcher(query)
        for item in candidates:
            if matcher.matches(item):
                yield item

    # =========================================================================
    # Tree Walking
    # =========================================================================

    def _iter_children(self, item_id: str) -> Iterator[LibraryItem]:
        for child_id in self._children.get(item_id, []):
            child = self._items.get(child_id)
            if child is not None:
                yield child

    def _iter_descendants(self, item_id: str) -> Iterator[LibraryItem]:
        """Depth-first, pre-order walk below `item_id`."""
        stack = list(reversed(self._children.get(item_id, [])))
        visited: set[str] = {item_id}
        while stack:
            child_id = stack.pop()
            if child_id in visited:
                continue
            visited.add(child_id)
            child = self._items.get(child_id)
            if child is None:
                continue
            yield child
            stack.extend(reversed(self._children.get(child_id, [])))

    @staticmethod
    def _project(item: LibraryItem, dto_options: DtoOptions) -> LibraryItem:
        return replace(
            item,
            genres=list(item.genres) if dto_options.has_field(ItemField.GENRES) else [],
            tags=list(item.tags) if dto_options.has_field(ItemField.TAGS) else [],
        )


class _QueryMatcher:
    """Evaluates the non-structural filters of an ItemQuery against items."""

    def __init__(self, query: ItemQuery):
        self.item_types = type_name_set(query.include_item_types)
        self.media_types = type_name_set(query.media_types)
        self.predicates = query.content_predicates()
        self.blocked_tags = (
            frozenset(tag.lower() for tag in query.user.blocked_tags) if query.user else frozenset()
        )

    def matches(self, item: LibraryItem) -> bool:
        if self.item_types and normalize_type_name(item.item_type) not in self.item_types:
            return False

        if self.media_types and (
            item.media_type is None or normalize_type_name(item.media_type) not in self.media_types
        ):
            return False

        for name, expected in self.predicates.items():
            if getattr(item, name) != expected:
                return False

        if self.blocked_tags and any(tag.lower() in self.blocked_tags for tag in item.tags):
            return False

        return True
