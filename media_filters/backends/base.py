"""
Abstract base classes for library backends.

All backend implementations (in-memory, DuckDB) must implement these
interfaces. The filters core depends only on the narrow roles
(ItemStore, GenreIndex, UserStore); LibraryBackend bundles them for
hosts that want a single object to create and close.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any

from ..id_utils import genre_id, music_genre_id
from ..protocol import ItemQuery, LibraryItem, LibraryUser, NameIdPair

# =============================================================================
# Role ABCs
# =============================================================================


class ItemStore(ABC):
    """Read access to the library item tree."""

    @abstractmethod
    def get_item_by_id(self, item_id: str) -> LibraryItem | None:
        """Get an item by ID, or None if the store has no such item."""
        pass

    @abstractmethod
    def get_root_container(self) -> LibraryItem:
        """Get the physical library root."""
        pass

    @abstractmethod
    def get_user_root_container(self, user: LibraryUser) -> LibraryItem:
        """Get the root container seen by a signed-in user."""
        pass

    @abstractmethod
    def list_items(self, container: LibraryItem, query: ItemQuery) -> list[LibraryItem]:
        """
        List items under a container.

        Args:
            container: Container to list (must be a container kind)
            query: Filters; query.recursive selects descendants at any
                depth instead of immediate children

        Returns:
            Matching items, hydrated only with the detail fields listed
            in query.dto_options
        """
        pass


class GenreIndex(ABC):
    """A genre index answering "which genres occur among matching items"."""

    @abstractmethod
    def query_genres(self, query: ItemQuery) -> list[NameIdPair]:
        """
        Query distinct genres of the items matching `query`.

        Returns:
            Name/ID pairs, deduplicated case-insensitively and ordered by
            name (case-insensitive, ties broken ordinally)
        """
        pass


class UserStore(ABC):
    """Read access to library users."""

    @abstractmethod
    def get_user_by_id(self, user_id: str) -> LibraryUser | None:
        """Get a user by ID, or None if unknown."""
        pass


class LibraryWriter(ABC):
    """Write access used to load a library into a backend."""

    @abstractmethod
    def add_items(self, items: Iterable[LibraryItem]) -> int:
        """Insert or replace items. Returns the number written."""
        pass

    @abstractmethod
    def add_users(self, users: Iterable[LibraryUser]) -> int:
        """Insert or replace users. Returns the number written."""
        pass

    @abstractmethod
    def set_roots(self, root_id: str, user_root_id: str | None = None) -> None:
        """Set which items act as the library root and the user root."""
        pass


# =============================================================================
# Full Backend
# =============================================================================


class LibraryBackend(ItemStore, UserStore, LibraryWriter):
    """
    Abstract base for complete library backends.

    Implementations must support:
    - Item tree reads (by id, roots, recursive listing)
    - Generic and music genre indexes
    - User lookup
    - Bulk loading of items and users
    """

    @abstractmethod
    def initialize(self) -> None:
        """Initialize the backend (connections, schema)."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Close connections and cleanup resources."""
        pass

    def __enter__(self) -> LibraryBackend:
        self.initialize()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    @property
    @abstractmethod
    def genre_index(self) -> GenreIndex:
        """Index over genres of non-music items."""
        pass

    @property
    @abstractmethod
    def music_genre_index(self) -> GenreIndex:
        """Index over genres of music items."""
        pass


# =============================================================================
# Shared Helpers
# =============================================================================


def to_name_id_pairs(names: Iterable[str], music: bool) -> list[NameIdPair]:
    """Attach deterministic genre IDs to already ordered genre names."""
    make_id = music_genre_id if music else genre_id
    return [NameIdPair(name=name, id=make_id(name)) for name in names]
