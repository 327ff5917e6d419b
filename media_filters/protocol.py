"""
Core library types shared by the filters core and storage backends.

This module defines the item, user and query shapes that backends
produce and consume. The filters core only reads these objects; it
never mutates an item handed out by a store.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# =============================================================================
# Item Kinds
# =============================================================================


class ItemKind(Enum):
    """Structural kind of a library item."""

    ITEM = "item"  # Leaf (movie, episode, track, ...)
    FOLDER = "folder"  # Plain folder, box set, series, album, ...
    COLLECTION_FOLDER = "collection_folder"  # Top-level library folder
    USER_VIEW = "user_view"  # Per-user virtual view over a library
    USER_ROOT_FOLDER = "user_root_folder"  # Root seen by signed-in users
    AGGREGATE_FOLDER = "aggregate_folder"  # Physical library root

    @property
    def is_container(self) -> bool:
        """Whether items of this kind can list children."""
        return self in CONTAINER_KINDS

    @property
    def implies_recursive(self) -> bool:
        """Whether filtering under this kind is always recursive."""
        return self in RECURSIVE_KINDS


CONTAINER_KINDS: frozenset[ItemKind] = frozenset(
    {
        ItemKind.FOLDER,
        ItemKind.COLLECTION_FOLDER,
        ItemKind.USER_VIEW,
        ItemKind.USER_ROOT_FOLDER,
        ItemKind.AGGREGATE_FOLDER,
    }
)

RECURSIVE_KINDS: frozenset[ItemKind] = frozenset({ItemKind.USER_VIEW, ItemKind.COLLECTION_FOLDER})


# =============================================================================
# Detail Fields
# =============================================================================


class ItemField(Enum):
    """Optional item detail fields a store can be asked to hydrate."""

    GENRES = "genres"
    TAGS = "tags"


@dataclass(frozen=True)
class DtoOptions:
    """Controls how much of each item a store hydrates for a query."""

    fields: tuple[ItemField, ...] = ()
    enable_images: bool = True
    enable_user_data: bool = True

    def has_field(self, item_field: ItemField) -> bool:
        return item_field in self.fields


# =============================================================================
# Core Data Types
# =============================================================================


@dataclass
class LibraryItem:
    """A media item (or container) as stored in the library.

    Live-TV flags are tri-state: None means the item carries no
    information for that flag and only matches unconstrained queries.
    """

    id: str
    name: str
    item_type: str
    kind: ItemKind = ItemKind.ITEM
    parent_id: str | None = None
    media_type: str | None = None
    production_year: int | None = None
    genres: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    official_rating: str | None = None
    is_airing: bool | None = None
    is_movie: bool | None = None
    is_sports: bool | None = None
    is_kids: bool | None = None
    is_news: bool | None = None
    is_series: bool | None = None

    @property
    def is_container(self) -> bool:
        return self.kind.is_container

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "item_type": self.item_type,
            "kind": self.kind.value,
            "parent_id": self.parent_id,
            "media_type": self.media_type,
            "production_year": self.production_year,
            "genres": list(self.genres),
            "tags": list(self.tags),
            "official_rating": self.official_rating,
            "is_airing": self.is_airing,
            "is_movie": self.is_movie,
            "is_sports": self.is_sports,
            "is_kids": self.is_kids,
            "is_news": self.is_news,
            "is_series": self.is_series,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LibraryItem:
        """Create from dictionary."""
        kind_raw = data.get("kind", ItemKind.ITEM.value)
        kind = ItemKind(kind_raw) if isinstance(kind_raw, str) else kind_raw

        year = data.get("production_year")

        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            item_type=data["item_type"],
            kind=kind,
            parent_id=str(data["parent_id"]) if data.get("parent_id") else None,
            media_type=data.get("media_type"),
            production_year=int(year) if year is not None else None,
            genres=list(data.get("genres") or []),
            tags=list(data.get("tags") or []),
            official_rating=data.get("official_rating"),
            is_airing=data.get("is_airing"),
            is_movie=data.get("is_movie"),
            is_sports=data.get("is_sports"),
            is_kids=data.get("is_kids"),
            is_news=data.get("is_news"),
            is_series=data.get("is_series"),
        )


@dataclass
class LibraryUser:
    """A library user.

    blocked_tags hides every item carrying one of these tags
    (case-insensitive) from all queries run on the user's behalf.
    """

    user_id: str
    name: str = ""
    blocked_tags: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "user_id": self.user_id,
            "name": self.name,
            "blocked_tags": list(self.blocked_tags),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LibraryUser:
        """Create from dictionary."""
        return cls(
            user_id=str(data["user_id"]),
            name=data.get("name", ""),
            blocked_tags=list(data.get("blocked_tags") or []),
        )


@dataclass(frozen=True)
class NameIdPair:
    """A named entity reference, as returned by the genre indexes."""

    name: str
    id: str

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "id": self.id}


# =============================================================================
# Store Queries
# =============================================================================


@dataclass
class ItemQuery:
    """Query handed to item stores and genre indexes.

    Scoping is mutually exclusive in practice:
    - ancestor_ids non-empty: transitive descendants of any listed id
    - parent set: immediate children of that item
    - neither: the whole library
    """

    user: LibraryUser | None = None
    include_item_types: tuple[str, ...] = ()
    media_types: tuple[str, ...] = ()
    recursive: bool = False
    enable_total_record_count: bool = True
    dto_options: DtoOptions = field(default_factory=DtoOptions)

    # Tri-state content predicates (None = unspecified)
    is_airing: bool | None = None
    is_movie: bool | None = None
    is_sports: bool | None = None
    is_kids: bool | None = None
    is_news: bool | None = None
    is_series: bool | None = None

    ancestor_ids: list[str] = field(default_factory=list)
    parent: LibraryItem | None = None

    def content_predicates(self) -> dict[str, bool]:
        """Return only the content predicates that are specified."""
        predicates = {
            "is_airing": self.is_airing,
            "is_movie": self.is_movie,
            "is_sports": self.is_sports,
            "is_kids": self.is_kids,
            "is_news": self.is_news,
            "is_series": self.is_series,
        }
        return {name: value for name, value in predicates.items() if value is not None}
