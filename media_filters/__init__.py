"""
Media Filters

Filter-value resolution for hierarchical media libraries.

Provides:
- Legacy filters: distinct years, genres, tags and official ratings
  observed under a scope, computed by one recursive scan
- Indexed filters: genre name/id pairs answered by type-aware genre
  indexes (generic vs music)
- Pluggable backends (in-memory, DuckDB) behind small store interfaces
- YAML/JSON library snapshots

Usage:

    >>> from media_filters import FiltersService, MemoryBackend, load_snapshot, populate_backend
    >>> backend = populate_backend(MemoryBackend.create(), load_snapshot("library.yaml"))
    >>> service = FiltersService.from_backend(backend)
    >>> legacy = service.get_legacy_filters(parent_id="movies", include_item_types=["Movie"])
    >>> legacy.years
    [1999, 2001, 2010]
    >>> filters = service.get_filters(include_item_types=["Audio"])
    >>> [genre.name for genre in filters.genres]
    ['Jazz', 'Rock']

Backend Selection:

    # In-memory, for tests and small libraries
    from media_filters.backends import MemoryBackend

    # DuckDB for large or shared libraries
    from media_filters import DuckDBBackend, DuckDBConfig
"""

# Backend abstraction
from .backends import (
    GenreIndex,
    ItemStore,
    LibraryBackend,
    LibrarySnapshot,
    MemoryBackend,
    UserStore,
    load_snapshot,
    populate_backend,
)
from .backends.duckdb import DuckDBBackend, DuckDBConfig

# Exceptions
from .exceptions import (
    FiltersError,
    NotAContainerError,
    SnapshotError,
    StorageConnectionError,
    StorageIOError,
    ValidationError,
)

# Filters core
from .filters import (
    ContentFilters,
    FiltersService,
    IndexedFacetResolver,
    LegacyFacetAggregator,
    LegacyQueryFilters,
    QueryFilters,
    Scope,
    ScopeResolver,
)

# Library types
from .protocol import ItemKind, ItemQuery, LibraryItem, LibraryUser, NameIdPair

__all__ = [
    # Core abstractions
    "FiltersService",
    "ScopeResolver",
    "LegacyFacetAggregator",
    "IndexedFacetResolver",
    "Scope",
    "ContentFilters",
    "LegacyQueryFilters",
    "QueryFilters",
    # Library types
    "ItemKind",
    "ItemQuery",
    "LibraryItem",
    "LibraryUser",
    "NameIdPair",
    # Backends
    "LibraryBackend",
    "ItemStore",
    "GenreIndex",
    "UserStore",
    "MemoryBackend",
    "DuckDBBackend",
    "DuckDBConfig",
    "LibrarySnapshot",
    "load_snapshot",
    "populate_backend",
    # Exceptions
    "FiltersError",
    "NotAContainerError",
    "SnapshotError",
    "StorageIOError",
    "StorageConnectionError",
    "ValidationError",
]

__version__ = "0.1.0"
