"""
Library backend abstraction layer.

Provides abstract interfaces for the item store, genre indexes and user
store consumed by the filters core, plus concrete backends (in-memory,
DuckDB). Each backend implements the same interface, allowing seamless
switching.
"""

from .base import (
    GenreIndex,
    ItemStore,
    LibraryBackend,
    LibraryWriter,
    UserStore,
)
from .memory import MemoryBackend
from .snapshot import LibrarySnapshot, load_snapshot, parse_snapshot, populate_backend

__all__ = [
    # Core classes
    "LibraryBackend",
    # Role ABCs
    "ItemStore",
    "GenreIndex",
    "UserStore",
    "LibraryWriter",
    # Backends
    "MemoryBackend",
    # Snapshots
    "LibrarySnapshot",
    "load_snapshot",
    "parse_snapshot",
    "populate_backend",
]
