"""
Item type name tables.

Type names arrive from callers as free-form strings ("movie", "BoxSet",
"AUDIO") and are always compared case-insensitively against these fixed
tables. The tables are the single place that decides which types get
special routing.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

# Types that are always searched library-wide, whatever parent was requested
GLOBAL_ITEM_TYPES: frozenset[str] = frozenset({"boxset", "playlist", "trailer", "program"})

# Types whose genres live in the music genre index
MUSIC_ITEM_TYPES: frozenset[str] = frozenset({"musicalbum", "musicvideo", "musicartist", "audio"})


def normalize_type_name(type_name: str) -> str:
    """Fold a type name for table lookups."""
    return type_name.strip().lower()


def is_single_type_in(include_item_types: Sequence[str], table: frozenset[str]) -> bool:
    """Check whether exactly one type was requested and it belongs to `table`."""
    return len(include_item_types) == 1 and normalize_type_name(include_item_types[0]) in table


def is_music_type(type_name: str) -> bool:
    return normalize_type_name(type_name) in MUSIC_ITEM_TYPES


def type_name_set(type_names: Iterable[str]) -> frozenset[str]:
    """Build a folded set for membership tests against item types."""
    return frozenset(normalize_type_name(name) for name in type_names)
