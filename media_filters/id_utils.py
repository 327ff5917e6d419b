"""ID generation and parsing utilities for media filters.

Centralizes the ID format knowledge so callers never need to
construct or compare identifiers directly.

Genre IDs: uuid5(GENRE_NAMESPACE, "genre:{lower name}")
Music genre IDs: uuid5(GENRE_NAMESPACE, "musicgenre:{lower name}")

Genre IDs are derived from the name alone, so every backend produces the
same ID for the same genre and case variants share one ID.
"""

from __future__ import annotations

import uuid

GENRE_NAMESPACE = uuid.UUID("6f0c2d8e-3b5a-4f7e-9c1d-2a4b6c8d0e1f")

EMPTY_ID = str(uuid.UUID(int=0))


def genre_id(name: str) -> str:
    """Generate the ID of a (non-music) genre."""
    return str(uuid.uuid5(GENRE_NAMESPACE, f"genre:{name.lower()}"))


def music_genre_id(name: str) -> str:
    """Generate the ID of a music genre."""
    return str(uuid.uuid5(GENRE_NAMESPACE, f"musicgenre:{name.lower()}"))


def is_empty_id(value: str | None) -> bool:
    """Check whether an ID denotes "not specified".

    None, blank strings and the all-zero UUID (in any accepted UUID
    spelling) are all treated as empty.
    """
    if value is None or not value.strip():
        return True
    try:
        return uuid.UUID(value.strip()).int == 0
    except ValueError:
        return False
