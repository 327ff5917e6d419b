"""
Library snapshot loading.

A snapshot is a YAML (or JSON) document describing a whole library:

```yaml
root_id: root
user_root_id: user-root          # optional
users:
  - user_id: "u1"
    name: "Alice"
    blocked_tags: ["horror"]
items:
  - id: root
    name: Root
    item_type: AggregateFolder
    kind: aggregate_folder
    children:                    # nested items get parent_id implicitly
      - id: movies
        item_type: CollectionFolder
        kind: collection_folder
        children:
          - id: m1
            item_type: Movie
            production_year: 2001
            genres: ["Action"]
```

Items may be listed flat (with explicit parent_id) or nested under
`children`; both forms can be mixed in one document.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ..exceptions import SnapshotError
from ..protocol import LibraryItem, LibraryUser
from .base import LibraryBackend

logger = logging.getLogger(__name__)


@dataclass
class LibrarySnapshot:
    """A fully parsed library snapshot."""

    root_id: str
    user_root_id: str | None = None
    items: list[LibraryItem] = field(default_factory=list)
    users: list[LibraryUser] = field(default_factory=list)


def parse_snapshot(data: Any, source: str = "<memory>") -> LibrarySnapshot:
    """Build a LibrarySnapshot from an already decoded document.

    Args:
        data: Decoded YAML/JSON document
        source: Name used in error messages

    Raises:
        SnapshotError: If the document is not a valid snapshot
    """
    if not isinstance(data, dict):
        raise SnapshotError(source, "document must be a mapping")

    root_id = data.get("root_id")
    if not root_id:
        raise SnapshotError(source, "root_id is required")

    items: list[LibraryItem] = []
    try:
        for entry in data.get("items") or []:
            _flatten_item(entry, None, items)
        users = [LibraryUser.from_dict(entry) for entry in data.get("users") or []]
    except (KeyError, TypeError, ValueError) as e:
        raise SnapshotError(source, f"invalid entry: {e}") from e

    known_ids = {item.id for item in items}
    if str(root_id) not in known_ids:
        raise SnapshotError(source, f"root_id {root_id!r} does not match any item")

    user_root_id = data.get("user_root_id")
    if user_root_id and str(user_root_id) not in known_ids:
        raise SnapshotError(source, f"user_root_id {user_root_id!r} does not match any item")

    return LibrarySnapshot(
        root_id=str(root_id),
        user_root_id=str(user_root_id) if user_root_id else None,
        items=items,
        users=users,
    )


def _flatten_item(entry: dict[str, Any], parent_id: str | None, out: list[LibraryItem]) -> None:
    """Append `entry` and its nested children to `out`, parents first."""
    if not isinstance(entry, dict):
        raise TypeError(f"item entry must be a mapping, got {type(entry).__name__}")

    fields = {key: value for key, value in entry.items() if key != "children"}
    if parent_id is not None and not fields.get("parent_id"):
        fields["parent_id"] = parent_id

    item = LibraryItem.from_dict(fields)
    out.append(item)

    for child in entry.get("children") or []:
        _flatten_item(child, item.id, out)


def load_snapshot(path: str | Path) -> LibrarySnapshot:
    """Load a snapshot file (YAML or JSON).

    Raises:
        SnapshotError: If the file cannot be read or parsed
    """
    snapshot_path = Path(path)
    try:
        with open(snapshot_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise SnapshotError(str(snapshot_path), f"cannot read file: {e}") from e
    except yaml.YAMLError as e:
        raise SnapshotError(str(snapshot_path), f"cannot parse document: {e}") from e

    snapshot = parse_snapshot(data, source=str(snapshot_path))
    logger.info(
        "Loaded snapshot %s: %d items, %d users",
        snapshot_path,
        len(snapshot.items),
        len(snapshot.users),
    )
    return snapshot


def populate_backend(backend: LibraryBackend, snapshot: LibrarySnapshot) -> LibraryBackend:
    """Write a snapshot into a backend and set its roots."""
    backend.add_items(snapshot.items)
    backend.add_users(snapshot.users)
    backend.set_roots(snapshot.root_id, snapshot.user_root_id)
    return backend
