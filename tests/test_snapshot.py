"""
Tests for library snapshot loading.
"""

import json

import pytest

from media_filters.backends import MemoryBackend, load_snapshot, parse_snapshot, populate_backend
from media_filters.exceptions import SnapshotError
from media_filters.filters import FiltersService
from media_filters.protocol import ItemKind

NESTED_SNAPSHOT = """
root_id: root
user_root_id: views
users:
  - user_id: u1
    name: Alice
    blocked_tags: [horror]
items:
  - id: root
    name: Root
    item_type: AggregateFolder
    kind: aggregate_folder
    children:
      - id: views
        item_type: UserRootFolder
        kind: user_root_folder
        children:
          - id: movies
            item_type: CollectionFolder
            kind: collection_folder
            children:
              - id: m1
                name: Heat
                item_type: Movie
                production_year: 1995
                genres: [Action, Crime]
                official_rating: R
              - id: m2
                item_type: Movie
                production_year: 2001
                genres: [Horror]
                tags: [Horror]
  - id: t1
    parent_id: root
    item_type: Trailer
    production_year: 2020
    genres: [Thriller]
"""


@pytest.fixture
def snapshot_file(tmp_path):
    path = tmp_path / "library.yaml"
    path.write_text(NESTED_SNAPSHOT, encoding="utf-8")
    return path


class TestLoadSnapshot:
    """Tests for reading snapshot files."""

    def test_nested_children_get_parent_ids(self, snapshot_file):
        snapshot = load_snapshot(snapshot_file)
        by_id = {item.id: item for item in snapshot.items}

        assert snapshot.root_id == "root"
        assert snapshot.user_root_id == "views"
        assert by_id["views"].parent_id == "root"
        assert by_id["m1"].parent_id == "movies"
        assert by_id["t1"].parent_id == "root"
        assert by_id["movies"].kind == ItemKind.COLLECTION_FOLDER

    def test_parents_precede_children(self, snapshot_file):
        ids = [item.id for item in load_snapshot(snapshot_file).items]
        assert ids == ["root", "views", "movies", "m1", "m2", "t1"]

    def test_users(self, snapshot_file):
        users = load_snapshot(snapshot_file).users
        assert users[0].user_id == "u1"
        assert users[0].blocked_tags == ["horror"]

    def test_json_snapshot(self, tmp_path):
        """JSON documents load through the same parser."""
        path = tmp_path / "library.json"
        path.write_text(
            json.dumps(
                {
                    "root_id": "root",
                    "items": [
                        {"id": "root", "item_type": "AggregateFolder", "kind": "aggregate_folder"},
                        {"id": "m1", "item_type": "Movie", "parent_id": "root"},
                    ],
                }
            ),
            encoding="utf-8",
        )
        snapshot = load_snapshot(path)
        assert [item.id for item in snapshot.items] == ["root", "m1"]
        assert snapshot.user_root_id is None

    def test_loaded_library_answers_filters(self, snapshot_file):
        backend = populate_backend(MemoryBackend.create(), load_snapshot(snapshot_file))
        service = FiltersService.from_backend(backend)

        legacy = service.get_legacy_filters(user_id="u1", include_item_types=["Movie"])
        assert legacy.years == [1995]
        assert legacy.genres == ["Action", "Crime"]
        assert legacy.official_ratings == ["R"]


class TestSnapshotErrors:
    """Tests for malformed snapshots."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(SnapshotError) as exc_info:
            load_snapshot(tmp_path / "missing.yaml")
        assert "cannot read file" in exc_info.value.reason

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("root_id: [unclosed", encoding="utf-8")
        with pytest.raises(SnapshotError) as exc_info:
            load_snapshot(path)
        assert "cannot parse document" in exc_info.value.reason

    @pytest.mark.parametrize(
        ("document", "reason"),
        [
            (["not", "a", "mapping"], "document must be a mapping"),
            ({"items": []}, "root_id is required"),
            ({"root_id": "r", "items": []}, "does not match any item"),
            (
                {
                    "root_id": "r",
                    "user_root_id": "x",
                    "items": [{"id": "r", "item_type": "AggregateFolder"}],
                },
                "user_root_id 'x' does not match any item",
            ),
            ({"root_id": "r", "items": [{"id": "r"}]}, "invalid entry"),
            ({"root_id": "r", "items": ["r"]}, "invalid entry"),
            (
                {"root_id": "r", "items": [{"id": "r", "item_type": "X", "kind": "bogus"}]},
                "invalid entry",
            ),
        ],
    )
    def test_invalid_documents(self, document, reason):
        with pytest.raises(SnapshotError) as exc_info:
            parse_snapshot(document, source="test.yaml")
        assert reason in exc_info.value.reason
        assert exc_info.value.path == "test.yaml"
