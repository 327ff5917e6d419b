"""
Tests for scope resolution.

Covers parent lookup, the global type override and scan root selection.
"""

import pytest

from media_filters.filters import ResolvedScope, ScopeResolver
from media_filters.id_utils import EMPTY_ID
from media_filters.protocol import LibraryUser


class RecordingItemStore:
    """Wraps a store and records which ids were looked up."""

    def __init__(self, inner):
        self.inner = inner
        self.lookups: list[str] = []

    def get_item_by_id(self, item_id):
        self.lookups.append(item_id)
        return self.inner.get_item_by_id(item_id)

    def get_root_container(self):
        return self.inner.get_root_container()

    def get_user_root_container(self, user):
        return self.inner.get_user_root_container(user)


@pytest.fixture
def resolver(backend) -> ScopeResolver:
    return ScopeResolver(backend)


class TestResolveParent:
    """Tests for explicit parent resolution."""

    def test_known_parent_is_resolved(self, resolver):
        """A known parent id resolves to its item."""
        resolved = resolver.resolve("movies", None, ["Movie"])
        assert resolved.parent is not None
        assert resolved.parent.id == "movies"
        assert resolved.overridden is False

    def test_unknown_parent_means_no_parent(self, resolver):
        """An id unknown to the store is not an error."""
        resolved = resolver.resolve("does-not-exist", None, ["Movie"])
        assert resolved == ResolvedScope(parent=None)

    @pytest.mark.parametrize("parent_id", [None, "", "   ", EMPTY_ID])
    def test_empty_parent_ids_skip_lookup(self, memory_backend, parent_id):
        """Empty and all-zero ids never reach the store."""
        store = RecordingItemStore(memory_backend)
        resolved = ScopeResolver(store).resolve(parent_id, None, [])
        assert resolved.parent is None
        assert store.lookups == []

    def test_leaf_parent_is_returned_as_is(self, resolver):
        """Resolution does not check containment; aggregation does."""
        resolved = resolver.resolve("m1", None, [])
        assert resolved.parent.id == "m1"


class TestGlobalTypeOverride:
    """Tests for types that are always searched library-wide."""

    @pytest.mark.parametrize("item_type", ["BoxSet", "boxset", "Playlist", "TRAILER", "Program"])
    def test_single_global_type_discards_parent(self, resolver, item_type):
        """A single global type drops the parent in any spelling."""
        resolved = resolver.resolve("movies", None, [item_type])
        assert resolved.parent is None
        assert resolved.overridden is True

    def test_override_applies_without_parent(self, resolver):
        """The override fires even when no parent was given."""
        resolved = resolver.resolve(None, None, ["BoxSet"])
        assert resolved.overridden is True

    def test_two_types_do_not_override(self, resolver):
        """Only exactly one requested type triggers the override."""
        resolved = resolver.resolve("movies", None, ["BoxSet", "Movie"])
        assert resolved.parent.id == "movies"
        assert resolved.overridden is False

    def test_non_global_type_keeps_parent(self, resolver):
        """Regular types keep the parent."""
        resolved = resolver.resolve("movies", None, ["Movie"])
        assert resolved.parent.id == "movies"


class TestScanRoot:
    """Tests for scan root selection."""

    def test_explicit_parent_wins(self, resolver, backend):
        """The parent is used even when a user is present."""
        parent = backend.get_item_by_id("favs")
        root = resolver.scan_root(parent, LibraryUser(user_id="u1"))
        assert root.id == "favs"

    def test_user_gets_user_root(self, resolver):
        """Without a parent, a user scans their own root."""
        root = resolver.scan_root(None, LibraryUser(user_id="u1"))
        assert root.id == "user-root"

    def test_anonymous_gets_library_root(self, resolver):
        """Without a parent or user, the whole library is scanned."""
        root = resolver.scan_root(None, None)
        assert root.id == "root"
