"""
Tests for FiltersService wiring: user lookup, idempotence and logging.
"""

import logging

import pytest

from media_filters.filters import FiltersService
from media_filters.id_utils import EMPTY_ID


class TestUserLookup:
    """Tests for how raw user ids become users."""

    @pytest.mark.parametrize("user_id", [None, "", "  ", EMPTY_ID, EMPTY_ID.replace("-", "")])
    def test_empty_user_ids_are_anonymous(self, service, user_id):
        """Empty and all-zero ids scan the whole library."""
        anonymous = service.get_legacy_filters()
        assert service.get_legacy_filters(user_id=user_id) == anonymous

    def test_known_user_scans_user_root(self, service):
        """A signed-in user gets a narrower root than anonymous callers."""
        anonymous = service.get_legacy_filters()
        signed_in = service.get_legacy_filters(user_id="u1")
        assert len(signed_in.genres) < len(anonymous.genres)

    def test_unknown_user_is_anonymous_and_logged(self, service, caplog):
        """Unknown ids resolve like no user and emit a warning."""
        with caplog.at_level(logging.WARNING, logger="media_filters.filters.service"):
            result = service.get_legacy_filters(user_id="ghost")

        assert result == service.get_legacy_filters()
        assert any("Unknown user ghost" in r.getMessage() for r in caplog.records)

    def test_warning_carries_request_context(self, service, caplog):
        with caplog.at_level(logging.WARNING, logger="media_filters.filters.service"):
            service.get_filters(user_id="ghost", parent_id="movies")

        record = next(r for r in caplog.records if "Unknown user" in r.getMessage())
        assert record.user_id == "ghost"
        assert record.parent_id == "movies"
        assert record.operation == "get_filters"


class TestIdempotence:
    """Both operations are read-only."""

    def test_legacy_filters_repeatable(self, service):
        first = service.get_legacy_filters(parent_id="movies", include_item_types=["Movie"])
        second = service.get_legacy_filters(parent_id="movies", include_item_types=["Movie"])
        assert first == second

    def test_indexed_filters_repeatable(self, service):
        first = service.get_filters(include_item_types=["Audio"])
        second = service.get_filters(include_item_types=["Audio"])
        assert first == second

    def test_store_is_not_mutated(self, service, backend):
        """Facet computation leaves stored items untouched."""
        before = backend.get_item_by_id("m2")
        service.get_legacy_filters(user_id="u2", parent_id="movies")
        service.get_filters(user_id="u2", parent_id="movies")
        assert backend.get_item_by_id("m2") == before


class TestServiceConstruction:
    """Tests for building the service from separate collaborators."""

    def test_collaborators_can_come_from_different_objects(self, memory_backend, duckdb_backend):
        """Item store and genre indexes are independent roles."""
        service = FiltersService(
            item_store=memory_backend,
            user_store=memory_backend,
            genre_index=duckdb_backend.genre_index,
            music_genre_index=duckdb_backend.music_genre_index,
        )

        legacy = service.get_legacy_filters(parent_id="favs")
        indexed = service.get_filters(parent_id="favs")
        assert legacy.genres == ["Comedy"]
        assert [g.name for g in indexed.genres] == ["Comedy"]
