"""Tests for ID generation and parsing utilities."""

import uuid

import pytest

from media_filters.id_utils import EMPTY_ID, genre_id, is_empty_id, music_genre_id


class TestGenreIds:
    """Tests for deterministic genre IDs."""

    def test_genre_id_is_stable(self):
        assert genre_id("Action") == genre_id("Action")

    def test_case_variants_share_an_id(self):
        assert genre_id("Action") == genre_id("action") == genre_id("ACTION")

    def test_music_ids_are_a_separate_space(self):
        assert music_genre_id("Rock") != genre_id("Rock")

    def test_ids_are_uuids(self):
        assert uuid.UUID(genre_id("Drama")).version == 5
        assert uuid.UUID(music_genre_id("Jazz")).version == 5


class TestIsEmptyId:
    """Tests for "not specified" detection."""

    @pytest.mark.parametrize(
        "value",
        [None, "", "   ", EMPTY_ID, EMPTY_ID.replace("-", ""), "{" + EMPTY_ID + "}"],
    )
    def test_empty_values(self, value):
        assert is_empty_id(value) is True

    @pytest.mark.parametrize("value", ["movies", "m1", str(uuid.uuid4()), "0"])
    def test_real_ids(self, value):
        assert is_empty_id(value) is False
