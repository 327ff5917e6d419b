"""
Shared test configuration and fixtures.

Provides a small sample library and backends loaded with it. The
`backend` fixture is parametrized so every test using it runs against
both the in-memory and the DuckDB backend.

Sample library layout:

    root (AggregateFolder)
    ├── user-root (UserRootFolder)
    │   ├── movies (CollectionFolder)
    │   │   ├── m1  Movie 2001  [Action, Drama]   tags [Classic]          PG-13
    │   │   ├── m2  Movie 2001  [action, Crime]   tags [classic, Heist]   pg-13
    │   │   ├── m3  Movie 1999  [Sci-Fi]                                  R
    │   │   ├── m4  Movie ----  []                                        "  "
    │   │   └── favs (Folder)
    │   │       └── m5  Movie 2010  [Comedy]  tags [Family]               PG
    │   ├── music (CollectionFolder)
    │   │   └── album1 MusicAlbum [Rock]
    │   │       ├── a1 Audio 1985 [Rock, Blues]
    │   │       └── a2 Audio -1   [jazz]
    │   └── livetv (UserView)
    │       ├── p1 Program 2023 [News]    is_news, is_series
    │       └── p2 Program 2022 [Sports]  is_sports, not is_series
    ├── collections (Folder)
    │   └── bs1 BoxSet 1990 [Western]
    └── t1 Trailer 2015 [Thriller]
"""

import logging

import pytest

from media_filters.backends import LibrarySnapshot, MemoryBackend, populate_backend
from media_filters.backends.duckdb import DuckDBBackend, DuckDBConfig
from media_filters.filters import FiltersService
from media_filters.protocol import ItemKind, LibraryItem, LibraryUser

logger = logging.getLogger(__name__)


def make_item(item_id: str, item_type: str, parent_id: str | None, **fields) -> LibraryItem:
    """Build a LibraryItem with a readable default name."""
    return LibraryItem(
        id=item_id,
        name=fields.pop("name", item_id.title()),
        item_type=item_type,
        parent_id=parent_id,
        **fields,
    )


def build_sample_library() -> LibrarySnapshot:
    """Build the sample library described in the module docstring."""
    folder = ItemKind.FOLDER
    items = [
        make_item("root", "AggregateFolder", None, kind=ItemKind.AGGREGATE_FOLDER),
        make_item("user-root", "UserRootFolder", "root", kind=ItemKind.USER_ROOT_FOLDER),
        make_item("movies", "CollectionFolder", "user-root", kind=ItemKind.COLLECTION_FOLDER),
        make_item(
            "m1", "Movie", "movies", media_type="Video", production_year=2001,
            genres=["Action", "Drama"], tags=["Classic"], official_rating="PG-13",
        ),
        make_item(
            "m2", "Movie", "movies", media_type="Video", production_year=2001,
            genres=["action", "Crime"], tags=["classic", "Heist"], official_rating="pg-13",
        ),
        make_item(
            "m3", "Movie", "movies", media_type="Video", production_year=1999,
            genres=["Sci-Fi"], official_rating="R",
        ),
        make_item("m4", "Movie", "movies", media_type="Video", official_rating="  "),
        make_item("favs", "Folder", "movies", kind=folder),
        make_item(
            "m5", "Movie", "favs", media_type="Video", production_year=2010,
            genres=["Comedy"], tags=["Family"], official_rating="PG",
        ),
        make_item("music", "CollectionFolder", "user-root", kind=ItemKind.COLLECTION_FOLDER),
        make_item("album1", "MusicAlbum", "music", kind=folder, genres=["Rock"]),
        make_item(
            "a1", "Audio", "album1", media_type="Audio", production_year=1985,
            genres=["Rock", "Blues"],
        ),
        make_item(
            "a2", "Audio", "album1", media_type="Audio", production_year=-1, genres=["jazz"]
        ),
        make_item("livetv", "UserView", "user-root", kind=ItemKind.USER_VIEW),
        make_item(
            "p1", "Program", "livetv", production_year=2023, genres=["News"],
            is_news=True, is_series=True, is_sports=False,
        ),
        make_item(
            "p2", "Program", "livetv", production_year=2022, genres=["Sports"],
            is_news=False, is_series=False, is_sports=True,
        ),
        make_item("collections", "Folder", "root", kind=folder),
        make_item(
            "bs1", "BoxSet", "collections", kind=folder, production_year=1990, genres=["Western"]
        ),
        make_item("t1", "Trailer", "root", production_year=2015, genres=["Thriller"]),
    ]
    users = [
        LibraryUser(user_id="u1", name="Alice"),
        LibraryUser(user_id="u2", name="Bob", blocked_tags=["heist"]),
    ]
    return LibrarySnapshot(root_id="root", user_root_id="user-root", items=items, users=users)


@pytest.fixture
def sample_library() -> LibrarySnapshot:
    """Fixture providing the sample library snapshot."""
    return build_sample_library()


@pytest.fixture
def memory_backend(sample_library):
    """Fixture providing an in-memory backend loaded with the sample library."""
    backend = populate_backend(MemoryBackend.create(), sample_library)
    yield backend
    backend.close()


@pytest.fixture
def duckdb_backend(sample_library):
    """Fixture providing an in-memory DuckDB backend loaded with the sample library."""
    backend = DuckDBBackend.create(DuckDBConfig(db_path=":memory:"))
    populate_backend(backend, sample_library)
    yield backend
    backend.close()


@pytest.fixture(params=["memory", "duckdb"])
def backend(request, sample_library):
    """Fixture providing each backend kind loaded with the sample library."""
    if request.param == "memory":
        instance = MemoryBackend.create()
    else:
        instance = DuckDBBackend.create(DuckDBConfig(db_path=":memory:"))

    populate_backend(instance, sample_library)
    logger.debug("Using %s backend for tests", request.param)
    yield instance
    instance.close()


@pytest.fixture
def service(backend) -> FiltersService:
    """Fixture providing a FiltersService over each backend kind."""
    return FiltersService.from_backend(backend)
