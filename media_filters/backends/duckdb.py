"""
DuckDB library backend.

Stores the item tree in a DuckDB table and answers recursive listings
with a recursive CTE. Genre indexes are plain GROUP BY queries over the
unnested genre lists. Ideal for libraries too large to hold as Python
objects, or for sharing one library file between processes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import duckdb

from ..exceptions import NotAContainerError, StorageConnectionError, StorageIOError
from ..item_types import MUSIC_ITEM_TYPES, normalize_type_name
from ..protocol import (
    DtoOptions,
    ItemField,
    ItemKind,
    ItemQuery,
    LibraryItem,
    LibraryUser,
    NameIdPair,
)
from .base import GenreIndex, LibraryBackend, to_name_id_pairs

logger = logging.getLogger(__name__)


# =============================================================================
# Column Definitions - Centralized for consistency and maintainability
# =============================================================================

# Columns always read for an item
ITEM_BASE_COLUMNS = (
    "id",
    "name",
    "item_type",
    "kind",
    "parent_id",
    "media_type",
    "production_year",
    "official_rating",
    "is_airing",
    "is_movie",
    "is_sports",
    "is_kids",
    "is_news",
    "is_series",
)

# Detail columns, read only when the query's DtoOptions ask for them
ITEM_DETAIL_COLUMNS: dict[ItemField, str] = {
    ItemField.GENRES: "genres",
    ItemField.TAGS: "tags",
}

_CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS items (
    id VARCHAR NOT NULL PRIMARY KEY,
    seq BIGINT NOT NULL,
    name VARCHAR,
    item_type VARCHAR NOT NULL,
    kind VARCHAR NOT NULL,
    parent_id VARCHAR,
    media_type VARCHAR,
    production_year INTEGER,
    genres VARCHAR[],
    tags VARCHAR[],
    tags_lower VARCHAR[],
    official_rating VARCHAR,
    is_airing BOOLEAN,
    is_movie BOOLEAN,
    is_sports BOOLEAN,
    is_kids BOOLEAN,
    is_news BOOLEAN,
    is_series BOOLEAN
);

CREATE TABLE IF NOT EXISTS users (
    user_id VARCHAR NOT NULL PRIMARY KEY,
    name VARCHAR,
    blocked_tags VARCHAR[]
);

CREATE TABLE IF NOT EXISTS library_roots (
    root_key VARCHAR PRIMARY KEY,
    item_id VARCHAR NOT NULL
);
"""


@dataclass
class DuckDBConfig:
    """Configuration for DuckDB storage."""

    db_path: str | Path = ":memory:"  # Use :memory: for in-memory database

    @classmethod
    def from_env(cls) -> DuckDBConfig:
        """Create config from environment variables."""
        import os

        return cls(db_path=os.environ.get("MEDIA_FILTERS_DUCKDB_PATH", ":memory:"))


class DuckDBGenreIndex(GenreIndex):
    """Genre index answered by SQL against a DuckDBBackend."""

    def __init__(self, backend: DuckDBBackend, music: bool):
        self._backend = backend
        self._music = music

    def query_genres(self, query: ItemQuery) -> list[NameIdPair]:
        names = self._backend.query_genre_names(query, music=self._music)
        return to_name_id_pairs(names, music=self._music)


class DuckDBBackend(LibraryBackend):
    """
    DuckDB library backend.

    Features:
    - Local database (file-based or in-memory)
    - Recursive CTE for descendant listings, ordered depth-first
    - Only the requested detail columns are read
    - Full SQL query capabilities for ad-hoc inspection
    """

    def __init__(self, config: DuckDBConfig):
        """
        Initialize DuckDB backend.

        Args:
            config: DuckDB configuration
        """
        self.config = config
        self.conn: Any = None  # DuckDB connection (using Any due to type stub limitations)
        self._next_seq = 0
        self._genre_index = DuckDBGenreIndex(self, music=False)
        self._music_genre_index = DuckDBGenreIndex(self, music=True)
        self._initialized = False

    @classmethod
    def create(cls, config: DuckDBConfig | None = None) -> DuckDBBackend:
        """Create and initialize DuckDB backend."""
        if config is None:
            config = DuckDBConfig.from_env()

        backend = cls(config)
        backend.initialize()
        return backend

    def initialize(self) -> None:
        """Initialize DuckDB connection and schema."""
        if self._initialized:
            return

        try:
            self.conn = duckdb.connect(str(self.config.db_path))
            for statement in _CREATE_TABLES_SQL.split(";"):
                if statement.strip():
                    self.conn.execute(statement)
            row = self.conn.execute("SELECT coalesce(max(seq), 0) FROM items").fetchone()
            self._next_seq = int(row[0]) + 1
        except duckdb.Error as e:
            raise StorageConnectionError(str(self.config.db_path), e) from e

        self._initialized = True
        logger.info("DuckDB backend initialized: %s", self.config.db_path)

    def close(self) -> None:
        """Close DuckDB connection."""
        if self.conn:
            self.conn.close()
            self.conn = None
        self._initialized = False

    @property
    def genre_index(self) -> GenreIndex:
        return self._genre_index

    @property
    def music_genre_index(self) -> GenreIndex:
        return self._music_genre_index

    def _execute(self, operation: str, sql: str, params: list[Any] | None = None) -> list[tuple]:
        try:
            return self.conn.execute(sql, params or []).fetchall()
        except duckdb.Error as e:
            raise StorageIOError(operation, str(self.config.db_path), e) from e

    # =========================================================================
    # Writes
    # =========================================================================

    def add_items(self, items: Iterable[LibraryItem]) -> int:
        # Later entries for the same id replace earlier ones
        rows_by_id: dict[str, list[Any]] = {}
        for item in items:
            rows_by_id[item.id] = [
                item.id,
                self._next_seq,
                item.name,
                item.item_type,
                item.kind.value,
                item.parent_id,
                item.media_type,
                item.production_year,
                list(item.genres),
                list(item.tags),
                [tag.lower() for tag in item.tags],
                item.official_rating,
                item.is_airing,
                item.is_movie,
                item.is_sports,
                item.is_kids,
                item.is_news,
                item.is_series,
            ]
            self._next_seq += 1

        rows = list(rows_by_id.values())
        if not rows:
            return 0

        self._replace_rows(
            "add_items",
            "DELETE FROM items WHERE id = ?",
            """
                INSERT INTO items (
                    id, seq, name, item_type, kind, parent_id, media_type,
                    production_year, genres, tags, tags_lower, official_rating,
                    is_airing, is_movie, is_sports, is_kids, is_news, is_series
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            rows,
        )

        logger.debug("Loaded %d items into DuckDB backend", len(rows))
        return len(rows)

    def add_users(self, users: Iterable[LibraryUser]) -> int:
        rows_by_id = {
            user.user_id: [user.user_id, user.name, list(user.blocked_tags)] for user in users
        }
        rows = list(rows_by_id.values())
        if not rows:
            return 0

        self._replace_rows(
            "add_users",
            "DELETE FROM users WHERE user_id = ?",
            "INSERT INTO users (user_id, name, blocked_tags) VALUES (?, ?, ?)",
            rows,
        )
        return len(rows)

    def _replace_rows(
        self, operation: str, delete_sql: str, insert_sql: str, rows: list[list[Any]]
    ) -> None:
        """Delete rows by key (first column) and insert them, all in one transaction."""
        try:
            self.conn.begin()
            try:
                self.conn.executemany(delete_sql, [[row[0]] for row in rows])
                self.conn.executemany(insert_sql, rows)
                self.conn.commit()
            except Exception:
                self.conn.rollback()
                raise
        except duckdb.Error as e:
            raise StorageIOError(operation, str(self.config.db_path), e) from e

    def set_roots(self, root_id: str, user_root_id: str | None = None) -> None:
        self._execute(
            "set_roots",
            "INSERT OR REPLACE INTO library_roots (root_key, item_id) VALUES ('root', ?)",
            [root_id],
        )
        if user_root_id:
            self._execute(
                "set_roots",
                "INSERT OR REPLACE INTO library_roots (root_key, item_id) VALUES ('user_root', ?)",
                [user_root_id],
            )
        else:
            self._execute("set_roots", "DELETE FROM library_roots WHERE root_key = 'user_root'")

    # =========================================================================
    # Reads
    # =========================================================================

    def get_item_by_id(self, item_id: str) -> LibraryItem | None:
        columns = self._select_columns(DtoOptions(fields=tuple(ItemField)))
        rows = self._execute(
            "get_item_by_id",
            f"SELECT {', '.join(columns)} FROM items WHERE id = ?",
            [item_id],
        )
        return self._row_to_item(columns, rows[0]) if rows else None

    def get_root_container(self) -> LibraryItem:
        root = self._get_root("root")
        if root is None:
            raise StorageIOError("get_root_container", str(self.config.db_path))
        return root

    def get_user_root_container(self, user: LibraryUser) -> LibraryItem:
        return self._get_root("user_root") or self.get_root_container()

    def _get_root(self, key: str) -> LibraryItem | None:
        rows = self._execute(
            "get_root",
            "SELECT item_id FROM library_roots WHERE root_key = ?",
            [key],
        )
        return self.get_item_by_id(rows[0][0]) if rows else None

    def get_user_by_id(self, user_id: str) -> LibraryUser | None:
        rows = self._execute(
            "get_user_by_id",
            "SELECT user_id, name, blocked_tags FROM users WHERE user_id = ?",
            [user_id],
        )
        if not rows:
            return None
        uid, name, blocked_tags = rows[0]
        return LibraryUser(user_id=uid, name=name or "", blocked_tags=list(blocked_tags or []))

    def list_items(self, container: LibraryItem, query: ItemQuery) -> list[LibraryItem]:
        if not container.is_container:
            raise NotAContainerError(container.id, container.item_type)

        columns = self._select_columns(query.dto_options)
        conditions, params = self._build_filter_conditions(query)
        select_list = ", ".join(f"i.{column}" for column in columns)

        if query.recursive:
            cte, cte_params = self._descendants_cte([container.id])
            where = " AND ".join(conditions) if conditions else "1=1"
            sql = (
                f"{cte} SELECT {select_list} FROM items i JOIN scope s ON i.id = s.id "
                f"WHERE {where} ORDER BY s.path"
            )
            rows = self._execute("list_items", sql, cte_params + params)
        else:
            conditions.insert(0, "i.parent_id = ?")
            params.insert(0, container.id)
            where = " AND ".join(conditions)
            sql = f"SELECT {select_list} FROM items i WHERE {where} ORDER BY i.seq"
            rows = self._execute("list_items", sql, params)

        return [self._row_to_item(columns, row) for row in rows]

    def query_genre_names(self, query: ItemQuery, music: bool) -> list[str]:
        """
        Distinct genre names of items matching `query`.

        Args:
            query: Item query; ancestor_ids or parent select the scope
            music: Draw on music items (True) or all other items (False)

        Returns:
            One representative (ordinal minimum) per case-insensitive
            genre, ordered by lower-cased name then ordinally
        """
        conditions, params = self._build_filter_conditions(query)

        music_types = sorted(MUSIC_ITEM_TYPES)
        placeholders = ", ".join("?" for _ in music_types)
        operator = "IN" if music else "NOT IN"
        conditions.append(f"lower(i.item_type) {operator} ({placeholders})")
        params.extend(music_types)

        cte = ""
        cte_params: list[Any] = []
        if query.ancestor_ids:
            cte, cte_params = self._descendants_cte(query.ancestor_ids)
            conditions.insert(0, "i.id IN (SELECT id FROM scope)")
        elif query.parent is not None:
            conditions.insert(0, "i.parent_id = ?")
            params.insert(0, query.parent.id)

        sql = f"""
            {cte}
            SELECT name FROM (
                SELECT min(genre) AS name FROM (
                    SELECT unnest(i.genres) AS genre FROM items i
                    WHERE {" AND ".join(conditions)}
                )
                GROUP BY lower(genre)
            )
            ORDER BY lower(name), name
        """
        rows = self._execute("query_genres", sql, cte_params + params)
        return [row[0] for row in rows]

    # =========================================================================
    # Query Building
    # =========================================================================

    @staticmethod
    def _descendants_cte(ancestor_ids: list[str]) -> tuple[str, list[Any]]:
        """Recursive CTE `scope(id, path)` over descendants of the given ids.

        Each walk row carries the ids on its path; a child already on the
        path closes a parent_id cycle and is not followed.
        """
        placeholders = ", ".join("?" for _ in ancestor_ids)
        cte = f"""
            WITH RECURSIVE walk(id, path, ids) AS (
                SELECT id, [seq], [parent_id, id] FROM items WHERE parent_id IN ({placeholders})
                UNION ALL
                SELECT c.id, list_append(w.path, c.seq), list_append(w.ids, c.id)
                FROM items c JOIN walk w ON c.parent_id = w.id
                WHERE NOT list_contains(w.ids, c.id)
            ),
            scope AS (
                SELECT id, arg_min(path, len(path)) AS path FROM walk GROUP BY id
            )
        """
        return cte, list(ancestor_ids)

    @staticmethod
    def _build_filter_conditions(query: ItemQuery) -> tuple[list[str], list[Any]]:
        """Translate the non-structural filters of a query into SQL conditions."""
        conditions: list[str] = []
        params: list[Any] = []

        if query.include_item_types:
            types = sorted({normalize_type_name(t) for t in query.include_item_types})
            conditions.append(f"lower(i.item_type) IN ({', '.join('?' for _ in types)})")
            params.extend(types)

        if query.media_types:
            media_types = sorted({normalize_type_name(t) for t in query.media_types})
            conditions.append(f"lower(i.media_type) IN ({', '.join('?' for _ in media_types)})")
            params.extend(media_types)

        for name, value in query.content_predicates().items():
            conditions.append(f"i.{name} = ?")
            params.append(value)

        if query.user is not None and query.user.blocked_tags:
            conditions.append("NOT list_has_any(i.tags_lower, ?::VARCHAR[])")
            params.append([tag.lower() for tag in query.user.blocked_tags])

        return conditions, params

    @staticmethod
    def _select_columns(dto_options: DtoOptions) -> list[str]:
        columns = list(ITEM_BASE_COLUMNS)
        for item_field, column in ITEM_DETAIL_COLUMNS.items():
            if dto_options.has_field(item_field):
                columns.append(column)
        return columns

    @staticmethod
    def _row_to_item(columns: list[str], row: tuple) -> LibraryItem:
        data = dict(zip(columns, row))
        return LibraryItem(
            id=data["id"],
            name=data["name"] or "",
            item_type=data["item_type"],
            kind=ItemKind(data["kind"]),
            parent_id=data["parent_id"],
            media_type=data["media_type"],
            production_year=data["production_year"],
            genres=list(data.get("genres") or []),
            tags=list(data.get("tags") or []),
            official_rating=data["official_rating"],
            is_airing=data["is_airing"],
            is_movie=data["is_movie"],
            is_sports=data["is_sports"],
            is_kids=data["is_kids"],
            is_news=data["is_news"],
            is_series=data["is_series"],
        )
