"""Opening the bookmarks SQLite database and creating its schema."""

from __future__ import annotations

import os
import sqlite3
from pathlib import Path
from typing import Iterator, Union

DEFAULT_DATA_DIR = "./data"
DATABASE_FILE = "bookmarks.db"

_CREATED = "created_at DATETIME DEFAULT CURRENT_TIMESTAMP"

_TABLES: dict[str, tuple[str, ...]] = {
    "categories": (
        "id INTEGER PRIMARY KEY",
        "name TEXT NOT NULL UNIQUE",
        "description TEXT",
        _CREATED,
    ),
    "sites": (
        "id INTEGER PRIMARY KEY",
        "category_id INTEGER REFERENCES categories(id) ON DELETE SET NULL",
        "domain TEXT NOT NULL UNIQUE",
        "name TEXT",
        "description TEXT",
        _CREATED,
    ),
    "pages": (
        "id INTEGER PRIMARY KEY",
        "site_id INTEGER NOT NULL REFERENCES sites(id) ON DELETE CASCADE",
        "path TEXT NOT NULL",
        "title TEXT",
        "description TEXT",
        _CREATED,
        "UNIQUE(site_id, path)",
    ),
    "tags": (
        "id INTEGER PRIMARY KEY",
        "name TEXT NOT NULL UNIQUE",
    ),
}

# Link tables: (table, owner column, owner table).
_LINKS = (
    ("site_tags", "site_id", "sites"),
    ("page_tags", "page_id", "pages"),
)

# Indexes: (index suffix, table, column).
_INDEXES = (
    ("sites_category", "sites", "category_id"),
    ("pages_site", "pages", "site_id"),
    ("site_tags_site", "site_tags", "site_id"),
    ("site_tags_tag", "site_tags", "tag_id"),
    ("page_tags_page", "page_tags", "page_id"),
    ("page_tags_tag", "page_tags", "tag_id"),
)


def _schema_statements() -> Iterator[str]:
    for table, columns in _TABLES.items():
        yield f"CREATE TABLE IF NOT EXISTS {table} ({', '.join(columns)})"
    for table, owner_column, owner_table in _LINKS:
        columns = (
            f"{owner_column} INTEGER NOT NULL REFERENCES {owner_table}(id) ON DELETE CASCADE",
            "tag_id INTEGER NOT NULL REFERENCES tags(id) ON DELETE CASCADE",
            f"PRIMARY KEY({owner_column}, tag_id)",
        )
        yield f"CREATE TABLE IF NOT EXISTS {table} ({', '.join(columns)})"
    for suffix, table, column in _INDEXES:
        yield f"CREATE INDEX IF NOT EXISTS idx_{suffix} ON {table}({column})"


SCHEMA = ";\n".join(_schema_statements()) + ";\n"


def open_database(data_dir: Union[str, os.PathLike, None] = None) -> sqlite3.Connection:
    """Open (creating if needed) the bookmarks database inside ``data_dir``.

    The connection runs in autocommit mode with foreign keys enforced.
    """
    directory = Path(data_dir) if data_dir else Path(DEFAULT_DATA_DIR)
    directory.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(
        str(directory / DATABASE_FILE),
        isolation_level=None,
        check_same_thread=False,
    )
    try:
        conn.execute("PRAGMA foreign_keys = ON")
        conn.executescript(SCHEMA)
    except sqlite3.Error:
        conn.close()
        raise
    return conn