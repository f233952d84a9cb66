"""Data access for categories, sites, pages and tags."""

from __future__ import annotations

import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterable, Iterator, List, Optional, Sequence, Tuple

from bookmarks.models import Category, DashboardStats, Page, Site, Tag

RECENT_PAGE_LIMIT = 10

_CATEGORY_SELECT = """
    SELECT c.id, c.name, c.description, c.created_at,
           (SELECT COUNT(*) FROM sites WHERE category_id = c.id) AS site_count
    FROM categories c
"""

_SITE_SELECT = """
    SELECT s.id, s.category_id, COALESCE(c.name, '') AS category_name,
           s.domain, s.name, s.description, s.created_at,
           (SELECT COUNT(*) FROM pages WHERE site_id = s.id) AS page_count
    FROM sites s
    LEFT JOIN categories c ON s.category_id = c.id
"""

_PAGE_COLUMNS = "p.id, p.site_id, s.domain, p.path, p.title, p.description, p.created_at"

_TAG_SELECT = """
    SELECT t.id, t.name,
           (SELECT COUNT(*) FROM site_tags WHERE tag_id = t.id) AS site_count,
           (SELECT COUNT(*) FROM page_tags WHERE tag_id = t.id) AS page_count
    FROM tags t
"""


class NotFoundError(LookupError):
    """Raised when a requested record does not exist."""


def _nullable(value: str) -> Optional[str]:
    return value if value else None


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, bytes):
        value = value.decode()
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


def _normalize_tag(name: str) -> str:
    return name.lower().strip()


def _category(row: Sequence[Any]) -> Category:
    return Category(
        id=row[0],
        name=row[1],
        description=row[2] or "",
        created_at=_parse_timestamp(row[3]),
        site_count=row[4],
    )


def _site(row: Sequence[Any]) -> Site:
    return Site(
        id=row[0],
        category_id=row[1],
        category_name=row[2],
        domain=row[3],
        name=row[4] or "",
        description=row[5] or "",
        created_at=_parse_timestamp(row[6]),
        page_count=row[7],
    )


def _page(row: Sequence[Any]) -> Page:
    return Page(
        id=row[0],
        site_id=row[1],
        site_domain=row[2],
        path=row[3],
        title=row[4] or "",
        description=row[5] or "",
        created_at=_parse_timestamp(row[6]),
    )


def _tag(row: Sequence[Any]) -> Tag:
    return Tag(id=row[0], name=row[1], site_count=row[2], page_count=row[3])


class Repository:
    """Reads and writes bookmark records through a SQLite connection."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self._lock = threading.RLock()

    # helpers

    def _fetchall(self, sql: str, params: Sequence[Any] = ()) -> List[Sequence[Any]]:
        with self._lock:
            return self._conn.execute(sql, params).fetchall()

    def _fetchone(self, sql: str, params: Sequence[Any] = ()) -> Optional[Sequence[Any]]:
        with self._lock:
            return self._conn.execute(sql, params).fetchone()

    @contextmanager
    def _write(self) -> Iterator[sqlite3.Connection]:
        with self._lock, self._conn:
            yield self._conn

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        with self._lock, self._conn:
            if not self._conn.in_transaction:
                self._conn.execute("BEGIN")
            yield self._conn

    def _insert(self, sql: str, params: Sequence[Any]) -> int:
        with self._write() as conn:
            return conn.execute(sql, params).lastrowid

    def _modify(self, sql: str, params: Sequence[Any]) -> None:
        with self._write() as conn:
            conn.execute(sql, params)

    def _count(self, table: str) -> int:
        row = self._fetchone(f"SELECT COUNT(*) FROM {table}")
        return row[0] if row else 0

    # categories

    def get_categories(self) -> List[Category]:
        rows = self._fetchall(_CATEGORY_SELECT + " ORDER BY c.name")
        return [_category(row) for row in rows]

    def get_category(self, category_id: int) -> Category:
        row = self._fetchone(_CATEGORY_SELECT + " WHERE c.id = ?", (category_id,))
        if row is None:
            raise NotFoundError(f"category {category_id} not found")
        return _category(row)

    def create_category(self, name: str, description: str = "") -> int:
        return self._insert(
            "INSERT INTO categories (name, description) VALUES (?, ?)",
            (name, _nullable(description)),
        )

    def update_category(self, category_id: int, name: str, description: str = "") -> None:
        self._modify(
            "UPDATE categories SET name = ?, description = ? WHERE id = ?",
            (name, _nullable(description), category_id),
        )

    def delete_category(self, category_id: int) -> None:
        self._modify("DELETE FROM categories WHERE id = ?", (category_id,))

    # sites

    def get_sites(self, category_id: Optional[int] = None) -> List[Site]:
        sql = _SITE_SELECT
        params: Tuple[Any, ...] = ()
        if category_id is not None:
            sql += " WHERE s.category_id = ?"
            params = (category_id,)
        sql += " ORDER BY s.domain"
        sites = [_site(row) for row in self._fetchall(sql, params)]
        for site in sites:
            site.tags = self.get_site_tags(site.id)
        return sites

    def get_site(self, site_id: int) -> Site:
        row = self._fetchone(_SITE_SELECT + " WHERE s.id = ?", (site_id,))
        if row is None:
            raise NotFoundError(f"site {site_id} not found")
        site = _site(row)
        site.tags = self.get_site_tags(site.id)
        return site

    def get_site_by_domain(self, domain: str) -> Site:
        """Look up a site by domain; its tags are not loaded."""
        row = self._fetchone(_SITE_SELECT + " WHERE s.domain = ?", (domain,))
        if row is None:
            raise NotFoundError(f"site {domain!r} not found")
        return _site(row)

    def create_site(
        self, category_id: Optional[int], domain: str, name: str = "", description: str = ""
    ) -> int:
        return self._insert(
            "INSERT INTO sites (category_id, domain, name, description) VALUES (?, ?, ?, ?)",
            (category_id, domain, _nullable(name), _nullable(description)),
        )

    def update_site(
        self,
        site_id: int,
        category_id: Optional[int],
        domain: str,
        name: str = "",
        description: str = "",
    ) -> None:
        self._modify(
            "UPDATE sites SET category_id = ?, domain = ?, name = ?, description = ? WHERE id = ?",
            (category_id, domain, _nullable(name), _nullable(description), site_id),
        )

    def delete_site(self, site_id: int) -> None:
        self._modify("DELETE FROM sites WHERE id = ?", (site_id,))

    # pages

    def get_pages(
        self,
        site_id: Optional[int] = None,
        category_id: Optional[int] = None,
        tag_id: Optional[int] = None,
    ) -> List[Page]:
        sql = f"""
            SELECT DISTINCT {_PAGE_COLUMNS}
            FROM pages p
            JOIN sites s ON p.site_id = s.id
            LEFT JOIN categories c ON s.category_id = c.id
        """
        conditions: List[str] = []
        params: List[Any] = []
        if site_id is not None:
            conditions.append("p.site_id = ?")
            params.append(site_id)
        if category_id is not None:
            conditions.append("s.category_id = ?")
            params.append(category_id)
        if tag_id is not None:
            sql += (
                " LEFT JOIN page_tags pt ON p.id = pt.page_id"
                " LEFT JOIN site_tags st ON s.id = st.site_id"
            )
            conditions.append("(pt.tag_id = ? OR st.tag_id = ?)")
            params.extend((tag_id, tag_id))
        if conditions:
            sql += " WHERE " + " AND ".join(conditions)
        sql += " ORDER BY p.created_at DESC"

        pages = [_page(row) for row in self._fetchall(sql, params)]
        for page in pages:
            page.tags = self.get_page_tags(page.id)
            page.site_tags = self.get_site_tags(page.site_id)
        return pages

    def get_page(self, page_id: int) -> Page:
        row = self._fetchone(
            f"SELECT {_PAGE_COLUMNS} FROM pages p JOIN sites s ON p.site_id = s.id WHERE p.id = ?",
            (page_id,),
        )
        if row is None:
            raise NotFoundError(f"page {page_id} not found")
        page = _page(row)
        page.tags = self.get_page_tags(page.id)
        page.site_tags = self.get_site_tags(page.site_id)
        return page

    def create_page(self, site_id: int, path: str, title: str = "", description: str = "") -> int:
        return self._insert(
            "INSERT INTO pages (site_id, path, title, description) VALUES (?, ?, ?, ?)",
            (site_id, path, _nullable(title), _nullable(description)),
        )

    def update_page(
        self, page_id: int, site_id: int, path: str, title: str = "", description: str = ""
    ) -> None:
        self._modify(
            "UPDATE pages SET site_id = ?, path = ?, title = ?, description = ? WHERE id = ?",
            (site_id, path, _nullable(title), _nullable(description), page_id),
        )

    def delete_page(self, page_id: int) -> None:
        self._modify("DELETE FROM pages WHERE id = ?", (page_id,))

    # tags

    def get_tags(self) -> List[Tag]:
        return [_tag(row) for row in self._fetchall(_TAG_SELECT + " ORDER BY t.name")]

    def get_tag(self, tag_id: int) -> Tag:
        row = self._fetchone(_TAG_SELECT + " WHERE t.id = ?", (tag_id,))
        if row is None:
            raise NotFoundError(f"tag {tag_id} not found")
        return _tag(row)

    def get_or_create_tag(self, name: str) -> int:
        """Return the id of the tag with this (normalised) name, creating it if absent."""
        name = _normalize_tag(name)
        with self._lock:
            row = self._fetchone("SELECT id FROM tags WHERE name = ?", (name,))
            if row is not None:
                return row[0]
            return self._insert("INSERT INTO tags (name) VALUES (?)", (name,))

    def create_tag(self, name: str) -> int:
        return self._insert("INSERT INTO tags (name) VALUES (?)", (_normalize_tag(name),))

    def delete_tag(self, tag_id: int) -> None:
        self._modify("DELETE FROM tags WHERE id = ?", (tag_id,))

    def get_site_tags(self, site_id: int) -> List[Tag]:
        rows = self._fetchall(
            """
            SELECT t.id, t.name FROM tags t
            JOIN site_tags st ON t.id = st.tag_id
            WHERE st.site_id = ?
            ORDER BY t.name
            """,
            (site_id,),
        )
        return [Tag(id=row[0], name=row[1]) for row in rows]

    def get_page_tags(self, page_id: int) -> List[Tag]:
        rows = self._fetchall(
            """
            SELECT t.id, t.name FROM tags t
            JOIN page_tags pt ON t.id = pt.tag_id
            WHERE pt.page_id = ?
            ORDER BY t.name
            """,
            (page_id,),
        )
        return [Tag(id=row[0], name=row[1]) for row in rows]

    def set_site_tags(self, site_id: int, tag_ids: Iterable[int]) -> None:
        """Replace all tags on a site in one transaction."""
        with self._transaction() as conn:
            conn.execute("DELETE FROM site_tags WHERE site_id = ?", (site_id,))
            conn.executemany(
                "INSERT INTO site_tags (site_id, tag_id) VALUES (?, ?)",
                [(site_id, tag_id) for tag_id in tag_ids],
            )

    def set_page_tags(self, page_id: int, tag_ids: Iterable[int]) -> None:
        """Replace all tags on a page in one transaction."""
        with self._transaction() as conn:
            conn.execute("DELETE FROM page_tags WHERE page_id = ?", (page_id,))
            conn.executemany(
                "INSERT INTO page_tags (page_id, tag_id) VALUES (?, ?)",
                [(page_id, tag_id) for tag_id in tag_ids],
            )

    def add_site_tag(self, site_id: int, tag_id: int) -> None:
        self._modify(
            "INSERT OR IGNORE INTO site_tags (site_id, tag_id) VALUES (?, ?)", (site_id, tag_id)
        )

    def remove_site_tag(self, site_id: int, tag_id: int) -> None:
        self._modify(
            "DELETE FROM site_tags WHERE site_id = ? AND tag_id = ?", (site_id, tag_id)
        )

    def add_page_tag(self, page_id: int, tag_id: int) -> None:
        self._modify(
            "INSERT OR IGNORE INTO page_tags (page_id, tag_id) VALUES (?, ?)", (page_id, tag_id)
        )

    def remove_page_tag(self, page_id: int, tag_id: int) -> None:
        self._modify(
            "DELETE FROM page_tags WHERE page_id = ? AND tag_id = ?", (page_id, tag_id)
        )

    # dashboard and search

    def dashboard_stats(self) -> DashboardStats:
        return DashboardStats(
            category_count=self._count("categories"),
            site_count=self._count("sites"),
            page_count=self._count("pages"),
            recent_pages=self.get_pages()[:RECENT_PAGE_LIMIT],
        )

    def search(self, query: str) -> Tuple[List[Site], List[Page]]:
        """Find sites and pages whose text fields contain ``query``; tags are not loaded."""
        pattern = f"%{query}%"
        site_rows = self._fetchall(
            _SITE_SELECT
            + """
            WHERE s.domain LIKE ? OR s.name LIKE ? OR s.description LIKE ?
            ORDER BY s.domain
            LIMIT 20
            """,
            (pattern, pattern, pattern),
        )
        page_rows = self._fetchall(
            f"""
            SELECT {_PAGE_COLUMNS}
            FROM pages p
            JOIN sites s ON p.site_id = s.id
            WHERE p.path LIKE ? OR p.title LIKE ? OR p.description LIKE ?
            ORDER BY p.created_at DESC
            LIMIT 20
            """,
            (pattern, pattern, pattern),
        )
        return [_site(row) for row in site_rows], [_page(row) for row in page_rows]