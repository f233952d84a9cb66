"""HTTP handlers for pages, plus URL splitting and page-title lookup."""

from __future__ import annotations

import http.client
import re
import sqlite3
import urllib.request
from contextlib import suppress
from typing import Callable, List, NamedTuple, Optional, Tuple, Union
from urllib.parse import unquote, urlsplit

from flask import request

from bookmarks.models import Page, Site
from bookmarks.repository import NotFoundError, Repository
from bookmarks.web import (
    Renderer,
    error_response,
    is_htmx,
    parse_id,
    parse_optional_id,
    redirect_to,
    split_tag_names,
)

FETCH_TIMEOUT = 10.0
MAX_TITLE_BYTES = 64 * 1024

_LIST_URL = "/pages"
_SITES_URL = "/sites"
_HOME_URL = "/"

_TITLE_PATTERN = re.compile(r"<title[^>]*>([^<]+)</title>", re.IGNORECASE)
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_ENTITIES = (
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&ndash;", "-"),
    ("&mdash;", "-"),
)


class ParsedURL(NamedTuple):
    """A bookmark URL broken into the parts the store keeps."""

    url: str
    domain: str
    path: str


def split_url(raw_url: str) -> ParsedURL:
    """Split a URL into its full form, its host and its path with query.

    A missing ``http://`` or ``https://`` scheme is replaced by ``https://``.
    An empty path becomes ``/``. Raises ValueError for malformed URLs.
    """
    url = raw_url
    if not url.startswith(("http://", "https://")):
        url = "https://" + url
    if any(ord(ch) < 0x20 or ord(ch) == 0x7F for ch in url):
        raise ValueError(f"invalid control character in URL: {raw_url!r}")
    parts = urlsplit(url)
    host = parts.netloc.rpartition("@")[2]
    if _BAD_ESCAPE.search(parts.path) or _BAD_ESCAPE.search(host):
        raise ValueError(f"invalid escape in URL: {raw_url!r}")
    path = unquote(parts.path)
    if parts.query:
        path += "?" + parts.query
    return ParsedURL(url=url, domain=host, path=path or "/")


def extract_title(html: Union[str, bytes]) -> str:
    """Return the text of the first ``<title>`` element, or an empty string."""
    if isinstance(html, bytes):
        html = html.decode("utf-8", errors="replace")
    match = _TITLE_PATTERN.search(html)
    if match is None:
        return ""
    title = match.group(1).strip()
    for entity, replacement in _ENTITIES:
        title = title.replace(entity, replacement)
    return title


def fetch_page_title(url: str) -> str:
    """Download the start of a page and return its title, or "" on any failure."""
    try:
        with urllib.request.urlopen(url, timeout=FETCH_TIMEOUT) as response:
            if response.status != 200:
                return ""
            body = response.read(MAX_TITLE_BYTES)
    except (OSError, ValueError, http.client.HTTPException):
        return ""
    return extract_title(body)


class _Abort(Exception):
    """Carries an error response out of a handler helper."""

    def __init__(self, response) -> None:
        super().__init__()
        self.response = response


class PageHandler:
    """List, create, edit, update, delete and quick-add pages."""

    def __init__(
        self,
        repo: Repository,
        render: Renderer,
        fetch_title: Callable[[str], str] = fetch_page_title,
    ) -> None:
        self._repo = repo
        self._render = render
        self._fetch_title = fetch_title

    def list(self):
        site_id = parse_optional_id(request.args.get("site", ""))
        category_id = parse_optional_id(request.args.get("category", ""))
        tag_id = parse_optional_id(request.args.get("tag", ""))
        try:
            pages = self._repo.get_pages(site_id, category_id, tag_id)
            sites = self._repo.get_sites()
            categories = self._repo.get_categories()
            tags = self._repo.get_tags()
        except sqlite3.Error as exc:
            return error_response(str(exc), 500)
        data = {
            "pages": pages,
            "sites": sites,
            "categories": categories,
            "tags": tags,
            "site_id": site_id,
            "category_id": category_id,
            "tag_id": tag_id,
        }
        template = "page-list" if is_htmx(request) else "pages.html"
        return self._render(template, data)

    def create(self):
        try:
            parsed, title, site_id, _ = self._prepare_bookmark()
        except _Abort as abort:
            return abort.response
        description = request.form.get("description", "")
        tag_names = request.form.get("tags", "")

        if parsed.path == "/":
            for tag_id in self._tag_ids(tag_names):
                with suppress(sqlite3.Error):
                    self._repo.add_site_tag(site_id, tag_id)
            if is_htmx(request):
                return "", 200
            return redirect_to(_SITES_URL)

        try:
            page_id = self._repo.create_page(site_id, parsed.path, title, description)
        except sqlite3.Error as exc:
            return error_response(str(exc), 500)
        for tag_id in self._tag_ids(tag_names):
            with suppress(sqlite3.Error):
                self._repo.add_page_tag(page_id, tag_id)
        if is_htmx(request):
            return self._render("page-row", self._lookup_page(page_id))
        return redirect_to(_LIST_URL)

    def edit(self, item_id: str):
        try:
            page_id = parse_id(item_id)
        except ValueError:
            return error_response("Invalid ID", 400)
        page = self._lookup_page(page_id)
        if page is None:
            return error_response("Page not found", 404)
        try:
            sites = self._repo.get_sites()
        except sqlite3.Error as exc:
            return error_response(str(exc), 500)
        return self._render("page-edit-form", {"page": page, "sites": sites})

    def update(self, item_id: str):
        try:
            page_id = parse_id(item_id)
        except ValueError:
            return error_response("Invalid ID", 400)
        try:
            site_id = parse_id(request.form.get("site_id", ""))
        except ValueError:
            return error_response("Invalid site ID", 400)
        path = request.form.get("path", "").strip() or "/"
        title = request.form.get("title", "")
        description = request.form.get("description", "")
        try:
            self._repo.update_page(page_id, site_id, path, title, description)
        except sqlite3.Error as exc:
            return error_response(str(exc), 500)
        tag_ids = self._tag_ids(request.form.get("tags", ""))
        with suppress(sqlite3.Error):
            self._repo.set_page_tags(page_id, tag_ids)
        if is_htmx(request):
            return self._render("page-row", self._lookup_page(page_id))
        return redirect_to(_LIST_URL)

    def delete(self, item_id: str):
        try:
            page_id = parse_id(item_id)
        except ValueError:
            return error_response("Invalid ID", 400)
        try:
            self._repo.delete_page(page_id)
        except sqlite3.Error as exc:
            return error_response(str(exc), 500)
        if is_htmx(request):
            return "", 200
        return redirect_to(_LIST_URL)

    def quick_add(self):
        """Add a bookmark from the dashboard form."""
        try:
            parsed, title, site_id, site = self._prepare_bookmark()
        except _Abort as abort:
            return abort.response

        if parsed.path == "/":
            if is_htmx(request):
                return self._render("recent-site-row", site)
            return redirect_to(_HOME_URL)

        try:
            page_id = self._repo.create_page(site_id, parsed.path, title, "")
        except sqlite3.Error as exc:
            return error_response(str(exc), 500)
        if is_htmx(request):
            return self._render("recent-page-row", self._lookup_page(page_id))
        return redirect_to(_HOME_URL)

    def _prepare_bookmark(self) -> Tuple[ParsedURL, str, int, Optional[Site]]:
        raw_url = request.form.get("url", "").strip()
        title = request.form.get("title", "")
        if not raw_url:
            raise _Abort(error_response("URL is required", 400))
        try:
            parsed = split_url(raw_url)
        except ValueError:
            raise _Abort(error_response("Invalid URL", 400)) from None
        if not title:
            title = self._fetch_title(parsed.url)
        site_name = title if parsed.path == "/" else ""
        site_id, site = self._find_or_create_site(parsed.domain, site_name)
        return parsed, title, site_id, site

    def _find_or_create_site(self, domain: str, name: str) -> Tuple[int, Optional[Site]]:
        try:
            site = self._repo.get_site_by_domain(domain)
            return site.id, site
        except (NotFoundError, sqlite3.Error):
            pass
        try:
            site_id = self._repo.create_site(None, domain, name, "")
        except sqlite3.Error as exc:
            raise _Abort(error_response(str(exc), 500)) from exc
        try:
            return site_id, self._repo.get_site(site_id)
        except (NotFoundError, sqlite3.Error):
            return site_id, None

    def _tag_ids(self, tag_text: str) -> List[int]:
        ids: List[int] = []
        for name in split_tag_names(tag_text):
            try:
                ids.append(self._repo.get_or_create_tag(name))
            except sqlite3.Error:
                continue
        return ids

    def _lookup_page(self, page_id: int) -> Optional[Page]:
        try:
            return self._repo.get_page(page_id)
        except (NotFoundError, sqlite3.Error):
            return None