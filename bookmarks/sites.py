"""HTTP handlers for sites."""

from __future__ import annotations

import sqlite3
from contextlib import suppress
from typing import List, Optional

from flask import request

from bookmarks.models import Site
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

_LIST_URL = "/sites"


class SiteHandler:
    """List, create, edit, update and delete sites, and list a site's pages."""

    def __init__(self, repo: Repository, render: Renderer) -> None:
        self._repo = repo
        self._render = render

    def list(self):
        category_id = parse_optional_id(request.args.get("category", ""))
        try:
            sites = self._repo.get_sites(category_id)
            categories = self._repo.get_categories()
            tags = self._repo.get_tags()
        except sqlite3.Error as exc:
            return error_response(str(exc), 500)
        data = {
            "sites": sites,
            "categories": categories,
            "tags": tags,
            "category_id": category_id,
        }
        template = "site-list" if is_htmx(request) else "sites.html"
        return self._render(template, data)

    def create(self):
        domain = request.form.get("domain", "").strip()
        name = request.form.get("name", "")
        description = request.form.get("description", "")
        category_id = parse_optional_id(request.form.get("category_id", ""))
        if not domain:
            return error_response("Domain is required", 400)
        try:
            site_id = self._repo.create_site(category_id, domain, name, description)
        except sqlite3.Error as exc:
            return error_response(str(exc), 500)
        for tag_id in self._tag_ids(request.form.get("tags", "")):
            with suppress(sqlite3.Error):
                self._repo.add_site_tag(site_id, tag_id)
        return self._row_or_redirect(site_id)

    def edit(self, item_id: str):
        try:
            site_id = parse_id(item_id)
        except ValueError:
            return error_response("Invalid ID", 400)
        site = self._lookup(site_id)
        if site is None:
            return error_response("Site not found", 404)
        try:
            categories = self._repo.get_categories()
        except sqlite3.Error as exc:
            return error_response(str(exc), 500)
        return self._render("site-edit-form", {"site": site, "categories": categories})

    def update(self, item_id: str):
        try:
            site_id = parse_id(item_id)
        except ValueError:
            return error_response("Invalid ID", 400)
        domain = request.form.get("domain", "").strip()
        name = request.form.get("name", "")
        description = request.form.get("description", "")
        category_id = parse_optional_id(request.form.get("category_id", ""))
        if not domain:
            return error_response("Domain is required", 400)
        try:
            self._repo.update_site(site_id, category_id, domain, name, description)
        except sqlite3.Error as exc:
            return error_response(str(exc), 500)
        tag_ids = self._tag_ids(request.form.get("tags", ""))
        with suppress(sqlite3.Error):
            self._repo.set_site_tags(site_id, tag_ids)
        return self._row_or_redirect(site_id)

    def delete(self, item_id: str):
        try:
            site_id = parse_id(item_id)
        except ValueError:
            return error_response("Invalid ID", 400)
        try:
            self._repo.delete_site(site_id)
        except sqlite3.Error as exc:
            return error_response(str(exc), 500)
        if is_htmx(request):
            return "", 200
        return redirect_to(_LIST_URL)

    def pages(self, item_id: str):
        try:
            site_id = parse_id(item_id)
        except ValueError:
            return error_response("Invalid ID", 400)
        try:
            pages = self._repo.get_pages(site_id=site_id)
        except sqlite3.Error as exc:
            return error_response(str(exc), 500)
        site = self._lookup(site_id)
        if site is None:
            return error_response("Site not found", 404)
        return self._render("site-pages", {"site": site, "pages": pages})

    def _tag_ids(self, tag_text: str) -> List[int]:
        ids: List[int] = []
        for name in split_tag_names(tag_text):
            try:
                ids.append(self._repo.get_or_create_tag(name))
            except sqlite3.Error:
                continue
        return ids

    def _lookup(self, site_id: int) -> Optional[Site]:
        try:
            return self._repo.get_site(site_id)
        except (NotFoundError, sqlite3.Error):
            return None

    def _row_or_redirect(self, site_id: int):
        if is_htmx(request):
            return self._render("site-row", self._lookup(site_id))
        return redirect_to(_LIST_URL)