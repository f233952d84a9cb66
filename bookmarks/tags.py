"""HTTP handlers for tags."""

from __future__ import annotations

import sqlite3
from typing import Optional

from flask import request

from bookmarks.models import Tag
from bookmarks.repository import NotFoundError, Repository
from bookmarks.web import Renderer, error_response, is_htmx, parse_id, redirect_to

_LIST_URL = "/tags"


class TagHandler:
    """List, create and delete tags, and show what carries a tag."""

    def __init__(self, repo: Repository, render: Renderer) -> None:
        self._repo = repo
        self._render = render

    def list(self):
        try:
            tags = self._repo.get_tags()
        except sqlite3.Error as exc:
            return error_response(str(exc), 500)
        template = "tag-list" if is_htmx(request) else "tags.html"
        return self._render(template, {"tags": tags})

    def create(self):
        name = request.form.get("name", "").strip()
        if not name:
            return error_response("Name is required", 400)
        try:
            tag_id = self._repo.create_tag(name)
        except sqlite3.Error as exc:
            return error_response(str(exc), 500)
        if is_htmx(request):
            return self._render("tag-pill", self._lookup(tag_id))
        return redirect_to(_LIST_URL)

    def delete(self, item_id: str):
        try:
            tag_id = parse_id(item_id)
        except ValueError:
            return error_response("Invalid ID", 400)
        try:
            self._repo.delete_tag(tag_id)
        except sqlite3.Error as exc:
            return error_response(str(exc), 500)
        if is_htmx(request):
            return "", 200
        return redirect_to(_LIST_URL)

    def items(self, item_id: str):
        try:
            tag_id = parse_id(item_id)
        except ValueError:
            return error_response("Invalid ID", 400)
        tag = self._lookup(tag_id)
        if tag is None:
            return error_response("Tag not found", 404)
        try:
            sites = self._repo.get_sites()
            pages = self._repo.get_pages(tag_id=tag_id)
        except sqlite3.Error as exc:
            return error_response(str(exc), 500)
        tagged_sites = [site for site in sites if any(t.id == tag_id for t in site.tags)]
        return self._render("tag-items", {"tag": tag, "sites": tagged_sites, "pages": pages})

    def _lookup(self, tag_id: int) -> Optional[Tag]:
        try:
            return self._repo.get_tag(tag_id)
        except (NotFoundError, sqlite3.Error):
            return None