"""HTTP handlers for categories."""

from __future__ import annotations

import sqlite3
from typing import Optional

from flask import request

from bookmarks.models import Category
from bookmarks.repository import NotFoundError, Repository
from bookmarks.web import Renderer, error_response, is_htmx, parse_id, redirect_to

_LIST_URL = "/categories"


class CategoryHandler:
    """List, create, edit, update and delete categories."""

    def __init__(self, repo: Repository, render: Renderer) -> None:
        self._repo = repo
        self._render = render

    def list(self):
        try:
            categories = self._repo.get_categories()
        except sqlite3.Error as exc:
            return error_response(str(exc), 500)
        template = "category-list" if is_htmx(request) else "categories.html"
        return self._render(template, {"categories": categories})

    def create(self):
        name = request.form.get("name", "")
        description = request.form.get("description", "")
        if not name:
            return error_response("Name is required", 400)
        try:
            category_id = self._repo.create_category(name, description)
        except sqlite3.Error as exc:
            return error_response(str(exc), 500)
        return self._row_or_redirect(category_id)

    def edit(self, item_id: str):
        try:
            category_id = parse_id(item_id)
        except ValueError:
            return error_response("Invalid ID", 400)
        category = self._lookup(category_id)
        if category is None:
            return error_response("Category not found", 404)
        return self._render("category-edit-form", category)

    def update(self, item_id: str):
        try:
            category_id = parse_id(item_id)
        except ValueError:
            return error_response("Invalid ID", 400)
        name = request.form.get("name", "")
        description = request.form.get("description", "")
        if not name:
            return error_response("Name is required", 400)
        try:
            self._repo.update_category(category_id, name, description)
        except sqlite3.Error as exc:
            return error_response(str(exc), 500)
        return self._row_or_redirect(category_id)

    def delete(self, item_id: str):
        try:
            category_id = parse_id(item_id)
        except ValueError:
            return error_response("Invalid ID", 400)
        try:
            self._repo.delete_category(category_id)
        except sqlite3.Error as exc:
            return error_response(str(exc), 500)
        if is_htmx(request):
            return "", 200
        return redirect_to(_LIST_URL)

    def _lookup(self, category_id: int) -> Optional[Category]:
        try:
            return self._repo.get_category(category_id)
        except (NotFoundError, sqlite3.Error):
            return None

    def _row_or_redirect(self, category_id: int):
        if is_htmx(request):
            return self._render("category-row", self._lookup(category_id))
        return redirect_to(_LIST_URL)