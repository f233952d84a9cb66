"""HTTP handlers for the dashboard and search."""

from __future__ import annotations

import sqlite3

from flask import request

from bookmarks.repository import Repository
from bookmarks.web import Renderer, error_response


class HomeHandler:
    """Dashboard overview and full-text search."""

    def __init__(self, repo: Repository, render: Renderer) -> None:
        self._repo = repo
        self._render = render

    def dashboard(self):
        try:
            stats = self._repo.dashboard_stats()
        except sqlite3.Error as exc:
            return error_response(str(exc), 500)
        return self._render("index.html", {"stats": stats})

    def search(self):
        query = request.args.get("q", "")
        if not query:
            return error_response("Query required", 400)
        try:
            sites, pages = self._repo.search(query)
        except sqlite3.Error as exc:
            return error_response(str(exc), 500)
        return self._render(
            "search-results", {"query": query, "sites": sites, "pages": pages}
        )