"""The web application: routes, template rendering and the server entry point."""

from __future__ import annotations

import argparse
import logging
import os
import sqlite3
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence, Union

from flask import Flask, render_template

from bookmarks.categories import CategoryHandler
from bookmarks.database import DEFAULT_DATA_DIR, open_database
from bookmarks.home import HomeHandler
from bookmarks.pages import PageHandler
from bookmarks.repository import Repository
from bookmarks.sites import SiteHandler
from bookmarks.tags import TagHandler

DEFAULT_PORT = "8080"
DEFAULT_TEMPLATE_DIR = "templates"
DEFAULT_STATIC_DIR = "static"

log = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


def join_filter(tags: Any, sep: str) -> str:
    """Join a list of strings with ``sep``; anything else gives ""."""
    if isinstance(tags, (list, tuple)) and all(isinstance(t, str) for t in tags):
        return sep.join(tags)
    return ""


def tag_names(tags: Any) -> str:
    """Comma separated names of a list of tags or tag mappings."""
    if not isinstance(tags, (list, tuple)):
        return ""
    names = []
    for tag in tags:
        if isinstance(tag, Mapping):
            name = tag.get("Name", tag.get("name"))
        else:
            name = getattr(tag, "name", None)
        if isinstance(name, str):
            names.append(name)
    return ", ".join(names)


def _render(name: str, data: Any):
    template = name if Path(name).suffix else f"{name}.html"
    context = dict(data) if isinstance(data, Mapping) else {}
    context["data"] = data
    return render_template(template, **context)


def create_app(
    data_dir: Optional[PathLike] = None,
    template_dir: PathLike = DEFAULT_TEMPLATE_DIR,
    static_dir: PathLike = DEFAULT_STATIC_DIR,
) -> Flask:
    """Build the application around the database in ``data_dir``.

    Raises OSError or sqlite3.Error when the database cannot be opened and
    FileNotFoundError when ``template_dir`` holds no ``*.html`` templates.
    """
    if not data_dir:
        data_dir = os.environ.get("DATA_DIR") or DEFAULT_DATA_DIR
    conn = open_database(data_dir)

    template_path = Path(template_dir).resolve()
    if not any(template_path.glob("*.html")):
        conn.close()
        raise FileNotFoundError(f"no templates match {template_path / '*.html'}")

    app = Flask(
        __name__,
        template_folder=str(template_path),
        static_folder=str(Path(static_dir).resolve()),
        static_url_path="/static",
    )
    app.jinja_env.globals["join"] = join_filter
    app.jinja_env.globals["tagNames"] = tag_names
    app.jinja_env.filters["tag_names"] = tag_names

    repo = Repository(conn)
    app.extensions["bookmarks.db"] = conn
    app.extensions["bookmarks.repo"] = repo

    home = HomeHandler(repo, _render)
    categories = CategoryHandler(repo, _render)
    sites = SiteHandler(repo, _render)
    pages = PageHandler(repo, _render)
    tags = TagHandler(repo, _render)

    routes = [
        ("/", "home.dashboard", home.dashboard, "GET"),
        ("/search", "home.search", home.search, "GET"),
        ("/categories", "categories.list", categories.list, "GET"),
        ("/categories", "categories.create", categories.create, "POST"),
        ("/categories/<item_id>/edit", "categories.edit", categories.edit, "GET"),
        ("/categories/<item_id>", "categories.update", categories.update, "PUT"),
        ("/categories/<item_id>", "categories.delete", categories.delete, "DELETE"),
        ("/sites", "sites.list", sites.list, "GET"),
        ("/sites", "sites.create", sites.create, "POST"),
        ("/sites/<item_id>/edit", "sites.edit", sites.edit, "GET"),
        ("/sites/<item_id>", "sites.update", sites.update, "PUT"),
        ("/sites/<item_id>", "sites.delete", sites.delete, "DELETE"),
        ("/sites/<item_id>/pages", "sites.pages", sites.pages, "GET"),
        ("/pages", "pages.list", pages.list, "GET"),
        ("/pages", "pages.create", pages.create, "POST"),
        ("/pages/<item_id>/edit", "pages.edit", pages.edit, "GET"),
        ("/pages/<item_id>", "pages.update", pages.update, "PUT"),
        ("/pages/<item_id>", "pages.delete", pages.delete, "DELETE"),
        ("/pages/quick-add", "pages.quick_add", pages.quick_add, "POST"),
        ("/tags", "tags.list", tags.list, "GET"),
        ("/tags", "tags.create", tags.create, "POST"),
        ("/tags/<item_id>", "tags.delete", tags.delete, "DELETE"),
        ("/tags/<item_id>/items", "tags.items", tags.items, "GET"),
    ]
    for rule, endpoint, view, method in routes:
        app.add_url_rule(rule, endpoint, view, methods=[method])
    return app


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the bookmarks server; DATA_DIR and PORT come from the environment."""
    parser = argparse.ArgumentParser(
        prog="bookmarks",
        description="Serve the bookmarks web application. "
        "Set DATA_DIR and PORT in the environment to configure it.",
    )
    parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO)

    data_dir = os.environ.get("DATA_DIR") or DEFAULT_DATA_DIR
    try:
        app = create_app(data_dir)
    except (OSError, sqlite3.Error) as exc:
        log.error("Failed to initialize application: %s", exc)
        return 1

    conn = app.extensions["bookmarks.db"]
    port = os.environ.get("PORT") or DEFAULT_PORT
    try:
        log.info("Starting server on :%s", port)
        app.run(host="0.0.0.0", port=int(port))
    except (OSError, ValueError) as exc:
        log.error("Server failed: %s", exc)
        return 1
    finally:
        conn.close()
    return 0