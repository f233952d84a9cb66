from types import SimpleNamespace

import pytest
from flask import Flask

from bookmarks.categories import CategoryHandler
from bookmarks.database import open_database
from bookmarks.repository import NotFoundError, Repository

HTMX = {"HX-Request": "true"}


class Recorder:
    def __init__(self):
        self.calls = []

    def __call__(self, name, data):
        self.calls.append((name, data))
        return f"rendered:{name}"


@pytest.fixture
def env(tmp_path):
    conn = open_database(tmp_path)
    repo = Repository(conn)
    render = Recorder()
    handler = CategoryHandler(repo, render)
    app = Flask(__name__)
    app.add_url_rule("/categories", "list", handler.list, methods=["GET"])
    app.add_url_rule("/categories", "create", handler.create, methods=["POST"])
    app.add_url_rule("/categories/<item_id>/edit", "edit", handler.edit, methods=["GET"])
    app.add_url_rule("/categories/<item_id>", "update", handler.update, methods=["PUT"])
    app.add_url_rule("/categories/<item_id>", "delete", handler.delete, methods=["DELETE"])
    yield SimpleNamespace(client=app.test_client(), repo=repo, render=render)
    conn.close()


def test_list_full_page_sorted(env):
    env.repo.create_category("zeta", "")
    env.repo.create_category("alpha", "")
    response = env.client.get("/categories")
    assert response.get_data(as_text=True) == "rendered:categories.html"
    name, data = env.render.calls[-1]
    assert name == "categories.html"
    assert [c.name for c in data["categories"]] == ["alpha", "zeta"]


def test_list_htmx_fragment(env):
    env.client.get("/categories", headers=HTMX)
    assert env.render.calls[-1][0] == "category-list"


def test_create_requires_name(env):
    response = env.client.post("/categories", data={"name": ""})
    assert response.status_code == 400
    assert response.get_data(as_text=True) == "Name is required\n"
    assert env.repo.get_categories() == []


def test_create_redirects(env):
    response = env.client.post("/categories", data={"name": "news", "description": "daily"})
    assert response.status_code == 303
    assert response.headers["Location"] == "/categories"
    [category] = env.repo.get_categories()
    assert (category.name, category.description) == ("news", "daily")


def test_create_htmx_renders_row(env):
    env.client.post("/categories", data={"name": "news"}, headers=HTMX)
    name, category = env.render.calls[-1]
    assert name == "category-row"
    assert category.name == "news"


def test_create_duplicate_is_server_error(env):
    env.repo.create_category("news", "")
    response = env.client.post("/categories", data={"name": "news"})
    assert response.status_code == 500


def test_edit(env):
    category_id = env.repo.create_category("news", "")
    env.client.get(f"/categories/{category_id}/edit")
    name, category = env.render.calls[-1]
    assert name == "category-edit-form"
    assert category.id == category_id


def test_edit_invalid_and_missing(env):
    bad = env.client.get("/categories/abc/edit")
    assert bad.status_code == 400
    assert bad.get_data(as_text=True) == "Invalid ID\n"
    missing = env.client.get("/categories/999/edit")
    assert missing.status_code == 404
    assert missing.get_data(as_text=True) == "Category not found\n"


def test_update(env):
    category_id = env.repo.create_category("news", "old")
    response = env.client.put(f"/categories/{category_id}", data={"name": "tech", "description": ""})
    assert response.status_code == 303
    category = env.repo.get_category(category_id)
    assert (category.name, category.description) == ("tech", "")


def test_update_htmx_and_validation(env):
    category_id = env.repo.create_category("news", "")
    missing_name = env.client.put(f"/categories/{category_id}", data={"name": ""})
    assert missing_name.status_code == 400
    env.client.put(f"/categories/{category_id}", data={"name": "tech"}, headers=HTMX)
    name, category = env.render.calls[-1]
    assert name == "category-row"
    assert category.name == "tech"


def test_delete(env):
    category_id = env.repo.create_category("news", "")
    response = env.client.delete(f"/categories/{category_id}", headers=HTMX)
    assert response.status_code == 200
    assert response.get_data(as_text=True) == ""
    with pytest.raises(NotFoundError):
        env.repo.get_category(category_id)


def test_delete_redirect_and_invalid(env):
    category_id = env.repo.create_category("news", "")
    response = env.client.delete(f"/categories/{category_id}")
    assert response.status_code == 303
    assert env.client.delete("/categories/x").status_code == 400