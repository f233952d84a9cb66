from types import SimpleNamespace

import pytest
from flask import Flask

from bookmarks.database import open_database
from bookmarks.repository import NotFoundError, Repository
from bookmarks.sites import SiteHandler

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
    handler = SiteHandler(repo, render)
    app = Flask(__name__)
    app.add_url_rule("/sites", "list", handler.list, methods=["GET"])
    app.add_url_rule("/sites", "create", handler.create, methods=["POST"])
    app.add_url_rule("/sites/<item_id>/edit", "edit", handler.edit, methods=["GET"])
    app.add_url_rule("/sites/<item_id>", "update", handler.update, methods=["PUT"])
    app.add_url_rule("/sites/<item_id>", "delete", handler.delete, methods=["DELETE"])
    app.add_url_rule("/sites/<item_id>/pages", "pages", handler.pages, methods=["GET"])
    yield SimpleNamespace(client=app.test_client(), repo=repo, render=render)
    conn.close()


def test_list_filters_by_category(env):
    news = env.repo.create_category("news", "")
    env.repo.create_site(news, "a.example.com", "", "")
    env.repo.create_site(None, "b.example.com", "", "")
    env.client.get("/sites", query_string={"category": str(news)})
    name, data = env.render.calls[-1]
    assert name == "sites.html"
    assert [s.domain for s in data["sites"]] == ["a.example.com"]
    assert data["category_id"] == news


def test_list_ignores_bad_category(env):
    env.repo.create_site(None, "a.example.com", "", "")
    env.repo.create_site(None, "b.example.com", "", "")
    env.client.get("/sites", query_string={"category": "x"}, headers=HTMX)
    name, data = env.render.calls[-1]
    assert name == "site-list"
    assert data["category_id"] is None
    assert [s.domain for s in data["sites"]] == ["a.example.com", "b.example.com"]


def test_create_with_tags(env):
    response = env.client.post(
        "/sites",
        data={"domain": "  example.com ", "name": "Example", "tags": "Web, ,Python"},
    )
    assert response.status_code == 303
    assert response.headers["Location"] == "/sites"
    site = env.repo.get_site_by_domain("example.com")
    assert site.name == "Example"
    assert [t.name for t in env.repo.get_site_tags(site.id)] == ["python", "web"]


def test_create_requires_domain(env):
    response = env.client.post("/sites", data={"domain": "   "})
    assert response.status_code == 400
    assert response.get_data(as_text=True) == "Domain is required\n"


def test_create_htmx_renders_row(env):
    env.client.post("/sites", data={"domain": "example.com"}, headers=HTMX)
    name, site = env.render.calls[-1]
    assert name == "site-row"
    assert site.domain == "example.com"


def test_create_duplicate_domain_fails(env):
    env.repo.create_site(None, "example.com", "", "")
    response = env.client.post("/sites", data={"domain": "example.com"})
    assert response.status_code == 500


def test_update_replaces_tags_and_category(env):
    news = env.repo.create_category("news", "")
    site_id = env.repo.create_site(news, "example.com", "", "")
    env.repo.add_site_tag(site_id, env.repo.get_or_create_tag("old"))
    response = env.client.put(
        f"/sites/{site_id}",
        data={"domain": "example.org", "category_id": "", "tags": "new"},
    )
    assert response.status_code == 303
    site = env.repo.get_site(site_id)
    assert site.domain == "example.org"
    assert site.category_id is None
    assert [t.name for t in site.tags] == ["new"]


def test_update_validation(env):
    site_id = env.repo.create_site(None, "example.com", "", "")
    assert env.client.put("/sites/abc", data={"domain": "x"}).status_code == 400
    assert env.client.put(f"/sites/{site_id}", data={"domain": ""}).status_code == 400
    assert env.repo.get_site(site_id).domain == "example.com"


def test_edit(env):
    env.repo.create_category("news", "")
    site_id = env.repo.create_site(None, "example.com", "", "")
    env.client.get(f"/sites/{site_id}/edit")
    name, data = env.render.calls[-1]
    assert name == "site-edit-form"
    assert data["site"].id == site_id
    assert [c.name for c in data["categories"]] == ["news"]


def test_edit_missing(env):
    response = env.client.get("/sites/999/edit")
    assert response.status_code == 404
    assert response.get_data(as_text=True) == "Site not found\n"


def test_delete(env):
    site_id = env.repo.create_site(None, "example.com", "", "")
    response = env.client.delete(f"/sites/{site_id}", headers=HTMX)
    assert response.status_code == 200
    with pytest.raises(NotFoundError):
        env.repo.get_site(site_id)


def test_pages(env):
    site_id = env.repo.create_site(None, "example.com", "", "")
    env.repo.create_page(site_id, "/a", "", "")
    env.repo.create_page(site_id, "/b", "", "")
    env.client.get(f"/sites/{site_id}/pages")
    name, data = env.render.calls[-1]
    assert name == "site-pages"
    assert data["site"].domain == "example.com"
    assert sorted(p.path for p in data["pages"]) == ["/a", "/b"]


def test_pages_missing_site(env):
    assert env.client.get("/sites/999/pages").status_code == 404
    assert env.client.get("/sites/zz/pages").status_code == 400