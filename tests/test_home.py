from types import SimpleNamespace

import pytest
from flask import Flask

from bookmarks.database import open_database
from bookmarks.home import HomeHandler
from bookmarks.repository import Repository


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
    handler = HomeHandler(repo, render)
    app = Flask(__name__)
    app.add_url_rule("/", "dashboard", handler.dashboard, methods=["GET"])
    app.add_url_rule("/search", "search", handler.search, methods=["GET"])
    yield SimpleNamespace(client=app.test_client(), repo=repo, render=render)
    conn.close()


def test_dashboard_counts(env):
    category_id = env.repo.create_category("news", "")
    site_id = env.repo.create_site(category_id, "example.com", "", "")
    env.repo.create_page(site_id, "/a", "A", "")
    response = env.client.get("/")
    assert response.get_data(as_text=True) == "rendered:index.html"
    name, data = env.render.calls[-1]
    assert name == "index.html"
    stats = data["stats"]
    assert (stats.category_count, stats.site_count, stats.page_count) == (1, 1, 1)
    assert [p.path for p in stats.recent_pages] == ["/a"]


def test_search_requires_query(env):
    response = env.client.get("/search")
    assert response.status_code == 400
    assert response.get_data(as_text=True) == "Query required\n"
    assert env.render.calls == []


def test_search_finds_sites_and_pages(env):
    site_id = env.repo.create_site(None, "example.com", "", "")
    env.repo.create_site(None, "other.org", "", "")
    env.repo.create_page(site_id, "/docs", "Example docs", "")
    env.client.get("/search", query_string={"q": "exam"})
    name, data = env.render.calls[-1]
    assert name == "search-results"
    assert data["query"] == "exam"
    assert [s.domain for s in data["sites"]] == ["example.com"]
    assert [p.path for p in data["pages"]] == ["/docs"]