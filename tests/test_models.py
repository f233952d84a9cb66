from bookmarks.models import Category, DashboardStats, Page, Site, Tag


def test_site_defaults_leave_optional_fields_empty():
    site = Site(id=3, domain="example.com")
    assert site.category_id is None
    assert site.name == ""
    assert site.tags == []
    assert site.page_count == 0


def test_tag_lists_are_not_shared_between_instances():
    first = Site(id=1, domain="example.com")
    second = Site(id=2, domain="example.org")
    first.tags.append(Tag(id=1, name="news"))
    assert second.tags == []

    page_a = Page(id=1, site_id=1, path="/a")
    page_b = Page(id=2, site_id=1, path="/b")
    page_a.site_tags.append(Tag(id=1, name="news"))
    assert page_b.site_tags == []


def test_records_compare_by_value():
    assert Category(id=1, name="work") == Category(id=1, name="work")
    assert Tag(id=1, name="a") != Tag(id=1, name="b")


def test_dashboard_stats_defaults():
    stats = DashboardStats()
    assert stats.recent_pages == []
    assert stats.category_count == stats.site_count == stats.page_count == 0