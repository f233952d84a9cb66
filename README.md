# bookmarks

A small self-hosted bookmark manager. Bookmarks are kept in a SQLite
database and arranged in four kinds of record:

- **categories** group sites;
- **sites** are domains, such as `docs.python.org`;
- **pages** are paths on a site, such as `/3/library/sqlite3.html`;
- **tags** can be put on sites and on pages. A page also carries the tags
  of its site, as `site_tags`.

The web application is a Flask app made for HTMX. When a request carries
the `HX-Request: true` header, a handler renders only the fragment to swap
in, or answers an empty `200` after a delete. Without that header it
renders the full page, or redirects with `303 See Other` after a form
submission.

## Installing

```
pip install .
```

The tests need the `test` extra:

```
pip install ".[test]"
pytest
```

## Running

```
bookmarks
```

The command takes no options besides `--help`. It reads two environment
variables:

| Variable   | Default  | Meaning                             |
|------------|----------|-------------------------------------|
| `DATA_DIR` | `./data` | Directory that holds `bookmarks.db` |
| `PORT`     | `8080`   | Port to listen on, on all interfaces |

The data directory is created if it is missing, and the schema is created
on first use. Foreign keys are enforced: deleting a site deletes its pages,
deleting a category leaves its sites without a category, and deleting a tag
removes it from every site and page.

Templates are loaded from `templates/` and static files are served from
`static/` under `/static/`, both relative to the working directory. The
command logs an error and exits with status 1 if the database cannot be
opened or `templates/` holds no `*.html` file.

## What the package does not include

The package ships no HTML templates and no static files. To serve the
interface you must supply a `templates/` directory yourself. Every template
is looked up by file name; fragment names get `.html` added, so the files
needed are:

`index.html`, `search-results.html`, `categories.html`,
`category-list.html`, `category-row.html`, `category-edit-form.html`,
`sites.html`, `site-list.html`, `site-row.html`, `site-edit-form.html`,
`site-pages.html`, `pages.html`, `page-list.html`, `page-row.html`,
`page-edit-form.html`, `recent-site-row.html`, `recent-page-row.html`,
`tags.html`, `tag-list.html`, `tag-pill.html`, `tag-items.html`.

When a handler passes a mapping, its keys become template variables
(`stats`, `categories`, `sites`, `pages`, `tags`, `query`, `site`, `page`,
`tag`, `category_id`, `site_id`, `tag_id`). Whatever was passed is also
available as `data`; single-record fragments such as `category-row` or
`page-row` use `data`. Records are the dataclasses in `bookmarks.models`,
with snake_case fields. Templates may call the globals `join(list, sep)` and
`tagNames(tags)`, or use the `tag_names` filter.

## Adding bookmarks

Post a `url` (and optionally `title`, `description` and `tags`) to `/pages`,
or a `url` and `title` to `/pages/quick-add`. If the URL has no `http://` or
`https://` scheme, `https://` is put in front of it. If no site exists for
the domain, it is created.

- A URL that points at the root of a domain (`example.com` or
  `https://example.com/`) creates only the site. A newly created site takes
  the title as its name. From `/pages`, any tags go on the site.
- Any other URL also creates a page on that site. The path is
  percent-decoded and the query string is kept as part of it.

If no title is given, the URL is fetched (10 second timeout, first 64 KiB)
and the text of its `<title>` is used, with common HTML entities decoded.
Any failure leaves the title empty. A malformed URL is answered with
`400 Invalid URL`.

Tag names are given as a comma-separated list. They are stored in lower
case with surrounding spaces removed; blank entries are skipped. Updating a
site or page replaces its tags with the list given.

## Routes

| Method | Path                     | Purpose                          |
|--------|--------------------------|----------------------------------|
| GET    | `/`                      | Dashboard with counts and the ten most recent pages |
| GET    | `/search?q=...`          | Search sites and pages, at most 20 of each |
| GET    | `/categories`            | List categories                  |
| POST   | `/categories`            | Create a category                |
| GET    | `/categories/<id>/edit`  | Edit form for a category         |
| PUT    | `/categories/<id>`       | Update a category                |
| DELETE | `/categories/<id>`       | Delete a category                |
| GET    | `/sites`                 | List sites, `?category=` filters by category |
| POST   | `/sites`                 | Create a site                    |
| GET    | `/sites/<id>/edit`       | Edit form for a site             |
| PUT    | `/sites/<id>`            | Update a site and replace its tags |
| DELETE | `/sites/<id>`            | Delete a site and its pages      |
| GET    | `/sites/<id>/pages`      | Pages of one site                |
| GET    | `/pages`                 | List pages, `?site=`, `?category=` and `?tag=` filter the list |
| POST   | `/pages`                 | Add a page from a URL            |
| GET    | `/pages/<id>/edit`       | Edit form for a page             |
| PUT    | `/pages/<id>`            | Update a page and replace its tags |
| DELETE | `/pages/<id>`            | Delete a page                    |
| POST   | `/pages/quick-add`       | Add a page from the dashboard    |
| GET    | `/tags`                  | List tags with usage counts      |
| POST   | `/tags`                  | Create a tag                     |
| DELETE | `/tags/<id>`             | Delete a tag                     |
| GET    | `/tags/<id>/items`       | Sites and pages that carry a tag |

The `?tag=` filter on pages also matches pages whose site carries the tag.
Errors are answered as plain text: `400` for missing fields or bad ids,
`404` for unknown records on edit and detail routes, `500` for database
errors.

## Using it from Python

```python
from bookmarks.database import open_database
from bookmarks.repository import Repository

conn = open_database("./data")
repo = Repository(conn)

site_id = repo.create_site(None, "example.com", "Example", "")
page_id = repo.create_page(site_id, "/docs", "Docs", "")
repo.add_page_tag(page_id, repo.get_or_create_tag("Reference"))

sites, pages = repo.search("doc")
stats = repo.dashboard_stats()
```

Lookups of a single record (`get_category`, `get_site`,
`get_site_by_domain`, `get_page`, `get_tag`) raise
`bookmarks.repository.NotFoundError` when it does not exist; database
errors come up as `sqlite3.Error`.

`bookmarks.server.create_app(data_dir, template_dir, static_dir)` builds
the Flask application when you want to serve it yourself.
`bookmarks.pages.split_url`, `extract_title` and `fetch_page_title` are
available on their own.