[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bookmarks"
version = "0.1.0"
description = "A small self-hosted bookmark manager: categories, sites, pages and tags in SQLite behind an HTMX-friendly Flask application."
requires-python = ">=3.10"
dependencies = [
    "flask",
]
keywords = ["bookmarks", "htmx", "flask", "sqlite", "tags"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Web Environment",
    "Framework :: Flask",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: Dynamic Content",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
bookmarks = "bookmarks.server:main"

[tool.hatch.build.targets.wheel]
packages = ["bookmarks"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
