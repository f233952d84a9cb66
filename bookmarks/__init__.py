"""A self-hosted bookmark manager: SQLite storage and an HTMX-friendly Flask app."""

__version__ = "0.1.0"