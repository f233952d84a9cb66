"""Plain data records for categories, sites, pages and tags."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass
class Tag:
    """A label that can be attached to sites and pages."""

    id: int
    name: str
    site_count: int = 0
    page_count: int = 0


@dataclass
class Category:
    """A grouping of sites."""

    id: int
    name: str
    description: str = ""
    created_at: Optional[datetime] = None
    site_count: int = 0


@dataclass
class Site:
    """A bookmarked domain."""

    id: int
    domain: str
    category_id: Optional[int] = None
    category_name: str = ""
    name: str = ""
    description: str = ""
    created_at: Optional[datetime] = None
    page_count: int = 0
    tags: List[Tag] = field(default_factory=list)


@dataclass
class Page:
    """A bookmarked path on a site."""

    id: int
    site_id: int
    path: str
    site_domain: str = ""
    title: str = ""
    description: str = ""
    created_at: Optional[datetime] = None
    tags: List[Tag] = field(default_factory=list)
    site_tags: List[Tag] = field(default_factory=list)


@dataclass
class DashboardStats:
    """Totals and the most recently added pages."""

    category_count: int = 0
    site_count: int = 0
    page_count: int = 0
    recent_pages: List[Page] = field(default_factory=list)