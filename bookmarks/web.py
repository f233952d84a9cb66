"""Request and response helpers shared by the HTTP handlers."""

from __future__ import annotations

import re
from typing import Any, Callable, List, Optional

from flask import Response, redirect

HTMX_HEADER = "HX-Request"

Renderer = Callable[[str, Any], Any]

_ID_PATTERN = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


def is_htmx(request: Any) -> bool:
    """Tell whether the request was issued by htmx."""
    return request.headers.get(HTMX_HEADER) == "true"


def parse_id(value: Optional[str]) -> int:
    """Parse a signed 64-bit decimal identifier, raising ValueError if invalid."""
    if value is None or not _ID_PATTERN.fullmatch(value):
        raise ValueError(f"invalid id: {value!r}")
    number = int(value)
    if not _INT64_MIN <= number <= _INT64_MAX:
        raise ValueError(f"id out of range: {value!r}")
    return number


def parse_optional_id(value: Optional[str]) -> Optional[int]:
    """Parse an identifier, giving None for empty or malformed input."""
    if not value:
        return None
    try:
        return parse_id(value)
    except ValueError:
        return None


def split_tag_names(value: Optional[str]) -> List[str]:
    """Split a comma separated tag list, dropping blank entries."""
    if not value:
        return []
    return [name.strip() for name in value.split(",") if name.strip()]


def error_response(message: str, status: int) -> Response:
    """A plain-text error response."""
    response = Response(
        message + "\n",
        status=status,
        content_type="text/plain; charset=utf-8",
    )
    response.headers["X-Content-Type-Options"] = "nosniff"
    return response


def redirect_to(location: str) -> Response:
    """Redirect with 303 See Other, as used after a form submission."""
    return redirect(location, code=303)