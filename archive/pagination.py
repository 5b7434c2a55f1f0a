"""Regnum Forum Archive — page/limit normalization and pagination metadata."""

from __future__ import annotations

import math

from models import Pagination
from store import SQLITE_MAX_INTEGER

DEFAULT_LIMIT = 20
MAX_LIMIT = 100
# Keeps the row offset of any page bindable as a SQLite INTEGER.
MAX_PAGE = SQLITE_MAX_INTEGER // MAX_LIMIT


def _to_int(value, default: int) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(str(value).strip())
    except ValueError:
        return default


def normalize_page(value) -> int:
    """Parse a requested page; anything unusable becomes page 1.

    Pages beyond ``MAX_PAGE`` are clamped to it.
    """
    page = _to_int(value, 1)
    return max(1, min(page, MAX_PAGE))


def normalize_limit(value, default: int = DEFAULT_LIMIT, maximum: int = MAX_LIMIT) -> int:
    """Parse a requested limit and clamp it to ``[1, maximum]``.

    A missing or non-numeric value (and an explicit 0) falls back to
    ``default`` rather than to 1.
    """
    limit = _to_int(value, default) or default
    return max(1, min(limit, maximum))


def paginate(page, limit, total: int) -> Pagination:
    """Compute offsets and navigation metadata for one page of ``total`` items."""
    page = normalize_page(page)
    limit = normalize_limit(limit)
    total = max(0, int(total or 0))
    offset = (page - 1) * limit

    total_pages = math.ceil(total / limit) if total else 0
    if total:
        start_item = min(offset + 1, total)
        end_item = min(offset + limit, total)
    else:
        start_item = end_item = 0

    return Pagination(
        page=page,
        limit=limit,
        offset=offset,
        total=total,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_prev=page > 1 and total > 0,
        start_item=start_item,
        end_item=end_item,
    )
