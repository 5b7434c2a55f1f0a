"""Regnum Forum Archive — presentation shapes for thread, post and user rows.

The archive stores timestamps as free-form strings (mostly
``05-09-2008, 09:39 PM``) and message bodies as raw HTML scraped from the
old forum. Everything leaving the API goes through here.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

import nh3

from taxonomy import resolve_category, resolve_language

GUEST_NAME = "Guest"

TIMESTAMP_FORMATS = (
    "%d-%m-%Y, %I:%M %p",
    "%m-%d-%Y, %I:%M %p",
    "%d/%m/%Y, %I:%M %p",
    "%m/%d/%Y, %I:%M %p",
    "%Y-%m-%d %I:%M %p",
    "%Y-%m-%d %H:%M",  # timestamp_key output
)
SORT_KEY_FORMAT = "%Y-%m-%d %H:%M"

_YEAR_RE = re.compile(r"(?<!\d)(\d{4})(?!\d)")

ALLOWED_TAGS = {
    "p", "br", "b", "strong", "i", "em", "u", "a", "img", "div", "span",
    "ul", "ol", "li", "blockquote", "h1", "h2", "h3", "h4", "h5", "h6",
    "pre", "code", "hr", "table", "thead", "tbody", "tr", "td", "th",
}
ALLOWED_ATTRIBUTES = {
    "a": {"href", "title", "target"},
    "img": {"src", "alt", "title", "width", "height"},
    "*": {"class", "style"},
}
ALLOWED_SCHEMES = {"http", "https", "mailto"}


def parse_timestamp(text: Optional[str]) -> Optional[datetime]:
    """Parse a stored timestamp with the first known format that fits."""
    if not text or not isinstance(text, str):
        return None
    text = text.strip()
    for fmt in TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def format_timestamp(text: Optional[str]) -> Optional[str]:
    """Render a stored timestamp as ``Sep 5, 2008 at 9:39 PM``.

    Strings that match none of the known formats (including ones already
    rendered by this function) are returned unchanged.
    """
    if not text:
        return None
    dt = parse_timestamp(text)
    if dt is None:
        return text
    hour = dt.hour % 12 or 12
    return f"{dt:%b} {dt.day}, {dt.year} at {hour}:{dt:%M} {dt:%p}"


def timestamp_key(text: Optional[str]) -> Optional[str]:
    """Chronologically sortable form of a stored timestamp, or None."""
    dt = parse_timestamp(text)
    return dt.strftime(SORT_KEY_FORMAT) if dt else None


def timestamp_year(text: Optional[str]) -> Optional[int]:
    """Year a post was written in, or None when the timestamp is garbage."""
    dt = parse_timestamp(text)
    if dt is not None:
        return dt.year
    if not text or not isinstance(text, str):
        return None
    years = _YEAR_RE.findall(text)
    return int(years[-1]) if years else None


def sanitize_message(html: Optional[str]) -> str:
    """Strip everything but basic formatting markup from a post body."""
    if not html:
        return ""
    return nh3.clean(
        html,
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        url_schemes=ALLOWED_SCHEMES,
        link_rel=None,
    )


def _pick(row: dict, *keys):
    """First non-empty value among ``keys`` (raw column names, then output names)."""
    for key in keys:
        value = row.get(key)
        if value is not None and value != "":
            return value
    return None


def _as_dict(row) -> dict:
    return row if isinstance(row, dict) else dict(row)


def format_thread(thread) -> Optional[dict]:
    if not thread:
        return None
    t = _as_dict(thread)
    path = t.get("path") or ""
    return {
        "id": t.get("id"),
        "name": t.get("name"),
        "path": path,
        "language": resolve_language(path),
        "category": resolve_category(path),
        "postCount": _pick(t, "post_count", "postCount") or 0,
        "lastPoster": _pick(t, "last_poster", "lastPoster"),
        "lastPostTime": format_timestamp(_pick(t, "last_post_time", "lastPostTime")),
        "createdTime": format_timestamp(_pick(t, "created_time", "createdTime")),
        "threadCreator": _pick(t, "thread_creator", "threadCreator"),
    }


def format_post(post) -> Optional[dict]:
    if not post:
        return None
    p = _as_dict(post)
    return {
        "id": p.get("id"),
        "threadId": _pick(p, "thread_id", "threadId"),
        "postNo": _pick(p, "post_no", "postNo"),
        "userId": _pick(p, "user_id", "userId"),
        "username": _pick(p, "username") or GUEST_NAME,
        "timestamp": format_timestamp(p.get("timestamp")),
        "message": sanitize_message(p.get("message")),
        "threadName": _pick(p, "thread_name", "threadName"),
        "threadPath": _pick(p, "thread_path", "threadPath"),
    }


def format_user(user) -> Optional[dict]:
    if not user:
        return None
    u = _as_dict(user)
    return {
        "id": u.get("id"),
        "name": u.get("name"),
        "postCount": _pick(u, "post_count", "total_posts", "postCount") or 0,
        "threadCount": _pick(u, "thread_count", "total_threads", "threadCount") or 0,
        "firstPost": format_timestamp(_pick(u, "first_post", "firstPost")),
        "lastPost": format_timestamp(_pick(u, "last_post", "lastPost")),
    }
