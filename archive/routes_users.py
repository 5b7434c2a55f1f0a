"""Regnum Forum Archive — user listing and profile endpoints."""

from __future__ import annotations

from typing import Optional

from config import app
from fastapi import Depends, HTTPException
from formatters import format_post, format_thread, format_user
from pagination import normalize_limit, normalize_page, paginate
from queries import ArchiveQueries, get_queries
from responses import api_response


def _load_user(user_id: int, queries: ArchiveQueries) -> dict:
    if user_id < 1:
        raise HTTPException(400, "Invalid user ID")
    return queries.get_user(user_id)


@app.get("/users")
def list_users(
    search: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    queries: ArchiveQueries = Depends(get_queries),
):
    """Members with post counts, most active first."""
    search = (search or "").strip() or None
    page, limit = normalize_page(page), normalize_limit(limit, default=50)
    rows, total = queries.list_users(search, page, limit)
    return api_response({
        "users": [format_user(r) for r in rows],
        "pagination": paginate(page, limit, total).to_dict(),
        "search": search,
    })


@app.get("/users/{user_id}")
def get_user(user_id: int, queries: ArchiveQueries = Depends(get_queries)):
    return api_response(format_user(_load_user(user_id, queries)))


@app.get("/users/{user_id}/posts")
def list_user_posts(
    user_id: int,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    queries: ArchiveQueries = Depends(get_queries),
):
    """A user's posts, newest first."""
    user = _load_user(user_id, queries)
    page, limit = normalize_page(page), normalize_limit(limit)
    posts = queries.user_posts(user_id, page, limit)
    return api_response({
        "posts": [format_post(p) for p in posts],
        "user": format_user(user),
        "pagination": paginate(page, limit, user["total_posts"]).to_dict(),
    })


@app.get("/users/{user_id}/threads")
def list_user_threads(
    user_id: int,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    queries: ArchiveQueries = Depends(get_queries),
):
    """Threads a user took part in, by when they first posted there."""
    user = _load_user(user_id, queries)
    page, limit = normalize_page(page), normalize_limit(limit)
    threads = queries.user_threads(user_id, page, limit)
    return api_response({
        "threads": [format_thread(t) for t in threads],
        "user": format_user(user),
        "pagination": paginate(page, limit, user["total_threads"]).to_dict(),
    })
