"""Regnum Forum Archive — thread listing, detail and lookup endpoints."""

from __future__ import annotations

from typing import Optional

from config import app
from fastapi import Depends, HTTPException
from formatters import format_post, format_thread
from models import ThreadFilter
from pagination import normalize_limit, normalize_page, paginate
from queries import ArchiveQueries, get_queries
from query_builder import SEARCH_RESULT_CAP
from responses import api_response


def _check_thread_id(thread_id: int) -> None:
    if thread_id < 1:
        raise HTTPException(400, "Invalid thread ID")


@app.get("/threads/meta/languages")
def list_languages(queries: ArchiveQueries = Depends(get_queries)):
    """Languages that have threads in the archive."""
    return api_response(queries.languages())


@app.get("/threads/meta/categories")
def list_categories(
    language: Optional[str] = None,
    queries: ArchiveQueries = Depends(get_queries),
):
    """Categories, optionally scoped to one language."""
    return api_response(queries.categories(language or None))


@app.get("/threads")
def list_threads(
    language: Optional[str] = None,
    category: Optional[str] = None,
    search: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    queries: ArchiveQueries = Depends(get_queries),
):
    """List threads, newest activity first, or search them.

    A search ignores paging: it returns at most 50 threads, all on page 1.
    """
    flt = ThreadFilter(language=language, category=category, search=search)
    filters = flt.model_dump()

    if flt.search:
        rows, capped = queries.search_threads(flt)
        pagination = paginate(1, SEARCH_RESULT_CAP, len(rows))
        filters["searchLimit"] = SEARCH_RESULT_CAP
        filters["searchCapped"] = capped
    else:
        page, limit = normalize_page(page), normalize_limit(limit)
        rows, total = queries.list_threads(flt, page, limit)
        pagination = paginate(page, limit, total)

    return api_response({
        "threads": [format_thread(r) for r in rows],
        "pagination": pagination.to_dict(),
        "filters": filters,
    })


@app.get("/threads/{thread_id}")
def get_thread(thread_id: int, queries: ArchiveQueries = Depends(get_queries)):
    """Get a single thread with its derived statistics."""
    _check_thread_id(thread_id)
    return api_response(format_thread(queries.get_thread(thread_id)))


@app.get("/threads/{thread_id}/posts")
def list_thread_posts(
    thread_id: int,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    queries: ArchiveQueries = Depends(get_queries),
):
    """Posts of a thread in reading order."""
    _check_thread_id(thread_id)
    thread = queries.get_thread(thread_id)
    page, limit = normalize_page(page), normalize_limit(limit)
    posts = queries.list_thread_posts(thread_id, page, limit)
    pagination = paginate(page, limit, thread["post_count"])
    return api_response({
        "posts": [format_post(p) for p in posts],
        "thread": format_thread(thread),
        "pagination": pagination.to_dict(),
    })
