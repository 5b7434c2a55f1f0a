"""Regnum Forum Archive — thread, post, user and lookup queries."""

from __future__ import annotations

from typing import List, Optional, Tuple

from cache import Cache
from errors import NotFoundError
from fastapi import Request
from models import ThreadFilter
from pagination import normalize_limit, normalize_page
from query_builder import (
    SEARCH_RESULT_CAP,
    SelectQuery,
    compile_thread_filter,
    icontains,
    starts_with,
)
from store import SQLITE_MAX_INTEGER, ArchiveStore
from taxonomy import OTHER, PATH_PREFIX, language_case, resolve_category, resolve_language

# Derived thread attributes, read from the activity index built when the store opens.
THREAD_SUMMARY_COLUMNS = (
    "t.id",
    "t.name",
    "t.path",
    "COALESCE(a.post_count, 0) AS post_count",
    "lu.name AS last_poster",
    "lp.timestamp AS last_post_time",
    "a.last_activity AS last_activity",
    "fp.timestamp AS created_time",
    "fu.name AS thread_creator",
)
THREAD_SUMMARY_JOINS = (
    "LEFT JOIN thread_activity a ON a.thread_id = t.id",
    "LEFT JOIN posts lp ON lp.id = a.last_post_id",
    "LEFT JOIN users lu ON lu.id = lp.user_id",
    "LEFT JOIN posts fp ON fp.id = a.first_post_id",
    "LEFT JOIN users fu ON fu.id = fp.user_id",
)
RECENT_ACTIVITY_ORDER = ("last_activity IS NULL", "last_activity DESC", "t.id DESC")

# Users that count as members: named, real (id > 0) and with posts.
_MEMBER_CONDITION = "u.name IS NOT NULL AND u.name != '' AND u.id > 0"

LANGUAGES_CACHE_KEY = "languages"


def _thread_summary() -> SelectQuery:
    q = SelectQuery("threads t")
    for column in THREAD_SUMMARY_COLUMNS:
        q.select(column)
    for join in THREAD_SUMMARY_JOINS:
        q.join(join)
    return q


class ArchiveQueries:
    """Read operations behind the thread and user routes."""

    def __init__(self, store: ArchiveStore, cache: Optional[Cache] = None):
        self.store = store
        self.cache = cache

    # --- threads ---

    def list_threads(self, flt: ThreadFilter, page=1, limit=20) -> Tuple[List, int]:
        """One page of threads, most recently active first, and the match count."""
        page, limit = normalize_page(page), normalize_limit(limit)
        q = _thread_summary().where_all(compile_thread_filter(flt))
        q.order_by(*RECENT_ACTIVITY_ORDER).limit(limit, (page - 1) * limit)
        rows = self.store.fetch_all(*q.build())
        total = self.store.scalar(*self.count_query(flt).build_count())
        return rows, total

    def count_query(self, flt: ThreadFilter) -> SelectQuery:
        return SelectQuery("threads t").select("t.id").where_all(compile_thread_filter(flt))

    def search_threads(self, flt: ThreadFilter) -> Tuple[List, bool]:
        """Threads whose name or posts contain ``flt.search``; at most 50, no paging.

        Returns the rows and whether more threads matched than were returned.
        """
        q = _thread_summary().where_all(compile_thread_filter(flt))
        q.order_by(*RECENT_ACTIVITY_ORDER).limit(SEARCH_RESULT_CAP + 1)
        rows = self.store.fetch_all(*q.build())
        return rows[:SEARCH_RESULT_CAP], len(rows) > SEARCH_RESULT_CAP

    def get_thread(self, thread_id: int):
        if thread_id > SQLITE_MAX_INTEGER:
            raise NotFoundError("Thread not found")
        q = _thread_summary().where("t.id = ?", thread_id)
        row = self.store.fetch_one(*q.build())
        if row is None:
            raise NotFoundError("Thread not found")
        return row

    def list_thread_posts(self, thread_id: int, page=1, limit=20) -> List:
        """Posts of one thread in reading order (post_no ascending)."""
        page, limit = normalize_page(page), normalize_limit(limit)
        q = (
            SelectQuery("posts p")
            .select("p.*")
            .select("u.name AS username")
            .join("LEFT JOIN users u ON p.user_id = u.id")
            .where("p.thread_id = ?", thread_id)
            .order_by("p.post_no ASC")
            .limit(limit, (page - 1) * limit)
        )
        return self.store.fetch_all(*q.build())

    # --- lookups ---

    def languages(self) -> List[str]:
        """Recognized languages that have at least one thread, alphabetically."""
        if self.cache is not None:
            cached = self.cache.get(LANGUAGES_CACHE_KEY)
            if cached is not None:
                return cached
        case_sql, case_params = language_case("t.path")
        resolved = SelectQuery("threads t").select(f"{case_sql} AS language", *case_params)
        q = (
            SelectQuery.wrap(resolved, "l")
            .select("DISTINCT l.language")
            .where("l.language != ?", OTHER)
            .order_by("l.language")
        )
        result = [r["language"] for r in self.store.fetch_all(*q.build())]
        if self.cache is not None:
            self.cache.set(LANGUAGES_CACHE_KEY, result)
        return result

    def categories(self, language: Optional[str] = None) -> List[dict]:
        """Categories of one language, or every (language, category) pair."""
        key = f"categories:{language or '*'}"
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                return cached
        if language:
            result = self._language_categories(language)
        else:
            result = self._all_categories()
        if self.cache is not None:
            self.cache.set(key, result)
        return result

    def _language_categories(self, language: str) -> List[dict]:
        base = f"{PATH_PREFIX}{language}/"
        q = (
            SelectQuery("threads t")
            .select("substr(t.path, ?) AS category", len(base) + 1)
            .select("COUNT(*) AS thread_count")
            .where(starts_with("t.path", base))
            .group_by("category")
            .order_by("category")
        )
        return [
            {"category": r["category"], "threadCount": r["thread_count"]}
            for r in self.store.fetch_all(*q.build())
        ]

    def _all_categories(self) -> List[dict]:
        q = (
            SelectQuery("threads t")
            .select("t.path")
            .select("COUNT(DISTINCT t.id) AS thread_count")
            .select("COUNT(p.id) AS post_count")
            .join("LEFT JOIN posts p ON p.thread_id = t.id")
            .group_by("t.path")
        )
        grouped = {}
        for r in self.store.fetch_all(*q.build()):
            language = resolve_language(r["path"])
            if language == OTHER:
                continue
            key = (language, resolve_category(r["path"]))
            entry = grouped.setdefault(key, {
                "language": key[0], "category": key[1],
                "threadCount": 0, "postCount": 0,
            })
            entry["threadCount"] += r["thread_count"]
            entry["postCount"] += r["post_count"]
        return sorted(
            grouped.values(),
            key=lambda c: (c["language"], -c["threadCount"], c["category"]),
        )

    # --- users ---

    def _member_query(self, search: Optional[str]) -> SelectQuery:
        q = (
            SelectQuery("users u")
            .join("INNER JOIN posts p ON u.id = p.user_id")
            .where(_MEMBER_CONDITION)
        )
        if search:
            q.where(icontains("u.name", search))
        return q

    def list_users(self, search: Optional[str] = None, page=1, limit=50) -> Tuple[List, int]:
        """Members with post statistics, most prolific first, and the member count."""
        page, limit = normalize_page(page), normalize_limit(limit, default=50)
        q = (
            self._member_query(search)
            .select("u.id")
            .select("u.name")
            .select("COUNT(DISTINCT p.thread_id) AS thread_count")
            .select("COUNT(p.id) AS post_count")
            .select("MIN(k.ts_key) AS first_post")
            .select("MAX(k.ts_key) AS last_post")
            .join("LEFT JOIN post_keys k ON k.post_id = p.id")
            .group_by("u.id", "u.name")
            .order_by("post_count DESC", "u.id ASC")
            .limit(limit, (page - 1) * limit)
        )
        rows = self.store.fetch_all(*q.build())
        count = self._member_query(search).select("DISTINCT u.id")
        total = self.store.scalar(*count.build_count())
        return rows, total

    def get_user(self, user_id: int) -> dict:
        """User row merged with aggregate post statistics."""
        if user_id > SQLITE_MAX_INTEGER:
            raise NotFoundError("User not found")
        user = self.store.fetch_one("SELECT id, name FROM users WHERE id = ?", (user_id,))
        if user is None:
            raise NotFoundError("User not found")
        stats = self.store.fetch_one(
            "SELECT COUNT(*) AS total_posts, "
            "COUNT(DISTINCT p.thread_id) AS total_threads, "
            "MIN(k.ts_key) AS first_post, "
            "MAX(k.ts_key) AS last_post "
            "FROM posts p LEFT JOIN post_keys k ON k.post_id = p.id "
            "WHERE p.user_id = ?",
            (user_id,),
        )
        return {**dict(user), **dict(stats)}

    def user_posts(self, user_id: int, page=1, limit=20) -> List:
        """A user's posts, newest first, with the owning thread's name and path."""
        page, limit = normalize_page(page), normalize_limit(limit)
        q = (
            SelectQuery("posts p")
            .select("p.id")
            .select("p.thread_id")
            .select("p.post_no")
            .select("p.user_id")
            .select("p.timestamp")
            .select("p.message")
            .select("u.name AS username")
            .select("t.name AS thread_name")
            .select("t.path AS thread_path")
            .join("INNER JOIN threads t ON p.thread_id = t.id")
            .join("LEFT JOIN users u ON p.user_id = u.id")
            .join("LEFT JOIN post_keys k ON k.post_id = p.id")
            .where("p.user_id = ?", user_id)
            .order_by("k.ts_key IS NULL", "k.ts_key DESC", "p.id DESC")
            .limit(limit, (page - 1) * limit)
        )
        return self.store.fetch_all(*q.build())

    def user_threads(self, user_id: int, page=1, limit=20) -> List:
        """Threads a user posted in, ordered by their first post there, newest first."""
        page, limit = normalize_page(page), normalize_limit(limit)
        q = (
            SelectQuery("threads t")
            .select("t.id")
            .select("t.name")
            .select("t.path")
            .select("a.post_count")
            .select("up.first_post AS created_time")
            .select("a.last_activity AS last_post_time")
            .join(
                "INNER JOIN (SELECT p.thread_id, MIN(k.ts_key) AS first_post "
                "FROM posts p LEFT JOIN post_keys k ON k.post_id = p.id "
                "WHERE p.user_id = ? GROUP BY p.thread_id) up "
                "ON up.thread_id = t.id",
                user_id,
            )
            .join("INNER JOIN thread_activity a ON a.thread_id = t.id")
            .order_by("up.first_post IS NULL", "up.first_post DESC", "t.id DESC")
            .limit(limit, (page - 1) * limit)
        )
        return self.store.fetch_all(*q.build())


def get_queries(request: Request) -> ArchiveQueries:
    return request.app.state.queries
