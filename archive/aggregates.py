"""Regnum Forum Archive — derived statistics over the whole archive.

Every function here is a read; percentages are rounded to two decimals.
Note the different bases: language shares are relative to all posts,
category and yearly bars relative to the largest bucket.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from fastapi import Request
from query_builder import SelectQuery, starts_with
from store import ArchiveStore
from taxonomy import OTHER, PATH_PREFIX, language_case, language_flag

# The forum ran from 2005 until it was archived; anything else is noise.
ACTIVITY_YEARS = (2005, 2025)
MEDALS = ("🥇", "🥈", "🥉")


def _percentage(part: int, whole: int) -> float:
    if not whole:
        return 0
    return round(part / whole * 100, 2)


class ArchiveStats:
    def __init__(self, store: ArchiveStore):
        self.store = store

    def totals(self) -> dict:
        row = self.store.fetch_one(
            "SELECT "
            "(SELECT COUNT(*) FROM users WHERE id > 0) AS total_users, "
            "(SELECT COUNT(*) FROM threads) AS total_threads, "
            "(SELECT COUNT(*) FROM posts) AS total_posts"
        )
        return dict(row)

    def overview(self, languages: Optional[List[dict]] = None) -> dict:
        totals = self.totals()
        if languages is None:
            languages = self.language_stats(totals["total_posts"])
        return {
            "totalUsers": totals["total_users"],
            "totalThreads": totals["total_threads"],
            "totalPosts": totals["total_posts"],
            "totalLanguages": len(languages),
        }

    def language_stats(self, total_posts: Optional[int] = None) -> List[dict]:
        """Threads and posts per language, ``Other`` left out."""
        if total_posts is None:
            total_posts = self.totals()["total_posts"]
        case_sql, case_params = language_case("path")
        resolved = (
            SelectQuery("threads")
            .select("id")
            .select(f"{case_sql} AS language", *case_params)
        )
        q = (
            SelectQuery.wrap(resolved, "t")
            .select("t.language")
            .select("COUNT(DISTINCT t.id) AS thread_count")
            .select("COUNT(p.id) AS post_count")
            .join("LEFT JOIN posts p ON p.thread_id = t.id")
            .group_by("t.language")
            .order_by("post_count DESC", "t.language")
        )
        return [
            {
                "language": r["language"],
                "flag": language_flag(r["language"]),
                "threadCount": r["thread_count"],
                "postCount": r["post_count"],
                "percentage": _percentage(r["post_count"], total_posts),
            }
            for r in self.store.fetch_all(*q.build())
            if r["language"] != OTHER
        ]

    def top_categories(self, limit: int = 10) -> List[dict]:
        """Categories (full path under the forum root) ranked by posts."""
        prefixed = starts_with("t.path", PATH_PREFIX)
        q = (
            SelectQuery("threads t")
            .select(
                f"CASE WHEN {prefixed.sql} THEN substr(t.path, ?) ELSE t.path END "
                "AS full_category",
                *prefixed.params, len(PATH_PREFIX) + 1,
            )
            .select("COUNT(DISTINCT t.id) AS thread_count")
            .select("COUNT(p.id) AS post_count")
            .join("LEFT JOIN posts p ON p.thread_id = t.id")
            .group_by("full_category")
            .order_by("post_count DESC", "full_category")
            .limit(limit)
        )
        rows = self.store.fetch_all(*q.build())
        top = max((r["post_count"] for r in rows), default=0)
        return [
            {
                "rank": i,
                "fullCategory": r["full_category"],
                "displayCategory": r["full_category"].replace("/", " › "),
                "threadCount": r["thread_count"],
                "postCount": r["post_count"],
                "percentage": _percentage(r["post_count"], top),
            }
            for i, r in enumerate(rows, start=1)
        ]

    def yearly_activity(self) -> List[dict]:
        """Posts per year; unparseable or out-of-range timestamps are dropped."""
        q = (
            SelectQuery("post_keys k")
            .select("k.ts_year AS year")
            .select("COUNT(*) AS post_count")
            .where("k.ts_year BETWEEN ? AND ?", *ACTIVITY_YEARS)
            .group_by("year")
            .order_by("year")
        )
        rows = self.store.fetch_all(*q.build())
        busiest = max((r["post_count"] for r in rows), default=0)
        return [
            {
                "year": str(r["year"]),
                "postCount": r["post_count"],
                "percentage": _percentage(r["post_count"], busiest),
            }
            for r in rows
        ]

    def activity(self) -> dict:
        years = self.yearly_activity()
        total = sum(y["postCount"] for y in years)
        peak = max(years, key=lambda y: y["postCount"], default=None)
        return {
            "yearlyActivity": years,
            "insights": {
                "totalYears": len(years),
                "totalPosts": total,
                "peakYear": peak["year"] if peak else "N/A",
                "peakYearPosts": peak["postCount"] if peak else 0,
                "averagePostsPerYear": round(total / len(years)) if years else 0,
            },
        }

    def most_active_users(self, limit: int = 20) -> List[dict]:
        q = (
            SelectQuery("users u")
            .select("u.id")
            .select("u.name")
            .select("COUNT(p.id) AS post_count")
            .join("INNER JOIN posts p ON u.id = p.user_id")
            .where("u.name IS NOT NULL AND u.name != '' AND u.id > 0")
            .group_by("u.id", "u.name")
            .order_by("post_count DESC", "u.id ASC")
            .limit(limit)
        )
        return [
            {
                "rank": i,
                "medal": MEDALS[i - 1] if i <= len(MEDALS) else None,
                "id": r["id"],
                "name": r["name"],
                "postCount": r["post_count"],
            }
            for i, r in enumerate(self.store.fetch_all(*q.build()), start=1)
        ]

    def summary(self) -> dict:
        """Everything the statistics page shows, in one payload."""
        languages = self.language_stats()
        return {
            "overview": self.overview(languages),
            "languages": languages,
            "mostActiveUsers": self.most_active_users(20),
            "yearlyActivity": self.yearly_activity(),
            "topCategories": self.top_categories(10),
            "metadata": {
                "lastUpdated": datetime.now(timezone.utc).isoformat(),
                "dataSource": self.store.name,
            },
        }


def get_stats(request: Request) -> ArchiveStats:
    return request.app.state.stats
