"""Regnum Forum Archive — statistics endpoints."""

from typing import Optional

from aggregates import ArchiveStats, get_stats
from config import app
from fastapi import Depends
from pagination import normalize_limit
from responses import api_response


@app.get("/stats")
def get_summary(stats: ArchiveStats = Depends(get_stats)):
    """Get everything the statistics page shows."""
    return api_response(stats.summary())


@app.get("/stats/overview")
def get_overview(stats: ArchiveStats = Depends(get_stats)):
    return api_response(stats.overview())


@app.get("/stats/languages")
def get_language_stats(stats: ArchiveStats = Depends(get_stats)):
    return api_response(stats.language_stats())


@app.get("/stats/users")
def get_user_stats(
    limit: Optional[str] = None, stats: ArchiveStats = Depends(get_stats)
):
    """Most active users, top three decorated with medals."""
    return api_response(stats.most_active_users(normalize_limit(limit, default=20)))


@app.get("/stats/activity")
def get_activity_stats(stats: ArchiveStats = Depends(get_stats)):
    return api_response(stats.activity())


@app.get("/stats/categories")
def get_category_stats(
    limit: Optional[str] = None, stats: ArchiveStats = Depends(get_stats)
):
    return api_response(stats.top_categories(normalize_limit(limit, default=10, maximum=50)))
