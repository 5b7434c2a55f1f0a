#!/usr/bin/env python3
"""Regnum Forum Archive — read-only REST API over the archived forum database.

Run with: uvicorn server:app --host 0.0.0.0 --port 3000
"""

import logging

import config
import ratelimit  # noqa: F401  (rate limiting middleware)
import responses  # noqa: F401  (error handlers)

# Register all routes
import routes_meta  # noqa: F401
import routes_stats  # noqa: F401
import routes_threads  # noqa: F401
import routes_users  # noqa: F401
from aggregates import ArchiveStats
from cache import TTLCache
from config import app
from queries import ArchiveQueries
from store import ArchiveStore

logger = logging.getLogger(__name__)


def open_archive(application=app, db_path=None) -> ArchiveStore:
    """Open the store and wire the query layer onto ``application.state``.

    Raises StoreUnavailableError when the database cannot be opened.
    """
    store = ArchiveStore(db_path or config.DB_PATH).open()
    application.state.store = store
    application.state.queries = ArchiveQueries(store, TTLCache(ttl=config.CACHE_TTL))
    application.state.stats = ArchiveStats(store)
    return store


def close_archive(application=app) -> None:
    store = getattr(application.state, "store", None)
    if store is not None:
        store.close()


@app.on_event("startup")
async def startup():
    open_archive(app)
    logger.info(
        "Regnum Forum Archive started (%s). DB at %s",
        config.ENVIRONMENT, config.DB_PATH,
    )


# uvicorn runs shutdown handlers on SIGINT/SIGTERM
@app.on_event("shutdown")
async def shutdown():
    close_archive(app)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=config.BIND_HOST, port=config.PORT)
