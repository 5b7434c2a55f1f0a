"""Regnum Forum Archive — read-only SQLite store access."""

from __future__ import annotations

import logging
import sqlite3
import threading
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

from errors import StoreUnavailableError
from formatters import timestamp_key, timestamp_year

logger = logging.getLogger(__name__)

# Largest value SQLite can bind as an INTEGER.
SQLITE_MAX_INTEGER = 2**63 - 1

# Parsed timestamps and per-thread activity, computed once per connection.
# They live in the connection's TEMP schema; the archive file is never written.
ACTIVITY_SCHEMA = """
    CREATE TEMP TABLE post_keys (
        post_id INTEGER PRIMARY KEY,
        ts_key TEXT,
        ts_year INTEGER
    );
    INSERT INTO post_keys (post_id, ts_key, ts_year)
        SELECT id, timestamp_key(timestamp), timestamp_year(timestamp) FROM posts;
    CREATE INDEX temp.post_keys_year ON post_keys (ts_year);

    CREATE TEMP TABLE thread_activity (
        thread_id INTEGER PRIMARY KEY,
        post_count INTEGER NOT NULL,
        last_activity TEXT,
        last_post_id INTEGER,
        first_post_id INTEGER
    );
    INSERT INTO thread_activity
        SELECT thread_id, COUNT(*), MAX(ts_key),
               MAX(CASE WHEN latest = 1 THEN id END),
               MAX(CASE WHEN earliest = 1 THEN id END)
        FROM (
            SELECT p.id, p.thread_id, k.ts_key,
                   ROW_NUMBER() OVER (PARTITION BY p.thread_id
                                      ORDER BY k.ts_key DESC, p.post_no DESC) AS latest,
                   ROW_NUMBER() OVER (PARTITION BY p.thread_id
                                      ORDER BY p.post_no ASC) AS earliest
            FROM posts p JOIN post_keys k ON k.post_id = p.id
        )
        GROUP BY thread_id;
    CREATE INDEX temp.thread_activity_recent ON thread_activity (last_activity);
"""


def _casefold(value):
    return value.casefold() if isinstance(value, str) else value


class ArchiveStore:
    """One shared, read-only connection to the archive database.

    Created explicitly and passed to the query layer; ``open()`` at
    startup, ``close()`` on shutdown. Request handlers run in a thread
    pool, so statements are serialized on a lock.
    """

    def __init__(self, path):
        self.path = Path(path)
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.Lock()

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def name(self) -> str:
        return self.path.name

    def open(self) -> ArchiveStore:
        if self._conn is not None:
            return self
        if not self.path.is_file():
            raise StoreUnavailableError(f"Archive database not found: {self.path}")
        started = time.monotonic()
        conn = None
        try:
            conn = sqlite3.connect(
                f"{self.path.resolve().as_uri()}?mode=ro",
                uri=True,
                check_same_thread=False,
            )
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA temp_store = MEMORY")
            conn.create_function("casefold", 1, _casefold, deterministic=True)
            conn.create_function("timestamp_key", 1, timestamp_key, deterministic=True)
            conn.create_function("timestamp_year", 1, timestamp_year, deterministic=True)
            conn.executescript(ACTIVITY_SCHEMA)
            conn.execute("PRAGMA query_only = ON")
        except sqlite3.Error as e:
            if conn is not None:
                conn.close()
            raise StoreUnavailableError(f"Cannot open archive database: {e}") from e
        self._conn = conn
        logger.info(
            "Connected to archive database %s (activity index built in %.2fs)",
            self.path, time.monotonic() - started,
        )
        return self

    def close(self) -> None:
        with self._lock:
            if self._conn is None:
                return
            try:
                self._conn.close()
            finally:
                self._conn = None
        logger.info("Archive database connection closed")

    def _execute(self, sql: str, params):
        if self._conn is None:
            raise StoreUnavailableError("Archive database is not open")
        return self._conn.execute(sql, list(params or ()))

    def fetch_one(self, sql: str, params=()) -> Optional[sqlite3.Row]:
        with self._lock:
            try:
                return self._execute(sql, params).fetchone()
            except sqlite3.Error as e:
                raise StoreUnavailableError(str(e)) from e

    def fetch_all(self, sql: str, params=()) -> list:
        with self._lock:
            try:
                return self._execute(sql, params).fetchall()
            except sqlite3.Error as e:
                raise StoreUnavailableError(str(e)) from e

    def scalar(self, sql: str, params=(), default=0):
        row = self.fetch_one(sql, params)
        if row is None or row[0] is None:
            return default
        return row[0]


@contextmanager
def open_store(path):
    store = ArchiveStore(path).open()
    try:
        yield store
    finally:
        store.close()
