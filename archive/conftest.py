"""Shared test fixtures for archive tests."""

import os
import sqlite3
import tempfile
from datetime import datetime, timedelta

import pytest

SCHEMA = """
    CREATE TABLE threads (
        id INTEGER PRIMARY KEY,
        name TEXT,
        path TEXT
    );
    CREATE TABLE users (
        id INTEGER PRIMARY KEY,
        name TEXT
    );
    CREATE TABLE posts (
        id INTEGER PRIMARY KEY,
        thread_id INTEGER NOT NULL,
        post_no INTEGER NOT NULL,
        user_id INTEGER,
        timestamp TEXT,
        message TEXT
    );
"""

ROOT = "Calendar/Champions of Regnum/"
ENGLISH_GENERAL = ROOT + "English/General Discussion"


def forum_time(dt: datetime) -> str:
    """Timestamp in the shape the old forum stored it."""
    return dt.strftime("%d-%m-%Y, %I:%M %p")


def build_archive(path, threads=(), users=(), posts=()):
    """Create an archive database at ``path`` with the given rows."""
    conn = sqlite3.connect(path)
    conn.executescript(SCHEMA)
    conn.executemany("INSERT INTO threads (id, name, path) VALUES (?, ?, ?)", threads)
    conn.executemany("INSERT INTO users (id, name) VALUES (?, ?)", users)
    conn.executemany(
        "INSERT INTO posts (id, thread_id, post_no, user_id, timestamp, message) "
        "VALUES (?, ?, ?, ?, ?, ?)",
        posts,
    )
    conn.commit()
    conn.close()


def sample_archive(path):
    """45 English threads plus a handful of odd cases in other languages."""
    threads, posts = [], []
    start = datetime(2007, 1, 1, 10, 0)
    for i in range(1, 46):
        name = "Dragon hunting tips" if i == 10 else f"English thread {i}"
        message = "<p>Have you seen the DRAGON?</p>" if i == 3 else f"<p>Post number {i}</p>"
        threads.append((i, name, ENGLISH_GENERAL))
        posts.append((i, i, 1, 1, forum_time(start + timedelta(days=i)), message))

    threads += [
        (46, "Bienvenidos al foro", ROOT + "Español/Discusión general"),
        (47, "Dragon trade", ROOT + "Deutsch/Handel"),
        (48, "Old stuff", ROOT + "Archive"),
        (49, "Guide du guerrier", ROOT + "Français/Guides/Guerrier"),
    ]
    posts += [
        (46, 46, 1, 2, "12-03-2006, 09:15 PM",
         '<p>Hola a todos</p><script>alert("x")</script>'),
        (47, 46, 2, 3, "13-03-2006, 08:00 AM", "<b>Saludos</b>"),
        (48, 46, 3, 0, "14-03-2006, 07:30 PM", "Soy invitado"),
        (49, 47, 1, 4, "02-02-2019, 11:00 AM", "Selling scales"),
        (50, 47, 2, 6, "03-02-2019, 11:30 AM", "Interested"),
        (51, 48, 1, 1, "sometime long ago", "Ancient history"),
    ]
    users = [
        (1, "Aragorn"), (2, "Belén"), (3, "Chloé"),
        (4, "Dieter"), (5, "Lurker"), (6, ""),
    ]
    build_archive(path, threads, users, posts)


# Build the archive and point the app at it before importing app modules
_tmp = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
_tmp.close()
os.unlink(_tmp.name)
sample_archive(_tmp.name)
os.environ["ARCHIVE_DB_PATH"] = _tmp.name
os.environ["ARCHIVE_RATE_LIMIT"] = "100000 per minute"

import config as archive_config  # noqa: E402

archive_config.DB_PATH = _tmp.name

from fastapi.testclient import TestClient  # noqa: E402
from server import app, open_archive  # noqa: E402

open_archive(app, _tmp.name)
client = TestClient(app)
ARCHIVE_PATH = _tmp.name


@pytest.fixture(autouse=True)
def fresh_state():
    """Clear cached lookups and rate limit counters before each test."""
    app.state.queries.cache.invalidate()
    app.state.rate_limiter.reset()
