"""Regnum Forum Archive — configuration and app setup."""

import logging
import os
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

LOG_LEVEL = os.environ.get("ARCHIVE_LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

_REPO_DIR = Path(__file__).parent.parent.resolve()
DB_PATH = Path(
    os.environ.get("ARCHIVE_DB_PATH", str(_REPO_DIR / "data" / "regnumforum.db"))
)
PORT = int(os.environ.get("ARCHIVE_PORT", "3000"))
BIND_HOST = os.environ.get("ARCHIVE_BIND_HOST", "127.0.0.1")

ENVIRONMENT = os.environ.get("ARCHIVE_ENV", "development")
IS_PRODUCTION = ENVIRONMENT == "production"

# limits-style rate string, applied per client address
RATE_LIMIT = os.environ.get("ARCHIVE_RATE_LIMIT", "1000 per 15 minutes")
CACHE_TTL = float(os.environ.get("ARCHIVE_CACHE_TTL", "300"))

app = FastAPI(title="Regnum Forum Archive", version="1.0.0")

# CORS: read-only public archive, any origin by default (comma-separated list)
cors_origins = [
    o.strip()
    for o in os.environ.get("ARCHIVE_CORS_ORIGINS", "*").split(",")
    if o.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=False,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["*"],
)
app.add_middleware(GZipMiddleware, minimum_size=1000)
