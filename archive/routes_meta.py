"""Regnum Forum Archive — service info and liveness endpoints."""

import time

from config import app
from models import utc_now_iso

_STARTED = time.monotonic()


@app.get("/")
async def root():
    return {"status": "ok", "service": "regnum-forum-archive", "version": app.version}


@app.get("/health")
async def health():
    return {
        "status": "ok",
        "timestamp": utc_now_iso(),
        "uptime": round(time.monotonic() - _STARTED, 3),
    }
