"""Regnum Forum Archive — in-process TTL cache for slow-changing lookups."""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Dict, Optional, Protocol, Tuple

logger = logging.getLogger(__name__)


class Cache(Protocol):
    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None: ...

    def invalidate(self, key: Optional[str] = None) -> None: ...


class TTLCache:
    """Per-entry TTL, no size bound, safe to share between handler threads.

    Expired entries are never returned, but they are only removed by
    :meth:`sweep`, which :meth:`set` runs at most once per
    ``sweep_interval`` seconds.
    """

    def __init__(
        self,
        ttl: float = 300,
        sweep_interval: float = 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl = ttl
        self.sweep_interval = sweep_interval
        self._clock = clock
        self._entries: Dict[str, Tuple[float, Any]] = {}
        self._last_sweep = clock()
        self._lock = threading.Lock()

    def get(self, key: str) -> Any:
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            return None
        return value

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        ttl = self.ttl if ttl is None else ttl
        with self._lock:
            now = self._clock()
            self._entries[key] = (now + ttl, value)
            if now - self._last_sweep >= self.sweep_interval:
                self._sweep(now)

    def invalidate(self, key: Optional[str] = None) -> None:
        """Drop one key, or everything when ``key`` is None."""
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)

    def sweep(self) -> int:
        with self._lock:
            return self._sweep(self._clock())

    def _sweep(self, now: float) -> int:
        expired = [k for k, (exp, _) in self._entries.items() if now >= exp]
        for k in expired:
            del self._entries[k]
        self._last_sweep = now
        if expired:
            logger.debug("Swept %d expired cache entries", len(expired))
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
