"""Tests for the TTL cache."""

import threading

from cache import TTLCache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestTTLCache:
    def test_get_missing(self):
        assert TTLCache().get("nope") is None

    def test_set_and_get(self):
        c = TTLCache(ttl=10, clock=FakeClock())
        c.set("k", [1, 2])
        assert c.get("k") == [1, 2]

    def test_expired_entry_not_returned(self):
        clock = FakeClock()
        c = TTLCache(ttl=10, sweep_interval=1000, clock=clock)
        c.set("k", "v")
        clock.now += 10
        assert c.get("k") is None

    def test_expired_entries_kept_until_sweep(self):
        clock = FakeClock()
        c = TTLCache(ttl=10, sweep_interval=1000, clock=clock)
        c.set("k", "v")
        clock.now += 20
        c.get("k")
        assert len(c) == 1
        assert c.sweep() == 1
        assert len(c) == 0

    def test_set_triggers_periodic_sweep(self):
        clock = FakeClock()
        c = TTLCache(ttl=5, sweep_interval=60, clock=clock)
        c.set("old", 1)
        clock.now += 30
        c.set("mid", 2)
        assert len(c) == 2  # sweep interval not reached yet
        clock.now += 31
        c.set("new", 3)
        assert len(c) == 1
        assert c.get("new") == 3

    def test_per_entry_ttl(self):
        clock = FakeClock()
        c = TTLCache(ttl=10, sweep_interval=1000, clock=clock)
        c.set("short", 1, ttl=1)
        c.set("long", 2)
        clock.now += 5
        assert c.get("short") is None
        assert c.get("long") == 2

    def test_invalidate(self):
        c = TTLCache(clock=FakeClock())
        c.set("a", 1)
        c.set("b", 2)
        c.invalidate("a")
        assert c.get("a") is None
        assert c.get("b") == 2
        c.invalidate()
        assert len(c) == 0

    def test_shared_between_threads(self):
        clock = FakeClock()
        c = TTLCache(ttl=1, sweep_interval=0, clock=clock)
        errors = []

        def writer(prefix):
            try:
                for i in range(500):
                    c.set(f"{prefix}{i}", i)
                    c.get(f"{prefix}{i}")
                    clock.now += 0.01
            except Exception as e:  # noqa: BLE001
                errors.append(e)

        threads = [threading.Thread(target=writer, args=(p,)) for p in "abcd"]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert errors == []
        c.sweep()
        assert len(c) <= 4 * 500
