from cfbstats.web.cache import TTLCache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_entries_expire_after_ttl():
    clock = FakeClock()
    cache = TTLCache(ttl_seconds=3600, clock=clock)
    cache.set("p1", {"name": "Alan Smith"})
    clock.now += 3599
    assert cache.get("p1") == {"name": "Alan Smith"}
    clock.now += 1
    assert cache.get("p1") is None
    assert "p1" not in cache


def test_invalidate():
    cache = TTLCache()
    cache.set("p1", 1)
    assert cache.invalidate("p1") is True
    assert cache.invalidate("p1") is False
    assert cache.get("p1", "missing") == "missing"


def test_bounded_size_evicts_oldest():
    cache = TTLCache(maxsize=2)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("c", 3)
    assert len(cache) == 2
    assert "a" not in cache
    assert cache.get("c") == 3


def test_per_entry_ttl_and_clear():
    clock = FakeClock()
    cache = TTLCache(ttl_seconds=10, clock=clock)
    cache.set("short", 1, ttl_seconds=1)
    cache.set("long", 2)
    clock.now += 5
    assert "short" not in cache
    assert cache.get("long") == 2
    cache.clear()
    assert len(cache) == 0
