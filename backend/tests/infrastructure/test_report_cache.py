"""Report Cache tests - TTL expiry, LRU eviction, prefix invalidation and stats."""

from sis.infrastructure.report_cache import ReportCache


class _Clock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_hit_then_expiry():
    clock = _Clock()
    cache = ReportCache(ttl_seconds=10, clock=clock)
    cache.put("daily:excel:2026-10-18", b"xlsx")

    assert cache.get("daily:excel:2026-10-18") == b"xlsx"
    clock.now = 10
    assert cache.get("daily:excel:2026-10-18") is None
    assert cache.stats()["hits"] == 1
    assert cache.stats()["misses"] == 1
    assert cache.stats()["entries"] == 0


def test_least_recently_used_evicted_first():
    cache = ReportCache(max_entries=2)
    cache.put("a", b"1")
    cache.put("b", b"2")
    cache.get("a")
    cache.put("c", b"3")

    assert cache.get("b") is None
    assert cache.get("a") == b"1"
    assert cache.get("c") == b"3"


def test_invalidate_prefix_only_drops_matching_keys():
    cache = ReportCache()
    cache.put("daily:pdf:2026-10-01", b"1")
    cache.put("daily:csv:2026-10-02", b"2")
    cache.put("summary:pdf:2026-10-01:2026-10-02", b"3")

    assert cache.invalidate_prefix("daily:") == 2
    assert cache.get("summary:pdf:2026-10-01:2026-10-02") == b"3"


def test_disabled_cache_never_stores():
    cache = ReportCache(enabled=False)
    cache.put("k", b"v")
    assert cache.get("k") is None
    assert cache.stats()["entries"] == 0
    assert cache.stats()["enabled"] is False
