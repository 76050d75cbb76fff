"""Report Cache - in-memory TTL + LRU cache for rendered report bytes.

Invariants:
    - Entries expire ttl_seconds after being stored
    - At most max_entries kept; least recently used evicted first
    - invalidate_prefix() drops every key starting with the prefix
    - A disabled cache never stores and always misses

Design Decisions:
    - Module-level singleton via get_report_cache(): deliberate exception to no-global-state rule
      (ADR: single-process uvicorn, cache lost on restart is acceptable; rendering is idempotent)
    - Any attendance write invalidates the whole "daily:" namespace: writes are rare compared
      to report downloads, so precision is not worth the bookkeeping
"""

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable

from sis.config import get_settings

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    value: bytes
    expires_at: float


class ReportCache:
    """Byte cache keyed by report identity (e.g. "daily:excel:2026-10-18")."""

    def __init__(
        self,
        ttl_seconds: int = 900,
        max_entries: int = 128,
        enabled: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self.enabled = enabled
        self._clock = clock
        self._entries: OrderedDict[str, _Entry] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> bytes | None:
        if not self.enabled:
            self.misses += 1
            return None
        entry = self._entries.get(key)
        if entry is None or entry.expires_at <= self._clock():
            if entry is not None:
                del self._entries[key]
            self.misses += 1
            return None
        self._entries.move_to_end(key)
        self.hits += 1
        return entry.value

    def put(self, key: str, value: bytes) -> None:
        if not self.enabled:
            return
        self._entries[key] = _Entry(value, self._clock() + self.ttl_seconds)
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"Report cache evicted {evicted}")

    def invalidate_prefix(self, prefix: str) -> int:
        stale = [k for k in self._entries if k.startswith(prefix)]
        for key in stale:
            del self._entries[key]
        if stale:
            logger.info(f"Report cache invalidated {len(stale)} entries for '{prefix}'")
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def stats(self) -> dict:
        return {
            "enabled": self.enabled,
            "entries": len(self._entries),
            "max_entries": self.max_entries,
            "ttl_seconds": self.ttl_seconds,
            "hits": self.hits,
            "misses": self.misses,
        }


@lru_cache
def get_report_cache() -> ReportCache:
    settings = get_settings()
    return ReportCache(
        ttl_seconds=settings.report_cache_ttl_seconds,
        max_entries=settings.report_cache_max_entries,
        enabled=settings.report_cache_enabled,
    )
