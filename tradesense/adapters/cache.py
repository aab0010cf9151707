"""
Read-through cache for collaborator readings.

Entries are keyed by (source, symbol) and expire after a fixed TTL
measured on an injected clock. Failed fetches are never cached.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Tuple
import logging
import time

LOG = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    value: Any
    stored_at: float


class ReadingCache:
    """
    TTL cache owned by the caller.

    Args:
        ttl_seconds: Entry lifetime (default 5 minutes)
        clock: Monotonic time source, injectable for tests
    """

    def __init__(self, ttl_seconds: float = 300.0, clock: Callable[[], float] = time.monotonic):
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be > 0, got {ttl_seconds}")
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._entries: Dict[Tuple[str, str], CacheEntry] = {}
        self.hits = 0
        self.misses = 0

    def get(self, source: str, symbol: str):
        """Return the cached value, or None when missing or expired"""
        key = (source, symbol)
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self.clock() - entry.stored_at >= self.ttl_seconds:
            del self._entries[key]
            return None
        return entry.value

    def put(self, source: str, symbol: str, value: Any):
        self._entries[(source, symbol)] = CacheEntry(value=value, stored_at=self.clock())

    def invalidate(self, source: str = None, symbol: str = None):
        """Drop entries matching source and/or symbol (all when both None)"""
        for key in list(self._entries):
            if (source is None or key[0] == source) and (symbol is None or key[1] == symbol):
                del self._entries[key]

    async def get_or_fetch(self, source: str, symbol: str, fetch: Callable[[], Awaitable[Any]]):
        """
        Read-through lookup.

        A miss or expiry triggers `fetch`; exceptions propagate and leave
        the cache untouched.
        """
        cached = self.get(source, symbol)
        if cached is not None:
            self.hits += 1
            return cached

        self.misses += 1
        value = await fetch()
        self.put(source, symbol, value)
        return value

    def __len__(self) -> int:
        return len(self._entries)

    def stats(self) -> dict:
        return {'entries': len(self._entries), 'hits': self.hits, 'misses': self.misses,
                'ttl_seconds': self.ttl_seconds}
