"""
In-process report cache and per-client rate limiter.

Both are shared by every request on the event loop. Their operations never
await, so each call is atomic under the cooperative scheduler.
"""

import asyncio
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

from fastapi import Request
from limits import RateLimitItemPerSecond
from limits.storage import MemoryStorage
from limits.strategies import FixedWindowRateLimiter
from slowapi.util import get_remote_address

logger = logging.getLogger(__name__)

T = TypeVar("T")
Clock = Callable[[], float]


@dataclass
class _CacheEntry(Generic[T]):
    data: T
    timestamp: float
    expires_at: float


class TTLCache(Generic[T]):
    """
    Bounded LRU cache with lazy per-entry expiration.

    Expired entries are evicted when read. Reads move the entry to the
    most-recently-used end; inserting a new key at capacity drops the
    least-recently-used one.
    """

    def __init__(self, max_size: int = 100, ttl_seconds: float = 600, clock: Clock = time.time):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self.ttl = ttl_seconds
        self._clock = clock
        self._entries: OrderedDict[str, _CacheEntry[T]] = OrderedDict()

    def get(self, key: str) -> Optional[T]:
        entry = self._entries.get(key)
        if entry is None:
            return None

        if self._clock() > entry.expires_at:
            del self._entries[key]
            return None

        self._entries.move_to_end(key)
        return entry.data

    def set(self, key: str, value: T) -> None:
        if key not in self._entries and len(self._entries) >= self.max_size:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"Cache full, evicted {evicted}")

        now = self._clock()
        # Assigning an existing key keeps its position
        self._entries[key] = _CacheEntry(data=value, timestamp=now, expires_at=now + self.ttl)

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def clear(self) -> None:
        self._entries.clear()

    def size(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, key: str) -> bool:
        return self.has(key)


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_at: float  # epoch seconds


class RateLimiter:
    """
    Fixed-window request counter per client identifier.

    Counting is delegated to `limits` (the engine behind slowapi): one
    `RateLimitItem` of `max_requests` per `window_seconds`, kept in a
    `MemoryStorage`. A window starts on the first request and resets
    entirely once it has expired. `cleanup()` reclaims expired windows and
    has no effect on `check()` results.
    """

    def __init__(self, max_requests: int = 20, window_seconds: int = 3600):
        self.max_requests = max_requests
        self.window = window_seconds
        self.item = RateLimitItemPerSecond(max_requests, window_seconds, namespace="ANALYZE")
        self.storage = MemoryStorage()
        self._limiter = FixedWindowRateLimiter(self.storage)

    def check(self, identifier: str) -> RateLimitResult:
        key = identifier.lower()
        allowed = self._limiter.hit(self.item, key)
        stats = self._limiter.get_window_stats(self.item, key)
        return RateLimitResult(
            allowed=allowed,
            remaining=stats.remaining if allowed else 0,
            reset_at=stats.reset_time,
        )

    def reset(self, identifier: str) -> None:
        self._limiter.clear(self.item, identifier.lower())

    def cleanup(self) -> int:
        """Drop expired windows. Returns how many were removed."""
        before = len(self.storage.expirations)
        for key in list(self.storage.expirations):
            # MemoryStorage evicts expired keys on read
            self.storage.get(key)
        return before - len(self.storage.expirations)

    def __len__(self) -> int:
        return len(self.storage.expirations)


async def sweep_rate_limiter(limiter: RateLimiter, interval_seconds: float) -> None:
    """Run `limiter.cleanup()` forever; cancelled on app shutdown."""
    while True:
        await asyncio.sleep(interval_seconds)
        removed = limiter.cleanup()
        if removed:
            logger.debug(f"Rate limiter sweep removed {removed} expired windows")


def get_client_identifier(request: Request) -> str:
    """Best-effort client key: proxy headers first, then the peer address."""
    headers = request.headers
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip().lower()

    real_ip = headers.get("x-real-ip") or headers.get("cf-connecting-ip")
    if real_ip:
        return real_ip.strip().lower()

    return get_remote_address(request).lower()


def cache_key_for(username: str) -> str:
    return f"report:{username.lower()}"
