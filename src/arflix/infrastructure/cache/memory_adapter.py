"""In-process cache adapter with TTL and an injectable clock."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from typing import Any

import structlog

log = structlog.get_logger(__name__)

Clock = Callable[[], float]

# Sweep expired entries every N set() calls or after this many seconds
_EVICT_INTERVAL = 1000
_EVICT_PERIOD_SECONDS = 300.0

# Upper bound on entries that carry a TTL
_MAX_CACHE_SIZE = 10_000


class MemoryCacheAdapter:
    """Dict-backed cache for a single process.

    Expiry is checked on read against ``clock()``, so tests can pass a
    fake clock and advance time without sleeping. ``set()`` also sweeps
    expired entries periodically and, above ``max_entries``, drops the
    oldest entries that carry a TTL. Entries stored with ``ttl=0`` are
    never evicted.

    Args:
        ttl_seconds: Default TTL for ``set()`` without explicit value.
        clock: Monotonic time source in seconds.
        max_entries: Size cap for entries with a TTL.
        evict_interval: Sweep expired entries every N writes.
    """

    def __init__(
        self,
        ttl_seconds: int = 3600,
        *,
        clock: Clock = time.monotonic,
        max_entries: int = _MAX_CACHE_SIZE,
        evict_interval: int = _EVICT_INTERVAL,
    ) -> None:
        self.default_ttl = ttl_seconds
        self._clock = clock
        self._max_entries = max_entries
        self._evict_interval = evict_interval
        self._entries: dict[str, tuple[float | None, Any]] = {}
        self._lock = asyncio.Lock()
        self._write_count = 0
        self._next_sweep_at = clock() + _EVICT_PERIOD_SECONDS

    async def __aenter__(self) -> MemoryCacheAdapter:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        self._entries.clear()

    def _live(self, key: str) -> tuple[bool, Any]:
        entry = self._entries.get(key)
        if entry is None:
            return False, None
        expires_at, value = entry
        if expires_at is not None and self._clock() >= expires_at:
            del self._entries[key]
            return False, None
        return True, value

    async def get(self, key: str) -> Any:
        async with self._lock:
            hit, value = self._live(key)
        log.debug("cache_get", key=key, hit=hit)
        return value

    async def set(self, key: str, value: Any, *, ttl: int | None = None) -> None:
        """Store value. ``ttl=0`` keeps the entry until deleted."""
        expire = ttl if ttl is not None else self.default_ttl
        now = self._clock()
        expires_at = now + expire if expire > 0 else None
        async with self._lock:
            # Re-insert so insertion order tracks the latest write
            self._entries.pop(key, None)
            self._entries[key] = (expires_at, value)
            self._write_count += 1
            if (
                self._write_count % self._evict_interval == 0
                or now >= self._next_sweep_at
            ):
                self._evict_expired(now)
            self._enforce_max_size()
        log.debug("cache_set", key=key, ttl=expire)

    def _evict_expired(self, now: float) -> None:
        expired = [
            k
            for k, (expires_at, _) in self._entries.items()
            if expires_at is not None and now >= expires_at
        ]
        for k in expired:
            del self._entries[k]
        self._next_sweep_at = now + _EVICT_PERIOD_SECONDS
        log.debug("cache_evict", evicted=len(expired), size=len(self._entries))

    def _enforce_max_size(self) -> None:
        """Drop the oldest TTL entries once the cap is exceeded."""
        if len(self._entries) <= self._max_entries:
            return
        expiring = [
            k for k, (expires_at, _) in self._entries.items() if expires_at is not None
        ]
        excess = len(expiring) - self._max_entries
        if excess <= 0:
            return
        for k in expiring[:excess]:
            del self._entries[k]

    async def delete(self, key: str) -> bool:
        async with self._lock:
            hit, _ = self._live(key)
            if hit:
                del self._entries[key]
        return hit

    async def exists(self, key: str) -> bool:
        async with self._lock:
            hit, _ = self._live(key)
        return hit

    async def clear(self) -> None:
        async with self._lock:
            self._entries.clear()
        log.warning("cache_cleared", backend="memory")
