"""Redis adapter - async Redis via redis.asyncio."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import structlog
from redis.asyncio import Redis
from redis.exceptions import RedisError

log = structlog.get_logger(__name__)


class RedisAdapter:
    """Async Redis cache.

    Values are stored as JSON, so only JSON-compatible values round-trip.
    All keys live under ``key_prefix``; ``clear()`` removes only those.

    Args:
        url: Redis URL (e.g. ``redis://localhost:6379/0``).
        ttl_seconds: Default TTL.
        key_prefix: Namespace prepended to every key.
        max_concurrent: Max parallel Redis operations.
    """

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        ttl_seconds: int = 3600,
        *,
        key_prefix: str = "arflix:",
        max_concurrent: int = 50,
    ) -> None:
        self.url = url
        self.default_ttl = ttl_seconds
        self.key_prefix = key_prefix
        self._client: Redis | None = None
        self._semaphore = asyncio.Semaphore(max_concurrent)

    async def __aenter__(self) -> RedisAdapter:
        if self._client is None:
            self._client = Redis.from_url(self.url, decode_responses=True)
            try:
                await self._client.ping()
            except RedisError as e:
                log.error("redis_connection_failed", url=self.url, error=str(e))
                raise
            log.info("redis_connected", url=self.url)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            log.info("redis_closed")

    def _require_client(self) -> Redis:
        if self._client is None:
            raise RuntimeError("Redis not connected. Use 'async with cache:'")
        return self._client

    async def get(self, key: str) -> Any:
        client = self._require_client()
        async with self._semaphore:
            try:
                raw = await client.get(self.key_prefix + key)
            except RedisError as e:
                log.error("redis_get_error", key=key, error=str(e))
                return None
        if raw is None:
            log.debug("cache_get", key=key, hit=False)
            return None
        try:
            value = json.loads(raw)
        except json.JSONDecodeError:
            log.warning("redis_value_not_json", key=key)
            return None
        log.debug("cache_get", key=key, hit=True)
        return value

    async def set(self, key: str, value: Any, *, ttl: int | None = None) -> None:
        """Store value. ``ttl=0`` keeps the entry until deleted."""
        client = self._require_client()
        expire = ttl if ttl is not None else self.default_ttl
        try:
            packed = json.dumps(value)
        except (TypeError, ValueError) as e:
            log.error("redis_serialize_error", key=key, error=str(e))
            return
        async with self._semaphore:
            try:
                await client.set(
                    self.key_prefix + key, packed, ex=expire if expire > 0 else None
                )
            except RedisError as e:
                log.error("redis_set_error", key=key, error=str(e))
                return
        log.debug("cache_set", key=key, ttl=expire)

    async def delete(self, key: str) -> bool:
        if self._client is None:
            return False
        async with self._semaphore:
            try:
                return await self._client.delete(self.key_prefix + key) > 0
            except RedisError as e:
                log.error("redis_delete_error", key=key, error=str(e))
                return False

    async def exists(self, key: str) -> bool:
        if self._client is None:
            return False
        async with self._semaphore:
            try:
                return await self._client.exists(self.key_prefix + key) > 0
            except RedisError as e:
                log.error("redis_exists_error", key=key, error=str(e))
                return False

    async def clear(self) -> None:
        if self._client is None:
            return
        async with self._semaphore:
            try:
                keys = [k async for k in self._client.scan_iter(f"{self.key_prefix}*")]
                if keys:
                    await self._client.delete(*keys)
            except RedisError as e:
                log.error("redis_clear_error", error=str(e))
                return
        log.warning("cache_cleared", backend="redis", keys=len(keys))
