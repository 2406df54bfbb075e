from __future__ import annotations

import json
import logging
import typing as t

from redis.asyncio import Redis
from redis.exceptions import RedisError

from kvcache.monitoring.metrics import kvcache_redis_latency_seconds, timed

if t.TYPE_CHECKING:
    from kvcache.utils.config import RedisCacheConfig

_logger = logging.getLogger(__name__)

# Transport and JSON failures; JSONDecodeError is a ValueError.
_FAILURES = (RedisError, OSError, ValueError, TypeError)


class RedisCache:
    """Namespaced JSON cache over a Redis client.

    - Values are stored as JSON strings at key: `{identifier}:{key}`
    - `set` with a positive `ttl_seconds` uses `SETEX`, otherwise the key never expires

    Errors never reach the caller: each operation logs the failure and returns
    a neutral value (None, False, [] or 0), so a miss and a failed request look
    the same.
    """

    def __init__(self, redis: Redis, identifier: str) -> None:
        self._redis = redis
        self._identifier = identifier

    @classmethod
    def from_url(cls, url: str = "redis://localhost:6379/0", identifier: str = "cache") -> "RedisCache":
        return cls(Redis.from_url(url, decode_responses=True), identifier)

    @classmethod
    def from_config(cls, config: "RedisCacheConfig") -> "RedisCache":
        return cls.from_url(config.url, config.identifier)

    @property
    def identifier(self) -> str:
        return self._identifier

    def _key(self, key: str) -> str:
        return f"{self._identifier}:{key}"

    def _pattern(self) -> str:
        return f"{self._identifier}:*"

    async def get(self, key: str) -> t.Optional[t.Any]:
        try:
            with timed(kvcache_redis_latency_seconds, op="get"):
                raw = await self._redis.get(self._key(key))
            return json.loads(raw) if raw else None
        except _FAILURES:
            _logger.exception("RedisCache(%s): get failed for key=%s", self._identifier, key)
            return None

    async def set(self, key: str, value: t.Any, ttl_seconds: int = 0) -> bool:
        try:
            payload = json.dumps(value)
            with timed(kvcache_redis_latency_seconds, op="set"):
                if ttl_seconds > 0:
                    await self._redis.setex(self._key(key), ttl_seconds, payload)
                else:
                    await self._redis.set(self._key(key), payload)
            return True
        except _FAILURES:
            _logger.exception("RedisCache(%s): set failed for key=%s", self._identifier, key)
            return False

    async def delete(self, key: str) -> bool:
        try:
            with timed(kvcache_redis_latency_seconds, op="delete"):
                return (await self._redis.delete(self._key(key))) == 1
        except _FAILURES:
            _logger.exception("RedisCache(%s): delete failed for key=%s", self._identifier, key)
            return False

    async def has(self, key: str) -> bool:
        try:
            with timed(kvcache_redis_latency_seconds, op="has"):
                return (await self._redis.exists(self._key(key))) == 1
        except _FAILURES:
            _logger.exception("RedisCache(%s): has failed for key=%s", self._identifier, key)
            return False

    async def values(self) -> t.List[t.Any]:
        try:
            with timed(kvcache_redis_latency_seconds, op="values"):
                keys = await self._redis.keys(self._pattern())
                if not keys:
                    return []
                raws = await self._redis.mget(keys)
            # keys may expire between KEYS and MGET
            return [json.loads(raw) for raw in raws if raw]
        except _FAILURES:
            _logger.exception("RedisCache(%s): values failed", self._identifier)
            return []

    async def clear(self) -> None:
        try:
            with timed(kvcache_redis_latency_seconds, op="clear"):
                keys = await self._redis.keys(self._pattern())
                if keys:
                    await self._redis.delete(*keys)
        except _FAILURES:
            _logger.exception("RedisCache(%s): clear failed", self._identifier)

    async def size(self) -> int:
        try:
            with timed(kvcache_redis_latency_seconds, op="size"):
                keys = await self._redis.keys(self._pattern())
            return len(keys)
        except _FAILURES:
            _logger.exception("RedisCache(%s): size failed", self._identifier)
            return 0

    async def is_healthy(self) -> bool:
        try:
            pong = await self._redis.ping()
            return bool(pong)
        except _FAILURES:
            _logger.warning("RedisCache(%s): health check failed", self._identifier, exc_info=True)
            return False

    async def close(self) -> None:
        try:
            await self._redis.aclose()
        except _FAILURES:
            _logger.debug("RedisCache(%s): close failed", self._identifier, exc_info=True)
