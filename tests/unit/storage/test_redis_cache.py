"""Unit tests for RedisCache."""

import json
import logging
from unittest.mock import AsyncMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from kvcache.storage.redis_cache import RedisCache
from kvcache.utils.config import RedisCacheConfig


@pytest.mark.asyncio
class TestRedisCache:
    """Test RedisCache against a mocked redis.asyncio client."""

    async def test_get_decodes_json(self, redis_cache, mock_redis_client):
        mock_redis_client.get.return_value = json.dumps({"a": [1, 2]})

        assert await redis_cache.get("k") == {"a": [1, 2]}
        mock_redis_client.get.assert_awaited_once_with("app:k")

    async def test_get_missing_returns_none(self, redis_cache):
        assert await redis_cache.get("missing") is None

    async def test_set_without_ttl(self, redis_cache, mock_redis_client):
        assert await redis_cache.set("k", {"v": 1}) is True

        mock_redis_client.set.assert_awaited_once_with("app:k", '{"v": 1}')
        mock_redis_client.setex.assert_not_called()

    async def test_set_with_ttl_uses_setex(self, redis_cache, mock_redis_client):
        assert await redis_cache.set("k", "v", ttl_seconds=30) is True

        mock_redis_client.setex.assert_awaited_once_with("app:k", 30, '"v"')
        mock_redis_client.set.assert_not_called()

    async def test_set_unserializable_value_returns_false(self, redis_cache, mock_redis_client):
        assert await redis_cache.set("k", object()) is False
        mock_redis_client.set.assert_not_called()

    async def test_delete_and_has(self, redis_cache, mock_redis_client):
        assert await redis_cache.delete("k") is True
        mock_redis_client.delete.assert_awaited_once_with("app:k")

        mock_redis_client.delete.return_value = 0
        assert await redis_cache.delete("k") is False

        assert await redis_cache.has("k") is True
        mock_redis_client.exists.return_value = 0
        assert await redis_cache.has("k") is False
        mock_redis_client.exists.assert_awaited_with("app:k")

    async def test_values_reads_namespace(self, redis_cache, mock_redis_client):
        mock_redis_client.keys.return_value = ["app:a", "app:b", "app:c"]
        mock_redis_client.mget.return_value = ["1", None, '"x"']

        assert await redis_cache.values() == [1, "x"]
        mock_redis_client.keys.assert_awaited_once_with("app:*")
        mock_redis_client.mget.assert_awaited_once_with(["app:a", "app:b", "app:c"])

    async def test_values_empty_namespace(self, redis_cache, mock_redis_client):
        assert await redis_cache.values() == []
        mock_redis_client.mget.assert_not_called()

    async def test_clear_deletes_namespace(self, redis_cache, mock_redis_client):
        mock_redis_client.keys.return_value = ["app:a", "app:b"]

        await redis_cache.clear()

        mock_redis_client.delete.assert_awaited_once_with("app:a", "app:b")

    async def test_clear_empty_namespace_is_noop(self, redis_cache, mock_redis_client):
        await redis_cache.clear()
        mock_redis_client.delete.assert_not_called()

    async def test_size(self, redis_cache, mock_redis_client):
        mock_redis_client.keys.return_value = ["app:a", "app:b"]
        assert await redis_cache.size() == 2

    async def test_is_healthy(self, redis_cache, mock_redis_client):
        assert await redis_cache.is_healthy() is True
        mock_redis_client.ping.side_effect = RedisConnectionError("down")
        assert await redis_cache.is_healthy() is False


@pytest.mark.asyncio
class TestRedisCacheFailures:
    """Transport failures turn into neutral return values plus a log record."""

    @pytest.fixture
    def broken_client(self, mock_redis_client):
        error = RedisConnectionError("connection refused")
        for name in ("get", "set", "setex", "delete", "exists", "keys", "mget"):
            setattr(mock_redis_client, name, AsyncMock(side_effect=error))
        return mock_redis_client

    async def test_failures_return_defaults(self, broken_client):
        cache = RedisCache(broken_client, "app")

        assert await cache.get("k") is None
        assert await cache.set("k", 1) is False
        assert await cache.set("k", 1, ttl_seconds=5) is False
        assert await cache.delete("k") is False
        assert await cache.has("k") is False
        assert await cache.values() == []
        assert await cache.size() == 0
        assert await cache.clear() is None

    async def test_failure_is_logged(self, broken_client, caplog):
        cache = RedisCache(broken_client, "app")

        with caplog.at_level(logging.ERROR, logger="kvcache.storage.redis_cache"):
            await cache.get("k")

        assert "get failed for key=k" in caplog.text

    async def test_corrupt_payload_returns_none(self, redis_cache, mock_redis_client):
        mock_redis_client.get.return_value = "{not json"
        assert await redis_cache.get("k") is None

    async def test_failed_health_check_is_logged(self, redis_cache, mock_redis_client, caplog):
        mock_redis_client.ping.side_effect = RedisConnectionError("down")

        with caplog.at_level(logging.WARNING, logger="kvcache.storage.redis_cache"):
            assert await redis_cache.is_healthy() is False

        assert "health check failed" in caplog.text

    async def test_close_awaits_aclose(self, redis_cache, mock_redis_client):
        await redis_cache.close()
        mock_redis_client.aclose.assert_awaited_once_with()

    async def test_close_ignores_redis_errors(self, redis_cache, mock_redis_client):
        mock_redis_client.aclose = AsyncMock(side_effect=RedisConnectionError("already closed"))

        assert await redis_cache.close() is None
        mock_redis_client.aclose.assert_awaited_once_with()


class TestRedisCacheConstruction:
    def test_from_config(self):
        with patch("kvcache.storage.redis_cache.Redis") as redis_cls:
            cache = RedisCache.from_config(RedisCacheConfig(url="redis://cache:6379/2", identifier="users"))

        redis_cls.from_url.assert_called_once_with("redis://cache:6379/2", decode_responses=True)
        assert cache.identifier == "users"
