"""Shared fixtures and mocks for unit tests."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from kvcache.storage.redis_cache import RedisCache


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@pytest.fixture
def clock():
    """Fake millisecond clock starting at a fixed instant."""
    return FakeClock()


@pytest.fixture
def mock_redis_client():
    """Mock Redis client."""
    client = AsyncMock()
    client.ping = AsyncMock(return_value=True)
    client.get = AsyncMock(return_value=None)
    client.set = AsyncMock(return_value=True)
    client.setex = AsyncMock(return_value=True)
    client.delete = AsyncMock(return_value=1)
    client.exists = AsyncMock(return_value=1)
    client.keys = AsyncMock(return_value=[])
    client.mget = AsyncMock(return_value=[])
    return client


@pytest.fixture
def redis_cache(mock_redis_client):
    """RedisCache bound to the mock client under the `app` namespace."""
    return RedisCache(mock_redis_client, "app")
