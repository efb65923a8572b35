"""Tests for the Redis record cache with a mocked client."""

import json
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from shortlink.database.cache import RedisCache
from shortlink.database.models import LinkRecord

CREATED = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def record():
    return LinkRecord.create("abc123", "https://example.com", "alice", 30, CREATED)


@pytest.fixture
def cache(logger):
    cache = RedisCache(redis_url="redis://localhost:6379/0", ttl_seconds=600, logger=logger)
    cache.client = AsyncMock()
    return cache


class TestRedisCache:

    @pytest.mark.asyncio
    async def test_disabled_without_url(self, record):
        cache = RedisCache(redis_url=None)
        await cache.connect()

        assert not cache.enabled
        assert await cache.get_record("abc123") is None
        assert not await cache.set_record(record, now=CREATED)
        assert await cache.ping()

    @pytest.mark.asyncio
    async def test_set_record_caps_ttl_at_configured_bound(self, cache, record):
        assert await cache.set_record(record, now=CREATED)

        key, ttl, payload = cache.client.setex.await_args.args
        assert key == "shortlink:record:abc123"
        assert ttl == 600
        assert json.loads(payload)["destination"] == "https://example.com"

    @pytest.mark.asyncio
    async def test_set_record_never_outlives_deadline(self, cache, record):
        now = record.valid_until - timedelta(seconds=90.5)

        assert await cache.set_record(record, now=now)
        assert cache.client.setex.await_args.args[1] == 91

    @pytest.mark.asyncio
    async def test_expired_record_not_cached(self, cache, record):
        assert not await cache.set_record(record, now=record.valid_until)
        cache.client.setex.assert_not_called()

    @pytest.mark.asyncio
    async def test_get_record_hit(self, cache, record):
        cache.client.get = AsyncMock(return_value=json.dumps(record.to_dict()))

        assert await cache.get_record("abc123") == record
        cache.client.get.assert_awaited_once_with("shortlink:record:abc123")

    @pytest.mark.asyncio
    async def test_get_record_miss_and_garbage(self, cache):
        cache.client.get = AsyncMock(return_value=None)
        assert await cache.get_record("abc123") is None

        cache.client.get = AsyncMock(return_value="{broken")
        assert await cache.get_record("abc123") is None

    @pytest.mark.asyncio
    async def test_errors_are_misses(self, cache, record):
        cache.client.get = AsyncMock(side_effect=RedisConnectionError("down"))
        cache.client.setex = AsyncMock(side_effect=RedisConnectionError("down"))
        cache.client.ping = AsyncMock(side_effect=RedisConnectionError("down"))

        assert await cache.get_record("abc123") is None
        assert not await cache.set_record(record, now=CREATED)
        assert not await cache.ping()

    @pytest.mark.asyncio
    async def test_connect_failure_disables_cache(self, logger):
        client = AsyncMock()
        client.ping = AsyncMock(side_effect=RedisConnectionError("refused"))
        cache = RedisCache(redis_url="redis://localhost:6379/0", logger=logger)

        with patch("shortlink.database.cache.redis.from_url", return_value=client):
            await cache.connect()

        assert not cache.enabled

    @pytest.mark.asyncio
    async def test_close(self, cache):
        await cache.close()
        cache.client.aclose.assert_awaited_once()
