"""Redis cache layer for link records."""

import json
import logging
import math
from datetime import datetime, timezone
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from .models import LinkRecord


class RedisCache:
    """Read-through Redis cache for link records.

    Records never change after creation, so entries are only ever written
    once and left to expire. Entries never outlive the record's valid_until.
    """

    KEY_PREFIX = "shortlink:record:"

    def __init__(
        self,
        redis_url: Optional[str] = None,
        ttl_seconds: int = 3600,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize Redis cache.

        Args:
            redis_url: Redis connection URL (e.g., redis://localhost:6379/0)
            ttl_seconds: Upper bound on how long a record stays cached
            logger: Optional logger instance
        """
        self.redis_url = redis_url
        self.ttl_seconds = ttl_seconds
        self.logger = logger or logging.getLogger(__name__)
        self.enabled = redis_url is not None
        self.client: Optional[redis.Redis] = None

        if redis_url:
            self.logger.info(f"Redis cache enabled with TTL={ttl_seconds}s")

    async def connect(self) -> None:
        """Connect to Redis. Caching is disabled if Redis is unreachable."""
        if not self.enabled:
            return

        try:
            self.client = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
            await self.client.ping()
            self.logger.info("Connected to Redis")
        except RedisError as e:
            self.logger.error(f"Failed to connect to Redis: {e}")
            self.enabled = False

    def get_cache_key(self, slug: str) -> str:
        return f"{self.KEY_PREFIX}{slug}"

    async def get_record(self, slug: str) -> Optional[LinkRecord]:
        """Get a cached record.

        Args:
            slug: The slug to lookup

        Returns:
            Cached record or None on a miss or cache error
        """
        if not self.enabled or not self.client:
            return None

        try:
            payload = await self.client.get(self.get_cache_key(slug))
        except RedisError as e:
            self.logger.error(f"Cache get error: {e}")
            return None

        if not payload:
            return None
        try:
            return LinkRecord.from_dict(json.loads(payload))
        except (ValueError, KeyError, TypeError) as e:
            self.logger.warning(f"Discarding unreadable cache entry for {slug}: {e}")
            return None

    async def set_record(self, record: LinkRecord, now: Optional[datetime] = None) -> bool:
        """Cache a record until its deadline or the configured TTL, whichever is sooner.

        Args:
            record: Record to cache
            now: Current time (defaults to now UTC)

        Returns:
            True if cached
        """
        if not self.enabled or not self.client:
            return False

        now = now or datetime.now(timezone.utc)
        remaining = (record.valid_until - now).total_seconds()
        if remaining <= 0:
            return False
        ttl = min(self.ttl_seconds, math.ceil(remaining))

        try:
            await self.client.setex(self.get_cache_key(record.slug), ttl, json.dumps(record.to_dict()))
            return True
        except RedisError as e:
            self.logger.error(f"Cache set error: {e}")
            return False

    async def ping(self) -> bool:
        if not self.enabled or not self.client:
            return True
        try:
            return bool(await self.client.ping())
        except RedisError:
            return False

    async def close(self) -> None:
        """Close Redis connection."""
        if self.client:
            await self.client.aclose()
            self.logger.info("Redis connection closed")
