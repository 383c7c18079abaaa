"""
Caching service for public catalog responses using Redis.

The cache is optional: without ``REDIS_URL`` every lookup misses and the
loader runs against the database. Catalog writes invalidate by key prefix.
"""

import json
import logging
from typing import Any, Callable, Optional
import redis
from flask import current_app

logger = logging.getLogger(__name__)

KEY_PREFIX = 'outleads'


class CacheService:
    """Redis-based caching service for API responses."""

    def __init__(self, redis_url: Optional[str] = None, ttl: int = 300):
        self.redis_url = redis_url
        self.ttl = ttl
        self.redis_client = None
        if redis_url:
            self._connect()

    def _connect(self):
        """Connect to Redis."""
        try:
            self.redis_client = redis.from_url(self.redis_url, decode_responses=True,
                                               socket_timeout=2, socket_connect_timeout=2)
            self.redis_client.ping()
            logger.info("Successfully connected to Redis")
        except redis.RedisError as e:
            logger.error(f"Failed to connect to Redis: {str(e)}")
            self.redis_client = None

    @property
    def enabled(self):
        return self.redis_client is not None

    @staticmethod
    def make_key(*parts) -> str:
        return ':'.join([KEY_PREFIX, *[str(part) for part in parts]])

    def get(self, key: str) -> Optional[Any]:
        if not self.enabled:
            return None
        try:
            value = self.redis_client.get(key)
            return json.loads(value) if value else None
        except redis.RedisError as e:
            logger.error(f"Error getting cache key {key}: {str(e)}")
            return None

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        if not self.enabled:
            return False
        try:
            return bool(self.redis_client.setex(key, ttl or self.ttl, json.dumps(value)))
        except redis.RedisError as e:
            logger.error(f"Error setting cache key {key}: {str(e)}")
            return False

    def delete_pattern(self, pattern: str) -> int:
        """Delete all keys matching a pattern."""
        if not self.enabled:
            return 0
        try:
            keys = list(self.redis_client.scan_iter(match=pattern))
            return self.redis_client.delete(*keys) if keys else 0
        except redis.RedisError as e:
            logger.error(f"Error deleting cache pattern {pattern}: {str(e)}")
            return 0

    def get_or_load(self, key: str, loader: Callable[[], Any]) -> Any:
        """Return a cached value, computing and storing it on a miss."""
        cached = self.get(key)
        if cached is not None:
            return cached
        value = loader()
        self.set(key, value)
        return value

    def invalidate(self, resource: str) -> int:
        deleted_count = self.delete_pattern(self.make_key(resource, '*'))
        if deleted_count:
            logger.info(f"Invalidated {deleted_count} cache entries for {resource}")
        return deleted_count


def init_cache(app):
    app.extensions['outleads_cache'] = CacheService(app.config.get('REDIS_URL'),
                                                    ttl=app.config.get('CACHE_TTL_SECONDS', 300))


def get_cache() -> CacheService:
    return current_app.extensions['outleads_cache']


def invalidator(resource: str):
    """Build an after-write hook that drops cached entries for ``resource``."""
    def hook(row):
        get_cache().invalidate(resource)
    return hook
