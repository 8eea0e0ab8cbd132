# utils/cache.py
import logging
from typing import Optional

import redis
from redis.exceptions import RedisError

from config import settings

logger = logging.getLogger(__name__)


class CacheClient:
    """Minimal key-value contract used by the catalog: get / set with TTL / delete.

    Implementations must not raise on backend outages. A failed read is a miss,
    a failed write or delete is logged and dropped.
    """

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


class NullCache(CacheClient):
    # Used when no REDIS_URL is configured: every read is a miss

    def get(self, key: str) -> Optional[str]:
        return None

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        return None

    def delete(self, key: str) -> None:
        return None


class RedisCache(CacheClient):
    def __init__(self, client: redis.Redis, prefix: str = ""):
        self.redis = client
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def get(self, key: str) -> Optional[str]:
        try:
            return self.redis.get(self._key(key))
        except RedisError as e:
            logger.warning(f"Cache GET {self._key(key)} failed, treating as miss: {e}")
            return None

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            # SET key value EX ttl, absolute expiry from the moment of writing
            self.redis.set(self._key(key), value, ex=ttl_seconds)
        except RedisError as e:
            logger.warning(f"Cache SET {self._key(key)} failed: {e}")

    def delete(self, key: str) -> None:
        try:
            self.redis.delete(self._key(key))
        except RedisError as e:
            logger.warning(f"Cache DEL {self._key(key)} failed: {e}")


_redis_client: Optional[redis.Redis] = None


def _shared_redis() -> redis.Redis:
    # One connection pool per process; the client wrapper itself is per request
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.Redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=1,
            socket_timeout=1,
        )
    return _redis_client


def get_cache() -> CacheClient:
    """FastAPI dependency returning the catalog cache for the current request."""
    if not settings.REDIS_URL:
        return NullCache()
    return RedisCache(_shared_redis(), prefix=settings.CACHE_PREFIX)
