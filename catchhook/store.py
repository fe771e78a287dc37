"""
Redis record store — the only module that talks to Redis directly.

Layout:
- webhook:<ns>               one JSON record per received webhook, 24h TTL
- webhooks:list              recency index, newest first, capped
- webhook:response:config    synthetic response descriptor, no TTL

A single RecordStore is built at startup and injected into every handler.
Connection and command failures surface as StoreUnavailableError.
"""
import logging
from contextlib import contextmanager
from typing import Optional

import redis.asyncio as aioredis
from fastapi import Request
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)

INDEX_KEY = "webhooks:list"
RESPONSE_CONFIG_KEY = "webhook:response:config"
RECORD_KEY_PREFIX = "webhook:"


class StoreUnavailableError(Exception):
    """Raised when Redis cannot be reached or rejects a command."""
    pass


@contextmanager
def _store_errors(action: str):
    try:
        yield
    except (RedisError, OSError) as e:
        raise StoreUnavailableError(f"Redis {action} failed: {e}") from e


def create_redis(settings) -> aioredis.Redis:
    """Build the shared async Redis client (connection pool) from settings."""
    return aioredis.Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        password=settings.redis_auth or None,
        db=settings.redis_db,
        socket_timeout=settings.redis_socket_timeout,
        socket_connect_timeout=settings.redis_socket_timeout,
        decode_responses=True,
    )


class RecordStore:
    """Async key-value operations over one shared Redis client."""

    def __init__(self, redis: aioredis.Redis):
        self._redis = redis

    @classmethod
    def from_settings(cls, settings) -> "RecordStore":
        return cls(create_redis(settings))

    async def ping(self) -> None:
        with _store_errors("ping"):
            await self._redis.ping()

    async def get(self, key: str) -> Optional[str]:
        with _store_errors(f"GET {key}"):
            return await self._redis.get(key)

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        """Write a value; ttl in seconds, None means the key never expires."""
        with _store_errors(f"SET {key}"):
            await self._redis.set(key, value, ex=ttl)

    async def push_index(self, key: str, max_entries: int) -> None:
        """
        Push a record key onto the head of the recency index and trim it.
        Both commands run in one MULTI/EXEC so the cap holds between them.
        """
        with _store_errors("index push"):
            pipe = self._redis.pipeline(transaction=True)
            pipe.lpush(INDEX_KEY, key)
            pipe.ltrim(INDEX_KEY, 0, max_entries - 1)
            await pipe.execute()

    async def index_range(self, start: int = 0, stop: int = -1) -> list[str]:
        """Return index entries start..stop inclusive (-1 = to the end)."""
        with _store_errors("index range"):
            return await self._redis.lrange(INDEX_KEY, start, stop)

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        with _store_errors(f"DEL ({len(keys)} keys)"):
            return await self._redis.delete(*keys)

    async def close(self) -> None:
        try:
            await self._redis.aclose()
        except (RedisError, OSError) as e:
            logger.warning("Error closing Redis client: %s", str(e))


def get_store(request: Request) -> RecordStore:
    """FastAPI dependency returning the store built during app startup."""
    return request.app.state.store
