"""Redis-backed key-value store for JSON blobs."""
import json
from typing import Any, Optional

from pos_retail.db import get_redis, RedisKeys
from pos_retail.errors import StorageUnavailableError
from pos_retail.logging import get_logger

logger = get_logger(__name__)

__all__ = ["RedisStore", "RedisKeys", "get_store"]


class RedisStore:
    """
    JSON put/get/delete on top of an async Redis client.

    Corrupted blobs are dropped and read as missing; transport
    failures surface as StorageUnavailableError.
    """

    def __init__(self, redis=None):
        self._redis = redis  # Lazy initialization

    @property
    def redis(self):
        """Get Redis client (lazy initialization)."""
        if self._redis is None:
            try:
                self._redis = get_redis()
            except ValueError as e:
                raise StorageUnavailableError(f"Redis not available: {e}") from e
        return self._redis

    async def put(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        payload = json.dumps(value)
        try:
            if ttl:
                await self.redis.set(key, payload, ex=ttl)
            else:
                await self.redis.set(key, payload)
        except StorageUnavailableError:
            raise
        except Exception as e:
            logger.error(f"Failed to write {key} to Redis: {e}")
            raise StorageUnavailableError() from e

    async def get(self, key: str, default: Any = None) -> Any:
        try:
            data = await self.redis.get(key)
        except StorageUnavailableError:
            raise
        except Exception as e:
            logger.error(f"Failed to read {key} from Redis: {e}")
            raise StorageUnavailableError() from e

        if not data:
            return default

        try:
            return json.loads(data)
        except (json.JSONDecodeError, TypeError) as e:
            logger.warning(f"Corrupted data under {key}: {e}")
            await self.delete(key)
            return default

    async def delete(self, key: str) -> None:
        try:
            await self.redis.delete(key)
        except StorageUnavailableError:
            raise
        except Exception as e:
            logger.error(f"Failed to delete {key} from Redis: {e}")
            raise StorageUnavailableError() from e


_store: Optional[RedisStore] = None


def get_store() -> RedisStore:
    """Get RedisStore singleton."""
    global _store
    if _store is None:
        _store = RedisStore()
    return _store
