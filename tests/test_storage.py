"""
Tests for RedisStore
"""

import json

import pytest

from pos_retail.cart import CartSession, RedisStore
from pos_retail.errors import StorageUnavailableError


class TestRedisStore:

    @pytest.mark.asyncio
    async def test_put_and_get(self, store, fake_redis):
        await store.put("pos:cart:a", {"lines": []})

        assert json.loads(fake_redis.data["pos:cart:a"]) == {"lines": []}
        assert await store.get("pos:cart:a") == {"lines": []}

    @pytest.mark.asyncio
    async def test_missing_key_returns_default(self, store):
        assert await store.get("pos:cart:none") is None
        assert await store.get("pos:cart:none", default={}) == {}

    @pytest.mark.asyncio
    async def test_ttl_passed_as_expiry(self, store, fake_redis):
        await store.put("k", 1, ttl=60)
        await store.put("j", 1)

        assert fake_redis.expiries == {"k": 60, "j": None}

    @pytest.mark.asyncio
    async def test_corrupted_blob_is_dropped(self, store, fake_redis):
        fake_redis.data["pos:cart:a"] = "{not json"

        assert await store.get("pos:cart:a", default={}) == {}
        assert "pos:cart:a" not in fake_redis.data

    @pytest.mark.asyncio
    async def test_delete(self, store, fake_redis):
        await store.put("k", [1, 2])
        await store.delete("k")
        await store.delete("k")

        assert "k" not in fake_redis.data

    @pytest.mark.asyncio
    @pytest.mark.parametrize("operation", ["get", "put", "delete"])
    async def test_failures_become_storage_errors(self, store, fake_redis, operation):
        fake_redis.fail = True

        with pytest.raises(StorageUnavailableError) as exc_info:
            if operation == "put":
                await store.put("k", 1)
            else:
                await getattr(store, operation)("k")

        assert exc_info.value.code == "STORAGE_UNAVAILABLE"

    @pytest.mark.asyncio
    async def test_unconfigured_client(self, monkeypatch):
        import pos_retail.cart.storage as storage

        def _missing():
            raise ValueError("UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN must be set")

        monkeypatch.setattr(storage, "get_redis", _missing)

        with pytest.raises(StorageUnavailableError):
            await RedisStore().get("k")


@pytest.mark.asyncio
async def test_session_surfaces_storage_failure(session, sample_product, fake_redis):
    fake_redis.fail = True

    with pytest.raises(StorageUnavailableError):
        await session.add_item(sample_product)


@pytest.mark.asyncio
async def test_open_surfaces_storage_failure(store, fake_redis):
    fake_redis.fail = True

    with pytest.raises(StorageUnavailableError):
        await CartSession.open("till-1", store)
