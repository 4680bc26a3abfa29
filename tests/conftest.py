"""Pytest configuration and fixtures"""
import os
from decimal import Decimal
from typing import Dict, Optional

import pytest

# Set test environment variables
os.environ.setdefault("UPSTASH_REDIS_REST_URL", "https://test.upstash.io")
os.environ.setdefault("UPSTASH_REDIS_REST_TOKEN", "test_token")
os.environ.setdefault("POS_BACKEND_URL", "http://backend.test")

from pos_retail.cart import CartSession, RedisStore
from pos_retail.services.models import Product


class FakeRedis:
    """In-memory stand-in for the async Upstash client."""

    def __init__(self):
        self.data: Dict[str, str] = {}
        self.expiries: Dict[str, Optional[int]] = {}
        self.fail = False

    def _check(self):
        if self.fail:
            raise ConnectionError("redis down")

    async def get(self, key):
        self._check()
        return self.data.get(key)

    async def set(self, key, value, ex=None):
        self._check()
        self.data[key] = value
        self.expiries[key] = ex
        return "OK"

    async def delete(self, *keys):
        self._check()
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
        return removed


class FakeBackend:
    """Records submissions; returns a committed record or a configured error."""

    def __init__(self, products=None):
        self.products = list(products or [])
        self.submitted = []
        self.error: Optional[Exception] = None

    async def get_product(self, product_id):
        return next((p for p in self.products if p.id == product_id), None)

    async def submit_transaction(self, transaction):
        from pos_retail.services.models import PersistedTransaction

        self.submitted.append(transaction)
        if self.error:
            raise self.error
        payload = transaction.to_payload()
        payload["id"] = f"tx-{len(self.submitted)}"
        payload["created_at"] = "2025-01-01T10:00:00Z"
        return PersistedTransaction.model_validate(payload)


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def store(fake_redis):
    return RedisStore(redis=fake_redis)


@pytest.fixture
def make_product():
    """Factory for catalog products."""
    def _make(id="P1", name="Indomie Goreng", stock=5, selling_price=10000, category="makanan", **extra):
        return Product(
            id=id,
            name=name,
            category=category,
            unit=extra.pop("unit", "pcs"),
            selling_price=Decimal(str(selling_price)),
            stock=stock,
            **extra,
        )
    return _make


@pytest.fixture
def sample_product(make_product):
    return make_product()


@pytest.fixture
def backend(sample_product):
    return FakeBackend(products=[sample_product])


@pytest.fixture
def session(store, backend):
    return CartSession("till-1", store, backend)
