"""
Tests for the POS backend client

Uses httpx.MockTransport so no network is touched.
"""

import json
from decimal import Decimal

import httpx
import pytest

from pos_retail.cart import CartLine, FinalizedTransaction, TransactionLine
from pos_retail.errors import BackendUnavailableError
from pos_retail.services.backend import BackendClient
from pos_retail.services.models import NewProduct, RestockRequest


def _transaction():
    line = CartLine(
        product_id="P1",
        name="Indomie Goreng",
        unit_price=Decimal("3500"),
        quantity=2,
        stock_ceiling=10,
        category="makanan",
    )
    return FinalizedTransaction(
        transaction_code="TRX250101123",
        lines=(TransactionLine.from_cart_line(line),),
        subtotal=Decimal("7000"),
        discount=Decimal("0"),
        total=Decimal("7000"),
        payment_method="cash",
        cash_received=Decimal("10000"),
        change=Decimal("3000"),
    )


def _client(handler):
    return BackendClient(base_url="http://backend.test", transport=httpx.MockTransport(handler))


class TestSubmitTransaction:

    @pytest.mark.asyncio
    async def test_success(self):
        seen = []

        def handler(request):
            seen.append(request)
            body = json.loads(request.content)
            record = {**body, "id": 42, "created_at": "2025-01-01T03:00:00"}
            return httpx.Response(201, json={"success": True, "transaction": record})

        client = _client(handler)
        record = await client.submit_transaction(_transaction())

        assert seen[0].method == "POST"
        assert seen[0].url.path == "/api/transactions"
        assert record.id == "42"
        assert record.total == Decimal("7000")
        assert record.items[0].quantity == 2
        assert record.created_at.tzinfo is not None
        await client.aclose()

    @pytest.mark.asyncio
    async def test_success_false_is_unavailable(self):
        def handler(request):
            return httpx.Response(200, json={"success": False, "message": "Stok tidak cukup"})

        with pytest.raises(BackendUnavailableError) as exc_info:
            await _client(handler).submit_transaction(_transaction())

        assert "Stok tidak cukup" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_server_error(self):
        def handler(request):
            return httpx.Response(500, json={"message": "database locked"})

        with pytest.raises(BackendUnavailableError) as exc_info:
            await _client(handler).submit_transaction(_transaction())

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "database locked"

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        def handler(request):
            return httpx.Response(200, text="<html>oops</html>")

        with pytest.raises(BackendUnavailableError):
            await _client(handler).submit_transaction(_transaction())

    @pytest.mark.asyncio
    async def test_transport_error_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(BackendUnavailableError):
            await _client(handler).submit_transaction(_transaction())

        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_malformed_record(self):
        def handler(request):
            return httpx.Response(200, json={"success": True, "transaction": {"items": "nope"}})

        with pytest.raises(BackendUnavailableError):
            await _client(handler).submit_transaction(_transaction())


class TestReads:

    @pytest.mark.asyncio
    async def test_list_products(self):
        def handler(request):
            assert request.url.path == "/api/products"
            return httpx.Response(200, json={
                "success": True,
                "products": [
                    {"id": 1, "name": "Aqua 600ml", "category": "minuman", "selling_price": "3000", "stock": 12},
                    {"id": 2, "name": "Beras 5kg", "category": "sembako", "selling_price": 65000, "stock": 0},
                ],
            })

        products = await _client(handler).list_products()

        assert [p.id for p in products] == ["1", "2"]
        assert products[0].selling_price == Decimal("3000")

    @pytest.mark.asyncio
    async def test_get_product(self):
        def handler(request):
            return httpx.Response(200, json={"products": [
                {"id": "P1", "name": "Aqua", "selling_price": 3000, "stock": 1},
            ]})

        client = _client(handler)

        assert (await client.get_product("P1")).name == "Aqua"
        assert await client.get_product("P404") is None

    @pytest.mark.asyncio
    async def test_read_retried_on_transport_error(self):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) < 3:
                raise httpx.ConnectError("connection reset", request=request)
            return httpx.Response(200, json={"transactions": []})

        assert await _client(handler).list_transactions() == []
        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_read_gives_up(self):
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(BackendUnavailableError):
            await _client(handler).list_stock_logs()

        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_malformed_list(self):
        def handler(request):
            return httpx.Response(200, json={"stock_logs": [{"quantity": "many"}]})

        with pytest.raises(BackendUnavailableError):
            await _client(handler).list_stock_logs()


class TestCatalogWrites:

    @pytest.mark.asyncio
    async def test_create_product(self):
        seen = []

        def handler(request):
            seen.append(json.loads(request.content))
            return httpx.Response(201, json={"success": True, "product": {"id": "P9", "name": "Kopi"}})

        product = NewProduct(
            code="KP01", name="Kopi", category="minuman", unit="sachet",
            purchase_price=1000, selling_price=1500,
        )
        created = await _client(handler).create_product(product)

        assert created["id"] == "P9"
        assert seen[0]["selling_price"] == 1500.0

    @pytest.mark.asyncio
    async def test_restock(self):
        seen = []

        def handler(request):
            seen.append((request.url.path, json.loads(request.content)))
            return httpx.Response(200, json={"success": True, "stock_log": {"id": "L1"}})

        log = await _client(handler).restock(RestockRequest(product_id="P1", quantity=4, price=2500))

        assert log == {"id": "L1"}
        assert seen[0][0] == "/api/stock/restock"
        assert seen[0][1]["total_cost"] == 10000.0
