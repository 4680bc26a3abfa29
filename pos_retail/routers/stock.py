"""
POS Stock Router

Catalog search, stock status, restock history and product/restock submissions.
"""
from typing import Optional

from fastapi import APIRouter, Depends

from pos_retail.errors import PosError
from pos_retail.services import reports
from pos_retail.services.models import NewProduct, RestockRequest
from .cart import raise_http
from .deps import get_backend_lazy

router = APIRouter(tags=["pos-stock"])


@router.get("/products")
async def list_products(
    category: Optional[str] = None,
    stock_filter: Optional[str] = None,
    q: Optional[str] = None,
    backend=Depends(get_backend_lazy),
):
    """Catalog with stock status, filtered for the till search and restock screens."""
    try:
        products = await backend.list_products()
    except PosError as e:
        raise_http(e)

    selected = reports.filter_products(products, category, stock_filter)
    if q:
        selected = reports.search_products(selected, q)

    return [
        {**p.model_dump(mode="json"), "status": reports.stock_status(p)}
        for p in selected
    ]


@router.post("/products", status_code=201)
async def create_product(request: NewProduct, backend=Depends(get_backend_lazy)):
    try:
        product = await backend.create_product(request)
    except PosError as e:
        raise_http(e)
    return {"success": True, "product": product}


@router.get("/stock/logs")
async def list_stock_logs(limit: int = 10, backend=Depends(get_backend_lazy)):
    """Most recent restocks first."""
    try:
        logs = await backend.list_stock_logs()
    except PosError as e:
        raise_http(e)
    return [log.model_dump(mode="json") for log in reports.recent(logs, limit)]


@router.post("/stock/restock")
async def restock(request: RestockRequest, backend=Depends(get_backend_lazy)):
    try:
        stock_log = await backend.restock(request)
    except PosError as e:
        raise_http(e)
    return {"success": True, "stock_log": stock_log}
