"""POS API Router.

Combines the cart, report and stock sub-routers under /api/pos.
"""

from fastapi import APIRouter

from .cart import router as cart_router
from .reports import router as reports_router
from .stock import router as stock_router

router = APIRouter(prefix="/api/pos", tags=["pos"])

router.include_router(cart_router)
router.include_router(reports_router)
router.include_router(stock_router)

__all__ = ["router"]
