"""
POS Cart Router

Cart, checkout and draft endpoints for the till front-end.
Each request opens the session's cart from the store, applies one
operation and returns the re-rendered cart state.
"""
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query

from pos_retail.cart import CartSession
from pos_retail.errors import PosError
from pos_retail.logging import get_logger
from pos_retail.services.money import format_currency, to_float
from .deps import get_backend_lazy, get_session_id, get_store_lazy
from .models import AddToCartRequest, CheckoutRequest, LineRequest, UpdateCartItemRequest

logger = get_logger(__name__)

router = APIRouter(tags=["pos-cart"])

_STATUS_BY_CODE = {
    "OUT_OF_STOCK": 409,
    "INSUFFICIENT_STOCK": 409,
    "INVALID_QUANTITY": 400,
    "EMPTY_CART": 400,
    "INVALID_PAYMENT_METHOD": 400,
    "INSUFFICIENT_PAYMENT": 402,
    "BACKEND_UNAVAILABLE": 502,
    "STORAGE_UNAVAILABLE": 503,
}


def raise_http(error: PosError):
    """Translate a domain error into an HTTPException."""
    status = _STATUS_BY_CODE.get(error.code, 400)
    if status >= 500:
        logger.error(f"{error.code}: {error.message}")
    raise HTTPException(status_code=status, detail={"code": error.code, "message": error.message})


async def open_session(
    session_id: str = Depends(get_session_id),
    store=Depends(get_store_lazy),
    backend=Depends(get_backend_lazy),
) -> CartSession:
    try:
        return await CartSession.open(session_id, store, backend)
    except PosError as e:
        raise_http(e)


def format_cart_response(session: CartSession) -> dict:
    """Cart lines plus recomputed totals."""
    summary = session.compute_summary()
    return {
        "session_id": session.session_id,
        "items": [
            {
                "line_id": line.line_id,
                "product_id": line.product_id,
                "name": line.name,
                "category": line.category,
                "unit": line.unit,
                "quantity": line.quantity,
                "max_quantity": line.stock_ceiling,
                "unit_price": to_float(line.unit_price),
                "total": to_float(line.line_total),
                "total_display": format_currency(line.line_total),
            }
            for line in session.cart.lines
        ],
        "total_items": summary["total_items"],
        "subtotal": to_float(summary["subtotal"]),
        "discount": to_float(summary["discount"]),
        "total": to_float(summary["total"]),
        "total_display": format_currency(summary["total"]),
    }


@router.get("/cart")
async def get_cart(session: CartSession = Depends(open_session)):
    """Get the till's current cart."""
    return format_cart_response(session)


@router.get("/cart/change")
async def get_change(
    cash_received: Decimal = Query(Decimal("0"), ge=0, allow_inf_nan=False),
    session: CartSession = Depends(open_session),
):
    """Change due for a cash amount (negative ``signed_change`` means short)."""
    try:
        display, signed = session.compute_change(cash_received)
    except PosError as e:
        raise_http(e)
    return {
        "change": to_float(display),
        "signed_change": to_float(signed),
        "change_display": format_currency(display),
        "sufficient": signed >= 0,
    }


@router.post("/cart/add")
async def add_to_cart(request: AddToCartRequest, session: CartSession = Depends(open_session)):
    """Add a catalog product (or one more unit of it) to the cart."""
    try:
        product = await session.backend.get_product(request.product_id)
        if not product:
            raise HTTPException(status_code=404, detail="Product not found")
        await session.add_item(product, request.quantity)
    except PosError as e:
        raise_http(e)
    return format_cart_response(session)


@router.patch("/cart/item")
async def update_cart_item(request: UpdateCartItemRequest, session: CartSession = Depends(open_session)):
    """Set a line's quantity."""
    try:
        await session.set_quantity(request.line_id, request.quantity)
    except PosError as e:
        raise_http(e)
    return format_cart_response(session)


@router.post("/cart/item/increment")
async def increment_cart_item(request: LineRequest, session: CartSession = Depends(open_session)):
    try:
        await session.increment(request.line_id)
    except PosError as e:
        raise_http(e)
    return format_cart_response(session)


@router.post("/cart/item/decrement")
async def decrement_cart_item(request: LineRequest, session: CartSession = Depends(open_session)):
    try:
        await session.decrement(request.line_id)
    except PosError as e:
        raise_http(e)
    return format_cart_response(session)


@router.delete("/cart/item")
async def remove_cart_item(line_id: str, session: CartSession = Depends(open_session)):
    try:
        await session.remove_line(line_id)
    except PosError as e:
        raise_http(e)
    return format_cart_response(session)


@router.post("/cart/clear")
async def clear_cart(session: CartSession = Depends(open_session)):
    try:
        await session.clear()
    except PosError as e:
        raise_http(e)
    return format_cart_response(session)


@router.post("/cart/checkout")
async def checkout(request: CheckoutRequest, session: CartSession = Depends(open_session)):
    """Submit the cart as a transaction; the cart is cleared only on success."""
    try:
        record = await session.checkout(request.payment_method, request.cash_received)
    except PosError as e:
        raise_http(e)
    return {"success": True, "transaction": record.model_dump(mode="json")}


@router.get("/cart/last-transaction")
async def get_last_transaction(session: CartSession = Depends(open_session)):
    """Last committed transaction, for receipt reprint."""
    try:
        record = await session.last_transaction()
    except PosError as e:
        raise_http(e)
    if record is None:
        raise HTTPException(status_code=404, detail="No receipt available")
    return record.model_dump(mode="json")


# ==================== DRAFTS ====================

@router.post("/cart/draft")
async def save_draft(session: CartSession = Depends(open_session)):
    try:
        draft = await session.save_draft()
    except PosError as e:
        raise_http(e)
    return {"saved_at": draft.saved_at, "items": len(draft.lines)}


@router.post("/cart/draft/restore")
async def restore_draft(session: CartSession = Depends(open_session)):
    try:
        draft = await session.restore_draft()
    except PosError as e:
        raise_http(e)
    if draft is None:
        raise HTTPException(status_code=404, detail="No draft saved")
    return format_cart_response(session)


@router.delete("/cart/draft")
async def discard_draft(session: CartSession = Depends(open_session)):
    try:
        await session.discard_draft()
    except PosError as e:
        raise_http(e)
    return {"success": True}
