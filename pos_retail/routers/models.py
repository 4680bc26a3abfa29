"""
POS API Pydantic Models

Request bodies for the cart and report endpoints.
"""
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field


# ==================== CART MODELS ====================

class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = 1


class UpdateCartItemRequest(BaseModel):
    line_id: str
    quantity: int


class LineRequest(BaseModel):
    line_id: str


class CheckoutRequest(BaseModel):
    payment_method: str = "cash"
    cash_received: Optional[Decimal] = Field(None, ge=0, allow_inf_nan=False)
