"""Backend Models - Pydantic models for records exchanged with the POS backend."""
from decimal import Decimal
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from pos_retail.services.money import to_decimal as _to_decimal, multiply, to_float


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # Backend timestamps are UTC; naive values are read as UTC
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Product(BaseModel):
    """Catalog product."""
    id: str
    code: Optional[str] = None
    name: str
    category: str = ""
    unit: str = "pcs"
    purchase_price: Decimal = Decimal("0")
    selling_price: Decimal
    stock: int = 0
    min_stock: int = 5
    barcode: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        extra = "ignore"

    @field_validator("id", mode="before")
    @classmethod
    def convert_id(cls, v):
        return str(v)

    @field_validator("purchase_price", "selling_price", mode="before")
    @classmethod
    def convert_to_decimal(cls, v):
        return _to_decimal(v)

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, v):
        return _as_utc(v)


class TransactionItem(BaseModel):
    """Line of a persisted transaction."""
    product_id: str
    name: str = ""
    quantity: int
    price: Decimal = Decimal("0")
    total: Decimal = Decimal("0")
    category: str = ""

    class Config:
        extra = "ignore"

    @field_validator("product_id", mode="before")
    @classmethod
    def convert_id(cls, v):
        return str(v)

    @field_validator("price", "total", mode="before")
    @classmethod
    def convert_to_decimal(cls, v):
        return _to_decimal(v)


class PersistedTransaction(BaseModel):
    """Transaction record as stored by the backend (with server-assigned fields)."""
    id: Optional[str] = None
    transaction_code: str
    items: List[TransactionItem] = Field(default_factory=list)
    subtotal: Decimal = Decimal("0")
    discount: Decimal = Decimal("0")
    total: Decimal = Decimal("0")
    payment_method: str = "cash"
    cash_received: Decimal = Decimal("0")
    change: Decimal = Decimal("0")
    status: str = "completed"
    created_at: Optional[datetime] = None

    class Config:
        extra = "ignore"

    @field_validator("id", mode="before")
    @classmethod
    def convert_id(cls, v):
        return None if v is None else str(v)

    @field_validator("subtotal", "discount", "total", "cash_received", "change", mode="before")
    @classmethod
    def convert_to_decimal(cls, v):
        return _to_decimal(v)

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, v):
        return _as_utc(v)


class StockLog(BaseModel):
    """Restock history entry."""
    id: Optional[str] = None
    product_id: str
    quantity: int
    price: Decimal = Decimal("0")
    total_cost: Decimal = Decimal("0")
    supplier: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        extra = "ignore"

    @field_validator("id", "product_id", mode="before")
    @classmethod
    def convert_id(cls, v):
        return None if v is None else str(v)

    @field_validator("price", "total_cost", mode="before")
    @classmethod
    def convert_to_decimal(cls, v):
        return _to_decimal(v)

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, v):
        return _as_utc(v)


class NewProduct(BaseModel):
    """Product submission from the add-product form."""
    code: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    unit: str = Field(..., min_length=1)
    purchase_price: Decimal = Field(..., ge=0)
    selling_price: Decimal = Field(..., ge=0)
    stock: int = Field(0, ge=0)
    min_stock: int = Field(5, ge=0)
    barcode: Optional[str] = None
    description: Optional[str] = None

    @field_validator("code", "name", "category", "unit", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("barcode", "description", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str):
            v = v.strip()
        return v or None

    @model_validator(mode="after")
    def check_margin(self):
        if self.selling_price < self.purchase_price:
            raise ValueError("selling_price must not be lower than purchase_price")
        return self

    def to_payload(self) -> dict:
        payload = self.model_dump()
        payload["purchase_price"] = to_float(self.purchase_price)
        payload["selling_price"] = to_float(self.selling_price)
        return payload


class RestockRequest(BaseModel):
    """Manual restock of a single product."""
    product_id: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)
    price: Decimal = Field(..., ge=0)
    supplier: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("supplier", "notes", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str):
            v = v.strip()
        return v or None

    @property
    def total_cost(self) -> Decimal:
        return multiply(self.price, self.quantity)

    def to_payload(self) -> dict:
        return {
            "product_id": self.product_id,
            "quantity": self.quantity,
            "price": to_float(self.price),
            "supplier": self.supplier,
            "notes": self.notes,
            "total_cost": to_float(self.total_cost),
        }
