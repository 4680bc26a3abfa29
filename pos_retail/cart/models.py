"""Cart models with Decimal-based pricing."""
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, List, Tuple

from pos_retail.services.money import to_decimal, to_float, multiply, subtract, sum_money, ZERO

PAYMENT_METHODS = ("cash", "card", "qris", "transfer")


def generate_line_id() -> str:
    """Opaque client-side line id, e.g. ``CART3F9A1C02B7D4``."""
    return f"CART{secrets.token_hex(6)}".upper()


def generate_transaction_code(now: Optional[datetime] = None) -> str:
    """Transaction code ``TRX`` + ``yymmdd`` + three random digits."""
    now = now or datetime.now(timezone.utc)
    return f"TRX{now:%y%m%d}{secrets.randbelow(1000):03d}"


@dataclass
class CartLine:
    """One product's row in the cart."""
    product_id: str
    name: str
    unit_price: Decimal
    quantity: int
    stock_ceiling: int
    category: str = ""
    unit: str = ""
    line_id: str = ""

    def __post_init__(self):
        if not self.line_id:
            self.line_id = generate_line_id()
        self.unit_price = to_decimal(self.unit_price)
        if not 1 <= self.quantity <= self.stock_ceiling:
            raise ValueError(
                f"quantity {self.quantity} outside [1, {self.stock_ceiling}] for line {self.line_id}"
            )

    @property
    def line_total(self) -> Decimal:
        """Always ``quantity * unit_price``."""
        return multiply(self.unit_price, self.quantity)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "line_id": self.line_id,
            "product_id": self.product_id,
            "name": self.name,
            "category": self.category,
            "unit": self.unit,
            "unit_price": str(self.unit_price),
            "quantity": self.quantity,
            "stock_ceiling": self.stock_ceiling,
            # Informational only; recomputed on load
            "line_total": str(self.line_total),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CartLine":
        """Create from dictionary."""
        return cls(
            line_id=data["line_id"],
            product_id=str(data["product_id"]),
            name=data.get("name", ""),
            category=data.get("category", ""),
            unit=data.get("unit", ""),
            unit_price=to_decimal(data["unit_price"]),
            quantity=int(data["quantity"]),
            stock_ceiling=int(data["stock_ceiling"]),
        )


@dataclass
class Cart:
    """Ordered lines of the in-progress sale."""
    lines: List[CartLine] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def total_items(self) -> int:
        """Total number of units in cart."""
        return sum(line.quantity for line in self.lines)

    @property
    def subtotal(self) -> Decimal:
        return sum_money(line.line_total for line in self.lines)

    @property
    def discount(self) -> Decimal:
        # No discount rules yet
        return ZERO

    @property
    def total(self) -> Decimal:
        return subtract(self.subtotal, self.discount)

    def find_line(self, line_id: str) -> Optional[CartLine]:
        return next((line for line in self.lines if line.line_id == line_id), None)

    def find_product(self, product_id: str) -> Optional[CartLine]:
        return next((line for line in self.lines if line.product_id == product_id), None)

    def to_dict(self) -> dict:
        """Convert to dictionary for Redis storage."""
        return {"lines": [line.to_dict() for line in self.lines]}

    @classmethod
    def from_dict(cls, data: dict) -> "Cart":
        """Create from dictionary, rejecting duplicate lines."""
        lines = [CartLine.from_dict(item) for item in data.get("lines", [])]
        if len({line.line_id for line in lines}) != len(lines):
            raise ValueError("duplicate line_id in stored cart")
        if len({line.product_id for line in lines}) != len(lines):
            raise ValueError("duplicate product_id in stored cart")
        return cls(lines=lines)


@dataclass
class DraftTransaction:
    """Cart snapshot saved explicitly for later restore."""
    lines: List[CartLine]
    saved_at: str = ""

    def __post_init__(self):
        if not self.saved_at:
            self.saved_at = datetime.now(timezone.utc).isoformat()

    def to_dict(self) -> dict:
        return {
            "items": [line.to_dict() for line in self.lines],
            "saved_at": self.saved_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DraftTransaction":
        return cls(
            lines=[CartLine.from_dict(item) for item in data.get("items", [])],
            saved_at=data.get("saved_at", ""),
        )


@dataclass(frozen=True)
class TransactionLine:
    """Immutable snapshot of a cart line at payment time."""
    product_id: str
    name: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    category: str = ""

    @classmethod
    def from_cart_line(cls, line: CartLine) -> "TransactionLine":
        return cls(
            product_id=line.product_id,
            name=line.name,
            quantity=line.quantity,
            unit_price=line.unit_price,
            line_total=line.line_total,
            category=line.category,
        )


@dataclass(frozen=True)
class FinalizedTransaction:
    """Outbound transaction, submitted once and then discarded."""
    transaction_code: str
    lines: Tuple[TransactionLine, ...]
    subtotal: Decimal
    discount: Decimal
    total: Decimal
    payment_method: str
    cash_received: Decimal
    change: Decimal
    status: str = "completed"

    def to_payload(self) -> dict:
        """JSON body for ``POST /api/transactions``."""
        return {
            "transaction_code": self.transaction_code,
            "items": [
                {
                    "product_id": line.product_id,
                    "name": line.name,
                    "quantity": line.quantity,
                    "price": to_float(line.unit_price),
                    "total": to_float(line.line_total),
                    "category": line.category,
                }
                for line in self.lines
            ],
            "subtotal": to_float(self.subtotal),
            "discount": to_float(self.discount),
            "total": to_float(self.total),
            "payment_method": self.payment_method,
            "cash_received": to_float(self.cash_received),
            "change": to_float(self.change),
            "status": self.status,
        }
