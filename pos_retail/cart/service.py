"""Cart session: the live cart of one till, persisted to the store after each mutation."""
from decimal import Decimal
from typing import Optional, Tuple, TYPE_CHECKING

from pos_retail.errors import (
    EmptyCartError,
    InsufficientPaymentError,
    InsufficientStockError,
    InvalidPaymentMethodError,
    InvalidQuantityError,
    OutOfStockError,
    StorageUnavailableError,
)
from pos_retail.logging import get_session_logger
from pos_retail.services.money import to_decimal, subtract, ZERO
from .models import (
    PAYMENT_METHODS,
    Cart,
    CartLine,
    DraftTransaction,
    FinalizedTransaction,
    TransactionLine,
    generate_transaction_code,
)
from .storage import RedisKeys, RedisStore

if TYPE_CHECKING:
    from pos_retail.services.backend import BackendClient
    from pos_retail.services.models import PersistedTransaction, Product


def _is_quantity(value) -> bool:
    # bool is an int subclass but never a quantity
    return isinstance(value, int) and not isinstance(value, bool)


def _cash_amount(cash_received, total: Decimal) -> Decimal:
    """Cash received as a finite Decimal; NaN and infinities are rejected."""
    cash = to_decimal(cash_received)
    if not cash.is_finite():
        raise InsufficientPaymentError(total, cash_received)
    return cash


class CartSession:
    """
    Session-scoped cart state.

    Lifecycle:
    - ``open`` restores the cart from the store (empty if absent)
    - add/increment/decrement/set_quantity/remove_line/clear mutate and persist
    - ``finalize`` builds a FinalizedTransaction without touching the cart
    - ``checkout`` submits it and clears the cart only once the backend commits

    Quantity increases past the stock ceiling are rejected, never clamped.

    Usage:
        session = await CartSession.open("till-1", store, backend)
        await session.add_item(product)
        record = await session.checkout("cash", Decimal("50000"))
    """

    def __init__(
        self,
        session_id: str,
        store: RedisStore,
        backend: Optional["BackendClient"] = None,
        cart: Optional[Cart] = None,
    ):
        self.session_id = session_id
        self.store = store
        self.backend = backend
        self.cart = cart if cart is not None else Cart()
        self.log = get_session_logger(__name__, session_id)

    @property
    def cart_key(self) -> str:
        return RedisKeys.cart_key(self.session_id)

    @property
    def draft_key(self) -> str:
        return RedisKeys.draft_key(self.session_id)

    @property
    def last_transaction_key(self) -> str:
        return RedisKeys.last_transaction_key(self.session_id)

    # ==================== LIFECYCLE ====================

    @classmethod
    async def open(
        cls,
        session_id: str,
        store: RedisStore,
        backend: Optional["BackendClient"] = None,
    ) -> "CartSession":
        """Restore the session's cart from the store."""
        session = cls(session_id, store, backend)
        data = await store.get(session.cart_key)
        if data:
            try:
                session.cart = Cart.from_dict(data)
            except (KeyError, TypeError, ValueError) as e:
                session.log.warning(f"Corrupted cart dropped: {e}")
                await store.delete(session.cart_key)
        return session

    async def _persist(self) -> None:
        await self.store.put(self.cart_key, self.cart.to_dict())

    # ==================== COMMANDS ====================

    async def add_item(self, product: "Product", requested_qty: int = 1) -> CartLine:
        """
        Add a product, or raise the quantity of its existing line.

        Raises:
            OutOfStockError: product.stock <= 0
            InvalidQuantityError: requested_qty < 1
            InsufficientStockError: resulting quantity would exceed the stock ceiling
        """
        if product.stock <= 0:
            raise OutOfStockError(product.name)
        if not _is_quantity(requested_qty) or requested_qty < 1:
            raise InvalidQuantityError(requested_qty)

        line = self.cart.find_product(product.id)

        if line:
            new_qty = line.quantity + requested_qty
            if new_qty > line.stock_ceiling:
                raise InsufficientStockError(line.stock_ceiling, new_qty)
            line.quantity = new_qty
        else:
            if requested_qty > product.stock:
                raise InsufficientStockError(product.stock, requested_qty)
            line = CartLine(
                product_id=product.id,
                name=product.name,
                category=product.category,
                unit=product.unit,
                unit_price=product.selling_price,
                quantity=requested_qty,
                stock_ceiling=product.stock,
            )
            self.cart.lines.append(line)

        self.log.info(f"{product.id} x{line.quantity}")
        await self._persist()
        return line

    async def increment(self, line_id: str) -> Optional[CartLine]:
        line = self.cart.find_line(line_id)
        if line is None:
            return None
        if line.quantity >= line.stock_ceiling:
            raise InsufficientStockError(line.stock_ceiling, line.quantity + 1)
        line.quantity += 1
        await self._persist()
        return line

    async def decrement(self, line_id: str) -> Optional[CartLine]:
        """Lower quantity by one; a line at 1 stays at 1 (use remove_line)."""
        line = self.cart.find_line(line_id)
        if line is None:
            return None
        if line.quantity > 1:
            line.quantity -= 1
            await self._persist()
        return line

    async def set_quantity(self, line_id: str, new_qty: int) -> Optional[CartLine]:
        """
        Set a line's quantity.

        Raises:
            InvalidQuantityError: new_qty outside [1, stock_ceiling]; line unchanged
        """
        line = self.cart.find_line(line_id)
        if line is None:
            return None
        if not _is_quantity(new_qty) or not 1 <= new_qty <= line.stock_ceiling:
            raise InvalidQuantityError(new_qty, line.stock_ceiling)
        line.quantity = new_qty
        await self._persist()
        return line

    async def remove_line(self, line_id: str) -> None:
        if self.cart.find_line(line_id) is None:
            return
        self.cart.lines = [line for line in self.cart.lines if line.line_id != line_id]
        self.log.info(f"removed line {line_id}")
        await self._persist()

    async def clear(self) -> None:
        if self.cart.is_empty:
            return
        self.cart.lines = []
        await self._persist()

    # ==================== QUERIES ====================

    def compute_summary(self) -> dict:
        return {
            "subtotal": self.cart.subtotal,
            "discount": self.cart.discount,
            "total": self.cart.total,
            "total_items": self.cart.total_items,
        }

    def compute_change(self, cash_received) -> Tuple[Decimal, Decimal]:
        """
        Return ``(display_change, signed_change)``; display never goes below zero.

        Raises:
            InsufficientPaymentError: cash_received is NaN or infinite
        """
        signed = subtract(_cash_amount(cash_received, self.cart.total), self.cart.total)
        return max(signed, ZERO), signed

    def finalize(self, payment_method: str, cash_received=None) -> FinalizedTransaction:
        """
        Build the outbound transaction from the current cart.

        Pure read: the cart is left as is and the backend is not contacted.

        Raises:
            EmptyCartError: no lines
            InvalidPaymentMethodError: method not supported
            InsufficientPaymentError: cash payment below total, or cash not finite
        """
        if self.cart.is_empty:
            raise EmptyCartError()

        method = (payment_method or "").lower()
        if method not in PAYMENT_METHODS:
            raise InvalidPaymentMethodError(payment_method)

        cash = _cash_amount(cash_received, self.cart.total)
        total = self.cart.total

        if method == "cash":
            if cash < total:
                raise InsufficientPaymentError(total, cash)
            change = subtract(cash, total)
        else:
            change = ZERO

        return FinalizedTransaction(
            transaction_code=generate_transaction_code(),
            lines=tuple(TransactionLine.from_cart_line(line) for line in self.cart.lines),
            subtotal=self.cart.subtotal,
            discount=self.cart.discount,
            total=total,
            payment_method=method,
            cash_received=cash,
            change=change,
        )

    async def checkout(self, payment_method: str, cash_received=None) -> "PersistedTransaction":
        """
        Finalize, submit, and clear the cart once the backend commits.

        Any BackendUnavailableError propagates with the cart untouched.
        Once the backend has committed, the sale stands: a store failure
        while clearing is logged and the record is still returned.
        """
        transaction = self.finalize(payment_method, cash_received)
        if self.backend is None:
            from pos_retail.services.backend import get_backend_client
            self.backend = get_backend_client()

        record = await self.backend.submit_transaction(transaction)
        self.cart.lines = []
        self.log.info(f"committed {record.transaction_code} total {transaction.total}")

        try:
            await self._persist()
        except StorageUnavailableError as e:
            self.log.error(f"Cart not cleared in store after {record.transaction_code}: {e.message}")
            try:
                await self.store.delete(self.cart_key)
            except StorageUnavailableError as e:
                self.log.error(f"Stale cart left in store after {record.transaction_code}: {e.message}")

        try:
            await self.store.put(self.last_transaction_key, record.model_dump(mode="json"))
        except StorageUnavailableError as e:
            self.log.error(f"Receipt for {record.transaction_code} not stored: {e.message}")

        return record

    # ==================== DRAFTS ====================

    async def save_draft(self) -> DraftTransaction:
        if self.cart.is_empty:
            raise EmptyCartError("No items to save as draft")
        # Copies, so later cart edits do not reach the draft
        draft = DraftTransaction(lines=[CartLine.from_dict(line.to_dict()) for line in self.cart.lines])
        await self.store.put(self.draft_key, draft.to_dict())
        return draft

    async def restore_draft(self) -> Optional[DraftTransaction]:
        """Replace the live cart with the saved draft; the draft is kept."""
        data = await self.store.get(self.draft_key)
        if not data:
            return None
        try:
            draft = DraftTransaction.from_dict(data)
            cart = Cart.from_dict({"lines": [line.to_dict() for line in draft.lines]})
        except (KeyError, TypeError, ValueError) as e:
            self.log.warning(f"Corrupted draft dropped: {e}")
            await self.store.delete(self.draft_key)
            return None
        self.cart = cart
        await self._persist()
        return draft

    async def discard_draft(self) -> None:
        await self.store.delete(self.draft_key)

    async def last_transaction(self) -> Optional["PersistedTransaction"]:
        from pos_retail.services.models import PersistedTransaction

        data = await self.store.get(self.last_transaction_key)
        if not data:
            return None
        return PersistedTransaction.model_validate(data)
