"""
Common Errors

User-facing messages are kept as constants so routers and tests
match on a single source of text. Every error carries a stable
``code`` for API responses.
"""

# Stock errors
ERROR_OUT_OF_STOCK = "Product out of stock"
ERROR_INSUFFICIENT_STOCK = "Insufficient stock"
ERROR_INVALID_QUANTITY = "Quantity must be between 1 and available stock"

# Checkout errors
ERROR_EMPTY_CART = "Cart is empty"
ERROR_INSUFFICIENT_PAYMENT = "Cash received is less than the total"
ERROR_INVALID_PAYMENT_METHOD = "Unsupported payment method"

# Infrastructure errors
ERROR_BACKEND_UNAVAILABLE = "Transaction backend unavailable"
ERROR_STORAGE_UNAVAILABLE = "Cart storage unavailable"


class PosError(Exception):
    """Base error for recoverable point-of-sale conditions."""

    code = "POS_ERROR"

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code:
            self.code = code


class OutOfStockError(PosError):
    """Product has no stock left."""

    code = "OUT_OF_STOCK"

    def __init__(self, product_name: str | None = None) -> None:
        message = f"{ERROR_OUT_OF_STOCK}: {product_name}" if product_name else ERROR_OUT_OF_STOCK
        super().__init__(message)
        self.product_name = product_name


class InsufficientStockError(PosError):
    """Requested quantity would exceed the line's stock ceiling."""

    code = "INSUFFICIENT_STOCK"

    def __init__(self, available: int, requested: int) -> None:
        super().__init__(f"{ERROR_INSUFFICIENT_STOCK}: requested {requested}, available {available}")
        self.available = available
        self.requested = requested


class InvalidQuantityError(PosError):
    """Quantity outside ``[1, stock_ceiling]``."""

    code = "INVALID_QUANTITY"

    def __init__(self, quantity, maximum: int | None = None) -> None:
        if maximum is not None:
            message = f"Quantity must be between 1 and {maximum}, got {quantity}"
        else:
            message = f"{ERROR_INVALID_QUANTITY}, got {quantity}"
        super().__init__(message)
        self.quantity = quantity
        self.maximum = maximum


class EmptyCartError(PosError):
    code = "EMPTY_CART"

    def __init__(self, message: str = ERROR_EMPTY_CART) -> None:
        super().__init__(message)


class InsufficientPaymentError(PosError):
    """Cash received does not cover the total."""

    code = "INSUFFICIENT_PAYMENT"

    def __init__(self, total, cash_received) -> None:
        super().__init__(f"{ERROR_INSUFFICIENT_PAYMENT}: total {total}, received {cash_received}")
        self.total = total
        self.cash_received = cash_received


class InvalidPaymentMethodError(PosError):
    code = "INVALID_PAYMENT_METHOD"

    def __init__(self, method: str) -> None:
        super().__init__(f"{ERROR_INVALID_PAYMENT_METHOD}: {method}")
        self.method = method


class BackendUnavailableError(PosError):
    """Transport, decoding or rejection failure from the transaction backend."""

    code = "BACKEND_UNAVAILABLE"

    def __init__(self, message: str = ERROR_BACKEND_UNAVAILABLE, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class StorageUnavailableError(PosError):
    code = "STORAGE_UNAVAILABLE"

    def __init__(self, message: str = ERROR_STORAGE_UNAVAILABLE) -> None:
        super().__init__(message)
