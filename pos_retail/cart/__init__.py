"""Cart package: models, storage, and session state."""
from .models import CartLine, Cart, DraftTransaction, FinalizedTransaction, TransactionLine
from .service import CartSession
from .storage import RedisStore, get_store

__all__ = [
    "CartLine",
    "Cart",
    "DraftTransaction",
    "FinalizedTransaction",
    "TransactionLine",
    "CartSession",
    "RedisStore",
    "get_store",
]
