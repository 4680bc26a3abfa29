"""
Shared Dependencies for Routers

Lazy-loaded singletons and the till session header.
"""

from typing import Optional, TYPE_CHECKING

from fastapi import Header, HTTPException

if TYPE_CHECKING:
    from pos_retail.cart.storage import RedisStore
    from pos_retail.services.backend import BackendClient


_store: Optional["RedisStore"] = None
_backend: Optional["BackendClient"] = None


def get_store_lazy() -> "RedisStore":
    """Get or create RedisStore singleton (lazy loaded)"""
    global _store
    if _store is None:
        from pos_retail.cart.storage import get_store
        _store = get_store()
    return _store


def get_backend_lazy() -> "BackendClient":
    """Get or create BackendClient singleton (lazy loaded)"""
    global _backend
    if _backend is None:
        from pos_retail.services.backend import get_backend_client
        _backend = get_backend_client()
    return _backend


def get_session_id(x_pos_session: Optional[str] = Header(None)) -> str:
    """Till session id from the X-POS-Session header."""
    session_id = (x_pos_session or "").strip()
    if not session_id:
        raise HTTPException(status_code=400, detail="X-POS-Session header is required")
    return session_id
