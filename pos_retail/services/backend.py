"""
Transaction Backend Client

Async HTTP client for the POS backend:
- submit finalized transactions (never retried)
- list products, transactions and stock logs (retried on transport errors)
- create products and record restocks
"""
import os
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from pos_retail.cart.models import FinalizedTransaction
from pos_retail.errors import BackendUnavailableError
from pos_retail.logging import get_logger
from pos_retail.services.models import (
    NewProduct,
    PersistedTransaction,
    Product,
    RestockRequest,
    StockLog,
)

logger = get_logger(__name__)

POS_BACKEND_URL = os.environ.get("POS_BACKEND_URL", "http://localhost:8080")
POS_BACKEND_TIMEOUT = float(os.environ.get("POS_BACKEND_TIMEOUT", "10"))


def read_retry():
    """Retry policy for idempotent reads."""
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(httpx.TransportError),
    )


class BackendClient:
    """Client for the POS backend REST API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or POS_BACKEND_URL).rstrip("/")
        self.timeout = timeout or POS_BACKEND_TIMEOUT
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    def _get_http_client(self) -> httpx.AsyncClient:
        """Lazily create the shared httpx client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout, connect=5.0),
                headers={"Accept": "application/json"},
                transport=self._transport,
            )
        return self._http_client

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    # ==================== INTERNAL HELPERS ====================

    @staticmethod
    def _decode(response: httpx.Response) -> Dict[str, Any]:
        """Decode a JSON object body, raising BackendUnavailableError on anything else."""
        try:
            data = response.json()
        except ValueError as e:
            raise BackendUnavailableError(
                f"Invalid JSON from backend ({response.status_code})",
                status_code=response.status_code,
            ) from e

        if response.is_error:
            message = data.get("message") if isinstance(data, dict) else None
            raise BackendUnavailableError(
                message or f"HTTP {response.status_code}: {response.reason_phrase}",
                status_code=response.status_code,
            )
        if not isinstance(data, dict):
            raise BackendUnavailableError("Unexpected response shape from backend")
        return data

    @read_retry()
    async def _get(self, path: str) -> httpx.Response:
        logger.info(f"Backend GET {path}")
        return await self._get_http_client().get(path)

    async def _get_json(self, path: str) -> Dict[str, Any]:
        try:
            response = await self._get(path)
        except httpx.HTTPError as e:
            logger.error(f"Backend GET {path} failed: {e}")
            raise BackendUnavailableError(f"Failed to reach backend: {e}") from e
        return self._decode(response)

    async def _post_json(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        logger.info(f"Backend POST {path}")
        try:
            response = await self._get_http_client().post(path, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Backend POST {path} failed: {e}")
            raise BackendUnavailableError(f"Failed to reach backend: {e}") from e

        data = self._decode(response)
        if not data.get("success"):
            raise BackendUnavailableError(data.get("message") or "Request rejected by backend")
        return data

    @staticmethod
    def _parse_list(data: Dict[str, Any], key: str, model) -> List[Any]:
        try:
            return [model.model_validate(item) for item in data.get(key) or []]
        except ValidationError as e:
            logger.error(f"Malformed {key} from backend: {e}")
            raise BackendUnavailableError(f"Malformed {key} from backend") from e

    # ==================== READS ====================

    async def list_products(self) -> List[Product]:
        data = await self._get_json("/api/products")
        return self._parse_list(data, "products", Product)

    async def list_transactions(self) -> List[PersistedTransaction]:
        data = await self._get_json("/api/transactions")
        return self._parse_list(data, "transactions", PersistedTransaction)

    async def list_stock_logs(self) -> List[StockLog]:
        data = await self._get_json("/api/stock-logs")
        return self._parse_list(data, "stock_logs", StockLog)

    async def get_product(self, product_id: str) -> Optional[Product]:
        """Look a product up in the catalog listing."""
        products = await self.list_products()
        return next((p for p in products if p.id == product_id), None)

    # ==================== WRITES ====================

    async def submit_transaction(self, transaction: FinalizedTransaction) -> PersistedTransaction:
        """
        Submit a finalized transaction.

        Not retried: a failure means the sale is not committed and the
        caller decides whether to submit again.

        Raises:
            BackendUnavailableError: transport failure, bad response, or success=false
        """
        data = await self._post_json("/api/transactions", transaction.to_payload())
        try:
            return PersistedTransaction.model_validate(data.get("transaction") or {})
        except ValidationError as e:
            logger.error(f"Malformed transaction record from backend: {e}")
            raise BackendUnavailableError("Malformed transaction record from backend") from e

    async def create_product(self, product: NewProduct) -> Dict[str, Any]:
        data = await self._post_json("/api/products", product.to_payload())
        return data.get("product") or {}

    async def restock(self, request: RestockRequest) -> Dict[str, Any]:
        data = await self._post_json("/api/stock/restock", request.to_payload())
        return data.get("stock_log") or {}


_backend_client: Optional[BackendClient] = None


def get_backend_client() -> BackendClient:
    """Get BackendClient singleton."""
    global _backend_client
    if _backend_client is None:
        _backend_client = BackendClient()
    return _backend_client
