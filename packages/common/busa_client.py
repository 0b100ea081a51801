"""
Business API client - async access to the remote PHP/JSON backend

Every resource is served by a handful of PHP scripts (get_sales.php,
save_invoice.php, delete_product.php, ...). Responses are usually wrapped
as {"success": bool, "data": ..., "message": str}, but some scripts return
a bare list, a bare record, or the record under a resource-specific key.

No retries: a failed call raises BusaApiError and the caller decides what
to tell the user.
"""
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Type, Union

import httpx
import structlog
from prometheus_client import Counter
from pydantic import BaseModel, ValidationError

from packages.common.config import get_settings
from packages.common.schemas.records import (
    ApiEnvelope,
    ApiRecord,
    CreditNote,
    Invoice,
    LedgerAccount,
    Product,
    ProductStockAdjustmentLog,
    PurchaseOrder,
    RawMaterial,
    RawMaterialUsageLog,
    Receipt,
    Sale,
)

logger = structlog.get_logger()

UPSTREAM_REQUESTS = Counter(
    "busa_api_requests_total",
    "Calls made to the business API",
    ["resource", "operation", "outcome"],
)


class Resource(str, Enum):
    SALES = "sales"
    INVOICES = "invoices"
    RECEIPTS = "receipts"
    CREDIT_NOTES = "credit_notes"
    LEDGER_ACCOUNTS = "ledger_accounts"
    PRODUCTS = "products"
    RAW_MATERIALS = "raw_materials"
    USAGE_LOGS = "usage_logs"
    PURCHASE_ORDERS = "purchase_orders"
    STOCK_ADJUSTMENTS = "stock_adjustments"


@dataclass(frozen=True)
class Endpoints:
    """PHP scripts serving one resource; None where the backend has no script"""
    model: Type[ApiRecord]
    list: Optional[str] = None
    get: Optional[str] = None
    create: Optional[str] = None
    update: Optional[str] = None
    delete: Optional[str] = None
    # Some detail scripts answer {"success": true, "<key>": {...}} instead of "data"
    detail_key: Optional[str] = None


RESOURCES: Dict[Resource, Endpoints] = {
    Resource.SALES: Endpoints(
        Sale,
        list="get_sales.php",
        get="get_sale_details.php",
        create="save_sale_and_invoice.php",
        update="update_sale.php",
        detail_key="sale",
    ),
    Resource.INVOICES: Endpoints(
        Invoice,
        list="get_invoices.php",
        get="get_invoice.php",
        create="save_invoice.php",
        delete="delete_invoice.php",
        detail_key="invoice",
    ),
    Resource.RECEIPTS: Endpoints(
        Receipt,
        list="get_receipts.php",
        get="get_receipt.php",
        create="save_receipt.php",
        update="update_receipt.php",
        delete="delete_receipt.php",
        detail_key="receipt",
    ),
    Resource.CREDIT_NOTES: Endpoints(
        CreditNote,
        list="get_credit_notes.php",
        get="get_credit_note.php",
        create="save_credit_note.php",
        delete="delete_credit_note.php",
        detail_key="creditNote",
    ),
    Resource.LEDGER_ACCOUNTS: Endpoints(
        LedgerAccount,
        list="getLedgerAccounts.php",
        get="get_ledger_account_detail.php",
        create="save_ledger_account.php",
        update="save_ledger_account.php",
        delete="delete_ledger_account.php",
        detail_key="account",
    ),
    Resource.PRODUCTS: Endpoints(
        Product,
        list="get_products.php",
        get="get_product.php",
        create="save_product.php",
        delete="delete_product.php",
        detail_key="product",
    ),
    Resource.RAW_MATERIALS: Endpoints(
        RawMaterial,
        list="get_raw_materials.php",
        get="get_raw_material.php",
        create="save_raw_material.php",
        update="update_raw_material.php",
        delete="delete_raw_material.php",
        detail_key="rawMaterial",
    ),
    Resource.USAGE_LOGS: Endpoints(
        RawMaterialUsageLog,
        list="get_material_usage_logs.php",
        create="save_material_usage.php",
    ),
    Resource.PURCHASE_ORDERS: Endpoints(
        PurchaseOrder,
        list="get_purchase_orders.php",
        get="get_purchase_order.php",
        create="save_purchase_order.php",
        update="update_purchase_order.php",
        delete="delete_purchase_order.php",
        detail_key="purchaseOrder",
    ),
    Resource.STOCK_ADJUSTMENTS: Endpoints(
        ProductStockAdjustmentLog,
        list="get_product_stock_logs.php",
        get="get_product_stock_log_detail.php",
        create="save_product_stock_log_batch.php",
        detail_key="log",
    ),
}

PRODUCT_STOCK_UPDATE = "update_product_stock.php"


class BusaApiError(Exception):
    """The business API could not be reached or rejected the request"""

    def __init__(
        self,
        message: str,
        resource: Optional[str] = None,
        operation: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.resource = resource
        self.operation = operation
        self.status_code = status_code


Payload = Union[ApiRecord, Dict[str, Any]]


def _serialize(record: Payload) -> Dict[str, Any]:
    if isinstance(record, BaseModel):
        return record.model_dump(by_alias=True, mode="json", exclude_none=True)
    return dict(record)


class BusaApiClient:
    """
    Async client for the business API.

    Use as an async context manager, or call aclose() when done.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        client_kwargs: Dict[str, Any] = {
            "base_url": base_url or settings.busa_api_base_url,
            "headers": {"Accept": "application/json"},
        }
        timeout = timeout if timeout is not None else settings.busa_api_timeout_seconds
        if timeout is not None:
            client_kwargs["timeout"] = timeout
        if transport is not None:
            client_kwargs["transport"] = transport

        self._client = httpx.AsyncClient(**client_kwargs)

    async def __aenter__(self) -> "BusaApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    @staticmethod
    def endpoints(resource: Resource) -> Endpoints:
        return RESOURCES[Resource(resource)]

    def _script(self, resource: Resource, operation: str) -> str:
        script = getattr(self.endpoints(resource), operation)
        if not script:
            raise BusaApiError(
                f"{resource.value} does not support {operation}",
                resource=resource.value,
                operation=operation,
            )
        return script

    async def _request(
        self,
        resource: Resource,
        operation: str,
        method: str,
        script: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Send one request and return the unwrapped payload data."""
        log = logger.bind(resource=resource.value, operation=operation, script=script)

        try:
            response = await self._client.request(method, script, params=params, json=json)
        except httpx.TimeoutException as e:
            UPSTREAM_REQUESTS.labels(resource.value, operation, "timeout").inc()
            log.warning("busa_api_timeout")
            raise BusaApiError(
                f"Timed out calling {script}", resource=resource.value, operation=operation
            ) from e
        except httpx.HTTPError as e:
            UPSTREAM_REQUESTS.labels(resource.value, operation, "transport_error").inc()
            log.error("busa_api_transport_error", error=str(e))
            raise BusaApiError(
                f"Could not reach business API: {e}", resource=resource.value, operation=operation
            ) from e

        if not response.is_success:
            UPSTREAM_REQUESTS.labels(resource.value, operation, "http_error").inc()
            log.warning("busa_api_http_error",
                        status_code=response.status_code,
                        body=response.text[:200])
            raise BusaApiError(
                f"{script} failed: {response.status_code}",
                resource=resource.value,
                operation=operation,
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            UPSTREAM_REQUESTS.labels(resource.value, operation, "bad_payload").inc()
            log.warning("busa_api_non_json_response", body=response.text[:200])
            raise BusaApiError(
                f"{script} returned a non-JSON response",
                resource=resource.value,
                operation=operation,
                status_code=response.status_code,
            ) from e

        try:
            data = self._unwrap(payload, self.endpoints(resource).detail_key)
        except BusaApiError as e:
            UPSTREAM_REQUESTS.labels(resource.value, operation, "rejected").inc()
            log.warning("busa_api_rejected", message=e.message)
            e.resource = resource.value
            e.operation = operation
            e.status_code = response.status_code
            raise

        UPSTREAM_REQUESTS.labels(resource.value, operation, "success").inc()
        log.debug("busa_api_call_succeeded", status_code=response.status_code)
        return data

    @staticmethod
    def _unwrap(payload: Any, detail_key: Optional[str] = None) -> Any:
        """Extract the data part of a response, raising when the API reports failure."""
        if isinstance(payload, list):
            return payload

        if not isinstance(payload, dict):
            raise BusaApiError("Unexpected data format.")

        if "success" not in payload:
            if payload.get("error"):
                raise BusaApiError(str(payload["error"]))
            # Bare record
            return payload

        envelope = ApiEnvelope.model_validate(payload)
        if not envelope.success:
            raise BusaApiError(envelope.detail or "Request failed.")

        if envelope.data is not None:
            return envelope.data
        if detail_key and payload.get(detail_key) is not None:
            return payload[detail_key]
        return None

    def _validate_many(self, resource: Resource, items: List[Any]) -> List[ApiRecord]:
        """Validate list items one by one; invalid ones are logged and dropped."""
        model = self.endpoints(resource).model
        records = []
        for index, item in enumerate(items):
            try:
                records.append(model.model_validate(item))
            except ValidationError as e:
                logger.warning("invalid_record_skipped",
                               resource=resource.value,
                               index=index,
                               record_id=item.get("id") if isinstance(item, dict) else None,
                               error_count=e.error_count(),
                               errors=[err["msg"] for err in e.errors()][:5])
        return records

    # === Operations ===

    async def list(self, resource: Resource) -> List[ApiRecord]:
        """Fetch every record of a resource."""
        resource = Resource(resource)
        data = await self._request(resource, "list", "GET", self._script(resource, "list"))

        if data is None:
            return []
        if not isinstance(data, list):
            raise BusaApiError(
                "Unexpected data format.", resource=resource.value, operation="list"
            )

        records = self._validate_many(resource, data)
        logger.info("busa_records_fetched",
                    resource=resource.value,
                    received=len(data),
                    valid=len(records))
        return records

    async def get(self, resource: Resource, record_id: str) -> ApiRecord:
        """Fetch one record by id."""
        resource = Resource(resource)
        data = await self._request(
            resource, "get", "GET", self._script(resource, "get"), params={"id": record_id}
        )
        if not isinstance(data, dict):
            raise BusaApiError(
                f"{resource.value} {record_id} not found", resource=resource.value, operation="get"
            )
        try:
            return self.endpoints(resource).model.model_validate(data)
        except ValidationError as e:
            logger.warning("invalid_record", resource=resource.value, record_id=record_id,
                           error_count=e.error_count())
            raise BusaApiError(
                f"{resource.value} {record_id} is malformed", resource=resource.value, operation="get"
            ) from e

    async def create(self, resource: Resource, record: Payload) -> Any:
        """Create a record; returns whatever the API sends back (often the new id)."""
        resource = Resource(resource)
        data = await self._request(
            resource, "create", "POST", self._script(resource, "create"), json=_serialize(record)
        )
        logger.info("busa_record_created", resource=resource.value)
        return data

    async def update(self, resource: Resource, record: Payload) -> Any:
        resource = Resource(resource)
        data = await self._request(
            resource, "update", "POST", self._script(resource, "update"), json=_serialize(record)
        )
        logger.info("busa_record_updated", resource=resource.value)
        return data

    async def delete(self, resource: Resource, record_id: str) -> None:
        resource = Resource(resource)
        await self._request(
            resource, "delete", "POST", self._script(resource, "delete"), json={"id": record_id}
        )
        logger.info("busa_record_deleted", resource=resource.value, record_id=record_id)

    async def add_product_stock(self, product_id: str, quantity_to_add: Union[int, float, Decimal]) -> Any:
        """Increase a product's stock level."""
        if isinstance(quantity_to_add, Decimal):
            quantity_to_add = float(quantity_to_add)
        data = await self._request(
            Resource.PRODUCTS,
            "add_stock",
            "POST",
            PRODUCT_STOCK_UPDATE,
            json={"productId": product_id, "quantityToAdd": quantity_to_add},
        )
        logger.info("product_stock_added", product_id=product_id, quantity=quantity_to_add)
        return data
