"""
Business record schemas (Pydantic models)

Typed shapes for the records served by the remote business API. The API
speaks camelCase JSON with loosely typed values (numbers as strings, ids as
integers, zero-dates, line items as JSON strings), so every model is
lenient at the boundary and strict inside: once validated, amounts are
Decimal, dates are naive datetimes or None, ids are strings.
"""
import json
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Annotated, Any, List, Optional

import structlog
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from packages.common.dates import parse_api_date

logger = structlog.get_logger()


# === Enumerations (known values; records keep plain strings) ===

class SalePaymentMethod(str, Enum):
    """How a sale was paid"""
    CASH = "Cash"
    CARD = "Card"
    TRANSFER = "Transfer"
    ONLINE = "Online"
    CREDIT = "Credit"


class ReceiptPaymentMethod(str, Enum):
    """How a customer payment was received"""
    CASH = "Cash"
    CARD = "Card"
    TRANSFER = "Transfer"
    ONLINE = "Online"
    CHEQUE = "Cheque"


# Everything except cash lands in a bank account
BANK_PAYMENT_METHODS = frozenset({
    ReceiptPaymentMethod.CARD.value,
    ReceiptPaymentMethod.TRANSFER.value,
    ReceiptPaymentMethod.ONLINE.value,
    ReceiptPaymentMethod.CHEQUE.value,
})


class SaleStatus(str, Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class InvoiceStatus(str, Enum):
    DRAFT = "Draft"
    SENT = "Sent"
    PAID = "Paid"
    OVERDUE = "Overdue"
    CANCELLED = "Cancelled"


class PurchaseOrderStatus(str, Enum):
    DRAFT = "Draft"
    ORDERED = "Ordered"
    PARTIALLY_RECEIVED = "Partially Received"
    RECEIVED = "Received"
    CANCELLED = "Cancelled"


class CreditNoteReason(str, Enum):
    """Why a credit note was issued"""
    TRAVEL_EXPENSE_REIMBURSEMENT = "Travel Expense Reimbursement"
    RETURNED_GOODS = "Returned Goods"
    DAMAGES = "Damages"
    SERVICE_CREDIT = "Service Credit/Discount"
    ERROR_CORRECTION = "Error Correction"
    SALES_REP_COMMISSION = "Sales Rep Commission"
    OTHER_EXPENSE_REIMBURSEMENT = "Other Expense Reimbursement"
    WRITE_OFF = "Write Off"
    DEBT_TO_BE_CREDITED = "Debt to be Credited"
    OTHER = "Other"


class UsageDepartment(str, Enum):
    PRODUCTION = "Production"
    CLEANING = "Cleaning"
    PACKAGING = "Packaging"
    MAINTENANCE = "Maintenance"
    OFFICE = "Office"
    WASTAGE = "Wastage"
    OTHER = "Other"


class LedgerAccountType(str, Enum):
    PREMIUM_PRODUCT = "Premium Product"
    SALES_REP = "Sales Rep"
    STANDARD_PRODUCT = "Standard Product"
    SUPPLIER = "Supplier"
    CUSTOMER = "Customer"
    BANK = "Bank"
    EXPENSE = "Expense"
    INCOME = "Income"
    ASSET = "Asset"
    LIABILITY = "Liability"
    EQUITY = "Equity"


class StockAdjustmentType(str, Enum):
    ADDITION = "ADDITION"
    MANUAL_CORRECTION_ADD = "MANUAL_CORRECTION_ADD"
    MANUAL_CORRECTION_SUBTRACT = "MANUAL_CORRECTION_SUBTRACT"
    INITIAL_STOCK = "INITIAL_STOCK"
    SALE_DEDUCTION = "SALE_DEDUCTION"
    RETURN_ADDITION = "RETURN_ADDITION"


UNITS_OF_MEASURE = (
    "PCS", "Litres", "KG", "Grams", "Pack", "Sachet", "Unit", "Carton", "Bag", "Other",
)

PRODUCT_CATEGORIES = (
    "Plain Yogurt", "Greek Yogurt", "Fruit Yogurt", "Drinking Yogurt", "Frozen Yogurt",
    "Organic Yogurt", "Non-Dairy Yogurt", "Other Finished Good", "Additives",
    "Banana Flavor", "Chocolate Flavor", "Cold Room Item", "Culture",
    "Electrical Material", "Emulsions", "Fuel", "Mango Flavor", "Mechanical Material",
    "Milk Product", "Orange Flavor", "Pineapple Flavor", "Preservatives",
    "Strawberry Flavor", "Sugar Product", "Support Material", "Sweetener", "Thickeners",
)

RAW_MATERIAL_CATEGORIES = (
    "Milk Inputs", "Sweeteners", "Packaging", "Cultures", "Flavors & Additives",
    "Preservatives", "Cleaning Supplies", "Maintenance Parts", "Office Supplies",
    "Other Supplies",
)


# === Boundary coercions ===

def _coerce_id(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    return str(value)


def _coerce_amount(value: Any) -> Decimal:
    """Empty or unreadable numbers count as zero."""
    if value is None or isinstance(value, bool):
        return Decimal(0)
    if isinstance(value, Decimal):
        return value
    text = str(value).strip()
    if not text or text.lower() == "null":
        return Decimal(0)
    try:
        amount = Decimal(text)
    except InvalidOperation:
        logger.warning("unparseable_amount", value=text)
        return Decimal(0)
    if not amount.is_finite():
        logger.warning("unparseable_amount", value=text)
        return Decimal(0)
    return amount


def _coerce_optional_amount(value: Any) -> Optional[Decimal]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return _coerce_amount(value)


def _coerce_count(value: Any) -> int:
    return int(_coerce_amount(value))


def _api_date(value: Any) -> Optional[datetime]:
    return parse_api_date(value)


def _decode_json_list(value: Any) -> list:
    """Line items sometimes arrive JSON-encoded inside a string column."""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text or text.lower() == "null" or text == "0":
            return []
        try:
            decoded = json.loads(text)
        except json.JSONDecodeError:
            logger.warning("undecodable_item_list", value=text[:100])
            return []
        if isinstance(decoded, list):
            return decoded
        logger.warning("item_list_not_array", value=text[:100])
        return []
    logger.warning("item_list_not_array", value=repr(value)[:100])
    return []


RecordId = Annotated[str, BeforeValidator(_coerce_id)]
Amount = Annotated[Decimal, BeforeValidator(_coerce_amount)]
OptionalAmount = Annotated[Optional[Decimal], BeforeValidator(_coerce_optional_amount)]
Count = Annotated[int, BeforeValidator(_coerce_count)]
ApiDate = Annotated[Optional[datetime], BeforeValidator(_api_date)]


class ApiRecord(BaseModel):
    """Base for all records exchanged with the business API"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


def _lift_flat_party(data: Any, key: str) -> Any:
    """Older endpoints send customerId/customerName instead of a nested object."""
    if not isinstance(data, dict):
        return data
    party = data.get(key)
    if isinstance(party, dict) and party.get("name"):
        return data
    flat_name = data.get(f"{key}Name")
    flat_id = data.get(f"{key}Id")
    if flat_name is None and flat_id is None:
        return data
    merged = dict(party) if isinstance(party, dict) else {}
    if flat_name is not None:
        merged["name"] = flat_name
    if flat_id is not None and not merged.get("id"):
        merged["id"] = flat_id
    return {**data, key: merged}


# === Records ===

class PriceTier(ApiRecord):
    price_level: str
    price: Amount = Decimal(0)


class PartyRef(ApiRecord):
    """Customer or supplier as embedded in a document"""
    id: Optional[RecordId] = None
    name: str = ""
    price_level: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None


class CompanyDetails(ApiRecord):
    name: str
    address: str
    phone: Optional[str] = None
    email: Optional[str] = None
    logo_url: Optional[str] = None


class Product(ApiRecord):
    """Finished good or stocked item"""
    id: Optional[RecordId] = None
    name: str
    description: Optional[str] = None
    price: Amount = Decimal(0)
    cost_price: OptionalAmount = None
    price_tiers: Annotated[List[PriceTier], BeforeValidator(_decode_json_list)] = Field(default_factory=list)
    product_category: str = ""
    alternate_units: Optional[str] = None
    pcs_per_unit: OptionalAmount = None
    unit_of_measure: str = ""
    litres: OptionalAmount = None
    sku: str = ""
    stock: Amount = Decimal(0)
    low_stock_threshold: OptionalAmount = None
    image_url: Optional[str] = None
    created_at: ApiDate = None
    updated_at: ApiDate = None


class RawMaterial(ApiRecord):
    """Store item consumed by production"""
    id: Optional[RecordId] = None
    name: str
    description: Optional[str] = None
    category: str = ""
    sku: str = ""
    unit_of_measure: str = ""
    litres: OptionalAmount = None
    stock: Amount = Decimal(0)
    cost_price: Amount = Decimal(0)
    low_stock_threshold: OptionalAmount = None
    image_url: Optional[str] = None
    supplier_id: Optional[RecordId] = None
    created_at: ApiDate = None
    updated_at: ApiDate = None


class SaleItem(ApiRecord):
    product_id: Optional[RecordId] = None
    product_name: str = ""
    quantity: Amount = Decimal(0)
    unit_price: Amount = Decimal(0)
    total_price: Amount = Decimal(0)
    unit_of_measure: Optional[str] = None


class Sale(ApiRecord):
    id: Optional[RecordId] = None
    invoice_id: Optional[RecordId] = None
    sale_date: ApiDate = None
    customer: PartyRef = Field(default_factory=PartyRef)
    items: Annotated[List[SaleItem], BeforeValidator(_decode_json_list)] = Field(default_factory=list)
    sub_total: Amount = Decimal(0)
    discount_amount: OptionalAmount = None
    tax_amount: OptionalAmount = None
    total_amount: Amount = Decimal(0)
    payment_method: str = ""
    status: str = ""
    notes: Optional[str] = None
    created_at: ApiDate = None
    updated_at: ApiDate = None

    @model_validator(mode="before")
    @classmethod
    def lift_customer(cls, data):
        return _lift_flat_party(data, "customer")


class Invoice(ApiRecord):
    id: Optional[RecordId] = None
    sale_id: Optional[RecordId] = None
    invoice_number: str
    issue_date: ApiDate = None
    due_date: ApiDate = None
    customer: PartyRef = Field(default_factory=PartyRef)
    items: Annotated[List[SaleItem], BeforeValidator(_decode_json_list)] = Field(default_factory=list)
    sub_total: Amount = Decimal(0)
    discount_amount: OptionalAmount = None
    tax_amount: OptionalAmount = None
    total_amount: Amount = Decimal(0)
    status: str = ""
    notes: Optional[str] = None
    company_details: Optional[CompanyDetails] = None
    created_at: ApiDate = None
    updated_at: ApiDate = None

    @model_validator(mode="before")
    @classmethod
    def lift_customer(cls, data):
        return _lift_flat_party(data, "customer")


class LedgerAccount(ApiRecord):
    """Customer, supplier, bank or nominal account"""
    id: Optional[RecordId] = None
    account_code: str = ""
    price_level: str = ""
    zone: str = ""
    credit_period: Count = 0
    credit_limit: Amount = Decimal(0)
    name: str
    address: str = ""
    phone: str = ""
    account_type: str = ""
    bank_details: str = ""
    created_at: ApiDate = None
    updated_at: ApiDate = None


class Receipt(ApiRecord):
    """Payment received from a ledger account"""
    id: Optional[RecordId] = None
    receipt_number: str
    receipt_date: ApiDate = None
    ledger_account_id: Optional[RecordId] = None
    ledger_account_name: str = ""
    amount_received: Amount = Decimal(0)
    payment_method: str = ""
    bank_name: Optional[str] = None
    reference_number: Optional[str] = None
    notes: Optional[str] = None
    created_at: ApiDate = None
    updated_at: ApiDate = None

    @property
    def payment_bucket(self) -> str:
        """Cash, Bank or Other"""
        if self.payment_method == ReceiptPaymentMethod.CASH.value:
            return "Cash"
        if self.payment_method in BANK_PAYMENT_METHODS:
            return "Bank"
        return "Other"


class PurchaseItem(ApiRecord):
    product_id: Optional[RecordId] = None
    product_name: str = ""
    category: Optional[str] = None
    quantity: Amount = Decimal(0)
    unit_cost: Amount = Decimal(0)
    total_cost: Amount = Decimal(0)
    unit_of_measure: Optional[str] = None


class PurchaseOrder(ApiRecord):
    id: Optional[RecordId] = None
    po_number: str
    order_date: ApiDate = None
    expected_delivery_date: ApiDate = None
    supplier: PartyRef = Field(default_factory=PartyRef)
    items: Annotated[List[PurchaseItem], BeforeValidator(_decode_json_list)] = Field(default_factory=list)
    sub_total: Amount = Decimal(0)
    shipping_cost: OptionalAmount = None
    other_charges: OptionalAmount = None
    total_cost: Amount = Decimal(0)
    status: str = ""
    notes: Optional[str] = None
    received_items: Annotated[List[PurchaseItem], BeforeValidator(_decode_json_list)] = Field(default_factory=list)
    created_at: ApiDate = None
    updated_at: ApiDate = None

    @model_validator(mode="before")
    @classmethod
    def lift_supplier(cls, data):
        return _lift_flat_party(data, "supplier")


class CreditNote(ApiRecord):
    id: Optional[RecordId] = None
    credit_note_number: str
    credit_note_date: ApiDate = None
    ledger_account_id: Optional[RecordId] = None
    ledger_account_name: str = ""
    amount: Amount = Decimal(0)
    reason: str = ""
    description: Optional[str] = None
    related_invoice_id: Optional[RecordId] = None
    items: Annotated[List[SaleItem], BeforeValidator(_decode_json_list)] = Field(default_factory=list)
    created_at: ApiDate = None
    updated_at: ApiDate = None


class RawMaterialUsageLog(ApiRecord):
    id: Optional[RecordId] = None
    usage_number: str
    raw_material_id: Optional[RecordId] = None
    raw_material_name: str = ""
    quantity_used: Amount = Decimal(0)
    unit_of_measure: str = ""
    department: str = ""
    usage_date: ApiDate = None
    notes: Optional[str] = None
    recorded_by: Optional[str] = None
    created_at: ApiDate = None
    updated_at: ApiDate = None


class ProductStockAdjustmentLog(ApiRecord):
    id: Optional[RecordId] = None
    log_number: str
    product_id: Optional[RecordId] = None
    product_name: str = ""
    quantity_adjusted: Amount = Decimal(0)
    adjustment_type: str = ""
    adjustment_date: ApiDate = None
    notes: Optional[str] = None
    previous_stock: Amount = Decimal(0)
    new_stock: Amount = Decimal(0)
    recorded_by: Optional[str] = None
    created_at: ApiDate = None
    updated_at: ApiDate = None


class ApiEnvelope(BaseModel):
    """Response wrapper used by every endpoint of the business API"""
    model_config = ConfigDict(extra="ignore")

    success: bool = False
    data: Any = None
    message: Optional[str] = None
    error: Optional[str] = None

    @property
    def detail(self) -> Optional[str]:
        return self.message or self.error
