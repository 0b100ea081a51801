"""
Response contracts served by the SAJ Books API

Record payloads keep the business API's camelCase names; the wrappers and
report figures around them are snake_case.
"""
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

from packages.common.schemas.records import CompanyDetails, LedgerAccount, Product, RawMaterial, Receipt
from packages.common.session import User
from packages.domain.accounts.balance import LedgerBalance
from packages.domain.listing.reports import (
    Activity,
    ActivityTotals,
    InvoiceStats,
    ReceiptTotals,
    StockStatus,
)

T = TypeVar("T")


class ListPage(BaseModel, Generic[T]):
    """Filtered records plus collection size"""
    items: List[T] = Field(..., description="Records passing the active filters, newest first")
    total: int = Field(..., description="Records before filtering")
    matched: int = Field(..., description="Records after filtering")


class ReceiptLogResponse(ListPage[Receipt]):
    totals: ReceiptTotals


class InvoiceStatsResponse(BaseModel):
    stats: InvoiceStats
    matched: int
    total: int


class ActivityFeedResponse(ListPage[Activity]):
    totals: ActivityTotals


class ClassifiedLedgerAccount(BaseModel):
    account: LedgerAccount
    derived_zone: str = Field(..., description="Zone decoded from the account code")


class LedgerBalanceResponse(BaseModel):
    balance: LedgerBalance
    over_credit_limit: bool


class StockedProduct(BaseModel):
    product: Product
    stock_status: StockStatus


class StockedRawMaterial(BaseModel):
    material: RawMaterial
    stock_status: StockStatus


class LoginRequest(BaseModel):
    user_id: str = Field(..., min_length=1, description="User ID, case-insensitive")


class SessionResponse(BaseModel):
    authenticated: bool
    user: Optional[User] = None
    sections: List[str] = Field(default_factory=list)
    message: Optional[str] = None


class CatalogueResponse(BaseModel):
    """Dropdown values for the record forms and filters, plus the company letterhead"""
    company: CompanyDetails
    currency: str
    sale_payment_methods: List[str]
    receipt_payment_methods: List[str]
    sale_statuses: List[str]
    invoice_statuses: List[str]
    purchase_order_statuses: List[str]
    credit_note_reasons: List[str]
    usage_departments: List[str]
    ledger_account_types: List[str]
    stock_adjustment_types: List[str]
    activity_types: List[str]
    units_of_measure: List[str]
    product_categories: List[str]
    raw_material_categories: List[str]
    price_level_options: List[str] = Field(..., description="Account codes offered on the ledger account form")
