"""
Catalogue API Router
Fixed dropdown values and company details shared by every form
"""
from enum import Enum
from typing import List, Type

import structlog
from fastapi import APIRouter, Depends

from apps.api.dependencies import require_section
from packages.common.config import Settings, get_settings
from packages.common.schemas.records import (
    PRODUCT_CATEGORIES,
    RAW_MATERIAL_CATEGORIES,
    UNITS_OF_MEASURE,
    CompanyDetails,
    CreditNoteReason,
    InvoiceStatus,
    LedgerAccountType,
    PurchaseOrderStatus,
    ReceiptPaymentMethod,
    SalePaymentMethod,
    SaleStatus,
    StockAdjustmentType,
    UsageDepartment,
)
from packages.common.schemas.responses import CatalogueResponse
from packages.domain.accounts import PRICE_LEVEL_OPTIONS
from packages.domain.listing.reports import ActivityType

logger = structlog.get_logger()
router = APIRouter()


def _values(enum: Type[Enum]) -> List[str]:
    return [member.value for member in enum]


def company_details(settings: Settings) -> CompanyDetails:
    """Letterhead printed on invoices and credit notes."""
    return CompanyDetails(
        name=settings.company_name,
        address=settings.company_address,
        phone=settings.company_phone,
        email=settings.company_email,
    )


@router.get("", response_model=CatalogueResponse)
async def get_catalogue(_=Depends(require_section("dashboard"))):
    settings = get_settings()
    return CatalogueResponse(
        company=company_details(settings),
        currency=settings.currency,
        sale_payment_methods=_values(SalePaymentMethod),
        receipt_payment_methods=_values(ReceiptPaymentMethod),
        sale_statuses=_values(SaleStatus),
        invoice_statuses=_values(InvoiceStatus),
        purchase_order_statuses=_values(PurchaseOrderStatus),
        credit_note_reasons=_values(CreditNoteReason),
        usage_departments=_values(UsageDepartment),
        ledger_account_types=_values(LedgerAccountType),
        stock_adjustment_types=_values(StockAdjustmentType),
        activity_types=_values(ActivityType),
        units_of_measure=list(UNITS_OF_MEASURE),
        product_categories=list(PRODUCT_CATEGORIES),
        raw_material_categories=list(RAW_MATERIAL_CATEGORIES),
        price_level_options=list(PRICE_LEVEL_OPTIONS),
    )
