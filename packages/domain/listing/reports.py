"""
Report builders - summary figures derived from (already filtered) records

Everything is recomputed from the records passed in; callers filter first
with apply_query() and hand over the filtered items.
"""
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence

import structlog
from pydantic import BaseModel, Field

from packages.common.dates import EPOCH
from packages.common.schemas.records import (
    CreditNote,
    CreditNoteReason,
    Invoice,
    InvoiceStatus,
    Product,
    PurchaseOrder,
    RawMaterial,
    RawMaterialUsageLog,
    Receipt,
    ReceiptPaymentMethod,
    Sale,
    SaleStatus,
    BANK_PAYMENT_METHODS,
)
from packages.domain.listing.filters import count_where, field_equals, sum_field, within_dates

logger = structlog.get_logger()


# === Receipt activity log ===

class ReceiptTotals(BaseModel):
    count: int = 0
    total_amount: Decimal = Decimal(0)
    cash_amount: Decimal = Decimal(0)
    bank_amount: Decimal = Decimal(0)


def receipt_totals(receipts: Sequence[Receipt]) -> ReceiptTotals:
    return ReceiptTotals(
        count=len(receipts),
        total_amount=sum_field(receipts, "amount_received"),
        cash_amount=sum_field(
            receipts, "amount_received",
            where=field_equals("payment_method", ReceiptPaymentMethod.CASH),
        ),
        bank_amount=sum_field(
            receipts, "amount_received",
            where=field_equals("payment_method", *BANK_PAYMENT_METHODS),
        ),
    )


# === Invoices ===

class InvoiceStats(BaseModel):
    invoice_count: int = 0
    total_amount: Decimal = Decimal(0)
    paid_amount: Decimal = Decimal(0)
    paid_count: int = 0
    pending_amount: Decimal = Decimal(0)
    pending_count: int = 0
    overdue_count: int = 0


def invoice_stats(invoices: Sequence[Invoice]) -> InvoiceStats:
    paid = field_equals("status", InvoiceStatus.PAID)
    sent = field_equals("status", InvoiceStatus.SENT)
    return InvoiceStats(
        invoice_count=len(invoices),
        total_amount=sum_field(invoices, "total_amount"),
        paid_amount=sum_field(invoices, "total_amount", where=paid),
        paid_count=count_where(invoices, paid),
        pending_amount=sum_field(invoices, "total_amount", where=sent),
        pending_count=count_where(invoices, sent),
        overdue_count=count_where(invoices, field_equals("status", InvoiceStatus.OVERDUE)),
    )


# === Stock ===

class StockStatus(str, Enum):
    OUT_OF_STOCK = "Out of Stock"
    LOW_STOCK = "Low Stock"
    IN_STOCK = "In Stock"


def stock_status(stock: Decimal, threshold: Optional[Decimal]) -> StockStatus:
    if stock <= 0:
        return StockStatus.OUT_OF_STOCK
    if stock <= (threshold or 0):
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


def product_stock_status(product: Product) -> StockStatus:
    return stock_status(product.stock, product.low_stock_threshold)


def raw_material_stock_status(material: RawMaterial, default_threshold: int = 10) -> StockStatus:
    # An unset (or zero) threshold falls back to the store default
    threshold = material.low_stock_threshold or Decimal(default_threshold)
    return stock_status(material.stock, threshold)


def is_low_stock(product: Product) -> bool:
    """Dashboard rule: at or below the product's own threshold (0 when unset)."""
    return product.stock <= (product.low_stock_threshold or 0)


# === Unified activity feed ===

class ActivityType(str, Enum):
    SALE = "Sale"
    INVOICE = "Invoice"
    RECEIPT = "Receipt"
    CREDIT_NOTE = "Credit Note"
    PURCHASE_ORDER = "Purchase Order"
    MATERIAL_USAGE = "Material Usage"


class BalanceEffect(str, Enum):
    INCREASE = "increase"
    DECREASE = "decrease"
    NEUTRAL = "neutral"


class Activity(BaseModel):
    """One business event, whatever document it came from"""
    id: str
    date: Optional[datetime] = None
    type: ActivityType
    document_number: str
    description: str
    amount: Decimal = Field(default=Decimal(0), description="Always positive")
    balance_effect: BalanceEffect = BalanceEffect.NEUTRAL
    status: Optional[str] = None
    party_name: Optional[str] = Field(None, description="Customer, supplier or department")


def build_activity_feed(
    sales: Iterable[Sale] = (),
    invoices: Iterable[Invoice] = (),
    receipts: Iterable[Receipt] = (),
    credit_notes: Iterable[CreditNote] = (),
    purchase_orders: Iterable[PurchaseOrder] = (),
    usage_logs: Iterable[RawMaterialUsageLog] = (),
) -> List[Activity]:
    """Merge documents of every kind into one feed, newest first."""
    activities: List[Activity] = []

    for s in sales:
        activities.append(Activity(
            id=f"sale-{s.id}", date=s.sale_date, type=ActivityType.SALE,
            document_number=s.id or "", description=f"Sale to {s.customer.name}",
            amount=s.total_amount, balance_effect=BalanceEffect.INCREASE,
            status=s.status, party_name=s.customer.name,
        ))
    for i in invoices:
        activities.append(Activity(
            id=f"invoice-{i.id}", date=i.issue_date, type=ActivityType.INVOICE,
            document_number=i.invoice_number, description=f"Invoice to {i.customer.name}",
            amount=i.total_amount, balance_effect=BalanceEffect.INCREASE,
            status=i.status, party_name=i.customer.name,
        ))
    for r in receipts:
        activities.append(Activity(
            id=f"receipt-{r.id}", date=r.receipt_date, type=ActivityType.RECEIPT,
            document_number=r.receipt_number, description=f"Payment from {r.ledger_account_name}",
            amount=r.amount_received, balance_effect=BalanceEffect.INCREASE,
            party_name=r.ledger_account_name,
        ))
    for cn in credit_notes:
        activities.append(Activity(
            id=f"cn-{cn.id}", date=cn.credit_note_date, type=ActivityType.CREDIT_NOTE,
            document_number=cn.credit_note_number,
            description=f"{cn.reason} for {cn.ledger_account_name}",
            amount=cn.amount, balance_effect=BalanceEffect.DECREASE,
            party_name=cn.ledger_account_name,
        ))
    for po in purchase_orders:
        activities.append(Activity(
            id=f"po-{po.id}", date=po.order_date, type=ActivityType.PURCHASE_ORDER,
            document_number=po.po_number, description=f"PO to {po.supplier.name}",
            amount=po.total_cost, balance_effect=BalanceEffect.DECREASE,
            status=po.status, party_name=po.supplier.name,
        ))
    for u in usage_logs:
        activities.append(Activity(
            id=f"usage-{u.id}", date=u.usage_date, type=ActivityType.MATERIAL_USAGE,
            document_number=u.usage_number,
            description=f"Used {u.raw_material_name} for {u.department}",
            party_name=u.department,
        ))

    activities.sort(key=lambda a: a.date or EPOCH, reverse=True)
    return activities


class ActivityTotals(BaseModel):
    sales_total: Decimal = Decimal(0)
    receipts_total: Decimal = Decimal(0)
    credit_notes_total: Decimal = Decimal(0)
    purchase_orders_total: Decimal = Decimal(0)


def activity_totals(activities: Sequence[Activity]) -> ActivityTotals:
    return ActivityTotals(
        sales_total=sum_field(activities, "amount", where=field_equals("type", ActivityType.SALE)),
        receipts_total=sum_field(activities, "amount", where=field_equals("type", ActivityType.RECEIPT)),
        credit_notes_total=sum_field(
            activities, "amount", where=field_equals("type", ActivityType.CREDIT_NOTE)),
        purchase_orders_total=sum_field(
            activities, "amount", where=field_equals("type", ActivityType.PURCHASE_ORDER)),
    )


# === Dashboard ===

class DashboardSummary(BaseModel):
    total_revenue: Decimal = Decimal(0)
    total_sales: int = 0
    pending_invoices: int = 0
    low_stock_items: int = 0
    recent_activities: List[Activity] = Field(default_factory=list)


def dashboard_summary(
    sales: Sequence[Sale],
    invoices: Sequence[Invoice],
    products: Sequence[Product],
    recent_limit: int = 5,
) -> DashboardSummary:
    recent = build_activity_feed(sales=sales, invoices=invoices)
    # The dashboard orders by when the document was entered
    entered = {s.id: s.created_at for s in sales}
    entered_invoices = {i.id: i.created_at for i in invoices}

    def entered_at(activity: Activity) -> datetime:
        if activity.type == ActivityType.SALE:
            created = entered.get(activity.id[len("sale-"):])
        else:
            created = entered_invoices.get(activity.id[len("invoice-"):])
        return created or activity.date or EPOCH

    recent.sort(key=entered_at, reverse=True)

    return DashboardSummary(
        total_revenue=sum_field(sales, "total_amount", where=field_equals("status", SaleStatus.COMPLETED)),
        total_sales=len(sales),
        pending_invoices=count_where(
            invoices,
            field_equals("status", InvoiceStatus.DRAFT, InvoiceStatus.SENT, InvoiceStatus.OVERDUE),
        ),
        low_stock_items=count_where(products, is_low_stock),
        recent_activities=recent[:recent_limit],
    )


# === Net sales per product ===

class ProductNetSales(BaseModel):
    product_name: str
    net_quantity_sold: Decimal = Decimal(0)


def net_sales_report(
    sales: Iterable[Sale],
    credit_notes: Iterable[CreditNote],
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    search: Optional[str] = None,
) -> List[ProductNetSales]:
    """
    Quantity sold per product in the window, less goods returned on credit notes.

    Only 'Returned Goods' credit notes with line items count as returns.
    Documents without a usable date are skipped even when no window is set.
    """
    quantities: Dict[str, Decimal] = {}
    skipped = 0

    for sale in sales:
        if sale.sale_date is None:
            skipped += 1
            continue
        if not within_dates(sale.sale_date, date_from, date_to):
            continue
        for item in sale.items:
            if item.product_name:
                quantities[item.product_name] = quantities.get(item.product_name, Decimal(0)) + item.quantity

    for cn in credit_notes:
        if cn.reason != CreditNoteReason.RETURNED_GOODS.value or not cn.items:
            continue
        if cn.credit_note_date is None:
            skipped += 1
            continue
        if not within_dates(cn.credit_note_date, date_from, date_to):
            continue
        for item in cn.items:
            if item.product_name:
                quantities[item.product_name] = quantities.get(item.product_name, Decimal(0)) - item.quantity

    if skipped:
        logger.warning("net_sales_documents_without_date", skipped=skipped)

    rows = [ProductNetSales(product_name=name, net_quantity_sold=qty) for name, qty in quantities.items()]
    if search:
        needle = search.lower()
        rows = [row for row in rows if needle in row.product_name.lower()]

    rows.sort(key=lambda row: row.product_name.lower())
    return rows
