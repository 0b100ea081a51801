"""
Receipts API Router
Customer payments: filtered list, activity log with cash/bank totals, deletion
"""
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query

from apps.api.dependencies import get_busa_client, list_query, load_collection, require_section
from packages.common.busa_client import BusaApiClient, Resource
from packages.common.schemas.records import Receipt
from packages.common.schemas.responses import ListPage, ReceiptLogResponse
from packages.domain.listing import views
from packages.domain.listing.filters import ALL, ListQuery
from packages.domain.listing.reports import receipt_totals

logger = structlog.get_logger()
router = APIRouter()


@router.get("", response_model=ListPage[Receipt])
async def list_receipts(
    payment_method: Optional[str] = Query(None, description="Exact payment method, or All"),
    ledger_account_id: Optional[str] = Query(None, description="Only receipts for this account"),
    query: ListQuery = Depends(list_query),
    client: BusaApiClient = Depends(get_busa_client),
    _=Depends(require_section("receipts")),
):
    """List receipts, newest first."""
    query = query.with_category("payment_method", payment_method)
    query = query.with_category("ledger_account_id", ledger_account_id)

    receipts = await load_collection(client, Resource.RECEIPTS, views.RECEIPTS)
    page = receipts.view(query)
    return ListPage[Receipt](items=page.items, total=page.total, matched=page.matched)


@router.get("/activity-log", response_model=ReceiptLogResponse)
async def receipt_activity_log(
    payment: str = Query(ALL, description="All, Cash or Bank"),
    query: ListQuery = Depends(list_query),
    client: BusaApiClient = Depends(get_busa_client),
    _=Depends(require_section("receipt_log")),
):
    """
    Receipt activity log.

    Totals cover the filtered receipts only. Bank groups Card, Transfer,
    Online and Cheque payments.
    """
    receipts = await load_collection(client, Resource.RECEIPTS, views.RECEIPTS)
    page = receipts.view(query.with_category("payment_bucket", payment))
    totals = receipt_totals(page.items)

    logger.info("receipt_log_built",
                matched=page.matched,
                total=page.total,
                payment=payment,
                total_amount=str(totals.total_amount))

    return ReceiptLogResponse(items=page.items, total=page.total, matched=page.matched, totals=totals)


@router.delete("/{receipt_id}")
async def delete_receipt(
    receipt_id: str,
    client: BusaApiClient = Depends(get_busa_client),
    _=Depends(require_section("receipts")),
):
    await client.delete(Resource.RECEIPTS, receipt_id)
    return {"id": receipt_id, "deleted": True}
