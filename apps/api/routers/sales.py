"""
Sales API Router
Sales and invoices: filtered lists, invoice statistics, invoice deletion
"""
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query

from apps.api.dependencies import get_busa_client, list_query, load_collection, require_section
from packages.common.busa_client import BusaApiClient, Resource
from packages.common.schemas.records import Invoice, Sale
from packages.common.schemas.responses import InvoiceStatsResponse, ListPage
from packages.domain.listing import views
from packages.domain.listing.filters import ListQuery
from packages.domain.listing.reports import invoice_stats

logger = structlog.get_logger()
router = APIRouter()


@router.get("/sales", response_model=ListPage[Sale])
async def list_sales(
    status: Optional[str] = Query(None, description="Pending, Completed, Cancelled or All"),
    payment_method: Optional[str] = Query(None, description="Payment method, or All"),
    query: ListQuery = Depends(list_query),
    client: BusaApiClient = Depends(get_busa_client),
    _=Depends(require_section("sales")),
):
    query = query.with_category("status", status).with_category("payment_method", payment_method)
    sales = await load_collection(client, Resource.SALES, views.SALES)
    page = sales.view(query)
    return ListPage[Sale](items=page.items, total=page.total, matched=page.matched)


@router.get("/invoices", response_model=ListPage[Invoice])
async def list_invoices(
    status: Optional[str] = Query(None, description="Invoice status, or All"),
    query: ListQuery = Depends(list_query),
    client: BusaApiClient = Depends(get_busa_client),
    _=Depends(require_section("invoices")),
):
    invoices = await load_collection(client, Resource.INVOICES, views.INVOICES)
    page = invoices.view(query.with_category("status", status))
    return ListPage[Invoice](items=page.items, total=page.total, matched=page.matched)


@router.get("/invoices/stats", response_model=InvoiceStatsResponse)
async def get_invoice_stats(
    status: Optional[str] = Query(None, description="Invoice status, or All"),
    query: ListQuery = Depends(list_query),
    client: BusaApiClient = Depends(get_busa_client),
    _=Depends(require_section("invoices")),
):
    """Totals over the invoices passing the filters."""
    invoices = await load_collection(client, Resource.INVOICES, views.INVOICES)
    page = invoices.view(query.with_category("status", status))
    return InvoiceStatsResponse(stats=invoice_stats(page.items), matched=page.matched, total=page.total)


@router.delete("/invoices/{invoice_id}")
async def delete_invoice(
    invoice_id: str,
    client: BusaApiClient = Depends(get_busa_client),
    _=Depends(require_section("invoices")),
):
    await client.delete(Resource.INVOICES, invoice_id)
    return {"id": invoice_id, "deleted": True}
