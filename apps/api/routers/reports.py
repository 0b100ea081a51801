"""
Reports API Router
Dashboard summary, unified activity feed, net sales per product
"""
import asyncio
from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, Query

from apps.api.dependencies import get_busa_client, list_query, require_section
from packages.common.busa_client import BusaApiClient, Resource
from packages.common.config import get_settings
from packages.common.schemas.responses import ActivityFeedResponse
from packages.domain.listing import views
from packages.domain.listing.filters import ListQuery, apply_query
from packages.domain.listing.reports import (
    ActivityType,
    DashboardSummary,
    ProductNetSales,
    activity_totals,
    build_activity_feed,
    dashboard_summary,
    net_sales_report,
)

logger = structlog.get_logger()
router = APIRouter()


@router.get("/dashboard", response_model=DashboardSummary)
async def get_dashboard(
    client: BusaApiClient = Depends(get_busa_client),
    _=Depends(require_section("dashboard")),
):
    """Revenue, sales count, pending invoices, low stock and latest activity."""
    sales, invoices, products = await asyncio.gather(
        client.list(Resource.SALES),
        client.list(Resource.INVOICES),
        client.list(Resource.PRODUCTS),
    )
    return dashboard_summary(
        sales, invoices, products,
        recent_limit=get_settings().dashboard_recent_activity_limit,
    )


@router.get("/activities", response_model=ActivityFeedResponse)
async def get_activity_feed(
    type: Optional[ActivityType] = Query(None, description="Only activities of this type"),
    query: ListQuery = Depends(list_query),
    client: BusaApiClient = Depends(get_busa_client),
    _=Depends(require_section("activities")),
):
    """
    Every business document as one feed, newest first.

    Totals are per document type over the filtered feed.
    """
    sales, invoices, receipts, credit_notes, purchase_orders, usage_logs = await asyncio.gather(
        client.list(Resource.SALES),
        client.list(Resource.INVOICES),
        client.list(Resource.RECEIPTS),
        client.list(Resource.CREDIT_NOTES),
        client.list(Resource.PURCHASE_ORDERS),
        client.list(Resource.USAGE_LOGS),
    )
    feed = build_activity_feed(
        sales=sales,
        invoices=invoices,
        receipts=receipts,
        credit_notes=credit_notes,
        purchase_orders=purchase_orders,
        usage_logs=usage_logs,
    )

    page = apply_query(feed, views.ACTIVITIES, query.with_category("type", type.value if type else None))
    return ActivityFeedResponse(
        items=page.items,
        total=page.total,
        matched=page.matched,
        totals=activity_totals(page.items),
    )


@router.get("/net-sales", response_model=List[ProductNetSales])
async def get_net_sales(
    query: ListQuery = Depends(list_query),
    client: BusaApiClient = Depends(get_busa_client),
    _=Depends(require_section("net_sales_report")),
):
    """Quantity sold per product less returned goods, within the date window."""
    sales, credit_notes = await asyncio.gather(
        client.list(Resource.SALES),
        client.list(Resource.CREDIT_NOTES),
    )
    rows = net_sales_report(
        sales,
        credit_notes,
        date_from=query.date_from,
        date_to=query.date_to,
        search=query.search,
    )
    logger.info("net_sales_report_built", products=len(rows))
    return rows
