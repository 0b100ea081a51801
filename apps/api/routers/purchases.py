"""
Purchases API Router
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from apps.api.dependencies import get_busa_client, list_query, load_collection, require_section
from packages.common.busa_client import BusaApiClient, Resource
from packages.common.schemas.records import PurchaseOrder
from packages.common.schemas.responses import ListPage
from packages.domain.listing import views
from packages.domain.listing.filters import ListQuery

router = APIRouter()


@router.get("", response_model=ListPage[PurchaseOrder])
async def list_purchase_orders(
    status: Optional[str] = Query(None, description="Purchase order status, or All"),
    query: ListQuery = Depends(list_query),
    client: BusaApiClient = Depends(get_busa_client),
    _=Depends(require_section("purchases")),
):
    orders = await load_collection(client, Resource.PURCHASE_ORDERS, views.PURCHASE_ORDERS)
    page = orders.view(query.with_category("status", status))
    return ListPage[PurchaseOrder](items=page.items, total=page.total, matched=page.matched)
