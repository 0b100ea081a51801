"""
Products API Router
Product list with stock status, stock additions, stock adjustment log
"""
from decimal import Decimal
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from apps.api.dependencies import get_busa_client, list_query, load_collection, require_section
from packages.common.busa_client import BusaApiClient, Resource
from packages.common.schemas.records import ProductStockAdjustmentLog
from packages.common.schemas.responses import ListPage, StockedProduct
from packages.domain.listing import views
from packages.domain.listing.filters import ListQuery
from packages.domain.listing.reports import StockStatus, product_stock_status

logger = structlog.get_logger()
router = APIRouter()


class StockAddition(BaseModel):
    quantity_to_add: Decimal = Field(..., gt=0, description="Units to add to the product's stock")


@router.get("", response_model=ListPage[StockedProduct])
async def list_products(
    product_category: Optional[str] = Query(None, description="Product category, or All"),
    stock_status: Optional[StockStatus] = Query(None, description="Only products in this stock state"),
    query: ListQuery = Depends(list_query),
    client: BusaApiClient = Depends(get_busa_client),
    _=Depends(require_section("products")),
):
    products = await load_collection(client, Resource.PRODUCTS, views.PRODUCTS)
    page = products.view(query.with_category("product_category", product_category))

    items = [StockedProduct(product=p, stock_status=product_stock_status(p)) for p in page.items]
    if stock_status is not None:
        items = [item for item in items if item.stock_status == stock_status]

    return ListPage[StockedProduct](items=items, total=page.total, matched=len(items))


@router.get("/stock-adjustments", response_model=ListPage[ProductStockAdjustmentLog])
async def list_stock_adjustments(
    product_id: Optional[str] = Query(None, description="Only adjustments of this product"),
    adjustment_type: Optional[str] = Query(None, description="Adjustment type, or All"),
    query: ListQuery = Depends(list_query),
    client: BusaApiClient = Depends(get_busa_client),
    _=Depends(require_section("product_stock")),
):
    query = query.with_category("product_id", product_id).with_category("adjustment_type", adjustment_type)
    logs = await load_collection(client, Resource.STOCK_ADJUSTMENTS, views.STOCK_ADJUSTMENTS)
    page = logs.view(query)
    return ListPage[ProductStockAdjustmentLog](items=page.items, total=page.total, matched=page.matched)


@router.post("/{product_id}/stock")
async def add_product_stock(
    product_id: str,
    addition: StockAddition,
    client: BusaApiClient = Depends(get_busa_client),
    _=Depends(require_section("product_stock")),
):
    await client.add_product_stock(product_id, addition.quantity_to_add)
    return {"id": product_id, "quantity_added": addition.quantity_to_add}


@router.delete("/{product_id}")
async def delete_product(
    product_id: str,
    client: BusaApiClient = Depends(get_busa_client),
    _=Depends(require_section("products")),
):
    await client.delete(Resource.PRODUCTS, product_id)
    return {"id": product_id, "deleted": True}
