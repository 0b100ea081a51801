"""
Store API Router
Raw materials with stock status and the material usage log
"""
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query

from apps.api.dependencies import get_busa_client, list_query, load_collection, require_section
from packages.common.busa_client import BusaApiClient, Resource
from packages.common.config import get_settings
from packages.common.schemas.records import RawMaterialUsageLog
from packages.common.schemas.responses import ListPage, StockedRawMaterial
from packages.domain.listing import views
from packages.domain.listing.filters import ALL, ListQuery
from packages.domain.listing.reports import StockStatus, raw_material_stock_status

logger = structlog.get_logger()
router = APIRouter()


@router.get("/materials", response_model=ListPage[StockedRawMaterial])
async def list_raw_materials(
    category: Optional[str] = Query(None, description="Raw material category, or All"),
    stock_status: Optional[StockStatus] = Query(None, description="Only materials in this stock state"),
    query: ListQuery = Depends(list_query),
    client: BusaApiClient = Depends(get_busa_client),
    _=Depends(require_section("store")),
):
    """Raw materials, each with its stock state against its low-stock threshold."""
    threshold = get_settings().raw_material_low_stock_default
    materials = await load_collection(client, Resource.RAW_MATERIALS, views.RAW_MATERIALS)
    page = materials.view(query.with_category("category", category))

    items = [
        StockedRawMaterial(material=m, stock_status=raw_material_stock_status(m, threshold))
        for m in page.items
    ]
    if stock_status is not None:
        items = [item for item in items if item.stock_status == stock_status]

    return ListPage[StockedRawMaterial](items=items, total=page.total, matched=len(items))


@router.get("/usage", response_model=ListPage[RawMaterialUsageLog])
async def list_material_usage(
    raw_material_id: Optional[str] = Query(None, description="Only usage of this material"),
    department: Optional[str] = Query(ALL, description="Department, or All"),
    query: ListQuery = Depends(list_query),
    client: BusaApiClient = Depends(get_busa_client),
    _=Depends(require_section("material_usage")),
):
    query = query.with_category("raw_material_id", raw_material_id).with_category("department", department)
    logs = await load_collection(client, Resource.USAGE_LOGS, views.USAGE_LOGS)
    page = logs.view(query)
    return ListPage[RawMaterialUsageLog](items=page.items, total=page.total, matched=page.matched)
