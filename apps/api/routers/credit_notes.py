"""
Credit Notes API Router
"""
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query

from apps.api.dependencies import get_busa_client, list_query, load_collection, require_section
from packages.common.busa_client import BusaApiClient, Resource
from packages.common.schemas.records import CreditNote
from packages.common.schemas.responses import ListPage
from packages.domain.listing import views
from packages.domain.listing.filters import ListQuery

logger = structlog.get_logger()
router = APIRouter()


@router.get("", response_model=ListPage[CreditNote])
async def list_credit_notes(
    reason: Optional[str] = Query(None, description="Credit note reason, or All"),
    ledger_account_id: Optional[str] = Query(None),
    query: ListQuery = Depends(list_query),
    client: BusaApiClient = Depends(get_busa_client),
    _=Depends(require_section("credit_notes")),
):
    query = query.with_category("reason", reason).with_category("ledger_account_id", ledger_account_id)
    credit_notes = await load_collection(client, Resource.CREDIT_NOTES, views.CREDIT_NOTES)
    page = credit_notes.view(query)
    return ListPage[CreditNote](items=page.items, total=page.total, matched=page.matched)


@router.delete("/{credit_note_id}")
async def delete_credit_note(
    credit_note_id: str,
    client: BusaApiClient = Depends(get_busa_client),
    _=Depends(require_section("credit_notes")),
):
    await client.delete(Resource.CREDIT_NOTES, credit_note_id)
    return {"id": credit_note_id, "deleted": True}
