"""
Ledger Accounts API Router
Accounts with decoded price level/zone, code classification, outstanding balance
"""
import asyncio
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query

from apps.api.dependencies import get_busa_client, list_query, load_collection, require_section
from packages.common.busa_client import BusaApiClient, Resource
from packages.common.schemas.responses import (
    ClassifiedLedgerAccount,
    LedgerBalanceResponse,
    ListPage,
)
from packages.domain.accounts import (
    AccountCodeDetails,
    classify_ledger_account,
    outstanding_balance,
    parse_account_code_details,
)
from packages.domain.listing import views
from packages.domain.listing.filters import ListQuery

logger = structlog.get_logger()
router = APIRouter()


@router.get("", response_model=ListPage[ClassifiedLedgerAccount])
async def list_ledger_accounts(
    account_type: Optional[str] = Query(None, description="Account type, or All"),
    zone: Optional[str] = Query(None, description="Zone, or All"),
    query: ListQuery = Depends(list_query),
    client: BusaApiClient = Depends(get_busa_client),
    _=Depends(require_section("ledger_accounts")),
):
    """
    List ledger accounts.

    Accounts stored without a price level or zone get them filled from their
    account code before filtering, so the zone filter sees derived zones too.
    """
    accounts = await load_collection(client, Resource.LEDGER_ACCOUNTS, views.LEDGER_ACCOUNTS)
    accounts.records = [classify_ledger_account(a) for a in accounts.records]

    page = accounts.view(query.with_category("account_type", account_type).with_category("zone", zone))
    items = [
        ClassifiedLedgerAccount(
            account=account,
            derived_zone=parse_account_code_details(account.account_code).zone,
        )
        for account in page.items
    ]
    return ListPage[ClassifiedLedgerAccount](items=items, total=page.total, matched=page.matched)


@router.get("/classify", response_model=AccountCodeDetails)
async def classify_account_code(
    code: str = Query("", description="Account code as typed on the account"),
    _=Depends(require_section("ledger_accounts")),
):
    return parse_account_code_details(code)


@router.get("/{account_id}/balance", response_model=LedgerBalanceResponse)
async def ledger_account_balance(
    account_id: str,
    client: BusaApiClient = Depends(get_busa_client),
    _=Depends(require_section("ledger_accounts")),
):
    """Invoiced (excluding cancelled) less received less credited."""
    account, invoices, receipts, credit_notes = await asyncio.gather(
        client.get(Resource.LEDGER_ACCOUNTS, account_id),
        client.list(Resource.INVOICES),
        client.list(Resource.RECEIPTS),
        client.list(Resource.CREDIT_NOTES),
    )

    balance = outstanding_balance(account_id, invoices, receipts, credit_notes, account=account)
    if balance.over_credit_limit:
        logger.info("ledger_account_over_credit_limit",
                    ledger_account_id=account_id,
                    balance=str(balance.balance),
                    credit_limit=str(balance.credit_limit))

    return LedgerBalanceResponse(balance=balance, over_credit_limit=balance.over_credit_limit)


@router.delete("/{account_id}")
async def delete_ledger_account(
    account_id: str,
    client: BusaApiClient = Depends(get_busa_client),
    _=Depends(require_section("ledger_accounts")),
):
    await client.delete(Resource.LEDGER_ACCOUNTS, account_id)
    return {"id": account_id, "deleted": True}
