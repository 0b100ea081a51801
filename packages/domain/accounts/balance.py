"""
Ledger account outstanding balance

balance = invoiced (excluding cancelled invoices) - received - credited
"""
from decimal import Decimal
from typing import Iterable, Optional

import structlog
from pydantic import BaseModel, Field

from packages.common.schemas.records import (
    CreditNote,
    Invoice,
    InvoiceStatus,
    LedgerAccount,
    Receipt,
)

logger = structlog.get_logger()


class LedgerBalance(BaseModel):
    ledger_account_id: str
    account_name: Optional[str] = None
    credit_limit: Optional[Decimal] = None
    total_invoiced: Decimal = Field(default=Decimal(0))
    total_received: Decimal = Field(default=Decimal(0))
    total_credited: Decimal = Field(default=Decimal(0))
    balance: Decimal = Field(default=Decimal(0))

    @property
    def over_credit_limit(self) -> bool:
        return bool(self.credit_limit) and self.balance > self.credit_limit


def outstanding_balance(
    ledger_account_id: str,
    invoices: Iterable[Invoice],
    receipts: Iterable[Receipt],
    credit_notes: Iterable[CreditNote],
    account: Optional[LedgerAccount] = None,
) -> LedgerBalance:
    """
    Compute what a ledger account owes.

    Collections may contain records for other accounts; only the ones for
    ledger_account_id are counted.
    """
    total_invoiced = sum(
        (
            invoice.total_amount
            for invoice in invoices
            if invoice.customer.id == ledger_account_id
            and invoice.status != InvoiceStatus.CANCELLED.value
        ),
        Decimal(0),
    )
    total_received = sum(
        (r.amount_received for r in receipts if r.ledger_account_id == ledger_account_id),
        Decimal(0),
    )
    total_credited = sum(
        (cn.amount for cn in credit_notes if cn.ledger_account_id == ledger_account_id),
        Decimal(0),
    )

    balance = total_invoiced - total_received - total_credited

    logger.debug("ledger_balance_computed",
                 ledger_account_id=ledger_account_id,
                 balance=str(balance))

    return LedgerBalance(
        ledger_account_id=ledger_account_id,
        account_name=account.name if account else None,
        credit_limit=account.credit_limit if account else None,
        total_invoiced=total_invoiced,
        total_received=total_received,
        total_credited=total_credited,
        balance=balance,
    )
