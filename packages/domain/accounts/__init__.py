"""
Accounts Module - ledger account code decoding and balances

- Account codes such as "B1-EX-F/DLR" carry a price level and a zone;
  the classifier recovers both with fixed, ordered rules.
- Outstanding balance = invoiced - received - credited.
"""

from packages.domain.accounts.code_classifier import (
    AccountCodeClassifier,
    AccountCodeDetails,
    PRICE_LEVEL_OPTIONS,
    classify_ledger_account,
    parse_account_code_details,
)
from packages.domain.accounts.balance import (
    LedgerBalance,
    outstanding_balance,
)

__all__ = [
    'AccountCodeClassifier',
    'AccountCodeDetails',
    'PRICE_LEVEL_OPTIONS',
    'classify_ledger_account',
    'parse_account_code_details',
    'LedgerBalance',
    'outstanding_balance',
]
