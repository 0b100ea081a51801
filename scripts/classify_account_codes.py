#!/usr/bin/env python3
"""
Decode price level and zone for every ledger account on the live API.

Lists accounts whose stored zone disagrees with the zone decoded from their
account code, and the codes no rule could place in a zone. Read-only.

Usage:
    python scripts/classify_account_codes.py
    python scripts/classify_account_codes.py "B1-EX-F/DLR" "R-RETAILER-Z1/RTL"
"""
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import structlog

from packages.common.busa_client import BusaApiClient, BusaApiError, Resource
from packages.domain.accounts.code_classifier import NOT_AVAILABLE, parse_account_code_details

logger = structlog.get_logger()


def classify_codes(codes):
    for code in codes:
        details = parse_account_code_details(code)
        print(f'{code:<30} zone={details.zone:<5} rule={details.rule}')


async def main():
    if len(sys.argv) > 1:
        classify_codes(sys.argv[1:])
        return

    async with BusaApiClient() as client:
        try:
            accounts = await client.list(Resource.LEDGER_ACCOUNTS)
        except BusaApiError as e:
            print(f'❌ Could not load ledger accounts: {e.message}')
            sys.exit(1)

    print('='*80)
    print(f'LEDGER ACCOUNT CODES ({len(accounts)} accounts)')
    print('='*80)

    mismatched = []
    unresolved = []
    for account in accounts:
        details = parse_account_code_details(account.account_code)
        if details.zone == NOT_AVAILABLE:
            unresolved.append(account)
        elif account.zone and account.zone != details.zone:
            mismatched.append((account, details))

    print(f'\nStored zone differs from decoded zone: {len(mismatched)}')
    for account, details in mismatched:
        print(f'  {account.name:<35} {account.account_code:<25} stored={account.zone} decoded={details.zone} ({details.rule})')

    print(f'\nNo zone could be decoded: {len(unresolved)}')
    for account in unresolved:
        print(f'  {account.name:<35} {account.account_code or "(empty)"}')

    logger.info("account_codes_checked",
                accounts=len(accounts),
                mismatched=len(mismatched),
                unresolved=len(unresolved))


if __name__ == "__main__":
    asyncio.run(main())
