"""
Account Code Classifier - derive price level and zone from a ledger account code

Account codes are free text typed by staff, e.g. "B1-EX-F/DLR" or
"R-RETAILER-Z1/RTL". They carry a dealer/retailer tier and usually a
distribution zone. The price level is the code itself; the zone is
recovered with ordered, first-match-wins rules:

1. Literal substring overrides for known legacy codes
2. First token (split on '-' and '/') that is a known zone keyword
3. First token alone: a known keyword, Z/B with optional digits, or AZ
4. Otherwise 'N/A'

NO side effects, never raises. Rule order is significant: a code can match
both an override and a generic token, and the override must win.
"""
import re
from typing import Any, Optional

import structlog
from pydantic import BaseModel, Field

from packages.common.schemas.records import LedgerAccount

logger = structlog.get_logger()

NOT_AVAILABLE = "N/A"

# Price levels offered when creating accounts and product price tiers
PRICE_LEVEL_OPTIONS = (
    "B1-EX-F/DLR",
    "R-RETAILER-Z1/RTL",
    "Z-DISTRIZ2/RTL",
    "B3-Z3/DLR",
    "AZ-Z1/DISTRI",
    "CUST-STD-Z1/GEN",
    "CUST-PREM-Z2/SPEC",
    "DEFAULT",
)


class AccountCodeDetails(BaseModel):
    """Price level and zone decoded from an account code"""
    price_level: str = Field(..., description="Price level label (the raw account code)")
    zone: str = Field(..., description="Distribution zone or 'N/A'")
    rule: str = Field("none", description="Rule that determined the zone")

    class Config:
        json_schema_extra = {
            "example": {
                "price_level": "B1-EX-F/DLR",
                "zone": "B1",
                "rule": "override:B1-EX",
            }
        }


class AccountCodeClassifier:
    """
    Maps account codes to price level and zone using deterministic rules.
    """

    ZONE_KEYWORDS = ("Z1", "Z2", "Z3", "B1", "B3", "AZ")

    # (substring, zone), checked in this order
    ZONE_OVERRIDES = (
        ("B1-EX", "B1"),
        ("RETAILER-Z1", "Z1"),
        ("DISTRIZ2", "Z2"),
        ("B3-Z3", "Z3"),
        ("AZ-Z1", "Z1"),
    )

    TOKEN_DELIMITERS = re.compile(r"[-/]")
    # Whole token, ASCII digits only
    FIRST_TOKEN_PATTERN = re.compile(r"(Z|B)\d*", re.ASCII)

    def classify(self, code: Optional[Any]) -> AccountCodeDetails:
        """
        Decode an account code.

        Args:
            code: Account code as entered on the ledger account

        Returns:
            AccountCodeDetails; both fields are 'N/A' for an empty code
        """
        if not code:
            return AccountCodeDetails(price_level=NOT_AVAILABLE, zone=NOT_AVAILABLE, rule="empty")

        if not isinstance(code, str):
            code = str(code)

        upper_code = code.upper()
        tokens = self.TOKEN_DELIMITERS.split(upper_code)

        for substring, zone in self.ZONE_OVERRIDES:
            if substring in upper_code:
                return AccountCodeDetails(price_level=code, zone=zone, rule=f"override:{substring}")

        for token in tokens:
            if token in self.ZONE_KEYWORDS:
                return AccountCodeDetails(price_level=code, zone=token, rule="token")

        first = tokens[0]
        if first in self.ZONE_KEYWORDS:
            return AccountCodeDetails(price_level=code, zone=first, rule="first_token")
        if self.FIRST_TOKEN_PATTERN.fullmatch(first) or first == "AZ":
            return AccountCodeDetails(price_level=code, zone=first, rule="first_token_pattern")

        logger.debug("account_code_zone_unresolved", account_code=code)
        return AccountCodeDetails(price_level=code, zone=NOT_AVAILABLE, rule="none")

    def classify_account(self, account: LedgerAccount) -> LedgerAccount:
        """
        Fill in price level and zone on a ledger account that arrived without them.

        Values already stored on the account are kept.
        """
        if account.price_level and account.zone:
            return account

        details = self.classify(account.account_code)
        return account.model_copy(update={
            "price_level": account.price_level or details.price_level,
            "zone": account.zone or details.zone,
        })


# Singleton instance
account_code_classifier = AccountCodeClassifier()


def parse_account_code_details(code: Optional[Any]) -> AccountCodeDetails:
    """Module-level shortcut for AccountCodeClassifier.classify."""
    return account_code_classifier.classify(code)


def classify_ledger_account(account: LedgerAccount) -> LedgerAccount:
    """Module-level shortcut for AccountCodeClassifier.classify_account."""
    return account_code_classifier.classify_account(account)
