"""
Session context - who is using the application and what they may see

Identity is an explicit object: created empty, filled at login, cleared at
logout. Callers pass it to whatever needs to know the user.
"""
from enum import Enum
from typing import Dict, FrozenSet, Optional

import structlog
from pydantic import BaseModel

logger = structlog.get_logger()


class UserRole(str, Enum):
    FINANCE = "Finance"
    SALES_COORDINATOR = "SalesCoordinator"
    PURCHASES = "Purchases"
    STORE = "Store"
    ADMIN = "Admin"


class User(BaseModel):
    id: str
    name: str
    role: UserRole


KNOWN_USERS = (
    User(id="FIN001", name="Hannatu Finance", role=UserRole.FINANCE),
    User(id="FIN002", name="Ruqayyah Accounts", role=UserRole.FINANCE),
    User(id="SALES001", name="Zainab SalesCoord", role=UserRole.SALES_COORDINATOR),
    User(id="SALES002", name="Sufi SalesRep", role=UserRole.SALES_COORDINATOR),
    User(id="PURCH001", name="Adam Purchases", role=UserRole.PURCHASES),
    User(id="STORE001", name="Storekeep", role=UserRole.STORE),
    User(id="ADMIN001", name="Sageer Admin", role=UserRole.ADMIN),
)

_EVERYONE = frozenset(UserRole)

# Section -> roles allowed in. Admin is allowed everywhere regardless.
SECTION_ROLES: Dict[str, FrozenSet[UserRole]] = {
    "dashboard": _EVERYONE,
    "activities": _EVERYONE,
    "sales": frozenset({UserRole.SALES_COORDINATOR}),
    "invoices": frozenset({UserRole.SALES_COORDINATOR}),
    "receipts": frozenset({UserRole.FINANCE}),
    "receipt_log": frozenset({UserRole.FINANCE}),
    "credit_notes": frozenset({UserRole.FINANCE}),
    "purchases": frozenset({UserRole.PURCHASES}),
    "products": frozenset({UserRole.SALES_COORDINATOR, UserRole.FINANCE}),
    "product_stock": frozenset({UserRole.SALES_COORDINATOR, UserRole.STORE}),
    "net_sales_report": frozenset({UserRole.SALES_COORDINATOR, UserRole.FINANCE}),
    "store": frozenset({UserRole.STORE, UserRole.PURCHASES}),
    "material_usage": frozenset({UserRole.STORE}),
    "ledger_accounts": frozenset({UserRole.SALES_COORDINATOR, UserRole.FINANCE, UserRole.PURCHASES}),
}


class AuthenticationError(Exception):
    """Login attempted with an unknown user id"""


def find_user(user_id: Optional[str]) -> Optional[User]:
    """Case-insensitive lookup in the user directory."""
    if not user_id:
        return None
    wanted = user_id.strip().lower()
    for user in KNOWN_USERS:
        if user.id.lower() == wanted:
            return user
    return None


class SessionContext:
    """Current user for one client session"""

    def __init__(self, user: Optional[User] = None):
        self._user = user

    @property
    def user(self) -> Optional[User]:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    @property
    def role(self) -> Optional[UserRole]:
        return self._user.role if self._user else None

    def login(self, user_id: str) -> User:
        user = find_user(user_id)
        if user is None:
            logger.warning("login_rejected", user_id=user_id)
            raise AuthenticationError("Invalid User ID.")
        self._user = user
        logger.info("user_logged_in", user_id=user.id, role=user.role.value)
        return user

    def logout(self) -> None:
        if self._user is not None:
            logger.info("user_logged_out", user_id=self._user.id)
        self._user = None

    def can_access(self, section: str) -> bool:
        if self._user is None:
            return False
        if self._user.role == UserRole.ADMIN:
            return True
        return self._user.role in SECTION_ROLES.get(section, frozenset())

    def accessible_sections(self) -> list:
        return [section for section in SECTION_ROLES if self.can_access(section)]
