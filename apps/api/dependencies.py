"""
Shared FastAPI dependencies - upstream client, session, section guards, list filters
"""
from datetime import date
from typing import Callable, Optional

import structlog
from fastapi import Depends, HTTPException, Query, Request, status

from packages.common.busa_client import BusaApiClient, Resource
from packages.common.config import get_settings
from packages.common.session import SessionContext
from packages.domain.listing.collection import RecordCollection
from packages.domain.listing.filters import ListQuery, RecordView

logger = structlog.get_logger()


def get_busa_client(request: Request) -> BusaApiClient:
    """Client opened by the application lifespan"""
    return request.app.state.busa_client


def get_session(request: Request) -> SessionContext:
    session = getattr(request.state, "session", None)
    return session if session is not None else SessionContext()


def require_section(section: str) -> Callable[..., SessionContext]:
    """
    Guard a route behind a sidebar section.

    401 without a known user, 403 when the user's role may not open the section.
    """
    def guard(request: Request, session: SessionContext = Depends(get_session)) -> SessionContext:
        if get_settings().skip_auth_validation:
            return session
        if not session.is_authenticated:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Login required",
            )
        if not session.can_access(section):
            logger.warning("section_access_denied",
                           section=section,
                           user_id=session.user.id,
                           role=session.role.value,
                           path=request.url.path)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role {session.role.value} may not access {section}",
            )
        return session

    return guard


def list_query(
    search: Optional[str] = Query(None, description="Case-insensitive text search"),
    date_from: Optional[date] = Query(None, description="Inclusive start day (YYYY-MM-DD)"),
    date_to: Optional[date] = Query(None, description="Inclusive end day (YYYY-MM-DD)"),
) -> ListQuery:
    return ListQuery(search=search, date_from=date_from, date_to=date_to)


async def load_collection(client: BusaApiClient, resource: Resource, view: RecordView) -> RecordCollection:
    """Fresh collection of one resource, fetched for this request"""
    collection = RecordCollection(client, resource, view)
    await collection.refresh()
    return collection
