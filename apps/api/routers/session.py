"""
Session API Router
Login by user id, logout, and the current user's accessible sections
"""
import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from apps.api.dependencies import get_session
from packages.common.schemas.responses import LoginRequest, SessionResponse
from packages.common.session import AuthenticationError, SessionContext

logger = structlog.get_logger()
router = APIRouter()


def _describe(session: SessionContext, message: str = None) -> SessionResponse:
    return SessionResponse(
        authenticated=session.is_authenticated,
        user=session.user,
        sections=session.accessible_sections(),
        message=message,
    )


@router.post("/login", response_model=SessionResponse)
async def login(request: LoginRequest) -> SessionResponse:
    """
    Check a user id against the directory.

    The client keeps the returned id and sends it as X-User-Id on later calls.
    """
    session = SessionContext()
    try:
        user = session.login(request.user_id)
    except AuthenticationError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    return _describe(session, message=f"Welcome, {user.name}")


@router.post("/logout", response_model=SessionResponse)
async def logout(session: SessionContext = Depends(get_session)) -> SessionResponse:
    session.logout()
    return _describe(session, message="Logged out")


@router.get("/me", response_model=SessionResponse)
async def current_session(session: SessionContext = Depends(get_session)) -> SessionResponse:
    return _describe(session)
