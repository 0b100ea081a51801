"""
User session middleware.
Resolves the X-User-Id header into a SessionContext on request.state.
The header is trusted as sent, so it must be set by a trusted front end or
proxy and never passed through from end users.
"""
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from packages.common.session import SessionContext, find_user

USER_ID_HEADER = "x-user-id"


class UserSessionMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, header_name: str = USER_ID_HEADER):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next):
        # Unknown ids leave the session unauthenticated; routes decide what that means
        request.state.session = SessionContext(find_user(request.headers.get(self.header_name)))
        response = await call_next(request)
        return response
