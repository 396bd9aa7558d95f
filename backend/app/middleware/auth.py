"""Session authentication middleware.

Reads `Authorization: Bearer <session token>`, verifies it, and stores the
user id on ``request.state.user_id``. Requests without a valid token are
rejected with 401 unless the path is public.

Public paths: /health, /docs, /openapi.json, /redoc, /, register, login.
"""

from __future__ import annotations

import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from app.config import get_session_secret
from app.security.session_token import verify_session_token

logger = logging.getLogger(__name__)

_EXEMPT_PATHS = frozenset({
    "/health",
    "/docs",
    "/openapi.json",
    "/redoc",
    "/",
    "/api/v1/auth/register",
    "/api/v1/auth/login",
})


class SessionAuthMiddleware(BaseHTTPMiddleware):
    """Resolves the calling identity from a signed Bearer token."""

    async def dispatch(self, request: Request, call_next):
        request.state.user_id = None

        if request.url.path in _EXEMPT_PATHS or request.method == "OPTIONS":
            return await call_next(request)

        token = self._extract_token(request)
        if token is None:
            return JSONResponse(
                status_code=401,
                content={"detail": "Missing authentication. Use Authorization: Bearer <token>"},
            )

        user_id = verify_session_token(token=token, secret=get_session_secret())
        if user_id is None:
            logger.warning(
                "Invalid session token from %s on %s",
                request.client.host if request.client else "unknown",
                request.url.path,
            )
            return JSONResponse(
                status_code=401,
                content={"detail": "Invalid or expired session."},
            )

        request.state.user_id = user_id
        return await call_next(request)

    @staticmethod
    def _extract_token(request: Request) -> str | None:
        auth_header = request.headers.get("Authorization", "")
        if auth_header.startswith("Bearer ") and auth_header[7:].strip():
            return auth_header[7:].strip()
        return None
