"""Authentication endpoints.

POST /api/v1/auth/register — create an account (201 | 400 | 409)
POST /api/v1/auth/login    — exchange email/password for a session token
GET  /api/v1/auth/me       — the current identity
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel
from sqlmodel import Session

from app.api.deps import Identity, get_identity
from app.config import get_session_secret, settings
from app.db.database import get_session
from app.engines.accounts.service import AccountService
from app.models.user import UserPublic
from app.security.session_token import issue_session_token

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


class RegisterResponse(BaseModel):
    message: str
    user: UserPublic


class LoginResponse(BaseModel):
    token: str
    expires_in_seconds: int
    user: UserPublic


@router.post("/register", response_model=RegisterResponse, status_code=201)
def register(
    payload: dict[str, Any] = Body(...),
    session: Session = Depends(get_session),
) -> RegisterResponse:
    """Register a new user. Errors surface the first validation message."""
    user = AccountService(session).register(payload)
    return RegisterResponse(message="User created successfully", user=UserPublic.from_user(user))


@router.post("/login", response_model=LoginResponse)
def login(
    payload: dict[str, Any] = Body(...),
    session: Session = Depends(get_session),
) -> LoginResponse:
    """Issue a signed session token for valid credentials."""
    user = AccountService(session).authenticate(payload)
    token = issue_session_token(
        secret=get_session_secret(),
        user_id=user.id,
        ttl_seconds=settings.session_ttl_seconds,
    )
    return LoginResponse(
        token=token,
        expires_in_seconds=settings.session_ttl_seconds,
        user=UserPublic.from_user(user),
    )


@router.get("/me", response_model=UserPublic)
def me(
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
) -> UserPublic:
    return UserPublic.from_user(AccountService(session).get_user(identity.user_id))
