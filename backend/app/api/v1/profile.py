"""Profile and user directory endpoints.

PATCH /api/v1/profile — update name/email/password (200 | 400 | 401 | 404 | 409 | 500)
GET   /api/v1/users   — all users by name (assignee picker)
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel
from sqlmodel import Session

from app.api.deps import Identity, get_identity
from app.db.database import get_session
from app.engines.accounts.service import AccountService
from app.models.user import UserPublic, UserSummary

router = APIRouter(prefix="/api/v1", tags=["profile"])


class ProfileResponse(BaseModel):
    message: str
    user: UserPublic


@router.patch("/profile", response_model=ProfileResponse)
def update_profile(
    payload: dict[str, Any] = Body(...),
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
) -> ProfileResponse:
    user = AccountService(session).update_profile(identity.user_id, payload)
    return ProfileResponse(message="Profile updated successfully", user=UserPublic.from_user(user))


@router.get("/users", response_model=list[UserSummary])
def list_users(
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
) -> list[UserSummary]:
    return [
        UserSummary(id=u.id, name=u.name, image=u.image)
        for u in AccountService(session).list_users()
    ]
