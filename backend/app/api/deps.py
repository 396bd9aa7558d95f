"""Shared FastAPI dependencies: identity and error mapping."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request
from sqlmodel import Session

from app.db.database import get_session
from app.models.task import MutationResult
from app.models.user import User


@dataclass(frozen=True)
class Identity:
    """The authenticated caller for this request."""

    user_id: str
    email: str
    name: str


def get_identity(request: Request, session: Session = Depends(get_session)) -> Identity:
    """Resolve the caller. No identity (or a vanished user) means 401."""
    user_id = getattr(request.state, "user_id", None)
    if not user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    user = session.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return Identity(user_id=user.id, email=user.email, name=user.name)


_STATUS_BY_KIND = {
    "validation": 400,
    "authentication": 401,
    "authorization": 403,
    "not_found": 404,
    "conflict": 409,
    "persistence": 500,
}


def raise_for_result(result: MutationResult) -> None:
    """Turn a failed MutationResult into an HTTPException."""
    if result.success:
        return
    status = _STATUS_BY_KIND.get(result.error_kind or "", 500)
    raise HTTPException(status_code=status, detail=result.error or "Request failed")
