"""User model and the public views of it."""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel
from sqlmodel import SQLModel
from sqlmodel import Field as SQLField


class User(SQLModel, table=True):
    """A registered account. Never hard-deleted."""

    __tablename__ = "user"

    id: str = SQLField(default_factory=lambda: str(uuid4()), primary_key=True)
    name: str
    email: str = SQLField(index=True, unique=True)  # Stored lower-cased
    password_hash: str
    image: str | None = None
    created_at: datetime = SQLField(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = SQLField(default_factory=lambda: datetime.now(timezone.utc))


class UserPublic(BaseModel):
    """A user without credentials."""

    id: str
    name: str
    email: str
    image: str | None = None

    @classmethod
    def from_user(cls, user: User) -> "UserPublic":
        return cls(id=user.id, name=user.name, email=user.email, image=user.image)


class UserSummary(BaseModel):
    """Just enough to render an avatar or a picker entry."""

    id: str
    name: str
    image: str | None = None
