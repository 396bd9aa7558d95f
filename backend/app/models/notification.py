"""Notification model."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal
from uuid import uuid4

from sqlmodel import SQLModel
from sqlmodel import Field as SQLField

NotificationType = Literal["TASK_ASSIGNED"]


class Notification(SQLModel, table=True):
    """An in-app message to one user. Retained indefinitely."""

    __tablename__ = "notification"

    id: str = SQLField(default_factory=lambda: str(uuid4()), primary_key=True)
    user_id: str = SQLField(foreign_key="user.id", index=True)  # Recipient
    title: str
    message: str
    type: str = "TASK_ASSIGNED"
    read: bool = False
    link_to: str | None = None
    created_at: datetime = SQLField(default_factory=lambda: datetime.now(timezone.utc))
