"""Notifications API endpoints.

GET  /api/v1/notifications            — newest first, with unread count
POST /api/v1/notifications/{id}/read  — mark one read (recipient only)
POST /api/v1/notifications/read-all   — mark all read
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlmodel import Session

from app.api.deps import Identity, get_identity
from app.config import settings
from app.db.database import get_session
from app.engines.notifications.inbox import NotificationInbox
from app.models.notification import Notification

router = APIRouter(prefix="/api/v1", tags=["notifications"])


class NotificationResponse(BaseModel):
    id: str
    title: str
    message: str
    type: str
    read: bool
    link_to: str | None = None
    created_at: datetime


class NotificationListResponse(BaseModel):
    unread_count: int
    notifications: list[NotificationResponse]


class MarkAllReadResponse(BaseModel):
    updated: int


def _to_response(n: Notification) -> NotificationResponse:
    return NotificationResponse(
        id=n.id,
        title=n.title,
        message=n.message,
        type=n.type,
        read=n.read,
        link_to=n.link_to,
        created_at=n.created_at,
    )


@router.get("/notifications", response_model=NotificationListResponse)
def list_notifications(
    limit: int | None = Query(default=None, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
) -> NotificationListResponse:
    inbox = NotificationInbox(session)
    items = inbox.list_for(
        identity.user_id,
        limit=limit or settings.notifications_page_size,
        offset=offset,
    )
    return NotificationListResponse(
        unread_count=inbox.unread_count(identity.user_id),
        notifications=[_to_response(n) for n in items],
    )


@router.post("/notifications/read-all", response_model=MarkAllReadResponse)
def mark_all_read(
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
) -> MarkAllReadResponse:
    return MarkAllReadResponse(updated=NotificationInbox(session).mark_all_read(identity.user_id))


@router.post("/notifications/{notification_id}/read", response_model=NotificationResponse)
def mark_read(
    notification_id: str,
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
) -> NotificationResponse:
    return _to_response(NotificationInbox(session).mark_read(identity.user_id, notification_id))
