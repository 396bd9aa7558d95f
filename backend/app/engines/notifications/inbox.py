"""Notification inbox — read side and read-state updates for one recipient."""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import func
from sqlmodel import Session, col, select

from app.errors import AuthorizationError, NotFoundError
from app.models.notification import Notification


class NotificationInbox:
    """Operations on the notifications addressed to an identity."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_for(self, identity: str, limit: int = 50, offset: int = 0) -> Sequence[Notification]:
        """Newest first."""
        statement = (
            select(Notification)
            .where(Notification.user_id == identity)
            .order_by(col(Notification.created_at).desc())
            .offset(offset)
            .limit(limit)
        )
        return self.session.exec(statement).all()

    def unread_count(self, identity: str) -> int:
        statement = (
            select(func.count())
            .select_from(Notification)
            .where(Notification.user_id == identity, col(Notification.read).is_(False))
        )
        return int(self.session.exec(statement).one())

    def mark_read(self, identity: str, notification_id: str) -> Notification:
        """Mark one notification read. Only its recipient may do this."""
        notification = self.session.get(Notification, notification_id)
        if notification is None:
            raise NotFoundError("Notification", notification_id)
        if notification.user_id != identity:
            raise AuthorizationError("This notification belongs to another user")
        if not notification.read:
            notification.read = True
            self.session.add(notification)
            self.session.commit()
            self.session.refresh(notification)
        return notification

    def mark_all_read(self, identity: str) -> int:
        """Mark every unread notification of ``identity`` read. Returns how many changed."""
        statement = select(Notification).where(
            Notification.user_id == identity, col(Notification.read).is_(False)
        )
        unread = self.session.exec(statement).all()
        for notification in unread:
            notification.read = True
            self.session.add(notification)
        self.session.commit()
        return len(unread)
