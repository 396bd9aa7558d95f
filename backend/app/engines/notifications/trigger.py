"""Notification trigger — assignment changes produce an in-app notification.

The trigger only stages the Notification on the caller's session; the task
mutation that caused it commits both in one transaction. Delivery beyond the
stored record (email, push) is not handled here.
"""

from __future__ import annotations

import logging

from sqlmodel import Session

from app.models.notification import Notification
from app.models.task import Task

logger = logging.getLogger(__name__)


def task_link(task: Task) -> str:
    return f"/tasks/{task.id}"


class NotificationTrigger:
    """Stages notifications for task events on a session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def on_assignee_changed(
        self,
        task: Task,
        previous_assignee_id: str | None,
        new_assignee_id: str,
    ) -> Notification | None:
        """Notify ``new_assignee_id`` once if the assignee actually changed.

        For a freshly created task pass the creator as the previous assignee,
        so a self-assigned task produces nothing.
        """
        if previous_assignee_id == new_assignee_id:
            return None

        notification = Notification(
            user_id=new_assignee_id,
            title="New task assigned",
            message=f'You have been assigned to "{task.title}"',
            type="TASK_ASSIGNED",
            link_to=task_link(task),
        )
        self.session.add(notification)
        logger.info(
            "Assignment notification staged task=%s from=%s to=%s",
            task.id, previous_assignee_id, new_assignee_id,
        )
        return notification
