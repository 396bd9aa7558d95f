"""Authorization gate for tasks.

view          creator or assignee
edit, delete  creator only
status change any authenticated identity

The status rule is deliberately loose: the UI only offers quick actions to
participants, but nothing server-side restricts them to the assignee.
"""

from __future__ import annotations

from app.errors import AuthorizationError
from app.models.task import Task


def can_view(identity: str, task: Task) -> bool:
    return identity in (task.creator_id, task.assignee_id)


def can_edit(identity: str, task: Task) -> bool:
    return identity == task.creator_id


def can_delete(identity: str, task: Task) -> bool:
    return identity == task.creator_id


def can_change_status(identity: str, task: Task) -> bool:
    return bool(identity)


def require_view(identity: str, task: Task) -> None:
    if not can_view(identity, task):
        raise AuthorizationError("You do not have access to this task")


def require_edit(identity: str, task: Task) -> None:
    if not can_edit(identity, task):
        raise AuthorizationError("Only the task creator can edit this task")


def require_delete(identity: str, task: Task) -> None:
    if not can_delete(identity, task):
        raise AuthorizationError("Only the task creator can delete this task")


def require_change_status(identity: str, task: Task) -> None:
    if not can_change_status(identity, task):
        raise AuthorizationError("You must be signed in to change task status")
