"""Task Service — create, update, delete, and status commands.

Every mutation runs validation -> load -> authorization -> change, then a
single commit that also carries any staged notification. Mutations return a
MutationResult and never raise domain or storage errors to the caller:

    result = service.update_task(identity, task_id, payload)
    if not result.success:
        ...  # result.error is safe to show, result.error_kind picks the status

Storage failures are logged and reported with a generic message.
Concurrent updates are last-writer-wins; there is no version column.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.engines.notifications.trigger import NotificationTrigger
from app.engines.tasks import authorization
from app.engines.tasks.lifecycle import (
    INITIAL_STATUS,
    MarkCompleted,
    Reopen,
    SetStatus,
    apply_status_command,
)
from app.engines.tasks.validation import validate_create, validate_update
from app.errors import NotFoundError, TaskflowError, ValidationError
from app.models.task import MutationResult, Task
from app.models.user import User

logger = logging.getLogger(__name__)


class TaskService:
    """Write side for tasks. One instance per session."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self.trigger = NotificationTrigger(session)

    # ---- helpers ----

    def _load(self, task_id: str) -> Task:
        task = self.session.get(Task, task_id)
        if task is None:
            raise NotFoundError("Task", task_id)
        return task

    def _ensure_assignee_exists(self, user_id: str) -> None:
        if self.session.get(User, user_id) is None:
            raise ValidationError("assignee_id", "Assignee does not exist")

    def _mutate(self, failure_message: str, operation: Callable[[], Task | None]) -> MutationResult:
        try:
            task = operation()
            self.session.commit()
            if task is not None:
                self.session.refresh(task)
        except TaskflowError as e:
            self.session.rollback()
            logger.info("%s: %s (%s)", failure_message, e.message, e.kind)
            return MutationResult.failure(e.message, e.kind)
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception(failure_message)
            return MutationResult.failure(failure_message, "persistence")
        return MutationResult.ok(task)

    # ---- reads ----

    def get_task(self, identity: str, task_id: str) -> Task:
        """Load a task the identity may view. Raises NotFoundError / AuthorizationError."""
        task = self._load(task_id)
        authorization.require_view(identity, task)
        return task

    # ---- mutations ----

    def create_task(self, identity: str, payload: Any) -> MutationResult:
        """Create a task owned by ``identity``; assignee defaults to the creator."""

        def operation() -> Task:
            draft = validate_create(payload)
            assignee_id = draft.assignee_id or identity
            if assignee_id != identity:
                self._ensure_assignee_exists(assignee_id)
            task = Task(
                title=draft.title,
                description=draft.description or "",
                due_date=draft.due_date,
                priority=draft.priority,
                status=INITIAL_STATUS,
                creator_id=identity,
                assignee_id=assignee_id,
            )
            self.session.add(task)
            # Creator counts as the previous assignee: self-assignment is silent.
            self.trigger.on_assignee_changed(task, identity, assignee_id)
            return task

        result = self._mutate("Failed to create task", operation)
        if result.success and result.task is not None:
            logger.info("Task created id=%s creator=%s", result.task.id, identity)
        return result

    def update_task(self, identity: str, task_id: str, payload: Any) -> MutationResult:
        """Replace editable fields. Creator only."""

        def operation() -> Task:
            update = validate_update(payload)
            task = self._load(task_id)
            authorization.require_edit(identity, task)

            changes = update.changes()
            previous_assignee = task.assignee_id
            new_assignee = changes.get("assignee_id", previous_assignee)
            if new_assignee != previous_assignee:
                self._ensure_assignee_exists(new_assignee)

            for key, value in changes.items():
                setattr(task, key, value)
            task.updated_at = datetime.now(timezone.utc)
            self.session.add(task)
            self.trigger.on_assignee_changed(task, previous_assignee, task.assignee_id)
            return task

        return self._mutate("Failed to update task", operation)

    def delete_task(self, identity: str, task_id: str) -> MutationResult:
        """Delete a task. Creator only."""

        def operation() -> None:
            task = self._load(task_id)
            authorization.require_delete(identity, task)
            self.session.delete(task)
            logger.info("Task deleted id=%s by=%s", task_id, identity)
            return None

        return self._mutate("Failed to delete task", operation)

    def change_status(
        self,
        identity: str,
        task_id: str,
        command: SetStatus | MarkCompleted | Reopen,
    ) -> MutationResult:
        """Apply a status command. Any status may follow any status."""

        def operation() -> Task:
            task = self._load(task_id)
            authorization.require_change_status(identity, task)
            previous = apply_status_command(task, command)
            self.session.add(task)
            logger.info("Task status id=%s %s -> %s by=%s", task.id, previous, task.status, identity)
            return task

        return self._mutate("Failed to update task status", operation)

    def mark_completed(self, identity: str, task_id: str) -> MutationResult:
        return self.change_status(identity, task_id, MarkCompleted())

    def reopen(self, identity: str, task_id: str) -> MutationResult:
        return self.change_status(identity, task_id, Reopen())
