"""Task lifecycle — status commands.

Status is an unconstrained field: any status may be set from any status via
SetStatus. MarkCompleted and Reopen are the two quick actions and are pure
sugar for SetStatus(COMPLETED) and SetStatus(TODO). No transition graph is
enforced; COMPLETED is not terminal.

    TODO -> IN_PROGRESS -> REVIEW -> COMPLETED
      ^                                  |
      +------------- reopen -------------+
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from app.errors import ValidationError
from app.models.task import TASK_STATUSES, Task, TaskStatus

INITIAL_STATUS: TaskStatus = "TODO"

QuickAction = Literal["mark_completed", "reopen"]


class SetStatus(BaseModel):
    command: Literal["set_status"] = "set_status"
    status: TaskStatus


class MarkCompleted(BaseModel):
    command: Literal["mark_completed"] = "mark_completed"


class Reopen(BaseModel):
    command: Literal["reopen"] = "reopen"


StatusCommand = Annotated[
    Union[SetStatus, MarkCompleted, Reopen],
    Field(discriminator="command"),
]


def resolve_status(command: SetStatus | MarkCompleted | Reopen) -> TaskStatus:
    """Target status of a command."""
    if isinstance(command, MarkCompleted):
        return "COMPLETED"
    if isinstance(command, Reopen):
        return "TODO"
    return command.status


def apply_status_command(
    task: Task,
    command: SetStatus | MarkCompleted | Reopen,
    now: datetime | None = None,
) -> TaskStatus:
    """Set the task's status and refresh updated_at. Returns the previous status."""
    previous = task.status
    task.status = resolve_status(command)
    task.updated_at = now or datetime.now(timezone.utc)
    return previous


def quick_action_for(status: str) -> QuickAction:
    """Shortcut offered for a task in ``status``."""
    return "reopen" if status == "COMPLETED" else "mark_completed"


_COMMAND_ADAPTER: TypeAdapter = TypeAdapter(StatusCommand)
COMMAND_NAMES = ("set_status", "mark_completed", "reopen")


def parse_status_command(payload: Any) -> SetStatus | MarkCompleted | Reopen:
    """Parse {"command": ..., "status": ...}. Raises ValidationError."""
    try:
        return _COMMAND_ADAPTER.validate_python(payload)
    except PydanticValidationError as e:
        loc = e.errors()[0].get("loc") or ()
        if loc and loc[-1] == "status":
            raise ValidationError(
                "status", f"Status must be one of {', '.join(TASK_STATUSES)}"
            ) from None
        raise ValidationError(
            "command", f"Command must be one of {', '.join(COMMAND_NAMES)}"
        ) from None
