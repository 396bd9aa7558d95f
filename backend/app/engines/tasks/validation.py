"""Task payload validation — create and update drafts.

Pydantic does the parsing; this module reduces pydantic's error list to the
first failure (in field order) and turns it into a readable message, so the
caller surfaces exactly one ValidationError.
"""

from __future__ import annotations

from datetime import date
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, StringConstraints, field_validator
from pydantic import ValidationError as PydanticValidationError

from app.errors import ValidationError
from app.models.task import (
    TASK_PRIORITIES,
    TASK_STATUSES,
    TITLE_MAX_LENGTH,
    TaskPriority,
    TaskStatus,
)

Title = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1, max_length=TITLE_MAX_LENGTH),
]

_LABELS = {
    "title": "Title",
    "description": "Description",
    "due_date": "Due date",
    "priority": "Priority",
    "status": "Status",
    "assignee_id": "Assignee",
}

_CHOICES = {
    "priority": TASK_PRIORITIES,
    "status": TASK_STATUSES,
}


class _TaskFields(BaseModel):
    model_config = ConfigDict(extra="ignore")

    @field_validator("due_date", "assignee_id", mode="before", check_fields=False)
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class TaskDraft(_TaskFields):
    """A validated task creation payload."""

    title: Title
    description: str | None = None
    due_date: date | None = None
    priority: TaskPriority
    assignee_id: str | None = None  # None = assign to creator


class TaskUpdate(_TaskFields):
    """A validated task update payload.

    title and priority are always required. Omitted optional fields are left
    unchanged; an explicit null/empty description or due date clears it.
    """

    title: Title
    description: str | None = None
    due_date: date | None = None
    priority: TaskPriority
    status: TaskStatus | None = None  # None = keep current status
    assignee_id: str | None = None  # None = keep current assignee

    def changes(self) -> dict[str, Any]:
        """Field values to write onto the stored task."""
        out: dict[str, Any] = {"title": self.title, "priority": self.priority}
        provided = self.model_fields_set
        if "description" in provided:
            out["description"] = self.description or ""
        if "due_date" in provided:
            out["due_date"] = self.due_date
        if self.status is not None:
            out["status"] = self.status
        if self.assignee_id is not None:
            out["assignee_id"] = self.assignee_id
        return out


def _describe(error: dict) -> tuple[str, str]:
    """Turn one pydantic error dict into (field, message)."""
    loc = error.get("loc") or ()
    field = str(loc[0]) if loc else "payload"
    label = _LABELS.get(field, field)
    etype = error.get("type", "")
    ctx = error.get("ctx") or {}

    if etype in ("missing", "string_too_short"):
        return field, f"{label} is required"
    if etype == "string_too_long":
        return field, f"{label} must be at most {ctx.get('max_length', TITLE_MAX_LENGTH)} characters"
    if etype in ("literal_error", "enum") and field in _CHOICES:
        return field, f"{label} must be one of {', '.join(_CHOICES[field])}"
    if etype.startswith("date"):
        return field, f"{label} must be a valid date"
    if etype == "string_type":
        return field, f"{label} must be a string"
    return field, f"{label} is invalid"


def _parse(model: type[BaseModel], payload: Any) -> Any:
    if not isinstance(payload, dict):
        raise ValidationError("payload", "Request body must be an object")
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        field, message = _describe(e.errors()[0])
        raise ValidationError(field, message) from None


def validate_create(payload: Any) -> TaskDraft:
    """Validate a task creation payload. Raises ValidationError (first failure)."""
    return _parse(TaskDraft, payload)


def validate_update(payload: Any) -> TaskUpdate:
    """Validate a task update payload. Raises ValidationError (first failure)."""
    return _parse(TaskUpdate, payload)
