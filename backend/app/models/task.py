"""Task model, its enumerations, and list/result shapes."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Literal, get_args
from uuid import uuid4

from pydantic import BaseModel, field_validator
from sqlmodel import SQLModel
from sqlmodel import Field as SQLField

TaskStatus = Literal["TODO", "IN_PROGRESS", "REVIEW", "COMPLETED"]
TaskPriority = Literal["LOW", "MEDIUM", "HIGH"]

TASK_STATUSES: tuple[str, ...] = get_args(TaskStatus)
TASK_PRIORITIES: tuple[str, ...] = get_args(TaskPriority)

# Sort rank for priority ordering; string order would put HIGH first.
PRIORITY_RANK: dict[str, int] = {"LOW": 0, "MEDIUM": 1, "HIGH": 2}

TITLE_MAX_LENGTH = 100


class Task(SQLModel, table=True):
    """A unit of work created by one user and assigned to one user."""

    __tablename__ = "task"

    id: str = SQLField(default_factory=lambda: str(uuid4()), primary_key=True)
    title: str = SQLField(max_length=TITLE_MAX_LENGTH)
    description: str = ""
    due_date: date | None = None
    priority: str = "MEDIUM"  # "LOW" | "MEDIUM" | "HIGH"
    status: str = "TODO"  # "TODO" | "IN_PROGRESS" | "REVIEW" | "COMPLETED"
    creator_id: str = SQLField(foreign_key="user.id", index=True)  # Immutable
    assignee_id: str = SQLField(foreign_key="user.id", index=True)
    created_at: datetime = SQLField(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = SQLField(default_factory=lambda: datetime.now(timezone.utc))


class TaskFilters(BaseModel):
    """Filters for the task list. Empty strings mean 'not filtered'."""

    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    query: str | None = None
    sort: str = "dueDate-asc"

    @field_validator("status", "priority", "query", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class TaskStats(BaseModel):
    """Dashboard counters for one identity."""

    assigned_open: int = 0
    created: int = 0
    overdue: int = 0
    completed: int = 0


class MutationResult(BaseModel):
    """Outcome of a task mutation. Callers check ``success``."""

    success: bool
    error: str | None = None
    error_kind: str | None = None
    task: Task | None = None

    @classmethod
    def ok(cls, task: Task | None = None) -> "MutationResult":
        return cls(success=True, task=task)

    @classmethod
    def failure(cls, error: str, kind: str) -> "MutationResult":
        return cls(success=False, error=error, error_kind=kind)
