"""Derived due-date classification. Computed at read time, never stored."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Literal

from app.models.task import Task

DueState = Literal["overdue", "due_soon", "scheduled", "unscheduled"]


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def is_overdue(task: Task, today: date | None = None) -> bool:
    """Due before today and not completed."""
    if task.due_date is None or task.status == "COMPLETED":
        return False
    return task.due_date < (today or utc_today())


def is_due_soon(task: Task, today: date | None = None, window_days: int = 2) -> bool:
    """Due today or within the next ``window_days - 1`` days.

    Completion does not matter here; callers show 'due soon' only when the
    task is not overdue.
    """
    if task.due_date is None:
        return False
    today = today or utc_today()
    return today <= task.due_date < today + timedelta(days=window_days)


def due_state(task: Task, today: date | None = None, window_days: int = 2) -> DueState:
    if task.due_date is None:
        return "unscheduled"
    today = today or utc_today()
    if is_overdue(task, today):
        return "overdue"
    if is_due_soon(task, today, window_days):
        return "due_soon"
    return "scheduled"
