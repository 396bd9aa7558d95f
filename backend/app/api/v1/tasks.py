"""Tasks API endpoints.

GET    /api/v1/tasks                  — list visible tasks (?status=&priority=&q=&sort=)
POST   /api/v1/tasks                  — create a task
GET    /api/v1/tasks/{id}             — task detail (creator or assignee)
PUT    /api/v1/tasks/{id}             — edit a task (creator only)
DELETE /api/v1/tasks/{id}             — delete a task (creator only)
PATCH  /api/v1/tasks/{id}/status      — status command {"command": ..., "status": ...}
POST   /api/v1/tasks/{id}/complete    — quick action: mark completed
POST   /api/v1/tasks/{id}/reopen      — quick action: reopen

Listing fails open: a storage error yields [] and is only visible in logs.
Any signed-in user may change a status, but only participants get the task
detail back; everyone else gets {id, status, updated_at}.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Sequence

from fastapi import APIRouter, Body, Depends, Query
from pydantic import BaseModel
from sqlmodel import Session, col, select

from app.api.deps import Identity, get_identity, raise_for_result
from app.config import settings
from app.db.database import get_session
from app.engines.tasks import authorization
from app.engines.tasks.due_dates import due_state, is_due_soon, is_overdue, utc_today
from app.engines.tasks.lifecycle import parse_status_command, quick_action_for
from app.engines.tasks.query import TaskQueryEngine
from app.engines.tasks.service import TaskService
from app.errors import PersistenceError
from app.models.task import Task, TaskFilters
from app.models.user import User, UserSummary

router = APIRouter(prefix="/api/v1", tags=["tasks"])

_STATUS_PATTERN = r"^(TODO|IN_PROGRESS|REVIEW|COMPLETED|)$"
_PRIORITY_PATTERN = r"^(LOW|MEDIUM|HIGH|)$"


# === Response Models ===


class TaskResponse(BaseModel):
    """A task with participant summaries and derived due-date flags."""

    id: str
    title: str
    description: str
    due_date: date | None = None
    priority: str
    status: str
    creator_id: str
    assignee_id: str
    created_at: datetime
    updated_at: datetime
    creator: UserSummary | None = None
    assignee: UserSummary | None = None
    is_overdue: bool = False
    is_due_soon: bool = False
    due_state: str = "unscheduled"


class TaskDetailResponse(TaskResponse):
    """Task detail with what the caller may do with it."""

    can_edit: bool
    can_delete: bool
    quick_action: str


class TaskStatusResponse(BaseModel):
    """Status change outcome for a caller who may not view the task."""

    id: str
    status: str
    updated_at: datetime


def _user_summaries(session: Session, user_ids: set[str]) -> dict[str, UserSummary]:
    if not user_ids:
        return {}
    users = session.exec(select(User).where(col(User.id).in_(user_ids))).all()
    return {u.id: UserSummary(id=u.id, name=u.name, image=u.image) for u in users}


def _to_response(task: Task, users: dict[str, UserSummary], today: date) -> dict:
    window = settings.due_soon_days
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "due_date": task.due_date,
        "priority": task.priority,
        "status": task.status,
        "creator_id": task.creator_id,
        "assignee_id": task.assignee_id,
        "created_at": task.created_at,
        "updated_at": task.updated_at,
        "creator": users.get(task.creator_id),
        "assignee": users.get(task.assignee_id),
        "is_overdue": is_overdue(task, today),
        "is_due_soon": is_due_soon(task, today, window) and not is_overdue(task, today),
        "due_state": due_state(task, today, window),
    }


def build_task_responses(session: Session, tasks: Sequence[Task]) -> list[TaskResponse]:
    """Shape tasks for the API, loading participant summaries in one query."""
    today = utc_today()
    users = _user_summaries(session, {t.creator_id for t in tasks} | {t.assignee_id for t in tasks})
    return [TaskResponse(**_to_response(t, users, today)) for t in tasks]


def _detail(session: Session, identity: Identity, task: Task) -> TaskDetailResponse:
    users = _user_summaries(session, {task.creator_id, task.assignee_id})
    return TaskDetailResponse(
        **_to_response(task, users, utc_today()),
        can_edit=authorization.can_edit(identity.user_id, task),
        can_delete=authorization.can_delete(identity.user_id, task),
        quick_action=quick_action_for(task.status),
    )


def _status_view(
    session: Session, identity: Identity, task: Task
) -> TaskDetailResponse | TaskStatusResponse:
    if authorization.can_view(identity.user_id, task):
        return _detail(session, identity, task)
    return TaskStatusResponse(id=task.id, status=task.status, updated_at=task.updated_at)


def _result_task(result) -> Task:
    raise_for_result(result)
    if result.task is None:
        raise PersistenceError("Task missing from mutation result")
    return result.task


# === Endpoints ===


@router.get("/tasks", response_model=list[TaskResponse])
def list_tasks(
    status: str | None = Query(default=None, pattern=_STATUS_PATTERN),
    priority: str | None = Query(default=None, pattern=_PRIORITY_PATTERN),
    q: str | None = Query(default=None, max_length=200),
    sort: str | None = Query(default=None, max_length=40),
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
) -> list[TaskResponse]:
    """List tasks the caller created or is assigned to."""
    filters = TaskFilters(
        status=status,
        priority=priority,
        query=q,
        sort=sort or settings.default_task_sort,
    )
    tasks = TaskQueryEngine(session).list_tasks(identity.user_id, filters)
    return build_task_responses(session, tasks)


@router.post("/tasks", response_model=TaskDetailResponse, status_code=201)
def create_task(
    payload: dict[str, Any] = Body(...),
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
) -> TaskDetailResponse:
    result = TaskService(session).create_task(identity.user_id, payload)
    return _detail(session, identity, _result_task(result))


@router.get("/tasks/{task_id}", response_model=TaskDetailResponse)
def get_task(
    task_id: str,
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
) -> TaskDetailResponse:
    task = TaskService(session).get_task(identity.user_id, task_id)
    return _detail(session, identity, task)


@router.put("/tasks/{task_id}", response_model=TaskDetailResponse)
def update_task(
    task_id: str,
    payload: dict[str, Any] = Body(...),
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
) -> TaskDetailResponse:
    result = TaskService(session).update_task(identity.user_id, task_id, payload)
    return _detail(session, identity, _result_task(result))


@router.delete("/tasks/{task_id}", status_code=204)
def delete_task(
    task_id: str,
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
) -> None:
    raise_for_result(TaskService(session).delete_task(identity.user_id, task_id))


@router.patch("/tasks/{task_id}/status", response_model=TaskDetailResponse | TaskStatusResponse)
def change_status(
    task_id: str,
    payload: dict[str, Any] = Body(...),
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
) -> TaskDetailResponse | TaskStatusResponse:
    command = parse_status_command(payload)
    result = TaskService(session).change_status(identity.user_id, task_id, command)
    return _status_view(session, identity, _result_task(result))


@router.post("/tasks/{task_id}/complete", response_model=TaskDetailResponse | TaskStatusResponse)
def mark_completed(
    task_id: str,
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
) -> TaskDetailResponse | TaskStatusResponse:
    result = TaskService(session).mark_completed(identity.user_id, task_id)
    return _status_view(session, identity, _result_task(result))


@router.post("/tasks/{task_id}/reopen", response_model=TaskDetailResponse | TaskStatusResponse)
def reopen(
    task_id: str,
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
) -> TaskDetailResponse | TaskStatusResponse:
    result = TaskService(session).reopen(identity.user_id, task_id)
    return _status_view(session, identity, _result_task(result))
