"""Dashboard endpoint — counters and recently updated tasks.

GET /api/v1/dashboard
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel import Session

from app.api.deps import Identity, get_identity
from app.api.v1.tasks import TaskResponse, build_task_responses
from app.config import settings
from app.db.database import get_session
from app.engines.tasks.query import TaskQueryEngine
from app.models.task import TaskStats

router = APIRouter(prefix="/api/v1", tags=["dashboard"])


class DashboardResponse(BaseModel):
    stats: TaskStats
    recent_tasks: list[TaskResponse]


@router.get("/dashboard", response_model=DashboardResponse)
def dashboard(
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
) -> DashboardResponse:
    engine = TaskQueryEngine(session)
    stats = engine.stats(identity.user_id)
    recent = engine.recent_tasks(identity.user_id, limit=settings.recent_tasks_limit)
    return DashboardResponse(stats=stats, recent_tasks=build_task_responses(session, recent))
