"""Health check endpoint — database reachability and configuration sanity."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.config import settings

router = APIRouter()

VERSION = "0.3.0"


class HealthStatus(BaseModel):
    status: str  # "healthy" | "degraded" | "unhealthy"
    version: str
    checks: dict[str, dict]
    dependencies: dict[str, str]  # Simplified view for frontend
    timestamp: datetime


@router.get("/health", response_model=HealthStatus)
async def health_check() -> HealthStatus:
    """Check the database and configuration."""
    checks: dict[str, dict] = {}
    overall_healthy = True
    has_warning = False

    # 1. Database
    try:
        from app.db.database import engine
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
            detail = engine.dialect.name
            if detail == "sqlite":
                mode = conn.execute(text("PRAGMA journal_mode")).fetchone()
                detail = f"sqlite journal_mode={mode[0]}"
            checks["database"] = {"status": "ok", "detail": detail}
    except SQLAlchemyError as e:
        checks["database"] = {"status": "error", "detail": str(e)[:100]}
        overall_healthy = False

    # 2. Session secret
    if settings.session_secret:
        checks["session_secret"] = {"status": "ok", "detail": "configured"}
    else:
        checks["session_secret"] = {
            "status": "warning",
            "detail": "SESSION_SECRET not set (sessions end on restart)",
        }
        has_warning = True

    # 3. Password hashing cost (informational)
    checks["password_hashing"] = {
        "status": "ok" if settings.bcrypt_rounds >= 10 else "warning",
        "detail": f"bcrypt rounds={settings.bcrypt_rounds}",
    }
    if settings.bcrypt_rounds < 10:
        has_warning = True

    dependencies = {name: check["status"] for name, check in checks.items()}

    if overall_healthy:
        status = "degraded" if has_warning else "healthy"
    else:
        status = "unhealthy"

    return HealthStatus(
        status=status,
        version=VERSION,
        checks=checks,
        dependencies=dependencies,
        timestamp=datetime.now(timezone.utc),
    )
