"""Taskflow FastAPI Application.

Entry point for the backend server.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.health import VERSION
from app.api.health import router as health_router
from app.api.v1.auth import router as auth_router
from app.api.v1.dashboard import router as dashboard_router
from app.api.v1.notifications import router as notifications_router
from app.api.v1.profile import router as profile_router
from app.api.v1.tasks import router as tasks_router
from app.config import get_session_secret, settings
from app.db.database import create_db_and_tables
from app.errors import TaskflowError
from app.middleware.auth import SessionAuthMiddleware

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(levelname)s %(name)s %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    configure_logging()
    create_db_and_tables()
    get_session_secret()  # Warn early when running with an ephemeral secret
    logger.info("Taskflow started (database=%s)", settings.database_url.split("://", 1)[0])
    yield
    logger.info("Taskflow stopped")


app = FastAPI(
    title="Taskflow",
    description="Multi-user task tracking with assignments and notifications",
    version=VERSION,
    lifespan=lifespan,
)

# Middleware (order matters: first added = innermost)
app.add_middleware(SessionAuthMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)


@app.exception_handler(TaskflowError)
async def taskflow_error_handler(request: Request, exc: TaskflowError):
    if exc.status_code >= 500:
        logger.error("%s on %s %s", exc.message, request.method, request.url.path)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Anything unhandled becomes a generic 500
@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    if isinstance(exc, HTTPException):
        raise exc
    logger.error("Unhandled exception on %s %s: %s", request.method, request.url.path, exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error."},
    )


# Routes
app.include_router(health_router)
app.include_router(auth_router)
app.include_router(profile_router)
app.include_router(tasks_router)
app.include_router(dashboard_router)
app.include_router(notifications_router)


@app.get("/")
async def root():
    return {"name": "Taskflow", "version": VERSION, "status": "running"}
