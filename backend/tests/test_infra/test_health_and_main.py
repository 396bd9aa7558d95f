"""Tests for health endpoint, configuration, and error mapping."""

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))
os.environ.setdefault("DATABASE_URL", "sqlite:///test.db")

import asyncio
from datetime import datetime, timezone
from unittest.mock import patch

import pytest
from app.api.deps import raise_for_result
from app.api.health import VERSION, HealthStatus, health_check
from app.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from app.models.task import MutationResult
from fastapi import HTTPException

# === Health ===


def test_health_status_model():
    status = HealthStatus(
        status="healthy",
        version="0.3.0",
        checks={"database": {"status": "ok", "detail": "sqlite"}},
        dependencies={"database": "ok"},
        timestamp=datetime.now(timezone.utc),
    )
    assert status.dependencies["database"] == "ok"


def test_health_check_returns_status():
    result = asyncio.run(health_check())
    assert isinstance(result, HealthStatus)
    assert result.status in ("healthy", "degraded", "unhealthy")
    assert result.version == VERSION
    for name in ("database", "session_secret", "password_hashing"):
        assert name in result.checks
        assert name in result.dependencies
    assert result.checks["database"]["status"] == "ok"


def test_health_degraded_without_session_secret():
    with patch("app.api.health.settings") as mock_settings:
        mock_settings.session_secret = ""
        mock_settings.bcrypt_rounds = 12
        result = asyncio.run(health_check())
    assert result.checks["session_secret"]["status"] == "warning"
    assert result.status == "degraded"


# === Config ===


def test_settings_defaults():
    from app.config import Settings
    s = Settings(_env_file=None, database_url="sqlite://", session_secret="")
    assert s.due_soon_days == 2
    assert s.default_task_sort == "dueDate-asc"
    assert s.session_ttl_seconds == 7 * 24 * 3600


def test_settings_from_env():
    env = {"DUE_SOON_DAYS": "5", "RECENT_TASKS_LIMIT": "10", "LOG_LEVEL": "DEBUG"}
    with patch.dict("os.environ", env):
        from app.config import Settings
        s = Settings()
        assert s.due_soon_days == 5
        assert s.recent_tasks_limit == 10
        assert s.log_level == "DEBUG"


def test_ephemeral_session_secret_is_stable():
    import app.config as cfg
    with patch.object(cfg.settings, "session_secret", ""), patch.object(cfg, "_ephemeral_secret", None):
        first = cfg.get_session_secret()
        assert first
        assert cfg.get_session_secret() == first


# === Errors ===


@pytest.mark.parametrize(
    "error, status, kind",
    [
        (ValidationError("title", "Title is required"), 400, "validation"),
        (AuthenticationError("Invalid email or password"), 401, "authentication"),
        (AuthorizationError("nope"), 403, "authorization"),
        (NotFoundError("Task", "t1"), 404, "not_found"),
        (ConflictError("dup"), 409, "conflict"),
        (PersistenceError("boom"), 500, "persistence"),
    ],
)
def test_error_taxonomy(error, status, kind):
    assert error.status_code == status
    assert error.kind == kind


def test_not_found_message():
    assert NotFoundError("Task", "t1").message == "Task not found"


def test_raise_for_result_maps_kind():
    raise_for_result(MutationResult.ok())
    with pytest.raises(HTTPException) as exc:
        raise_for_result(MutationResult.failure("Only the task creator can edit this task", "authorization"))
    assert exc.value.status_code == 403
    assert exc.value.detail == "Only the task creator can edit this task"
