"""Tests for task status commands."""

from datetime import datetime, timezone

import pytest
from app.engines.tasks.lifecycle import (
    INITIAL_STATUS,
    MarkCompleted,
    Reopen,
    SetStatus,
    apply_status_command,
    parse_status_command,
    quick_action_for,
    resolve_status,
)
from app.errors import ValidationError
from app.models.task import TASK_STATUSES, Task


def _task(status="TODO"):
    return Task(title="t", creator_id="u1", assignee_id="u1", status=status)


def test_initial_status_is_todo():
    assert INITIAL_STATUS == "TODO"


def test_quick_actions_resolve():
    assert resolve_status(MarkCompleted()) == "COMPLETED"
    assert resolve_status(Reopen()) == "TODO"
    assert resolve_status(SetStatus(status="REVIEW")) == "REVIEW"


@pytest.mark.parametrize("start", TASK_STATUSES)
@pytest.mark.parametrize("target", TASK_STATUSES)
def test_any_status_may_follow_any_status(start, target):
    task = _task(start)
    previous = apply_status_command(task, SetStatus(status=target))
    assert previous == start
    assert task.status == target


def test_completed_is_not_terminal():
    task = _task("COMPLETED")
    apply_status_command(task, Reopen())
    assert task.status == "TODO"


def test_apply_refreshes_updated_at():
    task = _task()
    now = datetime(2031, 2, 3, 4, 5, tzinfo=timezone.utc)
    apply_status_command(task, MarkCompleted(), now=now)
    assert task.updated_at == now


def test_same_status_still_refreshes_updated_at():
    task = _task("REVIEW")
    now = datetime(2031, 1, 1, tzinfo=timezone.utc)
    apply_status_command(task, SetStatus(status="REVIEW"), now=now)
    assert task.status == "REVIEW"
    assert task.updated_at == now


def test_quick_action_for():
    assert quick_action_for("COMPLETED") == "reopen"
    for status in ("TODO", "IN_PROGRESS", "REVIEW"):
        assert quick_action_for(status) == "mark_completed"


# === Parsing ===


def test_parse_commands():
    assert isinstance(parse_status_command({"command": "mark_completed"}), MarkCompleted)
    assert isinstance(parse_status_command({"command": "reopen"}), Reopen)
    cmd = parse_status_command({"command": "set_status", "status": "IN_PROGRESS"})
    assert isinstance(cmd, SetStatus)
    assert cmd.status == "IN_PROGRESS"


def test_parse_rejects_unknown_status():
    with pytest.raises(ValidationError) as exc:
        parse_status_command({"command": "set_status", "status": "DONE"})
    assert exc.value.field == "status"
    assert "TODO, IN_PROGRESS, REVIEW, COMPLETED" in exc.value.message


@pytest.mark.parametrize("payload", [{}, {"command": "archive"}, "mark_completed"])
def test_parse_rejects_unknown_command(payload):
    with pytest.raises(ValidationError) as exc:
        parse_status_command(payload)
    assert exc.value.field == "command"
