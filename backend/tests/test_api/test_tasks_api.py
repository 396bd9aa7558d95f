"""Tests for the tasks API: CRUD, permissions, status commands, listing."""

import os
import sys
from datetime import datetime, timedelta, timezone
from uuid import uuid4

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))
os.environ.setdefault("DATABASE_URL", "sqlite:///test.db")

from app.db.database import create_db_and_tables
from app.main import app
from fastapi.testclient import TestClient


def _client():
    create_db_and_tables()
    return TestClient(app)


def _signup(client, name):
    """Register and log in a fresh user. Returns (user, headers)."""
    email = f"{name.lower()}-{uuid4().hex[:10]}@example.com"
    user = client.post(
        "/api/v1/auth/register",
        json={"name": name, "email": email, "password": "correct-horse"},
    ).json()["user"]
    token = client.post(
        "/api/v1/auth/login", json={"email": email, "password": "correct-horse"}
    ).json()["token"]
    return user, {"Authorization": f"Bearer {token}"}


def _create(client, headers, **payload):
    body = {"title": "Task", "priority": "MEDIUM", **payload}
    resp = client.post("/api/v1/tasks", json=body, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


# === Create / read ===


def test_create_task_defaults():
    client = _client()
    alice, headers = _signup(client, "Alice")
    task = _create(client, headers, title="Write spec", priority="HIGH")
    assert task["status"] == "TODO"
    assert task["creator_id"] == alice["id"]
    assert task["assignee_id"] == alice["id"]
    assert task["creator"]["name"] == "Alice"
    assert task["can_edit"] is True
    assert task["quick_action"] == "mark_completed"


def test_create_task_validation_error():
    client = _client()
    _, headers = _signup(client, "Alice")
    resp = client.post("/api/v1/tasks", json={"title": "", "priority": "HIGH"}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Title is required"


def test_create_task_requires_auth():
    client = _client()
    resp = client.post("/api/v1/tasks", json={"title": "x", "priority": "LOW"})
    assert resp.status_code == 401


def test_get_task_visibility():
    client = _client()
    _, alice_h = _signup(client, "Alice")
    bob, bob_h = _signup(client, "Bob")
    _, carol_h = _signup(client, "Carol")
    task = _create(client, alice_h, assignee_id=bob["id"])

    resp = client.get(f"/api/v1/tasks/{task['id']}", headers=bob_h)
    assert resp.status_code == 200
    assert resp.json()["can_edit"] is False
    assert client.get(f"/api/v1/tasks/{task['id']}", headers=carol_h).status_code == 403
    assert client.get("/api/v1/tasks/missing", headers=alice_h).status_code == 404


def test_due_flags_in_response():
    client = _client()
    _, headers = _signup(client, "Alice")
    today = datetime.now(timezone.utc).date()
    overdue = _create(client, headers, due_date=(today - timedelta(days=3)).isoformat())
    later = _create(client, headers, due_date=(today + timedelta(days=30)).isoformat())

    assert overdue["is_overdue"] is True
    assert overdue["is_due_soon"] is False
    assert overdue["due_state"] == "overdue"
    assert later["is_overdue"] is False
    assert later["due_state"] == "scheduled"


# === Update / delete ===


def test_update_by_creator_and_reject_non_creator():
    client = _client()
    _, alice_h = _signup(client, "Alice")
    bob, bob_h = _signup(client, "Bob")
    task = _create(client, alice_h, title="Original", assignee_id=bob["id"])

    resp = client.put(
        f"/api/v1/tasks/{task['id']}", json={"title": "Hijack", "priority": "LOW"}, headers=bob_h
    )
    assert resp.status_code == 403
    assert client.get(f"/api/v1/tasks/{task['id']}", headers=alice_h).json()["title"] == "Original"

    resp = client.put(
        f"/api/v1/tasks/{task['id']}",
        json={"title": "Renamed", "priority": "HIGH", "status": "REVIEW"},
        headers=alice_h,
    )
    assert resp.status_code == 200
    assert resp.json()["title"] == "Renamed"
    assert resp.json()["status"] == "REVIEW"


def test_delete_creator_only():
    client = _client()
    _, alice_h = _signup(client, "Alice")
    bob, bob_h = _signup(client, "Bob")
    task = _create(client, alice_h, assignee_id=bob["id"])

    assert client.delete(f"/api/v1/tasks/{task['id']}", headers=bob_h).status_code == 403
    assert client.delete(f"/api/v1/tasks/{task['id']}", headers=alice_h).status_code == 204
    assert client.get(f"/api/v1/tasks/{task['id']}", headers=alice_h).status_code == 404


# === Status ===


def test_quick_actions():
    client = _client()
    _, alice_h = _signup(client, "Alice")
    bob, bob_h = _signup(client, "Bob")
    task = _create(client, alice_h, assignee_id=bob["id"])

    resp = client.post(f"/api/v1/tasks/{task['id']}/complete", headers=bob_h)
    assert resp.status_code == 200
    assert resp.json()["status"] == "COMPLETED"
    assert resp.json()["quick_action"] == "reopen"

    resp = client.post(f"/api/v1/tasks/{task['id']}/reopen", headers=bob_h)
    assert resp.json()["status"] == "TODO"


def test_status_command_endpoint():
    client = _client()
    _, headers = _signup(client, "Alice")
    task = _create(client, headers)

    resp = client.patch(
        f"/api/v1/tasks/{task['id']}/status",
        json={"command": "set_status", "status": "IN_PROGRESS"},
        headers=headers,
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "IN_PROGRESS"

    resp = client.patch(
        f"/api/v1/tasks/{task['id']}/status",
        json={"command": "set_status", "status": "DONE"},
        headers=headers,
    )
    assert resp.status_code == 400


# === List ===


def test_list_filters_and_sort():
    client = _client()
    _, headers = _signup(client, "Alice")
    _, bob_h = _signup(client, "Bob")
    _create(client, headers, title="Write spec", priority="HIGH")
    _create(client, headers, title="Water plants", priority="LOW")
    _create(client, bob_h, title="Bob private spec")

    resp = client.get("/api/v1/tasks", params={"sort": "priority-desc"}, headers=headers)
    assert resp.status_code == 200
    assert [t["title"] for t in resp.json()] == ["Write spec", "Water plants"]

    resp = client.get("/api/v1/tasks", params={"q": "SPEC"}, headers=headers)
    assert [t["title"] for t in resp.json()] == ["Write spec"]

    resp = client.get("/api/v1/tasks", params={"priority": "LOW", "status": ""}, headers=headers)
    assert [t["title"] for t in resp.json()] == ["Water plants"]


def test_list_rejects_unknown_status_filter():
    client = _client()
    _, headers = _signup(client, "Alice")
    resp = client.get("/api/v1/tasks", params={"status": "DONE"}, headers=headers)
    assert resp.status_code == 422


def test_status_change_by_non_participant_hides_task_content():
    client = _client()
    _, owner_h = _signup(client, "Owner")
    _, stranger_h = _signup(client, "Stranger")
    task = _create(client, owner_h, title="Secret merger plan", description="confidential body")

    assert client.get(f"/api/v1/tasks/{task['id']}", headers=stranger_h).status_code == 403

    for method, path, body in (
        ("post", "complete", None),
        ("post", "reopen", None),
        ("patch", "status", {"command": "set_status", "status": "REVIEW"}),
    ):
        resp = client.request(method.upper(), f"/api/v1/tasks/{task['id']}/{path}", json=body, headers=stranger_h)
        assert resp.status_code == 200
        assert set(resp.json()) == {"id", "status", "updated_at"}
        assert "Secret merger plan" not in resp.text
        assert "confidential body" not in resp.text

    # The change itself still applies
    detail = client.get(f"/api/v1/tasks/{task['id']}", headers=owner_h).json()
    assert detail["status"] == "REVIEW"
    assert detail["title"] == "Secret merger plan"
