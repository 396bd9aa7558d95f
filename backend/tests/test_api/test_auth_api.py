"""Tests for registration, login, profile, and user directory endpoints."""

import os
import sys
from uuid import uuid4

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))
os.environ.setdefault("DATABASE_URL", "sqlite:///test.db")

from app.db.database import create_db_and_tables
from app.main import app
from fastapi.testclient import TestClient


def _client():
    create_db_and_tables()
    return TestClient(app)


def _email(prefix="user"):
    return f"{prefix}-{uuid4().hex[:10]}@example.com"


def _register(client, name="Alice", email=None, password="correct-horse"):
    email = email or _email(name.lower())
    resp = client.post("/api/v1/auth/register", json={"name": name, "email": email, "password": password})
    return resp, email


def _login(client, email, password="correct-horse"):
    return client.post("/api/v1/auth/login", json={"email": email, "password": password})


# === Register ===


def test_register_returns_201_without_password():
    client = _client()
    resp, email = _register(client)
    assert resp.status_code == 201
    body = resp.json()
    assert body["message"] == "User created successfully"
    assert body["user"]["email"] == email
    assert "password" not in body["user"]
    assert "password_hash" not in body["user"]


def test_register_duplicate_returns_409():
    client = _client()
    _, email = _register(client)
    resp, _ = _register(client, name="Other", email=email.upper())
    assert resp.status_code == 409
    assert resp.json()["detail"] == "User with this email already exists"


def test_register_validation_returns_400_first_error():
    client = _client()
    resp = client.post("/api/v1/auth/register", json={"name": "A", "email": "bad", "password": "x"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Name must be at least 2 characters"


# === Login ===


def test_login_returns_token():
    client = _client()
    _, email = _register(client)
    resp = _login(client, email)
    assert resp.status_code == 200
    body = resp.json()
    assert body["token"]
    assert body["expires_in_seconds"] > 0
    assert body["user"]["email"] == email


def test_login_wrong_password_returns_401():
    client = _client()
    _, email = _register(client)
    resp = _login(client, email, password="wrong-password")
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid email or password"


def test_me_with_token():
    client = _client()
    _, email = _register(client)
    token = _login(client, email).json()["token"]
    resp = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    assert resp.json()["email"] == email


# === Profile ===


def test_profile_update_and_email_conflict():
    client = _client()
    _, email = _register(client)
    _, taken = _register(client, name="Bob")
    headers = {"Authorization": f"Bearer {_login(client, email).json()['token']}"}

    resp = client.patch("/api/v1/profile", json={"name": "Alice Renamed", "email": email}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["user"]["name"] == "Alice Renamed"

    resp = client.patch("/api/v1/profile", json={"name": "Alice", "email": taken}, headers=headers)
    assert resp.status_code == 409
    assert resp.json()["detail"] == "Email already in use"


def test_profile_password_change_requires_current_password():
    client = _client()
    _, email = _register(client)
    headers = {"Authorization": f"Bearer {_login(client, email).json()['token']}"}

    resp = client.patch(
        "/api/v1/profile",
        json={"name": "Alice", "email": email, "new_password": "new-password-1"},
        headers=headers,
    )
    assert resp.status_code == 400

    resp = client.patch(
        "/api/v1/profile",
        json={
            "name": "Alice",
            "email": email,
            "current_password": "correct-horse",
            "new_password": "new-password-1",
        },
        headers=headers,
    )
    assert resp.status_code == 200
    assert _login(client, email, password="new-password-1").status_code == 200


def test_users_directory():
    client = _client()
    _, email = _register(client)
    headers = {"Authorization": f"Bearer {_login(client, email).json()['token']}"}
    resp = client.get("/api/v1/users", headers=headers)
    assert resp.status_code == 200
    entries = resp.json()
    assert any(u["name"] == "Alice" for u in entries)
    assert all("email" not in u for u in entries)
