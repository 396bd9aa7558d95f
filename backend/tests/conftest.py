"""Shared test fixtures for Taskflow backend tests."""

import os
import sys
from uuid import uuid4

import pytest

# Ensure backend is on the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
os.environ.setdefault("DATABASE_URL", "sqlite:///test.db")
os.environ.setdefault("SESSION_SECRET", "test-session-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import app.db.database  # noqa: F401  (registers SQLite connection setup)
from app.models.notification import Notification  # noqa: F401
from app.models.task import Task  # noqa: F401
from app.models.user import User
from sqlmodel import Session, SQLModel, create_engine


@pytest.fixture
def in_memory_engine():
    engine = create_engine("sqlite:///:memory:", echo=False)
    SQLModel.metadata.create_all(engine)
    return engine


@pytest.fixture
def db_session(in_memory_engine):
    with Session(in_memory_engine) as session:
        yield session


def _add_user(session: Session, name: str, email: str | None = None) -> User:
    user = User(
        name=name,
        email=email or f"{name.lower()}-{uuid4().hex[:8]}@example.com",
        password_hash="not-a-real-hash",
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def make_user(db_session):
    """Factory that inserts a user directly (no password checks needed)."""
    def _make(name: str = "Ada", email: str | None = None) -> User:
        return _add_user(db_session, name, email)
    return _make


@pytest.fixture
def alice(db_session):
    return _add_user(db_session, "Alice")


@pytest.fixture
def bob(db_session):
    return _add_user(db_session, "Bob")


@pytest.fixture
def carol(db_session):
    return _add_user(db_session, "Carol")
