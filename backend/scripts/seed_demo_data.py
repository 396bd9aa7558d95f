#!/usr/bin/env python3
"""Seed demo users and tasks into the database.

Usage:
    cd backend
    uv run python -m scripts.seed_demo_data
    uv run python -m scripts.seed_demo_data --password secret123 --reset
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from datetime import timedelta
from pathlib import Path

BACKEND_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(BACKEND_DIR))

# Ensure CWD is backend/ so sqlite:///data/taskflow.db resolves correctly
os.chdir(BACKEND_DIR)

from app.db.database import create_db_and_tables, engine  # noqa: E402
from app.engines.accounts.service import AccountService  # noqa: E402
from app.engines.tasks.due_dates import utc_today  # noqa: E402
from app.engines.tasks.lifecycle import SetStatus  # noqa: E402
from app.engines.tasks.service import TaskService  # noqa: E402
from app.errors import ConflictError  # noqa: E402
from app.models.notification import Notification  # noqa: E402
from app.models.task import Task  # noqa: E402
from sqlmodel import Session, delete  # noqa: E402

logger = logging.getLogger("seed_demo_data")

# ── Demo data ──────────────────────────────────────────────────────
USERS: list[dict] = [
    {"name": "Ada Lovelace", "email": "ada@example.com"},
    {"name": "Grace Hopper", "email": "grace@example.com"},
    {"name": "Alan Turing", "email": "alan@example.com"},
]

# (creator index, assignee index, title, priority, due in days, status)
TASKS: list[tuple[int, int, str, str, int | None, str]] = [
    (0, 0, "Write project brief", "HIGH", 1, "IN_PROGRESS"),
    (0, 1, "Review onboarding checklist", "MEDIUM", 3, "TODO"),
    (1, 0, "Fix login redirect", "HIGH", -2, "TODO"),
    (1, 2, "Draft release notes", "LOW", None, "REVIEW"),
    (2, 2, "Archive old reports", "LOW", -5, "COMPLETED"),
    (2, 1, "Plan sprint demo", "MEDIUM", 0, "TODO"),
]


def reset(session: Session) -> None:
    session.exec(delete(Notification))
    session.exec(delete(Task))
    session.commit()
    logger.info("Cleared existing tasks and notifications")


def seed_users(session: Session, password: str) -> list[str]:
    accounts = AccountService(session)
    ids: list[str] = []
    for spec in USERS:
        existing = accounts.find_by_email(spec["email"])
        if existing is not None:
            logger.info("User exists: %s", spec["email"])
            ids.append(existing.id)
            continue
        try:
            user = accounts.register({**spec, "password": password})
        except ConflictError:
            user = accounts.find_by_email(spec["email"])
        ids.append(user.id)
        logger.info("Created user: %s", spec["email"])
    return ids


def seed_tasks(session: Session, user_ids: list[str]) -> int:
    service = TaskService(session)
    today = utc_today()
    created = 0
    for creator, assignee, title, priority, due_in, status in TASKS:
        payload = {
            "title": title,
            "priority": priority,
            "due_date": (today + timedelta(days=due_in)).isoformat() if due_in is not None else None,
            "assignee_id": user_ids[assignee],
        }
        result = service.create_task(user_ids[creator], payload)
        if not result.success or result.task is None:
            logger.error("Failed to seed task %r: %s", title, result.error)
            continue
        if status != "TODO":
            service.change_status(user_ids[creator], result.task.id, SetStatus(status=status))
        created += 1
    return created


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed demo users and tasks")
    parser.add_argument("--password", default="password123", help="Password for every demo user")
    parser.add_argument("--reset", action="store_true", help="Delete existing tasks and notifications first")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s %(message)s")

    create_db_and_tables()
    with Session(engine) as session:
        if args.reset:
            reset(session)
        user_ids = seed_users(session, args.password)
        created = seed_tasks(session, user_ids)

    logger.info("Seeded %d users and %d tasks", len(user_ids), created)
    return 0


if __name__ == "__main__":
    sys.exit(main())
