"""Task Query Engine — visibility, filters, sort, dashboard counters.

Visibility: a caller sees tasks it created OR is assigned to. Every other
filter is ANDed on top; the text query is itself an OR over title and
description. Text matching and the title sort fold case Unicode-wide.

Sort spec is "<field>-<direction>", e.g. "dueDate-asc". Unknown fields fall
back to dueDate, unknown directions to asc.

Reads fail open: a storage error is logged, counted, and reported to the
optional ``on_failure`` hook, and the caller gets an empty result. The
return value alone cannot tell "nothing matched" from "query failed".
"""

from __future__ import annotations

import contextlib
import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, Literal

from sqlalchemy import and_, case, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

from app.db.functions import casefold
from app.engines.tasks.due_dates import utc_today
from app.models.task import PRIORITY_RANK, Task, TaskFilters, TaskStats

logger = logging.getLogger(__name__)

SortField = Literal["dueDate", "title", "priority", "updatedAt"]
SortDirection = Literal["asc", "desc"]

_SORT_COLUMNS = {
    "dueDate": Task.due_date,
    "title": Task.title,
    "updatedAt": Task.updated_at,
}
SORT_FIELDS: frozenset[str] = frozenset({*_SORT_COLUMNS, "priority"})
DEFAULT_SORT_FIELD: SortField = "dueDate"


@dataclass(frozen=True)
class SortSpec:
    field: SortField
    direction: SortDirection

    def __str__(self) -> str:
        return f"{self.field}-{self.direction}"


def parse_sort(sort: str | None) -> SortSpec:
    """Parse "<field>-<direction>" leniently."""
    field, _, direction = (sort or "").strip().partition("-")
    if field not in SORT_FIELDS:
        field = DEFAULT_SORT_FIELD
    if direction != "desc":
        direction = "asc"
    return SortSpec(field=field, direction=direction)  # type: ignore[arg-type]


def _order_by(spec: SortSpec) -> list:
    if spec.field == "priority":
        key = case(PRIORITY_RANK, value=col(Task.priority), else_=-1)
    elif spec.field == "title":
        key = casefold(col(Task.title))
    else:
        key = col(_SORT_COLUMNS[spec.field])
    clauses = []
    if spec.field == "dueDate":
        # Undated tasks go last in both directions.
        clauses.append(col(Task.due_date).is_(None))
    clauses.append(key.desc() if spec.direction == "desc" else key.asc())
    if spec.field == "title":
        # Case-insensitive first; exact spelling only breaks ties.
        clauses.append(col(Task.title).desc() if spec.direction == "desc" else col(Task.title).asc())
    clauses.append(col(Task.created_at).asc())
    return clauses


def visible_to(identity: str):
    """SQL condition: identity is the creator or the assignee."""
    return or_(col(Task.creator_id) == identity, col(Task.assignee_id) == identity)


def _filter_conditions(identity: str, filters: TaskFilters) -> list:
    conditions = [visible_to(identity)]
    if filters.status:
        conditions.append(col(Task.status) == filters.status)
    if filters.priority:
        conditions.append(col(Task.priority) == filters.priority)
    if filters.query and filters.query.strip():
        needle = filters.query.strip().casefold()
        conditions.append(
            or_(
                casefold(col(Task.title)).contains(needle, autoescape=True),
                casefold(col(Task.description)).contains(needle, autoescape=True),
            )
        )
    return conditions


class TaskQueryEngine:
    """Read side for tasks. One instance per session."""

    def __init__(
        self,
        session: Session,
        on_failure: Callable[[Exception], None] | None = None,
    ) -> None:
        self.session = session
        self.on_failure = on_failure
        self.failure_count = 0

    def _record_failure(self, what: str, exc: Exception) -> None:
        self.failure_count += 1
        logger.exception("Failed to fetch %s", what)
        with contextlib.suppress(SQLAlchemyError):
            self.session.rollback()
        if self.on_failure is not None:
            self.on_failure(exc)

    def list_tasks(self, identity: str, filters: TaskFilters | None = None) -> list[Task]:
        """Tasks visible to ``identity`` matching ``filters``, in sort order."""
        filters = filters or TaskFilters()
        spec = parse_sort(filters.sort)
        statement = (
            select(Task)
            .where(and_(*_filter_conditions(identity, filters)))
            .order_by(*_order_by(spec))
        )
        try:
            return list(self.session.exec(statement).all())
        except SQLAlchemyError as e:
            self._record_failure("tasks", e)
            return []

    def recent_tasks(self, identity: str, limit: int = 5) -> list[Task]:
        """Most recently updated visible tasks."""
        statement = (
            select(Task)
            .where(visible_to(identity))
            .order_by(col(Task.updated_at).desc())
            .limit(limit)
        )
        try:
            return list(self.session.exec(statement).all())
        except SQLAlchemyError as e:
            self._record_failure("recent tasks", e)
            return []

    def count(self, *conditions) -> int:
        statement = select(func.count()).select_from(Task).where(*conditions)
        return int(self.session.exec(statement).one())

    def stats(self, identity: str, today: date | None = None) -> TaskStats:
        """Dashboard counters. Zeroes on storage failure."""
        today = today or utc_today()
        assigned = col(Task.assignee_id) == identity
        not_done = col(Task.status) != "COMPLETED"
        try:
            return TaskStats(
                assigned_open=self.count(assigned, not_done),
                created=self.count(col(Task.creator_id) == identity),
                overdue=self.count(
                    assigned,
                    not_done,
                    col(Task.due_date).is_not(None),
                    col(Task.due_date) < today,
                ),
                completed=self.count(assigned, col(Task.status) == "COMPLETED"),
            )
        except SQLAlchemyError as e:
            self._record_failure("task stats", e)
            return TaskStats()

