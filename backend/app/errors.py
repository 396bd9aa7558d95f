"""Error taxonomy shared by engines and the HTTP layer.

Each error carries a ``kind`` (used in MutationResult payloads) and the HTTP
status the API maps it to. Messages are human-readable and safe to show.
PersistenceError never carries storage internals.
"""

from __future__ import annotations


class TaskflowError(Exception):
    """Base class for all domain errors."""

    kind: str = "error"
    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(TaskflowError):
    """Malformed or missing field. Only the first failure is reported."""

    kind = "validation"
    status_code = 400

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


class AuthenticationError(TaskflowError):
    """No identity, or credentials did not match."""

    kind = "authentication"
    status_code = 401


class AuthorizationError(TaskflowError):
    """Identity lacks the required relation to the resource."""

    kind = "authorization"
    status_code = 403


class NotFoundError(TaskflowError):
    """Referenced entity does not exist."""

    kind = "not_found"
    status_code = 404

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.entity_id = entity_id


class ConflictError(TaskflowError):
    kind = "conflict"
    status_code = 409


class PersistenceError(TaskflowError):
    kind = "persistence"
    status_code = 500
