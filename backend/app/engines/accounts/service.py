"""Account Service — registration, login, profile updates.

Validation follows the same first-error-wins rule as task payloads: the
caller gets one ValidationError whose message can be shown verbatim.

Emails are compared and stored lower-cased.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Annotated, Any, Sequence

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, col, select

from app.engines.accounts.passwords import hash_password, verify_password
from app.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from app.models.user import User

logger = logging.getLogger(__name__)

Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=100)]

# Message for any non-"missing" failure on a field.
_FIELD_MESSAGES = {
    "name": "Name must be at least 2 characters",
    "email": "Invalid email address",
    "password": "Password must be at least 8 characters",
    "new_password": "Password must be at least 8 characters",
    "current_password": "Current password is invalid",
}

_LABELS = {
    "name": "Name",
    "email": "Email",
    "password": "Password",
    "new_password": "New password",
    "current_password": "Current password",
}


class RegistrationPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Name
    email: EmailStr
    password: str = Field(min_length=8)


class LoginPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class ProfilePayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Name
    email: EmailStr
    current_password: str | None = None
    new_password: str | None = Field(default=None, min_length=8)


def _parse(model: type[BaseModel], payload: Any) -> Any:
    if not isinstance(payload, dict):
        raise ValidationError("payload", "Request body must be an object")
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        error = e.errors()[0]
        loc = error.get("loc") or ()
        field = str(loc[0]) if loc else "payload"
        if error.get("type") == "missing":
            message = f"{_LABELS.get(field, field)} is required"
        else:
            message = _FIELD_MESSAGES.get(field, f"{field} is invalid")
        raise ValidationError(field, message) from None


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AccountService:
    """User accounts over a session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def find_by_email(self, email: str) -> User | None:
        statement = select(User).where(User.email == normalize_email(email))
        return self.session.exec(statement).first()

    def get_user(self, user_id: str) -> User:
        user = self.session.get(User, user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    def list_users(self) -> Sequence[User]:
        """All users by name, for assignee pickers."""
        return self.session.exec(select(User).order_by(col(User.name).asc())).all()

    def _commit(self, user: User, failure_message: str, conflict_message: str) -> User:
        try:
            self.session.add(user)
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise ConflictError(conflict_message) from None
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception(failure_message)
            raise PersistenceError("An unexpected error occurred") from None
        self.session.refresh(user)
        return user

    def register(self, payload: Any) -> User:
        """Create an account. Raises ValidationError / ConflictError."""
        data: RegistrationPayload = _parse(RegistrationPayload, payload)
        email = normalize_email(data.email)
        if self.find_by_email(email) is not None:
            raise ConflictError("User with this email already exists")

        user = User(name=data.name, email=email, password_hash=hash_password(data.password))
        user = self._commit(
            user, "Failed to register user", "User with this email already exists"
        )
        logger.info("User registered id=%s", user.id)
        return user

    def authenticate(self, payload: Any) -> User:
        """Check email/password. Raises AuthenticationError on mismatch."""
        data: LoginPayload = _parse(LoginPayload, payload)
        user = self.find_by_email(data.email)
        if user is None or not verify_password(data.password, user.password_hash):
            logger.warning("Failed login attempt for %s", normalize_email(data.email))
            raise AuthenticationError("Invalid email or password")
        return user

    def update_profile(self, identity: str, payload: Any) -> User:
        """Update name/email and optionally the password.

        Changing the password requires the current password.
        """
        data: ProfilePayload = _parse(ProfilePayload, payload)
        user = self.get_user(identity)

        email = normalize_email(data.email)
        if email != user.email:
            existing = self.find_by_email(email)
            if existing is not None and existing.id != identity:
                raise ConflictError("Email already in use")

        if data.new_password:
            if not data.current_password:
                raise ValidationError(
                    "current_password", "Current password is required to set a new password"
                )
            if not verify_password(data.current_password, user.password_hash):
                raise ValidationError("current_password", "Current password is incorrect")
            user.password_hash = hash_password(data.new_password)

        user.name = data.name
        user.email = email
        user.updated_at = datetime.now(timezone.utc)
        return self._commit(user, "Failed to update profile", "Email already in use")
