"""Taskflow configuration — settings loaded from environment / .env."""

from __future__ import annotations

import logging
import secrets

from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = "sqlite:///data/taskflow.db"

    # CORS (comma-separated origins)
    cors_origins: str = "http://localhost:3000"

    # Session tokens
    session_secret: str = ""  # Empty = random per-process secret (dev mode)
    session_ttl_seconds: int = 7 * 24 * 3600

    # Password hashing
    bcrypt_rounds: int = 10

    # Task views
    due_soon_days: int = 2
    recent_tasks_limit: int = 5
    notifications_page_size: int = 50
    default_task_sort: str = "dueDate-asc"

    # Logging
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()

_ephemeral_secret: str | None = None


def get_session_secret() -> str:
    """Resolve the token signing secret.

    Falls back to a random secret generated once per process, so tokens do
    not survive a restart when SESSION_SECRET is unset.
    """
    global _ephemeral_secret
    if settings.session_secret:
        return settings.session_secret
    if _ephemeral_secret is None:
        _ephemeral_secret = secrets.token_urlsafe(32)
        logger.warning("SESSION_SECRET not set; using an ephemeral secret for this process.")
    return _ephemeral_secret
