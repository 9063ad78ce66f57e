"""
Dynamic Todo configuration: all environment variables in one place.

Read from environment at runtime. Nothing here is a secret; an empty
DATABASE_URL runs the service on in-memory storage.
"""

from __future__ import annotations

import os


def _bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Application settings from environment variables."""

    # Database (empty = MemoryStorage)
    DATABASE_URL: str = os.environ.get("DATABASE_URL", "")
    DB_POOL_MIN_SIZE: int = int(os.environ.get("DB_POOL_MIN_SIZE", "2"))
    DB_POOL_MAX_SIZE: int = int(os.environ.get("DB_POOL_MAX_SIZE", "20"))

    # Application
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")

    # Reject modify_ui results that fail tree validation
    STRICT_TREE_VALIDATION: bool = _bool(os.environ.get("STRICT_TREE_VALIDATION", "false"))

    # Subjects given a default tree at startup
    SEED_SUBJECTS: str = os.environ.get("SEED_SUBJECTS", "default,alice,bob")

    # Change history
    HISTORY_LIMIT_DEFAULT: int = int(os.environ.get("HISTORY_LIMIT_DEFAULT", "20"))
    HISTORY_LIMIT_MAX: int = int(os.environ.get("HISTORY_LIMIT_MAX", "100"))

    @property
    def seed_subjects(self) -> list[str]:
        return [s.strip() for s in self.SEED_SUBJECTS.split(",") if s.strip()]


# Singleton instance
settings = Settings()
