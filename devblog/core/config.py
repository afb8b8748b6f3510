"""
Application settings read from environment variables.

``get_settings`` caches one ``Settings`` instance per process; tests build
their own instances and pass them to ``create_app`` instead.
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache

from devblog.db.database import SQLITE_DEV_DB, SQLITE_PROD_DB, SQLITE_TEST_DB

STORAGE_MEMORY = "memory"
STORAGE_DATABASE = "database"


def _database_url_for(env: str) -> str:
    if env == "test":
        return SQLITE_TEST_DB
    if env == "production":
        return os.getenv("DATABASE_URL", SQLITE_PROD_DB)
    # development
    return SQLITE_DEV_DB


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    app_env: str = field(default_factory=lambda: os.getenv("APP_ENV", "development"))
    storage_backend: str = field(default_factory=lambda: os.getenv("STORAGE_BACKEND", STORAGE_MEMORY).lower())
    database_url: str = ""
    # Absolute site URL for feed links; the request's host is used when empty
    base_url: str = field(default_factory=lambda: os.getenv("BASE_URL", ""))
    site_title: str = field(default_factory=lambda: os.getenv("SITE_TITLE", "DevBlog - Next.js and MDX Blog"))
    site_description: str = field(default_factory=lambda: os.getenv(
        "SITE_DESCRIPTION",
        "A modern blog platform with powerful content management, dark mode, and advanced features."
    ))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    def __post_init__(self):
        if not self.database_url:
            self.database_url = _database_url_for(self.app_env)
        if self.storage_backend not in (STORAGE_MEMORY, STORAGE_DATABASE):
            raise ValueError(
                f"STORAGE_BACKEND must be '{STORAGE_MEMORY}' or '{STORAGE_DATABASE}', "
                f"got '{self.storage_backend}'"
            )
        self.base_url = self.base_url.rstrip("/")


@lru_cache()
def get_settings() -> Settings:
    return Settings()
