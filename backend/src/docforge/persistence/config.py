"""Database configuration and pooled engine cache."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from sqlalchemy import Engine, create_engine

logger = logging.getLogger(__name__)

# One pooled engine per connection string, shared process-wide
_engines: dict[str, Engine] = {}


@dataclass
class DatabaseConfig:
    """Database connection configuration.

    Supports sqlite:/// and postgresql:// URL schemes.
    """

    url: str

    @classmethod
    def from_env(cls) -> DatabaseConfig:
        """Create config from environment variables.

        Resolution order:
        1. DATABASE_URL env var (standard)
        2. DOCFORGE_DB_PATH env var (converted to sqlite:/// URL)
        3. Default: sqlite:///docforge.db
        """
        url = os.environ.get("DATABASE_URL")
        if url:
            return cls(url=url)

        db_path = os.environ.get("DOCFORGE_DB_PATH")
        if db_path:
            return cls(url=f"sqlite:///{db_path}")

        return cls(url="sqlite:///docforge.db")

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def is_postgresql(self) -> bool:
        return self.url.startswith("postgresql")

    @property
    def sqlalchemy_url(self) -> str:
        """URL suitable for SQLAlchemy engine creation.

        Ensures postgresql:// URLs use the psycopg (v3) driver since
        the project depends on psycopg[binary], not psycopg2.
        """
        if self.url.startswith("postgresql://"):
            return self.url.replace("postgresql://", "postgresql+psycopg://", 1)
        return self.url


def get_engine(url: str) -> Engine:
    """Get the pooled engine for a connection string, creating it once.

    Args:
        url: Database URL (sqlite:/// or postgresql://)

    Returns:
        The same Engine for every call with the same URL
    """
    if url not in _engines:
        config = DatabaseConfig(url)
        # Credentials stay out of the log
        logger.debug("creating engine for %s", config.sqlalchemy_url.rsplit("@", 1)[-1])
        _engines[url] = create_engine(config.sqlalchemy_url)
    return _engines[url]


def dispose_engines() -> None:
    """Dispose every cached engine and forget them."""
    for engine in _engines.values():
        engine.dispose()
    _engines.clear()
