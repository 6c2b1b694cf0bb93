"""Application settings."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from docforge.request_log import DEFAULT_LOGGING_LEVEL


@dataclass
class Settings:
    """Runtime configuration for the docforge API.

    Attributes:
        logging_level: Least severe request severity that gets logged
        secret_key: Signing key for access tokens
        listeners_path: YAML listener bindings file (optional)
        listener_modules: Modules to import so their listeners are catalogued
        auth_enabled: Whether access tokens are read from requests
        port: Port for `docforge serve`
        database_url: Database to keep documents in (in-memory store if unset)
    """

    logging_level: str = DEFAULT_LOGGING_LEVEL
    secret_key: str = "dev-secret-key-change-in-production"
    listeners_path: Path | None = None
    listener_modules: list[str] = field(default_factory=list)
    auth_enabled: bool = True
    port: int = 8000
    database_url: str | None = None

    @classmethod
    def from_env(cls) -> Settings:
        """Create settings from DOCFORGE_* environment variables."""
        listeners_path = os.environ.get("DOCFORGE_LISTENERS_PATH")
        disable_auth = os.environ.get("DOCFORGE_DISABLE_AUTH", "").lower()
        modules = os.environ.get("DOCFORGE_LISTENER_MODULES", "")
        db_path = os.environ.get("DOCFORGE_DB_PATH")
        database_url = os.environ.get("DATABASE_URL") or (
            f"sqlite:///{db_path}" if db_path else None
        )
        return cls(
            logging_level=os.environ.get("DOCFORGE_LOGGING_LEVEL", DEFAULT_LOGGING_LEVEL),
            secret_key=os.environ.get(
                "DOCFORGE_SECRET_KEY", "dev-secret-key-change-in-production"
            ),
            listeners_path=Path(listeners_path) if listeners_path else None,
            listener_modules=[m.strip() for m in modules.split(",") if m.strip()],
            auth_enabled=disable_auth not in ("1", "true", "yes"),
            port=int(os.environ.get("DOCFORGE_PORT", "8000")),
            database_url=database_url,
        )
