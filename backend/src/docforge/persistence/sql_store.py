"""SQL-backed DocumentStore.

Documents live in a single system table (_documents), one row per
document, keyed by (collection, id). Bodies are stored as JSON text, so
the store is dialect-neutral across SQLite and PostgreSQL.
"""

import json
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from docforge.documents import ID_FIELD
from docforge.persistence.config import get_engine


class SqlDocumentStore:
    """Stores documents through SQLAlchemy Core."""

    def __init__(self, database_url: str):
        """Initialize the store.

        Args:
            database_url: Database URL. The pooled engine for it is shared
                with every other store using the same URL.
        """
        self._engine = get_engine(database_url)
        self._ensure_table()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _ensure_table(self) -> None:
        with self._engine.connect() as conn:
            conn.execute(text("""
                CREATE TABLE IF NOT EXISTS _documents (
                    collection      TEXT NOT NULL,
                    id              TEXT NOT NULL,
                    body            TEXT NOT NULL,
                    created_at      TEXT NOT NULL,
                    updated_at      TEXT NOT NULL,
                    PRIMARY KEY (collection, id)
                )
            """))
            conn.commit()

    @staticmethod
    def _now() -> str:
        return datetime.now(UTC).isoformat()

    # ------------------------------------------------------------------
    # DocumentStore
    # ------------------------------------------------------------------

    def list(self, collection: str) -> list[dict[str, Any]]:
        """All documents of a collection, oldest first."""
        with self._engine.connect() as conn:
            rows = conn.execute(
                text("""
                    SELECT body FROM _documents
                    WHERE collection = :collection
                    ORDER BY created_at, id
                """),
                {"collection": collection},
            ).mappings().fetchall()
        return [json.loads(row["body"]) for row in rows]

    def get(self, collection: str, id: str) -> dict[str, Any] | None:
        with self._engine.connect() as conn:
            row = conn.execute(
                text("SELECT body FROM _documents WHERE collection = :collection AND id = :id"),
                {"collection": collection, "id": id},
            ).mappings().fetchone()
        if not row:
            return None
        return json.loads(row["body"])

    def create(self, collection: str, document: dict[str, Any]) -> dict[str, Any]:
        """Insert a document. Raises ValueError if it has no id or the id is taken."""
        if ID_FIELD not in document:
            raise ValueError(f"Document has no {ID_FIELD}")
        id = str(document[ID_FIELD])
        now = self._now()

        try:
            with self._engine.connect() as conn:
                conn.execute(
                    text("""
                        INSERT INTO _documents (collection, id, body, created_at, updated_at)
                        VALUES (:collection, :id, :body, :created_at, :updated_at)
                    """),
                    {
                        "collection": collection,
                        "id": id,
                        "body": json.dumps(document),
                        "created_at": now,
                        "updated_at": now,
                    },
                )
                conn.commit()
        except IntegrityError:
            raise ValueError(f"Document '{id}' already exists in {collection}")

        return self.get(collection, id)  # type: ignore[return-value]

    def update(
        self, collection: str, id: str, document: dict[str, Any]
    ) -> dict[str, Any] | None:
        """Replace a document's body. Returns None if it does not exist."""
        stored = {**document, ID_FIELD: id}
        with self._engine.connect() as conn:
            result = conn.execute(
                text("""
                    UPDATE _documents SET body = :body, updated_at = :updated_at
                    WHERE collection = :collection AND id = :id
                """),
                {
                    "collection": collection,
                    "id": id,
                    "body": json.dumps(stored),
                    "updated_at": self._now(),
                },
            )
            conn.commit()
            if result.rowcount == 0:
                return None
        return self.get(collection, id)

    def delete(self, collection: str, id: str) -> bool:
        with self._engine.connect() as conn:
            result = conn.execute(
                text("DELETE FROM _documents WHERE collection = :collection AND id = :id"),
                {"collection": collection, "id": id},
            )
            conn.commit()
            return result.rowcount > 0
