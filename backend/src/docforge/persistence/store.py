"""DocumentStore Protocol and the in-process reference store."""

from typing import Any, Protocol, runtime_checkable

from docforge.documents import ID_FIELD
from docforge.paths import clone


@runtime_checkable
class DocumentStore(Protocol):
    """Interface the API layer uses to read and write documents.

    Documents are plain dicts keyed by ``_id`` within a named collection.
    """

    def list(self, collection: str) -> list[dict[str, Any]]: ...

    def get(self, collection: str, id: str) -> dict[str, Any] | None: ...

    def create(self, collection: str, document: dict[str, Any]) -> dict[str, Any]: ...

    def update(
        self, collection: str, id: str, document: dict[str, Any]
    ) -> dict[str, Any] | None: ...

    def delete(self, collection: str, id: str) -> bool: ...


class MemoryDocumentStore:
    """Keeps collections in memory.

    Stored documents are cloned on the way in and out, so callers never
    hold a reference into the store.
    """

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}

    def list(self, collection: str) -> list[dict[str, Any]]:
        return [clone(doc) for doc in self._collections.get(collection, {}).values()]

    def get(self, collection: str, id: str) -> dict[str, Any] | None:
        document = self._collections.get(collection, {}).get(id)
        return clone(document) if document is not None else None

    def create(self, collection: str, document: dict[str, Any]) -> dict[str, Any]:
        if ID_FIELD not in document:
            raise ValueError(f"Document has no {ID_FIELD}")
        documents = self._collections.setdefault(collection, {})
        id = str(document[ID_FIELD])
        if id in documents:
            raise ValueError(f"Document '{id}' already exists in {collection}")
        documents[id] = clone(document)
        return clone(document)

    def update(
        self, collection: str, id: str, document: dict[str, Any]
    ) -> dict[str, Any] | None:
        documents = self._collections.get(collection, {})
        if id not in documents:
            return None
        stored = {**clone(document), ID_FIELD: id}
        documents[id] = stored
        return clone(stored)

    def delete(self, collection: str, id: str) -> bool:
        return self._collections.get(collection, {}).pop(id, None) is not None
