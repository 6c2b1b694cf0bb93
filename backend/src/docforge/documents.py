"""Document identity helpers."""

import inspect
import secrets
import uuid
from typing import Any

ID_FIELD = "_id"


def generate_document_id() -> str:
    return str(uuid.uuid4())


def add_id_if_missing(document: dict[str, Any]) -> dict[str, Any]:
    """Assign a fresh ``_id`` when the document has none (in place)."""
    if not document.get(ID_FIELD):
        document[ID_FIELD] = generate_document_id()
    return document


def create_secure_random_id() -> str:
    """48 hex characters drawn from 24 cryptographically random bytes."""
    return secrets.token_hex(24)


async def resolve_handler(handler: Any, app: Any) -> Any:
    """Resolve a configuration value that may be a factory.

    Callables are invoked with ``app`` (and awaited if they return an
    awaitable); anything else is returned unchanged.
    """
    if callable(handler):
        result = handler(app)
        if inspect.isawaitable(result):
            result = await result
        return result
    return handler
