"""Collection API endpoints.

Every read and write consults the request's listeners:
- get: per document; a falsy decision hides the document
- create / update / delete: a falsy decision rejects with 403
- changed: after a write was stored; the decision is ignored
"""

import json
import logging
from typing import Any, Callable

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import BaseModel

from docforge.api.scope import RequestScope, get_request_scope
from docforge.documents import ID_FIELD, add_id_if_missing
from docforge.errors import ApiError, ForbiddenError, InvalidArgumentError
from docforge.hooks import notify
from docforge.ordering import SortPair, normalize_order_by, order_by
from docforge.persistence import DocumentStore

logger = logging.getLogger(__name__)


class QueryRequest(BaseModel):
    """Request body for collection queries."""

    orderby: Any = None
    limit: int | None = None
    offset: int = 0


def _checked_order(spec: Any) -> list[SortPair]:
    """Normalize an ordering and require numeric directions on named fields."""
    order = normalize_order_by(spec)
    for pair in order:
        if (
            not isinstance(pair, tuple)
            or len(pair) != 2
            or not isinstance(pair[0], str)
            or isinstance(pair[1], bool)
            or not isinstance(pair[1], (int, float))
        ):
            raise InvalidArgumentError(
                400, f"orderby entries must be a field name and a numeric direction: {pair!r}"
            )
    return order


def _parse_orderby(orderby: str | None) -> list[SortPair] | None:
    """Parse the ``orderby`` query parameter (JSON text)."""
    if orderby is None or orderby == "":
        return None
    try:
        spec = json.loads(orderby)
    except json.JSONDecodeError:
        raise InvalidArgumentError(400, "orderby param must be valid JSON")
    return _checked_order(spec)


async def _allowed(event: str, scope: RequestScope, collection: str, data: Any) -> bool:
    try:
        decision = await notify(event, scope, collection, data)
    except ApiError:
        raise
    except Exception:
        logger.exception("Listener failed during '%s' on %s", event, collection)
        raise
    return bool(decision)


def create_collections_router(
    get_store: Callable[[], DocumentStore],
) -> APIRouter:
    """Create the collections router.

    Args:
        get_store: Callable returning the DocumentStore to serve from
    """
    router = APIRouter(prefix="/api", tags=["collections"])

    def _store() -> DocumentStore:
        store = get_store()
        if store is None:
            raise HTTPException(500, "Document store not initialized")
        return store

    async def _query(
        scope: RequestScope,
        collection: str,
        order: list[SortPair] | None,
        limit: int | None,
        offset: int,
    ) -> dict[str, Any]:
        documents = [
            doc
            for doc in _store().list(collection)
            if await _allowed("get", scope, collection, doc)
        ]
        if order:
            order_by(documents, order)
        total = len(documents)
        end = offset + limit if limit is not None else None
        return {"data": documents[offset:end], "total": total}

    @router.get("/{collection}")
    async def list_documents(
        collection: str,
        orderby: str | None = None,
        limit: int | None = None,
        offset: int = 0,
        scope: RequestScope = Depends(get_request_scope),
    ) -> dict[str, Any]:
        """List documents, optionally ordered by a JSON ``orderby`` spec."""
        return await _query(scope, collection, _parse_orderby(orderby), limit, offset)

    @router.post("/{collection}/query")
    async def query_documents(
        collection: str,
        query: QueryRequest,
        scope: RequestScope = Depends(get_request_scope),
    ) -> dict[str, Any]:
        order = _checked_order(query.orderby) if query.orderby is not None else None
        return await _query(scope, collection, order, query.limit, query.offset)

    @router.get("/{collection}/{id}")
    async def get_document(
        collection: str,
        id: str,
        scope: RequestScope = Depends(get_request_scope),
    ) -> dict[str, Any]:
        document = _store().get(collection, id)
        if document is None or not await _allowed("get", scope, collection, document):
            raise HTTPException(404, "Document not found")
        return {"data": document}

    @router.post("/{collection}", status_code=201)
    async def create_document(
        collection: str,
        document: dict[str, Any] = Body(...),
        scope: RequestScope = Depends(get_request_scope),
    ) -> dict[str, Any]:
        add_id_if_missing(document)
        if not await _allowed("create", scope, collection, document):
            raise ForbiddenError(message=f"Not allowed to create in {collection}")
        try:
            created = _store().create(collection, document)
        except ValueError as e:
            raise HTTPException(409, str(e))
        await notify("changed", scope, collection, created)
        return {"data": created}

    @router.put("/{collection}/{id}")
    async def update_document(
        collection: str,
        id: str,
        document: dict[str, Any] = Body(...),
        scope: RequestScope = Depends(get_request_scope),
    ) -> dict[str, Any]:
        if _store().get(collection, id) is None:
            raise HTTPException(404, "Document not found")
        document[ID_FIELD] = id
        if not await _allowed("update", scope, collection, document):
            raise ForbiddenError(message=f"Not allowed to update {id} in {collection}")
        updated = _store().update(collection, id, document)
        if updated is None:
            raise HTTPException(404, "Document not found")
        await notify("changed", scope, collection, updated)
        return {"data": updated}

    @router.delete("/{collection}/{id}")
    async def delete_document(
        collection: str,
        id: str,
        scope: RequestScope = Depends(get_request_scope),
    ) -> dict[str, Any]:
        existing = _store().get(collection, id)
        if existing is None:
            raise HTTPException(404, "Document not found")
        if not await _allowed("delete", scope, collection, existing):
            raise ForbiddenError(message=f"Not allowed to delete {id} in {collection}")
        _store().delete(collection, id)
        await notify("changed", scope, collection, existing)
        return {"deleted": True}

    return router
