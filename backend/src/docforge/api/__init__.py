"""HTTP API for docforge collections."""

from docforge.api.app import create_app
from docforge.api.collections import create_collections_router
from docforge.api.scope import RequestScope, get_request_scope

__all__ = ["RequestScope", "create_app", "create_collections_router", "get_request_scope"]
