"""docforge listener (hook) system.

Listeners are consulted at named events of an operation against a
collection and may approve, deny, or simply observe it:
- get: per document when reading (falsy decision hides the document)
- create / update / delete: before the change is stored (can deny)
- changed: after a change was stored (decision ignored)

Usage:
    from docforge.hooks import ListenerRegistry, notify

    registry = ListenerRegistry()

    @registry.on("create", collections=["posts"])
    async def require_title(request, collection, data, context):
        return None if data.get("title") else False

    allowed = await notify("create", scope, "posts", {"title": "Hi"})
"""

from docforge.hooks.loader import (
    build_registry,
    import_listener_modules,
    load_listener_bindings,
    parse_bindings,
)
from docforge.hooks.registry import ListenerCatalog, ListenerRegistry, listener
from docforge.hooks.service import ListenerScope, notify
from docforge.hooks.types import (
    FunctionListener,
    Listener,
    ListenerBinding,
    ListenerContext,
    applies_to,
)

STANDARD_EVENTS = ("get", "create", "update", "delete", "changed")

__all__ = [
    "FunctionListener",
    "Listener",
    "ListenerBinding",
    "ListenerCatalog",
    "ListenerContext",
    "ListenerRegistry",
    "ListenerScope",
    "STANDARD_EVENTS",
    "applies_to",
    "build_registry",
    "import_listener_modules",
    "listener",
    "load_listener_bindings",
    "notify",
    "parse_bindings",
]
