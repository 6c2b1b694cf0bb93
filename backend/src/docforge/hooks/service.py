"""Listener dispatch for docforge.

notify() consults the listeners registered for an event, in
registration order, and reduces their decisions to a single value.
The first truthy decision settles the chain: no later listener is
invoked for that call.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from docforge.hooks.types import Listener, ListenerContext, applies_to

logger = logging.getLogger(__name__)


class ListenerScope(Protocol):
    """Anything that carries a per-request listener mapping."""

    event_listeners: Mapping[str, Sequence[Listener]]


async def notify(event: str, request: ListenerScope, collection: str, data: Any) -> Any:
    """Dispatch an event to the request's listeners.

    Args:
        event: Event name (e.g., "create", "get")
        request: Request scope whose ``event_listeners`` holds the listeners
        collection: Name of the collection being operated on
        data: The document (or payload) the operation concerns

    Returns:
        The first truthy decision, True when no listener decided (every
        consulted listener returned None, or none applied), otherwise False.

    Raises:
        Exception: Whatever an invoked listener raised, unchanged. Listeners
            are only invoked before a decision is reached, so no listener
            error is ever suppressed.
    """
    listeners = tuple(request.event_listeners.get(event) or ())
    logger.debug(
        "notifying %d listener(s) of %s for %s", len(listeners), event, collection
    )

    context = ListenerContext(event=event)
    result: Any = None
    for listener in listeners:
        if not applies_to(listener, collection):
            continue
        if result:
            logger.debug("calling %s (skipped)", listener.name)
            continue
        logger.debug("calling %s", listener.name)
        result = await listener.invoke(request, collection, data, context)

    return result or result is None
