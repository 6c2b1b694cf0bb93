"""Per-request scope handed to listeners."""

from dataclasses import dataclass

from fastapi import Request

from docforge.auth import TokenClaims
from docforge.config import Settings
from docforge.hooks import ListenerRegistry


@dataclass
class RequestScope:
    """Everything a listener may need to decide on an operation.

    Attributes:
        http: The underlying HTTP request
        event_listeners: Listener registry owned by this request
        settings: Application settings
        user: Claims of the authenticated user, None when anonymous
    """

    http: Request
    event_listeners: ListenerRegistry
    settings: Settings
    user: TokenClaims | None = None


def get_request_scope(request: Request) -> RequestScope:
    """FastAPI dependency building a fresh RequestScope.

    The app-wide registry is copied so listeners added for this request
    never leak into another.
    """
    return RequestScope(
        http=request,
        event_listeners=request.app.state.listeners.copy(),
        settings=request.app.state.settings,
        user=getattr(request.state, "user", None),
    )
