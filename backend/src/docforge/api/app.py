"""FastAPI application."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from docforge.api.collections import create_collections_router
from docforge.auth import JWTError, JWTService
from docforge.config import Settings
from docforge.documents import create_secure_random_id
from docforge.errors import ApiError
from docforge.hooks import (
    ListenerRegistry,
    import_listener_modules,
    load_listener_bindings,
)
from docforge.persistence import DocumentStore, MemoryDocumentStore, SqlDocumentStore
from docforge.request_log import LOG_LEVELS, create_log_entry, should_log_request

logger = logging.getLogger(__name__)


def _extract_token(request: Request) -> str | None:
    token = request.headers.get("x-access-token")
    if token:
        return token
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header[7:]
    return None


def create_app(
    settings: Settings | None = None,
    store: DocumentStore | None = None,
    registry: ListenerRegistry | None = None,
) -> FastAPI:
    """Build the docforge API.

    Args:
        settings: Application settings (defaults to Settings.from_env())
        store: Document store (defaults to a SqlDocumentStore when
            settings.database_url is set, else an in-memory store)
        registry: Listeners copied into every request; loaded from
            settings.listeners_path when not given

    Returns:
        A configured FastAPI application
    """
    settings = settings or Settings.from_env()
    if registry is None:
        import_listener_modules(settings.listener_modules)
        if settings.listeners_path:
            registry = load_listener_bindings(settings.listeners_path)
        else:
            registry = ListenerRegistry()

    app = FastAPI(title="docforge API")
    app.state.settings = settings
    if store is None:
        store = (
            SqlDocumentStore(settings.database_url)
            if settings.database_url
            else MemoryDocumentStore()
        )
    app.state.store = store
    app.state.listeners = registry
    app.state.jwt_service = JWTService(settings.secret_key) if settings.auth_enabled else None

    app.include_router(create_collections_router(get_store=lambda: app.state.store))

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
        return JSONResponse(exc.to_dict(), status_code=exc.status)

    @app.middleware("http")
    async def auth_middleware(request: Request, call_next):
        """Decode the access token, if any, into request.state.user."""
        request.state.user = None
        jwt_service: JWTService | None = request.app.state.jwt_service
        token = _extract_token(request)
        if jwt_service and token:
            try:
                request.state.user = jwt_service.decode_token(token)
            except JWTError as e:
                # Invalid tokens leave the request anonymous
                logger.debug("Ignoring access token: %s", e)
        return await call_next(request)

    @app.middleware("http")
    async def request_log_middleware(request: Request, call_next):
        """Tag the response with a request id and log it by severity."""
        response = await call_next(request)
        if "x-request-id" not in response.headers:
            response.headers["x-request-id"] = create_secure_random_id()

        if should_log_request(response.status_code, settings.logging_level):
            user = getattr(request.state, "user", None)
            entry = create_log_entry(request, response, user.user_id if user else None)
            logger.log(
                LOG_LEVELS[entry["severity"]],
                "%s %s %d",
                entry["method"],
                entry["url"],
                response.status_code,
                extra={"entry": entry},
            )
        return response

    return app
