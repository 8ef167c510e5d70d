"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import RequestResponseEndpoint
from starlette.responses import Response

from comms_gateway import __version__
from comms_gateway.config import Settings
from comms_gateway.errors import GatewayError, MethodNotAllowed, RouteNotFound
from comms_gateway.logging import RequestContextMiddleware
from comms_gateway.providers import AzureEmailSender, NotificationHubSender
from comms_gateway.responses import error_response
from comms_gateway.routers.health import ENDPOINTS
from comms_gateway.security import CORSMiddleware

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: create the provider senders that are configured. Shutdown: close them."""
    settings: Settings = app.state.settings

    if not settings.api_key_value:
        logger.warning("api_key_not_configured")

    app.state.email_sender = None
    if settings.email_configured:
        app.state.email_sender = AzureEmailSender.from_config(settings.email, settings.service_principal)
    else:
        logger.warning("email_provider_not_configured")

    app.state.notification_sender = None
    if settings.notification_hub.is_configured:
        app.state.notification_sender = NotificationHubSender(settings.notification_hub)
    else:
        logger.warning("notification_provider_not_configured")

    yield

    for sender in (app.state.email_sender, app.state.notification_sender):
        if sender is not None:
            await sender.close()
    logger.info("shutdown_complete")


async def _gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    return error_response(exc)


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        return error_response(
            RouteNotFound(
                message=f"No endpoint at {request.url.path}",
                path=request.url.path,
                endpoints=list(ENDPOINTS),
            )
        )
    if exc.status_code == 405:
        return error_response(MethodNotAllowed(headers=dict(exc.headers or {})))
    error = GatewayError(str(exc.detail), headers=dict(exc.headers or {}))
    error.status_code = exc.status_code
    return error_response(error)


async def _catch_unhandled(request: Request, call_next: RequestResponseEndpoint) -> Response:
    try:
        return await call_next(request)
    except Exception:
        logger.exception("unhandled_error")
        return error_response(GatewayError(message="Unexpected error while handling the request"))


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build and return the FastAPI application."""
    if settings is None:
        settings = Settings()

    app = FastAPI(
        title="Comms Gateway",
        version=__version__,
        lifespan=lifespan,
        redirect_slashes=False,
    )
    app.state.settings = settings

    from comms_gateway.routers.email import router as email_router
    from comms_gateway.routers.health import router as health_router
    from comms_gateway.routers.notifications import router as notifications_router

    app.include_router(health_router)
    app.include_router(email_router)
    app.include_router(notifications_router)

    app.add_exception_handler(GatewayError, _gateway_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)

    # Last added runs outermost.
    app.middleware("http")(_catch_unhandled)
    app.add_middleware(CORSMiddleware)
    app.add_middleware(RequestContextMiddleware)

    return app
