"""Health endpoint, reachable without an API key."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from ..models import utc_timestamp
from ..security import CORS_HEADERS
from . import ALL_METHODS

router = APIRouter(tags=["health"])

ENDPOINTS: dict[str, str] = {
    "/email": "POST - send an email through Azure Communication Services",
    "/notifications": "POST - send a push notification through Azure Notification Hubs",
    "/health": "GET - service health",
}


@router.api_route("/", methods=ALL_METHODS)
@router.api_route("/health", methods=ALL_METHODS)
async def health(request: Request) -> JSONResponse:
    settings = request.app.state.settings
    return JSONResponse(
        {
            "status": "healthy",
            "service": "comms-gateway",
            "version": request.app.version,
            "endpoints": ENDPOINTS,
            "providers": {
                "email": settings.email_configured,
                "notifications": settings.notification_hub.is_configured,
            },
            "timestamp": utc_timestamp(),
        },
        headers=CORS_HEADERS,
    )
