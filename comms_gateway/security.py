"""Origin and content-type checks, plus the CORS headers every response carries."""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

CORS_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}

PREFLIGHT_MAX_AGE = 86400


def validate_origin(request: Request, allowed_origins: list[str]) -> bool:
    """Check the ``Origin`` header against *allowed_origins*.

    An empty list or a ``*`` entry accepts every request.  Otherwise the
    header must match one entry exactly; a missing header is rejected.
    """
    if not allowed_origins or "*" in allowed_origins:
        return True
    origin = request.headers.get("origin")
    return origin is not None and origin in allowed_origins


def validate_content_type(request: Request) -> bool:
    """True when ``Content-Type`` mentions ``application/json`` (any case)."""
    content_type = request.headers.get("content-type", "")
    return "application/json" in content_type.lower()


def preflight_response() -> Response:
    """Answer a CORS preflight; no authentication is involved."""
    return Response(
        status_code=200,
        headers={**CORS_HEADERS, "Access-Control-Max-Age": str(PREFLIGHT_MAX_AGE)},
    )


class CORSMiddleware(BaseHTTPMiddleware):
    """Answer every OPTIONS request as a preflight and stamp CORS headers on the rest.

    Preflights never reach routing, so they need no API key.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method == "OPTIONS":
            return preflight_response()
        response = await call_next(request)
        for name, value in CORS_HEADERS.items():
            response.headers.setdefault(name, value)
        return response
