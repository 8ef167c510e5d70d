"""Render :class:`ApiResult` envelopes as JSON responses with CORS headers."""

from __future__ import annotations

from typing import Any

from fastapi.responses import JSONResponse

from .errors import GatewayError
from .models import ApiResult
from .security import CORS_HEADERS


def success_response(**fields: Any) -> JSONResponse:
    result = ApiResult(success=True, **fields)
    return JSONResponse(result.to_json(), status_code=200, headers=CORS_HEADERS)


def error_response(exc: GatewayError) -> JSONResponse:
    result = ApiResult(success=False, error=exc.error, message=exc.message, **exc.extra)
    return JSONResponse(
        result.to_json(),
        status_code=exc.status_code,
        headers={**CORS_HEADERS, **exc.headers},
    )
