"""API-key authentication.

The key may arrive on one of three carriers.  They are tried in the order
of :data:`CREDENTIAL_EXTRACTORS` and the first non-empty value wins; later
carriers are never consulted.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Annotated

import structlog
from fastapi import Depends, Request

from .config import Settings
from .deps import get_settings
from .errors import InvalidCredential, MissingCredential, ServerMisconfigured

logger = structlog.get_logger()

HEALTH_PATHS = frozenset({"/", "/health"})

_BEARER_PREFIX = "Bearer "


class AuthResult(str, Enum):
    """Outcome of checking a request's API key."""

    OK = "ok"
    SERVER_MISCONFIGURED = "server_misconfigured"
    MISSING_CREDENTIAL = "missing_credential"
    INVALID_CREDENTIAL = "invalid_credential"


def from_authorization_header(request: Request) -> str | None:
    value = request.headers.get("authorization")
    if value and value.startswith(_BEARER_PREFIX):
        return value[len(_BEARER_PREFIX):]
    return value


def from_api_key_header(request: Request) -> str | None:
    return request.headers.get("x-api-key")


def from_query_param(request: Request) -> str | None:
    return request.query_params.get("api_key")


CREDENTIAL_EXTRACTORS: tuple[Callable[[Request], str | None], ...] = (
    from_authorization_header,
    from_api_key_header,
    from_query_param,
)


def extract_credential(request: Request) -> str | None:
    """Return the first non-empty credential, or None if no carrier has one."""
    for extractor in CREDENTIAL_EXTRACTORS:
        candidate = extractor(request)
        if candidate:
            return candidate
    return None


def timing_safe_equal(a: str, b: str) -> bool:
    """Compare two strings without short-circuiting on the first mismatch.

    Lengths are compared up front; equal-length inputs always walk every
    character, OR-ing the XOR of each code-point pair into an accumulator.
    """
    if len(a) != len(b):
        return False
    result = 0
    for x, y in zip(a, b):
        result |= ord(x) ^ ord(y)
    return result == 0


def authenticate(request: Request, configured_key: str | None) -> AuthResult:
    """Check *request* against the configured API key."""
    if request.url.path in HEALTH_PATHS:
        return AuthResult.OK
    if not configured_key:
        return AuthResult.SERVER_MISCONFIGURED

    provided = extract_credential(request)
    if not provided:
        return AuthResult.MISSING_CREDENTIAL
    if not timing_safe_equal(provided, configured_key):
        return AuthResult.INVALID_CREDENTIAL
    return AuthResult.OK


async def require_api_key(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
) -> None:
    """FastAPI dependency: raise the matching gateway error unless the key checks out."""
    result = authenticate(request, settings.api_key_value)
    if result is AuthResult.OK:
        return

    logger.warning("auth_rejected", reason=result.value)
    if result is AuthResult.SERVER_MISCONFIGURED:
        raise ServerMisconfigured(message="API authentication not configured")
    if result is AuthResult.MISSING_CREDENTIAL:
        raise MissingCredential()
    raise InvalidCredential()
